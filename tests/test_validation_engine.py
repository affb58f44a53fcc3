"""
Tests for the validation engine

Scenarios run end to end: rule string -> parser -> validate().
"""
import pytest

from field_validation.descriptors import ValidationResult
from field_validation.rule_parser import parse
from field_validation.validation_engine import (
    FieldValidator,
    end_anchored,
    format_message,
    validate,
)


def run(rules, value, translate):
    parsed = parse(rules)
    return validate(value, parsed.descriptors, parsed.is_required, translate)


class TestScenarios:
    """Test the documented validation scenarios."""

    def test_min_len_failure_not_required_failure(self, catalog):
        """Test non-empty input satisfies required but fails minLen."""
        result = run("required|minLen:3", "ab", catalog)

        assert result.is_valid is False
        assert result.message == "Must be at least 3 characters. "
        assert "required" not in result.message

    def test_between_num(self, catalog):
        """Test betweenNum bounds are inclusive and both enforced."""
        assert run("betweenNum:1,10", "15", catalog) == ValidationResult(
            False, "Between 1 and 10. "
        )
        assert run("betweenNum:1,10", "5", catalog).is_valid
        assert run("betweenNum:1,10", "1", catalog).is_valid
        assert run("betweenNum:1,10", "10", catalog).is_valid
        assert not run("betweenNum:1,10", "0", catalog).is_valid

    def test_between_num_rejects_text(self, catalog):
        """Test non-numeric input fails numeric conditions."""
        assert not run("betweenNum:1,10", "abc", catalog).is_valid

    def test_email(self, catalog):
        """Test email accepts a full address and rejects a bare host."""
        assert run("email", "a@b.com", catalog) == ValidationResult(True, "")
        assert run("email", "a@b", catalog) == ValidationResult(False, "Bad email. ")

    def test_case_insensitive(self, catalog):
        """Test patterns match regardless of case."""
        assert run("email", "Someone@Example.COM", catalog).is_valid


class TestComposition:
    """Test message aggregation."""

    def test_all_failures_reported_in_order(self, catalog):
        """Test every failing rule contributes, in rule-string order."""
        result = run("required|minLen:5|email", "ab", catalog)

        assert result.is_valid is False
        assert result.message == "Must be at least 5 characters. Bad email. "

    def test_valid_has_empty_message(self, catalog):
        """Test a value satisfying every rule gives an empty message."""
        assert run("required|minLen:3|email", "joe@example.com", catalog) == ValidationResult.valid()

    def test_idempotent(self, catalog):
        """Test repeated validation gives identical results."""
        parsed = parse("required|minLen:5|betweenNum:1,3")
        first = validate("42", parsed.descriptors, parsed.is_required, catalog)
        second = validate("42", parsed.descriptors, parsed.is_required, catalog)
        assert first == second

    def test_untranslated_keys_used_verbatim(self):
        """Test the default translator leaves message keys as-is."""
        parsed = parse("minLen:3")
        result = validate("ab", parsed.descriptors, parsed.is_required)
        assert result.message == "INVALID_MIN_CHAR"

    def test_format_message(self):
        """Test placeholders are filled left to right."""
        assert format_message("between :param and :param", ["1", "9"]) == "between 1 and 9"
        assert format_message("at least :param", []) == "at least :param"


class TestOptionalFields:
    """Test the optional-field short circuit."""

    @pytest.mark.parametrize("value", ["", None])
    def test_blank_optional_is_valid(self, value, catalog):
        """Test blank optional values skip validation entirely."""
        parsed = parse("minLen:3|email|betweenNum:1,2")
        result = validate(value, parsed.descriptors, False, catalog)
        assert result == ValidationResult(True, "")

    def test_fail_closed_descriptor_skipped_when_blank(self, catalog):
        """Test even malformed rules do not fire on blank optional values."""
        assert run("betweenLen:oops", "", catalog).is_valid


class TestRequired:
    """Test required handling."""

    def test_none_fails_required(self, catalog):
        """Test an undefined value fails required."""
        assert run("required", None, catalog) == ValidationResult(False, "Field is required. ")

    def test_empty_fails_required(self, catalog):
        """Test an empty string fails required."""
        assert not run("required", "", catalog).is_valid

    def test_whitespace_fails_required(self, catalog):
        """Test whitespace-only input fails required."""
        assert not run("required", "   ", catalog).is_valid

    def test_padded_value_passes_required(self, catalog):
        """Test required only needs one non-whitespace character."""
        assert run("required", "  x ", catalog).is_valid


class TestRegexRules:
    """Test inline regex evaluation."""

    def test_pipe_in_pattern(self, catalog):
        """Test a pattern with alternation validates correctly."""
        rules = "regex:yes or no:=^(yes|no)$:regex"
        assert run(rules, "YES", catalog).is_valid
        assert run(rules, "maybe", catalog) == ValidationResult(False, "Format: yes or no ")

    def test_invalid_pattern_fails_without_raising(self, catalog):
        """Test an uncompilable pattern fails closed."""
        result = run("regex:m:=([:regex", "anything", catalog)
        assert result == ValidationResult(False, "Format: m ")

    def test_malformed_length_fails_closed(self, catalog):
        """Test malformed arguments make the rule fail."""
        assert not run("betweenLen:1", "abc", catalog).is_valid


class TestTrailingNewline:
    """Test `$` anchors only match at the true end of the value."""

    @pytest.mark.parametrize("rules,value", [
        ("maxLen:3", "abc\n"),
        ("exactLen:3", "abc\n"),
        ("integer", "123\n"),
        ("email", "a@b.com\n"),
        ("regex:yes or no:=^(yes|no)$:regex", "yes\n"),
    ])
    def test_trailing_newline_rejected(self, rules, value, catalog):
        """Test a value ending in a newline does not pass an anchored pattern."""
        assert not run(rules, value, catalog).is_valid
        assert run(rules, value.rstrip("\n"), catalog).is_valid

    def test_end_anchored(self):
        """Test only a final unescaped dollar is rewritten."""
        assert end_anchored(r"^\d+$") == r"^\d+\Z"
        assert end_anchored(r"^a\$") == r"^a\$"
        assert end_anchored(r"^a\\$") == r"^a\\\Z"
        assert end_anchored(r"\S+") == r"\S+"


class TestConditions:
    """Test numeric condition rules."""

    def test_min_num_uses_numeric_prefix(self, catalog):
        """Test parseFloat-like conversion of the value."""
        assert run("minNum:3", "12px", catalog).is_valid

    def test_max_num_magnitude(self, catalog):
        """Test 10 > 9 numerically."""
        assert not run("maxNum:9", "10", catalog).is_valid
        assert run("maxNum:10", "9", catalog).is_valid

    def test_malformed_bound_fails(self, catalog):
        """Test a non-numeric bound fails closed."""
        assert not run("maxNum:abc", "5", catalog).is_valid

    def test_numeric_values_accepted(self, catalog):
        """Test non-string values are handled."""
        assert run("betweenNum:1,10", 7, catalog).is_valid


class TestBuiltinPatterns:
    """Spot checks of the built-in catalog."""

    @pytest.mark.parametrize("rule,good,bad", [
        ("alpha", "Émile", "abc1"),
        ("alphaSpaces", "jean luc", "jean-luc"),
        ("alphaNum", "abc123", "abc 123"),
        ("alphaDash", "abc_1-2", "abc 1"),
        ("alphaDashSpaces", "abc_1 -2", "abc!"),
        ("creditCard", "4111111111111111", "1234"),
        ("dateIso", "2024-01-31", "2024-13-01"),
        ("dateUsLong", "12/31/2024", "31/12/2024"),
        ("dateEuroShort", "31-12-24", "31-13-24"),
        ("float", "1.5", "15"),
        ("floatSigned", "-1.5", "1"),
        ("integer", "42", "4.2"),
        ("integerSigned", "-42", "+-4"),
        ("ipv4", "192.168.0.1", "256.1.1.1"),
        ("ipv6", "2001:0db8:85a3:0000:0000:8a2e:0370:7334", "2001::1"),
        ("ipv6Hex", "2001:db8::1", "2001:db8:1"),
        ("numeric", "3.14", "-3"),
        ("numericSigned", "-3", "abc"),
        ("time", "23:59", "24:00"),
        ("url", "https://example.com/path?q=1", "example.com"),
        ("iban", "GB82WEST12345698765432", "GB82"),
    ])
    def test_pattern(self, rule, good, bad):
        """Test a valid and an invalid sample per rule."""
        assert run(rule, good, str).is_valid, f"{rule} should accept {good!r}"
        assert not run(rule, bad, str).is_valid, f"{rule} should reject {bad!r}"


class TestFieldValidator:
    """Test the per-field wrapper."""

    def test_from_rules(self, catalog):
        """Test a field validator parses once and validates many times."""
        field = FieldValidator.from_rules("age", "required|betweenNum:18,99", translator=catalog)

        assert field.is_required
        assert len(field.descriptors) == 2
        assert field.validate("30").is_valid
        assert field.validate("12").message == "Between 18 and 99. "

    def test_repr(self):
        """Test the repr names the field and its rules."""
        field = FieldValidator.from_rules("code", "required|exactLen:4")
        assert repr(field) == "FieldValidator(name='code', rules='required|exactLen')"
