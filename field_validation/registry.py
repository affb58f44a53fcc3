"""
Validator Registry

Static catalog mapping rule names to descriptor templates.

Each template is one variant of a small tagged family:

- PatternTemplate: a fixed case-insensitive regex
- LengthTemplate: a regex built from integer length arguments (minLen:3)
- ConditionTemplate: numeric comparison(s) against bound arguments (betweenNum:1,10)
- CustomRegexTemplate: the inline `regex:<message>:=<pattern>:regex` sub-rule

Every rule is reachable by its camelCase name and its snake_case alias
(`alphaNum` / `alpha_num`). A lookup miss returns None; the parser decides
what to do with unknown names.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from .conditions import Operator
from .descriptors import CONDITION, PATTERN, ValidatorDescriptor

# Accented letters accepted by the alpha* family, both cases
_ACCENTED = "ÀÁÂÃÄÅÇÈÉÊËÌÍÎÏÒÓÔÕÖÙÚÛÜÝàáâãäåçèéêëìíîïðòóôõöùúûüýÿ"

RegexRule = Tuple[str, Optional[str]]


class RuleTemplate(ABC):
    """Builds a ValidatorDescriptor from the arguments of one rule token."""

    def __init__(self, message_key: str):
        self.message_key = message_key

    @abstractmethod
    def build(
        self,
        rule_name: str,
        args: List[str],
        regex_rule: Optional[RegexRule] = None,
    ) -> ValidatorDescriptor:
        """
        Materialize a descriptor.

        Args:
            rule_name: Canonical rule name (e.g. "minLen")
            args: Colon-separated arguments following the name
            regex_rule: (message, pattern) captured from an inline regex sub-rule

        Returns:
            Immutable descriptor
        """


class PatternTemplate(RuleTemplate):
    """A rule backed by a fixed regular expression."""

    def __init__(self, pattern: str, message_key: str):
        super().__init__(message_key)
        self.pattern = pattern

    def build(self, rule_name, args, regex_rule=None):
        return ValidatorDescriptor(
            kind=PATTERN,
            message_key=self.message_key,
            rule_name=rule_name,
            pattern=self.pattern,
        )


class LengthTemplate(RuleTemplate):
    """A character-count rule; the regex quantifier is built from the arguments."""

    EXACT = "exact"
    MIN = "min"
    MAX = "max"
    BETWEEN = "between"

    def __init__(self, shape: str, message_key: str):
        super().__init__(message_key)
        self.shape = shape

    def build(self, rule_name, args, regex_rule=None):
        raw = args[0] if args else ""
        params = tuple(raw.split(",")) if self.shape == self.BETWEEN else (raw,)
        return ValidatorDescriptor(
            kind=PATTERN,
            message_key=self.message_key,
            rule_name=rule_name,
            pattern=self._quantified_pattern(params),
            params=params,
        )

    def _quantified_pattern(self, params: Tuple[str, ...]) -> Optional[str]:
        bounds = [_parse_length(p) for p in params]
        if any(b is None for b in bounds):
            return None

        if self.shape == self.BETWEEN:
            if len(bounds) != 2 or bounds[0] > bounds[1]:
                return None
            return "^.{%d,%d}$" % (bounds[0], bounds[1])
        if self.shape == self.MIN:
            return "^.{%d,}$" % bounds[0]
        if self.shape == self.MAX:
            return "^.{0,%d}$" % bounds[0]
        return "^.{%d}$" % bounds[0]


class ConditionTemplate(RuleTemplate):
    """A numeric comparison rule with one operator per bound."""

    def __init__(self, operators: Tuple[Operator, ...], message_key: str):
        super().__init__(message_key)
        self.operators = operators

    def build(self, rule_name, args, regex_rule=None):
        raw = args[0] if args else ""
        if len(self.operators) > 1:
            params = tuple(raw.split(","))
        else:
            params = (raw,) if args else ()
        return ValidatorDescriptor(
            kind=CONDITION,
            message_key=self.message_key,
            rule_name=rule_name,
            conditions=self.operators,
            params=params,
        )


class CustomRegexTemplate(RuleTemplate):
    """The inline regex sub-rule; pattern and message come from the rule string."""

    def build(self, rule_name, args, regex_rule=None):
        message, pattern = regex_rule if regex_rule else ("", None)
        return ValidatorDescriptor(
            kind=PATTERN,
            message_key=self.message_key,
            rule_name=rule_name,
            pattern=pattern,
            params=(message,),
        )


def _parse_length(text: str) -> Optional[int]:
    text = text.strip()
    if not re.fullmatch(r"[0-9]+", text):
        return None
    return int(text)


def snake_case(name: str) -> str:
    """Convert a camelCase rule name to its snake_case alias."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _alpha(extra: str, message_key: str) -> PatternTemplate:
    return PatternTemplate("^([a-z%s%s])+$" % (_ACCENTED, extra), message_key)


BUILTIN_TEMPLATES: Dict[str, RuleTemplate] = {
    "alpha": _alpha("", "INVALID_ALPHA"),
    "alphaSpaces": _alpha(r"\s", "INVALID_ALPHA_SPACE"),
    "alphaNum": _alpha("0-9", "INVALID_ALPHA_NUM"),
    "alphaNumSpaces": _alpha(r"0-9\s", "INVALID_ALPHA_NUM_SPACE"),
    "alphaDash": _alpha("0-9_-", "INVALID_ALPHA_DASH"),
    "alphaDashSpaces": _alpha(r"0-9\s_-", "INVALID_ALPHA_DASH_SPACE"),
    "betweenLen": LengthTemplate(LengthTemplate.BETWEEN, "INVALID_BETWEEN_CHAR"),
    "betweenNum": ConditionTemplate(
        (Operator.GE, Operator.LE), "INVALID_BETWEEN_NUM"
    ),
    "creditCard": PatternTemplate(
        r"^(?:4[0-9]{12}(?:[0-9]{3})?|5[1-5][0-9]{14}|3[47][0-9]{13}"
        r"|3(?:0[0-5]|[68][0-9])[0-9]{11}|6(?:011|5[0-9]{2})[0-9]{12}"
        r"|(?:2131|1800|35\d{3})\d{11})$",
        "INVALID_CREDIT_CARD",
    ),
    "dateIso": PatternTemplate(
        r"^(19|20)\d\d([-])(0[1-9]|1[012])\2(0[1-9]|[12][0-9]|3[01])$",
        "INVALID_DATE_ISO",
    ),
    "dateUsLong": PatternTemplate(
        r"^(0[1-9]|1[012])[-/](0[1-9]|[12][0-9]|3[01])[-/](19|20)\d\d$",
        "INVALID_DATE_US_LONG",
    ),
    "dateUsShort": PatternTemplate(
        r"^(0[1-9]|1[012])[-/](0[1-9]|[12][0-9]|3[01])[-/]\d\d$",
        "INVALID_DATE_US_SHORT",
    ),
    "dateEuroLong": PatternTemplate(
        r"^(0[1-9]|[12][0-9]|3[01])[-/](0[1-9]|1[012])[-/](19|20)\d\d$",
        "INVALID_DATE_EURO_LONG",
    ),
    "dateEuroShort": PatternTemplate(
        r"^(0[1-9]|[12][0-9]|3[01])[-/](0[1-9]|1[012])[-/]\d\d$",
        "INVALID_DATE_EURO_SHORT",
    ),
    "email": PatternTemplate(
        r"^[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
        r"@(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$",
        "INVALID_EMAIL",
    ),
    "exactLen": LengthTemplate(LengthTemplate.EXACT, "INVALID_EXACT_LEN"),
    "float": PatternTemplate(r"^\d+[\.]+\d+$", "INVALID_FLOAT"),
    "floatSigned": PatternTemplate(r"^[+-]?\d+[\.]+\d+$", "INVALID_FLOAT_SIGNED"),
    "iban": PatternTemplate(
        r"[a-zA-Z]{2}[0-9]{2}[a-zA-Z0-9]{4}[0-9]{7}([a-zA-Z0-9]?){0,16}",
        "INVALID_IBAN",
    ),
    "integer": PatternTemplate(r"^\d+$", "INVALID_INTEGER"),
    "integerSigned": PatternTemplate(r"^[+-]?\d+$", "INVALID_INTEGER_SIGNED"),
    "ipv4": PatternTemplate(
        r"^(25[0-5]|2[0-4]\d|[0-1]?\d?\d)(\.(25[0-5]|2[0-4]\d|[0-1]?\d?\d)){3}$",
        "INVALID_IPV4",
    ),
    "ipv6": PatternTemplate(
        r"^(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}$", "INVALID_IPV6"
    ),
    "ipv6Hex": PatternTemplate(
        r"^((?:[0-9A-Fa-f]{1,4}(?::[0-9A-Fa-f]{1,4})*)?)::"
        r"((?:[0-9A-Fa-f]{1,4}(?::[0-9A-Fa-f]{1,4})*)?)$",
        "INVALID_IPV6_HEX",
    ),
    "maxLen": LengthTemplate(LengthTemplate.MAX, "INVALID_MAX_CHAR"),
    "maxNum": ConditionTemplate((Operator.LE,), "INVALID_MAX_NUM"),
    "minLen": LengthTemplate(LengthTemplate.MIN, "INVALID_MIN_CHAR"),
    "minNum": ConditionTemplate((Operator.GE,), "INVALID_MIN_NUM"),
    "numeric": PatternTemplate(r"^\d+[\.]?\d*$", "INVALID_NUMERIC"),
    "numericSigned": PatternTemplate(r"^[-+]?\d+[\.]?\d*$", "INVALID_NUMERIC_SIGNED"),
    "regex": CustomRegexTemplate("INVALID_PATTERN"),
    "required": PatternTemplate(r"\S+", "INVALID_REQUIRED"),
    "url": PatternTemplate(
        r"(http|ftp|https):\/\/[\w\-_]+(\.[\w\-_]+)+"
        r"([\w\-\.,@?^=%&amp;:/~\+#]*[\w\-\@?^=%&amp;/~\+#])?",
        "INVALID_URL",
    ),
    "time": PatternTemplate(
        r"^([01]?[0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$", "INVALID_TIME"
    ),
}


class ValidatorRegistry:
    """Read-only name -> template catalog with snake_case aliases."""

    def __init__(self, templates: Dict[str, RuleTemplate]):
        self._templates = dict(templates)
        self._aliases = {}
        for name in self._templates:
            alias = snake_case(name)
            if alias != name:
                self._aliases[alias] = name

    def canonical_name(self, name: str) -> Optional[str]:
        """Resolve a rule name or alias to its canonical name, None if unknown."""
        if name in self._templates:
            return name
        return self._aliases.get(name)

    def lookup(self, name: str) -> Optional[RuleTemplate]:
        """Return the template for a rule name or alias, None on a miss."""
        canonical = self.canonical_name(name)
        if canonical is None:
            return None
        return self._templates[canonical]

    def names(self) -> List[str]:
        """Canonical rule names, sorted."""
        return sorted(self._templates)

    def describe(self) -> Dict[str, Dict[str, str]]:
        """Summary of every rule: message key, variant and alias."""
        return {
            name: {
                "message_key": template.message_key,
                "kind": type(template).__name__,
                "alias": snake_case(name),
            }
            for name, template in sorted(self._templates.items())
        }

    def extend(self, templates: Dict[str, RuleTemplate]) -> "ValidatorRegistry":
        """
        Return a new registry with additional (or overriding) templates.

        The receiving registry is left untouched.
        """
        merged = dict(self._templates)
        merged.update(templates)
        return ValidatorRegistry(merged)

    def __contains__(self, name: str) -> bool:
        return self.canonical_name(name) is not None

    def __len__(self) -> int:
        return len(self._templates)


DEFAULT_REGISTRY = ValidatorRegistry(BUILTIN_TEMPLATES)


def custom_rules_from_config(rules: Iterable[Dict[str, str]]) -> Dict[str, RuleTemplate]:
    """
    Build pattern templates from configuration entries.

    Each entry is a dict with `name`, `pattern` and `message_key`.
    """
    return {
        entry["name"]: PatternTemplate(entry["pattern"], entry["message_key"])
        for entry in rules
    }
