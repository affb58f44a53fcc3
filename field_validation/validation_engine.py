"""
Validation Engine

Runs a value through every descriptor compiled for a field and composes the
result. The engine is pure: no I/O, no shared mutable state, and it never
raises for bad input. Message translation is delegated to an injected
translator callable.
"""

import logging
import re
from functools import lru_cache
from typing import Any, Optional, Sequence

from .conditions import evaluate, to_number
from .descriptors import PATTERN, ParsedRules, ValidationResult, ValidatorDescriptor
from .rule_parser import REQUIRED_RULE, RuleParser
from .translation import Translator, identity_translator

logger = logging.getLogger(__name__)

PARAM_PLACEHOLDER = ":param"


def end_anchored(pattern: str) -> str:
    """
    Replace a final unescaped `$` with `\\Z`.

    Python's `$` also matches before a trailing newline; `\\Z` only matches
    at the very end, so "abc\\n" does not pass `^.{0,3}$`.
    """
    if not pattern.endswith("$"):
        return pattern
    backslashes = len(pattern[:-1]) - len(pattern[:-1].rstrip("\\"))
    if backslashes % 2:
        return pattern
    return pattern[:-1] + r"\Z"


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Optional["re.Pattern"]:
    try:
        return re.compile(end_anchored(pattern), re.IGNORECASE)
    except re.error as e:
        logger.warning(
            f"Invalid validation pattern, treating as failed: {e}",
            extra={"pattern": pattern},
        )
        return None


def is_empty(value: Any) -> bool:
    """True for None and the empty string."""
    return value is None or value == ""


def check_descriptor(descriptor: ValidatorDescriptor, value: Any) -> bool:
    """
    Test one descriptor against a value.

    Args:
        descriptor: Compiled rule
        value: Field value (None for an undefined value)

    Returns:
        True if the value satisfies the rule
    """
    if descriptor.fails_closed:
        return False

    if descriptor.kind == PATTERN:
        if value is None and descriptor.rule_name == REQUIRED_RULE:
            return False
        compiled = _compile(descriptor.pattern)
        if compiled is None:
            return False
        text = "" if value is None else str(value)
        return compiled.search(text) is not None

    number = to_number(value)
    return all(
        evaluate(op, number, to_number(bound))
        for op, bound in zip(descriptor.conditions, descriptor.params)
    )


def format_message(template: str, params: Sequence[str]) -> str:
    """Replace each `:param` placeholder, left to right, with the next param."""
    message = template
    for param in params:
        message = message.replace(PARAM_PLACEHOLDER, str(param), 1)
    return message


def validate(
    value: Any,
    descriptors: Sequence[ValidatorDescriptor],
    is_required: bool,
    translate: Translator = identity_translator,
) -> ValidationResult:
    """
    Validate a value against a field's descriptors.

    An optional field left blank is not validated at all. Otherwise every
    descriptor is evaluated, so the message lists every violated rule in
    rule-string order rather than just the first.

    Args:
        value: Field value, None when undefined
        descriptors: Compiled rules in source order
        is_required: Whether the rule string contained `required`
        translate: Message key lookup

    Returns:
        ValidationResult; message is empty when valid
    """
    if not is_required and is_empty(value):
        return ValidationResult.valid()

    messages = []
    for descriptor in descriptors:
        if check_descriptor(descriptor, value):
            continue
        messages.append(format_message(translate(descriptor.message_key), descriptor.params))

    if not messages:
        return ValidationResult.valid()
    return ValidationResult(is_valid=False, message="".join(messages))


class FieldValidator:
    """The compiled rules of one field plus the translator used for its messages."""

    def __init__(self, name: str, parsed: ParsedRules, translator: Translator = None):
        self.name = name
        self.parsed = parsed
        self.translator = translator or identity_translator

    @classmethod
    def from_rules(
        cls,
        name: str,
        rule_string: str,
        parser: RuleParser = None,
        translator: Translator = None,
    ) -> "FieldValidator":
        """Parse a rule string once and bind the result to a field name."""
        parser = parser or RuleParser()
        return cls(name, parser.parse(rule_string), translator)

    @property
    def descriptors(self):
        return self.parsed.descriptors

    @property
    def is_required(self) -> bool:
        return self.parsed.is_required

    def translate(self, key: str) -> str:
        return self.translator(key)

    def validate(self, value: Any) -> ValidationResult:
        return validate(value, self.descriptors, self.is_required, self.translator)

    def __repr__(self):
        rules = "|".join(d.rule_name for d in self.descriptors)
        return f"FieldValidator(name={self.name!r}, rules={rules!r})"
