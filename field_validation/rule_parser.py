"""
Rule Parser

Compiles a rule string such as

    required|minLen:3|regex:Must start with A:=^A(b|c)+:regex|betweenNum:1,10

into an ordered tuple of ValidatorDescriptor objects.

## Two-phase parse

A custom regex may itself contain "|", which is also the rule separator. The
parser therefore runs in two phases:

1. Extract the inline `regex:<message>:=<pattern>:regex` span (non-greedy, first
   occurrence) and replace it with a bare `regex:` token.
2. Split what remains on "|", then each token on ":" into name and arguments.

The regex token keeps its original position, so descriptor order (and with it
message order) follows the rule string exactly.

Only one inline regex is supported per rule string. Any later `regex` token
gets no pattern and fails closed.
"""

import logging
import re
from typing import List, Optional, Tuple

from .descriptors import ParsedRules, ValidatorDescriptor
from .exceptions import ConfigurationError
from .registry import DEFAULT_REGISTRY, RegexRule, ValidatorRegistry

logger = logging.getLogger(__name__)

REGEX_MARKER = "regex:"
REGEX_SPAN = re.compile(r"regex:(.*?):regex", re.DOTALL)
REGEX_SEPARATOR = ":="
RULE_SEPARATOR = "|"
ARG_SEPARATOR = ":"
REQUIRED_RULE = "required"
REGEX_RULE = "regex"


class RuleParser:
    """Parses rule strings against a validator registry."""

    def __init__(self, registry: ValidatorRegistry = None, strict: bool = False):
        """
        Initialize rule parser.

        Args:
            registry: Rule catalog (defaults to the built-in registry)
            strict: Raise ConfigurationError on unknown rule names instead of
                dropping them
        """
        self.registry = registry or DEFAULT_REGISTRY
        self.strict = strict

    def parse(self, rule_string: str) -> ParsedRules:
        """
        Compile a rule string.

        Args:
            rule_string: Pipe-delimited rules for one field

        Returns:
            ParsedRules with descriptors in source order and the required flag

        Raises:
            ConfigurationError: In strict mode, if a rule name is unknown
        """
        remaining, regex_rule = extract_regex_rule(rule_string or "")

        descriptors: List[ValidatorDescriptor] = []
        is_required = False

        for token in remaining.split(RULE_SEPARATOR):
            token = token.strip()
            if not token:
                continue

            name, *args = token.split(ARG_SEPARATOR)
            name = name.strip()
            canonical = self.registry.canonical_name(name)

            if canonical is None:
                self._unknown_rule(name, rule_string)
                continue

            template = self.registry.lookup(canonical)
            inline = None
            if canonical == REGEX_RULE:
                # only the first regex token owns the extracted span
                inline, regex_rule = regex_rule, None
            descriptors.append(template.build(canonical, args, inline))

            if canonical == REQUIRED_RULE:
                is_required = True

        logger.debug(
            "Parsed rule string",
            extra={
                "rule_string": rule_string,
                "rules": [d.rule_name for d in descriptors],
                "is_required": is_required,
            },
        )
        return ParsedRules(descriptors=tuple(descriptors), is_required=is_required)

    def _unknown_rule(self, name: str, rule_string: str):
        if self.strict:
            raise ConfigurationError(
                f"Unknown validation rule '{name}' in rule string: {rule_string}"
            )
        logger.warning(
            f"Ignoring unknown validation rule '{name}'",
            extra={"rule_name": name, "rule_string": rule_string},
        )


def extract_regex_rule(rule_string: str) -> Tuple[str, Optional[RegexRule]]:
    """
    Pull the inline regex sub-rule out of a rule string.

    Args:
        rule_string: Raw rule string

    Returns:
        Tuple of (rewritten rule string, (message, pattern) or None). The
        pattern is None when the sub-rule has no ":=" separator.
    """
    if REGEX_MARKER not in rule_string:
        return rule_string, None

    match = REGEX_SPAN.search(rule_string)
    if not match:
        return rule_string, None

    message, separator, pattern = match.group(1).partition(REGEX_SEPARATOR)
    regex_rule = (message, pattern if separator else None)

    rewritten = rule_string[: match.start()] + REGEX_MARKER + rule_string[match.end():]
    return rewritten, regex_rule


def parse(
    rule_string: str, registry: ValidatorRegistry = None, strict: bool = False
) -> ParsedRules:
    """Compile a rule string with a one-off RuleParser."""
    return RuleParser(registry, strict).parse(rule_string)
