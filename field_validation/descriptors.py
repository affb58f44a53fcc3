"""Compiled validator descriptors and validation results."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .conditions import Operator

PATTERN = "pattern"
CONDITION = "condition"


@dataclass(frozen=True)
class ValidatorDescriptor:
    """
    Compiled form of one rule from a rule string.

    A pattern descriptor whose `pattern` is None was built from malformed
    arguments and always fails. A condition descriptor holds one operator per
    numeric bound in `params`; a count mismatch also always fails.
    """

    kind: str
    message_key: str
    rule_name: str
    pattern: Optional[str] = None
    conditions: Tuple[Operator, ...] = ()
    params: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def fails_closed(self) -> bool:
        """True when the descriptor can never be satisfied."""
        if self.kind == PATTERN:
            return self.pattern is None
        return not self.conditions or len(self.conditions) != len(self.params)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict form, used by the JSON-RPC surface."""
        result = {
            "rule_name": self.rule_name,
            "kind": self.kind,
            "message_key": self.message_key,
            "params": list(self.params),
        }
        if self.kind == PATTERN:
            result["pattern"] = self.pattern
        else:
            result["conditions"] = [op.value for op in self.conditions]
        return result


@dataclass(frozen=True)
class ParsedRules:
    """Output of the rule parser: ordered descriptors plus the required flag."""

    descriptors: Tuple[ValidatorDescriptor, ...]
    is_required: bool = False


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one value: validity plus the composed error message."""

    is_valid: bool
    message: str = ""

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True, message="")

    def to_dict(self) -> Dict[str, Any]:
        return {"is_valid": self.is_valid, "message": self.message}
