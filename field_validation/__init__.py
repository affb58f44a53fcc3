"""
field-validation-lib: Declarative field validation from pipe-delimited rule strings

This library provides:
- A rule parser for strings like "required|minLen:3|regex:Start with A:=^A:regex"
- A catalog of ~35 built-in pattern and numeric-condition rules
- A pure validation engine composing every violated rule into one message
- Debounced per-field bindings for UIs and other value streams
- A JSON-RPC server for use from other languages

Example:
    from field_validation import ValidationService

    service = ValidationService()
    result = service.validate_value("required|betweenNum:1,10", "15")
    result.is_valid  # False
"""

from .api import ValidationService
from .binding import FieldBinding, FieldState
from .conditions import Operator, evaluate
from .descriptors import ParsedRules, ValidationResult, ValidatorDescriptor
from .exceptions import ConfigurationError, FieldValidationError
from .rule_parser import RuleParser, parse
from .validation_engine import FieldValidator, validate

__version__ = "0.1.0"
__all__ = [
    "ValidationService",
    "FieldBinding",
    "FieldState",
    "FieldValidator",
    "Operator",
    "evaluate",
    "ParsedRules",
    "ValidationResult",
    "ValidatorDescriptor",
    "ConfigurationError",
    "FieldValidationError",
    "RuleParser",
    "parse",
    "validate",
]
