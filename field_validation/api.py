"""
Public API for field-validation-lib

This is the "front door": register fields with their rule strings, feed
values in, read verdicts out.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from .binding import UNSET, FieldBinding, FieldState
from .config_loader import ConfigLoader, schema_errors
from .descriptors import ValidationResult
from .exceptions import ConfigurationError
from .registry import DEFAULT_REGISTRY, custom_rules_from_config
from .rule_parser import RuleParser
from .translation import Translator
from .validation_engine import FieldValidator, validate

logger = logging.getLogger(__name__)

# Shared by global options and per-field attributes
_OPTION_PROPERTIES = {
    "typing_limit_ms": {"type": "integer", "minimum": 0},
    "error_to": {"type": "string"},
    "disabled": {"type": "boolean"},
}

GLOBAL_OPTIONS_SCHEMA = {
    "type": "object",
    "properties": _OPTION_PROPERTIES,
}

FIELD_ATTRS_SCHEMA = {
    "type": "object",
    "required": ["name", "rules"],
    "properties": dict(
        _OPTION_PROPERTIES,
        name={"type": "string", "minLength": 1},
        rules={"type": "string"},
    ),
}


class ValidationService:
    """
    Main validation service class.

    Holds one FieldBinding per registered field. Global options set through
    set_global_options() are defaults; attributes passed to add_validator()
    take priority over them.

    Example:
        from field_validation import ValidationService

        service = ValidationService()
        service.set_global_options({"on_result": render_error})
        service.add_validator("username", "required|alphaDash|betweenLen:3,20")
        service.on_change("username", "jo")

        service.validate_field("username", "jo").message
    """

    def __init__(
        self,
        config_loader: Optional[ConfigLoader] = None,
        translator: Optional[Translator] = None,
        timer_factory=None,
    ):
        """
        Initialize validation service.

        Args:
            config_loader: Configuration source (defaults to the bundled config)
            translator: Message key lookup (defaults to the configured catalog)
            timer_factory: Optional threading.Timer replacement for the bindings

        Raises:
            ConfigurationError: If configuration or the message catalog is invalid
        """
        self.config_loader = config_loader or ConfigLoader()
        self.translator = translator or self.config_loader.get_message_catalog()
        self.timer_factory = timer_factory

        registry = DEFAULT_REGISTRY
        custom_rules = self.config_loader.get_custom_rules()
        if custom_rules:
            registry = registry.extend(custom_rules_from_config(custom_rules))
        self.registry = registry

        self.parser = RuleParser(
            self.registry, strict=self.config_loader.get_strict_rule_names()
        )
        self.global_options: Dict[str, Any] = {}
        self.bindings: Dict[str, FieldBinding] = {}

        logger.info(
            "Validation service initialized",
            extra={
                "rules": len(self.registry),
                "strict_rule_names": self.parser.strict,
                "typing_limit_ms": self.config_loader.get_typing_limit_ms(),
            },
        )

    def set_global_options(self, options: Dict[str, Any]) -> "ValidationService":
        """
        Set defaults applied to every field registered afterwards.

        Args:
            options: Any of typing_limit_ms, error_to, disabled, on_result

        Raises:
            ConfigurationError: If an option has the wrong type
        """
        problems = schema_errors(_without_callbacks(options), GLOBAL_OPTIONS_SCHEMA)
        if problems:
            raise ConfigurationError("Invalid global options: " + "; ".join(problems))
        self.global_options = dict(options)
        return self

    def add_validator(
        self, name_or_attrs: Union[str, Dict[str, Any]], rules: Optional[str] = None
    ) -> "ValidationService":
        """
        Register a field.

        Accepts either `add_validator("email", "required|email")` or a dict of
        attributes: name, rules, and optionally typing_limit_ms, error_to,
        disabled and on_result (a callable receiving the FieldState).

        Re-registering a name replaces the previous binding.

        Raises:
            ConfigurationError: If name or rules are missing, an attribute has
                the wrong type, or on_result is supplied but not callable
        """
        if isinstance(name_or_attrs, str) and isinstance(rules, str):
            attrs = {"name": name_or_attrs, "rules": rules}
        else:
            attrs = name_or_attrs

        if not isinstance(attrs, dict):
            raise ConfigurationError(
                "add_validator requires at least the following attributes: {name, rules}"
            )

        attrs = _merge(self.global_options, attrs)
        self._check_attrs(attrs)

        name = attrs["name"]
        validator = FieldValidator(name, self.parser.parse(attrs["rules"]), self.translator)

        binding_kwargs = {}
        if self.timer_factory is not None:
            binding_kwargs["timer_factory"] = self.timer_factory

        if name in self.bindings:
            self.bindings[name].cancel()

        self.bindings[name] = FieldBinding(
            validator,
            on_result=attrs.get("on_result"),
            typing_limit_ms=attrs.get(
                "typing_limit_ms", self.config_loader.get_typing_limit_ms()
            ),
            error_to=attrs.get("error_to"),
            disabled=attrs.get("disabled", False),
            **binding_kwargs,
        )
        logger.debug(
            "Validator added",
            extra={"field": name, "rules": attrs["rules"]},
        )
        return self

    def remove_validator(self, names: Union[str, Iterable[str]]) -> "ValidationService":
        """Unregister one field or a list of fields. Unknown names are ignored."""
        if isinstance(names, str):
            names = [names]
        for name in names:
            binding = self.bindings.pop(name, None)
            if binding is not None:
                binding.cancel()
                logger.debug("Validator removed", extra={"field": name})
        return self

    def on_change(self, name: str, value: Any) -> FieldState:
        """Forward a value change to the field (debounced)."""
        return self._binding(name).on_change(value)

    def on_blur(self, name: str, value: Any = UNSET) -> FieldState:
        """Validate the field immediately (the last changed value if none is given)."""
        return self._binding(name).on_blur(value)

    def set_disabled(self, name: str, disabled: bool) -> FieldState:
        return self._binding(name).set_disabled(disabled)

    def validate_field(self, name: str, value: Any) -> ValidationResult:
        """
        Validate a value for a registered field right away.

        The field's binding state is updated as if the field had been blurred.
        """
        return self._binding(name).on_blur(value).result

    def validate_value(self, rules: str, value: Any) -> ValidationResult:
        """One-off validation of a value against a rule string."""
        parsed = self.parser.parse(rules)
        return validate(value, parsed.descriptors, parsed.is_required, self.translator)

    def validation_summary(self) -> Dict[str, str]:
        """Messages of every currently invalid field, keyed by field name."""
        return {
            name: binding.state.message
            for name, binding in self.bindings.items()
            if not binding.state.is_valid
        }

    def is_form_valid(self) -> bool:
        """True when every registered field currently holds a valid verdict."""
        return all(binding.state.is_valid for binding in self.bindings.values())

    def parse_rules(self, rules: str) -> Dict[str, Any]:
        """Compiled form of a rule string, as plain data."""
        parsed = self.parser.parse(rules)
        return {
            "is_required": parsed.is_required,
            "descriptors": [d.to_dict() for d in parsed.descriptors],
        }

    def list_rules(self) -> Dict[str, Dict[str, str]]:
        """All rules known to this service's registry."""
        return self.registry.describe()

    def field_names(self) -> List[str]:
        return list(self.bindings)

    def _binding(self, name: str) -> FieldBinding:
        try:
            return self.bindings[name]
        except KeyError:
            raise ValueError(f"No validator registered for field: {name}") from None

    def _check_attrs(self, attrs: Dict[str, Any]):
        problems = schema_errors(_without_callbacks(attrs), FIELD_ATTRS_SCHEMA)
        on_result = attrs.get("on_result")
        if on_result is not None and not callable(on_result):
            problems.append("on_result: must be callable")
        if problems:
            raise ConfigurationError(
                "add_validator requires at least the following attributes: "
                "{name, rules}. Problems: " + "; ".join(problems)
            )


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overrides win over defaults; neither input is modified."""
    merged = dict(defaults)
    merged.update(overrides)
    return merged


def _without_callbacks(attrs: Any) -> Any:
    if not isinstance(attrs, dict):
        return attrs
    return {k: v for k, v in attrs.items() if not callable(v)}
