"""
Binding Adapter

Per-field glue between a UI (or any caller that streams values) and the
validation engine. Each FieldBinding owns its own state and its own debounce
timer handle; nothing is shared between fields.

Timing rules:
- on_change restarts the debounce timer; the engine runs once the value has
  been stable for typing_limit_ms
- on_blur cancels any pending timer and validates immediately
- at most one timer is pending per field, and a timer that was superseded
  never publishes its result
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .config_loader import DEFAULT_TYPING_LIMIT_MS
from .descriptors import ValidationResult
from .validation_engine import FieldValidator, is_empty

logger = logging.getLogger(__name__)

KEY_CHAR_MESSAGE_KEY = "INVALID_KEY_CHAR"

# on_blur() called without a value
UNSET = object()


@dataclass
class FieldState:
    """Observable state of one bound field."""

    name: str
    value: Any = None
    is_valid: bool = True
    message: str = ""
    dirty: bool = False
    disabled: bool = False
    pending: bool = False
    error_to: Optional[str] = None

    @property
    def display_message(self) -> str:
        """Message to render: only for dirty, invalid fields."""
        if self.dirty and not self.is_valid:
            return self.message
        return ""

    @property
    def result(self) -> ValidationResult:
        return ValidationResult(is_valid=self.is_valid, message=self.message)


ResultCallback = Callable[[FieldState], None]


class FieldBinding:
    """Debounced validation for a single field."""

    def __init__(
        self,
        validator: FieldValidator,
        on_result: Optional[ResultCallback] = None,
        typing_limit_ms: int = DEFAULT_TYPING_LIMIT_MS,
        error_to: Optional[str] = None,
        disabled: bool = False,
        timer_factory=threading.Timer,
    ):
        """
        Initialize field binding.

        Args:
            validator: Compiled rules for the field
            on_result: Called with the FieldState after every published verdict
            typing_limit_ms: Debounce window; 0 or less validates immediately
            error_to: Optional reference to an alternate error placement target
            disabled: Start disabled (always valid, engine not run)
            timer_factory: threading.Timer compatible factory (interval, fn, args)
        """
        self.validator = validator
        self.on_result = on_result
        self.typing_limit_ms = typing_limit_ms
        self.timer_factory = timer_factory
        self.state = FieldState(name=validator.name, disabled=disabled, error_to=error_to)

        self._timer = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self.validator.name

    def on_change(self, value: Any) -> FieldState:
        """
        Handle a user edit: restart the debounce window for the new value.

        A value that turns None after being defined means the input could not
        be converted (e.g. letters typed into a number field); that is reported
        straight away.
        """
        with self._lock:
            previous = self.state.value
            self.state.value = value
            self.state.dirty = True

            if value is None and previous is not None:
                self._cancel_timer()
                self._publish(
                    ValidationResult(False, self.validator.translate(KEY_CHAR_MESSAGE_KEY))
                )
                return self.state

            if self.state.disabled:
                return self.state

            if not self.validator.is_required and is_empty(value):
                self._cancel_timer()
                self._publish(ValidationResult.valid())
                return self.state

            # invalid until the debounced verdict arrives, with no stale message
            self.state.is_valid = False
            self.state.message = ""

            if self.typing_limit_ms <= 0:
                self._cancel_timer()
                self._publish(self.validator.validate(value))
            else:
                self._schedule(value)
            return self.state

    def on_blur(self, value: Any = UNSET) -> FieldState:
        """
        Validate now, bypassing (and cancelling) any pending debounce.

        Without a value the last changed value is validated; an explicit None
        is validated as an undefined value.
        """
        with self._lock:
            if value is not UNSET:
                self.state.value = value
            self._cancel_timer()
            if self.state.disabled:
                return self.state
            self._publish(self.validator.validate(self.state.value))
            return self.state

    def load(self, value: Any) -> FieldState:
        """Validate a pre-filled value without marking the field dirty."""
        with self._lock:
            self.state.value = value
            self._cancel_timer()
            if not self.state.disabled:
                self._publish(self.validator.validate(value))
            return self.state

    def set_disabled(self, disabled: bool) -> FieldState:
        """
        Toggle the disabled signal.

        Disabling forces a valid verdict without running the engine;
        re-enabling validates the current value immediately.
        """
        with self._lock:
            self.state.disabled = disabled
            self._cancel_timer()
            if disabled:
                self._publish(ValidationResult.valid())
            else:
                self._publish(self.validator.validate(self.state.value))
            return self.state

    def cancel(self):
        """Drop any pending validation (used when the field is unregistered)."""
        with self._lock:
            self._cancel_timer()

    def _schedule(self, value: Any):
        self._cancel_timer()
        self._generation += 1
        generation = self._generation

        timer = self.timer_factory(
            self.typing_limit_ms / 1000.0, self._fire, args=(generation, value)
        )
        timer.daemon = True
        self._timer = timer
        self.state.pending = True
        timer.start()

    def _fire(self, generation: int, value: Any):
        with self._lock:
            if generation != self._generation or self._timer is None:
                logger.debug(
                    "Discarding superseded validation timer",
                    extra={"field": self.name, "generation": generation},
                )
                return
            self._timer = None
            self.state.pending = False
            self._publish(self.validator.validate(value))

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # invalidates a timer callback that is already running
        self._generation += 1
        self.state.pending = False

    def _publish(self, result: ValidationResult):
        self.state.is_valid = result.is_valid
        self.state.message = result.message
        logger.debug(
            "Field validated",
            extra={"field": self.name, "is_valid": result.is_valid},
        )
        if self.on_result is not None:
            self.on_result(self.state)
