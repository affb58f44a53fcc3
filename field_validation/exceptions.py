"""Exceptions raised by field-validation-lib."""


class FieldValidationError(Exception):
    """Base class for all library errors."""


class ConfigurationError(FieldValidationError, ValueError):
    """
    Raised for programming errors in how the library is configured.

    Examples: registering a field without its rules, an unknown rule name in
    strict mode, or a configuration file that cannot be read. Bad user input
    never raises; it produces an invalid ValidationResult instead.
    """
