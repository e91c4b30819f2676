"""Exceptions raised while building rules, bindings and rule tables.

Rule violations are never exceptions; they come back as ValidationResult
instances. Everything here signals a fault in static configuration and is
raised at construction time.
"""


class ValidationConfigError(ValueError):
    """Base class for configuration faults."""


class RuleConfigurationError(ValidationConfigError):
    """A rule was constructed with invalid parameters or an unknown kind."""


class BindingError(ValidationConfigError):
    """A field-to-rules binding could not be built."""
