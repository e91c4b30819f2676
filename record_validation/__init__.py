"""
record-validation: per-field rule validation for records

This library provides an embeddable validation layer with:
- Immutable, reusable rules (length, substring, sign, URL, dates, allowed
  values, enums, conditional requirements)
- Explicit field-to-rules bindings built once per record type
- First-failure-wins evaluation, with an opt-in collect-all mode
- Declarative rule tables in YAML, checked with JSON schema

Example:
    from record_validation import BindingBuilder, MinLength, Positive, validate

    binding = (
        BindingBuilder("user")
        .field("username", MinLength(4))
        .field("age", Positive())
        .build()
    )
    result = validate({"username": "Jo", "age": 30}, binding)
    # result.success is False, result.field == "username"
"""

from .api import ValidationService
from .binding import Binding, BindingBuilder, FieldDescriptor, FieldType
from .errors import BindingError, RuleConfigurationError, ValidationConfigError
from .rule_executor import FieldFailure
from .rule_loader import RuleLoader, register_rule_kind
from .rules import (
    AllowedEnum,
    AllowedValues,
    Contains,
    FutureDate,
    MinLength,
    Negative,
    Positive,
    RequiredIf,
    Url,
    ValidationRule,
)
from .validation_engine import ValidationEngine, ValidationResult, validate, validate_all

__version__ = "0.1.0"
__all__ = [
    "ValidationService",
    "ValidationEngine",
    "ValidationResult",
    "FieldFailure",
    "validate",
    "validate_all",
    "Binding",
    "BindingBuilder",
    "FieldDescriptor",
    "FieldType",
    "RuleLoader",
    "register_rule_kind",
    "ValidationRule",
    "MinLength",
    "Contains",
    "Positive",
    "Negative",
    "RequiredIf",
    "Url",
    "FutureDate",
    "AllowedValues",
    "AllowedEnum",
    "ValidationConfigError",
    "RuleConfigurationError",
    "BindingError",
]
