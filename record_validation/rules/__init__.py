"""
Built-in validation rules.

Each rule is an immutable predicate over one field value plus the message
reported when it fails.
"""

from .base import ValidationRule
from .conditional import RequiredIf
from .enums import AllowedEnum
from .numeric import Negative, Positive
from .temporal import FutureDate
from .text import AllowedValues, Contains, MinLength, Url

BUILTIN_RULES = (
    MinLength,
    Contains,
    Positive,
    Negative,
    RequiredIf,
    Url,
    FutureDate,
    AllowedValues,
    AllowedEnum,
)

__all__ = [
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
    "BUILTIN_RULES",
]
