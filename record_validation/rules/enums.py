"""Enumeration membership rule."""

import importlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Type

from ..errors import RuleConfigurationError
from .base import ValidationRule


def resolve_enum_type(path: str) -> Type[Enum]:
    """
    Import an Enum class from a ``"package.module:ClassName"`` path.

    A dotted path without a colon is split at its last dot.

    Raises:
        RuleConfigurationError: If the path cannot be imported or does not
            name an Enum subclass
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise RuleConfigurationError(
            f"Enum path must look like 'package.module:ClassName', got {path!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RuleConfigurationError(f"Failed to import enum module {module_name}: {e}")

    obj = module
    for part in attr.split("."):
        if not hasattr(obj, part):
            raise RuleConfigurationError(f"Enum {attr!r} not found in {module_name}")
        obj = getattr(obj, part)

    if not (isinstance(obj, type) and issubclass(obj, Enum)):
        raise RuleConfigurationError(f"{path!r} is not an Enum type")
    return obj


@dataclass(frozen=True)
class AllowedEnum(ValidationRule):
    """
    Value must be a member of ``enum_type``.

    Accepts a member of the enum itself, or a string that is a member name
    (case-sensitive, aliases included), equal to a member's value, or the
    decimal form of an int-valued member. Bare ints are not members.
    """

    kind = "allowed_enum"
    default_message = "Value must be a valid {enum_name} enum member."

    enum_type: Type[Enum]

    def __post_init__(self):
        if not (isinstance(self.enum_type, type) and issubclass(self.enum_type, Enum)):
            raise RuleConfigurationError("Type must be an enum.")
        super().__post_init__()

    def check(self, value: Any, record: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, self.enum_type):
            return value in self.enum_type.__members__.values()
        if not isinstance(value, str):
            return False
        if value in self.enum_type.__members__:
            return True
        if self._is_member_value(value):
            return True
        # numeric form of an int-valued member, e.g. "1" for Color.Red
        try:
            number = int(value.strip())
        except ValueError:
            return False
        return self._is_member_value(number)

    def _is_member_value(self, value: Any) -> bool:
        try:
            self.enum_type(value)
        except (ValueError, TypeError):
            return False
        return True

    def _message_context(self) -> Dict[str, Any]:
        return {"enum_name": self.enum_type.__name__}
