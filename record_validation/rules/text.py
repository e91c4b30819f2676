"""String rules: minimum length, substring, URL and allowed values."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Tuple
from urllib.parse import urlparse

from ..errors import RuleConfigurationError
from .base import ValidationRule, is_integer


@dataclass(frozen=True)
class MinLength(ValidationRule):
    """Value must be a string of at least ``length`` characters."""

    kind = "min_length"
    default_message = "Length should be at least 4 characters."

    length: int

    def __post_init__(self):
        if not is_integer(self.length) or self.length < 0:
            raise RuleConfigurationError(
                f"MinLength: length must be a non-negative integer, got {self.length!r}"
            )
        super().__post_init__()

    def check(self, value: Any, record: Any) -> bool:
        return isinstance(value, str) and len(value) >= self.length


@dataclass(frozen=True)
class Contains(ValidationRule):
    """Value must be a string containing ``text`` (case-sensitive)."""

    kind = "contains"
    default_message = "Value should contain upper and lower case characters."

    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise RuleConfigurationError(
                f"Contains: text must be a string, got {self.text!r}"
            )
        super().__post_init__()

    def check(self, value: Any, record: Any) -> bool:
        return isinstance(value, str) and self.text in value


@dataclass(frozen=True)
class Url(ValidationRule):
    """Value must be an absolute http or https URL."""

    kind = "url"
    default_message = "The value must be a valid http or https URL."

    SCHEMES = ("http", "https")

    def check(self, value: Any, record: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            parsed = urlparse(value.strip())
            # port is parsed lazily and raises on non-numeric or out-of-range ports
            parsed.port
        except ValueError:
            # e.g. an unterminated IPv6 literal
            return False
        if parsed.scheme.lower() not in self.SCHEMES:
            return False
        host = parsed.hostname
        return bool(host) and not any(c.isspace() for c in host)


@dataclass(frozen=True)
class AllowedValues(ValidationRule):
    """Value must equal one of ``values``, ignoring case."""

    kind = "allowed_values"
    default_message = "Value must be one of: {values}."

    values: Tuple[str, ...]
    _folded: FrozenSet[str] = field(
        init=False, repr=False, compare=False, default=frozenset()
    )

    def __post_init__(self):
        if isinstance(self.values, str):
            raise RuleConfigurationError(
                "AllowedValues: values must be a collection of strings, not a string"
            )
        try:
            values = tuple(self.values)
        except TypeError:
            raise RuleConfigurationError(
                f"AllowedValues: values must be a collection of strings, got {self.values!r}"
            )
        if not all(isinstance(v, str) for v in values):
            raise RuleConfigurationError(
                f"AllowedValues: every allowed value must be a string, got {values!r}"
            )
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "_folded", frozenset(v.casefold() for v in values))
        super().__post_init__()

    def check(self, value: Any, record: Any) -> bool:
        return isinstance(value, str) and value.casefold() in self._folded

    def _message_context(self) -> Dict[str, Any]:
        return {"values": ", ".join(self.values)}
