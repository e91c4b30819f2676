"""Integer rules."""

from dataclasses import dataclass
from typing import Any

from ..errors import RuleConfigurationError
from .base import ValidationRule, is_integer


@dataclass(frozen=True)
class Positive(ValidationRule):
    """Value must be an integer greater than zero."""

    kind = "positive"
    default_message = "Value should be positive."

    def check(self, value: Any, record: Any) -> bool:
        return is_integer(value) and value > 0


@dataclass(frozen=True)
class Negative(ValidationRule):
    """Value must be an integer below ``threshold``."""

    kind = "negative"
    default_message = "Value should be negative."

    threshold: int = 0

    def __post_init__(self):
        if not is_integer(self.threshold):
            raise RuleConfigurationError(
                f"Negative: threshold must be an integer, got {self.threshold!r}"
            )
        super().__post_init__()

    def check(self, value: Any, record: Any) -> bool:
        return is_integer(value) and value < self.threshold
