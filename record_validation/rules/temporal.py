"""Date/time rules."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Callable

from .base import ValidationRule


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: date) -> datetime:
    """
    Normalise a date or datetime to an aware UTC datetime.

    Naive datetimes are taken to be UTC already. A bare date means midnight
    UTC of that day.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class FutureDate(ValidationRule):
    """
    Value must be a date/time strictly later than the current instant.

    The clock is read on every check, so the same record can pass now and
    fail later. ``clock`` must return an aware datetime; it exists so callers
    can pin "now".
    """

    kind = "future_date"
    default_message = "The date must be in the future."

    clock: Callable[[], datetime] = field(
        default=utcnow, repr=False, compare=False, metadata={"parameter": False}
    )

    def check(self, value: Any, record: Any) -> bool:
        if not isinstance(value, date):
            return False
        return as_utc(value) > as_utc(self.clock())
