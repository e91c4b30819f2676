import logging
from dataclasses import dataclass
from typing import Any, Iterator

from .binding import Binding, FieldDescriptor
from .rules.base import ValidationRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldFailure:
    """One violated (field, rule) pair."""

    field: str
    rule: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "rule": self.rule, "message": self.message}


class RuleExecutor:
    """Walks a binding against one record, field by field and rule by rule"""

    def __init__(self, binding: Binding, record: Any):
        """
        Initialize rule executor.

        Args:
            binding: Field-to-rules binding of the record's type
            record: The record being validated (never modified)
        """
        self.binding = binding
        self.record = record

    def iter_failures(self) -> Iterator[FieldFailure]:
        """
        Yield failures lazily in declared field-then-rule order.

        Nothing after a failure is evaluated until the caller asks for the
        next item, so taking only the first item gives first-failure
        semantics.
        """
        for descriptor in self.binding.fields:
            for rule in self.binding.rules_for(descriptor.name):
                failure = self._execute_rule(descriptor, rule)
                if failure is not None:
                    yield failure

    def _execute_rule(self, descriptor: FieldDescriptor, rule: ValidationRule):
        """Execute a single rule against the field's current value."""
        try:
            value = descriptor.value_of(self.record)
            passed = rule.check(value, self.record)
            message = None if passed else rule.message()
        except Exception as e:
            logger.warning(
                f"Rule {rule.kind or type(rule).__name__} raised on field "
                f"'{descriptor.name}': {type(e).__name__}: {e}"
            )
            passed = False
            message = f"{type(e).__name__}: {e}"

        if passed:
            return None

        logger.debug(f"Validation failed for {descriptor.name}: {message}")
        return FieldFailure(
            field=descriptor.name,
            rule=rule.kind or type(rule).__name__,
            message=message,
        )
