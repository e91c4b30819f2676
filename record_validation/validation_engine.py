from dataclasses import dataclass
from itertools import islice
from typing import Any, Dict, Optional, Tuple

from .binding import Binding
from .rule_executor import FieldFailure, RuleExecutor


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one record.

    ``field``, ``message`` and ``rule`` describe the first failure in
    declared field-then-rule order and are None on success. ``failures``
    holds that single failure in first-failure mode, or every failure when
    produced by ``ValidationEngine.validate_all``.
    """

    success: bool
    field: Optional[str] = None
    message: Optional[str] = None
    rule: Optional[str] = None
    failures: Tuple[FieldFailure, ...] = ()

    @classmethod
    def from_failures(cls, failures) -> "ValidationResult":
        failures = tuple(failures)
        if not failures:
            return cls(success=True)
        first = failures[0]
        return cls(
            success=False,
            field=first.field,
            message=first.message,
            rule=first.rule,
            failures=failures,
        )

    def __bool__(self) -> bool:
        return self.success

    def as_tuple(self) -> Tuple[bool, Optional[str], Optional[str]]:
        """Return (success, field, message)."""
        return (self.success, self.field, self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "field": self.field,
            "message": self.message,
            "rule": self.rule,
            "failures": [f.to_dict() for f in self.failures],
        }


class ValidationEngine:
    """Core validation logic: stateless, no I/O, safe to share between threads"""

    def validate(self, record: Any, binding: Binding) -> ValidationResult:
        """
        Validate a record, stopping at the first violated rule.

        Args:
            record: Mapping or object exposing the bound fields
            binding: Field-to-rules binding of the record's type

        Returns:
            ValidationResult naming the first failing field and its message,
            or a successful result with no message
        """
        executor = RuleExecutor(binding, record)
        return ValidationResult.from_failures(islice(executor.iter_failures(), 1))

    def validate_all(self, record: Any, binding: Binding) -> ValidationResult:
        """
        Validate a record and collect every violated rule.

        The first failure is still reported in ``field``/``message``, so the
        result reads the same as ``validate`` apart from ``failures``.
        """
        executor = RuleExecutor(binding, record)
        return ValidationResult.from_failures(executor.iter_failures())

    def is_valid(self, record: Any, binding: Binding) -> bool:
        return self.validate(record, binding).success


_default_engine = ValidationEngine()


def validate(record: Any, binding: Binding) -> ValidationResult:
    """Validate ``record`` against ``binding`` with first-failure semantics."""
    return _default_engine.validate(record, binding)


def validate_all(record: Any, binding: Binding) -> ValidationResult:
    """Validate ``record`` against ``binding`` and collect every failure."""
    return _default_engine.validate_all(record, binding)
