"""
Abstract base class for validation rules.

All rules inherit from ValidationRule, declare a registry ``kind`` and a
``default_message``, and implement ``check``. Concrete rules are frozen
dataclasses: parameters are fixed at construction and a rule instance can be
shared by any number of bindings and threads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Mapping, Optional

from ..errors import RuleConfigurationError


@dataclass(frozen=True)
class ValidationRule(ABC):
    """
    Abstract base class for all validation rules.

    The evaluator calls ``check(value, record)`` with the current value of the
    bound field and the record it was read from. A value of the wrong type is
    a failed check, never an error.

    ``message_template`` overrides ``default_message``. Both are rendered with
    ``str.format`` against the rule's parameters, so a template such as
    ``"Length should be at least {length} characters."`` reflects the
    configured value.
    """

    kind: ClassVar[str] = ""
    default_message: ClassVar[str] = "Validation failed."

    message_template: Optional[str] = field(
        default=None, kw_only=True, compare=False
    )

    def __post_init__(self):
        if self.message_template is not None:
            if not isinstance(self.message_template, str):
                raise RuleConfigurationError(
                    f"{type(self).__name__}: message template must be a string"
                )
            try:
                self.message_template.format(**self._message_context())
            except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
                raise RuleConfigurationError(
                    f"{type(self).__name__}: invalid message template "
                    f"{self.message_template!r}: {e}"
                )

    @abstractmethod
    def check(self, value: Any, record: Any) -> bool:
        """
        Evaluate the rule.

        Args:
            value: Current value of the field the rule is bound to
            record: The record being validated (for cross-field rules)

        Returns:
            True if the value satisfies the rule
        """

    def message(self) -> str:
        """Return the rendered failure message."""
        template = self.default_message if self.message_template is None else self.message_template
        return template.format(**self._message_context())

    def parameters(self) -> Dict[str, Any]:
        """Return the construction parameters of this rule."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.init
            and f.name != "message_template"
            and f.metadata.get("parameter", True)
        }

    def bind(self, binding_fields: Mapping[str, Any]) -> "ValidationRule":
        """
        Resolve the rule against the fields of a binding.

        Called once by BindingBuilder.build(). Rules that consult sibling
        fields return a resolved copy; everything else returns itself.
        """
        return self

    def describe(self) -> Dict[str, Any]:
        """Return kind, parameters and message for discovery output."""
        return {
            "kind": self.kind,
            "parameters": self.parameters(),
            "message": self.message(),
        }

    def _message_context(self) -> Dict[str, Any]:
        return self.parameters()


def is_integer(value: Any) -> bool:
    """True for ints, excluding bool."""
    return isinstance(value, int) and not isinstance(value, bool)
