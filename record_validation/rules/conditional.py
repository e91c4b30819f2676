"""
Cross-field rules.

RequiredIf makes a field mandatory only while a sibling field holds a given
value. When a binding is built the rule is re-bound to the sibling's accessor,
so evaluation never looks fields up by name. A rule that was never bound
(used on its own, outside a binding) falls back to a name lookup on the
record. Either way an absent field reads as None.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping as MappingType, Optional

from ..errors import BindingError, RuleConfigurationError
from .base import ValidationRule


def _lookup(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class RequiredIf(ValidationRule):
    """
    Field is required when ``conditional_field`` equals ``conditional_value``.

    "Required" means not None and not empty once converted to a string. The
    condition uses exact equality, no case folding.

    With ``optional=True`` a conditional field that the binding does not
    declare makes the condition inapplicable and the rule always passes.
    Otherwise binding fails.
    """

    kind = "required_if"
    default_message = "This field is required when {conditional_field} is {conditional_value}."

    conditional_field: str
    conditional_value: Any
    optional: bool = False

    _accessor: Optional[Callable[[Any], Any]] = field(
        default=None, init=False, repr=False, compare=False
    )
    _bound: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.conditional_field, str) or not self.conditional_field:
            raise RuleConfigurationError(
                f"RequiredIf: conditional_field must be a non-empty string, "
                f"got {self.conditional_field!r}"
            )
        super().__post_init__()

    @property
    def is_bound(self) -> bool:
        return self._bound

    def bind(self, binding_fields: MappingType[str, Any]) -> "RequiredIf":
        """
        Resolve the conditional field against the binding's descriptors.

        Raises:
            BindingError: If the field is not declared and the rule is not
                optional
        """
        descriptor = binding_fields.get(self.conditional_field)
        if descriptor is None and not self.optional:
            raise BindingError(
                f"required_if refers to unknown field '{self.conditional_field}'. "
                f"Declared fields: {', '.join(binding_fields) or '(none)'}"
            )
        bound = replace(self)
        object.__setattr__(
            bound, "_accessor", descriptor.accessor if descriptor is not None else None
        )
        object.__setattr__(bound, "_bound", True)
        return bound

    def condition_met(self, record: Any) -> bool:
        if self._bound:
            if self._accessor is None:
                return False
            return self._accessor(record) == self.conditional_value

        return _lookup(record, self.conditional_field) == self.conditional_value

    def check(self, value: Any, record: Any) -> bool:
        if not self.condition_met(record):
            return True
        return value is not None and str(value) != ""
