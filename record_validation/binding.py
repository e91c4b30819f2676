"""
Field-to-rules bindings.

A Binding is the static metadata of one record type: its fields in
declaration order and, for each field, the ordered rules that apply to it.
Bindings are assembled with BindingBuilder (directly or by the rule loader
from a rule table) and are read-only once built.

Example:
    binding = (
        BindingBuilder("user")
        .field("username", MinLength(4), type=FieldType.STRING)
        .field("age", Positive(), type=FieldType.INTEGER)
        .build()
    )
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .errors import BindingError
from .rules.base import ValidationRule
from .rules.conditional import RequiredIf

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """Semantic type of a record field."""

    STRING = "string"
    INTEGER = "integer"
    DATETIME = "datetime"
    ENUM = "enum"
    ANY = "any"


def field_getter(name: str) -> Callable[[Any], Any]:
    """
    Build the default accessor for a field.

    Mappings are read by key, everything else by attribute. A field the
    record does not carry reads as None.
    """

    def get(record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(name)
        return getattr(record, name, None)

    get.__name__ = f"get_{name}"
    return get


@dataclass(frozen=True)
class FieldDescriptor:
    """Name, semantic type and value accessor of one record field."""

    name: str
    type: FieldType = FieldType.ANY
    accessor: Callable[[Any], Any] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise BindingError(f"Field name must be a non-empty string, got {self.name!r}")
        try:
            object.__setattr__(self, "type", FieldType(self.type))
        except ValueError:
            raise BindingError(
                f"Unknown type {self.type!r} for field '{self.name}'. "
                f"Expected one of: {', '.join(t.value for t in FieldType)}"
            )
        if self.accessor is None:
            object.__setattr__(self, "accessor", field_getter(self.name))

    def value_of(self, record: Any) -> Any:
        return self.accessor(record)


class Binding:
    """Immutable ordered mapping from field name to its ordered rules."""

    def __init__(
        self,
        fields: Tuple[FieldDescriptor, ...],
        rules: Dict[str, Tuple[ValidationRule, ...]],
        record_type: Optional[str] = None,
        description: str = "",
    ):
        self._fields = tuple(fields)
        self._by_name = MappingProxyType({f.name: f for f in self._fields})
        self._rules = MappingProxyType(
            {f.name: tuple(rules.get(f.name, ())) for f in self._fields}
        )
        self.record_type = record_type
        self.description = description

    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        """Field descriptors in declaration order."""
        return self._fields

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self._fields]

    def descriptor(self, field_name: str) -> FieldDescriptor:
        """
        Return the descriptor of a declared field.

        Raises:
            KeyError: If the field is not declared
        """
        return self._by_name[field_name]

    def rules_for(self, field_name: str) -> Tuple[ValidationRule, ...]:
        """Return the ordered rules of a field (empty for unknown fields)."""
        return self._rules.get(field_name, ())

    def describe(self) -> Dict[str, Any]:
        """Return discovery metadata: description and per-field rules."""
        return {
            "record_type": self.record_type,
            "description": self.description,
            "fields": [
                {
                    "name": f.name,
                    "type": f.type.value,
                    "rules": [rule.describe() for rule in self._rules[f.name]],
                }
                for f in self._fields
            ],
        }

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._by_name

    def __repr__(self) -> str:
        return f"Binding(record_type={self.record_type!r}, fields={self.field_names!r})"


class BindingBuilder:
    """Assembles a Binding field by field, in declaration order."""

    def __init__(
        self,
        record_type: Optional[str] = None,
        description: str = "",
        strict_conditional_fields: bool = True,
    ):
        """
        Args:
            record_type: Name of the record type the binding describes
            description: Free text shown by discovery
            strict_conditional_fields: When False, cross-field rules that
                refer to undeclared fields pass instead of failing the build
        """
        self.record_type = record_type
        self.description = description
        self.strict_conditional_fields = strict_conditional_fields
        self._fields: Dict[str, FieldDescriptor] = {}
        self._rules: Dict[str, List[ValidationRule]] = {}

    def field(
        self,
        name: str,
        *rules: ValidationRule,
        type: FieldType = FieldType.ANY,
        accessor: Optional[Callable[[Any], Any]] = None,
    ) -> "BindingBuilder":
        """
        Declare a field and its rules.

        Raises:
            BindingError: If the field is already declared or a rule is not a
                ValidationRule
        """
        if name in self._fields:
            raise BindingError(f"Field '{name}' is already declared")
        self._fields[name] = FieldDescriptor(name, type, accessor)
        self._rules[name] = []
        return self.rules(name, *rules)

    def rules(self, name: str, *rules: ValidationRule) -> "BindingBuilder":
        """Append rules to an already declared field."""
        if name not in self._fields:
            raise BindingError(f"Field '{name}' must be declared before adding rules")
        for rule in rules:
            if not isinstance(rule, ValidationRule):
                raise BindingError(
                    f"Field '{name}': expected a ValidationRule, got {rule!r}"
                )
            self._rules[name].append(rule)
        return self

    def build(self) -> Binding:
        """
        Resolve every rule against the declared fields and freeze the result.

        Raises:
            BindingError: If a cross-field rule cannot be resolved
        """
        declared = MappingProxyType(dict(self._fields))
        resolved = {}
        for name, rules in self._rules.items():
            bound = []
            for rule in rules:
                if (
                    isinstance(rule, RequiredIf)
                    and not rule.optional
                    and not self.strict_conditional_fields
                ):
                    rule = replace(rule, optional=True)
                try:
                    bound.append(rule.bind(declared))
                except BindingError as e:
                    raise BindingError(f"Field '{name}': {e}")
            resolved[name] = tuple(bound)

        binding = Binding(
            tuple(self._fields.values()),
            resolved,
            record_type=self.record_type,
            description=self.description,
        )
        logger.debug(
            f"Built binding for {self.record_type or 'record'} "
            f"({len(binding)} fields, {sum(len(r) for r in resolved.values())} rules)"
        )
        return binding

