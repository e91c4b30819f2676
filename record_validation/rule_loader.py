"""
Rule Loader - Bindings from Declarative Rule Tables

Builds a Binding from a rule table: a plain dict (usually parsed from YAML)
naming a record type, its fields in order, and each field's rules in order.

## Rule Table Format

```yaml
record_type: user
description: Account sign-up form
fields:
  - name: username
    type: string
    rules:
      - kind: min_length
        length: 4
  - name: status
    type: enum
    rules:
      - kind: allowed_enum
        enum: "myapp.models:Status"
  - name: closed_at
    type: datetime
    rules:
      - kind: required_if
        conditional_field: status
        conditional_value: CLOSED
        message: "closed_at is required once the account is closed."
```

## How It Works

1. The table is checked against RULE_TABLE_SCHEMA with jsonschema
2. Each rule entry's ``kind`` is looked up in the kind registry
3. Remaining keys become constructor keyword arguments; ``message`` maps
   to ``message_template`` and ``enum`` is imported into ``enum_type``
4. Fields and rules are fed to a BindingBuilder in table order

Custom rule classes join the registry with ``register_rule_kind``.
"""

import logging
from typing import Any, Dict, Optional, Type

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from .binding import Binding, BindingBuilder, FieldType
from .errors import RuleConfigurationError
from .rules import BUILTIN_RULES
from .rules.base import ValidationRule
from .rules.enums import resolve_enum_type

logger = logging.getLogger(__name__)


def _rule_schema(required: list, properties: dict = None) -> dict:
    return {"required": required, "properties": properties or {}}


RULE_TABLE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["record_type", "fields"],
    "properties": {
        "record_type": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "fields": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "type": {"enum": [t.value for t in FieldType]},
                    "rules": {"type": "array", "items": {"$ref": "#/definitions/rule"}},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
    "definitions": {
        "rule": {
            "type": "object",
            "required": ["kind"],
            "properties": {
                "kind": {"type": "string", "minLength": 1},
                "message": {"type": "string"},
            },
            "allOf": [
                {
                    "if": {"properties": {"kind": {"const": "min_length"}}},
                    "then": _rule_schema(
                        ["length"], {"length": {"type": "integer", "minimum": 0}}
                    ),
                },
                {
                    "if": {"properties": {"kind": {"const": "contains"}}},
                    "then": _rule_schema(["text"], {"text": {"type": "string"}}),
                },
                {
                    "if": {"properties": {"kind": {"const": "negative"}}},
                    "then": _rule_schema([], {"threshold": {"type": "integer"}}),
                },
                {
                    "if": {"properties": {"kind": {"const": "required_if"}}},
                    "then": _rule_schema(
                        ["conditional_field", "conditional_value"],
                        {
                            "conditional_field": {"type": "string", "minLength": 1},
                            "optional": {"type": "boolean"},
                        },
                    ),
                },
                {
                    "if": {"properties": {"kind": {"const": "allowed_values"}}},
                    "then": _rule_schema(
                        ["values"],
                        {"values": {"type": "array", "items": {"type": "string"}}},
                    ),
                },
                {
                    "if": {"properties": {"kind": {"const": "allowed_enum"}}},
                    "then": _rule_schema(["enum"], {"enum": {"type": "string"}}),
                },
            ],
        }
    },
}

_table_validator = Draft7Validator(RULE_TABLE_SCHEMA)

# kind -> rule class
_rule_kinds: Dict[str, Type[ValidationRule]] = {rule.kind: rule for rule in BUILTIN_RULES}


def register_rule_kind(rule_class: Type[ValidationRule], kind: Optional[str] = None) -> Type[ValidationRule]:
    """
    Make a rule class available to rule tables under its kind.

    Usable as a class decorator.

    Raises:
        RuleConfigurationError: If the class is not a ValidationRule, has no
            kind, or the kind is taken by a different class
    """
    if not (isinstance(rule_class, type) and issubclass(rule_class, ValidationRule)):
        raise RuleConfigurationError(f"{rule_class!r} is not a ValidationRule subclass")
    kind = kind or rule_class.kind
    if not kind:
        raise RuleConfigurationError(f"{rule_class.__name__} does not declare a kind")
    existing = _rule_kinds.get(kind)
    if existing is not None and existing is not rule_class:
        raise RuleConfigurationError(
            f"Rule kind '{kind}' is already registered to {existing.__name__}"
        )
    _rule_kinds[kind] = rule_class
    logger.debug(f"Registered rule kind '{kind}' -> {rule_class.__name__}")
    return rule_class


def get_rule_class(kind: str) -> Type[ValidationRule]:
    """
    Look up a rule class by kind.

    Raises:
        RuleConfigurationError: If no rule class is registered for the kind
    """
    try:
        return _rule_kinds[kind]
    except KeyError:
        raise RuleConfigurationError(
            f"Unknown rule kind '{kind}'. Known kinds: {', '.join(sorted(_rule_kinds))}"
        )


def rule_kinds() -> Dict[str, Type[ValidationRule]]:
    """Return a snapshot of the kind registry."""
    return dict(_rule_kinds)


class RuleLoader:
    """Builds bindings from rule tables"""

    def __init__(self, strict_conditional_fields: bool = True):
        """
        Initialize rule loader.

        Args:
            strict_conditional_fields: Passed to every BindingBuilder; when
                False, required_if rules naming undeclared fields pass
        """
        self.strict_conditional_fields = strict_conditional_fields

    def load_binding(self, table: Dict[str, Any]) -> Binding:
        """
        Build a binding from one rule table.

        Args:
            table: Rule table dict (see module docstring)

        Returns:
            Immutable Binding

        Raises:
            RuleConfigurationError: If the table is malformed or names an
                unknown rule kind
            BindingError: If fields are duplicated or a required_if rule
                cannot be resolved
        """
        self.check_table(table)

        builder = BindingBuilder(
            table["record_type"],
            description=table.get("description", ""),
            strict_conditional_fields=self.strict_conditional_fields,
        )
        for field_config in table["fields"]:
            rules = [
                self.load_rule(rule_config)
                for rule_config in field_config.get("rules", [])
            ]
            builder.field(
                field_config["name"],
                *rules,
                type=field_config.get("type", FieldType.ANY.value),
            )

        binding = builder.build()
        logger.info(
            f"Loaded rule table '{binding.record_type}' ({len(binding)} fields)"
        )
        return binding

    def load_rule(self, rule_config: Dict[str, Any]) -> ValidationRule:
        """
        Instantiate one rule from its table entry.

        Raises:
            RuleConfigurationError: If the kind is unknown or the parameters
                do not fit the rule class
        """
        params = dict(rule_config)
        kind = params.pop("kind")
        rule_class = get_rule_class(kind)

        if "message" in params:
            params["message_template"] = params.pop("message")
        if "enum" in params:
            params["enum_type"] = resolve_enum_type(params.pop("enum"))

        try:
            return rule_class(**params)
        except TypeError as e:
            raise RuleConfigurationError(f"Invalid parameters for rule '{kind}': {e}")

    def check_table(self, table: Any) -> None:
        """
        Check a rule table against RULE_TABLE_SCHEMA.

        Raises:
            RuleConfigurationError: On the first schema violation
        """
        e = best_match(_table_validator.iter_errors(table))
        if e is not None:
            error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
            raise RuleConfigurationError(
                f"Rule table validation failed at {error_path}: {e.message}"
            )
