"""
Public API for record-validation

This is the "front door" - validates records by record-type name using the
bindings built from the configured rule tables.
"""

import logging
import time
from typing import Any, Dict, Optional

from .binding import Binding
from .config_loader import ConfigLoader
from .rule_loader import RuleLoader
from .validation_engine import ValidationEngine, ValidationResult

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Main validation service class.

    Holds one binding per record type, built from the rule tables named in
    local-config.yaml plus any binding registered in code.

    Auto-refresh: rule tables are reloaded when older than
    rule_tables_max_age_seconds (checked at most every CHECK_INTERVAL).

    Example:
        from record_validation import ValidationService

        service = ValidationService()
        result = service.validate("user", {"username": "Jo", ...})
        if not result:
            print(f"{result.field}: {result.message}")
    """

    # Debounce interval: how often the staleness check runs (seconds)
    CHECK_INTERVAL = 300

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize validation service.

        The service:
        1. Loads local-config.yaml (bundled, or the file at config_path)
        2. Loads every rule table it lists
        3. Builds one binding per table

        Args:
            config_path: Optional path to a local config YAML file

        Raises:
            RuleConfigurationError: If a rule table is malformed
            BindingError: If a rule table cannot be turned into a binding
        """
        self.config_path = config_path
        self.engine = ValidationEngine()
        self._registered: Dict[str, Binding] = {}
        self._initialize()

    def _initialize(self, refresh: bool = False):
        """
        Load config and rule tables, then swap them in.

        Everything is built into locals first, so a failure leaves the
        service as it was.
        """
        config_loader = ConfigLoader(self.config_path, refresh=refresh)
        rule_loader = RuleLoader(
            strict_conditional_fields=config_loader.get_strict_conditional_fields()
        )

        bindings = {}
        for table in config_loader.get_rule_tables():
            binding = rule_loader.load_binding(table)
            if binding.record_type in bindings:
                logger.warning(
                    f"Rule table for '{binding.record_type}' defined more than once, "
                    f"using the last one"
                )
            bindings[binding.record_type] = binding

        config_loader.commit_cache()
        self.config_loader = config_loader
        self.rule_loader = rule_loader
        self._max_age = config_loader.get_rule_tables_max_age()
        self._table_bindings = bindings

        # Track last freshness check time
        self._last_check_time = time.time()

    def _check_and_reload_if_stale(self):
        """
        Reload rule tables if they exceed their max age (debounced).

        Checks at most every CHECK_INTERVAL seconds.
        """
        now = time.time()
        if now - self._last_check_time < self.CHECK_INTERVAL:
            return
        self._last_check_time = now

        age = self.config_loader.get_rule_tables_age()
        if age and age > self._max_age:
            logger.info(f"Rule tables stale ({age:.0f}s > {self._max_age:.0f}s), reloading")
            try:
                self.reload_config()
            except Exception as e:
                logger.warning(f"Reload failed, keeping current rule tables: {e}")

    def validate(self, record_type: str, record: Any) -> ValidationResult:
        """
        Validate a record, reporting the first violated rule.

        Args:
            record_type: Name of the record type (e.g. "user")
            record: Mapping or object exposing the record's fields

        Returns:
            ValidationResult; falsy on failure, with .field and .message
            naming the first violation in declared field-then-rule order

        Raises:
            ValueError: If no binding exists for record_type

        Example:
            result = service.validate("user", {
                "username": "JohnDoe",
                "password": "Password123",
                "age": 25,
                "gender": "Male",
            })
            assert result.success
        """
        self._check_and_reload_if_stale()
        return self.engine.validate(record, self.get_binding(record_type))

    def validate_all(self, record_type: str, record: Any) -> ValidationResult:
        """
        Validate a record and collect every violated rule in result.failures.

        Raises:
            ValueError: If no binding exists for record_type
        """
        self._check_and_reload_if_stale()
        return self.engine.validate_all(record, self.get_binding(record_type))

    def is_valid(self, record_type: str, record: Any) -> bool:
        return self.validate(record_type, record).success

    def register_binding(self, record_type: str, binding: Binding) -> None:
        """
        Register a binding built in code.

        Registered bindings take precedence over rule tables of the same
        record type and survive reload_config().
        """
        if not isinstance(binding, Binding):
            raise TypeError(f"Expected a Binding, got {type(binding).__name__}")
        self._registered[record_type] = binding
        logger.info(f"Registered binding for '{record_type}' ({len(binding)} fields)")

    def get_binding(self, record_type: str) -> Binding:
        """
        Return the binding used for a record type.

        Raises:
            ValueError: If no binding exists for record_type
        """
        binding = self._registered.get(record_type)
        if binding is None:
            binding = self._table_bindings.get(record_type)
        if binding is None:
            known = sorted(set(self._registered) | set(self._table_bindings))
            raise ValueError(
                f"Unknown record type: {record_type}. "
                f"Known record types: {', '.join(known) or '(none)'}"
            )
        return binding

    def discover_bindings(self) -> Dict[str, Dict[str, Any]]:
        """
        Discover every record type with its fields and rules.

        Returns:
            Dict mapping record_type to:
                - description: Free text from the rule table
                - source: "table" or "registered"
                - fields: [{name, type, rules: [{kind, parameters, message}]}]

        Example:
            for record_type, info in service.discover_bindings().items():
                print(f"{record_type}: {info['description']}")
                for field in info['fields']:
                    print(f"  {field['name']}: {[r['kind'] for r in field['rules']]}")
        """
        self._check_and_reload_if_stale()

        result = {}
        for source, bindings in (("table", self._table_bindings), ("registered", self._registered)):
            for record_type, binding in bindings.items():
                described = binding.describe()
                result[record_type] = {
                    "description": described["description"],
                    "source": source,
                    "fields": described["fields"],
                }
        return result

    def reload_config(self) -> None:
        """
        Reload local config and rule tables from their sources.

        Remote tables are fetched again and replace the cached copies only
        once every table has been turned into a binding. On failure the
        current tables stay in use and the error propagates. Bindings
        registered in code are kept.
        """
        logger.info("Reloading rule tables")
        self._initialize(refresh=True)

    def get_config_age(self) -> Optional[float]:
        """Return the age of the loaded rule tables in seconds."""
        return self.config_loader.get_rule_tables_age()
