"""
Tests for the built-in validation rules

Each rule is exercised on its own, outside any binding.
"""
import dataclasses
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from http import HTTPStatus
from types import SimpleNamespace

import pytest

from record_validation.errors import RuleConfigurationError
from record_validation.rules import (
    AllowedEnum,
    AllowedValues,
    Contains,
    FutureDate,
    MinLength,
    Negative,
    Positive,
    RequiredIf,
    Url,
)
from record_validation.rules.enums import resolve_enum_type


class Color(Enum):
    Red = 1
    Green = 2
    Blue = 3


NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock():
    return NOW


class TestMinLength:
    """Test MinLength rule."""

    def test_passes_at_and_above_length(self):
        """Strings at or above the minimum pass."""
        rule = MinLength(4)
        assert rule.check("abcd", {})
        assert rule.check("abcdef", {})

    def test_fails_below_length(self):
        """Shorter strings fail."""
        assert not MinLength(4).check("Jo", {})
        assert not MinLength(1).check("", {})

    def test_non_string_fails_closed(self):
        """Non-string values fail instead of raising."""
        rule = MinLength(2)
        assert not rule.check(12345, {})
        assert not rule.check(None, {})
        assert not rule.check(["a", "b", "c"], {})

    def test_zero_length_accepts_empty_string(self):
        """MinLength(0) passes any string."""
        assert MinLength(0).check("", {})

    def test_default_message_is_literal(self):
        """The default message does not depend on the configured length."""
        assert MinLength(10).message() == "Length should be at least 4 characters."

    def test_message_template_uses_parameters(self):
        """A message template can reference the configured length."""
        rule = MinLength(10, message_template="Length should be at least {length} characters.")
        assert rule.message() == "Length should be at least 10 characters."

    def test_invalid_length_rejected(self):
        """Negative or non-integer lengths fail at construction."""
        with pytest.raises(RuleConfigurationError):
            MinLength(-1)
        with pytest.raises(RuleConfigurationError):
            MinLength("4")
        with pytest.raises(RuleConfigurationError):
            MinLength(True)

    def test_unknown_placeholder_rejected(self):
        """Templates naming unknown parameters fail at construction."""
        with pytest.raises(RuleConfigurationError):
            MinLength(4, message_template="At least {minimum} characters")

    def test_bad_field_access_in_template_rejected(self):
        """Attribute and index access on parameters is checked at construction."""
        with pytest.raises(RuleConfigurationError):
            MinLength(4, message_template="{length.nope}")
        with pytest.raises(RuleConfigurationError):
            MinLength(4, message_template="{length[0]}")

    def test_empty_template_is_kept(self):
        """An empty template overrides the default message."""
        assert MinLength(4, message_template="").message() == ""

    def test_rule_is_immutable(self):
        """Rule parameters cannot be reassigned."""
        rule = MinLength(4)
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.length = 2


class TestContains:
    """Test Contains rule."""

    def test_substring_match(self):
        """Strings containing the text pass."""
        assert Contains("Password").check("Password123", {})

    def test_match_is_case_sensitive(self):
        """Matching is ordinal and case-sensitive."""
        assert not Contains("Password").check("password123", {})

    def test_non_string_fails_closed(self):
        """Non-string values fail."""
        assert not Contains("1").check(123, {})
        assert not Contains("a").check(None, {})

    def test_default_message(self):
        """Message is the fixed default."""
        assert Contains("x").message() == "Value should contain upper and lower case characters."

    def test_text_must_be_string(self):
        """Non-string text fails at construction."""
        with pytest.raises(RuleConfigurationError):
            Contains(5)


class TestPositive:
    """Test Positive rule."""

    def test_positive_integer_passes(self):
        """check(5) is True."""
        assert Positive().check(5, {})

    def test_zero_and_negative_fail(self):
        """check(0) and check(-3) are False."""
        assert not Positive().check(0, {})
        assert not Positive().check(-3, {})

    def test_type_mismatch_fails_closed(self):
        """Strings, floats and booleans are not integers."""
        rule = Positive()
        assert not rule.check("5", {})
        assert not rule.check(5.0, {})
        assert not rule.check(True, {})
        assert not rule.check(None, {})

    def test_message(self):
        """Message is fixed."""
        assert Positive().message() == "Value should be positive."


class TestNegative:
    """Test Negative rule."""

    def test_default_threshold_is_zero(self):
        """Without a threshold only values below zero pass."""
        rule = Negative()
        assert rule.check(-1, {})
        assert not rule.check(0, {})
        assert not rule.check(3, {})

    def test_custom_threshold(self):
        """Values below the threshold pass."""
        rule = Negative(10)
        assert rule.check(9, {})
        assert not rule.check(10, {})

    def test_type_mismatch_fails_closed(self):
        """Non-integers fail."""
        assert not Negative().check("-1", {})
        assert not Negative().check(-1.5, {})

    def test_threshold_must_be_integer(self):
        """Non-integer thresholds fail at construction."""
        with pytest.raises(RuleConfigurationError):
            Negative("0")

    def test_message(self):
        """Message is fixed."""
        assert Negative(5).message() == "Value should be negative."


class TestUrl:
    """Test Url rule."""

    def test_http_and_https_pass(self):
        """Absolute http(s) URLs pass."""
        rule = Url()
        assert rule.check("https://example.com", {})
        assert rule.check("http://example.com/path?q=1", {})

    def test_other_schemes_fail(self):
        """ftp and mailto are rejected."""
        rule = Url()
        assert not rule.check("ftp://example.com", {})
        assert not rule.check("mailto:someone@example.com", {})

    def test_not_a_url_fails(self):
        """Plain text and relative paths are rejected."""
        rule = Url()
        assert not rule.check("not a url", {})
        assert not rule.check("/relative/path", {})
        assert not rule.check("https://", {})

    def test_malformed_url_fails_closed(self):
        """URLs the parser rejects fail rather than raise."""
        assert not Url().check("http://[::1", {})

    def test_missing_or_invalid_host_fails(self):
        """A URL needs a host without whitespace and a numeric port."""
        rule = Url()
        assert not rule.check("http://:80", {})
        assert not rule.check("http://exa mple.com", {})
        assert not rule.check("http://example.com:port", {})
        assert not rule.check("http://example.com:99999", {})
        assert rule.check("http://example.com:8080/x", {})

    def test_non_string_fails(self):
        """Non-strings are rejected."""
        assert not Url().check(None, {})

    def test_message(self):
        """Message is fixed."""
        assert Url().message() == "The value must be a valid http or https URL."


class TestFutureDate:
    """Test FutureDate rule with a pinned clock."""

    def test_later_datetime_passes(self):
        """A datetime after now passes."""
        rule = FutureDate(clock=fixed_clock)
        assert rule.check(NOW + timedelta(seconds=1), {})

    def test_now_and_past_fail(self):
        """Now itself is not in the future."""
        rule = FutureDate(clock=fixed_clock)
        assert not rule.check(NOW, {})
        assert not rule.check(NOW - timedelta(days=1), {})

    def test_naive_datetime_is_utc(self):
        """Naive datetimes are compared as UTC."""
        rule = FutureDate(clock=fixed_clock)
        assert rule.check(datetime(2030, 1, 1, 13, 0), {})
        assert not rule.check(datetime(2030, 1, 1, 11, 0), {})

    def test_timezone_is_respected(self):
        """Aware datetimes are converted to UTC before comparison."""
        rule = FutureDate(clock=fixed_clock)
        plus_two = timezone(timedelta(hours=2))
        # 13:00+02:00 is 11:00 UTC
        assert not rule.check(datetime(2030, 1, 1, 13, 0, tzinfo=plus_two), {})

    def test_plain_date(self):
        """Dates are taken at midnight UTC."""
        rule = FutureDate(clock=fixed_clock)
        assert rule.check(date(2030, 1, 2), {})
        assert not rule.check(date(2030, 1, 1), {})

    def test_non_date_fails_closed(self):
        """Strings are not parsed."""
        assert not FutureDate(clock=fixed_clock).check("2099-01-01", {})

    def test_default_clock_reads_current_time(self):
        """Without a clock the current instant is used."""
        rule = FutureDate()
        assert rule.check(datetime.now(timezone.utc) + timedelta(days=1), {})
        assert not rule.check(datetime.now(timezone.utc) - timedelta(days=1), {})

    def test_clock_is_not_a_parameter(self):
        """The clock is not reported as a rule parameter."""
        assert FutureDate(clock=fixed_clock).parameters() == {}

    def test_message(self):
        """Message is fixed."""
        assert FutureDate().message() == "The date must be in the future."


class TestAllowedValues:
    """Test AllowedValues rule."""

    @pytest.fixture
    def rule(self):
        return AllowedValues(["Male", "Female", "Other"])

    def test_case_insensitive_match(self, rule):
        """'male' and 'MALE' both match 'Male'."""
        assert rule.check("male", {})
        assert rule.check("MALE", {})
        assert rule.check("Other", {})

    def test_unknown_value_fails(self, rule):
        """Values outside the set fail."""
        assert not rule.check("Unknown", {})

    def test_non_string_fails(self, rule):
        """Non-strings fail."""
        assert not rule.check(None, {})
        assert not rule.check(1, {})

    def test_message_joins_values(self, rule):
        """Message lists the values in declaration order."""
        assert rule.message() == "Value must be one of: Male, Female, Other."

    def test_values_stored_as_tuple(self, rule):
        """Values are frozen into a tuple."""
        assert rule.values == ("Male", "Female", "Other")

    def test_bare_string_rejected(self):
        """A single string is not a collection of values."""
        with pytest.raises(RuleConfigurationError):
            AllowedValues("Male")

    def test_non_string_members_rejected(self):
        """Every allowed value must be a string."""
        with pytest.raises(RuleConfigurationError):
            AllowedValues(["Male", 1])


class TestAllowedEnum:
    """Test AllowedEnum rule."""

    def test_member_passes(self):
        """Enum members pass."""
        assert AllowedEnum(Color).check(Color.Red, {})

    def test_member_name_passes(self):
        """A string naming a member passes."""
        assert AllowedEnum(Color).check("Red", {})

    def test_unknown_name_fails(self):
        """Names that are not members fail."""
        rule = AllowedEnum(Color)
        assert not rule.check("Purple", {})
        assert not rule.check("red", {})

    def test_none_and_other_types_fail(self):
        """None, raw values and members of other enums fail."""
        rule = AllowedEnum(Color)
        assert not rule.check(None, {})
        assert not rule.check(1, {})
        assert not rule.check(HTTPStatus.OK, {})

    def test_member_value_string_passes(self):
        """Strings equal to a member's value pass for string-valued enums."""

        class Size(Enum):
            SMALL = "s"
            LARGE = "l"

        rule = AllowedEnum(Size)
        assert rule.check("s", {})
        assert rule.check("LARGE", {})
        assert not rule.check("m", {})

    def test_numeric_string_of_member_passes(self):
        """The decimal form of a defined int value passes."""
        rule = AllowedEnum(Color)
        assert rule.check("1", {})
        assert rule.check(" 3 ", {})
        assert not rule.check("4", {})
        assert not rule.check("1.0", {})

    def test_message_names_enum(self):
        """Message names the enum type."""
        assert AllowedEnum(Color).message() == "Value must be a valid Color enum member."

    def test_non_enum_type_rejected(self):
        """Construction with a non-enum type fails fast."""
        with pytest.raises(RuleConfigurationError, match="Type must be an enum."):
            AllowedEnum(str)


class TestResolveEnumType:
    """Test importing enum types from dotted paths."""

    def test_colon_path(self):
        """'module:Name' is imported."""
        assert resolve_enum_type("http:HTTPStatus") is HTTPStatus

    def test_dotted_path(self):
        """'module.Name' is split at the last dot."""
        assert resolve_enum_type("http.HTTPStatus") is HTTPStatus

    def test_not_an_enum(self):
        """Non-enum objects are rejected."""
        with pytest.raises(RuleConfigurationError):
            resolve_enum_type("json:dumps")

    def test_missing_module(self):
        """Unimportable modules are rejected."""
        with pytest.raises(RuleConfigurationError):
            resolve_enum_type("no_such_module_for_tests:Thing")

    def test_missing_attribute(self):
        """Unknown names are rejected."""
        with pytest.raises(RuleConfigurationError):
            resolve_enum_type("http:NoSuchEnum")


class TestRequiredIf:
    """Test RequiredIf used on its own (name lookup on the record)."""

    @pytest.fixture
    def rule(self):
        return RequiredIf("Status", "Active")

    def test_condition_met_and_empty_fails(self, rule):
        """Status Active with an empty or missing value fails."""
        record = {"Status": "Active", "Notes": ""}
        assert not rule.check("", record)
        assert not rule.check(None, record)

    def test_condition_met_and_present_passes(self, rule):
        """Status Active with a value passes."""
        assert rule.check("call back", {"Status": "Active"})
        assert rule.check(0, {"Status": "Active"})

    def test_condition_not_met_passes(self, rule):
        """Status Inactive never requires the field."""
        assert rule.check(None, {"Status": "Inactive"})
        assert rule.check("", {"Status": "Inactive"})

    def test_equality_is_exact(self, rule):
        """'active' does not equal 'Active'."""
        assert rule.check(None, {"Status": "active"})

    def test_missing_conditional_field_passes(self, rule):
        """A record without the conditional field passes."""
        assert rule.check(None, {"Other": "Active"})

    def test_absent_field_reads_as_none(self):
        """A conditional value of None matches a record without the field."""
        rule = RequiredIf("Status", None)
        assert not rule.check(None, {})
        assert not rule.check(None, SimpleNamespace())
        assert rule.check("x", {})
        assert rule.check(None, {"Status": "Active"})

    def test_object_records(self, rule):
        """Attributes are read from non-mapping records."""
        assert not rule.check(None, SimpleNamespace(Status="Active"))
        assert rule.check(None, SimpleNamespace(Status="Inactive"))
        assert rule.check(None, SimpleNamespace())

    def test_message(self, rule):
        """Message names the condition."""
        assert rule.message() == "This field is required when Status is Active."

    def test_unbound_by_default(self, rule):
        """Rules start unbound."""
        assert not rule.is_bound

    def test_empty_conditional_field_rejected(self):
        """The conditional field name is required."""
        with pytest.raises(RuleConfigurationError):
            RequiredIf("", "Active")


class TestDescribe:
    """Test rule introspection."""

    def test_describe(self):
        """describe() reports kind, parameters and message."""
        assert MinLength(4).describe() == {
            "kind": "min_length",
            "parameters": {"length": 4},
            "message": "Length should be at least 4 characters.",
        }

    def test_equal_rules(self):
        """Rules with equal parameters compare equal."""
        assert AllowedValues(["a", "b"]) == AllowedValues(("a", "b"))
        assert MinLength(4) != MinLength(5)
