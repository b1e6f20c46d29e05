"""Tests for field types, casting and field declaration parsing."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from docforge.core.errors import CastError
from docforge.core.types import (
    BOOLEAN,
    DATE,
    NUMBER,
    STRING,
    TypeDescriptor,
    TypeKind,
    copy_default,
    list_of,
    object_of,
    resolve_type,
)
from docforge.schema.fields import parse_field, parse_fields


# =============================================================================
# Primitive casts
# =============================================================================


class TestNumberCast:
    def test_numeric_strings(self):
        assert NUMBER.cast("42") == 42
        assert isinstance(NUMBER.cast("42"), int)
        assert NUMBER.cast(" 4.5 ") == 4.5

    def test_numbers_pass_through(self):
        assert NUMBER.cast(7) == 7
        assert NUMBER.cast(Decimal("1.5")) == Decimal("1.5")

    def test_none_passes_through(self):
        assert NUMBER.cast(None) is None

    @pytest.mark.parametrize("value", ["abc", "", "inf", "nan", True, [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(CastError):
            NUMBER.cast(value)


class TestBooleanCast:
    @pytest.mark.parametrize("value", ["true", "YES", "1", "on", 1, True])
    def test_truthy_literals(self, value):
        assert BOOLEAN.cast(value) is True

    @pytest.mark.parametrize("value", ["false", "No", "0", "off", "", 0, False])
    def test_falsy_literals(self, value):
        assert BOOLEAN.cast(value) is False

    def test_rejects_unknown_literal(self):
        with pytest.raises(CastError):
            BOOLEAN.cast("maybe")


class TestStringCast:
    def test_numbers_and_booleans(self):
        assert STRING.cast(12) == "12"
        assert STRING.cast(True) == "true"

    def test_dates_use_iso_format(self):
        assert STRING.cast(date(2024, 1, 2)) == "2024-01-02"

    def test_rejects_containers(self):
        with pytest.raises(CastError):
            STRING.cast({"a": 1})


class TestDateCast:
    def test_iso_string_with_zulu(self):
        value = DATE.cast("2024-01-02T03:04:05Z")
        assert value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_epoch_milliseconds(self):
        assert DATE.cast(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_date_becomes_midnight(self):
        assert DATE.cast(date(2024, 5, 6)) == datetime(2024, 5, 6)

    def test_rejects_garbage(self):
        with pytest.raises(CastError):
            DATE.cast("not a date")


# =============================================================================
# Lists
# =============================================================================


class TestListCast:
    def test_elements_are_cast(self):
        assert list_of(NUMBER).cast(["1", 2, "3"]) == [1, 2, 3]

    def test_failing_element_reports_index(self):
        with pytest.raises(CastError) as exc_info:
            list_of(NUMBER).cast(["1", 2, "x"])
        assert exc_info.value.index == 2
        assert "Element 2" in str(exc_info.value)

    def test_field_attribution_keeps_index(self):
        with pytest.raises(CastError) as exc_info:
            list_of(NUMBER).cast(["x"])
        error = exc_info.value.for_field("scores")
        assert error.field == "scores"
        assert str(error).startswith('Cannot cast "scores.0"')

    def test_tuple_becomes_list(self):
        assert list_of(STRING).cast(("a", "b")) == ["a", "b"]

    def test_untyped_elements_pass_through(self):
        assert list_of().cast([1, "a", None]) == [1, "a", None]

    @pytest.mark.parametrize("value", ["abc", {"a": 1}, 5])
    def test_rejects_non_lists(self, value):
        with pytest.raises(CastError):
            list_of(NUMBER).cast(value)


# =============================================================================
# Type-level validation
# =============================================================================


class TestTypeValidate:
    def test_valid_value_has_no_details(self):
        assert NUMBER.validate(3, "age") == []

    def test_invalid_value_detail(self):
        details = NUMBER.validate("3", "age")
        assert len(details) == 1
        assert details[0].path == "age"
        assert details[0].kind == "number"
        assert details[0].message == '"age" has to be a number'

    def test_list_elements_use_indexed_paths(self):
        details = list_of(NUMBER).validate([1, "x", 3], "scores")
        assert [d.path for d in details] == ["scores.1"]

    def test_nan_is_not_a_number(self):
        assert NUMBER.validate(float("nan"), "n") != []

    def test_object_without_resolver(self):
        details = object_of("Address").validate(object(), "address")
        assert details[0].path == "address"
        assert "Address" in details[0].message

    def test_unknown_kind_rejected(self):
        odd = TypeDescriptor(kind="matrix")
        with pytest.raises(ValueError, match="Unhandled type kind: matrix"):
            odd.cast(1)
        with pytest.raises(ValueError, match="Unhandled type kind: matrix"):
            odd.validate(1, "m")


# =============================================================================
# Shorthand resolution
# =============================================================================


class TestResolveType:
    def test_primitive_names(self):
        assert resolve_type("string") is STRING
        assert resolve_type("number") is NUMBER

    def test_python_types(self):
        assert resolve_type(int) is NUMBER
        assert resolve_type(bool) is BOOLEAN
        assert resolve_type(datetime) is DATE

    def test_list_shorthand(self):
        descriptor = resolve_type(["number"])
        assert descriptor.kind == TypeKind.LIST
        assert descriptor.element is NUMBER
        assert resolve_type([]).element is None

    def test_unknown_name_is_class_reference(self):
        descriptor = resolve_type("Address")
        assert descriptor.kind == TypeKind.OBJECT
        assert descriptor.class_name == "Address"
        assert descriptor.is_class

    def test_list_of_class_is_class(self):
        descriptor = resolve_type(["Address"])
        assert descriptor.is_class
        assert descriptor.referenced_class == "Address"

    def test_none_is_untyped(self):
        assert resolve_type(None) is None

    @pytest.mark.parametrize("spec", ["object", "list", "", ["a", "b"], 5])
    def test_rejects_bad_shorthand(self, spec):
        with pytest.raises(ValueError):
            resolve_type(spec)

    def test_copy_default_isolates_mutables(self):
        original = {"tags": ["a"]}
        copied = copy_default(original)
        copied["tags"].append("b")
        assert original == {"tags": ["a"]}


# =============================================================================
# Field declarations
# =============================================================================


class TestParseField:
    def test_bare_type(self):
        field = parse_field("age", "number")
        assert field.type is NUMBER
        assert not field.optional

    def test_full_declaration(self):
        field = parse_field(
            "email",
            {"type": "string", "optional": True, "immutable": True, "index": -1},
        )
        assert field.optional and field.immutable
        assert field.index == -1

    def test_static_default_is_cast(self):
        assert parse_field("count", {"type": "number", "default": "5"}).default == 5

    def test_callable_default_is_called(self):
        field = parse_field("tags", {"type": ["string"], "default": list})
        first, second = field.get_default(), field.get_default()
        assert first == [] and first is not second

    @pytest.mark.parametrize("name", ["_id", "_type", "a.b", "$", ""])
    def test_rejects_bad_names(self, name):
        with pytest.raises(ValueError):
            parse_field(name, "string")

    def test_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="unknown keys"):
            parse_field("age", {"type": "number", "min": 0})

    def test_rejects_bad_index(self):
        with pytest.raises(ValueError):
            parse_field("age", {"type": "number", "index": 2})

    def test_list_of_names(self):
        fields = parse_fields(["a", "b"])
        assert list(fields) == ["a", "b"]
        assert fields["a"].type is None
