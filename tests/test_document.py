"""Tests for document value resolution, casting on set and dirty tracking."""

import pytest

from docforge.core.config import DocforgeConfig
from docforge.core.errors import CastError
from docforge.registry import ClassRegistry


@pytest.fixture
def registry():
    return ClassRegistry(config=DocforgeConfig())


@pytest.fixture
def user_cls(registry):
    return registry.create_class({
        "name": "User",
        "fields": {
            "name": "string",
            "age": {"type": "number", "default": 0},
            "tags": {"type": ["string"], "default": []},
            "code": {"type": "string", "immutable": True},
            "active": {"type": "boolean", "default": False},
        },
    })


@pytest.fixture
def person_cls(registry):
    registry.create_class({"name": "Address", "fields": {"city": "string"}})
    return registry.create_class({
        "name": "Person",
        "fields": {"address": "Address", "addresses": ["Address"]},
    })


# =============================================================================
# Reading
# =============================================================================


class TestGet:
    def test_defaults(self, user_cls):
        user = user_cls()
        assert user.get("age") == 0
        assert user.get("active") is False
        assert user.get("name") is None

    def test_mutable_default_is_per_instance(self, user_cls):
        first, second = user_cls(), user_cls()
        first.get("tags").append("x")

        assert first.get("tags") == ["x"]
        assert second.get("tags") == []

    def test_id_is_none_until_set(self, user_cls):
        user = user_cls()
        assert user.get("_id") is None
        assert "_id" not in user.get()

    def test_get_all_fields(self, user_cls):
        user = user_cls({"_id": "u1", "name": "Ann"})
        assert user.get() == {
            "_id": "u1",
            "name": "Ann",
            "age": 0,
            "tags": [],
            "code": None,
            "active": False,
        }

    def test_get_several(self, user_cls):
        user = user_cls({"name": "Ann"})
        assert user.get(["name", "age"]) == {"name": "Ann", "age": 0}

    def test_values_are_cast_on_construction(self, user_cls):
        user = user_cls({"age": "31", "active": "yes"})
        assert user.get("age") == 31
        assert user.get("active") is True
        assert not user.is_modified()

    def test_unknown_attributes_pass_through(self, user_cls):
        assert user_cls({"legacy": 1}).get("legacy") == 1

    def test_construction_cast_error_names_field(self, user_cls):
        with pytest.raises(CastError, match='Cannot cast "age"'):
            user_cls({"age": "old"})


# =============================================================================
# Writing
# =============================================================================


class TestSet:
    def test_set_casts_value(self, user_cls):
        user = user_cls()
        user.set("age", "42")
        assert user.get("age") == 42
        assert isinstance(user.get("age"), int)

    def test_set_cast_error(self, user_cls):
        user = user_cls()
        with pytest.raises(CastError) as exc_info:
            user.set("age", "abc")
        assert exc_info.value.field == "age"
        assert not user.is_modified()

    def test_set_list_cast_error_has_index(self, user_cls):
        user = user_cls()
        with pytest.raises(CastError) as exc_info:
            user.set("tags", ["a", {"b": 1}])
        assert exc_info.value.index == 1

    def test_set_mapping(self, user_cls):
        user = user_cls()
        user.set({"name": "Ann", "age": "3"})
        assert user.get(["name", "age"]) == {"name": "Ann", "age": 3}

    def test_set_requires_value(self, user_cls):
        with pytest.raises(TypeError):
            user_cls().set("name")
        with pytest.raises(TypeError):
            user_cls().set({"name": "Ann"}, "x")

    def test_property_accessors(self, user_cls):
        user = user_cls()
        user.name = "Bob"
        assert user.name == "Bob"
        assert user.get_modified() == {"name": "Bob"}

    def test_id_cannot_change_once_set(self, user_cls):
        user = user_cls()
        user.set("_id", "x")
        user.set("_id", "y")
        assert user.get("_id") == "x"

    def test_loaded_id_cannot_change(self, user_cls):
        user = user_cls({"_id": "abc"})
        user.set("_id", "other")
        assert user.get("_id") == "abc"
        assert not user.is_modified()

    def test_immutable_field_once_persisted(self, user_cls):
        user = user_cls({"code": "A"})
        user.set("code", "B")
        assert user.get("code") == "A"

    def test_immutable_field_before_persisted(self, user_cls):
        user = user_cls()
        user.set("code", "A")
        user.set("code", "B")
        assert user.get("code") == "B"


# =============================================================================
# Dirty tracking
# =============================================================================


class TestModified:
    def test_get_modified(self, user_cls):
        user = user_cls({"name": "Ann"})
        assert user.get_modified() == {}

        user.set("name", "Bob")
        assert user.get_modified() == {"name": "Bob"}
        assert user.get_modified(old=True) == {"name": "Ann"}
        assert user.is_modified("name")
        assert not user.is_modified("age")

    def test_old_value_falls_back_to_default(self, user_cls):
        user = user_cls()
        user.set("age", 5)
        assert user.get_modified(old=True) == {"age": 0}

    def test_setting_same_value_is_noop(self, user_cls):
        user = user_cls({"name": "Ann"})
        user.set("name", "Ann")
        assert not user.is_modified()

    def test_same_value_after_cast_is_noop(self, user_cls):
        user = user_cls({"age": 7})
        user.set("age", "7")
        assert not user.is_modified()

    def test_falsy_current_value_always_writes(self, user_cls):
        user = user_cls({"age": 0})
        user.set("age", 0)
        assert user.is_modified("age")
        assert user.get_modified() == {"age": 0}

    def test_set_default_value_explicitly(self, user_cls):
        user = user_cls()
        user.set("active", False)
        assert user.get_modified() == {"active": False}


# =============================================================================
# Nested documents and copies
# =============================================================================


class TestNested:
    def test_mapping_becomes_document(self, person_cls, registry):
        person = person_cls({"address": {"city": "Oslo"}})
        address = person.get("address")

        assert isinstance(address, registry.get("Address"))
        assert address.get("city") == "Oslo"

    def test_list_of_documents(self, person_cls, registry):
        person = person_cls({"addresses": [{"city": "Oslo"}, {"city": "Rome"}]})
        assert [a.get("city") for a in person.get("addresses")] == ["Oslo", "Rome"]

    def test_raw_serializes_nested(self, person_cls):
        person = person_cls({"address": {"city": "Oslo"}, "addresses": [{"city": "Rome"}]})
        assert person.raw() == {
            "address": {"city": "Oslo"},
            "addresses": [{"city": "Rome"}],
        }

    def test_setting_same_document_is_noop(self, person_cls):
        person = person_cls({"address": {"city": "Oslo"}})
        person.set("address", person.get("address"))
        assert not person.is_modified()

    def test_polymorphic_nested_cast(self, registry):
        pet = registry.create_class({"name": "Pet", "fields": {"name": "string"}})
        dog = pet.inherit({"name": "Dog", "fields": {"breed": "string"}})
        owner = registry.create_class({"name": "Owner", "fields": {"pet": "Pet"}})

        doc = owner({"pet": {"_type": "Dog", "name": "Rex", "breed": "lab"}})
        assert type(doc.get("pet")) is dog

    def test_wrong_document_class_rejected(self, registry, person_cls):
        other = registry.create_class({"name": "Other"})
        with pytest.raises(CastError):
            person_cls().set("address", other())


class TestCopy:
    def test_copy_drops_id(self, user_cls):
        user = user_cls({"_id": "u1", "name": "Ann", "tags": ["a"]})
        clone = user.copy()

        assert type(clone) is user_cls
        assert clone.get("_id") is None
        assert clone.get("name") == "Ann"

    def test_copy_is_deep(self, user_cls):
        user = user_cls({"tags": ["a"]})
        clone = user.copy()
        clone.get("tags").append("b")
        assert user.get("tags") == ["a"]

    def test_copy_with_overrides(self, user_cls):
        user = user_cls({"name": "Ann"})
        clone = user.copy({"age": "5"})
        assert clone.get(["name", "age"]) == {"name": "Ann", "age": 5}
        assert clone.get_modified() == {"age": 5}

    def test_repr(self, user_cls):
        assert repr(user_cls({"_id": "u1"})) == "<User _id='u1'>"
