"""Tests for the recursive validation engine."""

import pytest

from docforge import context
from docforge.core.config import DocforgeConfig
from docforge.core.errors import NestingDepthError, ValidationError
from docforge.registry import ClassRegistry
from docforge.validation.engine import cast_nested, is_nested_pattern, traverse


@pytest.fixture(autouse=True)
def reset_context():
    context.reset_trusted_predicate()
    yield
    context.reset_trusted_predicate()


@pytest.fixture
def registry():
    return ClassRegistry(config=DocforgeConfig(max_nesting_depth=3))


@pytest.fixture
def person_cls(registry):
    registry.create_class({
        "name": "Address",
        "fields": {
            "city": {"type": "string", "validators": [{"type": "minLength", "param": 2}]},
            "zip": {"type": "string", "optional": True},
        },
    })
    return registry.create_class({
        "name": "Person",
        "fields": {
            "name": {"type": "string", "validators": [{"type": "minLength", "param": 3}]},
            "age": {"type": "number", "validators": [{"type": "gte", "param": 0}]},
            "nickname": {
                "type": "string",
                "optional": True,
                "validators": [{"type": "minLength", "param": 2}],
            },
            "scratch": {
                "type": "number",
                "transient": True,
                "validators": [{"type": "gt", "param": 100}],
            },
            "address": {"type": "Address", "optional": True},
            "addresses": {"type": ["Address"], "optional": True},
        },
    })


def _paths(exc_info) -> list[str]:
    return [d.path for d in exc_info.value.details]


# =============================================================================
# Flat documents
# =============================================================================


class TestFlatValidation:
    def test_valid_document(self, person_cls):
        person_cls({"name": "Alice", "age": 30}).validate()

    def test_required_field(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"age": 30}).validate()

        detail = exc_info.value.details[0]
        assert detail.path == "name"
        assert detail.kind == "required"
        assert str(exc_info.value) == '"name" is required'

    def test_required_failure_skips_field_validators(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"age": 30}).validate(stop_on_first_error=False)
        assert [d.kind for d in exc_info.value.details] == ["required"]

    def test_stop_on_first_error(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"name": "Al", "age": -1}).validate()
        assert _paths(exc_info) == ["name"]

    def test_collect_all_errors(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"name": "Al", "age": -1}).validate(stop_on_first_error=False)

        assert _paths(exc_info) == ["name", "age"]
        assert [d.kind for d in exc_info.value.details] == ["minLength", "gte"]

    def test_type_check_runs_before_validators(self, person_cls):
        person = person_cls({"name": "Alice"})
        person._modified["age"] = "old"

        with pytest.raises(ValidationError) as exc_info:
            person.validate()
        assert exc_info.value.details[0].kind == "number"

    def test_transient_fields_are_skipped(self, person_cls):
        person_cls({"name": "Alice", "age": 1, "scratch": 1}).validate()

    def test_optional_none_is_skipped(self, person_cls):
        person_cls({"name": "Alice", "age": 1, "nickname": None}).validate()

    def test_optional_present_is_validated(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"name": "Alice", "age": 1, "nickname": "x"}).validate()
        assert _paths(exc_info) == ["nickname"]

    def test_subset_of_fields(self, person_cls):
        person = person_cls({"name": "Al", "age": 1})
        person.validate(["age"])
        with pytest.raises(ValidationError):
            person.validate(["name"])

    def test_unknown_field_names_are_ignored(self, person_cls):
        person_cls({"name": "Alice", "age": 1}).validate(["nope"])

    def test_error_to_dict(self, person_cls):
        with pytest.raises(ValidationError) as exc_info:
            person_cls({"name": "Al", "age": 1}).validate()
        message = 'Length of "name" has to be at least 3'
        assert exc_info.value.to_dict() == {
            "message": message,
            "details": [{"path": "name", "kind": "minLength", "message": message}],
        }


# =============================================================================
# Nested documents
# =============================================================================


class TestNestedValidation:
    def test_nested_object_path(self, person_cls):
        person = person_cls({"name": "Alice", "age": 1, "address": {"city": "X"}})

        with pytest.raises(ValidationError) as exc_info:
            person.validate()
        assert _paths(exc_info) == ["address.city"]
        assert exc_info.value.details[0].kind == "minLength"

    def test_nested_required(self, person_cls):
        person = person_cls({"name": "Alice", "age": 1, "address": {"zip": "0150"}})

        with pytest.raises(ValidationError) as exc_info:
            person.validate()
        assert _paths(exc_info) == ["address.city"]
        assert exc_info.value.details[0].kind == "required"

    def test_list_element_paths(self, person_cls):
        person = person_cls({
            "name": "Alice",
            "age": 1,
            "addresses": [{"city": "Oslo"}, {"city": "X"}],
        })

        with pytest.raises(ValidationError) as exc_info:
            person.validate()
        assert _paths(exc_info) == ["addresses.1.city"]

    def test_collect_across_levels(self, person_cls):
        person = person_cls({
            "name": "Al",
            "age": 1,
            "address": {"city": "X"},
            "addresses": [{"city": "Y"}, {"city": "Oslo"}, {}],
        })

        with pytest.raises(ValidationError) as exc_info:
            person.validate(stop_on_first_error=False)
        assert _paths(exc_info) == [
            "name",
            "address.city",
            "addresses.0.city",
            "addresses.2.city",
        ]

    def test_valid_nested(self, person_cls):
        person_cls({
            "name": "Alice",
            "age": 1,
            "address": {"city": "Oslo"},
            "addresses": [{"city": "Rome"}],
        }).validate()

    def test_raw_mappings_are_cast_before_validation(self, person_cls, registry):
        person = person_cls({"name": "Alice", "age": 1})
        person._values["address"] = {"city": "Oslo"}

        person.validate()
        assert isinstance(person.get("address"), registry.get("Address"))
        assert not person.is_modified()

    def test_raw_mappings_cast_at_every_level(self, registry):
        registry.create_class({
            "name": "Leaf",
            "fields": {"v": {"type": "string", "validators": [{"type": "minLength", "param": 2}]}},
        })
        registry.create_class({"name": "Mid", "fields": {"leaves": ["Leaf"]}})
        top_cls = registry.create_class({"name": "Top", "fields": {"mid": "Mid"}})

        top = top_cls({"mid": {"leaves": [{"v": "ok"}]}})
        top.get("mid").get("leaves").append({"v": "x"})

        with pytest.raises(ValidationError) as exc_info:
            top.validate()
        assert _paths(exc_info) == ["mid.leaves.1.v"]
        assert exc_info.value.details[0].kind == "minLength"
        assert isinstance(top.get("mid").get("leaves")[1], registry.get("Leaf"))

    def test_cast_nested_leaves_documents(self, person_cls):
        person = person_cls({"name": "Alice", "address": {"city": "Oslo"}})
        address = person.get("address")
        cast_nested(person)
        assert person.get("address") is address


# =============================================================================
# Nested patterns
# =============================================================================


class TestNestedPatterns:
    def test_is_nested_pattern(self):
        assert is_nested_pattern("address.city")
        assert not is_nested_pattern("address")

    def test_object_pattern(self, person_cls):
        person = person_cls({"name": "Al", "address": {"city": "X"}})

        with pytest.raises(ValidationError) as exc_info:
            person.validate(["address.city"])
        assert _paths(exc_info) == ["address.city"]

    def test_wildcard_pattern(self, person_cls):
        person = person_cls({"addresses": [{"city": "Oslo"}, {"city": "X"}]})

        with pytest.raises(ValidationError) as exc_info:
            person.validate(["addresses.$.city"])
        assert _paths(exc_info) == ["addresses.1.city"]

    def test_index_pattern(self, person_cls):
        person = person_cls({"addresses": [{"city": "Oslo"}, {"city": "X"}]})

        person.validate(["addresses.0.city"])
        with pytest.raises(ValidationError):
            person.validate(["addresses.1.city"])

    def test_traverse_targets(self, person_cls):
        person = person_cls({"addresses": [{"city": "Oslo"}, {"city": "Rome"}]})

        targets = [
            (name, prefix) for _doc, name, prefix, _field in traverse(person, "addresses.$.city")
        ]
        assert targets == [("city", "addresses.0."), ("city", "addresses.1.")]

    def test_pattern_without_target(self, person_cls):
        person = person_cls({"name": "Alice", "age": 1})
        assert list(traverse(person, "address.city")) == []
        assert list(traverse(person, "nope.city")) == []
        person.validate(["address.city", "addresses.$.city"])


# =============================================================================
# Execution context and depth guard
# =============================================================================


class TestContextAndDepth:
    def test_untrusted_context_skips_real_validation(self, person_cls):
        context.set_trusted_predicate(lambda: False)
        person = person_cls({"name": "Al"})

        person.validate(simulation=False)
        with pytest.raises(ValidationError):
            person.validate()

    def test_trusted_context_validates(self, person_cls):
        context.set_trusted_predicate(lambda: True)
        with pytest.raises(ValidationError):
            person_cls({"name": "Al"}).validate(simulation=False)

    def test_nesting_depth_limit(self, registry):
        node = registry.create_class({
            "name": "Node",
            "fields": {"child": {"type": "Node", "optional": True}},
        })
        data: dict = {}
        for _ in range(5):
            data = {"child": data}

        with pytest.raises(NestingDepthError):
            node(data).validate()

    def test_nesting_within_limit(self, registry):
        node = registry.create_class({
            "name": "Node",
            "fields": {"child": {"type": "Node", "optional": True}},
        })
        node({"child": {"child": {}}}).validate()
