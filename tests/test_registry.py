import json

import pytest

from schemaflow.core.catalogue import BUILTIN_SCHEMAS
from schemaflow.core.models import Category, PropertySchema, Schema
from schemaflow.registry.registry import SchemaRegistry, shape_errors
from schemaflow.registry.store import JsonFileStore, KeyValueStore, MemoryStore, StoreError
from schemaflow.utils.config import CUSTOM_SCHEMAS_KEY


class FailingStore(MemoryStore):
    def set(self, key, value):
        raise StoreError("disk full")


class UnreadableStore(MemoryStore):
    def get(self, key):
        raise StoreError("corrupt")


def custom(schema_id="custom-1", **extra):
    rec = {
        "id": schema_id,
        "name": "My Node",
        "category": "custom",
        "properties": {"text": {"type": "string", "title": "Text"}},
    }
    rec.update(extra)
    return rec


def test_builtins_loaded_in_catalogue_order(registry):
    assert [s.id for s in registry.list_all()] == [r["id"] for r in BUILTIN_SCHEMAS]
    assert registry.get("start").category == "start"
    assert registry.get("missing") is None
    assert "end" in registry
    assert len(registry) == len(BUILTIN_SCHEMAS)


def test_list_by_category(registry):
    data = registry.list_by_category("data")
    assert {s.id for s in data} == {"api-data-source", "csv-data-source"}
    assert registry.list_by_category(Category.START)[0].id == "start"
    assert registry.list_by_category("custom") == []


def test_register_custom_persists(registry, store):
    assert registry.register(custom())
    assert registry.get("custom-1").name == "My Node"
    saved = store.get(CUSTOM_SCHEMAS_KEY)
    assert [s["id"] for s in saved] == ["custom-1"]
    assert registry.list_all()[-1].id == "custom-1"


def test_register_schema_object(registry):
    schema = Schema(id="custom-obj", name="Obj", category="custom",
                    properties={"n": PropertySchema(type="number", title="N")})
    assert registry.register(schema)
    assert registry.get("custom-obj") == schema
    assert registry.get("custom-obj") is not schema


def test_registered_schema_is_detached_from_caller(registry, validator):
    schema = Schema(id="custom-z", name="Z", category="custom",
                    properties={"a": PropertySchema(type="string", title="A")})
    assert registry.register(schema)
    schema.required.append("a")
    schema.properties["a"].enum = ["x"]

    assert registry.get("custom-z").required == []
    assert registry.get("custom-z").properties["a"].enum is None
    assert validator.validate_data("custom-z", {}).is_valid


@pytest.mark.parametrize("record", [
    {"name": "x", "category": "custom", "properties": {}},
    {"id": "", "name": "x", "category": "custom", "properties": {}},
    {"id": "a", "category": "custom", "properties": {}},
    {"id": "a", "name": "x", "properties": {}},
    {"id": "a", "name": "x", "category": "unknown", "properties": {}},
    {"id": "a", "name": "x", "category": "custom"},
    {"id": "a", "name": "x", "category": "custom", "properties": []},
    {"id": "a", "name": "x", "category": "custom", "properties": {"p": "string"}},
    "not a schema",
])
def test_register_rejects_malformed(registry, store, record):
    before = [s.id for s in registry.list_all()]
    assert registry.register(record) is False
    assert [s.id for s in registry.list_all()] == before
    assert store.get(CUSTOM_SCHEMAS_KEY) is None


def test_register_rejects_malformed_schema_object(registry):
    assert registry.register(Schema(id="a", name="", category="custom")) is False
    assert "a" not in registry


@pytest.mark.parametrize("schema", [
    Schema(id="custom-x", name="X", category="custom", properties={"a": {"type": "string"}}),
    Schema(id="custom-x", name="X", category="custom",
           properties={"a": PropertySchema(type="array", title="A", items={"type": "string"})}),
    Schema(id="custom-x", name="X", category="data", required=None),
    Schema(id="custom-x", name="X", category="data", required="a"),
    Schema(id="custom-x", name="X", category="custom", properties=None),
])
def test_register_rejects_schema_object_with_wrong_field_types(registry, store, validator, checker, schema):
    assert registry.register(schema) is False
    assert "custom-x" not in registry
    assert store.get(CUSTOM_SCHEMAS_KEY) is None
    # validation keeps returning results instead of raising
    assert not validator.validate_data("custom-x", {}).is_valid
    assert checker.check([], []).runnable


def test_register_does_not_check_property_consistency(registry):
    rec = custom(properties={"p": {"type": "nonsense", "pattern": "(("}}, required=["not-a-property"])
    assert registry.register(rec)


def test_register_overwrites_in_place(registry):
    registry.register(custom("custom-a"))
    registry.register(custom("custom-b"))
    registry.register(custom("custom-a", name="Renamed"))
    ids = [s.id for s in registry.list_all()]
    assert ids[-2:] == ["custom-a", "custom-b"]
    assert registry.get("custom-a").name == "Renamed"


def test_register_is_atomic_when_persistence_fails():
    registry = SchemaRegistry(FailingStore())
    assert registry.register(custom()) is False
    assert "custom-1" not in registry


def test_unregister_builtin_fails_and_leaves_registry_unchanged(registry):
    before = [s.to_dict() for s in registry.list_all()]
    for sid in ("start", "end", "llm-prompt"):
        assert registry.unregister(sid) is False
    assert [s.to_dict() for s in registry.list_all()] == before


def test_unregister_unknown_fails(registry):
    assert registry.unregister("ghost") is False


def test_unregister_custom(registry, store):
    registry.register(custom("custom-a"))
    registry.register(custom("custom-b"))
    assert registry.unregister("custom-a") is True
    assert registry.get("custom-a") is None
    assert [s["id"] for s in store.get(CUSTOM_SCHEMAS_KEY)] == ["custom-b"]


def test_custom_schemas_reloaded_from_store(store):
    SchemaRegistry(store).register(custom("custom-a", required=["text"]))
    reloaded = SchemaRegistry(store)
    assert reloaded.get("custom-a").required == ["text"]
    assert reloaded.get("custom-a").properties["text"].title == "Text"


def test_custom_schema_shadows_builtin():
    store = MemoryStore({CUSTOM_SCHEMAS_KEY: [custom("transform", name="My Transform")]})
    registry = SchemaRegistry(store)
    assert registry.get("transform").name == "My Transform"
    assert registry.get("transform").is_custom
    assert not registry.is_builtin("transform")
    assert registry.is_builtin("aggregate")
    assert len(registry) == len(BUILTIN_SCHEMAS)


def test_load_failure_means_no_custom_schemas():
    registry = SchemaRegistry(UnreadableStore())
    assert len(registry) == len(BUILTIN_SCHEMAS)


def test_malformed_persisted_value_is_ignored():
    registry = SchemaRegistry(MemoryStore({CUSTOM_SCHEMAS_KEY: {"not": "a list"}}))
    assert len(registry) == len(BUILTIN_SCHEMAS)


def test_malformed_persisted_record_is_skipped():
    store = MemoryStore({CUSTOM_SCHEMAS_KEY: [{"id": "broken"}, custom("custom-ok")]})
    registry = SchemaRegistry(store)
    assert "broken" not in registry
    assert "custom-ok" in registry


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    registry = SchemaRegistry(JsonFileStore(path))
    assert registry.register(custom())
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert [s["id"] for s in on_disk[CUSTOM_SCHEMAS_KEY]] == ["custom-1"]
    assert "custom-1" in SchemaRegistry(JsonFileStore(path))


def test_corrupt_json_file_store_loads_builtins_only(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    registry = SchemaRegistry(JsonFileStore(path))
    assert len(registry) == len(BUILTIN_SCHEMAS)
    with pytest.raises(StoreError):
        JsonFileStore(path).get(CUSTOM_SCHEMAS_KEY)


def test_key_value_store_is_abstract():
    with pytest.raises(TypeError):
        KeyValueStore()

    class HalfStore(KeyValueStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        HalfStore()


def test_json_file_store_unserializable_value(tmp_path):
    path = tmp_path / "store.json"
    store = JsonFileStore(path)
    store.set("a", 1)
    with pytest.raises(StoreError):
        store.set("b", {object()})
    assert store.get("a") == 1 and store.get("b") is None
    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_group_by_category(registry):
    groups = registry.group_by_category()
    assert [s.id for s in groups["process"]] == ["transform", "aggregate"]
    assert set(groups) == {"start", "end", "data", "process", "ai", "filter", "visualize", "conditional"}
    assert registry.categories() == list(groups)
    assert "custom" not in registry.categories()


def test_shape_errors_are_readable():
    problems = shape_errors({"id": "a", "name": "x", "category": "bogus", "properties": {}})
    assert len(problems) == 1
    assert problems[0].startswith("[SCHEMA] category:")
    assert shape_errors(custom()) == []


def test_schema_dict_round_trip():
    rec = dict(BUILTIN_SCHEMAS[2])
    assert Schema.from_dict(rec).to_dict() == rec
