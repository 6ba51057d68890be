import pytest

from schemaflow.registry.builder import CustomSchemaBuilder, SchemaBuildError


def test_build_custom_schema(registry, factory, validator):
    builder = CustomSchemaBuilder(name="Webhook Out", description="Post results")
    builder.add_property("url", {"type": "string", "title": "URL", "pattern": "https://\\S+"})
    builder.add_property("retries", {"type": "number", "title": "Retries", "minimum": 0, "default": 3})
    assert builder.toggle_required("url") is True

    schema = builder.build()
    assert schema.id.startswith("custom-")
    assert schema.category == "custom"
    assert schema.icon == "⭐"
    assert schema.color == "hsl(262, 83%, 58%)"
    assert schema.version == "1.0.0"
    assert schema.required == ["url"]

    assert registry.register(schema)
    inst = factory.create(schema.id, {"x": 0, "y": 0})
    assert inst.data == {"retries": 3}
    assert [e.property for e in validator.validate(inst).errors] == ["url"]
    inst.update(data={"url": "https://example.com/hook"})
    assert validator.validate(inst).is_valid


def test_toggle_required_twice():
    builder = CustomSchemaBuilder(name="n").add_property("a", {"type": "string", "title": "A"})
    builder.toggle_required("a")
    assert builder.toggle_required("a") is False
    assert builder.required == []


def test_remove_property_drops_required():
    builder = CustomSchemaBuilder(name="n")
    builder.add_property("a", {"type": "string", "title": "A"})
    builder.add_property("b", {"type": "string", "title": "B"})
    builder.toggle_required("a")
    builder.remove_property("a")
    assert list(builder.properties) == ["b"]
    assert builder.required == []


@pytest.mark.parametrize("name, prop", [
    ("", {"type": "string", "title": "A"}),
    ("   ", {"type": "string", "title": "A"}),
    ("a", {"type": "string", "title": ""}),
    ("a", {"type": "string"}),
])
def test_add_property_requires_name_and_title(name, prop):
    with pytest.raises(SchemaBuildError):
        CustomSchemaBuilder(name="n").add_property(name, prop)


def test_duplicate_property_rejected():
    builder = CustomSchemaBuilder(name="n").add_property("a", {"type": "string", "title": "A"})
    with pytest.raises(SchemaBuildError, match="already exists"):
        builder.add_property("a", {"type": "number", "title": "Again"})


def test_build_requires_name_and_properties():
    with pytest.raises(SchemaBuildError, match="name"):
        CustomSchemaBuilder(name=" ").add_property("a", {"type": "string", "title": "A"}).build()
    with pytest.raises(SchemaBuildError, match="property"):
        CustomSchemaBuilder(name="Empty").build()


def test_explicit_id():
    schema = CustomSchemaBuilder(name="n").add_property("a", {"type": "string", "title": "A"}).build("custom-fixed")
    assert schema.id == "custom-fixed"
