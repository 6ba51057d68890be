import pytest

from schemaflow.graph.integrity import GraphIntegrityChecker
from schemaflow.registry.factory import NodeInstanceFactory
from schemaflow.registry.registry import SchemaRegistry
from schemaflow.registry.store import MemoryStore
from schemaflow.validation.instance import InstanceValidator


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def registry(store):
    return SchemaRegistry(store)


@pytest.fixture
def factory(registry):
    return NodeInstanceFactory(registry)


@pytest.fixture
def validator(registry):
    return InstanceValidator(registry)


@pytest.fixture
def checker(registry, validator):
    return GraphIntegrityChecker(registry, validator)


@pytest.fixture
def tagged_schema():
    """A custom schema exercising every rule of the property validator."""
    return {
        "id": "custom-tagger",
        "name": "Tagger",
        "description": "Attach tags to records",
        "category": "custom",
        "icon": "🏷",
        "color": "hsl(262, 83%, 58%)",
        "version": "2.0.0",
        "properties": {
            "label": {"type": "string", "title": "Label", "pattern": "[a-z]+"},
            "mode": {"type": "string", "title": "Mode", "enum": ["append", "replace"], "default": "append"},
            "weight": {"type": "number", "title": "Weight", "minimum": 0, "maximum": 10, "default": 1},
            "enabled": {"type": "boolean", "title": "Enabled", "default": True},
            "scores": {"type": "array", "title": "Scores", "items": {"type": "number", "title": "Score", "minimum": 0}},
            "options": {"type": "object", "title": "Options"},
        },
        "required": ["label", "mode"],
    }
