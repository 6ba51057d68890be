# schemaflow/validation/instance.py
from __future__ import annotations

from typing import Any, List, Mapping

from schemaflow.core.models import NodeInstance, ValidationError, ValidationResult
from schemaflow.registry.registry import SchemaRegistry
from schemaflow.validation.property import validate_property


def is_missing(data: Mapping[str, Any], key: str) -> bool:
    """A required value is missing when absent, None, or the empty string."""
    if key not in data:
        return True
    v = data[key]
    return v is None or (isinstance(v, str) and v == "")


class InstanceValidator:
    """
    Validates a node instance's data bag against its registered schema.

    Pure: never mutates the instance, so it can run on every keystroke of a
    configuration form, against transient copies of the data.
    """

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def validate(self, instance: NodeInstance) -> ValidationResult:
        return self.validate_data(instance.schema_id, instance.data)

    def validate_data(self, schema_id: str, data: Mapping[str, Any]) -> ValidationResult:
        schema = self.registry.get(schema_id)
        if schema is None:
            return ValidationResult([ValidationError("schemaId", "Schema not found", schema_id)])

        errors: List[ValidationError] = []

        for name in schema.required:
            if is_missing(data, name):
                errors.append(ValidationError(name, f"Required property '{name}' is missing", data.get(name)))

        for name, prop in schema.properties.items():
            value = data.get(name)
            if value is not None:
                errors.extend(validate_property(name, value, prop))

        return ValidationResult(errors)
