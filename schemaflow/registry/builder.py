# schemaflow/registry/builder.py
"""
Incremental authoring of user-defined ("custom") schemas.

The builder enforces the authoring rules (non-blank names, unique property
names, at least one property) before anything reaches the registry; the
registry itself only checks structural shape.
"""

from __future__ import annotations

import copy
import time
from typing import Dict, List, Mapping, Optional, Union

from schemaflow.core.models import Category, PropertySchema, Schema

DEFAULT_ICON = "⭐"
DEFAULT_COLOR = "hsl(262, 83%, 58%)"
DEFAULT_VERSION = "1.0.0"


class SchemaBuildError(ValueError):
    """The schema being authored is incomplete or inconsistent."""


class CustomSchemaBuilder:

    def __init__(
        self,
        name: str = "",
        description: str = "",
        icon: str = DEFAULT_ICON,
        color: str = DEFAULT_COLOR,
        version: str = DEFAULT_VERSION,
    ):
        self.name = name
        self.description = description
        self.icon = icon
        self.color = color
        self.version = version
        self.properties: Dict[str, PropertySchema] = {}
        self.required: List[str] = []

    def add_property(self, name: str, prop: Union[PropertySchema, Mapping]) -> "CustomSchemaBuilder":
        if not isinstance(prop, PropertySchema):
            prop = PropertySchema.from_dict(prop)
        if not name.strip() or not prop.title.strip():
            raise SchemaBuildError("Property name and title are required")
        if name in self.properties:
            raise SchemaBuildError(f"Property name '{name}' already exists")
        self.properties[name] = prop
        return self

    def remove_property(self, name: str) -> "CustomSchemaBuilder":
        self.properties.pop(name, None)
        self.required = [r for r in self.required if r != name]
        return self

    def toggle_required(self, name: str) -> bool:
        """Flip the required flag of `name`; returns the new state."""
        if name in self.required:
            self.required.remove(name)
            return False
        self.required.append(name)
        return True

    def build(self, schema_id: Optional[str] = None) -> Schema:
        if not self.name.strip():
            raise SchemaBuildError("Schema name is required")
        if not self.properties:
            raise SchemaBuildError("At least one property is required")

        return Schema(
            id=schema_id or f"custom-{time.time_ns() // 1_000_000}",
            name=self.name,
            description=self.description,
            category=Category.CUSTOM.value,
            icon=self.icon or DEFAULT_ICON,
            color=self.color or DEFAULT_COLOR,
            version=self.version or DEFAULT_VERSION,
            properties=copy.deepcopy(self.properties),
            required=list(self.required),
        )
