# schemaflow/core/models.py
"""
Data model shared by the registry, validators and graph checker.

Every record round-trips through plain dicts with the camelCase keys used by
the persisted format (`schemaId`, `createdAt`, `sourceHandle`, ...), so the
storage layer and the CLI only ever deal with JSON-compatible data.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


# Values found in a node instance's data bag
Value = Union[str, int, float, bool, None, List["Value"], Dict[str, "Value"]]


class Category(str, Enum):
    START = "start"
    END = "end"
    DATA = "data"
    PROCESS = "process"
    AI = "ai"
    FILTER = "filter"
    VISUALIZE = "visualize"
    CONDITIONAL = "conditional"
    CUSTOM = "custom"


class PropertyType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    SELECT = "select"
    MULTISELECT = "multiselect"


class ValueKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"
    OTHER = "other"


def kind_of(value: Any) -> ValueKind:
    """Classify a data-bag value into its tagged-union variant."""
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    if value is None:
        return ValueKind.NULL
    return ValueKind.OTHER


def now_iso() -> str:
    """UTC timestamp, millisecond precision, `Z` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# ---------- Schemas ----------

@dataclass
class PropertySchema:
    """One configurable field of a node schema."""
    type: str
    title: str = ""
    description: Optional[str] = None
    default: Any = None
    enum: Optional[List[Any]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    items: Optional["PropertySchema"] = None
    properties: Optional[Dict[str, "PropertySchema"]] = None

    def has_default(self) -> bool:
        return self.default is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PropertySchema":
        items = data.get("items")
        props = data.get("properties")
        return cls(
            type=str(data.get("type", "")),
            title=str(data.get("title", "")),
            description=data.get("description"),
            default=copy.deepcopy(data.get("default")),
            enum=list(data["enum"]) if isinstance(data.get("enum"), (list, tuple)) else None,
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            pattern=data.get("pattern"),
            format=data.get("format"),
            items=cls.from_dict(items) if isinstance(items, Mapping) else None,
            properties=(
                {k: cls.from_dict(v) for k, v in props.items() if isinstance(v, Mapping)}
                if isinstance(props, Mapping) else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "default": copy.deepcopy(self.default),
            "enum": list(self.enum) if self.enum is not None else None,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "pattern": self.pattern,
            "format": self.format,
            "items": self.items.to_dict() if self.items else None,
            "properties": (
                {k: v.to_dict() for k, v in self.properties.items()}
                if self.properties is not None else None
            ),
        })


@dataclass
class Schema:
    """Declarative description of a node kind."""
    id: str
    name: str
    category: str
    properties: Dict[str, PropertySchema] = field(default_factory=dict)
    description: str = ""
    icon: str = ""
    color: str = ""
    version: str = "1.0.0"
    required: List[str] = field(default_factory=list)
    ui_schema: Optional[Dict[str, Any]] = None
    data_source: Optional[Dict[str, Any]] = None

    @property
    def is_custom(self) -> bool:
        return self.category == Category.CUSTOM.value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Schema":
        props = data.get("properties") or {}
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            category=str(data["category"]),
            properties={k: PropertySchema.from_dict(v) for k, v in props.items()},
            description=str(data.get("description") or ""),
            icon=str(data.get("icon") or ""),
            color=str(data.get("color") or ""),
            version=str(data.get("version") or "1.0.0"),
            required=list(data.get("required") or []),
            ui_schema=copy.deepcopy(data.get("uiSchema")),
            data_source=copy.deepcopy(data.get("dataSource")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "color": self.color,
            "version": self.version,
            "properties": {k: v.to_dict() for k, v in self.properties.items()},
            "required": list(self.required),
            "uiSchema": copy.deepcopy(self.ui_schema),
            "dataSource": copy.deepcopy(self.data_source),
        })


# ---------- Instances ----------

@dataclass
class NodeInstance:
    """A positioned, configured occurrence of a schema inside a workflow."""
    id: str
    schema_id: str
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0.0, "y": 0.0})
    data: Dict[str, Value] = field(default_factory=dict)
    metadata: Dict[str, str] = field(default_factory=dict)

    def update(self, data: Optional[Mapping[str, Value]] = None,
               position: Optional[Mapping[str, float]] = None) -> None:
        """Merge configuration changes in place and refresh `updatedAt`."""
        if data is not None:
            self.data.update(data)
        if position is not None:
            self.position = {"x": position["x"], "y": position["y"]}
        self.metadata["updatedAt"] = now_iso()

    def with_data(self, data: Mapping[str, Value]) -> "NodeInstance":
        """Detached copy carrying a different data bag (the original is untouched)."""
        return NodeInstance(
            id=self.id,
            schema_id=self.schema_id,
            position=dict(self.position),
            data=copy.deepcopy(dict(data)),
            metadata=dict(self.metadata),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NodeInstance":
        pos = data.get("position") or {}
        return cls(
            id=str(data["id"]),
            schema_id=str(data["schemaId"]),
            position={"x": pos.get("x", 0), "y": pos.get("y", 0)},
            data=copy.deepcopy(dict(data.get("data") or {})),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "schemaId": self.schema_id,
            "position": dict(self.position),
            "data": copy.deepcopy(self.data),
        }
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out


@dataclass
class EdgeInstance:
    """Directed connection between two node instances."""
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    type: Optional[str] = None
    animated: Optional[bool] = None
    style: Optional[Dict[str, Any]] = None
    marker_end: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EdgeInstance":
        return cls(
            id=str(data["id"]),
            source=str(data["source"]),
            target=str(data["target"]),
            source_handle=data.get("sourceHandle"),
            target_handle=data.get("targetHandle"),
            type=data.get("type"),
            animated=data.get("animated"),
            style=copy.deepcopy(data.get("style")),
            marker_end=copy.deepcopy(data.get("markerEnd")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "sourceHandle": self.source_handle,
            "targetHandle": self.target_handle,
            "type": self.type,
            "animated": self.animated,
            "style": copy.deepcopy(self.style),
            "markerEnd": copy.deepcopy(self.marker_end),
        })


@dataclass
class WorkflowDefinition:
    id: str
    name: str
    description: str = ""
    version: str = "1.0.0"
    nodes: List[NodeInstance] = field(default_factory=list)
    edges: List[EdgeInstance] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)

    def node(self, node_id: str) -> Optional[NodeInstance]:
        return next((n for n in self.nodes if n.id == node_id), None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowDefinition":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            version=str(data.get("version") or "1.0.0"),
            nodes=[NodeInstance.from_dict(n) for n in data.get("nodes") or []],
            edges=[EdgeInstance.from_dict(e) for e in data.get("edges") or []],
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "metadata": dict(self.metadata),
        }


# ---------- Validation output ----------

@dataclass
class ValidationError:
    property: str
    message: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"property": self.property, "message": self.message, "value": self.value})

    def __str__(self) -> str:
        return f"{self.property}: {self.message}"


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": [e.to_dict() for e in self.errors]}
