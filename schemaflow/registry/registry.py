# schemaflow/registry/registry.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from jsonschema import Draft7Validator

from schemaflow.core.catalogue import BUILTIN_SCHEMAS, SCHEMA_SHAPE
from schemaflow.core.models import Category, PropertySchema, Schema
from schemaflow.registry.store import KeyValueStore, StoreError
from schemaflow.utils.config import CUSTOM_SCHEMAS_KEY
from schemaflow.utils.logger import get_logger

logger = get_logger("registry")

_SHAPE_VALIDATOR = Draft7Validator(SCHEMA_SHAPE)


def shape_errors(record: Any) -> List[str]:
    """Human-readable problems with the structural shape of a schema record."""
    if not isinstance(record, Mapping):
        return ["[SCHEMA] schema record must be an object"]
    out = []
    for err in sorted(_SHAPE_VALIDATOR.iter_errors(dict(record)), key=lambda e: [str(p) for p in e.path]):
        where = "/".join(str(p) for p in err.path) or "<root>"
        out.append(f"[SCHEMA] {where}: {err.message}")
    return out


def _record_of(schema: Schema) -> Any:
    """Plain record for a Schema object, or None when its fields have the wrong types."""
    if not isinstance(schema.required, list) or not isinstance(schema.properties, Mapping):
        return None
    if not all(isinstance(p, PropertySchema) for p in schema.properties.values()):
        return None
    try:
        return schema.to_dict()
    except (AttributeError, TypeError):
        return None


class SchemaRegistry:
    """
    Authoritative store of node schemas, keyed by id.

    Built-in schemas load first, then custom schemas persisted in `store`
    are overlaid on top; a custom schema reusing a built-in id shadows it.
    Construct one per process and hand it to every consumer.
    Not thread-safe: callers serialize writes against reads.
    """

    def __init__(self, store: KeyValueStore, builtins: Iterable[Mapping[str, Any]] = BUILTIN_SCHEMAS):
        self._store = store
        self._schemas: Dict[str, Schema] = {}
        self._builtin_ids = set()

        for record in builtins:
            schema = Schema.from_dict(record)
            self._schemas[schema.id] = schema
            self._builtin_ids.add(schema.id)

        self._load_custom()

    # ---------- loading / persistence ----------

    def _load_custom(self) -> None:
        try:
            records = self._store.get(CUSTOM_SCHEMAS_KEY)
        except StoreError as e:
            logger.error("Failed to load custom schemas: %s", e)
            return
        if records is None:
            return
        if not isinstance(records, list):
            logger.error("Failed to load custom schemas: expected a list, got %s", type(records).__name__)
            return

        for record in records:
            problems = shape_errors(record)
            if problems:
                rid = record.get("id") if isinstance(record, Mapping) else record
                logger.warning("Skipping persisted schema %r: %s", rid, "; ".join(problems))
                continue
            schema = Schema.from_dict(record)
            if schema.id in self._builtin_ids:
                logger.info("Custom schema '%s' shadows a built-in schema", schema.id)
            self._schemas[schema.id] = schema

    def _persist(self, schemas: Dict[str, Schema]) -> None:
        custom = [s.to_dict() for s in schemas.values() if s.is_custom]
        self._store.set(CUSTOM_SCHEMAS_KEY, custom)

    # ---------- mutations ----------

    def register(self, schema: Union[Schema, Mapping[str, Any]]) -> bool:
        """
        Insert or overwrite a schema. Returns False, leaving the registry
        untouched, when the schema is malformed or cannot be persisted.
        """
        record = _record_of(schema) if isinstance(schema, Schema) else schema
        if record is None:
            logger.warning("Rejected schema registration: '%s' has malformed fields", getattr(schema, "id", schema))
            return False
        problems = shape_errors(record)
        if problems:
            logger.warning("Rejected schema registration: %s", "; ".join(problems))
            return False
        # stored copy is detached from the caller's object
        schema = Schema.from_dict(record)

        candidate = dict(self._schemas)
        candidate[schema.id] = schema
        try:
            self._persist(candidate)
        except StoreError as e:
            logger.error("Failed to persist schema '%s': %s", schema.id, e)
            return False

        self._schemas = candidate
        logger.info("Registered schema '%s' (%s)", schema.id, schema.category)
        return True

    def unregister(self, schema_id: str) -> bool:
        """Remove a custom schema. Built-in (non-custom) schemas cannot be removed."""
        schema = self._schemas.get(schema_id)
        if schema is None:
            logger.warning("Cannot remove schema '%s': not registered", schema_id)
            return False
        if not schema.is_custom:
            logger.warning("Cannot remove schema '%s': built-in schemas are immutable", schema_id)
            return False

        candidate = {k: v for k, v in self._schemas.items() if k != schema_id}
        try:
            self._persist(candidate)
        except StoreError as e:
            logger.error("Failed to persist removal of '%s': %s", schema_id, e)
            return False

        self._schemas = candidate
        logger.info("Removed custom schema '%s'", schema_id)
        return True

    # ---------- lookups ----------

    def get(self, schema_id: str) -> Optional[Schema]:
        return self._schemas.get(schema_id)

    def list_all(self) -> List[Schema]:
        return list(self._schemas.values())

    def list_by_category(self, category: Union[str, Category]) -> List[Schema]:
        cat = category.value if isinstance(category, Category) else category
        return [s for s in self._schemas.values() if s.category == cat]

    def categories(self) -> List[str]:
        """Categories that currently hold at least one schema, in first-seen order."""
        return list(dict.fromkeys(s.category for s in self._schemas.values()))

    def group_by_category(self) -> Dict[str, List[Schema]]:
        groups: Dict[str, List[Schema]] = {}
        for s in self._schemas.values():
            groups.setdefault(s.category, []).append(s)
        return groups

    def category_of(self, schema_id: str) -> Optional[str]:
        schema = self._schemas.get(schema_id)
        return schema.category if schema else None

    def is_builtin(self, schema_id: str) -> bool:
        """True when the id came from the built-in catalogue and is not shadowed by a custom schema."""
        schema = self._schemas.get(schema_id)
        return schema is not None and schema_id in self._builtin_ids and not schema.is_custom

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)
