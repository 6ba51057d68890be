# schemaflow/registry/factory.py
from __future__ import annotations

import copy
import time
from typing import Mapping, Optional

from schemaflow.core.models import NodeInstance, now_iso
from schemaflow.registry.registry import SchemaRegistry


class NodeInstanceFactory:
    """Creates node instances pre-filled with their schema's defaults."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry
        self._last_stamp = 0

    def _next_stamp(self) -> int:
        # nanosecond clock, forced strictly increasing
        stamp = max(time.time_ns(), self._last_stamp + 1)
        self._last_stamp = stamp
        return stamp

    def new_id(self, schema_id: str) -> str:
        return f"{schema_id}_{self._next_stamp()}"

    def create(self, schema_id: str, position: Mapping[str, float]) -> Optional[NodeInstance]:
        """
        Build a fresh instance bound to `schema_id`, or None when the schema
        is not registered. Properties without a default are left out of the
        data bag. The instance is not tracked anywhere: the caller owns it.
        """
        schema = self.registry.get(schema_id)
        if schema is None:
            return None

        data = {
            name: copy.deepcopy(prop.default)
            for name, prop in schema.properties.items()
            if prop.has_default()
        }
        stamp = now_iso()
        return NodeInstance(
            id=self.new_id(schema_id),
            schema_id=schema_id,
            position={"x": position["x"], "y": position["y"]},
            data=data,
            metadata={"createdAt": stamp, "updatedAt": stamp, "version": schema.version},
        )
