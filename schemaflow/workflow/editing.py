# schemaflow/workflow/editing.py
"""
Helpers a front end uses to build and edit a workflow definition in memory.
Persisting the definition is left to the caller.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Mapping, Optional

from schemaflow.core.models import (
    Category, EdgeInstance, NodeInstance, ValidationResult, WorkflowDefinition, now_iso,
)
from schemaflow.registry.factory import NodeInstanceFactory
from schemaflow.registry.registry import SchemaRegistry
from schemaflow.utils.logger import get_logger
from schemaflow.validation.instance import InstanceValidator

logger = get_logger("workflow")

DEFAULT_START_POSITION = {"x": 250, "y": 100}
DEFAULT_END_POSITION = {"x": 600, "y": 300}

_PROTECTED = {Category.START.value, Category.END.value}


def _terminal_node(node_id: str, position: Mapping[str, float], stamp: str) -> NodeInstance:
    return NodeInstance(
        id=node_id,
        schema_id=node_id,
        position=dict(position),
        data={},
        metadata={"createdAt": stamp, "updatedAt": stamp, "version": "1.0.0"},
    )


def new_workflow(name: str, description: str = "", author: str = "User") -> WorkflowDefinition:
    """A fresh definition holding only the default `start` and `end` nodes."""
    stamp = now_iso()
    return WorkflowDefinition(
        id=f"workflow_{time.time_ns() // 1_000_000}",
        name=name,
        description=description,
        version="1.0.0",
        nodes=[
            _terminal_node("start", DEFAULT_START_POSITION, stamp),
            _terminal_node("end", DEFAULT_END_POSITION, stamp),
        ],
        edges=[],
        metadata={"createdAt": stamp, "updatedAt": stamp, "author": author},
    )


def _touch(workflow: WorkflowDefinition) -> None:
    workflow.metadata["updatedAt"] = now_iso()


def add_node(
    workflow: WorkflowDefinition,
    factory: NodeInstanceFactory,
    schema_id: str,
    position: Mapping[str, float],
) -> Optional[NodeInstance]:
    node = factory.create(schema_id, position)
    if node is None:
        logger.warning("Cannot add node: schema '%s' is not registered", schema_id)
        return None
    workflow.nodes.append(node)
    _touch(workflow)
    return node


def connect(
    workflow: WorkflowDefinition,
    source: str,
    target: str,
    source_handle: Optional[str] = None,
    target_handle: Optional[str] = None,
    **style: Any,
) -> Optional[EdgeInstance]:
    """Append an edge between two existing nodes. Parallel edges are allowed."""
    if workflow.node(source) is None or workflow.node(target) is None:
        logger.warning("Cannot connect %s -> %s: unknown endpoint", source, target)
        return None
    edge = EdgeInstance(
        id=f"e{source}-{target}-{uuid.uuid4().hex[:8]}",
        source=source,
        target=target,
        source_handle=source_handle,
        target_handle=target_handle,
        type=style.get("type"),
        animated=style.get("animated"),
        style=style.get("style"),
    )
    workflow.edges.append(edge)
    _touch(workflow)
    return edge


def remove_node(workflow: WorkflowDefinition, registry: SchemaRegistry, node_id: str) -> bool:
    """
    Delete a node and every edge touching it. Start and end nodes are
    protected and cannot be deleted.
    """
    node = workflow.node(node_id)
    if node is None:
        return False
    if registry.category_of(node.schema_id) in _PROTECTED:
        logger.warning("Cannot delete start or end node '%s'", node_id)
        return False

    workflow.nodes = [n for n in workflow.nodes if n.id != node_id]
    workflow.edges = [e for e in workflow.edges if e.source != node_id and e.target != node_id]
    _touch(workflow)
    return True


def update_node(
    workflow: WorkflowDefinition,
    node_id: str,
    data: Optional[Mapping[str, Any]] = None,
    position: Optional[Mapping[str, float]] = None,
) -> bool:
    node = workflow.node(node_id)
    if node is None:
        return False
    node.update(data=data, position=position)
    _touch(workflow)
    return True


def load_workflow(data: Mapping[str, Any], registry: SchemaRegistry) -> WorkflowDefinition:
    """
    Parse a persisted definition. Nodes whose schema is not registered are
    dropped together with the edges that reference them.
    """
    workflow = WorkflowDefinition.from_dict(data)
    kept = []
    for node in workflow.nodes:
        if node.schema_id in registry:
            kept.append(node)
        else:
            logger.warning("Schema not found for node '%s': %s", node.id, node.schema_id)
    if len(kept) != len(workflow.nodes):
        ids = {n.id for n in kept}
        workflow.nodes = kept
        workflow.edges = [e for e in workflow.edges if e.source in ids and e.target in ids]
    return workflow


def preview_instance(
    validator: InstanceValidator,
    instance: NodeInstance,
    data: Mapping[str, Any],
) -> ValidationResult:
    """Validate pending form data for `instance` without touching the instance."""
    return validator.validate(instance.with_data(data))
