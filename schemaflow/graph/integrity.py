# schemaflow/graph/integrity.py
"""
Run gate for a node/edge graph.

A graph is Runnable only if every rule below holds; the first failing rule
makes it Blocked:

  trivial         no nodes besides start/end -> Runnable right away
  start_end       exactly one start node and exactly one end node
  terminal_edges  some edge leaves start, some edge enters end
  connectivity    every other node has an incoming and an outgoing edge
  configuration   every other node's data validates against its schema

Only local in/out degree is checked. Reachability, cycles and parallel
edges do not affect the verdict; see graph/diagnostics.py for those.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from schemaflow.core.models import (
    Category, EdgeInstance, NodeInstance, ValidationError, WorkflowDefinition,
)
from schemaflow.registry.registry import SchemaRegistry
from schemaflow.utils.graph import build_graph, has_incoming, has_outgoing
from schemaflow.utils.logger import get_logger
from schemaflow.validation.instance import InstanceValidator

logger = get_logger("graph")

RULE_OK = "ok"
RULE_TRIVIAL = "trivial"
RULE_START_END = "start_end"
RULE_TERMINAL_EDGES = "terminal_edges"
RULE_CONNECTIVITY = "connectivity"
RULE_CONFIGURATION = "configuration"


@dataclass
class GraphCheckResult:
    runnable: bool
    rule: str
    reason: str = ""
    node_id: Optional[str] = None
    errors: List[ValidationError] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.runnable

    def to_dict(self):
        out = {"runnable": self.runnable, "rule": self.rule, "reason": self.reason}
        if self.node_id is not None:
            out["nodeId"] = self.node_id
        if self.errors:
            out["errors"] = [e.to_dict() for e in self.errors]
        return out


def _blocked(rule: str, reason: str, node_id: Optional[str] = None,
             errors: Optional[List[ValidationError]] = None) -> GraphCheckResult:
    logger.info("Workflow blocked [%s]: %s", rule, reason)
    return GraphCheckResult(False, rule, reason, node_id, errors or [])


class GraphIntegrityChecker:

    def __init__(self, registry: SchemaRegistry, validator: Optional[InstanceValidator] = None):
        self.registry = registry
        self.validator = validator or InstanceValidator(registry)

    def check(self, nodes: Iterable[NodeInstance], edges: Iterable[EdgeInstance]) -> GraphCheckResult:
        """Evaluate the run gate from scratch; nothing is cached between calls."""
        nodes = list(nodes)
        edges = list(edges)

        starts = [n for n in nodes if self.registry.category_of(n.schema_id) == Category.START.value]
        ends = [n for n in nodes if self.registry.category_of(n.schema_id) == Category.END.value]
        terminal_ids = {n.id for n in starts} | {n.id for n in ends}
        intermediate = [n for n in nodes if n.id not in terminal_ids]

        # 1) nothing to run between start and end
        if not intermediate:
            return GraphCheckResult(True, RULE_TRIVIAL, "no nodes besides start/end")

        # 2) start / end presence
        if len(starts) != 1 or len(ends) != 1:
            return _blocked(
                RULE_START_END,
                f"expected exactly one start and one end node, found {len(starts)} start and {len(ends)} end",
            )
        start, end = starts[0], ends[0]

        G = build_graph(nodes, edges)

        # 3) start must lead somewhere, end must be reached from somewhere
        if not has_outgoing(G, start.id):
            return _blocked(RULE_TERMINAL_EDGES, f"start node '{start.id}' has no outgoing edge", start.id)
        if not has_incoming(G, end.id):
            return _blocked(RULE_TERMINAL_EDGES, f"end node '{end.id}' has no incoming edge", end.id)

        # 4) + 5) per intermediate node, in node order
        for node in intermediate:
            if not has_incoming(G, node.id):
                return _blocked(RULE_CONNECTIVITY, f"node '{node.id}' has no incoming edge", node.id)
            if not has_outgoing(G, node.id):
                return _blocked(RULE_CONNECTIVITY, f"node '{node.id}' has no outgoing edge", node.id)

            result = self.validator.validate(node)
            if not result.is_valid:
                summary = "; ".join(str(e) for e in result.errors)
                return _blocked(
                    RULE_CONFIGURATION,
                    f"node '{node.id}' is not configured correctly: {summary}",
                    node.id,
                    result.errors,
                )

        return GraphCheckResult(True, RULE_OK, "all checks passed")

    def check_workflow(self, workflow: WorkflowDefinition) -> GraphCheckResult:
        return self.check(workflow.nodes, workflow.edges)

    def is_runnable(self, nodes: Iterable[NodeInstance], edges: Iterable[EdgeInstance]) -> bool:
        return self.check(nodes, edges).runnable
