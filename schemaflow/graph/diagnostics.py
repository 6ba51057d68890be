# schemaflow/graph/diagnostics.py

import networkx as nx
from typing import Any, Dict, Iterable, List, Optional, Tuple

from schemaflow.core.models import Category, EdgeInstance, NodeInstance
from schemaflow.registry.registry import SchemaRegistry
from schemaflow.utils.graph import (
    ancestors_of, build_graph, descendants_of, duplicate_edges, simple_view,
)


def _terminal(nodes: List[NodeInstance], registry: SchemaRegistry, category: Category) -> Optional[str]:
    for n in nodes:
        if registry.category_of(n.schema_id) == category.value:
            return n.id
    return None


def graph_diagnostics(
    nodes: Iterable[NodeInstance],
    edges: Iterable[EdgeInstance],
    registry: SchemaRegistry,
) -> Tuple[List[str], Dict[str, Any]]:
    """
    Advisory findings the run gate does not enforce.

    Returns (issues, detail):
      - unreachable nodes (no path from start)
      - dead ends (no path to end)
      - cycles
      - parallel duplicate edges
      - edges whose endpoints are not nodes of the workflow
    None of these change whether the graph is Runnable.
    """
    nodes = list(nodes)
    edges = list(edges)
    G = build_graph(nodes, edges)
    D = simple_view(G)

    start = _terminal(nodes, registry, Category.START)
    end = _terminal(nodes, registry, Category.END)
    node_ids = [n.id for n in nodes]

    issues: List[str] = []

    dangling = [e.id for e in edges if e.source not in node_ids or e.target not in node_ids]
    if dangling:
        issues.append(f"[STRUCTURE] Edges referencing unknown nodes: {dangling}")

    unreachable: List[str] = []
    dead_ends: List[str] = []
    if start is not None:
        reach = descendants_of(G, start) | {start}
        unreachable = [nid for nid in node_ids if nid not in reach]
        if unreachable:
            issues.append(
                f"[REACHABILITY] Nodes not reachable from start: {unreachable} "
                "(these nodes will never be executed)"
            )
    if end is not None:
        leads = ancestors_of(G, end) | {end}
        dead_ends = [nid for nid in node_ids if nid not in leads]
        if dead_ends:
            issues.append(f"[REACHABILITY] Nodes with no path to end: {dead_ends}")

    cycles = [sorted(c) for c in nx.simple_cycles(D)]
    if cycles:
        issues.append(
            f"[STRUCTURE] Workflow contains cycles {cycles} "
            "(may cause infinite loops or repeated execution)"
        )

    dupes = duplicate_edges(G)
    if dupes:
        pairs = [f"{u}->{v} x{c}" for u, v, c in dupes]
        issues.append(f"[STRUCTURE] Duplicate parallel edges: {pairs}")

    orphans = [nid for nid in node_ids if G.in_degree(nid) == 0 and G.out_degree(nid) == 0]

    n_nodes = len(node_ids)
    largest_cc = max(nx.weakly_connected_components(D), key=len) if D.number_of_nodes() else set()

    detail = {
        "n_nodes": n_nodes,
        "n_edges": G.number_of_edges(),
        "start": start,
        "end": end,
        "connected_ratio": (len(largest_cc) / D.number_of_nodes()) if D.number_of_nodes() else 0.0,
        "acyclic": not cycles,
        "cycles": cycles,
        "orphan_nodes": orphans,
        "unreachable_nodes": unreachable,
        "dead_end_nodes": dead_ends,
        "duplicate_edges": [list(d) for d in dupes],
        "dangling_edges": dangling,
    }
    return issues, detail
