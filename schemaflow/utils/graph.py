# utils/graph.py
from typing import Iterable, Optional
import networkx as nx

from schemaflow.core.models import EdgeInstance, NodeInstance


def build_graph(nodes: Iterable[NodeInstance], edges: Iterable[EdgeInstance]) -> nx.MultiDiGraph:
    """
    Build a directed multigraph from node and edge instances.

    Parallel edges are kept (one graph edge per EdgeInstance, keyed by edge id)
    so duplicates stay visible to diagnostics. Endpoints that do not name a
    known node are still added, flagged with `dangling=True`.
    """
    G = nx.MultiDiGraph()
    for n in nodes:
        G.add_node(n.id, instance=n, dangling=False)

    for e in edges:
        for endpoint in (e.source, e.target):
            if endpoint not in G:
                G.add_node(endpoint, instance=None, dangling=True)
        G.add_edge(e.source, e.target, key=e.id, edge=e)
    return G


def simple_view(G: nx.MultiDiGraph) -> nx.DiGraph:
    """Collapse parallel edges; handy for reachability and cycle queries."""
    return nx.DiGraph(G)


def has_incoming(G: nx.MultiDiGraph, node_id: str) -> bool:
    return node_id in G and G.in_degree(node_id) > 0


def has_outgoing(G: nx.MultiDiGraph, node_id: str) -> bool:
    return node_id in G and G.out_degree(node_id) > 0


def duplicate_edges(G: nx.MultiDiGraph) -> list[tuple]:
    """Return (source, target, count) for every pair joined by more than one edge."""
    seen = {}
    for u, v in G.edges():
        seen[(u, v)] = seen.get((u, v), 0) + 1
    return [(u, v, c) for (u, v), c in seen.items() if c > 1]


def descendants_of(G: nx.MultiDiGraph, source: Optional[str]) -> set:
    if source is None or source not in G:
        return set()
    return nx.descendants(G, source)


def ancestors_of(G: nx.MultiDiGraph, target: Optional[str]) -> set:
    if target is None or target not in G:
        return set()
    return nx.ancestors(G, target)
