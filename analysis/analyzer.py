"""
Graph Analysis for Deadlock Avoidance Lab.

Summarises a playground graph for the "Run Banker's Algorithm" panel.
This is a display summary only; it does not feed the allocation game.
"""

from dataclasses import dataclass, field
from typing import List

from models.graph import NodeKind, ResourceGraph


@dataclass
class GraphAnalysis:
    """Counts and cycle status of a resource-allocation graph."""
    processes: int
    resources: int
    edges: int
    request_edges: int
    assignment_edges: int
    has_cycle: bool
    cycle_edges: List[str] = field(default_factory=list)
    wait_for_edges: List[str] = field(default_factory=list)

    def display(self) -> str:
        """Format results for display."""
        result = "Graph Analysis:\n"
        result += f"  Processes: {self.processes}\n"
        result += f"  Resources: {self.resources}\n"
        result += f"  Edges: {self.edges} (requests={self.request_edges}, assignments={self.assignment_edges})\n"
        if self.has_cycle:
            result += f"  Deadlock detected! Cycle edges: {', '.join(self.cycle_edges)}\n"
        else:
            result += "  No cycles detected\n"
        if self.wait_for_edges:
            result += f"  Wait-for edges: {', '.join(self.wait_for_edges)}"
        else:
            result += "  Wait-for edges: (none)"
        return result


def edge_label(graph: ResourceGraph, source: int, target: int) -> str:
    """Format an edge as "P0->R1" using node labels."""
    return f"{graph.get_node(source).label}->{graph.get_node(target).label}"


def analyze_graph(graph: ResourceGraph) -> GraphAnalysis:
    """
    Summarise a graph: node counts, edge kinds, cycles and wait-for edges.

    Request edges run process -> resource, assignment edges resource ->
    process. Edges between nodes of the same kind count in neither.

    Args:
        graph: Playground graph (cycle flags are refreshed)

    Returns:
        GraphAnalysis for display
    """
    report = graph.detect_cycles()
    kinds = {n.id: n.kind for n in graph.nodes}

    requests = sum(
        1 for e in graph.edges
        if kinds[e.source] is NodeKind.PROCESS and kinds[e.target] is NodeKind.RESOURCE
    )
    assignments = sum(
        1 for e in graph.edges
        if kinds[e.source] is NodeKind.RESOURCE and kinds[e.target] is NodeKind.PROCESS
    )

    wait_for = graph.wait_for_graph()

    return GraphAnalysis(
        processes=len(graph.nodes_of_kind(NodeKind.PROCESS)),
        resources=len(graph.nodes_of_kind(NodeKind.RESOURCE)),
        edges=len(graph.edges),
        request_edges=requests,
        assignment_edges=assignments,
        has_cycle=report.has_cycle,
        cycle_edges=[edge_label(graph, e.source, e.target) for e in report.cycle_edges],
        wait_for_edges=[edge_label(wait_for, e.source, e.target) for e in wait_for.edges]
    )
