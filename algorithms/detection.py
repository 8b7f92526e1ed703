"""
Cycle Detection for Deadlock Avoidance Lab.

Finds cycles in the graph playground. A cycle in a resource-allocation graph
indicates a potential deadlock; in a wait-for graph with single-instance
resources it indicates a certain one.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from models.graph import Edge, ResourceGraph


@dataclass
class CycleReport:
    """
    Result of a cycle detection run.

    Attributes:
        has_cycle: True if at least one cycle exists
        cycle_edges: Edges lying on a detected cycle (in_cycle == True)
    """
    has_cycle: bool
    cycle_edges: List[Edge] = field(default_factory=list)

    @property
    def pairs(self) -> Set[Tuple[int, int]]:
        """(source, target) ids of the cycle edges."""
        return {(e.source, e.target) for e in self.cycle_edges}


def detect_cycles(graph: ResourceGraph) -> CycleReport:
    """
    Detect cycles with a depth-first search and mark the edges involved.

    The graph is treated as undirected and simple. From each unvisited node
    the search keeps the current path on a stack:
    - The edge back to the immediate parent is skipped (no 2-cycles)
    - A neighbour already on the stack closes a cycle: the closing edge and
      every tree edge back to that neighbour are marked
    - An unvisited neighbour is pushed and explored next

    Every back edge is followed, so all edges that lie on some cycle end up
    marked, not only those of the first cycle found.

    The search uses an explicit stack, so path length is not limited by the
    interpreter recursion limit.

    Time Complexity: O(N + E) to traverse, plus the length of each closed cycle

    Args:
        graph: Graph to analyse; Edge.in_cycle is rewritten for every edge

    Returns:
        CycleReport with the marked edges
    """
    for edge in graph.edges:
        edge.in_cycle = False

    incident = graph.adjacency()
    visited: Set[int] = set()
    on_stack: Set[int] = set()
    parent_edge: Dict[int, Optional[Edge]] = {}

    def close_cycle(node_id: int, ancestor: int, closing: Edge) -> None:
        """Mark the closing edge and the tree path from node_id up to ancestor."""
        closing.in_cycle = True
        current = node_id
        while current != ancestor:
            tree_edge = parent_edge[current]
            tree_edge.in_cycle = True
            current = tree_edge.other(current)

    def dfs(root: int) -> None:
        """Explicit-stack DFS; frames are (node_id, parent, incident edge iterator)."""
        visited.add(root)
        on_stack.add(root)
        stack: List[Tuple[int, Optional[int], Iterator[Edge]]] = [
            (root, None, iter(incident.get(root, [])))
        ]

        while stack:
            node_id, parent, edges = stack[-1]
            descended = False

            for edge in edges:
                neighbour = edge.other(node_id)
                if neighbour == parent:
                    continue
                if neighbour in on_stack:
                    close_cycle(node_id, neighbour, edge)
                elif neighbour not in visited:
                    parent_edge[neighbour] = edge
                    visited.add(neighbour)
                    on_stack.add(neighbour)
                    stack.append((neighbour, node_id, iter(incident.get(neighbour, []))))
                    descended = True
                    break

            if not descended:
                on_stack.discard(node_id)
                stack.pop()

    for node in graph.nodes:
        if node.id not in visited:
            parent_edge[node.id] = None
            dfs(node.id)

    cycle_edges = [e for e in graph.edges if e.in_cycle]
    return CycleReport(has_cycle=len(cycle_edges) > 0, cycle_edges=cycle_edges)
