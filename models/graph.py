"""
Resource-Allocation Graph model for Deadlock Avoidance Lab.

Holds the process/resource nodes and request/assignment edges of the graph
playground. Cycle annotation is delegated to algorithms.detection.
"""

import itertools
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from utils.config import GameSettings
from utils.logger import SimulatorLogger


class NodeKind(Enum):
    """Node kinds in a resource-allocation graph."""
    PROCESS = "process"
    RESOURCE = "resource"

    @property
    def letter(self) -> str:
        """Label prefix for this kind."""
        return "P" if self is NodeKind.PROCESS else "R"

    @property
    def radius(self) -> int:
        """Display radius for this kind."""
        return 25 if self is NodeKind.PROCESS else 20


class GraphMode(Enum):
    """Display mode of the playground."""
    RAG = "rag"
    WAIT_FOR = "waitfor"


@dataclass
class Node:
    """
    A process or resource node.

    Attributes:
        id: Unique node identifier within its graph
        kind: PROCESS or RESOURCE
        x, y: Canvas position (centre)
        radius: Display radius (circle for processes, half-side for resources)
        label: Display label such as "P0" or "R2"
    """
    id: int
    kind: NodeKind
    x: float
    y: float
    radius: int
    label: str

    def contains(self, x: float, y: float) -> bool:
        """Hit test: circle for processes, square for resources."""
        if self.kind is NodeKind.PROCESS:
            return (x - self.x) ** 2 + (y - self.y) ** 2 <= self.radius ** 2
        return abs(x - self.x) <= self.radius and abs(y - self.y) <= self.radius


@dataclass
class Edge:
    """
    Directed edge between two nodes.

    P -> R is a request edge, R -> P an assignment edge. Direction is kept
    for rendering only; cycle detection treats the graph as undirected.
    """
    source: int
    target: int
    in_cycle: bool = False

    def connects(self, a: int, b: int) -> bool:
        """True if this edge joins a and b in either direction."""
        return (self.source == a and self.target == b) or (self.source == b and self.target == a)

    def other(self, node_id: int) -> int:
        """Endpoint opposite to node_id."""
        return self.target if self.source == node_id else self.source


class ResourceGraph:
    """
    Mutable resource-allocation graph owned by one playground session.

    Nodes are destroyed only by clear(). Every edge mutation re-runs
    cycle detection so Edge.in_cycle is always current.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 500,
        seed: Optional[int] = None,
        logger: Optional[SimulatorLogger] = None
    ):
        """
        Initialize an empty graph.

        Args:
            width: Canvas width used for placement and clamping
            height: Canvas height used for placement and clamping
            seed: Optional seed for random node placement
            logger: Optional logger for cycle status
        """
        self.width = width
        self.height = height
        self.logger = logger
        self.mode = GraphMode.RAG
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.has_cycle = False
        self._ids = itertools.count()
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_settings(
        cls,
        settings: GameSettings,
        seed: Optional[int] = None,
        logger: Optional[SimulatorLogger] = None
    ) -> "ResourceGraph":
        """Empty graph sized to settings.canvas_width x settings.canvas_height."""
        return cls(settings.canvas_width, settings.canvas_height, seed=seed, logger=logger)

    def get_node(self, node_id: int) -> Optional[Node]:
        """Look up a node by id."""
        return next((n for n in self.nodes if n.id == node_id), None)

    def nodes_of_kind(self, kind: NodeKind) -> List[Node]:
        """All nodes of the given kind, in insertion order."""
        return [n for n in self.nodes if n.kind is kind]

    def add_node(self, kind: NodeKind, x: Optional[float] = None, y: Optional[float] = None) -> Node:
        """
        Add a node of the given kind.

        The label is the kind letter followed by the current number of nodes
        of that kind, so labels follow the live count.

        Args:
            kind: PROCESS or RESOURCE
            x, y: Optional position; random inside a 50px margin otherwise

        Returns:
            The created Node
        """
        if x is None:
            x = self._rng.random() * (self.width - 100) + 50
        if y is None:
            y = self._rng.random() * (self.height - 100) + 50

        node = Node(
            id=next(self._ids),
            kind=kind,
            x=float(x),
            y=float(y),
            radius=kind.radius,
            label=f"{kind.letter}{len(self.nodes_of_kind(kind))}"
        )
        self.nodes.append(node)
        return node

    def find_edge(self, a: int, b: int) -> Optional[Edge]:
        """Edge joining a and b in either direction, if any."""
        return next((e for e in self.edges if e.connects(a, b)), None)

    def add_edge(self, source: int, target: int) -> Optional[Edge]:
        """
        Connect two nodes.

        No-op (returns None) for self-loops, unknown ids, or when an edge
        already joins the pair in either direction.

        Args:
            source: Tail node id
            target: Head node id

        Returns:
            The new Edge, or None if nothing was added
        """
        if source == target:
            return None
        if self.get_node(source) is None or self.get_node(target) is None:
            return None
        if self.find_edge(source, target) is not None:
            return None

        edge = Edge(source=source, target=target)
        self.edges.append(edge)
        self.detect_cycles()
        return edge

    def remove_edge(self, source: int, target: int) -> bool:
        """
        Remove the edge joining two nodes (either direction).

        Returns:
            True if an edge was removed
        """
        edge = self.find_edge(source, target)
        if edge is None:
            return False

        self.edges.remove(edge)
        self.detect_cycles()
        return True

    def move_node(self, node_id: int, x: float, y: float) -> Optional[Node]:
        """
        Move a node, clamped so it stays fully on the canvas.

        Returns:
            The moved Node, or None for an unknown id
        """
        node = self.get_node(node_id)
        if node is None:
            return None

        node.x = float(min(max(x, node.radius), self.width - node.radius))
        node.y = float(min(max(y, node.radius), self.height - node.radius))
        return node

    def node_at(self, x: float, y: float) -> Optional[Node]:
        """First node whose shape contains the point."""
        return next((n for n in self.nodes if n.contains(x, y)), None)

    def clear(self) -> None:
        """Drop all nodes and edges and reset detection state."""
        self.nodes = []
        self.edges = []
        self.has_cycle = False

    def toggle_mode(self) -> GraphMode:
        """Switch between RAG and wait-for display."""
        self.mode = GraphMode.WAIT_FOR if self.mode is GraphMode.RAG else GraphMode.RAG
        return self.mode

    def adjacency(self) -> Dict[int, List[Edge]]:
        """Incident edges per node id, in edge insertion order."""
        incident = {n.id: [] for n in self.nodes}
        for edge in self.edges:
            incident.setdefault(edge.source, []).append(edge)
            incident.setdefault(edge.target, []).append(edge)
        return incident

    def detect_cycles(self):
        """Re-run cycle detection and annotate edges."""
        # Import here to avoid circular dependency
        from algorithms.detection import detect_cycles
        report = detect_cycles(self)
        self.has_cycle = report.has_cycle
        if self.logger:
            labels = {n.id: n.label for n in self.nodes}
            self.logger.log_cycle_status(
                report.has_cycle,
                [f"{labels[e.source]}->{labels[e.target]}" for e in report.cycle_edges]
            )
        return report

    def wait_for_graph(self) -> "ResourceGraph":
        """
        Reduce this RAG to a wait-for graph among processes.

        Pi -> Pj when Pi requests a resource (Pi -> R) that is assigned to
        Pj (R -> Pj). Process nodes keep their positions and labels.

        Returns:
            A new ResourceGraph containing only process nodes
        """
        reduced = ResourceGraph(self.width, self.height)
        id_map = {}
        for node in self.nodes_of_kind(NodeKind.PROCESS):
            copy = reduced.add_node(NodeKind.PROCESS, node.x, node.y)
            copy.label = node.label
            id_map[node.id] = copy.id

        kinds = {n.id: n.kind for n in self.nodes}
        for request in self.edges:
            if kinds.get(request.source) is not NodeKind.PROCESS:
                continue
            if kinds.get(request.target) is not NodeKind.RESOURCE:
                continue
            for assignment in self.edges:
                if assignment.source != request.target:
                    continue
                if kinds.get(assignment.target) is not NodeKind.PROCESS:
                    continue
                reduced.add_edge(id_map[request.source], id_map[assignment.target])

        return reduced
