"""
Graph Playground Tests - Resource-Allocation Graph and Cycle Detection

Tests node/edge mutation, clamping, hit testing, cycle marking, the
wait-for reduction and the graph analysis summary.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.graph import ResourceGraph, NodeKind, GraphMode
from utils.config import GameSettings
from algorithms.detection import detect_cycles
from analysis.analyzer import analyze_graph
from utils.logger import SimulatorLogger


def _four_cycle():
    """P0 -> R0 -> P1 -> R1 -> P0."""
    graph = ResourceGraph(seed=1)
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 300, 100)
    p1 = graph.add_node(NodeKind.PROCESS, 300, 300)
    r1 = graph.add_node(NodeKind.RESOURCE, 100, 300)
    pairs = [(p0.id, r0.id), (r0.id, p1.id), (p1.id, r1.id), (r1.id, p0.id)]
    for source, target in pairs:
        graph.add_edge(source, target)
    return graph, pairs


def test_add_node_labels_follow_live_count():
    """Labels are kind letter + current count of that kind."""
    print("\n" + "="*60)
    print("TEST 1: Node Labels")
    print("="*60)

    graph = ResourceGraph(seed=3)
    p0 = graph.add_node(NodeKind.PROCESS)
    r0 = graph.add_node(NodeKind.RESOURCE)
    p1 = graph.add_node(NodeKind.PROCESS)

    assert [p0.label, r0.label, p1.label] == ["P0", "R0", "P1"]
    assert p0.radius == 25 and r0.radius == 20
    assert len({p0.id, r0.id, p1.id}) == 3, "Ids are unique"
    for node in graph.nodes:
        assert 50 <= node.x <= graph.width - 50
        assert 50 <= node.y <= graph.height - 50
    print("  ✓ Labels and placement verified")


def test_add_edge_rejects_duplicates_and_self_loops():
    """Edges are simple: no self-loops, one edge per unordered pair."""
    graph = ResourceGraph()
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 200, 100)

    edge = graph.add_edge(p0.id, r0.id)
    assert edge is not None and not edge.in_cycle

    assert graph.add_edge(p0.id, r0.id) is None, "Same direction is a no-op"
    assert graph.add_edge(r0.id, p0.id) is None, "Reverse direction is a no-op"
    assert graph.add_edge(p0.id, p0.id) is None, "Self-loops are rejected"
    assert graph.add_edge(p0.id, 999) is None, "Unknown nodes are rejected"
    assert len(graph.edges) == 1


def test_four_cycle_marks_every_edge():
    """A square P0-R0-P1-R1 is a cycle through all four edges."""
    print("\n" + "="*60)
    print("TEST 2: Four-Node Cycle")
    print("="*60)

    graph, pairs = _four_cycle()
    report = graph.detect_cycles()
    print(f"  Cycle edges: {sorted(report.pairs)}")

    assert report.has_cycle
    assert graph.has_cycle
    assert all(e.in_cycle for e in graph.edges)
    assert report.pairs == set(pairs)
    print("  ✓ All four edges marked")


def test_removing_any_edge_breaks_the_cycle():
    """Each edge of the square is essential to the cycle."""
    for removed in range(4):
        graph, pairs = _four_cycle()
        assert graph.remove_edge(*pairs[removed])

        report = detect_cycles(graph)

        assert not report.has_cycle, f"Cycle should vanish without edge {pairs[removed]}"
        assert not graph.has_cycle
        assert not any(e.in_cycle for e in graph.edges)
        assert len(graph.edges) == 3


def test_remove_missing_edge():
    graph, _ = _four_cycle()
    assert not graph.remove_edge(0, 2)
    assert len(graph.edges) == 4


def test_no_two_cycle_on_single_edge():
    """An edge back to the DFS parent is not a cycle."""
    graph = ResourceGraph()
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 200, 100)
    p1 = graph.add_node(NodeKind.PROCESS, 300, 100)
    graph.add_edge(p0.id, r0.id)
    graph.add_edge(r0.id, p1.id)

    report = graph.detect_cycles()

    assert not report.has_cycle
    assert report.cycle_edges == []


def test_tail_edges_are_not_marked():
    """Only edges on the cycle are marked, not the path leading to it."""
    graph = ResourceGraph()
    tail = graph.add_node(NodeKind.PROCESS, 50, 50)
    a = graph.add_node(NodeKind.RESOURCE, 150, 50)
    b = graph.add_node(NodeKind.PROCESS, 250, 50)
    c = graph.add_node(NodeKind.RESOURCE, 250, 150)
    graph.add_edge(tail.id, a.id)
    graph.add_edge(a.id, b.id)
    graph.add_edge(b.id, c.id)
    graph.add_edge(c.id, a.id)

    report = graph.detect_cycles()

    assert report.has_cycle
    assert report.pairs == {(a.id, b.id), (b.id, c.id), (c.id, a.id)}
    assert not graph.find_edge(tail.id, a.id).in_cycle


def test_two_cycles_sharing_a_node_are_both_marked():
    """Every edge lying on some cycle is marked."""
    graph = ResourceGraph()
    hub = graph.add_node(NodeKind.RESOURCE, 200, 200)
    left = [graph.add_node(NodeKind.PROCESS, 100, 100 + 50 * i) for i in range(2)]
    right = [graph.add_node(NodeKind.PROCESS, 300, 100 + 50 * i) for i in range(2)]
    for side in (left, right):
        graph.add_edge(hub.id, side[0].id)
        graph.add_edge(side[0].id, side[1].id)
        graph.add_edge(side[1].id, hub.id)

    report = graph.detect_cycles()

    assert report.has_cycle
    assert len(report.cycle_edges) == 6
    assert all(e.in_cycle for e in graph.edges)


def test_move_node_clamps_to_canvas():
    """Nodes stay fully inside the canvas."""
    graph = ResourceGraph(width=400, height=300)
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 100, 100)

    graph.move_node(p0.id, -50, 1000)
    assert (p0.x, p0.y) == (25, 275)

    graph.move_node(r0.id, 1000, 5)
    assert (r0.x, r0.y) == (380, 20)

    graph.move_node(p0.id, 200, 150)
    assert (p0.x, p0.y) == (200, 150)

    assert graph.move_node(999, 0, 0) is None


def test_node_at_hit_testing():
    """Processes are circles, resources are squares."""
    graph = ResourceGraph()
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 300, 100)

    assert graph.node_at(110, 110) is p0
    assert graph.node_at(120, 120) is None, "Corner of the bounding box is outside the circle"
    assert graph.node_at(318, 118) is r0, "Corner of the square is inside"
    assert graph.node_at(200, 200) is None


def test_clear_resets_everything():
    graph, _ = _four_cycle()

    graph.clear()

    assert graph.nodes == [] and graph.edges == []
    assert not graph.has_cycle
    assert graph.add_node(NodeKind.PROCESS).label == "P0"


def test_wait_for_reduction():
    """P0 -> R0 -> P1 becomes P0 -> P1 in the wait-for graph."""
    print("\n" + "="*60)
    print("TEST 3: Wait-For Graph")
    print("="*60)

    graph = ResourceGraph()
    p0 = graph.add_node(NodeKind.PROCESS, 100, 100)
    r0 = graph.add_node(NodeKind.RESOURCE, 200, 100)
    p1 = graph.add_node(NodeKind.PROCESS, 300, 100)
    r1 = graph.add_node(NodeKind.RESOURCE, 400, 100)
    p2 = graph.add_node(NodeKind.PROCESS, 500, 100)
    graph.add_edge(p0.id, r0.id)   # P0 requests R0
    graph.add_edge(r0.id, p1.id)   # R0 assigned to P1
    graph.add_edge(p1.id, r1.id)   # P1 requests R1
    graph.add_edge(r1.id, p2.id)   # R1 assigned to P2

    reduced = graph.wait_for_graph()
    labels = {n.id: n.label for n in reduced.nodes}
    edges = [(labels[e.source], labels[e.target]) for e in reduced.edges]
    print(f"  Wait-for edges: {edges}")

    assert [n.label for n in reduced.nodes] == ["P0", "P1", "P2"]
    assert edges == [("P0", "P1"), ("P1", "P2")]
    assert not reduced.has_cycle
    assert graph.toggle_mode() == GraphMode.WAIT_FOR
    assert graph.toggle_mode() == GraphMode.RAG
    print("  ✓ Wait-for reduction verified")


def test_analyze_graph_summary():
    """The Banker's panel summary counts nodes, edge kinds and cycles."""
    graph, _ = _four_cycle()

    analysis = analyze_graph(graph)
    print(analysis.display())

    assert analysis.processes == 2
    assert analysis.resources == 2
    assert analysis.edges == 4
    assert analysis.request_edges == 2
    assert analysis.assignment_edges == 2
    assert analysis.has_cycle
    assert sorted(analysis.cycle_edges) == ["P0->R0", "P1->R1", "R0->P1", "R1->P0"]
    assert sorted(analysis.wait_for_edges) == ["P0->P1"], "P1->P0 joins the same pair"
    assert "Deadlock detected!" in analysis.display()


def test_cycle_status_is_logged(tmp_path):
    """Cycle detection reports through the logger when one is attached."""
    log_file = tmp_path / "graph.log"
    logger = SimulatorLogger(log_file=str(log_file), quiet=True)
    graph = ResourceGraph(logger=logger)
    a = graph.add_node(NodeKind.PROCESS, 100, 100)
    b = graph.add_node(NodeKind.RESOURCE, 200, 100)
    c = graph.add_node(NodeKind.PROCESS, 200, 200)
    graph.add_edge(a.id, b.id)
    graph.add_edge(b.id, c.id)
    graph.add_edge(c.id, a.id)
    logger.close()

    text = log_file.read_text(encoding="utf-8")
    assert "Deadlock detected! Cycle edges: [P0->R0, R0->P1, P1->P0]" in text


def _long_chain(length: int) -> ResourceGraph:
    """Alternating P/R nodes joined end to end: N0 - N1 - ... - N(length-1)."""
    graph = ResourceGraph()
    nodes = [
        graph.add_node(NodeKind.PROCESS if i % 2 == 0 else NodeKind.RESOURCE, 100, 100)
        for i in range(length)
    ]
    for a, b in zip(nodes, nodes[1:]):
        graph.add_edge(a.id, b.id)
    return graph


def test_long_chain_has_no_cycle():
    """A path longer than the interpreter recursion limit is searched fully."""
    print("\n" + "="*60)
    print("TEST 4: Long Chain")
    print("="*60)

    graph = _long_chain(1100)

    assert len(graph.edges) == 1099
    assert not graph.has_cycle
    assert not any(e.in_cycle for e in graph.edges)
    print("  ✓ 1100-node chain searched without a cycle")


def test_long_chain_closed_into_ring():
    """Closing a long chain marks every edge of the ring."""
    graph = _long_chain(1100)
    first, last = graph.nodes[0], graph.nodes[-1]

    edge = graph.add_edge(last.id, first.id)

    assert edge is not None and edge.in_cycle
    assert graph.has_cycle
    assert len(graph.edges) == 1100
    assert all(e.in_cycle for e in graph.edges)


def test_graph_from_settings_uses_canvas_size():
    """Canvas overrides in the settings change placement and clamping."""
    settings = GameSettings(canvas_width=400, canvas_height=300)
    graph = ResourceGraph.from_settings(settings, seed=2)

    assert (graph.width, graph.height) == (400, 300)
    node = graph.add_node(NodeKind.PROCESS)
    assert 50 <= node.x <= 350 and 50 <= node.y <= 250

    graph.move_node(node.id, 1000, 1000)
    assert (node.x, node.y) == (375, 275)
