from __future__ import annotations

from typing import List, Optional, Sequence

from chilon_viz.graph.model import EdgeKey, NodeCategory, VisibleEdge, VisibleNode, VisibleSubgraph
from chilon_viz.layout import (
    ForceSettings,
    ForceSimulation,
    LayoutReconciler,
    SimLink,
    SimNode,
    SimulationState,
)


class _RecordingIntegrator:
    """Integrator stand-in that records lifecycle calls."""

    def __init__(self) -> None:
        self.alpha = 0.2
        self.state = SimulationState.IDLE
        self.alpha_target = 0.0
        self.calls: List[str] = []
        self.nodes: Sequence[SimNode] = ()
        self.links: Sequence[SimLink] = ()
        self.forces: Optional[ForceSettings] = None

    def set_graph(self, nodes: Sequence[SimNode], links: Sequence[SimLink]) -> None:
        self.calls.append("set_graph")
        self.nodes = nodes
        self.links = links

    def configure(self, forces: ForceSettings) -> None:
        self.calls.append("configure")
        self.forces = forces

    def restart(self, alpha: Optional[float] = None) -> None:
        self.calls.append("restart")
        if alpha is not None:
            self.alpha = alpha
        self.state = SimulationState.RUNNING

    def tick(self) -> bool:
        return self.state is not SimulationState.IDLE

    def node(self, name: str) -> Optional[SimNode]:
        return next((node for node in self.nodes if node.name == name), None)


def _make_node(name: str, size: float = 10.0, count: int = 10) -> VisibleNode:
    return VisibleNode(
        name=name,
        count=count,
        category=NodeCategory.NAMESPACE,
        namespace=None,
        size=size,
        share=0.5,
    )


def _make_edge(source: VisibleNode, target: VisibleNode, label: str = "r", lane: int = 1) -> VisibleEdge:
    return VisibleEdge(
        key=EdgeKey(label, source.name, target.name),
        source=source,
        target=target,
        label=label,
        count=3,
        is_datatype=False,
        size=12.0,
        color="#112233",
        namespace=None,
        lane=lane,
    )


def _subgraph(nodes, edges=()) -> VisibleSubgraph:
    return VisibleSubgraph(nodes=tuple(nodes), edges=tuple(edges))


def test_enter_update_exit_events() -> None:
    integrator = _RecordingIntegrator()
    reconciler = LayoutReconciler(integrator, ForceSettings())
    a, b, c = _make_node("A"), _make_node("B"), _make_node("C")
    edge = _make_edge(a, b)

    first = reconciler.reconcile(_subgraph([a, b], [edge]))
    second = reconciler.reconcile(_subgraph([a, c]))

    assert first.entered_nodes == ("A", "B")
    assert first.entered_edges == (edge.key,)
    assert second.entered_nodes == ("C",)
    assert second.updated_nodes == ("A",)
    assert second.exited_nodes == ("B",)
    assert second.entered_edges == ()
    assert second.exited_edges == (edge.key,)
    assert second.topology_changed
    assert second.alpha == 1.0
    assert integrator.state is SimulationState.RUNNING


def test_every_pass_reseeds_configures_and_restarts() -> None:
    integrator = _RecordingIntegrator()
    forces = ForceSettings(link_distance=120.0)
    reconciler = LayoutReconciler(integrator, forces, restart_alpha=0.8)
    subgraph = _subgraph([_make_node("A")])

    reconciler.reconcile(subgraph)
    integrator.alpha = 0.05
    result = reconciler.reconcile(subgraph)

    assert integrator.calls == ["configure", "set_graph", "restart"] * 2
    assert integrator.forces is forces
    assert result.alpha == 0.8
    assert not result.topology_changed
    assert result.updated_nodes == ("A",)


def test_persisting_nodes_keep_position_and_pin() -> None:
    integrator = _RecordingIntegrator()
    reconciler = LayoutReconciler(integrator, ForceSettings())
    reconciler.reconcile(_subgraph([_make_node("A", size=10.0)]))
    old = reconciler.node("A")
    old.x, old.y, old.vx, old.vy = 3.0, 4.0, 0.5, -0.5
    old.fx, old.fy = 3.0, 4.0

    reconciler.reconcile(_subgraph([_make_node("A", size=42.0, count=99)]))

    new = reconciler.node("A")
    assert new is not old
    assert (new.x, new.y, new.vx, new.vy) == (3.0, 4.0, 0.5, -0.5)
    assert (new.fx, new.fy) == (3.0, 4.0)
    assert new.size == 42.0
    assert new.count == 99


def test_links_reference_current_layout_nodes() -> None:
    integrator = _RecordingIntegrator()
    reconciler = LayoutReconciler(integrator, ForceSettings(), node_color="#ABCDEF")
    a, b = _make_node("A"), _make_node("B")
    edge = _make_edge(a, b, lane=-2)

    result = reconciler.reconcile(_subgraph([a, b], [edge]))

    link = reconciler.link(edge.key)
    assert link.source is reconciler.node("A")
    assert link.target is reconciler.node("B")
    assert link.lane == -2
    assert link.color == "#112233"
    assert all(node.color == "#ABCDEF" for node in result.nodes)
    assert list(integrator.links) == [link]


def test_reconciling_empty_subgraph_exits_everything() -> None:
    integrator = _RecordingIntegrator()
    reconciler = LayoutReconciler(integrator, ForceSettings())
    a, b = _make_node("A"), _make_node("B")
    edge = _make_edge(a, b)
    reconciler.reconcile(_subgraph([a, b], [edge]))

    result = reconciler.reconcile(VisibleSubgraph.empty())

    assert set(result.exited_nodes) == {"A", "B"}
    assert result.exited_edges == (edge.key,)
    assert result.nodes == ()
    assert reconciler.previous == VisibleSubgraph.empty()


def test_reconcile_restarts_a_settled_simulation() -> None:
    simulation = ForceSimulation(alpha_decay=0.5)
    reconciler = LayoutReconciler(simulation, ForceSettings())
    a, b = _make_node("A"), _make_node("B")
    reconciler.reconcile(_subgraph([a, b], [_make_edge(a, b)]))
    simulation.run()
    assert simulation.state is SimulationState.IDLE
    position = (simulation.node("A").x, simulation.node("A").y)

    result = reconciler.reconcile(_subgraph([a, _make_node("C")]))

    assert result.alpha == 1.0
    assert simulation.state is SimulationState.RUNNING
    assert (simulation.node("A").x, simulation.node("A").y) == position
    assert simulation.node("B") is None
    assert simulation.node("C").x is not None


def test_new_nodes_are_seeded_around_the_reconciler_center() -> None:
    simulation = ForceSimulation(ForceSettings(center=(0.0, 0.0)))
    reconciler = LayoutReconciler(simulation, ForceSettings(center=(500.0, 300.0)))

    reconciler.reconcile(_subgraph([_make_node("A"), _make_node("B")]))

    for name in ("A", "B"):
        node = simulation.node(name)
        assert abs(node.x - 500.0) < 20.0
        assert abs(node.y - 300.0) < 20.0
