"""Enter/update/exit reconciliation of visible subgraphs against the layout."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from chilon_viz.graph.model import EdgeKey, VisibleEdge, VisibleNode, VisibleSubgraph
from chilon_viz.layout.simulation import ForceSettings, LayoutIntegrator, SimLink, SimNode

LOGGER = logging.getLogger(__name__)

DEFAULT_NODE_COLOR = "#B3D9CB"


@dataclass(frozen=True)
class ReconciliationResult:
    """Identity-keyed diff between two consecutive visible subgraphs."""

    entered_nodes: Tuple[str, ...]
    updated_nodes: Tuple[str, ...]
    exited_nodes: Tuple[str, ...]
    entered_edges: Tuple[EdgeKey, ...]
    updated_edges: Tuple[EdgeKey, ...]
    exited_edges: Tuple[EdgeKey, ...]
    nodes: Tuple[SimNode, ...]
    links: Tuple[SimLink, ...]
    alpha: float

    @property
    def topology_changed(self) -> bool:
        return bool(self.entered_nodes or self.exited_nodes or self.entered_edges or self.exited_edges)


class LayoutReconciler:
    """Keep a layout integrator in step with successive visible subgraphs.

    Each call builds fresh layout nodes and links from the new subgraph. Only
    position, velocity, and pin fields of persisting nodes are carried over;
    size, count, color, and lane come from the new subgraph. The integrator
    is reconfigured, reseeded, and restarted after every call.
    """

    def __init__(
        self,
        integrator: LayoutIntegrator,
        forces: ForceSettings,
        *,
        restart_alpha: float = 1.0,
        node_color: str = DEFAULT_NODE_COLOR,
    ) -> None:
        self._integrator = integrator
        self._forces = forces
        self._restart_alpha = restart_alpha
        self._node_color = node_color
        self._previous = VisibleSubgraph.empty()
        self._nodes: Dict[str, SimNode] = {}
        self._links: Dict[EdgeKey, SimLink] = {}

    @property
    def previous(self) -> VisibleSubgraph:
        return self._previous

    @property
    def integrator(self) -> LayoutIntegrator:
        return self._integrator

    def node(self, name: str) -> Optional[SimNode]:
        return self._nodes.get(name)

    def link(self, key: EdgeKey) -> Optional[SimLink]:
        return self._links.get(key)

    def reconcile(self, subgraph: VisibleSubgraph) -> ReconciliationResult:
        """Diff ``subgraph`` against the previous one and restart the layout.

        Args:
            subgraph: Visible subgraph of the current filter pass, with lanes assigned.

        Returns:
            ReconciliationResult: Keys of entering, persisting, and exiting
            elements plus the layout collections handed to the integrator.
        """

        previous_nodes = self._nodes
        previous_links = self._links

        nodes: Dict[str, SimNode] = {}
        entered_nodes: List[str] = []
        updated_nodes: List[str] = []
        for visible in subgraph.nodes:
            existing = previous_nodes.get(visible.name)
            nodes[visible.name] = self._build_node(visible, existing)
            if existing is None:
                entered_nodes.append(visible.name)
            else:
                updated_nodes.append(visible.name)
        exited_nodes = [name for name in previous_nodes if name not in nodes]

        links: Dict[EdgeKey, SimLink] = {}
        entered_edges: List[EdgeKey] = []
        updated_edges: List[EdgeKey] = []
        for edge in subgraph.edges:
            links[edge.key] = self._build_link(edge, nodes)
            if edge.key in previous_links:
                updated_edges.append(edge.key)
            else:
                entered_edges.append(edge.key)
        exited_edges = [key for key in previous_links if key not in links]

        self._nodes = nodes
        self._links = links
        self._previous = subgraph

        node_list = tuple(nodes.values())
        link_list = tuple(links.values())
        self._integrator.configure(self._forces)
        self._integrator.set_graph(node_list, link_list)
        self._integrator.restart(alpha=self._restart_alpha)

        LOGGER.info(
            "Reconciled layout: nodes +%d ~%d -%d, edges +%d ~%d -%d",
            len(entered_nodes),
            len(updated_nodes),
            len(exited_nodes),
            len(entered_edges),
            len(updated_edges),
            len(exited_edges),
        )
        return ReconciliationResult(
            entered_nodes=tuple(entered_nodes),
            updated_nodes=tuple(updated_nodes),
            exited_nodes=tuple(exited_nodes),
            entered_edges=tuple(entered_edges),
            updated_edges=tuple(updated_edges),
            exited_edges=tuple(exited_edges),
            nodes=node_list,
            links=link_list,
            alpha=self._integrator.alpha,
        )

    def _build_node(self, visible: VisibleNode, existing: Optional[SimNode]) -> SimNode:
        node = SimNode(
            name=visible.name,
            count=visible.count,
            size=visible.size,
            color=self._node_color,
            category=visible.category,
        )
        if existing is not None:
            node.x = existing.x
            node.y = existing.y
            node.vx = existing.vx
            node.vy = existing.vy
            node.fx = existing.fx
            node.fy = existing.fy
        return node

    @staticmethod
    def _build_link(edge: VisibleEdge, nodes: Dict[str, SimNode]) -> SimLink:
        return SimLink(
            key=edge.key,
            source=nodes[edge.source.name],
            target=nodes[edge.target.name],
            label=edge.label,
            count=edge.count,
            size=edge.size,
            color=edge.color,
            lane=edge.lane,
        )
