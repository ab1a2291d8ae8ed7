"""Thresholds and toggles parametrising a filter pass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FilterConfiguration:
    """Filter parameters rebuilt from the controls on every interaction.

    Thresholds are inclusive and expressed in raw occurrence counts.
    """

    min_node_occurs: float
    max_node_occurs: float
    min_edge_occurs: float
    max_edge_occurs: float
    include_blank_and_unknown: bool = True
    include_self_loops: bool = True
    include_categorical_edges: bool = True
    include_disconnected_nodes: bool = True
    use_logarithmic_scale: bool = False

    def admits_node_count(self, count: int) -> bool:
        return self.min_node_occurs <= count <= self.max_node_occurs

    def admits_edge_count(self, count: int) -> bool:
        return self.min_edge_occurs <= count <= self.max_edge_occurs
