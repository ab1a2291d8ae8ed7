"""Lane assignment, arc geometry, and the force layout lifecycle."""

from chilon_viz.layout.arcs import ArcSpec, edge_arc, edge_path, loop_path, loop_radius
from chilon_viz.layout.curvature import assign_lanes
from chilon_viz.layout.drag import DragController
from chilon_viz.layout.reconcile import LayoutReconciler, ReconciliationResult
from chilon_viz.layout.simulation import (
    ForceSettings,
    ForceSimulation,
    LayoutIntegrator,
    SimLink,
    SimNode,
    SimulationState,
)

__all__ = [
    "ArcSpec",
    "DragController",
    "ForceSettings",
    "ForceSimulation",
    "LayoutIntegrator",
    "LayoutReconciler",
    "ReconciliationResult",
    "SimLink",
    "SimNode",
    "SimulationState",
    "assign_lanes",
    "edge_arc",
    "edge_path",
    "loop_path",
    "loop_radius",
]
