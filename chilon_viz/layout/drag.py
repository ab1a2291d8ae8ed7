"""Pointer drag handling that pins nodes while they are held."""
from __future__ import annotations

import logging
from typing import Optional

from chilon_viz.layout.simulation import LayoutIntegrator, SimNode

LOGGER = logging.getLogger(__name__)


class DragController:
    """Pin a node while dragged and release it only when the drag ends.

    Nodes are looked up by name on every event so a reconciliation pass
    happening mid-drag, which rebuilds the layout nodes, keeps the pin.
    """

    def __init__(
        self,
        integrator: LayoutIntegrator,
        *,
        drag_alpha_target: float = 0.3,
        release_alpha: float = 0.3,
    ) -> None:
        self._integrator = integrator
        self._drag_alpha_target = drag_alpha_target
        self._release_alpha = release_alpha

    def _lookup(self, name: str) -> Optional[SimNode]:
        node = self._integrator.node(name)
        if node is None:
            LOGGER.debug("Drag event for node %s which is not in the layout", name)
        return node

    def start(self, name: str, *, active: bool = False) -> None:
        """Begin dragging; ``active`` is true when another drag is already in progress."""

        node = self._lookup(name)
        if node is None:
            return
        if not active:
            self._integrator.alpha_target = self._drag_alpha_target
            self._integrator.restart()
        node.fx = node.x
        node.fy = node.y

    def move(self, name: str, x: float, y: float) -> None:
        node = self._lookup(name)
        if node is None:
            return
        node.fx = x
        node.fy = y

    def end(self, name: str, *, active: bool = False) -> None:
        """Release the pin and let the layout settle with partial energy."""

        node = self._lookup(name)
        if not active:
            self._integrator.alpha_target = 0.0
            self._integrator.restart(alpha=max(self._integrator.alpha, self._release_alpha))
        if node is None:
            return
        node.fx = None
        node.fy = None
