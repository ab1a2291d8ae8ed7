"""Force-directed layout integrator driven by the reconciliation step."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from typing_extensions import Protocol

from chilon_viz.config import LayoutConfig
from chilon_viz.graph.model import EdgeKey, NodeCategory

LOGGER = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))
JIGGLE_SCALE = 1e-6


class SimulationState(str, Enum):
    """Lifecycle of the integrator between restarts."""

    IDLE = "idle"
    RUNNING = "running"
    SETTLING = "settling"


@dataclass
class SimNode:
    """Layout node; position fields are owned by the integrator."""

    name: str
    count: int
    size: float
    color: str
    category: NodeCategory
    x: Optional[float] = None
    y: Optional[float] = None
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None
    index: int = -1

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass
class SimLink:
    """Layout edge referencing its endpoint nodes directly."""

    key: EdgeKey
    source: SimNode
    target: SimNode
    label: str
    count: int
    size: float
    color: str
    lane: int


@dataclass(frozen=True)
class ForceSettings:
    """Force parameters reapplied after every reconciliation."""

    link_distance: float = 300.0
    link_strength: float = 2.0
    charge_strength: float = -800.0
    charge_distance_min: float = 200.0
    charge_distance_max: float = 400.0
    collision_padding: float = 4.0
    center: Tuple[float, float] = (600.0, 400.0)

    @classmethod
    def from_config(cls, config: LayoutConfig) -> "ForceSettings":
        return cls(
            link_distance=config.link_distance,
            link_strength=config.link_strength,
            charge_strength=config.charge_strength,
            charge_distance_min=config.charge_distance_min,
            charge_distance_max=config.charge_distance_max,
            collision_padding=config.collision_padding,
            center=config.center,
        )


class LayoutIntegrator(Protocol):
    """Contract the reconciliation and drag handling rely on."""

    @property
    def alpha(self) -> float:
        """Current energy of the layout."""

    @property
    def state(self) -> SimulationState:
        """Current lifecycle state."""

    alpha_target: float

    def set_graph(self, nodes: Sequence[SimNode], links: Sequence[SimLink]) -> None:
        """Replace the node and link lists."""

    def configure(self, forces: ForceSettings) -> None:
        """Apply a force configuration."""

    def restart(self, alpha: Optional[float] = None) -> None:
        """Enter the running state, optionally resetting alpha."""

    def tick(self) -> bool:
        """Advance one frame; return ``False`` when idle."""

    def node(self, name: str) -> Optional[SimNode]:
        """Return the layout node with the given name."""


TickListener = Callable[["ForceSimulation"], None]


class ForceSimulation(LayoutIntegrator):
    """Velocity-Verlet integrator with link, repulsion, collision, and centering forces.

    The energy ``alpha`` decays geometrically towards ``alpha_target``. Once it
    falls below ``alpha_min`` the simulation goes idle and further ticks are
    no-ops until the next :meth:`restart`.
    """

    def __init__(
        self,
        forces: Optional[ForceSettings] = None,
        *,
        alpha_min: float = 0.001,
        alpha_decay: Optional[float] = None,
        velocity_decay: float = 0.4,
        seed: int = 1,
    ) -> None:
        self._forces = forces or ForceSettings()
        self._alpha = 1.0
        self._alpha_min = alpha_min
        self._alpha_decay = alpha_decay if alpha_decay is not None else 1.0 - alpha_min ** (1.0 / 300.0)
        self._velocity_decay = velocity_decay
        self.alpha_target = 0.0
        self._state = SimulationState.IDLE
        self._nodes: List[SimNode] = []
        self._links: List[SimLink] = []
        self._by_name: Dict[str, SimNode] = {}
        self._degrees: Dict[str, int] = {}
        self._rng = np.random.default_rng(seed)
        self._tick_listeners: List[TickListener] = []
        self._end_listeners: List[TickListener] = []
        self.tick_count = 0

    @classmethod
    def from_config(cls, config: LayoutConfig) -> "ForceSimulation":
        return cls(
            ForceSettings.from_config(config),
            alpha_min=config.alpha_min,
            alpha_decay=config.effective_alpha_decay,
            velocity_decay=config.velocity_decay,
            seed=config.seed,
        )

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def alpha_min(self) -> float:
        return self._alpha_min

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def forces(self) -> ForceSettings:
        return self._forces

    @property
    def nodes(self) -> Tuple[SimNode, ...]:
        return tuple(self._nodes)

    @property
    def links(self) -> Tuple[SimLink, ...]:
        return tuple(self._links)

    def node(self, name: str) -> Optional[SimNode]:
        return self._by_name.get(name)

    def on_tick(self, listener: TickListener) -> None:
        self._tick_listeners.append(listener)

    def on_end(self, listener: TickListener) -> None:
        self._end_listeners.append(listener)

    def set_graph(self, nodes: Sequence[SimNode], links: Sequence[SimLink]) -> None:
        """Install new node and link lists, placing unpositioned nodes."""

        self._nodes = list(nodes)
        self._links = list(links)
        self._by_name = {node.name: node for node in self._nodes}
        cx, cy = self._forces.center
        for index, node in enumerate(self._nodes):
            node.index = index
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if node.x is None or node.y is None:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                node.x = cx + radius * math.cos(angle)
                node.y = cy + radius * math.sin(angle)
        degrees: Dict[str, int] = {node.name: 0 for node in self._nodes}
        for link in self._links:
            degrees[link.source.name] = degrees.get(link.source.name, 0) + 1
            degrees[link.target.name] = degrees.get(link.target.name, 0) + 1
        self._degrees = degrees

    def configure(self, forces: ForceSettings) -> None:
        self._forces = forces

    def restart(self, alpha: Optional[float] = None) -> None:
        if alpha is not None:
            self._alpha = alpha
        self._state = SimulationState.RUNNING
        LOGGER.debug("Simulation restarted (alpha=%.3f, nodes=%d)", self._alpha, len(self._nodes))

    def tick(self) -> bool:
        """Advance the layout by one frame and notify tick listeners."""

        if self._state is SimulationState.IDLE:
            return False
        self._alpha += (self.alpha_target - self._alpha) * self._alpha_decay
        if self._nodes:
            self._step()
        self.tick_count += 1
        for listener in self._tick_listeners:
            listener(self)
        if self._alpha < self._alpha_min:
            self._state = SimulationState.IDLE
            for listener in self._end_listeners:
                listener(self)
        else:
            self._state = SimulationState.SETTLING
        return True

    def run(self, max_ticks: int = 1000) -> int:
        """Tick until idle or ``max_ticks`` frames have elapsed; return the frames run."""

        ticks = 0
        while ticks < max_ticks and self.tick():
            ticks += 1
        return ticks

    def _step(self) -> None:
        x = np.array([node.x for node in self._nodes], dtype=float)
        y = np.array([node.y for node in self._nodes], dtype=float)
        vx = np.array([node.vx for node in self._nodes], dtype=float)
        vy = np.array([node.vy for node in self._nodes], dtype=float)

        self._apply_links(x, y, vx, vy)
        self._apply_charge(x, y, vx, vy)
        self._apply_collision(x, y, vx, vy)
        cx, cy = self._forces.center
        x -= x.mean() - cx
        y -= y.mean() - cy

        damping = 1.0 - self._velocity_decay
        for i, node in enumerate(self._nodes):
            if node.fx is None:
                node.vx = float(vx[i] * damping)
                node.x = float(x[i] + node.vx)
            else:
                node.x = node.fx
                node.vx = 0.0
            if node.fy is None:
                node.vy = float(vy[i] * damping)
                node.y = float(y[i] + node.vy)
            else:
                node.y = node.fy
                node.vy = 0.0

    def _jiggle(self, size: int) -> np.ndarray:
        return (self._rng.random(size) - 0.5) * JIGGLE_SCALE

    def _apply_links(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        forces = self._forces
        for link in self._links:
            s = link.source.index
            t = link.target.index
            if s == t or s < 0 or t < 0:
                continue
            dx = x[t] + vx[t] - x[s] - vx[s]
            dy = y[t] + vy[t] - y[s] - vy[s]
            if dx == 0.0:
                dx = float(self._jiggle(1)[0])
            if dy == 0.0:
                dy = float(self._jiggle(1)[0])
            length = math.hypot(dx, dy)
            factor = (length - forces.link_distance) / length * self._alpha * forces.link_strength
            dx *= factor
            dy *= factor
            source_degree = self._degrees.get(link.source.name, 1)
            target_degree = self._degrees.get(link.target.name, 1)
            bias = source_degree / (source_degree + target_degree)
            vx[t] -= dx * bias
            vy[t] -= dy * bias
            vx[s] += dx * (1.0 - bias)
            vy[s] += dy * (1.0 - bias)

    def _apply_charge(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        count = x.size
        if count < 2:
            return
        forces = self._forces
        dx = x[None, :] - x[:, None]
        dy = y[None, :] - y[:, None]
        off_diagonal = ~np.eye(count, dtype=bool)
        coincident = (dx == 0) & (dy == 0) & off_diagonal
        if coincident.any():
            dx[coincident] = self._jiggle(int(coincident.sum()))
            dy[coincident] = self._jiggle(int(coincident.sum()))
        dist2 = dx * dx + dy * dy
        mask = off_diagonal & (dist2 < forces.charge_distance_max ** 2)
        min2 = forces.charge_distance_min ** 2
        dist2 = np.where(dist2 < min2, np.sqrt(min2 * dist2), dist2)
        weight = np.zeros_like(dist2)
        np.divide(forces.charge_strength * self._alpha, dist2, out=weight, where=mask & (dist2 > 0))
        vx += (dx * weight).sum(axis=1)
        vy += (dy * weight).sum(axis=1)

    def _apply_collision(self, x: np.ndarray, y: np.ndarray, vx: np.ndarray, vy: np.ndarray) -> None:
        count = x.size
        if count < 2:
            return
        radii = np.array([node.size for node in self._nodes], dtype=float) + self._forces.collision_padding
        px = x + vx
        py = y + vy
        dx = px[:, None] - px[None, :]
        dy = py[:, None] - py[None, :]
        reach = radii[:, None] + radii[None, :]
        dist2 = dx * dx + dy * dy
        mask = ~np.eye(count, dtype=bool) & (dist2 < reach * reach) & (dist2 > 0)
        if not mask.any():
            return
        dist = np.sqrt(np.where(mask, dist2, 1.0))
        push = np.where(mask, (reach - dist) / dist, 0.0)
        squared = radii * radii
        share = squared[None, :] / (squared[:, None] + squared[None, :])
        vx += (dx * push * share).sum(axis=1)
        vy += (dy * push * share).sum(axis=1)
