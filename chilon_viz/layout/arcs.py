"""Arc geometry derived from lane indices for edge paths."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

PARALLEL_ARC_SPREAD = 1500.0
LOOP_BASE_RADIUS = 40.0

Point = Tuple[float, float]


@dataclass(frozen=True)
class ArcSpec:
    """Radius and SVG sweep flag of an edge arc; radius ``0`` draws a straight line."""

    radius: float
    sweep: int


def edge_arc(lane: int) -> ArcSpec:
    """Return the arc for an edge between distinct nodes.

    Lane magnitude ``1`` is a straight segment. Wider lanes get tighter radii in
    pairs, and the sweep flag alternates so neighbouring lanes bend to
    opposite sides.
    """

    magnitude = abs(lane)
    sweep = 0
    if lane > 0 and lane % 2 == 1:
        sweep = 1
    if lane < 0 and magnitude % 2 == 0:
        sweep = 1
    if magnitude <= 1:
        return ArcSpec(radius=0.0, sweep=sweep)
    divisor = (magnitude // 2) * 2
    return ArcSpec(radius=PARALLEL_ARC_SPREAD / divisor, sweep=sweep)


def loop_radius(lane: int, edge_size: float) -> float:
    """Return the radius of a self-loop; wider lanes and heavier edges loop further out."""

    return LOOP_BASE_RADIUS + edge_size * abs(lane)


def edge_path(source: Point, target: Point, lane: int) -> str:
    arc = edge_arc(lane)
    return (
        f"M{source[0]},{source[1]} "
        f"A{arc.radius},{arc.radius} 0 0 {arc.sweep} {target[0]},{target[1]}"
    )


def loop_path(point: Point, lane: int, edge_size: float) -> str:
    # The end point is offset by one unit: an SVG arc with identical endpoints draws nothing.
    radius = loop_radius(lane, edge_size)
    return f"M{point[0]},{point[1]} A{radius},{radius} -45 1 0 {point[0] + 1},{point[1] + 1}"
