"""Lane indices separating parallel and looping edges into distinct arcs."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from chilon_viz.graph.model import VisibleEdge


def _canonical_key(edge: VisibleEdge) -> Tuple[str, str, str, str, str, int]:
    source = edge.source.name
    target = edge.target.name
    low, high = (source, target) if source <= target else (target, source)
    return (low, high, source, target, edge.key.label, edge.key.occurrence)


def assign_lanes(edges: Iterable[VisibleEdge]) -> Tuple[VisibleEdge, ...]:
    """Return the edges in canonical order with signed lane indices.

    Edges between the same unordered pair become adjacent. A repeat of the
    previous direction stacks one lane further out on the same side; the
    reverse direction stacks one lane further out on the opposite side; a new
    pair starts again at lane ``1``. Lanes are relative to the given edge set
    and must be recomputed whenever it changes.
    """

    ordered = sorted(edges, key=_canonical_key)
    assigned: List[VisibleEdge] = []
    previous: Optional[VisibleEdge] = None
    for edge in ordered:
        lane = 1
        if previous is not None:
            source, target = edge.source.name, edge.target.name
            prev_source, prev_target = previous.source.name, previous.target.name
            magnitude = abs(previous.lane) + 1
            if source == prev_source and target == prev_target:
                lane = magnitude if previous.lane > 0 else -magnitude
            elif source == prev_target and target == prev_source:
                lane = -magnitude
        updated = replace(edge, lane=lane)
        assigned.append(updated)
        previous = updated
    return tuple(assigned)
