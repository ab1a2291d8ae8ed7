"""Translation between slider/checkbox state and filter configurations."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from chilon_viz.config import FilterDefaultsConfig
from chilon_viz.filtering.settings import FilterConfiguration
from chilon_viz.graph.model import Corpus, CountDomain
from chilon_viz.graph.scaling import Scale, make_scale

LOGGER = logging.getLogger(__name__)

DEFAULT_SLIDER_RANGE: Tuple[float, float] = (0.0, 100.0)
COUNT_TOLERANCE = 1e-6

FLAG_NAMES = (
    "include_blank_and_unknown",
    "include_self_loops",
    "include_categorical_edges",
    "include_disconnected_nodes",
    "use_logarithmic_scale",
)


class SliderHandle(str, Enum):
    """Handles of the two dual-range sliders."""

    MIN_NODE = "min_node"
    MAX_NODE = "max_node"
    MIN_EDGE = "min_edge"
    MAX_EDGE = "max_edge"


@dataclass(frozen=True)
class ControlState:
    """Raw control values: slider positions in UI units plus the checkbox flags."""

    min_node: float
    max_node: float
    min_edge: float
    max_edge: float
    include_blank_and_unknown: bool = True
    include_self_loops: bool = True
    include_categorical_edges: bool = True
    include_disconnected_nodes: bool = True
    use_logarithmic_scale: bool = False

    @classmethod
    def initial(
        cls,
        defaults: Optional[FilterDefaultsConfig] = None,
        slider_range: Tuple[float, float] = DEFAULT_SLIDER_RANGE,
    ) -> "ControlState":
        """Return fully opened sliders with the configured checkbox defaults."""

        defaults = defaults or FilterDefaultsConfig()
        low, high = slider_range
        return cls(
            min_node=low,
            max_node=high,
            min_edge=low,
            max_edge=high,
            include_blank_and_unknown=defaults.include_blank_and_unknown,
            include_self_loops=defaults.include_self_loops,
            include_categorical_edges=defaults.include_categorical_edges,
            include_disconnected_nodes=defaults.include_disconnected_nodes,
            use_logarithmic_scale=defaults.use_logarithmic_scale,
        )


def move_slider(
    state: ControlState,
    handle: Union[SliderHandle, str],
    value: float,
    slider_range: Tuple[float, float] = DEFAULT_SLIDER_RANGE,
) -> ControlState:
    """Move one handle, clamping it to the slider range.

    A min handle pushed past its max handle drags the max along, and vice
    versa, so each range stays ordered.

    Raises:
        ValueError: If ``handle`` does not name a slider handle.
    """

    handle = SliderHandle(handle)
    low, high = slider_range
    value = min(max(float(value), low), high)
    if handle is SliderHandle.MIN_NODE:
        return replace(state, min_node=value, max_node=max(state.max_node, value))
    if handle is SliderHandle.MAX_NODE:
        return replace(state, max_node=value, min_node=min(state.min_node, value))
    if handle is SliderHandle.MIN_EDGE:
        return replace(state, min_edge=value, max_edge=max(state.max_edge, value))
    if handle is SliderHandle.MAX_EDGE:
        return replace(state, max_edge=value, min_edge=min(state.min_edge, value))
    raise ValueError(f"Unhandled slider handle: {handle}")


def set_flag(state: ControlState, name: str, value: bool) -> ControlState:
    if name not in FLAG_NAMES:
        msg = f"Unknown filter flag: {name}"
        raise ValueError(msg)
    return replace(state, **{name: bool(value)})


@dataclass(frozen=True)
class SliderScales:
    """Count-to-slider scales for nodes and edges; ``None`` when the corpus is empty."""

    node: Optional[Scale]
    edge: Optional[Scale]

    @classmethod
    def for_corpus(
        cls,
        corpus: Corpus,
        *,
        logarithmic: bool,
        slider_range: Tuple[float, float] = DEFAULT_SLIDER_RANGE,
    ) -> "SliderScales":
        return cls(
            node=_domain_scale(corpus.node_domain, logarithmic, slider_range),
            edge=_domain_scale(corpus.edge_domain, logarithmic, slider_range),
        )


def _domain_scale(
    domain: Optional[CountDomain], logarithmic: bool, slider_range: Tuple[float, float]
) -> Optional[Scale]:
    if domain is None:
        return None
    return make_scale(domain.minimum, domain.maximum, *slider_range, logarithmic=logarithmic)


def _slider_to_count(scale: Optional[Scale], value: float, *, upper: bool) -> float:
    if scale is None:
        return 0.0
    if scale.is_degenerate:
        return scale.domain[0]
    # Counts are integral; snap so float error never excludes a boundary count.
    count = scale.invert(value)
    if upper:
        return float(math.floor(count + COUNT_TOLERANCE))
    return float(math.ceil(count - COUNT_TOLERANCE))


def _count_to_slider(scale: Optional[Scale], count: float, fallback: float) -> float:
    if scale is None or scale.is_degenerate:
        return fallback
    d0, d1 = scale.domain
    return scale(min(max(count, d0), d1))


def to_filter_configuration(
    state: ControlState,
    corpus: Corpus,
    slider_range: Tuple[float, float] = DEFAULT_SLIDER_RANGE,
) -> FilterConfiguration:
    """Inverse-scale slider positions into raw-count thresholds."""

    scales = SliderScales.for_corpus(corpus, logarithmic=state.use_logarithmic_scale, slider_range=slider_range)
    return FilterConfiguration(
        min_node_occurs=_slider_to_count(scales.node, state.min_node, upper=False),
        max_node_occurs=_slider_to_count(scales.node, state.max_node, upper=True),
        min_edge_occurs=_slider_to_count(scales.edge, state.min_edge, upper=False),
        max_edge_occurs=_slider_to_count(scales.edge, state.max_edge, upper=True),
        include_blank_and_unknown=state.include_blank_and_unknown,
        include_self_loops=state.include_self_loops,
        include_categorical_edges=state.include_categorical_edges,
        include_disconnected_nodes=state.include_disconnected_nodes,
        use_logarithmic_scale=state.use_logarithmic_scale,
    )


def to_control_state(
    config: FilterConfiguration,
    corpus: Corpus,
    slider_range: Tuple[float, float] = DEFAULT_SLIDER_RANGE,
) -> ControlState:
    """Project raw-count thresholds back onto slider positions."""

    low, high = slider_range
    scales = SliderScales.for_corpus(corpus, logarithmic=config.use_logarithmic_scale, slider_range=slider_range)
    return ControlState(
        min_node=_count_to_slider(scales.node, config.min_node_occurs, low),
        max_node=_count_to_slider(scales.node, config.max_node_occurs, high),
        min_edge=_count_to_slider(scales.edge, config.min_edge_occurs, low),
        max_edge=_count_to_slider(scales.edge, config.max_edge_occurs, high),
        include_blank_and_unknown=config.include_blank_and_unknown,
        include_self_loops=config.include_self_loops,
        include_categorical_edges=config.include_categorical_edges,
        include_disconnected_nodes=config.include_disconnected_nodes,
        use_logarithmic_scale=config.use_logarithmic_scale,
    )
