"""Interactive session tying control events to filter and layout passes."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Union

from chilon_viz.config import AppConfig, load_config
from chilon_viz.filtering.engine import filter_corpus, truncate_corpus
from chilon_viz.filtering.settings import FilterConfiguration
from chilon_viz.graph.corpus import load_configured_corpus
from chilon_viz.graph.model import Corpus, VisibleSubgraph
from chilon_viz.layout.curvature import assign_lanes
from chilon_viz.layout.drag import DragController
from chilon_viz.layout.reconcile import LayoutReconciler, ReconciliationResult
from chilon_viz.layout.simulation import ForceSettings, ForceSimulation, LayoutIntegrator
from chilon_viz.ui.controls import (
    ControlState,
    SliderHandle,
    move_slider,
    set_flag,
    to_control_state,
    to_filter_configuration,
)
from chilon_viz.ui.debounce import Debouncer

LOGGER = logging.getLogger(__name__)


class ViewSession:
    """Owns the corpus, the current controls, and the live layout.

    Control changes are debounced; :meth:`poll` runs at most one filter and
    reconciliation pass for the latest state once input has been quiet for
    the configured window. Every pass reconciles the layout, so the layout
    never lags behind the visible subgraph.
    """

    def __init__(
        self,
        corpus: Corpus,
        config: AppConfig,
        *,
        integrator: Optional[LayoutIntegrator] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        layout = config.layout
        limits = config.corpus
        if limits.initial_max_nodes or limits.initial_max_edges:
            corpus = truncate_corpus(corpus, limits.initial_max_nodes, limits.initial_max_edges)
        self._corpus = corpus
        self._slider_range = config.scales.slider_range
        self._controls = ControlState.initial(config.filters, self._slider_range)
        self._integrator: LayoutIntegrator = integrator or ForceSimulation.from_config(layout)
        self._reconciler = LayoutReconciler(
            self._integrator,
            ForceSettings.from_config(layout),
            restart_alpha=layout.alpha_restart,
            node_color=layout.node_color,
        )
        self.drag = DragController(
            self._integrator,
            drag_alpha_target=layout.drag_alpha_target,
            release_alpha=layout.drag_release_alpha,
        )
        self._debouncer = Debouncer(self.apply, config.interaction.debounce_seconds, clock=clock)
        self._filter_config: Optional[FilterConfiguration] = None
        self._last_result: Optional[ReconciliationResult] = None
        self.passes = 0

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, **kwargs: object) -> "ViewSession":
        """Load configuration and the configured corpus, then build a session."""

        config = config or load_config()
        corpus = load_configured_corpus(config)
        return cls(corpus, config, **kwargs)  # type: ignore[arg-type]

    @property
    def corpus(self) -> Corpus:
        return self._corpus

    @property
    def controls(self) -> ControlState:
        return self._controls

    @property
    def filter_configuration(self) -> Optional[FilterConfiguration]:
        return self._filter_config

    @property
    def subgraph(self) -> VisibleSubgraph:
        return self._reconciler.previous

    @property
    def reconciler(self) -> LayoutReconciler:
        return self._reconciler

    @property
    def integrator(self) -> LayoutIntegrator:
        return self._integrator

    @property
    def alpha(self) -> float:
        """Layout energy for the progress indicator, in ``[0, 1]``."""

        return self._integrator.alpha

    @property
    def last_result(self) -> Optional[ReconciliationResult]:
        return self._last_result

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def start(self) -> ReconciliationResult:
        """Run the initial pass immediately, bypassing the debounce window."""

        self._debouncer.cancel()
        return self.apply()

    def move_slider(self, handle: Union[SliderHandle, str], value: float) -> ControlState:
        self._controls = move_slider(self._controls, handle, value, self._slider_range)
        self._debouncer()
        return self._controls

    def set_flag(self, name: str, value: bool) -> ControlState:
        """Toggle a checkbox; switching scales keeps the raw-count thresholds."""

        updated = set_flag(self._controls, name, value)
        if name == "use_logarithmic_scale" and updated.use_logarithmic_scale != self._controls.use_logarithmic_scale:
            thresholds = to_filter_configuration(self._controls, self._corpus, self._slider_range)
            flipped = replace(thresholds, use_logarithmic_scale=updated.use_logarithmic_scale)
            updated = to_control_state(flipped, self._corpus, self._slider_range)
        self._controls = updated
        self._debouncer()
        return self._controls

    def poll(self) -> Optional[ReconciliationResult]:
        """Run the debounced pass if due; return its result when one ran."""

        if self._debouncer.poll():
            return self._last_result
        return None

    def flush(self) -> Optional[ReconciliationResult]:
        if self._debouncer.flush():
            return self._last_result
        return None

    def frame(self) -> bool:
        """Process due input then advance the layout by one tick."""

        self.poll()
        return self._integrator.tick()

    def apply(self) -> ReconciliationResult:
        """Filter, assign lanes, and reconcile the layout for the current controls."""

        config = to_filter_configuration(self._controls, self._corpus, self._slider_range)
        visible = filter_corpus(self._corpus, config)
        visible = VisibleSubgraph(nodes=visible.nodes, edges=assign_lanes(visible.edges))
        result = self._reconciler.reconcile(visible)
        self._filter_config = config
        self._last_result = result
        self.passes += 1
        LOGGER.info(
            "Filter pass %d: nodes=%d edges=%d (node counts %.0f-%.0f, edge counts %.0f-%.0f)",
            self.passes,
            visible.node_count,
            visible.edge_count,
            config.min_node_occurs,
            config.max_node_occurs,
            config.min_edge_occurs,
            config.max_edge_occurs,
        )
        return result
