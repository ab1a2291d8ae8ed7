"""Graph model, scaling functions, and corpus loading."""

from chilon_viz.graph.colors import color_gradient, label_to_color
from chilon_viz.graph.corpus import CorpusError, build_corpus, load_configured_corpus, load_corpus
from chilon_viz.graph.model import (
    Corpus,
    CorpusEdge,
    CorpusNode,
    CountDomain,
    EdgeKey,
    NodeCategory,
    VisibleEdge,
    VisibleNode,
    VisibleSubgraph,
)
from chilon_viz.graph.scaling import (
    DegenerateDomainError,
    Scale,
    ScaleDomainError,
    make_linear_scale,
    make_log_scale,
    make_scale,
)

__all__ = [
    "Corpus",
    "CorpusEdge",
    "CorpusError",
    "CorpusNode",
    "CountDomain",
    "DegenerateDomainError",
    "EdgeKey",
    "NodeCategory",
    "Scale",
    "ScaleDomainError",
    "VisibleEdge",
    "VisibleNode",
    "VisibleSubgraph",
    "build_corpus",
    "color_gradient",
    "label_to_color",
    "load_configured_corpus",
    "load_corpus",
    "make_linear_scale",
    "make_log_scale",
    "make_scale",
]
