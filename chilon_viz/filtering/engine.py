"""Reduce the corpus to the visible subgraph for a filter configuration."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from chilon_viz.filtering.settings import FilterConfiguration
from chilon_viz.graph.model import (
    Corpus,
    CorpusEdge,
    CorpusNode,
    NodeCategory,
    VisibleEdge,
    VisibleNode,
    VisibleSubgraph,
)

LOGGER = logging.getLogger(__name__)

_HIDDEN_CATEGORIES = {NodeCategory.BLANK, NodeCategory.UNKNOWN}


def filter_corpus(corpus: Corpus, config: FilterConfiguration) -> VisibleSubgraph:
    """Apply thresholds and categorical exclusions to the corpus.

    Edges are only admitted when both endpoints survived the node filters, so
    no visible edge ever references an absent node. When disconnected nodes
    are excluded, the highest-count node within the node thresholds (the
    anchor) is kept regardless of its degree.

    Args:
        corpus: Full, count-sorted dataset.
        config: Thresholds and toggles for this pass.

    Returns:
        VisibleSubgraph: Surviving nodes in corpus order and surviving edges
        with endpoints resolved to visible nodes.
    """

    if corpus.is_empty:
        LOGGER.warning("Filter pass on an empty corpus; returning an empty subgraph")
        return VisibleSubgraph.empty()

    in_range: List[CorpusNode] = [node for node in corpus.nodes if config.admits_node_count(node.count)]
    anchor = _anchor_node(in_range)

    candidates = in_range
    if not config.include_blank_and_unknown:
        candidates = [node for node in candidates if node.category not in _HIDDEN_CATEGORIES]

    logarithmic = config.use_logarithmic_scale
    lookup: Dict[str, VisibleNode] = {
        node.name: VisibleNode(
            name=node.name,
            count=node.count,
            category=node.category,
            namespace=node.namespace,
            size=node.size(logarithmic=logarithmic),
            share=node.share,
        )
        for node in candidates
    }

    edges: List[CorpusEdge] = [
        edge
        for edge in corpus.edges
        if config.admits_edge_count(edge.count) and edge.source in lookup and edge.target in lookup
    ]
    if not config.include_self_loops:
        edges = [edge for edge in edges if not edge.is_self_loop]
    if not config.include_categorical_edges:
        edges = [edge for edge in edges if not edge.is_datatype]

    degrees: Counter = Counter()
    for edge in edges:
        degrees[edge.source] += 1
        degrees[edge.target] += 1

    visible_nodes = [lookup[node.name] for node in candidates]
    if not config.include_disconnected_nodes:
        anchor_name = anchor.name if anchor is not None else None
        visible_nodes = [
            node for node in visible_nodes if degrees[node.name] > 0 or node.name == anchor_name
        ]

    visible_edges = tuple(_resolve_edge(edge, lookup) for edge in edges)
    LOGGER.debug(
        "Filter pass: nodes in range=%d, candidates=%d, visible=%d, edges=%d",
        len(in_range),
        len(candidates),
        len(visible_nodes),
        len(visible_edges),
    )
    return VisibleSubgraph(nodes=tuple(visible_nodes), edges=visible_edges)


def _anchor_node(nodes: List[CorpusNode]) -> Optional[CorpusNode]:
    # Corpus order is descending by count, so ties go to the earliest node.
    anchor: Optional[CorpusNode] = None
    for node in nodes:
        if anchor is None or node.count > anchor.count:
            anchor = node
    return anchor


def _resolve_edge(edge: CorpusEdge, lookup: Dict[str, VisibleNode]) -> VisibleEdge:
    return VisibleEdge(
        key=edge.key,
        source=lookup[edge.source],
        target=lookup[edge.target],
        label=edge.label,
        count=edge.count,
        is_datatype=edge.is_datatype,
        size=edge.size,
        color=edge.color,
        namespace=edge.namespace,
    )


def truncate_corpus(corpus: Corpus, max_nodes: int, max_edges: int) -> Corpus:
    """Keep the highest-count nodes and edges for the initial view.

    Edges whose endpoints fall outside the kept nodes are dropped. Domains,
    derived sizes, and colors of the full corpus are preserved so slider and
    size scales stay comparable. A limit of ``0`` leaves that list untouched.
    """

    nodes = corpus.nodes[:max_nodes] if max_nodes else corpus.nodes
    names = {node.name for node in nodes}
    edges = [edge for edge in corpus.edges if edge.source in names and edge.target in names]
    if max_edges:
        edges = edges[:max_edges]
    LOGGER.info(
        "Truncated corpus to %d/%d nodes and %d/%d edges",
        len(nodes),
        len(corpus.nodes),
        len(edges),
        len(corpus.edges),
    )
    return Corpus(
        nodes=tuple(nodes),
        edges=tuple(edges),
        node_domain=corpus.node_domain,
        edge_domain=corpus.edge_domain,
        colors=corpus.colors,
    )
