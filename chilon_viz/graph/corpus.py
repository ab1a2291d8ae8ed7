"""Loading the bundled namespace-usage dataset into a :class:`Corpus`."""
from __future__ import annotations

import json
import logging
import re
from collections import Counter
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from chilon_viz.config import AppConfig
from chilon_viz.graph.colors import label_to_color
from chilon_viz.graph.model import CountDomain, Corpus, CorpusEdge, CorpusNode, NodeCategory
from chilon_viz.graph.scaling import make_linear_scale, make_log_scale

LOGGER = logging.getLogger(__name__)

DEFAULT_SIZE_RANGE: Tuple[float, float] = (10.0, 100.0)

_BLANK_NAMES = {"BLANK", "[BLANK]"}
_UNKNOWN_NAMES = {"UNKNOWN", "[UNKNOWN]"}
_DATATYPE_PATTERN = re.compile(r"^(\[LITERAL:.*\]|LANG-STRING|STRING)$")

ColorFunction = Callable[[Iterable[str]], Dict[str, str]]


class CorpusError(RuntimeError):
    """Raised when the corpus asset cannot be loaded or is inconsistent."""


def infer_category(name: str) -> NodeCategory:
    """Derive a node category from the placeholder names used by the summariser."""

    upper = name.strip().upper()
    if upper in _BLANK_NAMES:
        return NodeCategory.BLANK
    if upper in _UNKNOWN_NAMES:
        return NodeCategory.UNKNOWN
    return NodeCategory.NAMESPACE


def is_datatype_name(name: str) -> bool:
    """Return whether a node name stands for a literal datatype."""

    return bool(_DATATYPE_PATTERN.match(name.strip()))


def _parse_category(value: object, name: str) -> NodeCategory:
    if value is None:
        return infer_category(name)
    try:
        return NodeCategory(str(value))
    except ValueError:
        LOGGER.warning("Unknown category %r for node %s; inferring from name", value, name)
        return infer_category(name)


def _parse_datatype(value: object, target: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is not None:
        LOGGER.warning("Non-boolean datatype flag %r for edge target %s; inferring from name", value, target)
    return is_datatype_name(target)


def _parse_count(value: object, description: str) -> int:
    try:
        count = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise CorpusError(f"Invalid count {value!r} for {description}") from exc
    if count <= 0:
        raise CorpusError(f"Count must be positive for {description}, got {count}")
    return count


def _resolve_endpoint(value: object, ids: Mapping[Any, str], names: Mapping[str, Any]) -> str:
    if isinstance(value, str) and value in names:
        return value
    if value in ids:
        return ids[value]
    raise CorpusError(f"Edge endpoint {value!r} does not name a known node")


def build_corpus(
    nodes: Sequence[Mapping[str, Any]],
    edges: Sequence[Mapping[str, Any]],
    namespaces: Optional[Mapping[str, str]] = None,
    *,
    node_size_range: Tuple[float, float] = DEFAULT_SIZE_RANGE,
    edge_size_range: Tuple[float, float] = DEFAULT_SIZE_RANGE,
    color_function: ColorFunction = label_to_color,
) -> Corpus:
    """Validate raw records and derive sizes, shares, and colors.

    Args:
        nodes: Mappings with ``name`` and ``count`` and optional ``category``,
            ``namespace`` and legacy integer ``id``.
        edges: Mappings with ``source``, ``target`` (names or legacy ids),
            ``label``, ``count`` and optional ``datatype``.
        namespaces: Optional prefix to IRI lookup for display namespaces.
        node_size_range: Visual range for normalised node sizes.
        edge_size_range: Visual range for normalised edge sizes.
        color_function: Label to color mapping, applied once.

    Returns:
        Corpus: Count-sorted, read-only corpus.

    Raises:
        CorpusError: If a record is malformed or references an unknown node.
    """

    namespaces = dict(namespaces or {})
    ids: Dict[Any, str] = {}
    parsed_nodes: List[Tuple[str, int, NodeCategory, Optional[str]]] = []
    seen_names: Dict[str, Any] = {}
    for raw in nodes:
        name = str(raw.get("name", "")).strip()
        if not name:
            raise CorpusError("Node record without a name")
        if name in seen_names:
            raise CorpusError(f"Duplicate node name {name!r}")
        seen_names[name] = raw.get("id")
        if raw.get("id") is not None:
            ids[raw["id"]] = name
        count = _parse_count(raw.get("count"), f"node {name!r}")
        category = _parse_category(raw.get("category"), name)
        namespace = raw.get("namespace") or namespaces.get(name)
        parsed_nodes.append((name, count, category, namespace))

    parsed_nodes.sort(key=lambda item: item[1], reverse=True)

    parsed_edges: List[Tuple[str, str, str, int, bool]] = []
    for raw in edges:
        source = _resolve_endpoint(raw.get("source"), ids, seen_names)
        target = _resolve_endpoint(raw.get("target"), ids, seen_names)
        label = str(raw.get("label", "")).strip()
        if not label:
            raise CorpusError(f"Edge {source!r} -> {target!r} has no label")
        count = _parse_count(raw.get("count"), f"edge {source!r} -[{label}]-> {target!r}")
        is_datatype = _parse_datatype(raw.get("datatype"), target)
        parsed_edges.append((source, target, label, count, is_datatype))

    parsed_edges.sort(key=lambda item: item[3], reverse=True)

    if not parsed_nodes:
        LOGGER.warning("Corpus contains no nodes")
        return Corpus.empty()

    node_domain = CountDomain(minimum=parsed_nodes[-1][1], maximum=parsed_nodes[0][1])
    linear = make_linear_scale(node_domain.minimum, node_domain.maximum, *node_size_range)
    logarithmic = make_log_scale(node_domain.minimum, node_domain.maximum, *node_size_range)
    total = sum(item[1] for item in parsed_nodes)
    corpus_nodes = tuple(
        CorpusNode(
            name=name,
            count=count,
            category=category,
            namespace=namespace,
            linear_size=linear(count),
            log_size=logarithmic(count),
            share=count / total,
        )
        for name, count, category, namespace in parsed_nodes
    )

    edge_domain: Optional[CountDomain] = None
    corpus_edges: Tuple[CorpusEdge, ...] = ()
    colors: Dict[str, str] = {}
    if parsed_edges:
        edge_domain = CountDomain(minimum=parsed_edges[-1][3], maximum=parsed_edges[0][3])
        edge_scale = make_linear_scale(edge_domain.minimum, edge_domain.maximum, *edge_size_range)
        colors = color_function(item[2] for item in parsed_edges)
        occurrences: Counter = Counter()
        built: List[CorpusEdge] = []
        for source, target, label, count, is_datatype in parsed_edges:
            occurrence = occurrences[(label, source, target)]
            occurrences[(label, source, target)] += 1
            built.append(
                CorpusEdge(
                    source=source,
                    target=target,
                    label=label,
                    count=count,
                    is_datatype=is_datatype,
                    occurrence=occurrence,
                    size=edge_scale(count),
                    color=colors[label],
                    namespace=namespaces.get(label),
                )
            )
        corpus_edges = tuple(built)
    else:
        LOGGER.warning("Corpus contains no edges")

    return Corpus(
        nodes=corpus_nodes,
        edges=corpus_edges,
        node_domain=node_domain,
        edge_domain=edge_domain,
        colors=colors,
    )


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Corpus file missing at %s", path)
        raise CorpusError("Corpus file not found") from exc
    except json.JSONDecodeError as exc:
        LOGGER.error("Invalid JSON in corpus file %s", path)
        raise CorpusError("Invalid corpus JSON") from exc
    if not isinstance(data, dict):
        LOGGER.error("Corpus root must be a mapping: %s", path)
        raise CorpusError("Corpus root must be a mapping")
    return data


def load_corpus(
    path: Path,
    *,
    node_size_range: Tuple[float, float] = DEFAULT_SIZE_RANGE,
    edge_size_range: Tuple[float, float] = DEFAULT_SIZE_RANGE,
    color_function: ColorFunction = label_to_color,
) -> Corpus:
    """Read a corpus JSON asset from disk.

    The asset holds ``nodes`` and ``edges`` (``links`` is accepted for files
    written by older summary exporters) plus an optional
    ``namespaces`` mapping.
    """

    data = _read_json(path)
    nodes = data.get("nodes") or []
    edges = data.get("edges")
    if edges is None:
        edges = data.get("links") or []
    namespaces = data.get("namespaces") or {}
    if not isinstance(nodes, list) or not isinstance(edges, list):
        raise CorpusError("Corpus nodes and edges must be lists")
    corpus = build_corpus(
        nodes,
        edges,
        namespaces,
        node_size_range=node_size_range,
        edge_size_range=edge_size_range,
        color_function=color_function,
    )
    LOGGER.info(
        "Loaded corpus from %s (nodes=%d, edges=%d, labels=%d)",
        path,
        len(corpus.nodes),
        len(corpus.edges),
        len(corpus.colors),
    )
    return corpus


def load_configured_corpus(config: AppConfig) -> Corpus:
    """Load the corpus named by the application configuration."""

    colors = config.colors
    color_function = partial(
        label_to_color,
        frequency=colors.frequency,
        phases=tuple(colors.phases),
        center=colors.center,
        width=colors.width,
    )
    return load_corpus(
        config.corpus.resolved_path(),
        node_size_range=config.scales.node_size_range,
        edge_size_range=config.scales.edge_size_range,
        color_function=color_function,
    )
