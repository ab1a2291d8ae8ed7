"""Node, edge, corpus, and visible-subgraph value objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, NamedTuple, Optional, Tuple


class NodeCategory(str, Enum):
    """Kind of resource a node summarises."""

    NAMESPACE = "Namespace"
    UNKNOWN = "Unknown"
    BLANK = "Blank"


class EdgeKey(NamedTuple):
    """Stable edge identity across filter passes.

    ``occurrence`` separates edges sharing label and endpoints; it is ``0`` for
    the first such edge in corpus order.
    """

    label: str
    source: str
    target: str
    occurrence: int = 0


@dataclass(frozen=True)
class CountDomain:
    """Inclusive occurrence-count bounds taken from a count-sorted list."""

    minimum: int
    maximum: int

    @property
    def is_degenerate(self) -> bool:
        return self.minimum == self.maximum


@dataclass(frozen=True)
class CorpusNode:
    """Node of the full dataset with its load-time derived magnitudes."""

    name: str
    count: int
    category: NodeCategory
    namespace: Optional[str]
    linear_size: float
    log_size: float
    share: float

    def size(self, *, logarithmic: bool) -> float:
        return self.log_size if logarithmic else self.linear_size


@dataclass(frozen=True)
class CorpusEdge:
    """Edge of the full dataset; endpoints are node names."""

    source: str
    target: str
    label: str
    count: int
    is_datatype: bool
    occurrence: int
    size: float
    color: str
    namespace: Optional[str]

    @property
    def key(self) -> EdgeKey:
        return EdgeKey(self.label, self.source, self.target, self.occurrence)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass(frozen=True)
class Corpus:
    """Full dataset loaded once and read-only afterwards.

    Nodes and edges are sorted by descending count; the domains are taken from
    the first and last elements and are ``None`` when the list is empty.
    """

    nodes: Tuple[CorpusNode, ...]
    edges: Tuple[CorpusEdge, ...]
    node_domain: Optional[CountDomain]
    edge_domain: Optional[CountDomain]
    colors: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Return whether the corpus lacks nodes or edges and cannot be scaled."""

        return not self.nodes or not self.edges

    def node_index(self) -> Dict[str, CorpusNode]:
        return {node.name: node for node in self.nodes}

    @classmethod
    def empty(cls) -> "Corpus":
        return cls(nodes=(), edges=(), node_domain=None, edge_domain=None, colors={})


@dataclass(frozen=True)
class VisibleNode:
    """Node admitted by a filter pass, carrying its active size."""

    name: str
    count: int
    category: NodeCategory
    namespace: Optional[str]
    size: float
    share: float


@dataclass(frozen=True)
class VisibleEdge:
    """Edge admitted by a filter pass with endpoints resolved to visible nodes."""

    key: EdgeKey
    source: VisibleNode
    target: VisibleNode
    label: str
    count: int
    is_datatype: bool
    size: float
    color: str
    namespace: Optional[str]
    lane: int = 1

    @property
    def is_self_loop(self) -> bool:
        return self.source.name == self.target.name


@dataclass(frozen=True)
class VisibleSubgraph:
    """Output of one filter pass."""

    nodes: Tuple[VisibleNode, ...]
    edges: Tuple[VisibleEdge, ...]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def node_names(self) -> FrozenSet[str]:
        return frozenset(node.name for node in self.nodes)

    @property
    def edge_keys(self) -> FrozenSet[EdgeKey]:
        return frozenset(edge.key for edge in self.edges)

    @classmethod
    def empty(cls) -> "VisibleSubgraph":
        return cls(nodes=(), edges=())
