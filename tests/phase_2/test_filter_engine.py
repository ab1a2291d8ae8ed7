from __future__ import annotations

import itertools

import pytest

from chilon_viz.config import PACKAGE_ROOT
from chilon_viz.filtering import FilterConfiguration, filter_corpus
from chilon_viz.graph.corpus import build_corpus, load_corpus
from chilon_viz.graph.model import Corpus, EdgeKey, VisibleSubgraph

BUNDLED_CORPUS = PACKAGE_ROOT / "data" / "corpus.json"

FLAG_NAMES = (
    "include_blank_and_unknown",
    "include_self_loops",
    "include_categorical_edges",
    "include_disconnected_nodes",
    "use_logarithmic_scale",
)


def _make_corpus(nodes, edges) -> Corpus:
    return build_corpus(
        [{"name": name, "count": count} for name, count in nodes],
        [
            {"source": source, "target": target, "label": label, "count": count}
            for source, target, label, count in edges
        ],
    )


def _abc_corpus() -> Corpus:
    return _make_corpus([("A", 100), ("B", 50), ("C", 10)], [("A", "B", "r", 40), ("B", "C", "r", 5)])


def _open_config(corpus: Corpus, **overrides) -> FilterConfiguration:
    values = dict(
        min_node_occurs=corpus.node_domain.minimum,
        max_node_occurs=corpus.node_domain.maximum,
        min_edge_occurs=corpus.edge_domain.minimum,
        max_edge_occurs=corpus.edge_domain.maximum,
    )
    values.update(overrides)
    return FilterConfiguration(**values)


def _all_flag_combinations():
    for values in itertools.product([True, False], repeat=len(FLAG_NAMES)):
        yield dict(zip(FLAG_NAMES, values))


def _assert_referentially_intact(visible: VisibleSubgraph) -> None:
    for edge in visible.edges:
        assert edge.source in visible.nodes
        assert edge.target in visible.nodes


def test_threshold_excludes_node_and_its_edges() -> None:
    corpus = _abc_corpus()
    config = FilterConfiguration(
        min_node_occurs=20,
        max_node_occurs=100,
        min_edge_occurs=0,
        max_edge_occurs=100,
        include_disconnected_nodes=True,
    )

    visible = filter_corpus(corpus, config)

    assert [node.name for node in visible.nodes] == ["A", "B"]
    assert visible.edge_keys == {EdgeKey("r", "A", "B")}


def test_anchor_survives_disconnected_pruning() -> None:
    corpus = _abc_corpus()
    config = FilterConfiguration(
        min_node_occurs=0,
        max_node_occurs=100,
        min_edge_occurs=1000,
        max_edge_occurs=2000,
        include_disconnected_nodes=False,
    )

    visible = filter_corpus(corpus, config)

    assert [node.name for node in visible.nodes] == ["A"]
    assert visible.edges == ()


def test_anchor_is_chosen_among_threshold_survivors() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)
    config = _open_config(
        corpus,
        max_node_occurs=500000,
        min_edge_occurs=10**9,
        max_edge_occurs=10**9,
        include_disconnected_nodes=False,
    )

    visible = filter_corpus(corpus, config)

    assert [node.name for node in visible.nodes] == ["ontolex"]


def test_excluded_blank_anchor_exempts_nothing() -> None:
    corpus = _make_corpus([("BLANK", 100), ("A", 50), ("B", 10)], [("A", "B", "r", 5)])
    config = _open_config(
        corpus,
        min_edge_occurs=10,
        max_edge_occurs=20,
        include_blank_and_unknown=False,
        include_disconnected_nodes=False,
    )

    visible = filter_corpus(corpus, config)

    assert visible == VisibleSubgraph.empty()


def test_disconnected_pruning_keeps_connected_nodes() -> None:
    corpus = _abc_corpus()
    config = _open_config(corpus, min_edge_occurs=10, include_disconnected_nodes=False)

    visible = filter_corpus(corpus, config)

    assert visible.node_names == {"A", "B"}
    assert visible.edge_keys == {EdgeKey("r", "A", "B")}


def test_open_configuration_keeps_everything() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)

    visible = filter_corpus(corpus, _open_config(corpus))

    assert [node.name for node in visible.nodes] == [node.name for node in corpus.nodes]
    assert [edge.key for edge in visible.edges] == [edge.key for edge in corpus.edges]


def test_blank_and_unknown_exclusion_drops_incident_edges() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)

    visible = filter_corpus(corpus, _open_config(corpus, include_blank_and_unknown=False))

    assert "BLANK" not in visible.node_names
    assert all("BLANK" not in (edge.source.name, edge.target.name) for edge in visible.edges)
    assert "LANG-STRING" in visible.node_names


def test_self_loop_exclusion() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)

    visible = filter_corpus(corpus, _open_config(corpus, include_self_loops=False))

    assert not any(edge.is_self_loop for edge in visible.edges)
    assert visible.edge_count == 13


def test_datatype_exclusion_with_disconnected_pruning() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)

    kept = filter_corpus(corpus, _open_config(corpus, include_categorical_edges=False))
    pruned = filter_corpus(
        corpus,
        _open_config(corpus, include_categorical_edges=False, include_disconnected_nodes=False),
    )

    assert not any(edge.is_datatype for edge in kept.edges)
    assert {"LANG-STRING", "STRING"} <= kept.node_names
    assert not {"LANG-STRING", "STRING"} & pruned.node_names
    _assert_referentially_intact(pruned)


def test_logarithmic_flag_selects_node_size() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)
    nodes = corpus.node_index()

    linear = filter_corpus(corpus, _open_config(corpus))
    logarithmic = filter_corpus(corpus, _open_config(corpus, use_logarithmic_scale=True))

    for node in linear.nodes:
        assert node.size == nodes[node.name].linear_size
    for node in logarithmic.nodes:
        assert node.size == nodes[node.name].log_size
    assert [edge.size for edge in linear.edges] == [edge.size for edge in logarithmic.edges]


def test_thresholds_are_inclusive() -> None:
    corpus = _abc_corpus()
    config = _open_config(corpus, min_node_occurs=50, max_node_occurs=50, min_edge_occurs=40, max_edge_occurs=40)

    visible = filter_corpus(corpus, config)

    assert visible.node_names == {"B"}
    assert visible.edges == ()


@pytest.mark.parametrize("flags", list(_all_flag_combinations()))
def test_every_edge_references_visible_nodes(flags) -> None:
    corpus = load_corpus(BUNDLED_CORPUS)
    for min_node, min_edge in [(0, 0), (276806, 0), (0, 150000), (500000, 200000)]:
        config = _open_config(corpus, min_node_occurs=min_node, min_edge_occurs=min_edge, **flags)
        visible = filter_corpus(corpus, config)
        _assert_referentially_intact(visible)
        if not flags["include_disconnected_nodes"]:
            degrees = {name: 0 for name in visible.node_names}
            for edge in visible.edges:
                degrees[edge.source.name] += 1
                degrees[edge.target.name] += 1
            isolated = [name for name, degree in degrees.items() if degree == 0]
            assert len(isolated) <= 1


@pytest.mark.parametrize("flags", list(_all_flag_combinations()))
def test_filtering_is_idempotent(flags) -> None:
    corpus = load_corpus(BUNDLED_CORPUS)
    config = _open_config(corpus, min_node_occurs=200000, **flags)

    assert filter_corpus(corpus, config) == filter_corpus(corpus, config)


@pytest.mark.parametrize(
    "flags",
    [flags for flags in _all_flag_combinations() if flags["include_disconnected_nodes"]],
)
def test_widening_thresholds_never_shrinks_the_subgraph(flags) -> None:
    corpus = load_corpus(BUNDLED_CORPUS)
    ranges = [
        (400000, 1500000, 150000, 300000),
        (200000, 1638349, 100000, 366287),
        (117791, 1638349, 92518, 366287),
    ]

    visible = [
        filter_corpus(
            corpus,
            _open_config(
                corpus,
                min_node_occurs=min_node,
                max_node_occurs=max_node,
                min_edge_occurs=min_edge,
                max_edge_occurs=max_edge,
                **flags,
            ),
        )
        for min_node, max_node, min_edge, max_edge in ranges
    ]

    for narrow, wide in zip(visible, visible[1:]):
        assert narrow.node_names <= wide.node_names
        assert narrow.edge_keys <= wide.edge_keys


def test_visible_nodes_keep_corpus_order() -> None:
    corpus = load_corpus(BUNDLED_CORPUS)

    visible = filter_corpus(corpus, _open_config(corpus, min_node_occurs=276806))

    assert [node.name for node in visible.nodes] == [
        "wordnet-rdf",
        "wordn2",
        "BLANK",
        "ontolex",
        "LANG-STRING",
        "wordnet",
    ]


def test_empty_corpus_yields_empty_subgraph() -> None:
    config = FilterConfiguration(min_node_occurs=0, max_node_occurs=10, min_edge_occurs=0, max_edge_occurs=10)

    assert filter_corpus(Corpus.empty(), config) == VisibleSubgraph.empty()
    assert filter_corpus(_make_corpus([("A", 3)], []), config) == VisibleSubgraph.empty()
