"""Filter engine turning the corpus into the visible subgraph."""

from chilon_viz.filtering.engine import filter_corpus, truncate_corpus
from chilon_viz.filtering.settings import FilterConfiguration

__all__ = ["FilterConfiguration", "filter_corpus", "truncate_corpus"]
