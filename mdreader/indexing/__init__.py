"""Indexes derived from the markdown folder: backlinks, search, and the caches around them."""

from mdreader.indexing.backlinks import BacklinkIndex, build_backlink_index
from mdreader.indexing.resolver import LinkResolver
from mdreader.indexing.search import RapidFuzzScorer, Scorer, SearchIndex
from mdreader.indexing.store import IndexStore, Workspace

__all__ = [
    "BacklinkIndex",
    "IndexStore",
    "LinkResolver",
    "RapidFuzzScorer",
    "Scorer",
    "SearchIndex",
    "Workspace",
    "build_backlink_index",
]
