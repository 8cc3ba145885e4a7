"""Search result models."""

from mdreader.domain.base import CamelModel


class SearchMatch(CamelModel):
    line_number: int
    line_content: str
    context: str  # matched line plus one line either side
    match_start: int
    match_end: int


class SearchResult(CamelModel):
    file_id: str
    file_name: str
    matches: list[SearchMatch] = []
    score: float  # lower is better


class RankedMatch(CamelModel):
    """Output of a scorer: an index into the corpus and its score (lower is better)."""

    index: int
    score: float
