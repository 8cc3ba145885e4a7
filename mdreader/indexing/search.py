"""Fuzzy full-text search over file names and contents."""

import re
import sys
from typing import Protocol

from pydantic import BaseModel
from rapidfuzz import fuzz, process

from mdreader.domain.files import FileEntry
from mdreader.domain.search import RankedMatch, SearchMatch, SearchResult

WORD_PATTERN = re.compile(r"\w[\w\-]*")


class IndexedFile(BaseModel):
    id: str
    name: str
    content: str


class Scorer(Protocol):
    def score(self, query: str, corpus: list[IndexedFile]) -> list[RankedMatch]:
        """Rank corpus entries for a query, most relevant (lowest score) first."""
        ...


class RapidFuzzScorer(Scorer):
    """Weighted fuzzy scorer over the name and content of each file.

    Each field gets a distance between 0 (exact) and 1 (unrelated). A field
    matches when its distance is at most `threshold`; files without a matching
    field are dropped. The score multiplies each matching field's distance
    raised to its normalized weight, so a strong name match outranks an equally
    strong content match.
    """

    def __init__(
        self,
        *,
        threshold: float = 0.3,
        name_weight: float = 3.0,
        content_weight: float = 1.0,
        min_match_length: int = 2,
    ):
        self.threshold = threshold
        self.min_match_length = min_match_length
        total_weight = name_weight + content_weight
        self.name_weight = name_weight / total_weight
        self.content_weight = content_weight / total_weight

    def score(self, query: str, corpus: list[IndexedFile]) -> list[RankedMatch]:
        query = query.strip().lower()
        if len(query) < self.min_match_length:
            return []

        ranked = []
        for index, record in enumerate(corpus):
            field_distances = [
                (self._name_distance(query, record.name), self.name_weight),
                (self._content_distance(query, record.content), self.content_weight),
            ]
            matched = [(d, w) for d, w in field_distances if d <= self.threshold]
            if not matched:
                continue

            score = 1.0
            for distance, weight in matched:
                score *= max(distance, sys.float_info.epsilon) ** weight
            ranked.append(RankedMatch(index=index, score=score))

        ranked.sort(key=lambda match: (match.score, match.index))
        return ranked

    def _name_distance(self, query: str, name: str) -> float:
        return 1.0 - fuzz.partial_ratio(query, name.lower()) / 100.0

    def _content_distance(self, query: str, content: str) -> float:
        content = content.lower()
        if query in content:
            return 0.0

        # Tolerate typos: single words against words, phrases against lines
        if " " in query:
            choices = [line for line in content.split("\n") if line.strip()]
            scorer = fuzz.partial_ratio
        else:
            choices = list(set(WORD_PATTERN.findall(content)))
            scorer = fuzz.ratio
        best = process.extractOne(query, choices, scorer=scorer)
        if best is None:
            return 1.0
        return 1.0 - best[1] / 100.0


def _context(lines: list[str], line_index: int, context_lines: int = 1) -> str:
    start = max(0, line_index - context_lines)
    end = min(len(lines), line_index + context_lines + 1)
    return "\n".join(lines[start:end]).strip()


class SearchIndex:
    """Immutable search snapshot over one catalog snapshot."""

    def __init__(self, records: list[IndexedFile], scorer: Scorer, max_line_matches: int = 5):
        self.records = records
        self.scorer = scorer
        self.max_line_matches = max_line_matches

    @classmethod
    def build(
        cls,
        files: list[FileEntry],
        contents: dict[str, str],
        scorer: Scorer,
        max_line_matches: int = 5,
    ) -> "SearchIndex":
        """Create a search index from a catalog snapshot; files missing from `contents` are skipped."""
        records = [
            IndexedFile(id=file.id, name=file.name, content=contents[file.id])
            for file in files
            if file.id in contents
        ]
        return cls(records, scorer, max_line_matches=max_line_matches)

    def search(self, query: str, limit: int = 50) -> list[SearchResult]:
        """Search names and contents.

        Args:
            query: Free text query; blank queries return no results
            limit: Maximum number of files returned

        Returns:
            Results ordered most relevant first, each with up to
            `max_line_matches` lines containing the query literally
        """
        if not query.strip() or limit <= 0:
            return []

        results = []
        for ranked in self.scorer.score(query, self.records)[:limit]:
            record = self.records[ranked.index]
            results.append(
                SearchResult(
                    file_id=record.id,
                    file_name=record.name,
                    matches=self._line_matches(record.content, query),
                    score=ranked.score,
                )
            )
        return results

    def _line_matches(self, content: str, query: str) -> list[SearchMatch]:
        needle = query.strip().lower()
        lines = content.split("\n")
        matches = []

        for line_index, line in enumerate(lines):
            if needle not in line.lower():
                continue
            line_content = line.strip()
            match_start = line_content.lower().find(needle)
            matches.append(
                SearchMatch(
                    line_number=line_index + 1,
                    line_content=line_content,
                    context=_context(lines, line_index),
                    match_start=match_start,
                    match_end=match_start + len(needle),
                )
            )
            if len(matches) >= self.max_line_matches:
                break

        return matches
