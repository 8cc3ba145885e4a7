from mdreader.domain.search import RankedMatch
from mdreader.indexing.search import IndexedFile, Scorer


class ReversedScorer(Scorer):
    """Scorer that matches everything, last file in the corpus first."""

    def score(self, query: str, corpus: list[IndexedFile]) -> list[RankedMatch]:
        return [
            RankedMatch(index=index, score=float(rank))
            for rank, index in enumerate(reversed(range(len(corpus))))
        ]
