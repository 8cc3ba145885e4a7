from tests.fakes.fake_catalog import CountingCatalog, FlakyCatalog
from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_scorer import ReversedScorer

__all__ = [
    "CountingCatalog",
    "FakeClock",
    "FlakyCatalog",
    "ReversedScorer",
]
