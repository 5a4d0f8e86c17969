"""
Fuzzy string scoring for launcher search.

Scores are tiered so that an exact match always beats a prefix match, which
beats a substring match, which beats an in-order subsequence match. Within a
tier RapidFuzz's normalized Indel ratio decides, so closer lengths rank higher.
"""

import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from rapidfuzz import fuzz

logger = logging.getLogger("FuzzySearch")


class MatchKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"
    SUBSEQUENCE = "subsequence"


EXACT_SCORE = 100.0

# (low, high) bounds per tier; high is never reached by a non-exact match
TIER_BOUNDS: Dict[MatchKind, Tuple[float, float]] = {
    MatchKind.PREFIX: (75.0, 95.0),
    MatchKind.SUBSTRING: (50.0, 70.0),
    MatchKind.SUBSEQUENCE: (20.0, 45.0),
}


def normalize(text: str) -> str:
    """Case-fold and trim text for matching."""
    if not text:
        return ""
    return " ".join(text.casefold().split())


def is_subsequence(query: str, text: str) -> bool:
    """True if all non-space query characters appear in order in text."""
    it = iter(text)
    return all(c in it for c in query if c != " ")


def match_kind(query: str, text: str) -> Optional[MatchKind]:
    """Classify how normalized `query` matches normalized `text`."""
    if not query or not text:
        return None
    if query == text:
        return MatchKind.EXACT
    if text.startswith(query):
        return MatchKind.PREFIX
    if query in text:
        return MatchKind.SUBSTRING
    if is_subsequence(query, text):
        return MatchKind.SUBSEQUENCE
    return None


def fuzzy_score(query: str, text: str) -> float:
    """
    Score how well `query` matches `text`, case-insensitively.

    Returns 0.0 when there is no match at all.
    """
    query = normalize(query)
    text = normalize(text)

    kind = match_kind(query, text)
    if kind is None:
        return 0.0
    if kind is MatchKind.EXACT:
        return EXACT_SCORE

    low, high = TIER_BOUNDS[kind]
    similarity = fuzz.ratio(query, text) / 100.0
    return low + (high - low) * similarity


class SearchCache:
    """LRU cache for search results to avoid recomputing identical queries."""

    def __init__(self, max_size: int = 100):
        self.cache: OrderedDict[str, Any] = OrderedDict()
        self.max_size = max_size
        self.hits = 0
        self.misses = 0

    def get(self, query: str) -> Optional[Any]:
        """Get cached results for a query."""
        key = normalize(query)
        if key in self.cache:
            self.hits += 1
            self.cache.move_to_end(key)
            return self.cache[key]
        self.misses += 1
        return None

    def put(self, query: str, results: Any):
        """Cache search results."""
        if self.max_size <= 0:
            return
        key = normalize(query)
        if key in self.cache:
            self.cache.move_to_end(key)
        self.cache[key] = results

        # Evict oldest if over capacity
        while len(self.cache) > self.max_size:
            self.cache.popitem(last=False)

    def get_stats(self) -> Dict:
        """Get cache statistics."""
        total = self.hits + self.misses
        hit_rate = self.hits / total if total > 0 else 0
        return {
            "size": len(self.cache),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": hit_rate,
        }
