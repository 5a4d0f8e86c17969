"""
Ranks corpus entries against a query.

Every entry is matched on each of its name fields; the field score is the fuzzy
score plus the field's fixed boost and the entry keeps its best field. Entries
in the launch history get a bonus that puts them above everything else.
"""

import logging
import time
from typing import List, Optional, Sequence, Tuple

from ..utils.fuzzy_search import SearchCache, fuzzy_score
from .candidate_index import Corpus, Entry
from .config import LAUNCHER_CONFIG
from .entries import DesktopEntry
from .history import HistoryStore
from .locale_resolution import LocaleResolution
from .search_models import Candidate, FieldMatch, MatchField

logger = logging.getLogger("Scorer")

FieldTexts = Tuple[Tuple[MatchField, str], ...]


def entry_fields(entry: Entry, locale: LocaleResolution) -> FieldTexts:
    """Searchable (field, text) pairs for an entry, highest priority first."""
    if not isinstance(entry, DesktopEntry):
        return ((MatchField.EXECUTABLE_NAME, entry.name),)

    fields = []
    if locale.enabled:
        localized_name = locale.lookup(entry.localized_names)
        if localized_name:
            fields.append((MatchField.LOCALIZED_NAME, localized_name))
        localized_generic_name = locale.lookup(entry.localized_generic_names)
        if localized_generic_name:
            fields.append((MatchField.LOCALIZED_GENERIC_NAME, localized_generic_name))
    fields.append((MatchField.NAME, entry.name))
    if entry.generic_name:
        fields.append((MatchField.GENERIC_NAME, entry.generic_name))
    fields.append((MatchField.DESKTOP_FILE_NAME, entry.file_name))
    return tuple(fields)


def best_field_match(query: str, fields: FieldTexts) -> Optional[FieldMatch]:
    """Highest scoring field; ties go to the higher-priority field."""
    best = None
    for match_field, text in fields:
        fuzzy = fuzzy_score(query, text)
        if fuzzy <= 0:
            continue
        match = FieldMatch(field=match_field, text=text, fuzzy=fuzzy)
        if best is None or match.sort_key() > best.sort_key():
            best = match
    return best


class Scorer:
    """Produces ordered candidates for a query over a fixed corpus."""

    def __init__(
        self,
        corpus: Corpus,
        history: Optional[HistoryStore] = None,
        locale: Optional[LocaleResolution] = None,
        max_results: Optional[int] = None,
        cache_size: int = LAUNCHER_CONFIG["search"]["search_cache_size"],
    ):
        self.corpus = corpus
        self.history = history
        self.locale = locale if locale is not None else corpus.locale
        self.max_results = max_results
        self._cache = SearchCache(max_size=cache_size)
        # The corpus never changes, so field texts are resolved once
        self._fields: List[Tuple[Entry, FieldTexts]] = [
            (entry, entry_fields(entry, self.locale)) for entry in corpus
        ]

    def _history_bonus(self, entry_id: str) -> float:
        if self.history is None or not self.history.contains(entry_id):
            return 0.0
        return self.history.bonus(entry_id)

    def _base_matches(self, query: str) -> Sequence[Tuple[Entry, FieldMatch]]:
        cached = self._cache.get(query)
        if cached is not None:
            return cached

        matches = []
        for entry, fields in self._fields:
            match = best_field_match(query, fields)
            if match is not None:
                matches.append((entry, match))
        matches = tuple(matches)
        self._cache.put(query, matches)
        return matches

    def history_view(self) -> List[Candidate]:
        """History entries, most recent first, as candidates."""
        if self.history is None:
            return []
        candidates = []
        for entry_id in self.history.all_in_recency_order():
            entry = self.corpus.get(entry_id)
            if entry is None:
                logger.debug(f"History entry {entry_id} not in corpus")
                continue
            candidates.append(Candidate(entry=entry, history_bonus=self.history.bonus(entry_id)))
        return candidates

    def rank(self, query: str, limit: Optional[int] = None) -> List[Candidate]:
        """
        Rank the corpus against `query`.

        An empty query returns the history view instead of scoring.
        """
        if not query or not query.strip():
            return self.history_view()

        start_time = time.time()

        candidates = [
            Candidate(entry=entry, match=match, history_bonus=self._history_bonus(entry.id))
            for entry, match in self._base_matches(query)
        ]
        # sorted() is stable, exact ties keep corpus order
        candidates = sorted(candidates, key=lambda c: c.score, reverse=True)

        limit = limit if limit is not None else self.max_results
        if limit is not None:
            candidates = candidates[:limit]

        duration_ms = (time.time() - start_time) * 1000
        if duration_ms > LAUNCHER_CONFIG["search"]["slow_search_ms"]:
            logger.warning(
                f"Slow search '{query}': {duration_ms:.2f}ms "
                f"({len(candidates)} results from {len(self.corpus)} entries)"
            )
        else:
            stats = self._cache.get_stats()
            logger.debug(
                f"Search '{query}': {duration_ms:.2f}ms ({len(candidates)} results, "
                f"cache hit rate {stats['hit_rate']:.0%})"
            )

        return candidates
