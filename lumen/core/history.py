"""
Launch history, most recent first.

Entries are stable identifiers (desktop file path or executable path). Being in
the history gives a candidate a bonus that outranks every fuzzy score.
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger("History")

DEFAULT_MAX_SIZE = 100

# Larger than any fuzzy score plus field boost
HISTORY_BONUS = 1000.0


class HistoryStore:
    """Persistent most-recently-used list of launched entry identifiers."""

    def __init__(self, history_file: Optional[Path] = None, max_size: int = DEFAULT_MAX_SIZE):
        self.history_file = Path(history_file) if history_file else None
        self.max_size = max_size
        self._entries: List[str] = []
        self._lock = threading.RLock()

        self._load()

    def _load(self):
        """Load history from the history file."""
        if self.history_file is None or not self.history_file.exists():
            return
        try:
            with open(self.history_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            entries = data.get("entries", []) if isinstance(data, dict) else []
            self._entries = [e for e in entries if isinstance(e, str)][: self.max_size]
            logger.debug(f"Loaded {len(self._entries)} history entries")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load history: {e}")
            self._entries = []

    def save(self):
        """Write history to disk."""
        if self.history_file is None:
            return
        with self._lock:
            data = {
                "entries": list(self._entries),
                "last_updated": datetime.now().isoformat(),
                "version": "1.0",
            }
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            # Write to temporary file first, then rename to avoid corruption
            temp_file = self.history_file.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self.history_file)
            logger.debug(f"History saved to {self.history_file}")
        except OSError as e:
            logger.warning(f"Failed to save history: {e}")

    def add(self, entry_id: str):
        """Record a launch, moving the entry to the front."""
        if not entry_id or self.max_size <= 0:
            return
        with self._lock:
            if entry_id in self._entries:
                self._entries.remove(entry_id)
            self._entries.insert(0, entry_id)
            del self._entries[self.max_size :]
        self.save()

    def remove(self, entry_id: str) -> bool:
        """Delete an entry. Returns False if it was not in the history."""
        with self._lock:
            if entry_id not in self._entries:
                return False
            self._entries.remove(entry_id)
        self.save()
        return True

    def contains(self, entry_id: str) -> bool:
        with self._lock:
            return entry_id in self._entries

    def __contains__(self, entry_id: str) -> bool:
        return self.contains(entry_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def bonus(self, entry_id: str) -> float:
        """Score bonus: HISTORY_BONUS plus a rank that favours recent launches."""
        with self._lock:
            try:
                index = self._entries.index(entry_id)
            except ValueError:
                return 0.0
            return HISTORY_BONUS + (len(self._entries) - index)

    def all_in_recency_order(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def prune(self, valid_ids: Iterable[str]) -> int:
        """Drop entries whose target no longer exists. Returns how many were dropped."""
        valid = set(valid_ids)
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e in valid]
            dropped = before - len(self._entries)
        if dropped:
            logger.info(f"Pruned {dropped} stale history entries")
            self.save()
        return dropped

    def clear(self):
        with self._lock:
            self._entries.clear()
        self.save()
