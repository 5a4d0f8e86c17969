"""Unit tests for the launch history store"""

import sys
import os
import json

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lumen.core.history import HISTORY_BONUS, HistoryStore


class TestHistoryStore:
    """Test the most-recently-used history"""

    def test_add_moves_to_front(self, tmp_path):
        """Test relaunching an entry makes it the most recent"""
        history = HistoryStore(tmp_path / "history.json")
        history.add("a")
        history.add("b")
        history.add("a")
        assert history.all_in_recency_order() == ["a", "b"]

    def test_max_size(self, tmp_path):
        """Test the oldest entries are dropped beyond the cap"""
        history = HistoryStore(tmp_path / "history.json", max_size=2)
        for entry_id in ("a", "b", "c"):
            history.add(entry_id)
        assert history.all_in_recency_order() == ["c", "b"]

    def test_disabled(self):
        """Test a zero cap records nothing"""
        history = HistoryStore(max_size=0)
        history.add("a")
        assert len(history) == 0

    def test_remove(self, tmp_path):
        """Test removing entries"""
        history = HistoryStore(tmp_path / "history.json")
        history.add("a")
        assert history.remove("a")
        assert not history.remove("a")
        assert not history.contains("a")

    def test_bonus(self):
        """Test the bonus dominates and favours recent entries"""
        history = HistoryStore()
        history.add("old")
        history.add("new")
        assert history.bonus("new") > history.bonus("old") > HISTORY_BONUS
        assert history.bonus("missing") == 0.0

    def test_persistence(self, tmp_path):
        """Test history survives a reload"""
        history_file = tmp_path / "history.json"
        history = HistoryStore(history_file)
        history.add("a")
        history.add("b")

        reloaded = HistoryStore(history_file)
        assert reloaded.all_in_recency_order() == ["b", "a"]
        assert not history_file.with_suffix(".tmp").exists()
        with open(history_file, encoding="utf-8") as f:
            assert json.load(f)["entries"] == ["b", "a"]

    def test_corrupted_file(self, tmp_path):
        """Test a corrupted history file starts empty"""
        history_file = tmp_path / "history.json"
        history_file.write_text("{broken")
        assert HistoryStore(history_file).all_in_recency_order() == []

    def test_prune(self, tmp_path):
        """Test entries missing from the corpus are dropped"""
        history = HistoryStore(tmp_path / "history.json")
        for entry_id in ("a", "b", "c"):
            history.add(entry_id)
        assert history.prune({"a", "c"}) == 1
        assert history.all_in_recency_order() == ["c", "a"]

    def test_clear(self, tmp_path):
        """Test clearing the history"""
        history = HistoryStore(tmp_path / "history.json")
        history.add("a")
        history.clear()
        assert len(history) == 0
        assert HistoryStore(tmp_path / "history.json").all_in_recency_order() == []
