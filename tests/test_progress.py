"""
ProgressStore tests: toggling, persistence and corruption recovery.
"""

import logging
import random

import pytest

from coursepath.classroom import ProgressStore
from coursepath.config import STORAGE_KEY
from coursepath.errors import StorageError
from coursepath.schemas import CompletionRecord
from coursepath.storage import MemoryBackend, SqliteStore


class TestToggle:
    """Flip and query completion."""

    def test_starts_empty(self, backend):
        progress = ProgressStore(backend.open_view())
        assert progress.count() == 0
        assert not progress.is_complete("ch01")

    def test_toggle_adds_and_removes(self, backend):
        progress = ProgressStore(backend.open_view())
        record = progress.toggle("ch03")
        assert "ch03" in record
        assert progress.is_complete("ch03")

        record = progress.toggle("ch03")
        assert "ch03" not in record
        assert not progress.is_complete("ch03")

    def test_toggle_persists_json_array(self, backend):
        view = backend.open_view()
        progress = ProgressStore(view)
        progress.toggle("ch07")
        progress.toggle("ch01")
        assert view.get(STORAGE_KEY) == '["ch01", "ch07"]'

    def test_is_complete_is_idempotent(self, backend):
        progress = ProgressStore(backend.open_view())
        progress.toggle("ch02")
        assert progress.is_complete("ch02") == progress.is_complete("ch02")
        assert progress.is_complete("ch05") == progress.is_complete("ch05")

    def test_toggle_builds_on_latest_stored_record(self, backend):
        first = ProgressStore(backend.open_view())
        second = ProgressStore(backend.open_view())
        second.load()

        first.toggle("ch01")
        second.toggle("ch02")

        assert ProgressStore(backend.open_view()).completed_ids() == {"ch01", "ch02"}

    def test_reset(self, backend):
        progress = ProgressStore(backend.open_view())
        progress.toggle("ch01")
        progress.toggle("ch02")
        record = progress.reset()
        assert record == CompletionRecord()
        assert progress.count() == 0
        assert ProgressStore(backend.open_view()).count() == 0

    def test_completion_stats(self, backend):
        progress = ProgressStore(backend.open_view())
        progress.toggle("ch01")
        stats = progress.completion_stats(4)
        assert stats["completed"] == 1
        assert stats["remaining"] == 3
        assert stats["completion_percent"] == 25.0

    def test_completion_stats_empty_catalog(self, backend):
        assert ProgressStore(backend.open_view()).completion_stats(0)["completion_percent"] == 0


class TestPersistence:
    """Records survive a simulated restart."""

    def test_round_trip_odd_toggle_counts(self, backend):
        rng = random.Random(7)
        ids = [f"ch{n:02d}" for n in range(1, 9)]
        sequence = [rng.choice(ids) for _ in range(40)]

        progress = ProgressStore(backend.open_view())
        for chapter_id in sequence:
            progress.toggle(chapter_id)

        expected = {cid for cid in ids if sequence.count(cid) % 2 == 1}
        restarted = ProgressStore(backend.open_view())
        assert restarted.load() == CompletionRecord.of(expected)

    def test_round_trip_sqlite(self, db_path):
        progress = ProgressStore(SqliteStore(db_path))
        for chapter_id in ["ch01", "ch02", "ch01", "ch03", "ch03", "ch03"]:
            progress.toggle(chapter_id)

        restarted = ProgressStore(SqliteStore(db_path))
        assert restarted.completed_ids() == {"ch02", "ch03"}

    def test_default_storage_uses_configured_db(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "progress.db"
        monkeypatch.setenv("COURSEPATH_DB", str(target))
        progress = ProgressStore()
        progress.toggle("ch01")
        assert target.exists()
        assert ProgressStore(SqliteStore(target)).is_complete("ch01")


class TestCorruptionRecovery:
    """Unreadable values degrade to an empty record."""

    def test_not_json(self, caplog):
        backend = MemoryBackend({STORAGE_KEY: "not json"})
        caplog.set_level(logging.WARNING)
        progress = ProgressStore(backend.open_view())
        assert progress.load() == CompletionRecord()
        assert "corrupt" in caplog.text.lower()

    def test_not_an_array(self):
        backend = MemoryBackend({STORAGE_KEY: '{"not":"an array"}'})
        progress = ProgressStore(backend.open_view())
        assert progress.load() == CompletionRecord()

    def test_corrupt_value_is_discarded(self):
        backend = MemoryBackend({STORAGE_KEY: "not json"})
        view = backend.open_view()
        ProgressStore(view).load()
        assert view.get(STORAGE_KEY) is None

    def test_next_toggle_heals_storage(self):
        backend = MemoryBackend({STORAGE_KEY: "[1, 2, 3]"})
        view = backend.open_view()
        progress = ProgressStore(view)
        progress.toggle("ch01")
        assert view.get(STORAGE_KEY) == '["ch01"]'

    def test_corrupt_sqlite_value(self, db_path):
        SqliteStore(db_path).set(STORAGE_KEY, "not json")
        progress = ProgressStore(SqliteStore(db_path))
        assert progress.count() == 0
        assert SqliteStore(db_path).get(STORAGE_KEY) is None

    def test_damaged_database_file(self, db_path, caplog):
        store = SqliteStore(db_path)
        db_path.write_bytes(b"not a database" * 512)
        caplog.set_level(logging.WARNING)

        progress = ProgressStore(store)

        assert progress.load() == CompletionRecord()
        assert progress.count() == 0
        assert "unreadable" in caplog.text

    def test_damaged_database_rejects_writes(self, db_path):
        store = SqliteStore(db_path)
        db_path.write_bytes(b"not a database" * 512)
        with pytest.raises(StorageError):
            ProgressStore(store).toggle("ch01")
