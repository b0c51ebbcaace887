"""
Storage backend tests: values, durability and foreign-only notification.
"""

import logging

import pytest

from coursepath.errors import StorageError
from coursepath.storage import KeyValueStore, MemoryBackend, SqliteStore


class Recorder:
    def __init__(self):
        self.keys = []

    def __call__(self, key):
        self.keys.append(key)


class TestMemoryStore:
    """In-process fan-out between views."""

    def test_satisfies_protocol(self, backend):
        assert isinstance(backend.open_view(), KeyValueStore)

    def test_values_shared_between_views(self, backend):
        a, b = backend.open_view(), backend.open_view()
        a.set("k", "v")
        assert b.get("k") == "v"

    def test_writer_is_not_notified(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen_a, seen_b = Recorder(), Recorder()
        a.subscribe("k", seen_a)
        b.subscribe("k", seen_b)

        a.set("k", "v")

        assert seen_a.keys == []
        assert seen_b.keys == ["k"]

    def test_unchanged_value_does_not_notify(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen = Recorder()
        b.subscribe("k", seen)
        a.set("k", "v")
        a.set("k", "v")
        assert seen.keys == ["k"]

    def test_other_keys_ignored(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen = Recorder()
        b.subscribe("k", seen)
        a.set("other", "v")
        assert seen.keys == []

    def test_delete_notifies(self, backend):
        a, b = backend.open_view(), backend.open_view()
        a.set("k", "v")
        seen = Recorder()
        b.subscribe("k", seen)
        a.delete("k")
        assert seen.keys == ["k"]
        assert b.get("k") is None

    def test_delete_missing_key_does_not_notify(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen = Recorder()
        b.subscribe("k", seen)
        a.delete("k")
        assert seen.keys == []

    def test_unsubscribe(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen = Recorder()
        subscription = b.subscribe("k", seen)
        subscription.unsubscribe()
        subscription.unsubscribe()
        a.set("k", "v")
        assert seen.keys == []
        assert b.subscribed_keys() == []

    def test_closed_view_not_notified(self, backend):
        a, b = backend.open_view(), backend.open_view()
        seen = Recorder()
        b.subscribe("k", seen)
        b.close()
        a.set("k", "v")
        assert seen.keys == []

    def test_close_detaches_from_backend(self, backend):
        view = backend.open_view()
        view.subscribe("k", Recorder())
        view.close()
        assert view not in backend._views
        assert view.subscribed_keys() == []

    def test_failing_listener_does_not_block_others(self, backend, caplog):
        a, b = backend.open_view(), backend.open_view()

        def broken(key):
            raise RuntimeError("boom")

        seen = Recorder()
        b.subscribe("k", broken)
        b.subscribe("k", seen)
        caplog.set_level(logging.ERROR)

        a.set("k", "v")

        assert seen.keys == ["k"]
        assert "failed" in caplog.text

    def test_poll_is_noop(self, backend):
        assert backend.open_view().poll() == 0


class TestSqliteStore:
    """File-backed storage with revision polling."""

    def test_satisfies_protocol(self, sqlite_factory):
        assert isinstance(sqlite_factory(), KeyValueStore)

    def test_get_missing(self, sqlite_factory):
        assert sqlite_factory().get("k") is None

    def test_value_survives_restart(self, sqlite_factory):
        sqlite_factory().set("k", '["ch01"]')
        assert sqlite_factory().get("k") == '["ch01"]'

    def test_creates_parent_directory(self, tmp_path):
        store = SqliteStore(tmp_path / "a" / "b" / "progress.db")
        store.set("k", "v")
        assert (tmp_path / "a" / "b" / "progress.db").exists()

    def test_foreign_change_delivered_on_poll(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        seen = Recorder()
        a.subscribe("k", seen)

        b.set("k", "v")
        assert seen.keys == []
        assert a.poll() == 1
        assert seen.keys == ["k"]
        assert a.poll() == 0

    def test_own_write_not_delivered(self, sqlite_factory):
        a = sqlite_factory("a")
        seen = Recorder()
        a.subscribe("k", seen)
        a.set("k", "v")
        assert a.poll() == 0
        assert seen.keys == []

    def test_changes_before_subscribe_are_baseline(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        b.set("k", "v")
        seen = Recorder()
        a.subscribe("k", seen)
        assert a.poll() == 0

    def test_unchanged_value_not_delivered(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        b.set("k", "v")
        seen = Recorder()
        a.subscribe("k", seen)
        b.set("k", "v")
        assert a.poll() == 0

    def test_changes_between_polls_collapse(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        seen = Recorder()
        a.subscribe("k", seen)
        b.set("k", "1")
        b.set("k", "2")
        assert a.poll() == 1
        assert a.get("k") == "2"

    def test_delete_delivered(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        b.set("k", "v")
        seen = Recorder()
        a.subscribe("k", seen)
        b.delete("k")
        assert a.poll() == 1
        assert a.get("k") is None

    def test_delete_missing_key_not_delivered(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        seen = Recorder()
        a.subscribe("k", seen)
        b.delete("k")
        assert a.poll() == 0
        assert seen.keys == []
        assert a.get("k") is None

    def test_delete_then_set_delivered(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        b.set("k", "v")
        b.delete("k")
        seen = Recorder()
        a.subscribe("k", seen)
        b.set("k", "v")
        assert a.poll() == 1
        assert a.get("k") == "v"

    def test_unsubscribed_view_not_delivered(self, sqlite_factory):
        a, b = sqlite_factory("a"), sqlite_factory("b")
        seen = Recorder()
        a.subscribe("k", seen).unsubscribe()
        b.set("k", "v")
        assert a.poll() == 0
        assert seen.keys == []

    def test_distinct_view_ids(self, sqlite_factory):
        assert sqlite_factory().view_id != sqlite_factory().view_id

    def test_damaged_file_raises_storage_error(self, db_path):
        store = SqliteStore(db_path)
        db_path.write_bytes(b"not a database" * 512)
        with pytest.raises(StorageError):
            store.get("k")
        with pytest.raises(StorageError):
            SqliteStore(db_path)

    def test_subscribe_on_damaged_file(self, db_path, caplog):
        store = SqliteStore(db_path)
        db_path.write_bytes(b"not a database" * 512)
        caplog.set_level(logging.WARNING)
        store.subscribe("k", Recorder())
        assert store.subscribed_keys() == ["k"]
        assert "baseline" in caplog.text
