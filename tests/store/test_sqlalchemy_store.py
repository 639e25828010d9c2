from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from sharethebill.errors import StorageError
from sharethebill.store.base import VersionedValue
from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore


class TestGetSet:
    def test_missing_key(self, store):
        assert store.get("nope") is None
        assert store.get_versioned("nope") is None

    def test_set_then_get(self, store):
        store.set("k", "v1")
        assert store.get("k") == "v1"
        assert store.get_versioned("k") == VersionedValue("v1", 1)

    def test_overwrite_bumps_version(self, store):
        store.set("k", "v1")
        store.set("k", "v2")
        assert store.get_versioned("k") == VersionedValue("v2", 2)


class TestCompareAndSet:
    def test_insert_when_absent(self, store):
        assert store.compare_and_set("k", "v1", 0) is True
        assert store.get_versioned("k") == VersionedValue("v1", 1)

    def test_insert_loses_when_present(self, store):
        store.set("k", "v1")
        assert store.compare_and_set("k", "other", 0) is False
        assert store.get("k") == "v1"

    def test_update_with_matching_version(self, store):
        store.compare_and_set("k", "v1", 0)
        assert store.compare_and_set("k", "v2", 1) is True
        assert store.get_versioned("k") == VersionedValue("v2", 2)

    def test_update_with_stale_version(self, store):
        store.compare_and_set("k", "v1", 0)
        store.compare_and_set("k", "v2", 1)
        assert store.compare_and_set("k", "stale", 1) is False
        assert store.get("k") == "v2"

    def test_update_missing_key(self, store):
        assert store.compare_and_set("k", "v", 3) is False
        assert store.get("k") is None


class TestDelete:
    def test_delete_value_and_set(self, store):
        store.set("k", "v")
        store.add_to_set("k", "a")
        store.delete("k")
        assert store.get("k") is None
        assert store.members_of("k") == set()

    def test_delete_missing_is_noop(self, store):
        store.delete("nope")


class TestSets:
    def test_add_is_idempotent(self, store):
        store.add_to_set("s", "a")
        store.add_to_set("s", "a")
        store.add_to_set("s", "b")
        assert store.members_of("s") == {"a", "b"}

    def test_remove(self, store):
        store.add_to_set("s", "a")
        store.add_to_set("s", "b")
        store.remove_from_set("s", "a")
        store.remove_from_set("s", "missing")
        assert store.members_of("s") == {"b"}

    def test_sets_are_separate(self, store):
        store.add_to_set("s1", "a")
        assert store.members_of("s2") == set()


class TestBackendFailures:
    def _broken_store(self):
        conn = MagicMock()
        conn.execute.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
        return SQLAlchemyKeyValueStore(conn), conn

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.get("k"),
            lambda s: s.set("k", "v"),
            lambda s: s.compare_and_set("k", "v", 0),
            lambda s: s.compare_and_set("k", "v", 2),
            lambda s: s.delete("k"),
            lambda s: s.add_to_set("k", "m"),
            lambda s: s.remove_from_set("k", "m"),
            lambda s: s.members_of("k"),
        ],
    )
    def test_wrapped_as_storage_error(self, call):
        store, conn = self._broken_store()
        with pytest.raises(StorageError) as exc_info:
            call(store)
        assert exc_info.value.kind == "storage_failed"
        assert isinstance(exc_info.value.__cause__, OperationalError)
        conn.rollback.assert_called_once()
