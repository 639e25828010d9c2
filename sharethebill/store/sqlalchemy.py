from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Connection, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sharethebill.constants import UTC
from sharethebill.errors import StorageError
from sharethebill.store.base import KeyValueStore, VersionedValue

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class SQLAlchemyKeyValueStore(KeyValueStore):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @contextmanager
    def _guard(self, operation: str, key: str) -> Iterator[None]:
        """Roll back and re-raise backend failures as StorageError."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Store %s failed for key=%s: %s", operation, key, exc)
            try:
                self.conn.rollback()
            except SQLAlchemyError:
                logger.exception("Rollback failed after %s on key=%s", operation, key)
            raise StorageError(f"Store {operation} failed for key {key}") from exc

    def get(self, key: str) -> str | None:
        found = self.get_versioned(key)
        return found.value if found is not None else None

    def get_versioned(self, key: str) -> VersionedValue | None:
        with self._guard("get", key):
            row = (
                self.conn.execute(
                    text("SELECT entry_value, version FROM kv_entries WHERE entry_key = :key"),
                    {"key": key},
                )
                .mappings()
                .fetchone()
            )
            # Close the implicit read transaction so the next read sees fresh data.
            self.conn.commit()
        if row is None:
            return None
        return VersionedValue(row["entry_value"], row["version"])

    def set(self, key: str, value: str) -> None:
        with self._guard("set", key):
            result = self.conn.execute(
                text(
                    "UPDATE kv_entries SET entry_value = :value, version = version + 1, updated_at = :updated_at "
                    "WHERE entry_key = :key"
                ),
                {"key": key, "value": value, "updated_at": _now()},
            )
            if result.rowcount == 0:
                self.conn.execute(
                    text(
                        "INSERT INTO kv_entries (entry_key, entry_value, version, updated_at) "
                        "VALUES (:key, :value, 1, :updated_at)"
                    ),
                    {"key": key, "value": value, "updated_at": _now()},
                )
            self.conn.commit()
        logger.debug("Store set key=%s", key)

    def compare_and_set(self, key: str, value: str, expected_version: int) -> bool:
        if expected_version == 0:
            with self._guard("compare_and_set", key):
                try:
                    self.conn.execute(
                        text(
                            "INSERT INTO kv_entries (entry_key, entry_value, version, updated_at) "
                            "VALUES (:key, :value, 1, :updated_at)"
                        ),
                        {"key": key, "value": value, "updated_at": _now()},
                    )
                    self.conn.commit()
                except IntegrityError:
                    self.conn.rollback()
                    logger.info("Store compare_and_set lost race: key=%s already exists", key)
                    return False
            return True

        with self._guard("compare_and_set", key):
            result = self.conn.execute(
                text(
                    "UPDATE kv_entries SET entry_value = :value, version = version + 1, updated_at = :updated_at "
                    "WHERE entry_key = :key AND version = :expected"
                ),
                {"key": key, "value": value, "updated_at": _now(), "expected": expected_version},
            )
            self.conn.commit()
        if result.rowcount != 1:
            logger.info("Store compare_and_set version mismatch: key=%s expected=%d", key, expected_version)
            return False
        return True

    def delete(self, key: str) -> None:
        with self._guard("delete", key):
            self.conn.execute(text("DELETE FROM kv_entries WHERE entry_key = :key"), {"key": key})
            self.conn.execute(text("DELETE FROM kv_set_members WHERE set_key = :key"), {"key": key})
            self.conn.commit()
        logger.debug("Store delete key=%s", key)

    def add_to_set(self, key: str, member: str) -> None:
        with self._guard("add_to_set", key):
            exists = self.conn.execute(
                text("SELECT 1 FROM kv_set_members WHERE set_key = :key AND member = :member"),
                {"key": key, "member": member},
            ).fetchone()
            if exists is None:
                self.conn.execute(
                    text("INSERT INTO kv_set_members (set_key, member, created_at) VALUES (:key, :member, :created_at)"),
                    {"key": key, "member": member, "created_at": _now()},
                )
            self.conn.commit()

    def remove_from_set(self, key: str, member: str) -> None:
        with self._guard("remove_from_set", key):
            self.conn.execute(
                text("DELETE FROM kv_set_members WHERE set_key = :key AND member = :member"),
                {"key": key, "member": member},
            )
            self.conn.commit()

    def members_of(self, key: str) -> set[str]:
        with self._guard("members_of", key):
            rows = self.conn.execute(
                text("SELECT member FROM kv_set_members WHERE set_key = :key"),
                {"key": key},
            ).fetchall()
            self.conn.commit()
        return {row[0] for row in rows}
