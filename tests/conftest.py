"""Root conftest: in-memory SQLite store and sample bill fixtures."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, text
from sqlalchemy.engine import Engine

from sharethebill.constants import UTC
from sharethebill.models.bill import (
    Bill,
    BillCreate,
    BillStatus,
    Participant,
    ParticipantShare,
    ParticipantStatus,
    SplitType,
)
from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore

# Matches Alembic head: b7e2c91d4a10 (create key-value store tables)
SCHEMA_DDL = """
CREATE TABLE kv_entries (
    entry_key VARCHAR(255) PRIMARY KEY,
    entry_value TEXT NOT NULL,
    version INTEGER NOT NULL DEFAULT 1,
    updated_at DATETIME NOT NULL
);

CREATE TABLE kv_set_members (
    set_key VARCHAR(255) NOT NULL,
    member VARCHAR(255) NOT NULL,
    created_at DATETIME NOT NULL,
    PRIMARY KEY (set_key, member)
);
"""

CREATOR_WALLET = "0x" + "ab" * 20


def apply_schema(conn: Connection) -> None:
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()


@pytest.fixture()
def db_engine() -> Engine:
    return create_engine("sqlite:///:memory:")


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture()
def store(db_connection: Connection) -> SQLAlchemyKeyValueStore:
    return SQLAlchemyKeyValueStore(db_connection)


def _sample_bill(**overrides) -> Bill:
    defaults = dict(
        id="01HZXBILL0000000000000000A",
        title="Dinner at Luigi's",
        total_amount=10000,
        split_type=SplitType.EQUAL,
        creator_fid=1,
        creator_username="alice",
        creator_wallet_address=CREATOR_WALLET,
        participants=[
            Participant(fid=1, username="alice", amount_owed=3334),
            Participant(fid=2, username="bob", display_name="Bob", amount_owed=3333),
            Participant(fid=3, username="carol", amount_owed=3333),
        ],
        status=BillStatus.PENDING,
        created_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
        updated_at=datetime(2026, 3, 1, 12, 0, tzinfo=UTC),
    )
    defaults.update(overrides)
    return Bill(**defaults)


def _sample_request(**overrides) -> BillCreate:
    defaults = dict(
        title="Dinner at Luigi's",
        total_amount=Decimal("100"),
        split_type=SplitType.EQUAL,
        creator_fid=1,
        creator_username="alice",
        participants=[
            ParticipantShare(fid=1, username="alice"),
            ParticipantShare(fid=2, username="bob", display_name="Bob"),
            ParticipantShare(fid=3, username="carol"),
        ],
    )
    defaults.update(overrides)
    return BillCreate(**defaults)


@pytest.fixture()
def sample_bill():
    return _sample_bill


@pytest.fixture()
def sample_request():
    return _sample_request


def paid(participant: Participant) -> Participant:
    participant.status = ParticipantStatus.PAID
    participant.payment_hash = "0xfeed"
    return participant
