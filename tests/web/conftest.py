"""Web test fixtures: TestClient over a shared in-memory SQLite engine."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from sharethebill.repositories.kv import KVProfileRepository
from sharethebill.services.profile_service import ProfileService
from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore
from tests.conftest import CREATOR_WALLET, apply_schema


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.connect() as conn:
        apply_schema(conn)
    return engine


def sync_wallet_in_db(engine, fid, wallet_address=CREATOR_WALLET):
    """Give a user a payment address. Shared helper for web route tests."""
    with engine.connect() as conn:
        service = ProfileService(KVProfileRepository(SQLAlchemyKeyValueStore(conn)))
        return service.sync_wallet(fid, wallet_address)


def bill_payload(**overrides) -> dict:
    payload = {
        "title": "Dinner at Luigi's",
        "total_amount": "100",
        "currency": "USDC",
        "split_type": "equal",
        "creator_fid": 1,
        "creator_username": "alice",
        "participants": [
            {"fid": 1, "username": "alice"},
            {"fid": 2, "username": "bob", "display_name": "Bob"},
            {"fid": 3, "username": "carol"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    """Expose the test engine for helpers that need direct DB access."""
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)


@pytest.fixture()
def created_bill(client, test_engine) -> dict:
    sync_wallet_in_db(test_engine, 1)
    response = client.post("/api/bills", json=bill_payload())
    assert response.status_code == 201
    return response.json()["bill"]
