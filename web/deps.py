from __future__ import annotations

import logging

from fastapi import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from sharethebill.db import get_engine
from sharethebill.notify.factory import get_notification_sink
from sharethebill.repositories.kv import KVBillRepository, KVProfileRepository
from sharethebill.services.bill_service import BillService
from sharethebill.services.notification_service import NotificationService
from sharethebill.services.profile_service import ProfileService
from sharethebill.store.sqlalchemy import SQLAlchemyKeyValueStore

logger = logging.getLogger(__name__)


class DBConnectionMiddleware:
    """Pure ASGI middleware: creates a single DB connection per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use and closed by middleware."""
    if request.state.db_conn is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def _get_store(request: Request) -> SQLAlchemyKeyValueStore:
    return SQLAlchemyKeyValueStore(_get_conn(request))


def get_profile_service(request: Request) -> ProfileService:
    return ProfileService(KVProfileRepository(_get_store(request)))


def get_bill_service(request: Request) -> BillService:
    store = _get_store(request)
    return BillService(
        KVBillRepository(store),
        ProfileService(KVProfileRepository(store)),
        NotificationService(get_notification_sink()),
    )
