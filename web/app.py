from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sharethebill.db import initialize_db
from sharethebill.errors import (
    ConflictError,
    LedgerError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from sharethebill.logging import configure_logging, reconfigure
from web.deps import DBConnectionMiddleware
from web.routes.bill import router as bill_router
from web.routes.profile import router as profile_router

configure_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    UnauthorizedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
}


def status_for(exc: LedgerError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Re-apply logging config, Alembic's fileConfig may have overridden it
    reconfigure()
    logger.info("Application started")
    yield


app = FastAPI(title="ShareTheBill", lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)

app.include_router(bill_router)
app.include_router(profile_router)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    status = status_for(exc)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.kind, "detail": exc.message}, status_code=status)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in errors)
    logger.info("validation_failed on %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(
        {"error": ValidationError.kind, "detail": detail, "errors": jsonable_encoder(errors)},
        status_code=422,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"error": "internal_error", "detail": "Internal Server Error"}, status_code=500)


@app.get("/health")
async def health():
    return {"status": "ok"}
