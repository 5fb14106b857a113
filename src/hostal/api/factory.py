"""FastAPI application factory."""

from __future__ import annotations

import psycopg2
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from hostal.domain.dates import ValidationError
from hostal.domain.reservations import ReservationNotFoundError, RoomNotFoundError
from hostal.domain.room_conflict import RoomConflictError
from hostal.domain.store import StoreError
from hostal.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from hostal.observability.logging import get_logger

from .routes import (
    calendar,
    companies,
    daybook,
    guests,
    health,
    housekeeping,
    payments,
    reports,
    reservations,
    rooms,
    users,
)

logger = get_logger(__name__)

RETRY_MESSAGE = "The datastore is temporarily unavailable, please retry"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(RoomConflictError)
    async def room_conflict_handler(request: Request, exc: RoomConflictError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "detail": str(exc),
                "room_id": exc.room_id,
                "conflicting_reservation_id": exc.conflicting_reservation_id,
                "conflicting_code": exc.conflicting_code,
            },
        )

    @app.exception_handler(ReservationNotFoundError)
    @app.exception_handler(RoomNotFoundError)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    @app.exception_handler(psycopg2.OperationalError)
    @app.exception_handler(psycopg2.InterfaceError)
    async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "request failed on datastore",
            extra={
                "extra_fields": {
                    "correlationId": get_correlation_id(),
                    "path": request.url.path,
                    "error_type": type(exc).__name__,
                }
            },
        )
        return JSONResponse(status_code=503, content={"detail": RETRY_MESSAGE})


def create_app() -> FastAPI:
    """Create the FastAPI app with middleware, error mapping and all routers."""
    app = FastAPI(
        title="Hostal Panel",
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(rooms.router)
    app.include_router(guests.router)
    app.include_router(companies.router)
    app.include_router(reservations.router)
    app.include_router(payments.router)
    app.include_router(housekeeping.router)
    app.include_router(calendar.router)
    app.include_router(daybook.router)
    app.include_router(reports.router)
    app.include_router(users.router)

    return app
