"""Shared FastAPI dependencies."""

from __future__ import annotations

import os
from datetime import date

from fastapi import HTTPException

from hostal.domain.dates import parse_date
from hostal.domain.store import StoreScope
from hostal.infra.store import pg_store_scope

DEFAULT_CURRENCY = "CLP"


def get_store_scope() -> StoreScope:
    """Factory for a transaction-bound record store (overridden in tests)."""
    return pg_store_scope


def query_date(value: str | None, name: str, default: date | None = None) -> date:
    """Parse a YYYY-MM-DD query parameter.

    Raises:
        HTTPException: 422 if the parameter is missing and has no default.
        InvalidDateError: If the value is not a calendar date (mapped to 422).
    """
    if value is None or value == "":
        if default is None:
            raise HTTPException(status_code=422, detail=f"{name} is required (YYYY-MM-DD)")
        return default
    return parse_date(value)


def default_currency() -> str:
    """Currency assumed when a room or payment does not state one (HOSTAL_CURRENCY)."""
    return os.environ.get("HOSTAL_CURRENCY", DEFAULT_CURRENCY)
