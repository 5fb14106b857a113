"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without alembic.context.
DATABASE_URL may be a URL or a libpq key=value DSN; DB_PASSWORD is injected
when the DSN itself carries no password.
"""

from __future__ import annotations

import os

from psycopg2.extensions import parse_dsn
from sqlalchemy.engine import URL, make_url

DRIVER = "postgresql+psycopg2"


def _from_url(raw: str, password: str | None) -> URL:
    if raw.startswith("postgres://"):
        raw = "postgresql://" + raw[len("postgres://"):]
    url = make_url(raw).set(drivername=DRIVER)
    if password and not url.password:
        url = url.set(password=password)
    return url


def _from_libpq_dsn(raw: str, password: str | None) -> URL:
    params = parse_dsn(raw)
    host = params.pop("host", None)
    port = params.pop("port", None)
    query = {}
    # Unix-socket hosts go in the query string, not the netloc
    if host and host.startswith("/"):
        query["host"] = host
        host = None
    return URL.create(
        DRIVER,
        username=params.pop("user", None),
        password=params.pop("password", None) or password or None,
        host=host,
        port=int(port) if port else None,
        database=params.pop("dbname", None),
        query=query,
    )


def get_database_url() -> URL:
    """Build the SQLAlchemy URL Alembic connects with.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    raw = os.environ.get("DATABASE_URL")
    if not raw:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    password = os.environ.get("DB_PASSWORD")
    if "://" in raw:
        return _from_url(raw, password)
    return _from_libpq_dsn(raw, password)
