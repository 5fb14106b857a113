"""OIDC bearer-token authentication.

Provides:
- verify_token(): Validates an RS256 JWT against the provider's JWKS and
  returns the subject claim
- get_current_user(): FastAPI dependency resolving the staff member and
  their role from hostal_users
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from typing import Any

import jwt
import requests
from fastapi import HTTPException, Request

# JWKS cache with TTL; the only process-wide cache in the service
_jwks_cache: dict[str, Any] | None = None
_jwks_cache_time: float = 0
_jwks_cache_lock = threading.Lock()
_JWKS_CACHE_TTL = 600  # 10 minutes


@dataclass
class CurrentUser:
    """Authenticated staff member."""

    id: int
    external_subject: str
    email: str | None
    name: str | None
    role: str


def _get_settings() -> dict[str, str | list[str] | None]:
    """Load OIDC settings from environment."""
    authorized_parties_raw = os.environ.get("OIDC_AUTHORIZED_PARTIES", "")
    authorized_parties: list[str] | None = None
    if authorized_parties_raw:
        authorized_parties = [p.strip() for p in authorized_parties_raw.split(",") if p.strip()]

    return {
        "issuer": os.environ.get("OIDC_ISSUER"),
        "audience": os.environ.get("OIDC_AUDIENCE"),
        "jwks_url": os.environ.get("OIDC_JWKS_URL"),
        "authorized_parties": authorized_parties,
    }


def _fetch_jwks(jwks_url: str) -> dict[str, Any]:
    resp = requests.get(jwks_url, timeout=10)
    resp.raise_for_status()
    return resp.json()


def _get_jwks(jwks_url: str, force_refresh: bool = False) -> dict[str, Any]:
    """Get JWKS, refetching after the TTL or on demand."""
    global _jwks_cache, _jwks_cache_time

    with _jwks_cache_lock:
        now = time.time()
        if not force_refresh and _jwks_cache is not None and (now - _jwks_cache_time) < _JWKS_CACHE_TTL:
            return _jwks_cache

        try:
            _jwks_cache = _fetch_jwks(jwks_url)
        except requests.RequestException:
            raise HTTPException(status_code=503, detail="Auth temporarily unavailable")
        _jwks_cache_time = now
        return _jwks_cache


def _find_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    return next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)


def _decode(token: str, jwk_data: dict[str, Any], issuer: str, audience: str) -> dict[str, Any]:
    try:
        public_key = jwt.algorithms.RSAAlgorithm.from_jwk(jwk_data)
    except (ValueError, TypeError, KeyError, jwt.InvalidKeyError):
        raise HTTPException(status_code=401, detail="Invalid token")

    return jwt.decode(
        token,
        public_key,
        algorithms=["RS256"],
        issuer=issuer,
        audience=audience,
        options={"require": ["exp", "iss", "aud", "sub"]},
    )


def verify_token(token: str) -> str:
    """Verify a bearer JWT and return its subject.

    A kid missing from the cached JWKS, or a signature that fails against
    the cached key, triggers one JWKS refetch (the provider may have rotated
    keys).

    Raises:
        HTTPException: 401 if the token is invalid or OIDC is not configured,
            503 if the JWKS cannot be fetched.
    """
    settings = _get_settings()
    issuer = settings.get("issuer")
    audience = settings.get("audience")
    jwks_url = settings.get("jwks_url")

    if not issuer or not audience or not jwks_url:
        raise HTTPException(status_code=401, detail="OIDC not configured")

    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except jwt.exceptions.DecodeError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not kid:
        raise HTTPException(status_code=401, detail="Invalid token")

    key_data = _find_key(_get_jwks(jwks_url), kid)
    if key_data is None:
        key_data = _find_key(_get_jwks(jwks_url, force_refresh=True), kid)
    if key_data is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        payload = _decode(token, key_data, issuer, audience)
    except jwt.InvalidSignatureError:
        key_data = _find_key(_get_jwks(jwks_url, force_refresh=True), kid)
        if key_data is None:
            raise HTTPException(status_code=401, detail="Invalid token")
        try:
            payload = _decode(token, key_data, issuer, audience)
        except jwt.InvalidTokenError:
            raise HTTPException(status_code=401, detail="Invalid token")
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    authorized_parties = settings.get("authorized_parties")
    if authorized_parties and "azp" in payload and payload["azp"] not in authorized_parties:
        raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")
    return sub


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    return parts[1]


def _get_user_from_db(external_subject: str) -> CurrentUser | None:
    """Look up an active staff member by OIDC subject."""
    from hostal.infra.db import txn

    with txn() as cur:
        cur.execute(
            """
            SELECT id, external_subject, email, name, role
            FROM hostal_users
            WHERE external_subject = %s AND is_active
            """,
            (external_subject,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        return CurrentUser(
            id=row[0],
            external_subject=row[1],
            email=row[2],
            name=row[3],
            role=row[4],
        )


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: the authenticated staff member.

    Raises:
        HTTPException: 401 if the token is missing or invalid, 403 if no
            active user matches the subject.
    """
    sub = verify_token(_extract_bearer_token(request))

    user = _get_user_from_db(sub)
    if user is None:
        raise HTTPException(status_code=403, detail="User not found")

    return user
