# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Two kinds of caller reach this API:
#
# - Project owners on the management routes, authenticated with their
#   Supabase session JWT. Verified here with python-jose:
#     ES256 (current Supabase signing keys) via the project's JWKS
#     HS256 (legacy Supabase JWT secret) as fallback
#
# - Clients of a deployed endpoint, authenticated with the deployment's
#   opaque API key. Only extracted here; DeploymentEngine validates it.
#
# Usage:
#   @router.get("/projects")
#   async def list_projects(user: AuthUser = Depends(get_current_user)): ...
#
#   @router.post("/deployed/{deployment_id}")
#   async def call(deployment_id: str, api_key: str = Depends(get_api_key)): ...
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# Session JWT extractor (401 when missing)
security = HTTPBearer(auto_error=False)

# JWKS cache
_jwks_cache: dict[str, Any] = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _fetch_jwks() -> dict[str, Any]:
    """Fetch the Supabase JWKS, cached for an hour; stale cache beats nothing."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = now
        logger.debug(f"Fetched JWKS from {jwks_url}")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache or {"keys": []}


def _signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the verification key for a session token.

    Returns:
        (key, algorithm) for jwt.decode
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg != "HS256" and kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg
        logger.warning(f"No JWKS key for alg={alg}, kid={kid}, falling back to HS256")

    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_session_token(token: str) -> AuthUser:
    """
    Verify a Supabase session JWT and return its user.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no usable sub
    """
    key, algorithm = _signing_key(token)
    if algorithm == "HS256" and not key:
        logger.warning("HS256 session token rejected: SUPABASE_JWT_SECRET is not set")
        raise _unauthorized("Invalid token: no verification key configured")

    try:
        payload = jwt.decode(token, key, algorithms=[algorithm], audience="authenticated")
    except ExpiredSignatureError:
        logger.warning("Session token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"Session token validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(
        id=user_uuid,
        email=payload.get("email"),
        role=payload.get("role") or "authenticated",
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> AuthUser:
    """
    Authenticate a project owner from their session JWT.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized")

    user = decode_session_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> str:
    """
    Extract a deployment API key from 'Authorization: Bearer <key>'.

    Raises:
        HTTPException: 401 when no bearer key was sent
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("API key required")
    return credentials.credentials
