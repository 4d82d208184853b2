# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies Supabase access tokens on every protected route.
#
# Supports both:
# - ES256 (Supabase JWT signing keys) via the project's JWKS
# - HS256 (legacy SUPABASE_JWT_SECRET)
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/profile")
#   def profile(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Any
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

JWT_AUDIENCE = "authenticated"

# Cache for JWKS keys
_jwks_cache: dict[str, Any] = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwks_url() -> str:
    """JWKS endpoint of the Supabase project."""
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict[str, Any]:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = _get_jwks_url()
    try:
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
    except httpx.HTTPError as e:
        # Stale keys are better than none while Supabase is unreachable
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache or {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the verification key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        JWTError: If no usable key exists for the token's header
    """
    header = jwt.get_unverified_header(token)
    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            raise JWTError("HS256 tokens require SUPABASE_JWT_SECRET")
        return settings.SUPABASE_JWT_SECRET, "HS256"

    for key in _fetch_jwks().get("keys", []):
        if kid and key.get("kid") == kid:
            return key, alg

    logger.warning(f"No signing key found for alg={alg}, kid={kid}")
    raise JWTError(f"Unknown signing key: {kid}")


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and extract the user.

    Raises:
        HTTPException: 401 if the token is invalid, expired or malformed
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from the Bearer token.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    return decode_access_token(credentials.credentials)

