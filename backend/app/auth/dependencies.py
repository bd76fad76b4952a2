"""Authentication dependencies for FastAPI."""

import logging
from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config import get_settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"

# Cookie auth is accepted as well, so a missing header is not an error here
security = HTTPBearer(auto_error=False)

# Cache for JWKS to avoid fetching on every request
_jwks_cache: dict | None = None


async def _fetch_jwks(supabase_url: str) -> dict:
    """Fetch JWKS from Supabase."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = f"{supabase_url}/auth/v1/.well-known/jwks.json"
    async with httpx.AsyncClient() as client:
        response = await client.get(jwks_url)
        response.raise_for_status()
        _jwks_cache = response.json()
        return _jwks_cache


def _get_signing_key(token: str, jwks: dict) -> dict:
    """Get the signing key from JWKS that matches the token's kid."""
    kid = jwt.get_unverified_header(token).get("kid")

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key

    raise JWTError("Unable to find matching key in JWKS")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Resolve the caller's identity from a Supabase JWT.

    The token comes from the ``Authorization: Bearer`` header, or from the
    ``access_token`` cookie set by the web client. ES256 tokens are verified
    against the Supabase JWKS; HS256 tokens against the configured secret.

    Returns:
        Dict with user_id, email, and role from token

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired;
            503 if the JWKS cannot be fetched
    """
    settings = get_settings()
    token = _extract_token(request, credentials)
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        alg = jwt.get_unverified_header(token).get("alg", "HS256")

        if alg == "ES256":
            if not settings.supabase_url:
                raise JWTError("SUPABASE_URL is not configured")
            jwks = await _fetch_jwks(settings.supabase_url)
            payload = jwt.decode(
                token,
                _get_signing_key(token, jwks),
                algorithms=["ES256"],
                audience="authenticated",
            )
        else:
            secret = settings.supabase_jwt_secret or settings.supabase_key
            if not secret:
                raise JWTError("No JWT secret configured")
            payload = jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized("Invalid authentication token")
    except httpx.HTTPError as e:
        logger.error(f"JWKS fetch failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token has no subject")

    return {
        "user_id": user_id,
        "email": payload.get("email"),
        "role": payload.get("role"),
    }


def reset_jwks_cache() -> None:
    """Reset JWKS cache for testing."""
    global _jwks_cache
    _jwks_cache = None
