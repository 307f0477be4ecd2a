"""
Password hashing and bearer tokens.

Access tokens are HS256 JWTs whose ``sub`` is the profile id. Nothing else
about the caller is trusted from the token: roles and the active flag are
read from the profile row on every request.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .core.config import settings

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "sideout-api"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt hash of a throwaway password; verified against when the email is
# unknown so failed logins take the same time either way
DUMMY_HASH_FOR_TIMING_ATTACK = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.V4ferVKnNaOuJi"

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password and for a malformed stored hash."""
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Unverifiable password hash: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def create_access_token(profile_id: str, expires_delta: Optional[timedelta] = None) -> str:
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": profile_id,
        "iss": TOKEN_ISSUER,
        "iat": issued_at,
        "exp": issued_at
        + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes)),
    }
    return jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature, expiry and issuer; raises PyJWTError on any failure."""
    return jwt.decode(
        token,
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
        issuer=TOKEN_ISSUER,
        options={"require": ["sub", "exp"]},
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_profile_id(token: Optional[str] = Depends(oauth2_scheme_optional)) -> str:
    """Profile id from the bearer token, or 401."""
    if not token:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.warning(f"Rejected access token: {str(e)}")
        raise _unauthorized("Could not validate credentials")

    profile_id = payload.get("sub")
    if not isinstance(profile_id, str) or not profile_id:
        raise _unauthorized("Could not validate credentials")
    return profile_id
