from datetime import datetime, timedelta, timezone
import hashlib
import logging
from typing import Any, Dict, Optional, cast
from uuid import uuid4

import jwt
from passlib.context import CryptContext

from .core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    if not hashed_password:
        return False
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except Exception as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    hashed = pwd_context.hash(password)
    return str(hashed)


def hash_secret(value: str) -> str:
    """Keyed SHA-256 digest used for OTP codes and stored refresh tokens."""
    salted = f"{_secret_value(settings.secret_key)}:{value}"
    return hashlib.sha256(salted.encode("utf-8")).hexdigest()


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm),
    )


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: Subject of the token
        role: Role copied into the ``role`` claim
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    token = _encode(
        {"sub": user_id, "role": role, "type": ACCESS_TOKEN_TYPE},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )
    logger.info(f"Created access token for user: {user_id}")
    return token


def create_refresh_token(user_id: str) -> str:
    """Long-lived refresh token; the ``jti`` makes every issued token unique."""
    return _encode(
        {"sub": user_id, "type": REFRESH_TOKEN_TYPE, "jti": uuid4().hex},
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Decode and validate a token of the given type.

    Raises:
        jwt.PyJWTError: invalid signature, expired, or wrong token type
    """
    payload = cast(
        Dict[str, Any],
        jwt.decode(token, _secret_value(settings.secret_key), algorithms=[settings.algorithm]),
    )
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
    if not isinstance(payload.get("sub"), str):
        raise jwt.InvalidTokenError("Token payload missing 'sub' field")
    return payload
