# backend/tuitiontime/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Access tokens arrive as ``Authorization: Bearer <jwt>``. The token's
``sub`` is resolved to a user on every request so suspensions take
effect immediately.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

from ...auth import decode_token
from ...core.enums import UserRole
from ...database import get_db
from ...models.user import User
from ...repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to a user.

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_error("Not authenticated")
    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.info(f"JWT validation error: {str(e)}")
        raise _credentials_error()

    user = RepositoryFactory.create_user_repository(db).get_with_profiles(payload["sub"])
    if user is None:
        raise _credentials_error()
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is suspended")
    return current_user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous callers get None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        return None
    user = RepositoryFactory.create_user_repository(db).get_with_profiles(payload["sub"])
    if user is None or not user.is_active:
        return None
    return user


def require_role(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory restricting a route to the given roles."""
    allowed = {role.value for role in roles}

    def dependency(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(sorted(allowed))}",
            )
        return current_user

    return dependency


require_student = require_role(UserRole.STUDENT)
require_tutor = require_role(UserRole.TUTOR)
require_admin = require_role(UserRole.ADMIN)
