import logging
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.database import get_session
from app.models.user import User

settings = get_settings()
logger = logging.getLogger(__name__)

# auto_error=False: a missing Authorization header yields None so the
# dependency chain can answer 401 itself instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Signature and `exp` are checked against SUPABASE_JWT_SECRET /
    SUPABASE_JWT_ALG. `aud` is not checked (Supabase sets it per project).

    Raises:
        HTTPException(401): bad signature, expired or malformed token.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def _identity(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    sub, email = claims.get("sub"), claims.get("email")
    if not sub or not email:
        raise _unauthorized("Token missing sub/email")
    try:
        return uuid.UUID(str(sub)), email
    except ValueError:
        raise _unauthorized("Invalid sub in token")


def _provision(session: Session, user_id: uuid.UUID, email: str) -> User:
    """First sighting of an identity: store it with the non-admin role."""
    user = User(
        id=user_id,
        email=email,
        name=email.partition("@")[0] or email,
        role=DEFAULT_ROLE,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Provisioned profile for %s", email)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Operator behind the bearer token, or None for anonymous requests.

    Unknown identities are provisioned on the fly; an admin promotes them
    by editing `users.role`.
    """
    if credentials is None:
        return None

    user_id, email = _identity(decode_access_token(credentials.credentials))
    return session.get(User, user_id) or _provision(session, user_id, email)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise _unauthorized("Authentication required")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Gate for every console endpoint: role must be "admin" (403 otherwise).
    """
    if user.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
