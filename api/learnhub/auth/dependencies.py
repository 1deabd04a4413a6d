"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Bearer token extraction
- The verified caller identity (401 when absent or invalid)
- Self-only access checks on user-scoped routes
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import BaseModel

from learnhub.auth.security import decode_session_token
from learnhub.core.context import set_user_id
from learnhub.core.errors import ForbiddenError


class SessionUser(BaseModel):
    """Caller identity taken from a verified session token."""

    user_id: str
    session_id: str | None = None


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> SessionUser:
    """Verify the session token and return the caller.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_session_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user_id = str(payload["sub"])
    set_user_id(user_id)

    return SessionUser(user_id=user_id, session_id=payload.get("sid"))


CurrentUser = Annotated[SessionUser, Depends(get_current_user)]


def ensure_self(user: SessionUser, user_id: str) -> None:
    """Reject access to another user's resources.

    Raises:
        ForbiddenError: If the caller is not `user_id`
    """
    if user.user_id != user_id:
        raise ForbiddenError("Not authorized to access this user's data")
