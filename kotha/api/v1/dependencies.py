from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.core.security import decode_access_token
from kotha.database import get_db
from kotha.models.post import Post
from kotha.schemas.user import AuthSession
from kotha.services.auth import AuthService
from kotha.services.search import status_filter

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _session_from_token(token: str, db: AsyncSession) -> AuthSession:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id = UUID(payload.get("sub") or "")
    except (JWTError, ValueError):
        raise credentials_exception

    # The token may outlive the account or its role; trust the database.
    user = await AuthService(db).get_user(user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return AuthSession(user_id=user.id, email=user.email, name=user.name, role=user.role)


async def get_current_session(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> AuthSession:
    return await _session_from_token(token, db)


async def get_optional_session(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[AuthSession]:
    if not token:
        return None
    return await _session_from_token(token, db)


def require_roles(*roles: str) -> Callable:
    async def checker(session: AuthSession = Depends(get_current_session)) -> AuthSession:
        if session.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The user doesn't have enough privileges"
            )
        return session
    return checker


require_author = require_roles("admin", "editor")
require_admin = require_roles("admin")


def ensure_can_modify(post: Post, session: AuthSession) -> None:
    """Only the post's author or an admin may change it."""
    if post.author_id != session.user_id and not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")


def ensure_can_view_status(post_status: Optional[str], session: Optional[AuthSession]) -> None:
    """Anything but published posts is visible to editors and admins only."""
    # Unknown statuses are a 400 for everyone
    status_filter(post_status)
    if post_status == "published":
        return
    if session is None or not session.can_author:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only editors can browse unpublished posts"
        )
