from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.api.v1 import dependencies
from kotha.core import security
from kotha.database import get_db
from kotha.schemas.user import AuthSession, Token, User, UserCreate
from kotha.services.auth import AuthService

router = APIRouter()

@router.post("/login", response_model=Token)
async def login_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    OAuth2 compatible token login; the username field carries the email.
    """
    auth_service = AuthService(db)
    user = await auth_service.authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=400, detail="Incorrect email or password")

    access_token = security.create_access_token(
        subject=user.id, claims={"role": user.role}
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
    }

@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Register a local reader account.
    """
    user = await AuthService(db).register_user(user_in)
    if not user:
        raise HTTPException(status_code=409, detail="Email already registered")
    return user

@router.get("/me", response_model=AuthSession)
async def read_session(
    session: AuthSession = Depends(dependencies.get_current_session)
) -> Any:
    """
    The session carried by the current access token.
    """
    return session
