import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kotha.models.user import User
from kotha.core.security import get_password_hash, verify_password
from kotha.schemas.user import UserCreate

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        user = await self.get_user_by_email(email)

        if not user or not user.is_active:
            logger.info("Login rejected for %s", email)
            return None
        if not verify_password(password, user.hashed_password):
            logger.info("Login rejected for %s", email)
            return None

        user.last_login = datetime.now(timezone.utc)
        await self.db.commit()
        return user

    async def register_user(self, user_in: UserCreate, role: str = "user") -> Optional[User]:
        """Returns None when the email is already registered."""
        if await self.get_user_by_email(user_in.email):
            return None

        user = User(
            name=user_in.name,
            email=user_in.email.lower(),
            hashed_password=get_password_hash(user_in.password),
            role=role,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user
