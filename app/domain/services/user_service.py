"""
User Service - registration, login, password reset and profile management
"""
import uuid
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import create_access_token, hash_password, verify_password
from app.core.exceptions import (
    ConflictException,
    ErrorCode,
    UnauthorizedException,
    UserNotFoundError,
)
from app.core.logging import get_logger
from app.db.compat import classify_integrity_error
from app.db.models.user import User, UserRole

logger = get_logger(__name__)


def _mask_email(email: str) -> str:
    """a***@example.com"""
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}" if domain else "***"


class UserService:
    """Service for user accounts"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create an account. Duplicate e-mail -> 409."""
        email = email.strip().lower()
        if await self.get_by_email(email) is not None:
            raise ConflictException(
                "Email already registered", error_code=ErrorCode.EMAIL_ALREADY_REGISTERED
            )

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            phone_number=phone_number,
            role=role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # race condition - משתמש נרשם במקביל עם אותו אימייל
            await self.db.rollback()
            raise classify_integrity_error(e, conflict_message="Email already registered") from e
        await self.db.refresh(user)

        logger.info(
            "User registered",
            extra_data={"user_id": str(user.id), "email": _mask_email(email)},
        )
        return user

    async def authenticate(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue an access token.

        Unknown e-mail and wrong password fail the same way.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed", extra_data={"email": _mask_email(email.strip().lower())})
            raise UnauthorizedException(
                "Invalid email or password", error_code=ErrorCode.INVALID_CREDENTIALS
            )

        token = create_access_token(user.id, user.role.value)
        logger.info("User logged in", extra_data={"user_id": str(user.id)})
        return user, token

    async def reset_password(self, email: str, new_password: str) -> None:
        user = await self.get_by_email(email)
        if user is None:
            raise UserNotFoundError(_mask_email(email.strip().lower()))

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("Password reset", extra_data={"user_id": str(user.id)})

    async def update_user(self, user_id: uuid.UUID, changes: dict[str, Any]) -> User:
        """Apply profile changes; ``password`` is re-hashed, ``email`` must stay unique"""
        user = await self.get_user(user_id)

        if "email" in changes and changes["email"] is not None:
            new_email = changes.pop("email").strip().lower()
            if new_email != user.email:
                if await self.get_by_email(new_email) is not None:
                    raise ConflictException(
                        "Email already registered", error_code=ErrorCode.EMAIL_ALREADY_REGISTERED
                    )
                user.email = new_email
        if changes.get("password"):
            user.password_hash = hash_password(changes.pop("password"))
        changes.pop("password", None)
        if changes.get("role") is None:
            changes.pop("role", None)

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise classify_integrity_error(e, conflict_message="Email already registered") from e
        await self.db.refresh(user)
        logger.info("User updated", extra_data={"user_id": str(user_id), "fields": sorted(changes)})
        return user

    async def delete_user(self, user_id: uuid.UUID) -> None:
        user = await self.get_user(user_id)
        await self.db.delete(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("User still has transactions") from e
        logger.info("User deleted", extra_data={"user_id": str(user_id)})
