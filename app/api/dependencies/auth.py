"""
FastAPI dependencies for bearer-token authentication and role checks

Usage:
    @router.post("/transactions")
    async def create_transaction(
        current_user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        user_id = current_user.user_id

    @router.post("/brands", dependencies=[Depends(require_role("admin"))])
    async def create_brand(...): ...
"""
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.auth import TokenExpiredError, TokenError, decode_access_token
from app.core.exceptions import ErrorCode, ForbiddenException, UnauthorizedException
from app.core.logging import get_logger
from app.db.models.user import UserRole

logger = get_logger(__name__)

# auto_error=False: header חסר או פגום מוחזר דרך מעטפת ה-401 שלנו
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity extracted from a verified access token"""
    user_id: uuid.UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """
    Verify the ``Authorization: Bearer <token>`` header.

    Raises 401 when the header is missing or malformed, or the token is
    expired or invalid. The identity is also stored on ``request.state.user``.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Missing or malformed Authorization header")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenExpiredError:
        raise UnauthorizedException("Token has expired", error_code=ErrorCode.TOKEN_EXPIRED)
    except TokenError:
        raise UnauthorizedException("Invalid token", error_code=ErrorCode.TOKEN_INVALID)

    current_user = CurrentUser(user_id=payload.sub, role=payload.role)
    request.state.user = current_user
    return current_user


def require_role(role: str) -> Callable:
    """Dependency factory: passes when the caller has ``role`` or is an admin, else 403"""

    async def _require_role(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != role and not current_user.is_admin:
            logger.warning(
                "Access denied: role mismatch",
                extra_data={
                    "user_id": str(current_user.user_id),
                    "role": current_user.role,
                    "required_role": role,
                },
            )
            raise ForbiddenException(required_role=role)
        return current_user

    return _require_role


require_admin = require_role(UserRole.ADMIN.value)
