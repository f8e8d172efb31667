"""
אימות משתמשים - סיסמאות וטוקני גישה

סיסמאות נשמרות כ-hash של argon2id (salt אקראי לכל hash).
טוקן הגישה הוא JWT ב-HS256 שנושא את מזהה המשתמש (``sub``), את התפקיד
ותפוגה של ``settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS`` ימים מרגע ההנפקה.
"""
import uuid
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_password_hasher = PasswordHasher()


class TokenError(Exception):
    """Base class for access token failures"""


class TokenExpiredError(TokenError):
    """The token's exp claim is in the past"""


class TokenInvalidError(TokenError):
    """Bad signature, malformed token or unexpected payload"""


class TokenPayload(BaseModel):
    """Claims carried by an access token"""
    sub: uuid.UUID
    role: str
    exp: int  # Unix timestamp


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt"""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Never raises on mismatch."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(user_id: uuid.UUID, role: str) -> str:
    """Issue a signed access token for a user"""
    if not settings.JWT_SECRET_KEY:
        raise ValueError("JWT_SECRET_KEY is not set; cannot issue tokens")
    expire = datetime.now(timezone.utc) + timedelta(days=settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": int(expire.timestamp()),
    }
    encoded = pyjwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    logger.info("JWT token created", extra_data={"user_id": str(user_id), "role": role})
    return encoded


def decode_access_token(token: str) -> TokenPayload:
    """Verify signature and expiry and return the claims.

    Raises:
        TokenExpiredError: the token is past its expiry
        TokenInvalidError: anything else wrong with the token
    """
    if not settings.JWT_SECRET_KEY:
        logger.error("JWT_SECRET_KEY is empty; tokens cannot be verified")
        raise TokenInvalidError("Token verification is not configured")
    try:
        payload = pyjwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError as e:
        logger.info("JWT token expired")
        raise TokenExpiredError("Token has expired") from e
    except pyjwt.InvalidTokenError as e:
        logger.warning("JWT token invalid", extra_data={"error": str(e)})
        raise TokenInvalidError("Invalid token") from e

    try:
        return TokenPayload(**payload)
    except ValidationError as e:
        logger.warning("JWT payload malformed", extra_data={"error": str(e)})
        raise TokenInvalidError("Malformed token payload") from e
