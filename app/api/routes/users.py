"""
User API Routes - registration, login, password reset and profiles
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import CurrentUser, get_current_user
from app.api.routes.schemas import MessageResponse
from app.core.exceptions import ForbiddenException
from app.db.database import get_db
from app.db.models.user import UserRole
from app.domain.services.user_service import UserService

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class UserCreate(BaseModel):
    """Registration payload"""
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=150)
    phone_number: Optional[str] = Field(default=None, max_length=30)

    @field_validator("full_name", "phone_number")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class UserUpdate(BaseModel):
    """Profile update; omitted fields are left unchanged"""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=150)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    profile_photo: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=1000)
    role: Optional[UserRole] = None

    @field_validator("full_name", "phone_number")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str]
    phone_number: Optional[str]
    profile_photo: Optional[str]
    bio: Optional[str]
    role: UserRole
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: Optional[str]
    role: UserRole
    token: str


def _ensure_self_or_admin(current_user: CurrentUser, user_id: uuid.UUID) -> None:
    if current_user.user_id != user_id and not current_user.is_admin:
        raise ForbiddenException("You can only modify your own account")


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User created"},
        400: {"description": "Invalid payload"},
        409: {"description": "Email already registered"},
    },
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create an account with role ``user``"""
    return await UserService(db).register(
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        phone_number=payload.phone_number,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in and receive an access token",
    responses={401: {"description": "Invalid email or password"}},
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    user, token = await UserService(db).authenticate(payload.email, payload.password)
    return LoginResponse(
        id=user.id,
        email=user.email,
        name=user.full_name,
        role=user.role,
        token=token,
    )


@router.post(
    "/forgot_password",
    response_model=MessageResponse,
    summary="Reset a password by email",
    responses={404: {"description": "Email not registered"}},
)
async def forgot_password(payload: ForgotPasswordRequest, db: AsyncSession = Depends(get_db)):
    await UserService(db).reset_password(payload.email, payload.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List users",
)
async def list_users(db: AsyncSession = Depends(get_db)):
    return await UserService(db).list_users()


@router.get(
    "/user/{user_id}",
    response_model=UserResponse,
    summary="Get a user by ID",
    responses={401: {"description": "Not authenticated"}, 404: {"description": "User not found"}},
)
async def get_user(
    user_id: uuid.UUID,
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).get_user(user_id)


@router.put(
    "/user/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Users may update their own account; admins may update any account and change roles.",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not the account owner"},
        404: {"description": "User not found"},
        409: {"description": "Email already registered"},
    },
)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _ensure_self_or_admin(current_user, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if "role" in changes and not current_user.is_admin:
        raise ForbiddenException("Only admins can change roles")
    return await UserService(db).update_user(user_id, changes)


@router.delete(
    "/user/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not the account owner"},
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _ensure_self_or_admin(current_user, user_id)
    await UserService(db).delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
