"""
Wishlist API Routes - the caller's saved stations
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import CurrentUser, get_current_user
from app.db.database import get_db
from app.db.models.wishlist import Wishlist
from app.domain.services.wishlist_service import WishlistService

router = APIRouter()


class WishlistCreate(BaseModel):
    spbu_id: uuid.UUID


class WishlistResponse(BaseModel):
    id: uuid.UUID
    spbu_id: uuid.UUID
    spbu_name: str
    spbu_address: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_entry(cls, entry: Wishlist) -> "WishlistResponse":
        return cls(
            id=entry.id,
            spbu_id=entry.spbu_id,
            spbu_name=entry.station.name,
            spbu_address=entry.station.address,
            created_at=entry.created_at,
        )


@router.post(
    "",
    response_model=WishlistResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a station to your wishlist",
    responses={404: {"description": "SPBU not found"}, 409: {"description": "SPBU already in wishlist"}},
)
async def add_to_wishlist(
    payload: WishlistCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    entry = await WishlistService(db).add(current_user.user_id, payload.spbu_id)
    return WishlistResponse.from_entry(entry)


@router.get("", response_model=List[WishlistResponse], summary="List your wishlist")
async def list_wishlist(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    entries = await WishlistService(db).list_for_user(current_user.user_id)
    return [WishlistResponse.from_entry(e) for e in entries]


@router.delete(
    "/{spbu_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a station from your wishlist",
    responses={404: {"description": "SPBU not in your wishlist"}},
)
async def remove_from_wishlist(
    spbu_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await WishlistService(db).remove(current_user.user_id, spbu_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
