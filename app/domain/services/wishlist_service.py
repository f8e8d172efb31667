"""
Wishlist Service - תחנות ששמר המשתמש
"""
import uuid
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictException, NotFoundException
from app.core.logging import get_logger
from app.db.compat import classify_integrity_error
from app.db.models.station import Station
from app.db.models.wishlist import Wishlist

logger = get_logger(__name__)


class WishlistService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, user_id: uuid.UUID, spbu_id: uuid.UUID) -> Wishlist:
        if await self.db.get(Station, spbu_id) is None:
            raise NotFoundException("SPBU", spbu_id)

        existing = await self.db.execute(
            select(Wishlist.id).where(Wishlist.user_id == user_id, Wishlist.spbu_id == spbu_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictException("SPBU already in wishlist")

        entry = Wishlist(user_id=user_id, spbu_id=spbu_id)
        self.db.add(entry)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise classify_integrity_error(
                e, conflict_message="SPBU already in wishlist",
                missing_resource="SPBU", missing_identifier=spbu_id,
            ) from e

        logger.info("Wishlist entry added", extra_data={"user_id": str(user_id), "spbu_id": str(spbu_id)})
        result = await self.db.execute(
            select(Wishlist)
            .options(selectinload(Wishlist.station))
            .where(Wishlist.id == entry.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_for_user(self, user_id: uuid.UUID) -> List[Wishlist]:
        """The caller's saved stations with their name and address, newest first"""
        result = await self.db.execute(
            select(Wishlist)
            .options(selectinload(Wishlist.station))
            .where(Wishlist.user_id == user_id)
            .order_by(Wishlist.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def remove(self, user_id: uuid.UUID, spbu_id: uuid.UUID) -> None:
        result = await self.db.execute(
            delete(Wishlist).where(Wishlist.user_id == user_id, Wishlist.spbu_id == spbu_id)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundException("Wishlist entry", spbu_id)
        await self.db.commit()
        logger.info("Wishlist entry removed", extra_data={"user_id": str(user_id), "spbu_id": str(spbu_id)})
