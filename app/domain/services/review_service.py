"""
Review Service - ביקורות על תחנות וסיכומי דירוג

משתמש כותב ביקורת אחת לכל היותר לכל תחנה; רק הכותב רשאי לערוך או למחוק.
"""
import math
import uuid
from collections import Counter
from typing import Any, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.core.logging import get_logger
from app.db.compat import classify_integrity_error
from app.db.models.review import Review
from app.db.models.station import Station

logger = get_logger(__name__)

MIN_RATING = 1.0
MAX_RATING = 5.0


def validate_rating(rating: float) -> float:
    """Ratings are finite numbers in [1, 5] inclusive"""
    if rating is None or not math.isfinite(rating) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationException("Rating must be between 1 and 5", field="rating")
    return rating


class ReviewService:
    """Service for station reviews"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_details(self):
        return select(Review).options(
            selectinload(Review.user), selectinload(Review.station)
        ).execution_options(populate_existing=True)

    async def get_review(self, review_id: uuid.UUID) -> Review:
        result = await self.db.execute(self._with_details().where(Review.id == review_id))
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundException("Review", review_id)
        return review

    async def create_review(
        self,
        user_id: uuid.UUID,
        spbu_id: uuid.UUID,
        rating: float,
        comment: Optional[str] = None,
    ) -> Review:
        validate_rating(rating)
        if await self.db.get(Station, spbu_id) is None:
            raise NotFoundException("SPBU", spbu_id)

        existing = await self.db.execute(
            select(Review.id).where(Review.user_id == user_id, Review.spbu_id == spbu_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictException("You have already reviewed this SPBU")

        review = Review(user_id=user_id, spbu_id=spbu_id, rating=rating, comment=comment)
        self.db.add(review)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise classify_integrity_error(
                e, conflict_message="You have already reviewed this SPBU",
                missing_resource="SPBU", missing_identifier=spbu_id,
            ) from e

        logger.info(
            "Review created",
            extra_data={"review_id": str(review.id), "spbu_id": str(spbu_id), "rating": rating},
        )
        return await self.get_review(review.id)

    async def _get_owned(self, user_id: uuid.UUID, review_id: uuid.UUID) -> Review:
        result = await self.db.execute(
            select(Review).where(Review.id == review_id, Review.user_id == user_id)
        )
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundException("Review", review_id)
        return review

    async def update_review(self, user_id: uuid.UUID, review_id: uuid.UUID, changes: dict[str, Any]) -> Review:
        """Partial update: only the fields present in ``changes`` are replaced"""
        review = await self._get_owned(user_id, review_id)
        if changes.get("rating") is not None:
            review.rating = validate_rating(changes["rating"])
        if "comment" in changes and changes["comment"] is not None:
            review.comment = changes["comment"]
        await self.db.commit()
        logger.info("Review updated", extra_data={"review_id": str(review_id)})
        return await self.get_review(review_id)

    async def delete_review(self, user_id: uuid.UUID, review_id: uuid.UUID) -> None:
        review = await self._get_owned(user_id, review_id)
        await self.db.delete(review)
        await self.db.commit()
        logger.info("Review deleted", extra_data={"review_id": str(review_id)})

    async def list_station_reviews(self, spbu_id: uuid.UUID) -> List[Review]:
        """Reviews of a station, newest first"""
        if await self.db.get(Station, spbu_id) is None:
            raise NotFoundException("SPBU", spbu_id)
        result = await self.db.execute(
            self._with_details()
            .where(Review.spbu_id == spbu_id)
            .order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def rating_summary(self, spbu_id: uuid.UUID) -> dict[str, Any]:
        """Average, count and per-star distribution (stars are whole ratings, rounded down)"""
        if await self.db.get(Station, spbu_id) is None:
            raise NotFoundException("SPBU", spbu_id)

        stats = await self.db.execute(
            select(func.count(Review.id), func.avg(Review.rating)).where(Review.spbu_id == spbu_id)
        )
        total_reviews, average = stats.one()

        ratings = await self.db.execute(select(Review.rating).where(Review.spbu_id == spbu_id))
        distribution = Counter(int(math.floor(r)) for r in ratings.scalars().all())

        return {
            "average_rating": round(float(average), 2) if average is not None else 0.0,
            "total_reviews": total_reviews,
            "rating_distribution": [
                {"rating": star, "count": distribution[star]}
                for star in sorted(distribution)
            ],
        }
