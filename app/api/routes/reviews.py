"""
Review API Routes
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import CurrentUser, get_current_user
from app.db.database import get_db
from app.db.models.review import Review
from app.domain.services.review_service import MAX_RATING, MIN_RATING, ReviewService

router = APIRouter()


class ReviewCreate(BaseModel):
    spbu_id: uuid.UUID
    rating: float = Field(ge=MIN_RATING, le=MAX_RATING, allow_inf_nan=False)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[float] = Field(default=None, ge=MIN_RATING, le=MAX_RATING, allow_inf_nan=False)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_name: Optional[str]
    spbu_id: uuid.UUID
    spbu_name: str
    rating: float
    comment: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_review(cls, review: Review) -> "ReviewResponse":
        return cls(
            id=review.id,
            user_id=review.user_id,
            user_name=review.user.full_name if review.user else None,
            spbu_id=review.spbu_id,
            spbu_name=review.station.name if review.station else "",
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )


class RatingCount(BaseModel):
    rating: int
    count: int


class RatingSummaryResponse(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: List[RatingCount]


@router.post(
    "/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a station",
    responses={
        400: {"description": "Rating outside 1..5"},
        404: {"description": "SPBU not found"},
        409: {"description": "Already reviewed"},
    },
)
async def create_review(
    payload: ReviewCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await ReviewService(db).create_review(
        current_user.user_id, payload.spbu_id, payload.rating, payload.comment
    )
    return ReviewResponse.from_review(review)


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review",
    responses={404: {"description": "Review not found"}},
)
async def get_review(
    review_id: uuid.UUID,
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ReviewResponse.from_review(await ReviewService(db).get_review(review_id))


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Update your review",
    responses={404: {"description": "Review not found or not yours"}},
)
async def update_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await ReviewService(db).update_review(
        current_user.user_id, review_id, payload.model_dump(exclude_unset=True)
    )
    return ReviewResponse.from_review(review)


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete your review",
    responses={404: {"description": "Review not found or not yours"}},
)
async def delete_review(
    review_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ReviewService(db).delete_review(current_user.user_id, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/spbu/{spbu_id}/reviews",
    response_model=List[ReviewResponse],
    summary="List a station's reviews",
    responses={404: {"description": "SPBU not found"}},
)
async def list_station_reviews(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    reviews = await ReviewService(db).list_station_reviews(spbu_id)
    return [ReviewResponse.from_review(r) for r in reviews]


@router.get(
    "/spbu/{spbu_id}/rating",
    response_model=RatingSummaryResponse,
    summary="Rating summary of a station",
    responses={404: {"description": "SPBU not found"}},
)
async def get_station_rating(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).rating_summary(spbu_id)
