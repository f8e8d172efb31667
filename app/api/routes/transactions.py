"""
Transaction API Routes - fuel purchases of the authenticated user

Every route is scoped to the caller: another user's transaction is reported
as not found.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import CurrentUser, get_current_user
from app.core.decimals import AmountStr, DecimalStr
from app.db.database import get_db
from app.db.models.transaction import PaymentStatus, TransactionStatus
from app.domain.services.payment_gateway import PaymentGateway, get_payment_gateway
from app.domain.services.transaction_service import MAX_FUEL_TYPE_LENGTH, TransactionService

router = APIRouter()


class TransactionCreate(BaseModel):
    """total_price is never accepted; it is computed from the station's price"""
    spbu_id: uuid.UUID
    fuel_type: str = Field(min_length=1, max_length=MAX_FUEL_TYPE_LENGTH)
    quantity: AmountStr
    payment_method: str = Field(min_length=1, max_length=50)


class TransactionResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    spbu_id: uuid.UUID
    fuel_type: str
    quantity: DecimalStr
    price_per_liter: DecimalStr
    total_price: DecimalStr
    status: TransactionStatus
    payment_method: str
    payment_status: PaymentStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    paid_at: Optional[datetime]

    model_config = {"from_attributes": True}


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a fuel purchase",
    responses={
        400: {"description": "Invalid quantity or payload"},
        401: {"description": "Not authenticated"},
        404: {"description": "User, SPBU or fuel price not found"},
    },
)
async def create_transaction(
    payload: TransactionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService(db).create_transaction(
        user_id=current_user.user_id,
        spbu_id=payload.spbu_id,
        fuel_type=payload.fuel_type,
        quantity=payload.quantity,
        payment_method=payload.payment_method,
    )


@router.get(
    "",
    response_model=List[TransactionResponse],
    summary="List your transactions (newest first)",
)
async def list_transactions(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService(db).list_transactions(current_user.user_id)


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get one of your transactions",
    responses={404: {"description": "Transaction not found"}},
)
async def get_transaction(
    transaction_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService(db).get_transaction(current_user.user_id, transaction_id)


@router.delete(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Cancel a pending transaction",
    responses={
        404: {"description": "Transaction not found"},
        409: {"description": "Transaction is not pending"},
    },
)
async def cancel_transaction(
    transaction_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService(db).cancel_transaction(current_user.user_id, transaction_id)


@router.post(
    "/{transaction_id}/pay",
    response_model=TransactionResponse,
    summary="Pay for a pending transaction",
    description=(
        "On success the transaction moves to processing with payment_status=paid. "
        "A declined payment returns 200 with payment_status=failed and status still pending."
    ),
    responses={
        404: {"description": "Transaction not found"},
        409: {"description": "Transaction is not pending"},
    },
)
async def pay_transaction(
    transaction_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    return await TransactionService(db, gateway).process_payment(current_user.user_id, transaction_id)
