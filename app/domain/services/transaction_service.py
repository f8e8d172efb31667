"""
Transaction Service - מחזור החיים של רכישת דלק

ביטול ותשלום עובדים באותה תבנית:
1. נעילת שורת העסקה (SELECT ... FOR UPDATE), רק של הבעלים שלה
2. בדיקה שהסטטוס PENDING
3. כתיבת המצב החדש עם UPDATE ... WHERE status = 'pending'
   (כותב מקביל שהקדים אותנו משאיר 0 שורות -> 409)
4. commit, או rollback על כל שגיאה

ב-dialects בלי נעילת שורות (SQLite בטסטים) שלב 3 לבדו מסדר כותבים מתחרים.
"""
import uuid
from datetime import datetime
from decimal import Decimal, DecimalException
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.decimals import line_total
from app.core.exceptions import (
    NotFoundException,
    TransactionNotFoundError,
    TransactionStateError,
    UserNotFoundError,
    ValidationException,
    ErrorCode,
)
from app.core.logging import get_logger, log_async_operation
from app.db.models.fuel_price import FuelPrice
from app.db.models.station import Station
from app.db.models.transaction import PaymentStatus, Transaction, TransactionStatus
from app.db.models.user import User
from app.domain.services.payment_gateway import PaymentGateway, SimulatedPaymentGateway

logger = get_logger(__name__)

MAX_FUEL_TYPE_LENGTH = 50


class TransactionService:
    """Service for creating, reading, cancelling and paying fuel purchases"""

    def __init__(self, db: AsyncSession, payment_gateway: Optional[PaymentGateway] = None):
        self.db = db
        self.payment_gateway = payment_gateway or SimulatedPaymentGateway()

    @log_async_operation("create_transaction")
    async def create_transaction(
        self,
        user_id: uuid.UUID,
        spbu_id: uuid.UUID,
        fuel_type: str,
        quantity: Decimal,
        payment_method: str,
    ) -> Transaction:
        """
        Create a pending purchase priced from the station's current fuel price.

        total_price is always computed here; the price is snapshotted so later
        price changes do not touch existing transactions.
        """
        fuel_type = (fuel_type or "").strip()
        if not fuel_type or len(fuel_type) > MAX_FUEL_TYPE_LENGTH:
            raise ValidationException(
                f"fuel_type must be 1-{MAX_FUEL_TYPE_LENGTH} characters", field="fuel_type"
            )
        payment_method = (payment_method or "").strip()
        if not payment_method:
            raise ValidationException("payment_method is required", field="payment_method")
        if quantity <= 0:
            raise ValidationException(
                "Quantity must be greater than 0",
                field="quantity",
                error_code=ErrorCode.INVALID_QUANTITY,
            )

        try:
            if await self.db.get(User, user_id) is None:
                raise UserNotFoundError(user_id)
            if await self.db.get(Station, spbu_id) is None:
                raise NotFoundException("SPBU", spbu_id)

            price_result = await self.db.execute(
                select(FuelPrice.price).where(
                    FuelPrice.spbu_id == spbu_id,
                    FuelPrice.fuel_type == fuel_type,
                )
            )
            price_per_liter = price_result.scalar_one_or_none()
            if price_per_liter is None:
                raise NotFoundException(
                    "Fuel price", f"{fuel_type} at {spbu_id}", error_code=ErrorCode.FUEL_PRICE_NOT_FOUND
                )

            # סכום שלא ניתן לייצג במדויק נדחה, לעולם לא מעוגל
            try:
                total_price = line_total(quantity, price_per_liter)
            except DecimalException as e:
                raise ValidationException(
                    "Quantity is too large to price exactly",
                    field="quantity",
                    error_code=ErrorCode.INVALID_QUANTITY,
                ) from e

            transaction = Transaction(
                user_id=user_id,
                spbu_id=spbu_id,
                fuel_type=fuel_type,
                quantity=quantity,
                price_per_liter=price_per_liter,
                total_price=total_price,
                status=TransactionStatus.PENDING,
                payment_method=payment_method,
                payment_status=PaymentStatus.PENDING,
            )
            self.db.add(transaction)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(transaction)
        logger.info(
            "Transaction created",
            extra_data={
                "transaction_id": str(transaction.id),
                "user_id": str(user_id),
                "spbu_id": str(spbu_id),
                "fuel_type": fuel_type,
            },
        )
        return transaction

    async def get_transaction(self, user_id: uuid.UUID, transaction_id: uuid.UUID) -> Transaction:
        """Owner-scoped lookup; another user's transaction is indistinguishable from a missing one"""
        result = await self.db.execute(
            select(Transaction)
            .where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        transaction = result.scalar_one_or_none()
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    async def list_transactions(self, user_id: uuid.UUID) -> List[Transaction]:
        """The caller's transactions, newest first"""
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc())
        )
        return list(result.scalars().all())

    @log_async_operation("cancel_transaction")
    async def cancel_transaction(self, user_id: uuid.UUID, transaction_id: uuid.UUID) -> Transaction:
        """Cancel a pending transaction"""
        try:
            await self._lock_pending(user_id, transaction_id, TransactionStatus.CANCELLED)
            await self._transition_from_pending(
                user_id,
                transaction_id,
                TransactionStatus.CANCELLED,
                status=TransactionStatus.CANCELLED,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        transaction = await self.get_transaction(user_id, transaction_id)
        logger.info(
            "Transaction cancelled",
            extra_data={"transaction_id": str(transaction_id), "user_id": str(user_id)},
        )
        return transaction

    @log_async_operation("process_payment")
    async def process_payment(self, user_id: uuid.UUID, transaction_id: uuid.UUID) -> Transaction:
        """
        Attempt payment for a pending transaction.

        Success: status=processing, payment_status=paid, paid_at set.
        Declined: payment_status=failed, status stays pending (retry or cancel allowed).
        """
        try:
            transaction = await self._lock_pending(user_id, transaction_id, TransactionStatus.PROCESSING)
            payment = await self.payment_gateway.charge(transaction)

            if payment.success:
                await self._transition_from_pending(
                    user_id,
                    transaction_id,
                    TransactionStatus.PROCESSING,
                    status=TransactionStatus.PROCESSING,
                    payment_status=PaymentStatus.PAID,
                    paid_at=datetime.utcnow(),
                )
            else:
                await self._transition_from_pending(
                    user_id,
                    transaction_id,
                    TransactionStatus.PENDING,
                    payment_status=PaymentStatus.FAILED,
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        transaction = await self.get_transaction(user_id, transaction_id)
        log = logger.info if payment.success else logger.warning
        log(
            "Payment processed" if payment.success else "Payment declined",
            extra_data={
                "transaction_id": str(transaction_id),
                "user_id": str(user_id),
                "reference": payment.reference,
                "message": payment.message,
            },
        )
        return transaction

    async def _lock_pending(
        self,
        user_id: uuid.UUID,
        transaction_id: uuid.UUID,
        target: TransactionStatus,
    ) -> Transaction:
        """Lock the owner's transaction row and require PENDING"""
        result = await self.db.execute(
            select(Transaction)
            .where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        transaction = result.scalar_one_or_none()
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        if transaction.status != TransactionStatus.PENDING:
            raise TransactionStateError(transaction_id, transaction.status.value, target.value)
        return transaction

    async def _transition_from_pending(
        self,
        user_id: uuid.UUID,
        transaction_id: uuid.UUID,
        target: TransactionStatus,
        **values: Any,
    ) -> None:
        """Compare-and-swap write: applies ``values`` only while the row is still PENDING"""
        values["updated_at"] = datetime.utcnow()
        result = await self.db.execute(
            update(Transaction)
            .where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
                Transaction.status == TransactionStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            current = await self.db.scalar(
                select(Transaction.status).where(Transaction.id == transaction_id)
            )
            raise TransactionStateError(
                transaction_id,
                current.value if current is not None else "unknown",
                target.value,
            )
