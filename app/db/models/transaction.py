"""
Transaction Model - a fuel purchase

Lifecycle:
    pending -> processing   (payment attempt succeeded)
    pending -> cancelled    (owner cancelled)
A failed payment attempt keeps status=pending and sets payment_status=failed.
"""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.compat import ExactDecimal
from app.db.database import Base


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    spbu_id = Column(Uuid, ForeignKey("spbu.id"), nullable=False, index=True)
    fuel_type = Column(String(50), nullable=False)

    # Exact decimals; total_price = quantity * price_per_liter, set once at creation
    quantity = Column(ExactDecimal, nullable=False)
    price_per_liter = Column(ExactDecimal, nullable=False)
    total_price = Column(ExactDecimal, nullable=False)

    status = Column(
        SQLEnum(
            TransactionStatus,
            name="transaction_status",
            values_callable=lambda x: [e.value for e in x]
        ),
        default=TransactionStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_method = Column(String(50), nullable=False)
    payment_status = Column(
        SQLEnum(
            PaymentStatus,
            name="payment_status",
            values_callable=lambda x: [e.value for e in x]
        ),
        default=PaymentStatus.PENDING,
        nullable=False
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    paid_at = Column(DateTime, nullable=True)

    user = relationship("User")
    station = relationship("Station")
