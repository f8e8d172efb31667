"""
Payment Gateway - charges a fuel purchase

Only a simulated gateway exists; its outcome is driven by
``settings.PAYMENT_SIMULATION_SUCCEEDS``.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.decimals import format_decimal
from app.core.logging import get_logger
from app.db.models.transaction import Transaction

logger = get_logger(__name__)


@dataclass
class PaymentResult:
    success: bool
    reference: Optional[str] = None
    message: str = ""


class PaymentGateway(ABC):
    """Interface for charging a transaction"""

    @abstractmethod
    async def charge(self, transaction: Transaction) -> PaymentResult:
        ...


class SimulatedPaymentGateway(PaymentGateway):
    """Gateway that approves or declines every charge according to configuration"""

    def __init__(self, succeed: Optional[bool] = None):
        self._succeed = settings.PAYMENT_SIMULATION_SUCCEEDS if succeed is None else succeed

    async def charge(self, transaction: Transaction) -> PaymentResult:
        logger.info(
            "Simulated payment charge",
            extra_data={
                "transaction_id": str(transaction.id),
                "amount": format_decimal(transaction.total_price),
                "payment_method": transaction.payment_method,
                "approved": self._succeed,
            },
        )
        if self._succeed:
            return PaymentResult(success=True, reference=f"SIM-{uuid.uuid4().hex[:12].upper()}")
        return PaymentResult(success=False, message="Payment declined")


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; tests override it"""
    return SimulatedPaymentGateway()
