# src/services/payment_gateway.py

"""Payment step adapters."""

import asyncio
import logging
from enum import Enum
from typing import Protocol

from src.config.settings import Settings

logger = logging.getLogger("pos_shop.payment")


class PaymentMethod(str, Enum):
    CARD = "card"
    CASH = "cash"


class PaymentStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentGateway(Protocol):
    """A single, non-cancellable payment attempt."""

    async def pay(
        self, amount: float, method: PaymentMethod
    ) -> PaymentStatus: ...


class SimulatedPaymentGateway:
    """Stand-in terminal: waits ``delay`` seconds, then reports a result."""

    def __init__(
        self,
        delay: float | None = None,
        should_succeed: bool = True,
    ) -> None:
        self.delay = Settings.PAYMENT_DELAY if delay is None else delay
        self.should_succeed = should_succeed

    async def pay(
        self, amount: float, method: PaymentMethod
    ) -> PaymentStatus:
        logger.info(
            "Processing %s payment of %.2f", method.value, amount
        )
        await asyncio.sleep(self.delay)
        if self.should_succeed:
            return PaymentStatus.SUCCEEDED
        logger.warning("Simulated payment of %.2f declined", amount)
        return PaymentStatus.FAILED
