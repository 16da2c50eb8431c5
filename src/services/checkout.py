# src/services/checkout.py

"""Drives the session cart through a single payment attempt."""

import asyncio
import logging
from collections.abc import Callable

from src.config.settings import Settings
from src.models.cart import CartLine
from src.models.checkout import CheckoutResult, CheckoutStatus, CheckoutSummary
from src.models.errors import CheckoutError, CheckoutInProgressError
from src.services.cart_aggregator import CartAggregator
from src.services.payment_gateway import (
    PaymentGateway,
    PaymentMethod,
    PaymentStatus,
)
from src.storage.catalog_store import CatalogStore
from src.storage.receipt_store import ReceiptStore

logger = logging.getLogger("pos_shop.checkout")

CompletionListener = Callable[[CheckoutResult], None]


class CheckoutOrchestrator:
    """Capture the total, pay once, and settle the cart on success.

    There is no partial state: a payment either succeeds (paid lines
    leave the cart, completion listeners called) or fails (cart
    untouched, status ``FAILED``). Failed payments are never retried
    automatically.
    """

    def __init__(
        self,
        aggregator: CartAggregator,
        gateway: PaymentGateway,
        catalog_store: CatalogStore | None = None,
        receipt_store: ReceiptStore | None = None,
        current_stock: Callable[[str], int | None] | None = None,
        tax_rate: float | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.gateway = gateway
        self.catalog_store = catalog_store
        self.receipt_store = receipt_store
        self._current_stock = current_stock
        self.tax_rate = Settings.TAX_RATE if tax_rate is None else tax_rate
        self._in_flight = False
        self._listeners: list[CompletionListener] = []

    @property
    def in_flight(self) -> bool:
        """True while a payment is awaiting its result."""
        return self._in_flight

    def on_complete(self, listener: CompletionListener) -> None:
        """Register a callback fired after a successful checkout."""
        self._listeners.append(listener)

    def summarize(self) -> CheckoutSummary:
        """Subtotal, tax and grand total of the current cart."""
        return CheckoutSummary.for_cart(self.aggregator.cart, self.tax_rate)

    async def checkout(
        self, method: PaymentMethod = PaymentMethod.CARD
    ) -> CheckoutResult:
        """Pay for the current cart.

        Raises:
            CheckoutError: the cart is empty.
            CheckoutInProgressError: another payment is still pending.
        """
        if self._in_flight:
            raise CheckoutInProgressError("A payment is already in progress")
        cart = self.aggregator.cart
        if cart.is_empty:
            raise CheckoutError("Cannot check out an empty cart")

        summary = CheckoutSummary.for_cart(cart, self.tax_rate)
        lines = cart.items
        self._in_flight = True
        try:
            logger.info(
                "Checkout started: %d items, subtotal %.2f, total %.2f",
                summary.item_count,
                summary.subtotal,
                summary.grand_total,
            )
            try:
                status = await self.gateway.pay(summary.grand_total, method)
            except Exception as exc:
                logger.error("Payment step raised: %s", exc, exc_info=True)
                return CheckoutResult(
                    status=CheckoutStatus.FAILED,
                    summary=summary,
                    lines=lines,
                    method=method.value,
                    message=f"Payment error: {exc}",
                )

            if status is not PaymentStatus.SUCCEEDED:
                logger.warning(
                    "Payment of %.2f failed, cart kept", summary.grand_total
                )
                return CheckoutResult(
                    status=CheckoutStatus.FAILED,
                    summary=summary,
                    lines=lines,
                    method=method.value,
                    message="Payment declined",
                )

            result = CheckoutResult(
                status=CheckoutStatus.COMPLETED,
                summary=summary,
                lines=lines,
                method=method.value,
            )
            # Only what was charged leaves the cart; scans made while
            # the payment was pending stay for the next sale
            self.aggregator.settle(lines)
            logger.info("Checkout completed for %.2f", summary.grand_total)
        finally:
            self._in_flight = False

        await self._write_back_stock(lines)
        self._save_receipt(result)
        for listener in list(self._listeners):
            listener(result)
        return result

    async def _write_back_stock(self, lines: tuple[CartLine, ...]) -> None:
        """Decrement store stock for sold lines; failures are only logged."""
        if self.catalog_store is None or not Settings.UPDATE_STOCK_ON_CHECKOUT:
            return
        for line in lines:
            stock = None
            if self._current_stock is not None:
                stock = self._current_stock(line.product.id)
            if stock is None:
                stock = line.product.stock_quantity
            new_stock = max(0, stock - line.quantity)
            try:
                await asyncio.to_thread(
                    self.catalog_store.update_stock,
                    line.product.id,
                    new_stock,
                )
            except Exception as exc:
                logger.error(
                    "Stock write-back for %s failed: %s",
                    line.product.id,
                    exc,
                    exc_info=True,
                )

    def _save_receipt(self, result: CheckoutResult) -> None:
        if self.receipt_store is None:
            return
        try:
            path = self.receipt_store.save_receipt(result)
            result.message = f"Receipt saved to {path}"
        except OSError as exc:
            logger.error("Receipt save failed: %s", exc, exc_info=True)
