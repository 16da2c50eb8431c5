# src/models/checkout.py

"""Checkout summary and outcome types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.models.cart import Cart, CartLine


class CheckoutStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckoutSummary:
    """Money breakdown of a cart at the moment checkout starts."""

    subtotal: float
    tax_rate: float
    tax: float
    grand_total: float
    item_count: int

    @classmethod
    def for_cart(cls, cart: Cart, tax_rate: float) -> "CheckoutSummary":
        tax = cart.total * tax_rate
        return cls(
            subtotal=cart.total,
            tax_rate=tax_rate,
            tax=tax,
            grand_total=cart.total + tax,
            item_count=cart.item_count,
        )


@dataclass
class CheckoutResult:
    """Outcome of one checkout attempt."""

    status: CheckoutStatus
    summary: CheckoutSummary
    lines: tuple[CartLine, ...]
    method: str
    completed_at: datetime = field(default_factory=datetime.now)
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is CheckoutStatus.COMPLETED
