# src/models/cart.py

"""Immutable cart value objects."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.models.product import Product


@dataclass(frozen=True)
class CartLine:
    """One product-quantity pairing inside a cart."""

    product: Product
    quantity: int

    @property
    def line_total(self) -> float:
        """Unit price times quantity."""
        return self.product.price * self.quantity


def sum_lines(lines: Iterable[CartLine]) -> float:
    """Recompute a cart total from scratch over *lines*."""
    total = 0.0
    for line in lines:
        total += line.product.price * line.quantity
    return total


@dataclass(frozen=True)
class Cart:
    """Ordered cart lines plus the total derived from them.

    Build carts through :meth:`from_lines` so the total is always the
    recomputed sum of the lines.
    """

    items: tuple[CartLine, ...] = field(
        default_factory=lambda: tuple[CartLine, ...]()
    )
    total: float = 0.0

    @classmethod
    def empty(cls) -> "Cart":
        """Return a cart with no lines and a zero total."""
        return cls()

    @classmethod
    def from_lines(cls, lines: Iterable[CartLine]) -> "Cart":
        """Freeze *lines* into a cart with a freshly computed total."""
        items = tuple(lines)
        return cls(items=items, total=sum_lines(items))

    @property
    def is_empty(self) -> bool:
        """True when the cart holds no lines."""
        return not self.items

    @property
    def item_count(self) -> int:
        """Total number of units across all lines."""
        return sum(line.quantity for line in self.items)

    def find(self, product_id: str) -> CartLine | None:
        """Return the line for *product_id*, or ``None``."""
        for line in self.items:
            if line.product.id == product_id:
                return line
        return None
