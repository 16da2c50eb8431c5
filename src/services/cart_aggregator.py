# src/services/cart_aggregator.py

"""Cart aggregation: add / update / remove with a recomputed total."""

import logging
import math
from collections.abc import Callable, Iterable

from src.models.cart import Cart, CartLine, sum_lines
from src.models.errors import CartInvariantError
from src.models.product import Product

logger = logging.getLogger("pos_shop.cart")

CartListener = Callable[[Cart], None]


class CartAggregator:
    """Single owner of the session cart.

    Every mutation builds a complete new :class:`Cart`, validates it,
    and only then swaps it in. The total is always recomputed over all
    lines rather than adjusted incrementally.
    """

    def __init__(self) -> None:
        self._cart: Cart = Cart.empty()
        self._listeners: list[CartListener] = []

    @property
    def cart(self) -> Cart:
        """The current (immutable) cart."""
        return self._cart

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call *listener* with the new cart after each mutation.

        Returns a callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ── Mutations ────────────────────────────────────────

    def add_to_cart(self, product: Product, quantity: int = 1) -> Cart:
        """Merge *quantity* units of *product* into the cart.

        An existing line for ``product.id`` is incremented, otherwise a
        new line is appended. Non-positive quantities are rejected as a
        no-op.
        """
        if quantity <= 0:
            logger.warning(
                "Ignored add of %s with non-positive quantity %d",
                product.id,
                quantity,
            )
            return self._cart

        lines: list[CartLine] = []
        merged = False
        for line in self._cart.items:
            if line.product.id == product.id:
                lines.append(
                    CartLine(line.product, line.quantity + quantity)
                )
                merged = True
            else:
                lines.append(line)
        if not merged:
            lines.append(CartLine(product, quantity))

        logger.debug(
            "Add %s x%d (%s)",
            product.id,
            quantity,
            "merged" if merged else "new line",
        )
        return self._commit(lines)

    def add_many(self, products: Iterable[Product]) -> Cart:
        """Add one unit of each product, e.g. an accepted suggestion list."""
        for product in products:
            self.add_to_cart(product, 1)
        return self._cart

    def remove_from_cart(self, product_id: str) -> Cart:
        """Delete the line for *product_id*; no-op when absent."""
        if self._cart.find(product_id) is None:
            return self._cart
        lines = [
            line
            for line in self._cart.items
            if line.product.id != product_id
        ]
        logger.debug("Remove %s", product_id)
        return self._commit(lines)

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        """Set the absolute quantity of an existing line.

        ``quantity <= 0`` removes the line. Unknown ids are a no-op.
        """
        if quantity <= 0:
            return self.remove_from_cart(product_id)
        if self._cart.find(product_id) is None:
            return self._cart
        lines = [
            CartLine(line.product, quantity)
            if line.product.id == product_id
            else line
            for line in self._cart.items
        ]
        logger.debug("Set %s quantity to %d", product_id, quantity)
        return self._commit(lines)

    def settle(self, paid: Iterable[CartLine]) -> Cart:
        """Take the *paid* quantities out of the cart.

        Lines added or topped up after the paid cart was captured keep
        their unpaid units. When nothing is left this is ``clear_cart``.
        """
        owed = {line.product.id: line.quantity for line in paid}
        lines = []
        for line in self._cart.items:
            remaining = line.quantity - owed.get(line.product.id, 0)
            if remaining > 0:
                lines.append(CartLine(line.product, remaining))
        if not lines:
            return self.clear_cart()
        logger.info(
            "Settled %d paid lines, %d unpaid lines kept",
            len(owed),
            len(lines),
        )
        return self._commit(lines)

    def clear_cart(self) -> Cart:
        """Reset to the empty cart."""
        logger.debug("Clear cart (%d lines)", len(self._cart.items))
        return self._commit([])

    # ── Internals ────────────────────────────────────────

    def _commit(self, lines: list[CartLine]) -> Cart:
        """Validate a candidate cart, swap it in and notify listeners."""
        candidate = Cart.from_lines(lines)
        self._validate(candidate)
        self._cart = candidate
        for listener in list(self._listeners):
            listener(candidate)
        return candidate

    @staticmethod
    def _validate(cart: Cart) -> None:
        """Raise CartInvariantError if *cart* is inconsistent."""
        seen: set[str] = set()
        for line in cart.items:
            if line.quantity < 1:
                msg = (
                    f"Line for {line.product.id} has non-positive "
                    f"quantity {line.quantity}"
                )
                raise CartInvariantError(msg)
            if line.product.id in seen:
                msg = f"Duplicate cart line for {line.product.id}"
                raise CartInvariantError(msg)
            seen.add(line.product.id)

        expected = sum_lines(cart.items)
        if not math.isclose(cart.total, expected, abs_tol=1e-9):
            msg = f"Cart total {cart.total} diverged from {expected}"
            raise CartInvariantError(msg)
