# src/models/errors.py

"""Exception hierarchy for pos_shop.

A product that cannot be found is not an error: lookups return ``None``.
"""


class PosShopError(Exception):
    """Base class for all pos_shop errors."""


class CatalogStoreError(PosShopError):
    """The catalog store rejected or failed an operation."""


class CatalogUnavailableError(CatalogStoreError):
    """The catalog store could not be reached (transient)."""


class CartInvariantError(PosShopError):
    """A cart mutation would have produced an inconsistent cart."""


class CheckoutError(PosShopError):
    """Checkout cannot start (e.g. the cart is empty)."""


class CheckoutInProgressError(CheckoutError):
    """A payment is already in flight for this session."""
