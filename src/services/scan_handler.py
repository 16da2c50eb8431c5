# src/services/scan_handler.py

"""Turns decoded barcode / QR strings into cart additions."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from src.models.errors import CatalogStoreError
from src.models.product import Product
from src.services.cart_aggregator import CartAggregator
from src.storage.catalog_store import CatalogStore

logger = logging.getLogger("pos_shop.scanner")


class ScanStatus(str, Enum):
    ADDED = "added"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ScanOutcome:
    """What happened to one decoded code."""

    code: str
    status: ScanStatus
    product: Product | None = None
    message: str = ""


class ScanHandler:
    """Resolve decoded codes against the catalog store.

    Only one lookup may be in flight at a time. A decode that arrives
    while a lookup is pending is dropped with status ``BUSY`` so that a
    double read of the same label never adds the product twice.
    """

    def __init__(
        self, store: CatalogStore, aggregator: CartAggregator
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def handle_decode(self, code: str) -> ScanOutcome:
        """Look *code* up (barcode, then QR) and add one unit on a hit."""
        code = code.strip()
        if not code:
            return ScanOutcome(code, ScanStatus.IGNORED, message="Empty scan")
        if self._busy:
            logger.info("Dropped scan %s: lookup already in flight", code)
            return ScanOutcome(
                code, ScanStatus.BUSY, message="Still looking up last scan"
            )

        self._busy = True
        try:
            product = await self._lookup(code)
        finally:
            self._busy = False

        if product is None:
            logger.info("Scan %s matched no product", code)
            return ScanOutcome(
                code, ScanStatus.NOT_FOUND, message="Product not found"
            )

        self.aggregator.add_to_cart(product, 1)
        logger.info("Scan %s added %s", code, product.name)
        return ScanOutcome(
            code, ScanStatus.ADDED, product, message=f"Found: {product.name}"
        )

    async def _lookup(self, code: str) -> Product | None:
        """Barcode first, then QR code. An unreachable store counts as a miss."""
        try:
            product = await asyncio.to_thread(self.store.get_by_barcode, code)
            if product is None:
                product = await asyncio.to_thread(
                    self.store.get_by_qr_code, code
                )
        except CatalogStoreError as exc:
            logger.warning("Lookup for %s failed: %s", code, exc)
            return None
        return product
