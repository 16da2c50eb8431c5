# src/services/shopping_session.py

"""Per-till session state shared by the TUI and the CLI."""

import asyncio
import logging
import random

from src.models.catalog_snapshot import CatalogSnapshot
from src.models.product import Product
from src.models.recommendation import (
    RecommendationRequest,
    RecommendationResult,
)
from src.services.cart_aggregator import CartAggregator
from src.services.checkout import CheckoutOrchestrator
from src.services.payment_gateway import (
    PaymentGateway,
    SimulatedPaymentGateway,
)
from src.services.recommendation_selector import (
    RandomSource,
    RecommendationSelector,
)
from src.services.scan_handler import ScanHandler
from src.storage.catalog_store import CatalogStore, create_catalog_store
from src.storage.receipt_store import ReceiptStore

logger = logging.getLogger("pos_shop.session")


class ShoppingSession:
    """Owns the catalog snapshot and the cart for one till session.

    Components receive the session explicitly; all cart mutations go
    through :attr:`cart`, and the snapshot is only ever replaced as a
    whole.
    """

    def __init__(
        self,
        store: CatalogStore | None = None,
        gateway: PaymentGateway | None = None,
        receipt_store: ReceiptStore | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.store: CatalogStore = store or create_catalog_store()
        self.catalog = CatalogSnapshot()
        self.cart = CartAggregator()
        self.selector = RecommendationSelector(rng or random.Random())
        self.scanner = ScanHandler(self.store, self.cart)
        self.checkout = CheckoutOrchestrator(
            self.cart,
            gateway or SimulatedPaymentGateway(),
            catalog_store=self.store,
            receipt_store=receipt_store,
            current_stock=self._stock_of,
        )
        self._catalog_stale = True
        self._unsubscribe = self.store.subscribe(self._on_store_changed)

    @property
    def catalog_stale(self) -> bool:
        """True when the store signalled a change not yet re-listed."""
        return self._catalog_stale

    def _on_store_changed(self) -> None:
        # May run on a worker thread; only flip the flag here
        self._catalog_stale = True

    def _stock_of(self, product_id: str) -> int | None:
        product = self.catalog.find_by_id(product_id)
        return product.stock_quantity if product else None

    def load_catalog(self) -> CatalogSnapshot:
        """Re-list the store and replace the snapshot (blocking)."""
        self._catalog_stale = False
        products = self.store.list_products()
        self.catalog = self.catalog.replace(products)
        logger.info(
            "Catalog snapshot v%d loaded (%d products)",
            self.catalog.version,
            len(self.catalog),
        )
        return self.catalog

    async def refresh_catalog(self) -> CatalogSnapshot:
        """Re-list the store off the event loop."""
        products = await asyncio.to_thread(self.store.list_products)
        self._catalog_stale = False
        self.catalog = self.catalog.replace(products)
        logger.info(
            "Catalog snapshot v%d refreshed (%d products)",
            self.catalog.version,
            len(self.catalog),
        )
        return self.catalog

    def add_product(self, product_id: str, quantity: int = 1) -> bool:
        """Add a snapshot product by id; False when unknown or sold out."""
        product = self.catalog.find_by_id(product_id)
        if product is None or not product.is_in_stock:
            return False
        self.cart.add_to_cart(product, quantity)
        return True

    def recommend(
        self, request: RecommendationRequest
    ) -> RecommendationResult:
        """Run the selector over the current snapshot."""
        return self.selector.select(self.catalog.products, request)

    def accept_recommendation(
        self, result: RecommendationResult
    ) -> None:
        """Add every suggested product to the cart once."""
        self.cart.add_many(result.selected)

    def lookup_local(self, code: str) -> Product | None:
        """Resolve a code against the snapshot without hitting the store."""
        return self.catalog.find_by_code(code)

    def close(self) -> None:
        """Detach from store notifications."""
        self._unsubscribe()
