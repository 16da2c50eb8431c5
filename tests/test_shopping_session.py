# tests/test_shopping_session.py

"""Tests for ShoppingSession wiring."""

import unittest

from src.models.recommendation import RecommendationRequest
from src.services.payment_gateway import SimulatedPaymentGateway
from src.services.shopping_session import ShoppingSession
from src.storage.catalog_store import InMemoryCatalogStore


class _ZeroRandom:
    def random(self) -> float:
        return 0.0


class TestShoppingSession(unittest.IsolatedAsyncioTestCase):
    """Session state shared by the TUI and CLI."""

    def setUp(self) -> None:
        self.store = InMemoryCatalogStore()
        self.session = ShoppingSession(
            store=self.store,
            gateway=SimulatedPaymentGateway(delay=0),
            rng=_ZeroRandom(),
        )

    def tearDown(self) -> None:
        self.session.close()

    def test_starts_stale_and_empty(self) -> None:
        """A new session has no snapshot until the first load."""
        self.assertTrue(self.session.catalog_stale)
        self.assertEqual(len(self.session.catalog), 0)
        self.assertTrue(self.session.cart.cart.is_empty)

    def test_load_catalog(self) -> None:
        snap = self.session.load_catalog()
        self.assertEqual(len(snap), 10)
        self.assertEqual(snap.version, 1)
        self.assertFalse(self.session.catalog_stale)

    async def test_refresh_catalog(self) -> None:
        snap = await self.session.refresh_catalog()
        self.assertEqual(len(snap), 10)
        self.assertFalse(self.session.catalog_stale)

    def test_store_change_marks_stale(self) -> None:
        """A store notification only flags the snapshot as stale."""
        self.session.load_catalog()
        self.store.update_stock("1", 1)
        self.assertTrue(self.session.catalog_stale)
        self.assertEqual(
            self.session.catalog.find_by_id("1").stock_quantity, 50  # type: ignore[union-attr]
        )
        self.session.load_catalog()
        self.assertEqual(
            self.session.catalog.find_by_id("1").stock_quantity, 1  # type: ignore[union-attr]
        )

    def test_close_detaches(self) -> None:
        self.session.load_catalog()
        self.session.close()
        self.store.update_stock("1", 1)
        self.assertFalse(self.session.catalog_stale)

    def test_add_product(self) -> None:
        """Known in-stock ids are added; unknown or sold out are refused."""
        self.session.load_catalog()
        self.assertTrue(self.session.add_product("2", 2))
        self.assertAlmostEqual(self.session.cart.cart.total, 6.98)
        self.assertFalse(self.session.add_product("missing"))
        self.store.update_stock("3", 0)
        self.session.load_catalog()
        self.assertFalse(self.session.add_product("3"))

    def test_lookup_local(self) -> None:
        self.session.load_catalog()
        product = self.session.lookup_local("1234567890123")
        self.assertEqual(product.name, "Organic Bananas")  # type: ignore[union-attr]
        self.assertIsNone(self.session.lookup_local("none"))

    def test_recommend_and_accept(self) -> None:
        """Accepted suggestions land in the cart once each."""
        self.session.load_catalog()
        result = self.session.recommend(RecommendationRequest.build(5))
        # Spinach is the cheapest staple, then nothing else fits
        self.assertEqual([p.id for p in result.selected], ["6"])
        self.session.accept_recommendation(result)
        self.assertEqual(self.session.cart.cart.items[0].product.id, "6")
        self.assertAlmostEqual(self.session.cart.cart.total, 2.49)

    async def test_checkout_uses_snapshot_stock(self) -> None:
        """Write-back starts from the snapshot's stock level."""
        self.session.load_catalog()
        self.session.add_product("2", 1)
        self.store.update_stock("2", 10)
        self.session.load_catalog()
        result = await self.session.checkout.checkout()
        self.assertTrue(result.succeeded)
        self.assertEqual(self.store.get_by_barcode("2345678901234").stock_quantity, 9)  # type: ignore[union-attr]
        self.assertTrue(self.session.catalog_stale)

    async def test_scanner_shares_cart(self) -> None:
        outcome = await self.session.scanner.handle_decode("2345678901234")
        self.assertEqual(outcome.product.id, "2")  # type: ignore[union-attr]
        self.assertEqual(self.session.cart.cart.item_count, 1)


if __name__ == "__main__":
    unittest.main()
