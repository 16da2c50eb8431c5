# tests/test_app.py

"""Smoke tests for the TUI application using Textual's Pilot."""

import shutil
import tempfile
import unittest
from pathlib import Path

from textual.widgets import (
    Checkbox,
    DataTable,
    Input,
    LoadingIndicator,
    Select,
    TabbedContent,
)

from src.services.payment_gateway import (
    PaymentMethod,
    PaymentStatus,
    SimulatedPaymentGateway,
)
from src.services.shopping_session import ShoppingSession
from src.storage.catalog_store import InMemoryCatalogStore
from src.storage.receipt_store import ReceiptStore
from src.ui.app import PosShopApp


class _RecordingGateway(SimulatedPaymentGateway):
    """Simulated terminal that counts charges."""

    def __init__(self) -> None:
        super().__init__(delay=0)
        self.calls: list[float] = []

    async def pay(self, amount: float, method: PaymentMethod) -> PaymentStatus:
        self.calls.append(amount)
        return await super().pay(amount, method)


class _ZeroRandom:
    def random(self) -> float:
        return 0.0


class TestPosShopApp(unittest.IsolatedAsyncioTestCase):
    """Smoke tests for the Textual till."""

    def setUp(self) -> None:
        self.tmpdir = tempfile.mkdtemp()
        self.store = InMemoryCatalogStore()
        self.gateway = _RecordingGateway()

    def tearDown(self) -> None:
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _make_app(self) -> PosShopApp:
        session = ShoppingSession(
            store=self.store,
            gateway=self.gateway,
            receipt_store=ReceiptStore(Path(self.tmpdir)),
            rng=_ZeroRandom(),
        )
        return PosShopApp(session=session)

    def _status(self, app: PosShopApp) -> str:
        return app.status_message

    async def test_app_composes_without_crash(self) -> None:
        """Verify the app starts and renders all widgets."""
        app = self._make_app()
        async with app.run_test() as pilot:
            app.query_one("#scan_input", Input)
            app.query_one("#scan_btn")
            app.query_one("#catalog_table", DataTable)
            app.query_one("#cart_table", DataTable)
            app.query_one("#suggest_table", DataTable)
            app.query_one("#payment_method", Select)
            app.query_one("#tabs", TabbedContent)
            await pilot.pause()

    async def test_catalog_loaded_on_mount(self) -> None:
        """The catalog table is filled from the store at start-up."""
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            table = app.query_one("#catalog_table", DataTable)
            self.assertEqual(table.row_count, 10)
            self.assertIn("10 products", self._status(app))

    async def test_loading_indicator_hidden_on_mount(self) -> None:
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            loader = app.query_one("#loader", LoadingIndicator)
            self.assertFalse(loader.display)

    async def test_all_tag_checkboxes_present(self) -> None:
        """A checkbox exists for every dietary and preference tag."""
        app = self._make_app()
        async with app.run_test() as pilot:
            for box_id in ("#diet_organic", "#diet_gluten_free",
                           "#pref_quick_easy", "#pref_budget_friendly"):
                self.assertFalse(app.query_one(box_id, Checkbox).value)
            await pilot.pause()

    async def test_scan_adds_to_cart(self) -> None:
        """Typing a barcode and pressing Add puts it in the cart."""
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            app.query_one("#scan_input", Input).value = "2345678901234"
            await pilot.click("#scan_btn")
            await pilot.pause()
            cart = app.session.cart.cart
            self.assertEqual(cart.items[0].product.name, "Whole Grain Bread")
            self.assertEqual(
                app.query_one("#cart_table", DataTable).row_count, 1
            )
            self.assertIn("Found: Whole Grain Bread", self._status(app))
            self.assertEqual(
                app.query_one("#scan_input", Input).value, ""
            )

    async def test_unknown_scan_reports_not_found(self) -> None:
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            app.query_one("#scan_input", Input).value = "000"
            await app.submit_scan()
            await pilot.pause()
            self.assertTrue(app.session.cart.cart.is_empty)
            self.assertIn("Product not found", self._status(app))

    async def test_empty_scan_warns(self) -> None:
        """Pressing Add with no code does not touch the cart."""
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.click("#scan_btn")
            await pilot.pause()
            self.assertTrue(app.session.cart.cart.is_empty)

    async def test_add_selected_catalog_row(self) -> None:
        """The highlighted catalog row (first by name) is added."""
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            app.action_add_selected()
            await pilot.pause()
            line = app.session.cart.cart.items[0]
            self.assertEqual(line.product.name, "Artisan Pasta")
            self.assertEqual(app.session.checkout.summarize().item_count, 1)
            self.assertEqual(app.sub_title, "Cart: 1 items")

    async def test_cart_line_adjustments(self) -> None:
        """Increment, decrement and remove act on the highlighted line."""
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            app.session.add_product("5", 1)
            await pilot.pause()
            app.action_increment()
            self.assertEqual(app.session.cart.cart.items[0].quantity, 2)
            app.action_decrement()
            app.action_decrement()
            self.assertTrue(app.session.cart.cart.is_empty)
            app.session.add_product("5", 1)
            app.action_remove_line()
            self.assertTrue(app.session.cart.cart.is_empty)
            await pilot.pause()

    async def test_checkout_clears_cart(self) -> None:
        """A successful checkout empties the cart and saves a receipt."""
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            app.session.add_product("2", 2)
            await app.action_checkout()
            await pilot.pause()
            self.assertTrue(app.session.cart.cart.is_empty)
            self.assertEqual(len(self.gateway.calls), 1)
            self.assertEqual(
                len(list(Path(self.tmpdir).glob("receipt_*.json"))), 1
            )
            self.assertIn("Order complete", self._status(app))
            self.assertFalse(app.query_one("#loader", LoadingIndicator).display)

    async def test_checkout_empty_cart_warns(self) -> None:
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            await app.action_checkout()
            await pilot.pause()
            self.assertEqual(self.gateway.calls, [])
            self.assertEqual(self._status(app), "Ready")

    async def test_declined_checkout_keeps_cart(self) -> None:
        self.gateway.should_succeed = False
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            app.session.add_product("2", 1)
            await app.action_checkout()
            await pilot.pause()
            self.assertFalse(app.session.cart.cart.is_empty)
            self.assertIn("Payment declined", self._status(app))

    async def test_stock_change_refreshes_catalog(self) -> None:
        """A store notification redraws the catalog on the next tick."""
        app = self._make_app()
        async with app.run_test() as pilot:
            await pilot.pause()
            self.store.update_stock("3", 0)
            self.assertTrue(app.session.catalog_stale)
            await app._refresh_if_stale()
            await pilot.pause()
            self.assertFalse(app.session.catalog_stale)
            self.assertEqual(
                app.session.catalog.find_by_id("3").stock_quantity, 0  # type: ignore[union-attr]
            )

    async def test_generate_and_accept_suggestions(self) -> None:
        """Suggestions fill the table and can be moved to the cart."""
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            app.query_one("#budget_input", Input).value = "5"
            app.generate_suggestions()
            await pilot.pause()
            self.assertEqual(
                app.query_one("#suggest_table", DataTable).row_count, 1
            )
            app.add_all_suggestions()
            await pilot.pause()
            self.assertEqual(app.session.cart.cart.items[0].product.id, "6")
            self.assertEqual(
                app.query_one("#tabs", TabbedContent).active, "cart_tab"
            )

    async def test_invalid_budget_notifies(self) -> None:
        """A non-numeric budget leaves the suggestions empty."""
        app = self._make_app()
        async with app.run_test(notifications=True) as pilot:
            await pilot.pause()
            app.query_one("#budget_input", Input).value = "lots"
            app.generate_suggestions()
            await pilot.pause()
            self.assertEqual(app.suggestions.selected, [])

    async def test_show_suggestions_switches_tab(self) -> None:
        app = self._make_app()
        async with app.run_test() as pilot:
            app.action_show_suggestions()
            await pilot.pause()
            self.assertEqual(
                app.query_one("#tabs", TabbedContent).active, "suggest_tab"
            )


if __name__ == "__main__":
    unittest.main()
