# src/ui/app.py

"""Terminal till for the pos_shop client."""

import asyncio
import logging
import re
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    LoadingIndicator,
    Select,
    Static,
    TabbedContent,
    TabPane,
)
from textual.widgets.data_table import CellDoesNotExist

from src.config.settings import Settings
from src.models.cart import Cart
from src.models.errors import CatalogStoreError, CheckoutError
from src.models.recommendation import (
    RecommendationRequest,
    RecommendationResult,
)
from src.services.payment_gateway import PaymentMethod
from src.services.scan_handler import ScanStatus
from src.services.shopping_session import ShoppingSession
from src.storage.catalog_store import RestCatalogStore
from src.storage.receipt_store import ReceiptStore

logger = logging.getLogger("pos_shop.ui")


def _slug(label: str) -> str:
    """Turn an option label into a widget-id-safe token."""
    return re.sub(r"[^a-z0-9]+", "_", label.lower()).strip("_")


def _money(amount: float) -> str:
    return f"{Settings.CURRENCY_SYMBOL}{amount:,.2f}"


class PosShopApp(App[object]):
    """Terminal till: browse, scan, cart, suggestions and checkout."""

    CSS_PATH = "styles.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("a", "add_selected", "Add"),
        Binding("plus", "increment", "+1"),
        Binding("minus", "decrement", "-1"),
        Binding("d", "remove_line", "Remove"),
        Binding("x", "clear_cart", "Clear"),
        Binding("c", "checkout", "Checkout"),
        Binding("r", "refresh_catalog", "Refresh"),
        Binding("s", "show_suggestions", "Suggest"),
    ]

    def __init__(self, session: ShoppingSession | None = None) -> None:
        super().__init__()
        self.session = session or ShoppingSession(
            receipt_store=ReceiptStore()
        )
        self.suggestions = RecommendationResult()
        self.status_message = "Ready"

    def compose(self) -> ComposeResult:
        """Build the widget tree for the till."""
        occasion_options = [
            (o["label"], o["id"]) for o in Settings.OCCASION_OPTIONS
        ]
        dietary_boxes = [
            Checkbox(label, value=False, id=f"diet_{_slug(label)}")
            for label in Settings.DIETARY_OPTIONS
        ]
        preference_boxes = [
            Checkbox(label, value=False, id=f"pref_{_slug(label)}")
            for label in Settings.PREFERENCE_OPTIONS
        ]

        yield Header()
        yield Container(
            Static("🛒 Smart Checkout", id="title"),
            Horizontal(
                Input(
                    placeholder="Scan or type a barcode / QR code...",
                    id="scan_input",
                ),
                Button("Add", variant="primary", id="scan_btn"),
                id="scan_bar",
            ),
            Static("Ready", id="status"),
            LoadingIndicator(id="loader"),
            id="main_container",
        )
        with TabbedContent(initial="catalog_tab", id="tabs"):
            with TabPane("Catalog", id="catalog_tab"):
                yield DataTable(
                    id="catalog_table",
                    zebra_stripes=True,
                    cursor_type="row",
                )
            with TabPane("Cart", id="cart_tab"):
                yield DataTable(
                    id="cart_table",
                    zebra_stripes=True,
                    cursor_type="row",
                )
                yield Static("", id="cart_totals")
                yield Horizontal(
                    Select(
                        [("Card", "card"), ("Cash", "cash")],
                        value="card",
                        allow_blank=False,
                        id="payment_method",
                    ),
                    Button(
                        "Complete Payment",
                        variant="success",
                        id="checkout_btn",
                    ),
                    id="checkout_bar",
                )
            with TabPane("Suggestions", id="suggest_tab"):
                yield Horizontal(
                    Input(
                        value=f"{Settings.DEFAULT_BUDGET:g}",
                        placeholder="Budget",
                        id="budget_input",
                    ),
                    Input(
                        value=str(Settings.DEFAULT_SERVINGS),
                        placeholder="Servings",
                        id="servings_input",
                    ),
                    Select(
                        occasion_options,
                        value="daily",
                        allow_blank=False,
                        id="occasion_select",
                    ),
                    id="suggest_params",
                )
                yield Horizontal(*dietary_boxes, id="dietary_toggles")
                yield Horizontal(*preference_boxes, id="preference_toggles")
                yield Horizontal(
                    Button("Get Suggestions", variant="primary", id="suggest_btn"),
                    Button("Add All to Cart", id="add_all_btn"),
                    id="suggest_actions",
                )
                yield Static("", id="suggest_summary")
                yield DataTable(
                    id="suggest_table",
                    zebra_stripes=True,
                    cursor_type="row",
                )
        yield Footer()

    async def on_mount(self) -> None:
        """Configure tables, load the catalog and start watching it."""
        self._table("#catalog_table").add_columns(
            "Name", "Category", "Price", "Stock"
        )
        self._table("#cart_table").add_columns(
            "Name", "Qty", "Unit", "Line Total"
        )
        self._table("#suggest_table").add_columns(
            "Name", "Category", "Price"
        )
        self.query_one("#loader", LoadingIndicator).display = False

        self.session.cart.subscribe(self._on_cart_changed)
        self.session.checkout.on_complete(
            lambda result: self.notify(
                f"Payment complete: {_money(result.summary.grand_total)}"
            )
        )
        await self.action_refresh_catalog()
        self.populate_cart(self.session.cart.cart)

        self.set_interval(0.5, self._refresh_if_stale)
        if isinstance(self.session.store, RestCatalogStore):
            self.set_interval(
                Settings.CATALOG_POLL_INTERVAL, self._poll_store
            )

    def on_unmount(self) -> None:
        self.session.close()

    # ── Helpers ──────────────────────────────────────────

    def _table(self, selector: str) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one(selector, DataTable),
        )

    def _set_status(self, message: str) -> None:
        self.status_message = message
        self.query_one("#status", Static).update(message)

    def _selected_key(self, selector: str) -> str | None:
        """Row key under the cursor of the given table, if any."""
        table = self._table(selector)
        if table.row_count == 0:
            return None
        try:
            cell_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        except CellDoesNotExist:
            return None
        return cell_key.row_key.value

    def _on_cart_changed(self, cart: Cart) -> None:
        self.populate_cart(cart)

    async def _refresh_if_stale(self) -> None:
        if self.session.catalog_stale:
            await self.action_refresh_catalog()

    async def _poll_store(self) -> None:
        store = self.session.store
        if not isinstance(store, RestCatalogStore):
            return
        try:
            await asyncio.to_thread(store.poll_for_changes)
        except CatalogStoreError:
            logger.warning("Catalog poll failed", exc_info=True)

    # ── Rendering ────────────────────────────────────────

    def populate_catalog(self) -> None:
        """Fill the catalog table from the current snapshot."""
        table = self._table("#catalog_table")
        table.clear()
        for p in self.session.catalog.products:
            if p.stock_quantity == 0:
                stock = Text("Out of stock", style="bold red")
            elif p.is_low_stock:
                stock = Text(f"{p.stock_quantity} (low)", style="yellow")
            else:
                stock = str(p.stock_quantity)
            table.add_row(
                p.name[:50],
                p.category,
                _money(p.price),
                stock,
                key=p.id,
            )

    def populate_cart(self, cart: Cart) -> None:
        """Fill the cart table and totals line."""
        table = self._table("#cart_table")
        table.clear()
        for line in cart.items:
            table.add_row(
                line.product.name[:50],
                str(line.quantity),
                _money(line.product.price),
                _money(line.line_total),
                key=line.product.id,
            )
        summary = self.session.checkout.summarize()
        rate = f"{summary.tax_rate * 100:g}%"
        self.query_one("#cart_totals", Static).update(
            f"Items: {summary.item_count}   "
            f"Subtotal: {_money(summary.subtotal)}   "
            f"Tax ({rate}): {_money(summary.tax)}   "
            f"Total: {_money(summary.grand_total)}"
        )
        self.sub_title = f"Cart: {cart.item_count} items"

    def populate_suggestions(self) -> None:
        table = self._table("#suggest_table")
        table.clear()
        for p in self.suggestions.selected:
            table.add_row(p.name[:50], p.category, _money(p.price), key=p.id)
        self.query_one("#suggest_summary", Static).update(
            f"Total: {_money(self.suggestions.total_cost)}   "
            f"{_money(self.suggestions.remaining_budget)} under budget"
            if self.suggestions.selected
            else "No suggestions"
        )

    # ── Events ───────────────────────────────────────────

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "scan_btn":
            await self.submit_scan()
        elif event.button.id == "checkout_btn":
            await self.action_checkout()
        elif event.button.id == "suggest_btn":
            self.generate_suggestions()
        elif event.button.id == "add_all_btn":
            self.add_all_suggestions()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in the scan field (keyboard-wedge scanners send one)."""
        if event.input.id == "scan_input":
            await self.submit_scan()

    async def submit_scan(self) -> None:
        """Resolve the code in the scan field and add it to the cart."""
        scan_input = self.query_one("#scan_input", Input)
        code = scan_input.value.strip()
        scan_input.value = ""
        if not code:
            self.notify("Scan or type a code first", severity="warning")
            return

        self._set_status(f"🔍 Looking up {code}...")
        outcome = await self.session.scanner.handle_decode(code)
        if outcome.status is ScanStatus.ADDED:
            self._set_status(f"✅ {outcome.message}")
        elif outcome.status is ScanStatus.BUSY:
            self._set_status(f"⏳ {outcome.message}")
        else:
            self._set_status(f"❌ {outcome.message}: {code}")
            self.notify(outcome.message, severity="warning")

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Enter on a catalog row adds that product."""
        if event.data_table.id == "catalog_table":
            self.action_add_selected()

    # ── Actions ──────────────────────────────────────────

    async def action_refresh_catalog(self) -> None:
        """Re-list the catalog store and redraw."""
        try:
            await self.session.refresh_catalog()
        except CatalogStoreError as e:
            logger.error("Catalog refresh failed", exc_info=True)
            self._set_status(f"❌ Catalog unavailable: {e}")
            return
        self.populate_catalog()
        self._set_status(
            f"Catalog: {len(self.session.catalog)} products"
        )

    def action_add_selected(self) -> None:
        """Add the highlighted catalog product to the cart."""
        product_id = self._selected_key("#catalog_table")
        if product_id is None:
            self.notify("No product selected", severity="warning")
            return
        if not self.session.add_product(product_id):
            self.notify("Product is out of stock", severity="warning")
            return
        product = self.session.catalog.find_by_id(product_id)
        if product is not None:
            self._set_status(f"✅ Added {product.name}")

    def _adjust_selected(self, delta: int) -> None:
        product_id = self._selected_key("#cart_table")
        if product_id is None:
            return
        line = self.session.cart.cart.find(product_id)
        if line is not None:
            self.session.cart.update_quantity(
                product_id, line.quantity + delta
            )

    def action_increment(self) -> None:
        """Increase the highlighted cart line by one."""
        self._adjust_selected(1)

    def action_decrement(self) -> None:
        """Decrease the highlighted cart line by one (removes at zero)."""
        self._adjust_selected(-1)

    def action_remove_line(self) -> None:
        """Remove the highlighted cart line."""
        product_id = self._selected_key("#cart_table")
        if product_id is not None:
            self.session.cart.remove_from_cart(product_id)

    def action_clear_cart(self) -> None:
        self.session.cart.clear_cart()
        self._set_status("Cart cleared")

    def action_show_suggestions(self) -> None:
        self.query_one("#tabs", TabbedContent).active = "suggest_tab"

    async def action_checkout(self) -> None:
        """Pay for the cart; the loader is shown while payment runs."""
        method = PaymentMethod(
            str(self.query_one("#payment_method", Select).value)
        )
        summary = self.session.checkout.summarize()
        loader = self.query_one("#loader", LoadingIndicator)
        loader.display = True
        self._set_status(
            f"💳 Processing payment of {_money(summary.grand_total)}..."
        )
        try:
            result = await self.session.checkout.checkout(method)
        except CheckoutError as e:
            self.notify(str(e), severity="warning")
            self._set_status("Ready")
            return
        finally:
            loader.display = False

        if result.succeeded:
            self._set_status(
                f"✅ Order complete, paid {_money(summary.grand_total)}"
            )
        else:
            self._set_status(f"❌ {result.message}, press c to retry")
            self.notify(result.message, severity="error")

    def _build_request(self) -> RecommendationRequest:
        budget = float(self.query_one("#budget_input", Input).value or 0)
        servings = int(self.query_one("#servings_input", Input).value or 0)
        occasion = str(self.query_one("#occasion_select", Select).value)
        dietary = [
            label
            for label in Settings.DIETARY_OPTIONS
            if self.query_one(f"#diet_{_slug(label)}", Checkbox).value
        ]
        preferences = [
            label
            for label in Settings.PREFERENCE_OPTIONS
            if self.query_one(f"#pref_{_slug(label)}", Checkbox).value
        ]
        return RecommendationRequest.build(
            budget=budget,
            dietary=dietary,
            preferences=preferences,
            occasion=occasion,
            servings=servings,
        )

    def generate_suggestions(self) -> None:
        """Run the selector with the form values."""
        try:
            request = self._build_request()
        except ValueError as e:
            self.notify(str(e), severity="error")
            return
        self.suggestions = self.session.recommend(request)
        self.populate_suggestions()

    def add_all_suggestions(self) -> None:
        if not self.suggestions.selected:
            self.notify("No suggestions to add", severity="warning")
            return
        self.session.accept_recommendation(self.suggestions)
        self.notify(f"Added {len(self.suggestions.selected)} products")
        self.query_one("#tabs", TabbedContent).active = "cart_tab"
