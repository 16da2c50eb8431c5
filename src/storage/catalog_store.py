# src/storage/catalog_store.py

"""Catalog store adapters: a seeded in-memory store and a REST client.

Both implement the same small contract: list products ordered by name,
look one up by barcode or QR code, write back a stock level, and notify
subscribers that *something* changed (the subscriber re-lists).
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import CatalogStoreError, CatalogUnavailableError
from src.models.product import Product

logger = logging.getLogger("pos_shop.catalog")

ChangeListener = Callable[[], None]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CatalogStore(Protocol):
    """Contract of the external product store."""

    def list_products(self) -> list[Product]: ...

    def get_by_barcode(self, code: str) -> Product | None: ...

    def get_by_qr_code(self, code: str) -> Product | None: ...

    def update_stock(
        self, product_id: str, new_quantity: int
    ) -> Product: ...

    def subscribe(
        self, listener: ChangeListener
    ) -> Callable[[], None]: ...


class _ListenerMixin:
    """Shared change-listener bookkeeping."""

    def _init_listeners(self) -> None:
        self._listeners: list[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener*; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.error(
                    "Catalog change listener failed", exc_info=True
                )


# Demo grocery catalog used when no remote store is configured
DEMO_PRODUCTS: list[dict[str, Any]] = [
    {"id": "1", "name": "Organic Bananas", "price": 2.99,
     "barcode": "1234567890123", "category": "Fruits",
     "stock_quantity": 50},
    {"id": "2", "name": "Whole Grain Bread", "price": 3.49,
     "barcode": "2345678901234", "category": "Bakery",
     "stock_quantity": 25},
    {"id": "3", "name": "Greek Yogurt", "price": 4.99,
     "barcode": "3456789012345", "category": "Dairy",
     "stock_quantity": 30},
    {"id": "4", "name": "Fresh Apples", "price": 3.99,
     "barcode": "4567890123456", "category": "Fruits",
     "stock_quantity": 40},
    {"id": "5", "name": "Premium Coffee", "price": 12.99,
     "barcode": "5678901234567", "category": "Beverages",
     "stock_quantity": 15},
    {"id": "6", "name": "Organic Spinach", "price": 2.49,
     "barcode": "6789012345678", "category": "Vegetables",
     "stock_quantity": 20},
    {"id": "7", "name": "Organic Chicken Breast", "price": 8.99,
     "barcode": "7890123456789", "category": "Meat",
     "stock_quantity": 12},
    {"id": "8", "name": "Artisan Pasta", "price": 4.49,
     "barcode": "8901234567890", "category": "Pantry",
     "stock_quantity": 35},
    {"id": "9", "name": "Fresh Salmon Fillet", "price": 15.99,
     "barcode": "9012345678901", "category": "Seafood",
     "stock_quantity": 8},
    {"id": "10", "name": "Organic Quinoa", "price": 6.99,
     "barcode": "0123456789012", "category": "Grains",
     "stock_quantity": 22},
]


class InMemoryCatalogStore(_ListenerMixin):
    """Process-local catalog store, seeded with the demo products."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._init_listeners()
        if products is None:
            stamp = _now_iso()
            products = [
                Product.from_record(
                    {**row, "created_at": stamp, "updated_at": stamp}
                )
                for row in DEMO_PRODUCTS
            ]
        self._products: dict[str, Product] = {p.id: p for p in products}

    def list_products(self) -> list[Product]:
        """All products ordered by name."""
        return sorted(self._products.values(), key=lambda p: p.name)

    def get_by_barcode(self, code: str) -> Product | None:
        """Look up by barcode; ``None`` when unknown."""
        for product in self._products.values():
            if product.barcode == code:
                return product
        return None

    def get_by_qr_code(self, code: str) -> Product | None:
        """Look up by QR code; ``None`` when unknown."""
        for product in self._products.values():
            if product.qr_code and product.qr_code == code:
                return product
        return None

    def update_stock(self, product_id: str, new_quantity: int) -> Product:
        """Write back a stock level and notify subscribers."""
        current = self._products.get(product_id)
        if current is None:
            msg = f"Unknown product id: {product_id}"
            raise CatalogStoreError(msg)
        record = current.to_record()
        record.update(
            stock_quantity=max(0, new_quantity), updated_at=_now_iso()
        )
        updated = Product.from_record(record)
        self._products[product_id] = updated
        logger.info(
            "Stock for %s set to %d", product_id, updated.stock_quantity
        )
        self._notify()
        return updated

    def replace_all(self, products: list[Product]) -> None:
        """Swap the whole catalog (e.g. an import) and notify."""
        self._products = {p.id: p for p in products}
        self._notify()


class RestCatalogStore(_ListenerMixin):
    """PostgREST-style HTTP catalog store (e.g. a Supabase project).

    Requests go through a curl_cffi session with bounded retries and
    backoff. A store that cannot be reached raises
    :class:`CatalogUnavailableError`; an empty lookup returns ``None``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        table: str | None = None,
    ) -> None:
        self._init_listeners()
        self.settings = Settings()
        self.base_url = (base_url or self.settings.CATALOG_URL).rstrip("/")
        self.table = table or self.settings.CATALOG_TABLE
        key = api_key if api_key is not None else self.settings.CATALOG_API_KEY
        self.headers: dict[str, str] = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._fingerprint: frozenset[tuple[str, str, int]] | None = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    # ── HTTP ─────────────────────────────────────────────

    def _request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        """Send a request with retries and return the decoded JSON body.

        4xx responses other than 408/429 are not retried and raise
        :class:`CatalogStoreError`.
        """
        headers = {**self.headers, **(extra_headers or {})}
        last_error = ""
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.request(
                    method,  # type: ignore[arg-type]
                    url,
                    headers=headers,
                    json=payload,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
            except Exception as exc:
                last_error = str(exc)
                logger.warning(
                    "Catalog %s error on attempt %d: %s",
                    method,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))
                continue

            if 200 <= resp.status_code < 300:
                if not resp.text.strip():
                    return None
                try:
                    return resp.json()
                except ValueError as exc:
                    # A login portal or proxy page answering in place of
                    # the store; treated like an outage and retried.
                    last_error = f"non-JSON body ({exc})"
                    logger.warning(
                        "Catalog %s returned a non-JSON body on attempt %d",
                        method,
                        attempt + 1,
                    )
                    time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))
                    continue

            last_error = f"HTTP {resp.status_code}"
            logger.warning(
                "Catalog %s returned HTTP %d on attempt %d",
                method,
                resp.status_code,
                attempt + 1,
            )
            if 400 <= resp.status_code < 500 and resp.status_code not in (
                408,
                429,
            ):
                msg = f"Catalog store rejected {method} {url}: {last_error}"
                raise CatalogStoreError(msg)
            time.sleep(self.settings.REQUEST_DELAY * (attempt + 1))

        msg = f"Catalog store unreachable after retries: {last_error}"
        raise CatalogUnavailableError(msg)

    def _get_rows(self, query: str) -> list[dict[str, Any]]:
        rows = self._request("GET", f"{self.endpoint}?{query}")
        if not isinstance(rows, list):
            return []
        return [r for r in rows if isinstance(r, dict)]

    @staticmethod
    def _to_product(row: Any) -> Product:
        if not isinstance(row, dict):
            msg = f"Expected a product row, got {type(row).__name__}"
            raise CatalogStoreError(msg)
        try:
            return Product.from_record(row)
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed product row {row.get('id', '?')!r}: {exc}"
            raise CatalogStoreError(msg) from exc

    def _get_single(self, column: str, code: str) -> Product | None:
        rows = self._get_rows(
            f"select=*&{column}=eq.{quote(code, safe='')}&limit=1"
        )
        if not rows:
            logger.debug("No product with %s=%s", column, code)
            return None
        return self._to_product(rows[0])

    # ── Contract ─────────────────────────────────────────

    def list_products(self) -> list[Product]:
        """All products ordered by name.

        Rows that cannot be read as a product are skipped with a warning
        so one bad record does not hide the rest of the catalog.
        """
        rows = self._get_rows("select=*&order=name.asc")
        products: list[Product] = []
        for row in rows:
            try:
                products.append(self._to_product(row))
            except CatalogStoreError as exc:
                logger.warning("Skipped row: %s", exc)
        logger.info("Listed %d products from %s", len(products), self.base_url)
        return products

    def get_by_barcode(self, code: str) -> Product | None:
        return self._get_single("barcode", code)

    def get_by_qr_code(self, code: str) -> Product | None:
        return self._get_single("qr_code", code)

    def update_stock(self, product_id: str, new_quantity: int) -> Product:
        """PATCH a product's stock level and return the updated row."""
        rows = self._request(
            "PATCH",
            f"{self.endpoint}?id=eq.{quote(product_id, safe='')}",
            payload={
                "stock_quantity": max(0, new_quantity),
                "updated_at": _now_iso(),
            },
            extra_headers={"Prefer": "return=representation"},
        )
        if not isinstance(rows, list) or not rows:
            msg = f"Unknown product id: {product_id}"
            raise CatalogStoreError(msg)
        self._notify()
        return self._to_product(rows[0])

    def poll_for_changes(self) -> bool:
        """Re-list the catalog and notify subscribers if it changed.

        The first poll only records a baseline. Returns True when a
        change notification was sent.
        """
        products = self.list_products()
        fingerprint = frozenset(
            (p.id, p.updated_at, p.stock_quantity) for p in products
        )
        previous, self._fingerprint = self._fingerprint, fingerprint
        if previous is None or previous == fingerprint:
            return False
        logger.info("Catalog change detected by polling")
        self._notify()
        return True


def create_catalog_store() -> InMemoryCatalogStore | RestCatalogStore:
    """Return the REST store when configured, else the demo store."""
    if Settings.use_rest_catalog():
        logger.info("Using REST catalog store at %s", Settings.CATALOG_URL)
        return RestCatalogStore()
    logger.info("No POS_CATALOG_URL set, using the demo catalog")
    return InMemoryCatalogStore()
