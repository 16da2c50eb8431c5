# src/models/catalog_snapshot.py

"""Immutable in-memory copy of the product catalog."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace

from src.models.product import Product


@dataclass(frozen=True)
class CatalogSnapshot:
    """All known products at one point in time.

    A snapshot is never edited in place. :meth:`replace` and
    :meth:`with_stock` return a new snapshot with a bumped ``version``.
    """

    products: tuple[Product, ...] = field(
        default_factory=lambda: tuple[Product, ...]()
    )
    version: int = 0

    def __len__(self) -> int:
        return len(self.products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    def replace(self, products: Iterable[Product]) -> "CatalogSnapshot":
        """Return a new snapshot holding *products*."""
        return CatalogSnapshot(
            products=tuple(products), version=self.version + 1
        )

    def with_stock(
        self, product_id: str, new_stock: int
    ) -> "CatalogSnapshot":
        """Return a new snapshot with one product's stock changed."""
        updated = tuple(
            replace(p, stock_quantity=max(0, new_stock))
            if p.id == product_id
            else p
            for p in self.products
        )
        return CatalogSnapshot(products=updated, version=self.version + 1)

    def find_by_id(self, product_id: str) -> Product | None:
        """Look a product up by its id."""
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def find_by_code(self, code: str) -> Product | None:
        """Look a product up by barcode first, then by QR code."""
        code = code.strip()
        if not code:
            return None
        for product in self.products:
            if product.barcode == code:
                return product
        for product in self.products:
            if product.qr_code and product.qr_code == code:
                return product
        return None

    def categories(self) -> list[str]:
        """Distinct non-empty categories, sorted."""
        return sorted({p.category for p in self.products if p.category})

    def in_stock(self) -> list[Product]:
        """Products with at least one unit available."""
        return [p for p in self.products if p.is_in_stock]

    def filter(
        self,
        category: str | None = None,
        text: str | None = None,
    ) -> list[Product]:
        """Filter by exact category and/or case-insensitive name text."""
        needle = (text or "").strip().lower()
        return [
            p
            for p in self.products
            if (category is None or p.category == category)
            and (not needle or needle in p.name.lower())
        ]
