# src/models/product.py

"""Product data model shared by the catalog, cart and recommender."""

from dataclasses import asdict, dataclass
from typing import Any

from src.config.settings import Settings


@dataclass(frozen=True)
class Product:
    """A single catalog entry as delivered by the catalog store.

    Instances are never mutated: a stock change produces a new
    ``Product`` inside a new catalog snapshot.
    """

    id: str
    name: str
    price: float
    barcode: str = ""
    category: str = ""
    stock_quantity: int = 0
    qr_code: str | None = None
    image_url: str | None = None
    description: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_in_stock(self) -> bool:
        """True when at least one unit is available."""
        return self.stock_quantity > 0

    @property
    def is_low_stock(self) -> bool:
        """True for 1..LOW_STOCK_THRESHOLD units left."""
        return 0 < self.stock_quantity <= Settings.LOW_STOCK_THRESHOLD

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Product":
        """Build a Product from a catalog store row.

        Missing optional columns fall back to their defaults; ``price``
        and ``stock_quantity`` are coerced and clamped at zero.
        """
        price = max(0.0, float(record.get("price") or 0.0))
        stock = max(0, int(record.get("stock_quantity") or 0))
        return cls(
            id=str(record["id"]),
            name=str(record.get("name") or ""),
            price=price,
            barcode=str(record.get("barcode") or ""),
            category=str(record.get("category") or ""),
            stock_quantity=stock,
            qr_code=record.get("qr_code") or None,
            image_url=record.get("image_url") or None,
            description=record.get("description") or None,
            created_at=str(record.get("created_at") or ""),
            updated_at=str(record.get("updated_at") or ""),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialise to a plain dict using the store's column names."""
        return asdict(self)
