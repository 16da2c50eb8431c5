# tests/test_product_model.py

"""Tests for the Product dataclass."""

import dataclasses
import unittest

from src.models.product import Product


class TestProductModel(unittest.TestCase):
    """Product dataclass unit tests."""

    def test_init_with_all_fields(self) -> None:
        """All fields are stored correctly."""
        product = Product(
            id="7",
            name="Organic Chicken Breast",
            price=8.99,
            barcode="7890123456789",
            category="Meat",
            stock_quantity=12,
            qr_code="QR-7",
            image_url="https://example.com/chicken.jpg",
            description="Free range",
            created_at="2026-01-01T00:00:00Z",
            updated_at="2026-01-02T00:00:00Z",
        )
        self.assertEqual(product.id, "7")
        self.assertEqual(product.price, 8.99)
        self.assertEqual(product.qr_code, "QR-7")
        self.assertEqual(product.updated_at, "2026-01-02T00:00:00Z")

    def test_defaults(self) -> None:
        """Optional fields default to expected values."""
        product = Product(id="1", name="X", price=1.0)
        self.assertEqual(product.barcode, "")
        self.assertEqual(product.category, "")
        self.assertEqual(product.stock_quantity, 0)
        self.assertIsNone(product.qr_code)
        self.assertIsNone(product.image_url)
        self.assertIsNone(product.description)

    def test_frozen(self) -> None:
        """Products cannot be mutated in place."""
        product = Product(id="1", name="X", price=1.0)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            product.price = 2.0  # type: ignore[misc]

    def test_equality(self) -> None:
        """Two products with identical fields are equal."""
        a = Product(id="1", name="A", price=10.0)
        b = Product(id="1", name="A", price=10.0)
        self.assertEqual(a, b)

    # ── Stock helpers ────────────────────────────────────

    def test_in_stock(self) -> None:
        """Stock above zero counts as in stock."""
        self.assertTrue(
            Product(id="1", name="A", price=1.0, stock_quantity=1).is_in_stock
        )
        self.assertFalse(
            Product(id="1", name="A", price=1.0, stock_quantity=0).is_in_stock
        )

    def test_low_stock_band(self) -> None:
        """1..5 units is low stock; 0 and 6 are not."""
        def _p(stock: int) -> Product:
            return Product(id="1", name="A", price=1.0, stock_quantity=stock)

        self.assertFalse(_p(0).is_low_stock)
        self.assertTrue(_p(1).is_low_stock)
        self.assertTrue(_p(5).is_low_stock)
        self.assertFalse(_p(6).is_low_stock)

    # ── Record conversion ────────────────────────────────

    def test_from_record_full_row(self) -> None:
        """A complete store row maps onto every field."""
        row = {
            "id": 3,
            "name": "Greek Yogurt",
            "price": "4.99",
            "barcode": "3456789012345",
            "qr_code": "QR-3",
            "category": "Dairy",
            "stock_quantity": 30,
            "image_url": None,
            "description": "Plain",
            "created_at": "a",
            "updated_at": "b",
        }
        product = Product.from_record(row)
        self.assertEqual(product.id, "3")
        self.assertEqual(product.price, 4.99)
        self.assertEqual(product.stock_quantity, 30)
        self.assertEqual(product.qr_code, "QR-3")
        self.assertIsNone(product.image_url)

    def test_from_record_clamps_negatives(self) -> None:
        """Negative price or stock from the store is clamped to zero."""
        product = Product.from_record(
            {"id": "x", "name": "Bad", "price": -1, "stock_quantity": -4}
        )
        self.assertEqual(product.price, 0.0)
        self.assertEqual(product.stock_quantity, 0)

    def test_from_record_missing_optionals(self) -> None:
        """Missing columns fall back to defaults."""
        product = Product.from_record({"id": "9", "name": "Salmon"})
        self.assertEqual(product.price, 0.0)
        self.assertEqual(product.barcode, "")
        self.assertIsNone(product.qr_code)

    def test_to_record_round_trip(self) -> None:
        """to_record output rebuilds an equal product."""
        product = Product(
            id="2", name="Bread", price=3.49, barcode="234",
            category="Bakery", stock_quantity=25,
        )
        self.assertEqual(Product.from_record(product.to_record()), product)


if __name__ == "__main__":
    unittest.main()
