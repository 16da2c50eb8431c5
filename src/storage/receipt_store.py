# src/storage/receipt_store.py

"""Writes completed-sale receipts to disk."""

import json
import logging
from pathlib import Path

from src.config.settings import Settings
from src.models.checkout import CheckoutResult

logger = logging.getLogger("pos_shop.storage")


def receipt_to_dict(result: CheckoutResult) -> dict[str, object]:
    """Serialise a checkout result to plain JSON-friendly data."""
    return {
        "status": result.status.value,
        "method": result.method,
        "completed_at": result.completed_at.isoformat(),
        "items": [
            {
                "id": line.product.id,
                "name": line.product.name,
                "barcode": line.product.barcode,
                "unit_price": line.product.price,
                "quantity": line.quantity,
                "line_total": round(line.line_total, 2),
            }
            for line in result.lines
        ],
        "subtotal": round(result.summary.subtotal, 2),
        "tax_rate": result.summary.tax_rate,
        "tax": round(result.summary.tax, 2),
        "grand_total": round(result.summary.grand_total, 2),
    }


def format_receipt(result: CheckoutResult) -> str:
    """Render a plain-text receipt, one line per cart line."""
    sym = Settings.CURRENCY_SYMBOL
    width = 40
    lines = [
        "RECEIPT".center(width),
        result.completed_at.strftime("%Y-%m-%d %H:%M:%S").center(width),
        "-" * width,
    ]
    for line in result.lines:
        label = f"{line.quantity} x {line.product.name}"[: width - 12]
        lines.append(f"{label:<{width - 12}}{sym}{line.line_total:>11.2f}")
    s = result.summary
    rate = f"{s.tax_rate * 100:g}%"
    lines += [
        "-" * width,
        f"{'Subtotal':<{width - 12}}{sym}{s.subtotal:>11.2f}",
        f"{'Tax (' + rate + ')':<{width - 12}}{sym}{s.tax:>11.2f}",
        f"{'TOTAL':<{width - 12}}{sym}{s.grand_total:>11.2f}",
        f"Paid by {result.method}",
    ]
    return "\n".join(lines)


class ReceiptStore:
    """Saves one timestamped JSON file per completed sale."""

    def __init__(self, receipts_dir: Path | None = None) -> None:
        self.receipts_dir: Path = receipts_dir or Settings.RECEIPTS_DIR
        self.receipts_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "ReceiptStore initialised, receipts_dir=%s", self.receipts_dir
        )

    def save_receipt(self, result: CheckoutResult) -> Path:
        """Write *result* as JSON and return the file path."""
        timestamp = result.completed_at.strftime("%Y%m%d_%H%M%S_%f")
        filepath = self.receipts_dir / f"receipt_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(receipt_to_dict(result), f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved receipt for %d lines (%.2f) to %s",
            len(result.lines),
            result.summary.grand_total,
            filepath,
        )
        return filepath
