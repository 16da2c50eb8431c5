# src/cli/runner.py

"""Headless CLI commands: list the catalog, look up a code, suggest a basket."""

import json
import logging
import random
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.errors import CatalogStoreError
from src.models.product import Product
from src.models.recommendation import RecommendationRequest
from src.services.recommendation_selector import RecommendationSelector
from src.storage.catalog_store import CatalogStore, create_catalog_store

logger = logging.getLogger("pos_shop.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated flag value, dropping blanks."""
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _products_to_dicts(products: list[Product]) -> list[dict[str, object]]:
    """Serialise products to plain dicts for JSON output."""
    return [
        {
            "id": p.id,
            "name": p.name,
            "price": p.price,
            "barcode": p.barcode,
            "category": p.category,
            "stock_quantity": p.stock_quantity,
        }
        for p in products
    ]


def _print_table(products: list[Product], title: str) -> None:
    """Render a Rich table of products to stdout."""
    sym = Settings.CURRENCY_SYMBOL
    table = Table(title=title, show_lines=False, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=40)
    table.add_column("Category", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stock", justify="right")
    table.add_column("Barcode", style="dim")

    for idx, p in enumerate(products, 1):
        if p.stock_quantity == 0:
            stock = "[red]out[/red]"
        elif p.is_low_stock:
            stock = f"[yellow]{p.stock_quantity}[/yellow]"
        else:
            stock = str(p.stock_quantity)
        table.add_row(
            str(idx),
            p.name,
            p.category or "—",
            f"{sym}{p.price:,.2f}",
            stock,
            p.barcode,
        )

    Console().print(table)


def _emit(products: list[Product], output_format: str, title: str) -> None:
    if output_format == "table":
        _print_table(products, title)
    else:
        json.dump(
            _products_to_dicts(products),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")


def run_list(
    output_format: str, store: CatalogStore | None = None
) -> int:
    """Print the whole catalog ordered by name."""
    store = store or create_catalog_store()
    try:
        products = store.list_products()
    except CatalogStoreError as exc:
        logger.error("Catalog listing failed: %s", exc, exc_info=True)
        _err.print(f"[red]Catalog unavailable: {exc}[/red]")
        return 1
    if not products:
        _err.print("[yellow]Catalog is empty.[/yellow]")
        return 1
    _emit(products, output_format, "Catalog")
    return 0


def run_lookup(
    code: str,
    output_format: str,
    store: CatalogStore | None = None,
) -> int:
    """Resolve a scanned code (barcode first, then QR code)."""
    store = store or create_catalog_store()
    try:
        product = store.get_by_barcode(code) or store.get_by_qr_code(code)
    except CatalogStoreError as exc:
        # Same rule as the till: an unreachable store is a miss
        logger.warning("Lookup for %s failed: %s", code, exc)
        product = None
    if product is None:
        _err.print(f"[yellow]No product for code {code}[/yellow]")
        return 1
    _emit([product], output_format, f"Lookup {code}")
    return 0


def run_suggest(
    budget: float,
    occasion: str,
    dietary_csv: str | None,
    preferences_csv: str | None,
    servings: int,
    seed: int | None,
    output_format: str,
    store: CatalogStore | None = None,
) -> int:
    """Print a budget-constrained suggestion list."""
    try:
        request = RecommendationRequest.build(
            budget=budget,
            dietary=split_csv(dietary_csv),
            preferences=split_csv(preferences_csv),
            occasion=occasion,
            servings=servings,
        )
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    store = store or create_catalog_store()
    try:
        catalog = store.list_products()
    except CatalogStoreError as exc:
        logger.error("Catalog listing failed: %s", exc, exc_info=True)
        _err.print(f"[red]Catalog unavailable: {exc}[/red]")
        return 1

    selector = RecommendationSelector(random.Random(seed))
    result = selector.select(catalog, request)
    sym = Settings.CURRENCY_SYMBOL
    _err.print(
        f"[bold]Budget:[/bold] {sym}{request.budget:.2f}  "
        f"[dim]occasion={request.occasion.value} "
        f"servings={request.servings}[/dim]"
    )
    if not result.selected:
        _err.print("[yellow]Nothing fits this budget.[/yellow]")
        return 1

    _err.print(
        f"[green]✓ {len(result.selected)} products for "
        f"{sym}{result.total_cost:.2f} "
        f"({sym}{result.remaining_budget:.2f} under budget)[/green]"
    )
    _emit(result.selected, output_format, "Suggestions")
    return 0
