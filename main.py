# main.py

"""Entry point for the pos_shop client (TUI or headless CLI)."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("pos_shop.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    occasions = ", ".join(o["id"] for o in Settings.OCCASION_OPTIONS)

    parser = argparse.ArgumentParser(
        prog="pos_shop",
        description="Point-of-sale shopping client.",
        epilog=f"Occasions: {occasions}",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        default=False,
        dest="list_catalog",
        help="Print the product catalog and exit.",
    )
    parser.add_argument(
        "--lookup",
        default=None,
        metavar="CODE",
        help="Look up a barcode or QR code and exit.",
    )
    parser.add_argument(
        "--suggest",
        type=float,
        default=None,
        metavar="BUDGET",
        help="Suggest products that fit BUDGET and exit.",
    )
    parser.add_argument(
        "--occasion",
        default="daily",
        help="Occasion for --suggest (default: daily).",
    )
    parser.add_argument(
        "--dietary",
        default=None,
        help="Comma-separated dietary tags, e.g. Organic,Vegetarian.",
    )
    parser.add_argument(
        "--preferences",
        default=None,
        help="Comma-separated preference tags, e.g. Healthy.",
    )
    parser.add_argument(
        "--servings",
        type=int,
        default=Settings.DEFAULT_SERVINGS,
        help="Number of servings for --suggest.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the suggestion jitter for reproducible output.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    return parser


def _run_tui() -> None:
    """Launch the interactive Textual till."""
    from src.ui.app import PosShopApp

    try:
        app = PosShopApp()
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("pos_shop TUI shutting down")


def main() -> None:
    """Route to the TUI (no flags) or one of the headless commands."""
    log_file = setup_logging()
    logger.info("pos_shop starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    if args.list_catalog:
        from src.cli.runner import run_list

        sys.exit(run_list(args.output_format))
    elif args.lookup is not None:
        from src.cli.runner import run_lookup

        sys.exit(run_lookup(args.lookup, args.output_format))
    elif args.suggest is not None:
        from src.cli.runner import run_suggest

        sys.exit(
            run_suggest(
                budget=args.suggest,
                occasion=args.occasion,
                dietary_csv=args.dietary,
                preferences_csv=args.preferences,
                servings=args.servings,
                seed=args.seed,
                output_format=args.output_format,
            )
        )
    else:
        _run_tui()


if __name__ == "__main__":
    main()
