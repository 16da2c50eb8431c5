# src/config/settings.py

"""Central configuration for the pos_shop client."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pos_shop client."""

    # --- Catalog store ---
    CATALOG_URL: str = os.getenv("POS_CATALOG_URL", "")
    CATALOG_API_KEY: str = os.getenv("POS_CATALOG_API_KEY", "")
    CATALOG_TABLE: str = "products"
    CATALOG_POLL_INTERVAL: float = 15.0  # Seconds between REST polls
    REQUEST_DELAY: float = 0.5          # Base backoff between retries
    REQUEST_TIMEOUT: int = 10           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"

    # --- Checkout ---
    TAX_RATE: float = float(os.getenv("POS_TAX_RATE", "0.08"))
    PAYMENT_DELAY: float = float(os.getenv("POS_PAYMENT_DELAY", "3.0"))
    UPDATE_STOCK_ON_CHECKOUT: bool = True
    CURRENCY_SYMBOL: str = "$"

    # --- Catalog display ---
    LOW_STOCK_THRESHOLD: int = 5

    # --- Recommendations ---
    MAX_RECOMMENDATIONS: int = 8
    SCORE_JITTER: float = 0.3           # Width of the random score term
    DEFAULT_BUDGET: float = 50.0
    DEFAULT_SERVINGS: int = 2
    DIETARY_OPTIONS: list[str] = [
        "Vegetarian",
        "Vegan",
        "Gluten-Free",
        "Dairy-Free",
        "Keto",
        "Low-Carb",
        "Organic",
    ]
    PREFERENCE_OPTIONS: list[str] = [
        "Quick & Easy",
        "Healthy",
        "Budget-Friendly",
        "Gourmet",
        "Local",
        "Seasonal",
    ]
    OCCASION_OPTIONS: list[dict[str, str]] = [
        {"id": "daily", "label": "Daily Meals"},
        {"id": "party", "label": "Party/Event"},
        {"id": "romantic", "label": "Romantic Dinner"},
        {"id": "family", "label": "Family Gathering"},
        {"id": "snacks", "label": "Snacks & Treats"},
    ]

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
    RECEIPTS_DIR: Path = BASE_DIR / "receipts"

    @classmethod
    def use_rest_catalog(cls) -> bool:
        """Return True when a remote catalog store is configured."""
        return bool(cls.CATALOG_URL)
