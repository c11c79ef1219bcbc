"""Shared configuration helpers for the Workflow Pricing Assistant."""

import os
from typing import Optional

from dotenv import load_dotenv

from workflow_pricing.shared.errors import ConfigurationError
from workflow_pricing.shared.formatting import DEFAULT_CREDIT_PRICE
from .catalog import PricingCatalog, default_catalog, load_catalog_file

DEFAULT_MODEL = "Claude 3.5 Sonnet"


def load_environment() -> None:
    """Load environment variables from .env if present."""
    load_dotenv()


def get_pricing_catalog_path() -> Optional[str]:
    """Return the external pricing catalog path, if one is configured."""
    return os.getenv("PRICING_CATALOG_PATH") or None


def load_pricing_catalog() -> PricingCatalog:
    """
    Load the pricing catalog for this process.

    Uses the JSON file at PRICING_CATALOG_PATH when set, otherwise the bundled
    defaults. Either way the catalog is validated before it is returned.

    Raises:
        ConfigurationError: If the configured catalog is unreadable or incomplete.
    """
    path = get_pricing_catalog_path()
    if path:
        return load_catalog_file(path)
    return default_catalog()


def get_default_model() -> str:
    """Return the model used when a workload does not name one."""
    return os.getenv("DEFAULT_MODEL", DEFAULT_MODEL)


def get_credit_price() -> float:
    """Return the USD price of one credit."""
    raw = os.getenv("CREDIT_PRICE")
    if not raw:
        return DEFAULT_CREDIT_PRICE
    try:
        price = float(raw)
    except ValueError:
        raise ConfigurationError(f"CREDIT_PRICE must be a number, got {raw!r}") from None
    if price <= 0:
        raise ConfigurationError("CREDIT_PRICE must be positive")
    return price


def get_flask_secret() -> str:
    """Return the Flask secret key or raise if missing."""
    secret = os.getenv("FLASK_SECRET_KEY")
    if not secret:
        raise ConfigurationError(
            "FLASK_SECRET_KEY environment variable is not set. Set a strong value for production."
        )
    return secret


def get_session_span_idle_seconds(default: float = 1800.0) -> float:
    """Return how long a web session span may sit unused before it is ended."""
    try:
        return float(os.getenv("SESSION_SPAN_IDLE_SECONDS", default))
    except ValueError:
        return default


def get_port(default: int = 8000) -> int:
    """Return the desired port for local hosting."""
    try:
        return int(os.getenv("PORT", default))
    except ValueError:
        return default
