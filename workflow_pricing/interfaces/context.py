"""Execution context for interface operations."""

import logging
from typing import Optional

from workflow_pricing.core.catalog import PricingCatalog
from workflow_pricing.core.config import get_credit_price, get_default_model, load_pricing_catalog
from workflow_pricing.core.session import InMemorySessionStore

logger = logging.getLogger(__name__)


class InterfaceContext:
    """
    Encapsulates the pricing catalog and session management for interface operations.

    The catalog is loaded lazily on first entry and kept for the lifetime of the
    context. Can be used as an async context manager.
    """

    def __init__(
        self,
        session_store: Optional[InMemorySessionStore] = None,
        catalog: Optional[PricingCatalog] = None,
        credit_price: Optional[float] = None,
        default_model: Optional[str] = None,
    ):
        """
        Initialize the context.

        Args:
            session_store: Optional session store. If not provided, InMemorySessionStore is created.
            catalog: Optional preloaded catalog. If not provided, it is loaded from configuration.
            credit_price: Optional USD price per credit (defaults to CREDIT_PRICE)
            default_model: Optional model for new sessions (defaults to DEFAULT_MODEL)
        """
        self.session_store = session_store or InMemorySessionStore()
        self.catalog = catalog
        self.credit_price = credit_price
        self.default_model = default_model

    async def __aenter__(self) -> "InterfaceContext":
        """
        Load configuration-backed state if it has not been provided.

        Raises:
            ConfigurationError: If the configured catalog is invalid.
        """
        if self.catalog is None:
            self.catalog = load_pricing_catalog()
            logger.info(f"Pricing catalog loaded with {len(self.catalog.model_names())} models")
        if self.credit_price is None:
            self.credit_price = get_credit_price()
        if self.default_model is None:
            self.default_model = get_default_model()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # The catalog and sessions outlive a single operation.
        return None

    def validate(self) -> bool:
        """Check if context is properly initialized."""
        return self.catalog is not None and self.session_store is not None
