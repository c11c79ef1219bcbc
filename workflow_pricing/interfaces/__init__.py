"""Interface abstraction layer for CLI and Web applications."""

from .base import PricingInterface
from .context import InterfaceContext
from .handlers import WorkflowHandler

__all__ = ["PricingInterface", "InterfaceContext", "WorkflowHandler"]
