"""Shared exception definitions for the application."""


class PricingAssistantError(Exception):
    """Base exception for Pricing Assistant errors."""

    pass


class ConfigurationError(PricingAssistantError):
    """Raised when configuration or a pricing catalog entry is missing, disabled or invalid."""

    pass


class PreconditionViolation(PricingAssistantError, ValueError):
    """Raised when request input (a workload, an answer or a currency) is rejected before any cost arithmetic runs."""

    pass


class SessionError(PricingAssistantError):
    """Raised when session operations fail."""

    pass


class WorkflowError(PricingAssistantError):
    """Raised when workflow operations fail."""

    pass
