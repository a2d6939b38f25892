"""
errors.py — Error Taxonomy

Every failure the pipeline knows how to classify is a CheckoutError carrying
the HTTP status it maps to. Anything else is reported as an internal error
by the API layer.
"""

from typing import Any, Optional


class CheckoutError(Exception):
    """Base class for classified pipeline failures."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict:
        return {"error": self.message}


class ValidationError(CheckoutError):
    """Malformed or insufficient caller input (missing price, no valid items)."""
    status_code = 400


class NotFoundError(CheckoutError):
    """A handle yields no product, or the product has no purchasable variant."""
    status_code = 400


class ConfigurationError(CheckoutError):
    """Required server credentials are absent."""
    status_code = 500

    def to_body(self) -> dict:
        return {"error": "Server configuration error"}


class UpstreamError(CheckoutError):
    """
    The Shopify Admin API answered with a non-success status or an error list.

    The upstream status is forwarded verbatim to the caller together with
    the upstream error details.
    """
    status_code = 502

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message, status_code)
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InternalError(CheckoutError):
    """Anything unclassified. The underlying message is returned for diagnostics."""
    status_code = 500

    def to_body(self) -> dict:
        return {"error": "Internal server error", "message": self.message}


class NotificationError(CheckoutError):
    """Mail delivery failed. Logged by the notification path, never returned to the caller."""
