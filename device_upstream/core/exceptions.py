"""
Exceptions raised by the upstream pipeline and its collaborators.
"""

from typing import Optional


class UpstreamError(Exception):
    """Base class for upstream pipeline errors."""
    pass


class DeviceNotFoundError(UpstreamError):
    """Raised when a device reference does not resolve."""

    def __init__(self, message: str, product_key: Optional[str] = None,
                 device_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.product_key = product_key
        self.device_name = device_name


class InvalidArgumentError(UpstreamError, ValueError):
    """Raised when a request fails validation before any side effect runs."""
    pass


class TransportError(UpstreamError):
    """Raised by broker publishers when a message cannot be handed off."""
    pass
