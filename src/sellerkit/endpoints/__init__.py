"""Base class for endpoint wrappers."""

from sellerkit.endpoints.base import Endpoint

__all__ = ["Endpoint"]
