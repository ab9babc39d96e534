"""Portal REST API client."""

from .client import ApiClient, ApiError

__all__ = ["ApiClient", "ApiError"]
