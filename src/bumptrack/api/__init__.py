"""REST transport, wire schemas and endpoint wrappers."""

from bumptrack.api.client import ApiClient, ApiError, AuthError, RequestError

__all__ = ["ApiClient", "ApiError", "AuthError", "RequestError"]
