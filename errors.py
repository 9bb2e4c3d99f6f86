"""Typed failures raised by gateway components.

Each carries the HTTP status the router answers with; the message is returned
to the caller verbatim in ``{"error": message}``.
"""


class GatewayError(RuntimeError):
    """Base class for failures that map onto an HTTP status."""
    status = 500


class AuthError(GatewayError):
    status = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class QuotaExceeded(GatewayError):
    status = 429

    def __init__(self, limit: int) -> None:
        super().__init__(f"Rate limit exceeded ({limit} requests/day)")
        self.limit = limit


class ValidationError(GatewayError):
    status = 400


class ProviderError(GatewayError):
    """Completion provider returned a non-success status or an unusable payload."""
    status = 500

    def __init__(self, message: str, upstream_status: int = 0, body: str = "") -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class RouteNotFound(GatewayError):
    status = 404

    def __init__(self, message: str = "Not Found") -> None:
        super().__init__(message)
