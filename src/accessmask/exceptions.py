"""Exception hierarchy for the permission engine.

All errors inherit from AccessMaskError and carry a stable ``code``.
This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- HTTP status mapping for the authorization middleware

Usage:
    from accessmask.exceptions import NotFoundError, get_http_status

    try:
        allowed = await gate.has_action(user_id, "product", "read")
    except NotFoundError as e:
        status = get_http_status(e)  # 404
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessMaskError",
    "ConfigurationError",
    "EncodingError",
    "NotFoundError",
    "CacheError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Protocol mapping
    "get_http_status",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessMaskError(Exception):
    """Base exception for the permission engine.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessMaskError):
    """Invalid feature catalog or settings."""

    code: str = "CONFIGURATION_ERROR"


class EncodingError(ConfigurationError):
    """A feature id or mask does not fit the 16-bit override format."""

    code: str = "ENCODING_ERROR"


class NotFoundError(AccessMaskError):
    """Requested user does not exist."""

    code: str = "NOT_FOUND"
    message: str = "User not found"


class CacheError(AccessMaskError):
    """Cache backend could not complete a required operation."""

    code: str = "CACHE_ERROR"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[AccessMaskError])

DEFAULT_HTTP_STATUS = 500


class ErrorRegistry:
    """Registry mapping stable error codes to classes and HTTP statuses."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessMaskError]] = {}
        self._statuses: dict[str, int] = {}

    def register(self, code: str, error_cls: type[AccessMaskError], http_status: int = DEFAULT_HTTP_STATUS) -> None:
        self._errors[code] = error_cls
        self._statuses[code] = http_status

    def get(self, code: str) -> type[AccessMaskError] | None:
        return self._errors.get(code)

    def http_status(self, code: str) -> int:
        """Status registered for ``code``; 500 for unregistered codes."""
        return self._statuses.get(code, DEFAULT_HTTP_STATUS)

    def all(self) -> dict[str, type[AccessMaskError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str, http_status: int = DEFAULT_HTTP_STATUS) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_ERROR", http_status=429)
        class QuotaError(AccessMaskError):
            code = "QUOTA_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls, http_status)
        return cls

    return cast(Callable[[_E], _E], decorator)


error_registry.register("INTERNAL_ERROR", AccessMaskError, 500)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError, 500)
error_registry.register("ENCODING_ERROR", EncodingError, 400)
error_registry.register("NOT_FOUND", NotFoundError, 404)
error_registry.register("CACHE_ERROR", CacheError, 503)


# ---- HTTP Mapping -----------------------------------------------------------


def get_http_status(error: AccessMaskError) -> int:
    """Map an AccessMaskError to the HTTP status the middleware should return."""
    return error_registry.http_status(error.code)
