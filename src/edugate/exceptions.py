"""Unified exception hierarchy for edugate.

All gate failures inherit from EdugateError. This module provides:
- Exception hierarchy with stable error codes, HTTP status and reason codes
- ErrorRegistry for protocol mapping
- ``failure_body()`` for request/response transports
- gRPC error handler decorators (unary + streaming)

Usage in services:
    from edugate.exceptions import (
        AuthorizationDeniedError,
        EdugateError,
        failure_body,
        grpc_error_handler,
    )
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar, cast

from .permissions.constants import ReasonCode

__all__ = [
    # Base hierarchy
    "EdugateError",
    "ConfigurationError",
    "InvalidIdentifierError",
    "AuthenticationMissingError",
    "AuthorizationDeniedError",
    "ResourceNotFoundError",
    "BrokenChainError",
    "StoreFailureError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Transport helpers
    "failure_body",
    "get_grpc_status_code",
    "grpc_error_handler",
    "grpc_stream_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class EdugateError(Exception):
    """Base exception for all edugate failures.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "PERMISSION_DENIED").
        message: Human-readable error description.
        status_code: HTTP-equivalent status.
        reason_code: Decision reason, when the failure came out of the gate.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"
    status_code: int = 500
    reason_code: Optional[ReasonCode] = None

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(EdugateError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class InvalidIdentifierError(EdugateError):
    """Resource id parameter is not a positive integer."""

    code: str = "VALIDATION_ERROR"
    message: str = "Invalid id"
    status_code: int = 400


class AuthenticationMissingError(EdugateError):
    """No principal attached to the request."""

    code: str = "UNAUTHENTICATED"
    message: str = "User not authenticated"
    status_code: int = 401


class AuthorizationDeniedError(EdugateError):
    """Policy denial. Carries the deny reason code."""

    code: str = "PERMISSION_DENIED"
    message: str = "Access denied"
    status_code: int = 403

    def __init__(self, reason_code: ReasonCode, message: str | None = None, **kwargs: Any) -> None:
        self.reason_code = reason_code
        super().__init__(message, **kwargs)


class ResourceNotFoundError(EdugateError):
    """The requested resource does not exist."""

    code: str = "NOT_FOUND"
    message: str = "Resource not found"
    status_code: int = 404
    reason_code: Optional[ReasonCode] = ReasonCode.RESOURCE_NOT_FOUND


class BrokenChainError(ResourceNotFoundError):
    """A parent reference in the ownership chain is null or dangling.

    Surfaces as 404 to clients but signals orphaned data, not a client error.
    """

    code: str = "BROKEN_CHAIN"
    reason_code: Optional[ReasonCode] = ReasonCode.BROKEN_CHAIN


class StoreFailureError(EdugateError):
    """The resource store failed. Never a deny; callers may retry."""

    code: str = "STORE_FAILURE"
    message: str = "Resource store unavailable"
    status_code: int = 500


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[EdugateError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[EdugateError]] = {}

    def register(self, code: str, error_cls: type[EdugateError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[EdugateError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[EdugateError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(EdugateError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", EdugateError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("VALIDATION_ERROR", InvalidIdentifierError)
error_registry.register("UNAUTHENTICATED", AuthenticationMissingError)
error_registry.register("PERMISSION_DENIED", AuthorizationDeniedError)
error_registry.register("NOT_FOUND", ResourceNotFoundError)
error_registry.register("BROKEN_CHAIN", BrokenChainError)
error_registry.register("STORE_FAILURE", StoreFailureError)


# ---- Request/Response Rendering ---------------------------------------------


def failure_body(error: EdugateError, *, include_details: bool = False) -> dict[str, Any]:
    """Render a gate failure as ``{statusCode, reasonCode, message}``.

    Production responses omit internal detail: a broken chain reads as a
    plain not-found and store errors are not echoed. With
    ``include_details=True`` the internal reason and underlying error are added.
    """
    reason = error.reason_code
    if not include_details and reason == ReasonCode.BROKEN_CHAIN:
        reason = ReasonCode.RESOURCE_NOT_FOUND

    body: dict[str, Any] = {
        "statusCode": error.status_code,
        "reasonCode": reason.value if reason is not None else None,
        "message": error.message,
    }
    if include_details:
        details: dict[str, Any] = {"code": error.code}
        if error.reason_code is not None:
            details["reasonCode"] = error.reason_code.value
        if error.__cause__ is not None:
            details["cause"] = f"{type(error.__cause__).__name__}: {error.__cause__}"
        details.update({k: str(v) for k, v in error.details.items()})
        body["details"] = details
    return body


# ---- gRPC Error Handling Utilities ------------------------------------------


def get_grpc_status_code(error: EdugateError) -> Any:
    """Map EdugateError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "VALIDATION_ERROR": grpc.StatusCode.INVALID_ARGUMENT,
        "UNAUTHENTICATED": grpc.StatusCode.UNAUTHENTICATED,
        "PERMISSION_DENIED": grpc.StatusCode.PERMISSION_DENIED,
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "BROKEN_CHAIN": grpc.StatusCode.NOT_FOUND,
        "STORE_FAILURE": grpc.StatusCode.UNAVAILABLE,
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)


def _log_failure(method_name: str, e: EdugateError) -> None:
    error_message = f"[{e.code}] {e.message}"
    extra = {
        "error_code": e.code,
        "reason_code": e.reason_code.value if e.reason_code else None,
        "error_details": e.details,
    }
    if isinstance(e, (BrokenChainError, StoreFailureError)):
        logger.error("%s failed: %s", method_name, error_message, extra=extra)
    else:
        logger.warning("%s failed: %s", method_name, error_message, extra=extra)


def _trailing_metadata(e: EdugateError) -> list[tuple[str, str]]:
    metadata = [("error-code", e.code)]
    if e.reason_code is not None:
        metadata.append(("reason-code", e.reason_code.value))
    return metadata


def grpc_error_handler(method):
    """Decorator for unary gRPC service methods with proper error handling.

    Catches EdugateError and sets appropriate gRPC status codes.
    Logs errors and ensures consistent error response format.

    Usage:
        @grpc_error_handler
        async def GetMilestone(self, request, context):
            result = await self.gate.authorize(...)
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except EdugateError as e:
            _log_failure(method.__name__, e)
            context.set_trailing_metadata(_trailing_metadata(e))
            await context.abort(get_grpc_status_code(e), f"[{e.code}] {e.message}")
            return  # Explicit return — prevent implicit None response

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return  # Explicit return — prevent implicit None response

    return wrapper


def grpc_stream_error_handler(method):
    """Decorator for streaming gRPC service methods with proper error handling.

    Works with async generator methods that use 'yield'.

    Usage:
        @grpc_stream_error_handler
        async def ListMilestones(self, request, context):
            yield item1
            yield item2
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            async for item in method(self, request, context):
                yield item
        except EdugateError as e:
            _log_failure(method.__name__, e)
            context.set_trailing_metadata(_trailing_metadata(e))
            await context.abort(get_grpc_status_code(e), f"[{e.code}] {e.message}")
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return

    return wrapper
