#!/usr/bin/env python3
"""Exception Hierarchy for the Honeybadger MCP gateway.

Every failure a tool call can hit is represented by one of these classes.
The tool registry catches them at the operation boundary and turns
``user_message`` into an error result, so each class carries a fixed,
actionable message for the agent on the other side of the protocol.

Design Principles:
    - All exceptions inherit from HoneybadgerError base class
    - Exceptions preserve context (original error, timestamps, details)
    - Service errors keep the status code and the service's own message
    - ``user_message`` is safe to show to the caller (never contains the key)

Exception Hierarchy:
    HoneybadgerError (base)
    ├── ConfigurationError (API key missing at call time)
    ├── ValidationError (parameter contract violation, never dispatched)
    ├── ConfirmationRequiredError (destructive call without confirm=true)
    ├── APIError (response received with non-2xx status)
    │   ├── AuthenticationError (401)
    │   ├── PermissionDeniedError (403)
    │   ├── NotFoundError (404)
    │   ├── UnprocessableEntityError (422)
    │   ├── RateLimitError (429)
    │   └── ServiceError (any other status)
    └── NetworkError (no response received)
        ├── ConnectionError
        └── TimeoutError
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class HoneybadgerError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "NOT_FOUND")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether calling again later might succeed
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    @property
    def user_message(self) -> str:
        """Message returned to the tool caller."""
        return self.message

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Local Errors (raised before any network call)
# ============================================

class ConfigurationError(HoneybadgerError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


class ValidationError(HoneybadgerError):
    """Raised when tool parameters violate the operation's contract.

    Attributes:
        errors: One ``(field, reason)`` pair per failing field
    """

    def __init__(
        self,
        errors: list[tuple[str, str]],
        operation: Optional[str] = None,
        **kwargs,
    ):
        self.errors = list(errors)
        self.operation = operation
        clauses = "; ".join(
            f"{field}: {reason}" if field else reason for field, reason in self.errors
        )
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        details["fields"] = [field for field, _ in self.errors if field]
        super().__init__(
            f"Invalid parameters: {clauses}",
            code="VALIDATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.errors if field]


class ConfirmationRequiredError(HoneybadgerError):
    """Raised when a destructive operation is called without confirm=true."""

    def __init__(self, operation: str, action: str, **kwargs):
        message = (
            f"Confirmation required: {operation} will {action}. "
            "Call again with confirm=true to proceed."
        )
        details = kwargs.pop("details", {})
        details["operation"] = operation
        super().__init__(
            message,
            code="CONFIRMATION_REQUIRED",
            details=details,
            recoverable=False,
            **kwargs,
        )
        self.operation = operation


# ============================================
# API Errors (response received, non-2xx)
# ============================================

class APIError(HoneybadgerError):
    """Base class for API response errors.

    Attributes:
        status_code: HTTP status code
        endpoint: API path that was called
        service_message: Error text extracted from the response body
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
        service_message: Optional[str] = None,
        method: str = "GET",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        if method:
            details["method"] = method
        if service_message:
            details["service_message"] = service_message[:500]

        kwargs.setdefault("recoverable", status_code in (429, 500, 502, 503, 504))
        kwargs.setdefault("code", f"API_ERROR_{status_code}")

        super().__init__(
            message,
            details=details,
            **kwargs,
        )
        self.status_code = status_code
        self.endpoint = endpoint
        self.service_message = service_message
        self.method = method


class AuthenticationError(APIError):
    """Raised on HTTP 401. The response body is deliberately ignored."""

    def __init__(self, **kwargs):
        kwargs.setdefault("status_code", 401)
        kwargs.pop("service_message", None)
        super().__init__(
            "Authentication failed: check your HONEYBADGER_API_KEY",
            code="AUTHENTICATION_FAILED",
            recoverable=False,
            **kwargs,
        )


class PermissionDeniedError(APIError):
    """Raised on HTTP 403."""

    def __init__(self, service_message: str = "", **kwargs):
        kwargs.setdefault("status_code", 403)
        super().__init__(
            f"Permission denied: {service_message}",
            code="PERMISSION_DENIED",
            service_message=service_message,
            recoverable=False,
            **kwargs,
        )


class NotFoundError(APIError):
    """Raised on HTTP 404."""

    def __init__(self, endpoint: str, **kwargs):
        kwargs.setdefault("status_code", 404)
        super().__init__(
            f"Not found: {endpoint}",
            code="NOT_FOUND",
            endpoint=endpoint,
            recoverable=False,
            **kwargs,
        )


class UnprocessableEntityError(APIError):
    """Raised on HTTP 422 when the service rejects the payload."""

    def __init__(self, service_message: str = "", **kwargs):
        kwargs.setdefault("status_code", 422)
        super().__init__(
            f"Validation error: {service_message}",
            code="VALIDATION_REJECTED",
            service_message=service_message,
            recoverable=False,
            **kwargs,
        )


class RateLimitError(APIError):
    """Raised on HTTP 429. Nothing in this layer retries it."""

    def __init__(self, retry_after: Optional[int] = None, **kwargs):
        kwargs.setdefault("status_code", 429)
        details = kwargs.pop("details", {})
        if retry_after:
            details["retry_after_seconds"] = retry_after
        super().__init__(
            "Rate limit exceeded, retry later",
            code="RATE_LIMIT_EXCEEDED",
            details=details,
            **kwargs,
        )
        self.retry_after = retry_after


class ServiceError(APIError):
    """Raised for any other non-2xx status."""

    def __init__(self, status_code: int, service_message: str = "", **kwargs):
        super().__init__(
            f"Service error: {status_code} - {service_message}",
            status_code=status_code,
            code="SERVICE_ERROR",
            service_message=service_message,
            **kwargs,
        )


# ============================================
# Network Errors (no response received)
# ============================================

class NetworkError(HoneybadgerError):
    """Raised when no response was received.

    The message always reads ``Network error: <cause>``.
    """

    def __init__(self, reason: str, **kwargs):
        kwargs.setdefault("recoverable", True)
        kwargs.setdefault("code", "NETWORK_ERROR")
        super().__init__(f"Network error: {reason}", **kwargs)
        self.reason = reason


class ConnectionError(NetworkError):
    """Raised when the connection to the service fails (refused, DNS, TLS)."""

    def __init__(self, reason: str, host: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if host:
            details["host"] = host
        super().__init__(
            reason,
            code="CONNECTION_ERROR",
            details=details,
            **kwargs,
        )


class TimeoutError(NetworkError):
    """Raised when the transport's own timeout fires."""

    def __init__(
        self,
        reason: str = "request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            reason,
            code="TIMEOUT_ERROR",
            details=details,
            **kwargs,
        )


# ============================================
# Exports
# ============================================

__all__ = [
    # Base
    "HoneybadgerError",
    # Local
    "ConfigurationError",
    "ValidationError",
    "ConfirmationRequiredError",
    # API
    "APIError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "UnprocessableEntityError",
    "RateLimitError",
    "ServiceError",
    # Network
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
]
