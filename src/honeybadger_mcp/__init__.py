"""Honeybadger MCP gateway.

This package exposes the Honeybadger error-tracking v2 REST API as MCP
tools: parameter contracts, an authenticated request executor, uniform
result formatting and a read-only/write-enabled policy gate.

Classes:
    Configuration: Immutable settings read from the environment
    HoneybadgerClient: Async HTTP client (Basic auth, one request per call)
    ToolRegistry: Immutable name -> operation mapping with invoke()
    OperationSpec: Declaration of one tool

Results:
    SingleResource, ResourceList, WriteConfirmation, TextReport, ErrorResult

Exceptions:
    HoneybadgerError: Base exception for all gateway errors
    ConfigurationError: API key missing or invalid settings
    ValidationError: Tool parameters violate the operation's contract
    ConfirmationRequiredError: Destructive call without confirm=true
    APIError: Non-2xx response (AuthenticationError, NotFoundError, ...)
    NetworkError: No response received
"""
from .client import HoneybadgerClient
from .config import Configuration
from .contracts import normalize_timestamp, validate_arguments
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConfirmationRequiredError,
    ConnectionError,
    HoneybadgerError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceError,
    TimeoutError,
    UnprocessableEntityError,
    ValidationError,
)
from .formatting import (
    ErrorResult,
    ResourceList,
    SingleResource,
    TextReport,
    WriteConfirmation,
)
from .operations import OPERATIONS, OperationSpec
from .registry import ToolRegistry, select_operations

__all__ = [
    # Core
    "Configuration",
    "HoneybadgerClient",
    "OperationSpec",
    "OPERATIONS",
    "ToolRegistry",
    "select_operations",
    "normalize_timestamp",
    "validate_arguments",
    # Results
    "SingleResource",
    "ResourceList",
    "WriteConfirmation",
    "TextReport",
    "ErrorResult",
    # Exceptions
    "HoneybadgerError",
    "ConfigurationError",
    "ValidationError",
    "ConfirmationRequiredError",
    "APIError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "UnprocessableEntityError",
    "RateLimitError",
    "ServiceError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
]
