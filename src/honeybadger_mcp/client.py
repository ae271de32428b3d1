#!/usr/bin/env python3
"""HTTP Client for the Honeybadger v2 REST API.

This client knows HOW to talk to Honeybadger, but not WHAT to fetch. Tool
handlers compose it with a path and parameters; it handles the concerns
every call shares:

    - Basic authentication with the personal auth token
    - URL composition (base URL + "/v2" + path)
    - Query parameter encoding
    - Mapping transport and HTTP failures to typed exceptions

Every call issues exactly one HTTP request. There is no retry, no token
refresh and no rate limit backoff: a 429 is reported to the caller as is.

Usage:
    async with HoneybadgerClient(config) as client:
        project = await client.get("/projects/41227")
        faults = await client.get("/projects/41227/faults", params={"limit": 25})
"""
import asyncio
import base64
import json
import logging
from typing import Any, Optional

import aiohttp

from .config import API_KEY_ENV, Configuration
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceError,
    TimeoutError,
    UnprocessableEntityError,
)

logger = logging.getLogger(__name__)

API_VERSION = "v2"

# Transport-level limits; this layer adds no timeout of its own
REQUEST_TIMEOUT_SECONDS = 60
CONNECT_TIMEOUT_SECONDS = 10


class HoneybadgerClient:
    """Async HTTP client for the Honeybadger API.

    Use it as an async context manager so the aiohttp session is closed:

        async with HoneybadgerClient(config) as client:
            data = await client.get("/projects")

    Attributes:
        config: Immutable gateway configuration
        base_url: Host plus API version segment (e.g. "https://app.honeybadger.io/v2")
    """

    def __init__(self, config: Configuration):
        self.config = config
        self.base_url = f"{config.base_url.rstrip('/')}/{API_VERSION}"

        # Session is created in __aenter__, closed in __aexit__
        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "HoneybadgerClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(
                total=REQUEST_TIMEOUT_SECONDS,
                connect=CONNECT_TIMEOUT_SECONDS,
            ),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Request Execution
    # ----------------------------------------

    def _get_auth_headers(self) -> dict[str, str]:
        """Build the Basic auth header (token as username, empty password)."""
        credentials = base64.b64encode(f"{self.config.api_key}:".encode()).decode()
        return {
            "Authorization": f"Basic {credentials}",
            "Accept": "application/json",
        }

    async def execute(
        self,
        path: str,
        method: str = "GET",
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one authenticated request and return the parsed payload.

        Args:
            path: API path below the version segment (e.g. "/projects/1/faults")
            method: HTTP method (GET, POST, PUT, DELETE)
            params: Query parameters; None values are dropped
            json_body: JSON request body (POST/PUT)

        Returns:
            Parsed JSON response, or an empty dict for 204/empty bodies

        Raises:
            ConfigurationError: If the API key is not configured
            APIError: If the response status is not 2xx (typed by status)
            NetworkError: If no response was received
            RuntimeError: If called outside of async context manager
        """
        if not self.config.has_api_key:
            raise ConfigurationError(
                f"{API_KEY_ENV} environment variable is required",
                missing_keys=[API_KEY_ENV],
            )

        if not self._session:
            raise RuntimeError(
                "HoneybadgerClient must be used as async context manager: "
                "async with HoneybadgerClient(...) as client:"
            )

        url = f"{self.base_url}{path}"
        headers = self._get_auth_headers()
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        logger.debug(f"{method} {path}")

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=headers,
                params=_encode_params(params),
                json=json_body,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    error = self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=path,
                        response_body=error_text,
                        reason=response.reason,
                        retry_after=_parse_retry_after(response.headers.get("Retry-After")),
                    )
                    logger.warning(f"{method} {path} failed: {error.message}")
                    raise error

                if response.status == 204:
                    return {}

                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    raise ServiceError(
                        response.status,
                        "invalid JSON response",
                        endpoint=path,
                        method=method,
                    ) from None
                return {} if data is None else data

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"request to {path} timed out",
                timeout_seconds=REQUEST_TIMEOUT_SECONDS,
                cause=e,
            )

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                str(e) or e.__class__.__name__,
                host=self.config.base_url,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                str(e) or e.__class__.__name__,
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
        reason: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> APIError:
        """Create appropriate APIError subclass based on status code."""
        if status == 401:
            return AuthenticationError(endpoint=endpoint, method=method)

        service_message = extract_service_message(response_body) or reason or ""

        if status == 403:
            return PermissionDeniedError(
                service_message,
                endpoint=endpoint,
                method=method,
            )

        if status == 404:
            return NotFoundError(endpoint, method=method)

        if status == 422:
            return UnprocessableEntityError(
                service_message,
                endpoint=endpoint,
                method=method,
            )

        if status == 429:
            return RateLimitError(retry_after=retry_after, endpoint=endpoint, method=method)

        return ServiceError(
            status,
            service_message,
            endpoint=endpoint,
            method=method,
        )

    # ----------------------------------------
    # Convenience Methods
    # ----------------------------------------

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Make a GET request."""
        return await self.execute(path, "GET", params=params)

    async def post(
        self,
        path: str,
        json_body: dict[str, Any],
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make a POST request."""
        return await self.execute(path, "POST", params=params, json_body=json_body)

    async def put(
        self,
        path: str,
        json_body: dict[str, Any],
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make a PUT request."""
        return await self.execute(path, "PUT", params=params, json_body=json_body)

    async def delete(self, path: str) -> Any:
        """Make a DELETE request."""
        return await self.execute(path, "DELETE")


# ============================================
# Helpers
# ============================================

def _encode_params(params: Optional[dict[str, Any]]) -> Optional[dict[str, str]]:
    """Drop None values and encode booleans the way the API expects.

    aiohttp refuses bool query values, so True/False become "true"/"false".
    """
    if not params:
        return None
    encoded = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = str(value)
    return encoded or None


def _parse_retry_after(value: Any) -> Optional[int]:
    """Read a delta-seconds Retry-After header; HTTP-date values are ignored."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def extract_service_message(response_body: str) -> str:
    """Pull the human-readable error out of an error response body.

    Honeybadger answers with ``{"error": "..."}`` or ``{"errors": ...}``;
    anything else falls back to the raw (truncated) body.
    """
    if not response_body or not response_body.strip():
        return ""

    try:
        data = json.loads(response_body)
    except ValueError:
        return response_body.strip()[:500]

    if isinstance(data, dict):
        if isinstance(data.get("error"), str):
            return data["error"]
        errors = data.get("errors")
        if isinstance(errors, str):
            return errors
        if isinstance(errors, list):
            return "; ".join(str(e) for e in errors)
        if isinstance(errors, dict):
            return "; ".join(
                f"{field} {', '.join(map(str, msgs)) if isinstance(msgs, list) else msgs}"
                for field, msgs in errors.items()
            )

    return response_body.strip()[:500]
