"""Gateway configuration loaded from environment variables.

Read once at startup and never mutated afterwards. The API key is allowed
to be absent here: the client refuses to send a request without it, which
keeps ``tools/list`` working on a half-configured install.

Environment Variables:
    - HONEYBADGER_API_KEY: Personal auth token (required for any API call)
    - HONEYBADGER_PROJECT_ID: Default project for project-scoped tools
    - HONEYBADGER_BASE_URL: API host (default: https://app.honeybadger.io)
    - HONEYBADGER_READ_ONLY: Set to "false" to expose write tools
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.honeybadger.io"

API_KEY_ENV = "HONEYBADGER_API_KEY"
PROJECT_ID_ENV = "HONEYBADGER_PROJECT_ID"
BASE_URL_ENV = "HONEYBADGER_BASE_URL"
READ_ONLY_ENV = "HONEYBADGER_READ_ONLY"


@dataclass(frozen=True)
class Configuration:
    """Immutable gateway settings.

    Attributes:
        api_key: Honeybadger personal auth token ("" when unset)
        default_project_id: Project used when a tool call omits project_id
        base_url: API host without trailing slash or version segment
        write_enabled: Whether write-capable tools are registered
    """
    api_key: str = ""
    default_project_id: Optional[int] = None
    base_url: str = DEFAULT_BASE_URL
    write_enabled: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Configuration":
        """Build configuration from the process environment.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests)

        Raises:
            ConfigurationError: If HONEYBADGER_PROJECT_ID is not a positive integer
        """
        env = os.environ if environ is None else environ

        api_key = env.get(API_KEY_ENV, "").strip()
        base_url = (env.get(BASE_URL_ENV) or DEFAULT_BASE_URL).strip().rstrip("/")

        # Writes stay off unless the flag is explicitly "false"
        write_enabled = env.get(READ_ONLY_ENV, "true").strip().lower() == "false"

        config = cls(
            api_key=api_key,
            default_project_id=_parse_project_id(env.get(PROJECT_ID_ENV)),
            base_url=base_url,
            write_enabled=write_enabled,
        )

        if not api_key:
            logger.warning(f"{API_KEY_ENV} is not set; every API call will fail until it is")
        return config

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def __repr__(self) -> str:
        return (
            f"Configuration("
            f"api_key={'***' if self.api_key else '<unset>'}, "
            f"default_project_id={self.default_project_id}, "
            f"base_url={self.base_url!r}, "
            f"write_enabled={self.write_enabled})"
        )


def _parse_project_id(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"{PROJECT_ID_ENV} must be a positive integer, got {raw!r}",
            details={"variable": PROJECT_ID_ENV},
        ) from None
    if value <= 0:
        raise ConfigurationError(
            f"{PROJECT_ID_ENV} must be a positive integer, got {raw!r}",
            details={"variable": PROJECT_ID_ENV},
        )
    return value
