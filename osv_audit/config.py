"""Runtime configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_OSV_API_URL = "https://api.osv.dev"
DEFAULT_REQUEST_TIMEOUT_MS = 30000


@dataclass
class Config:
    """Configuration for the advisory client and logging."""

    osv_api_url: str = DEFAULT_OSV_API_URL
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT_MS
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.osv_api_url:
            raise ValueError("OSV API URL cannot be empty")
        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive: {self.request_timeout}")
        self.osv_api_url = self.osv_api_url.rstrip("/")

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout / 1000


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a Config from ``OSV_API_URL``, ``REQUEST_TIMEOUT`` and ``DEBUG``.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated configuration

    Raises:
        ValueError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ

    raw_timeout = env.get("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_MS))
    try:
        timeout = int(raw_timeout)
    except ValueError:
        raise ValueError(f"REQUEST_TIMEOUT must be an integer number of milliseconds: {raw_timeout!r}")

    return Config(
        osv_api_url=env.get("OSV_API_URL") or DEFAULT_OSV_API_URL,
        request_timeout=timeout,
        debug=env.get("DEBUG", "").lower() in ("true", "1"),
    )
