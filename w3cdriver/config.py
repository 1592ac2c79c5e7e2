from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from .constants import (
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_SERVER_URL,
    DEFAULT_WAIT_TIMEOUT_S,
)

ENV_PREFIX = "W3CDRIVER_"


@dataclass(frozen=True)
class DriverConfig:
    """
    Connection and timing settings for a WebDriver session.

    Attributes:
        server_url: Remote end base URL (chromedriver, geckodriver, Grid)
        request_timeout_s: Transport timeout per request
        wait_timeout_s: Default deadline for explicit waits
        poll_interval_s: Default polling interval for explicit waits
        transport: Bundled transport name ("httpx" or "requests")
    """

    server_url: str = DEFAULT_SERVER_URL
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    wait_timeout_s: float = DEFAULT_WAIT_TIMEOUT_S
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    transport: str = "httpx"

    def __post_init__(self) -> None:
        if not self.server_url.strip():
            raise ValueError("server_url must not be empty")
        for name in ("request_timeout_s", "wait_timeout_s", "poll_interval_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> DriverConfig:
        """
        Build a config from W3CDRIVER_* environment variables.

        WEBDRIVER_URL is accepted as a legacy alias for W3CDRIVER_SERVER_URL.
        Keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        server_url = env.get(f"{ENV_PREFIX}SERVER_URL") or env.get("WEBDRIVER_URL")
        if server_url:
            values["server_url"] = server_url.strip()

        for field_name, var in (
            ("request_timeout_s", "REQUEST_TIMEOUT_S"),
            ("wait_timeout_s", "WAIT_TIMEOUT_S"),
            ("poll_interval_s", "POLL_INTERVAL_S"),
        ):
            raw = env.get(f"{ENV_PREFIX}{var}")
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = float(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{var} must be a number, got {raw!r}") from e

        transport = env.get(f"{ENV_PREFIX}TRANSPORT")
        if transport:
            values["transport"] = transport.strip().lower()

        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **changes) -> DriverConfig:
        return replace(self, **changes)
