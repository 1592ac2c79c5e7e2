"""Async transport backed by httpx.AsyncClient (the default)."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..constants import DEFAULT_REQUEST_TIMEOUT_S, USER_AGENT
from ..errors import TransportError
from .protocol import JSON_HEADERS, HttpResponse

logger = logging.getLogger(__name__)


class HttpxTransport:
    """
    Transport using a pooled `httpx.AsyncClient`.

    Args:
        timeout_s: Per-request timeout in seconds (default: 120)
        headers: Extra headers sent with every request
        client: Pre-configured client to use instead of creating one. A client
                passed in is not closed by `aclose()`.
    """

    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout_s = float(timeout_s)
        self._headers = {**JSON_HEADERS, "User-Agent": USER_AGENT, **(headers or {})}
        self._client = client
        self._owns_client = client is None

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def set_request_timeout(self, timeout_s: float) -> None:
        """Change the timeout applied to subsequent requests."""
        self._timeout_s = float(timeout_s)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    async def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
    ) -> HttpResponse:
        content = json.dumps(body).encode("utf-8") if body is not None else None
        client = self._get_client()
        try:
            response = await client.request(
                method,
                url,
                content=content,
                headers=self._headers,
                timeout=self._timeout_s,
            )
        except httpx.TimeoutException as e:
            raise TransportError.timeout(method=method, url=url, timeout_s=self._timeout_s) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError.from_exception(e, method=method, url=url) from e

        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return HttpResponse(status=response.status_code, body=response.content)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
