"""Transport backed by a blocking `requests.Session`, run on a worker thread."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import requests

from ..constants import DEFAULT_REQUEST_TIMEOUT_S, USER_AGENT
from ..errors import TransportError
from .protocol import JSON_HEADERS, HttpResponse

logger = logging.getLogger(__name__)


class RequestsTransport:
    """
    Transport using `requests`.

    Each request runs in the default executor via `asyncio.to_thread`, so the
    event loop is never blocked. Useful where httpx is not an option or when a
    `requests.Session` is already configured (adapters, auth).
    """

    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
        headers: dict[str, str] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout_s = float(timeout_s)
        self._headers = {**JSON_HEADERS, "User-Agent": USER_AGENT, **(headers or {})}
        self._session = session or requests.Session()
        self._owns_session = session is None

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def set_request_timeout(self, timeout_s: float) -> None:
        self._timeout_s = float(timeout_s)

    def _execute_sync(self, method: str, url: str, body: dict[str, Any] | None) -> HttpResponse:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        try:
            response = self._session.request(
                method,
                url,
                data=data,
                headers=self._headers,
                timeout=self._timeout_s,
            )
        except requests.Timeout as e:
            raise TransportError.timeout(method=method, url=url, timeout_s=self._timeout_s) from e
        except requests.RequestException as e:
            raise TransportError.from_exception(e, method=method, url=url) from e

        logger.debug(f"{method} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return HttpResponse(status=response.status_code, body=response.content)

    async def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
    ) -> HttpResponse:
        return await asyncio.to_thread(self._execute_sync, method, url, body)

    async def aclose(self) -> None:
        if self._owns_session:
            self._session.close()
