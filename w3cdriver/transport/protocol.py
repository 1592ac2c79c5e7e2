"""
Transport protocol.

The protocol core never talks to an HTTP library directly. It hands a method,
an absolute URL and an optional JSON body to a `Transport`, and gets back the
raw status code and body bytes. Anything that satisfies this protocol can be
plugged in (the bundled httpx/requests transports, a recording proxy, a test
double).

Cancellation is best-effort: cancelling the awaiting task stops waiting for
the response, but the remote end may already have executed the command.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json;charset=UTF-8",
}


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: bytes


@runtime_checkable
class Transport(Protocol):
    """One request/response exchange with the remote end."""

    async def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
    ) -> HttpResponse:
        """
        Perform the request.

        Raises:
            TransportError: connection refused, timeout, or any other failure
                below the HTTP response level
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...
