"""
Transports for talking to a WebDriver remote end.

Supported backends:
- HttpxTransport: async httpx client (default)
- RequestsTransport: blocking requests.Session on a worker thread

Pick one at the composition boundary:
    from w3cdriver.transport import create_transport

    transport = create_transport("httpx", timeout_s=60)
    session = WebDriverSession(transport, "http://localhost:4444")
"""

from ..constants import DEFAULT_REQUEST_TIMEOUT_S
from .httpx_transport import HttpxTransport
from .protocol import HttpResponse, Transport
from .requests_transport import RequestsTransport

TRANSPORTS = {
    "httpx": HttpxTransport,
    "requests": RequestsTransport,
}


def create_transport(name: str = "httpx", *, timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S) -> Transport:
    """Instantiate a bundled transport by name."""
    try:
        transport_cls = TRANSPORTS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown transport {name!r}; expected one of {sorted(TRANSPORTS)}") from None
    return transport_cls(timeout_s=timeout_s)


__all__ = [
    "HttpResponse",
    "Transport",
    "HttpxTransport",
    "RequestsTransport",
    "TRANSPORTS",
    "create_transport",
]
