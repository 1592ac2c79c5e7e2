from __future__ import annotations

from typing import Any

import pytest

from w3cdriver.response import encode_envelope
from w3cdriver.session import WebDriverSession
from w3cdriver.transport import HttpResponse

SERVER_URL = "http://driver.test:4444"


class FakeTransport:
    """Records every request and replays queued (status, body) responses in order."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.responses: list[HttpResponse | Exception] = []
        self.closed = False

    def reply(self, value: Any = None, status: int = 200) -> FakeTransport:
        self.responses.append(HttpResponse(status=status, body=encode_envelope(value)))
        return self

    def reply_error(self, error: str, message: str = "", status: int = 500, **extra: Any) -> FakeTransport:
        payload = {"error": error, "message": message, "stacktrace": "", **extra}
        return self.reply(payload, status=status)

    def reply_raw(self, body: bytes, status: int = 200) -> FakeTransport:
        self.responses.append(HttpResponse(status=status, body=body))
        return self

    def fail_with(self, exc: Exception) -> FakeTransport:
        self.responses.append(exc)
        return self

    async def execute(self, method: str, url: str, body: dict[str, Any] | None = None) -> HttpResponse:
        self.requests.append({"method": method, "url": url, "body": body})
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True

    @property
    def last(self) -> dict[str, Any]:
        return self.requests[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session(transport: FakeTransport) -> WebDriverSession:
    return WebDriverSession(transport, SERVER_URL)


@pytest.fixture
async def active_session(transport: FakeTransport) -> WebDriverSession:
    transport.reply({"sessionId": "abc123", "capabilities": {"browserName": "firefox"}})
    session = WebDriverSession(transport, SERVER_URL)
    await session.start({"browserName": "firefox"})
    transport.requests.clear()
    return session
