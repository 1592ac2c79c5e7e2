"""
Async client for the W3C WebDriver wire protocol.

This package talks to any WebDriver remote end (chromedriver, geckodriver,
safaridriver, Selenium Grid) over HTTP/JSON:
- WebDriverSession: session lifecycle and every session-scoped command
- WebElement: per-element commands, no client-side caching
- ActionChain: keyboard / pointer / wheel input sequences
- DesiredCapabilities: capability builders for the common browsers
- Transport: pluggable HTTP layer (httpx by default, requests optional)

Quick start:
    from w3cdriver import By, DesiredCapabilities, WebDriverSession

    session = WebDriverSession.from_config(capabilities=DesiredCapabilities.chrome())
    async with session:
        await session.get("https://example.com")
        print(await session.title())
"""

from .actions import ActionChain, ActionSequence, InputSource, MouseButton
from .by import By
from .capabilities import (
    CapabilityRequest,
    ChromeCapabilities,
    DesiredCapabilities,
    EdgeCapabilities,
    FirefoxCapabilities,
    PageLoadStrategy,
    Proxy,
    SafariCapabilities,
    UnhandledPromptBehavior,
    make_w3c_caps,
    match_capabilities,
)
from .config import DriverConfig
from .element import WebElement
from .errors import (
    ElementSessionMismatch,
    InvalidCommandError,
    MalformedResponse,
    SessionNotActive,
    TransportError,
    WaitTimeoutError,
    WebDriverError,
    WireError,
)
from .keys import Keys
from .models import Cookie, ElementRef, PrintOptions, Rect, Timeouts
from .session import SessionState, WebDriverSession
from .wait import WebDriverWait, wait_until

__version__ = "0.1.0"

__all__ = [
    # Session
    "WebDriverSession",
    "SessionState",
    "DriverConfig",
    "WebElement",
    # Locators / input
    "By",
    "Keys",
    "ActionChain",
    "ActionSequence",
    "InputSource",
    "MouseButton",
    # Capabilities
    "CapabilityRequest",
    "DesiredCapabilities",
    "ChromeCapabilities",
    "EdgeCapabilities",
    "FirefoxCapabilities",
    "SafariCapabilities",
    "PageLoadStrategy",
    "UnhandledPromptBehavior",
    "Proxy",
    "make_w3c_caps",
    "match_capabilities",
    # Models
    "Cookie",
    "ElementRef",
    "PrintOptions",
    "Rect",
    "Timeouts",
    # Waits
    "WebDriverWait",
    "wait_until",
    # Errors
    "WebDriverError",
    "WireError",
    "TransportError",
    "MalformedResponse",
    "SessionNotActive",
    "ElementSessionMismatch",
    "InvalidCommandError",
    "WaitTimeoutError",
]
