"""
WebDriver session manager.

`WebDriverSession` owns one remote session: its id, the capabilities the
remote end reported, and the state machine

    UNINITIALIZED --start()--> ACTIVE --quit() / invalid session id--> TERMINATED

Every command goes through `execute()`, which:

1. fails locally with `SessionNotActive` unless the session is ACTIVE
   (no network call is made),
2. rejects element references issued by another session
   (`ElementSessionMismatch`),
3. encodes the command, sends it through the transport, decodes the envelope
   and runs the command's result extraction,
4. moves the session to TERMINATED when the remote end answers
   `invalid session id`, so later calls fail fast.

Commands on one session are not serialized: concurrent calls become
concurrent requests, and ordering is up to the remote end. The session id and
capabilities never change after `start()`, so in-flight commands never
observe each other's writes.

Example:
    from w3cdriver import By, DesiredCapabilities, WebDriverSession
    from w3cdriver.transport import HttpxTransport

    caps = DesiredCapabilities.firefox()
    caps.set_headless()
    async with WebDriverSession(HttpxTransport(), "http://localhost:4444", capabilities=caps) as session:
        await session.get("https://example.com")
        heading = await session.find_element(By.TAG_NAME, "h1")
        print(await heading.text())
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Union

from .actions import ActionChain, ActionSequence
from .by import By, to_locator
from .capabilities import CapabilityRequest, DesiredCapabilities
from .commands import (
    AcceptAlert,
    AddCookie,
    Back,
    CloseWindow,
    Command,
    DeleteAllCookies,
    DeleteCookie,
    DeleteSession,
    DismissAlert,
    ExecuteAsyncScript,
    ExecuteScript,
    FindElement,
    FindElements,
    Forward,
    FullscreenWindow,
    GetActiveElement,
    GetAlertText,
    GetAllCookies,
    GetCurrentUrl,
    GetNamedCookie,
    GetPageSource,
    GetTimeouts,
    GetTitle,
    GetWindowHandle,
    GetWindowHandles,
    GetWindowRect,
    MaximizeWindow,
    MinimizeWindow,
    NavigateTo,
    NewSession,
    NewWindow,
    PerformActions,
    PrintPage,
    Refresh,
    ReleaseActions,
    SendAlertText,
    SetTimeouts,
    SetWindowRect,
    Status,
    SwitchToFrame,
    SwitchToParentFrame,
    SwitchToWindow,
    TakeScreenshot,
)
from .config import DriverConfig
from .constants import DEFAULT_SERVER_URL
from .element import WebElement
from .errors import (
    ElementSessionMismatch,
    InvalidSessionId,
    MalformedResponse,
    SessionNotActive,
    SessionNotCreated,
    WireError,
)
from .models import (
    Cookie,
    ElementRef,
    NewWindowResult,
    PrintOptions,
    Rect,
    ServerStatus,
    Timeouts,
)
from .response import decode_envelope, expect_base64
from .transport import Transport, create_transport

if TYPE_CHECKING:
    from .wait import WebDriverWait

logger = logging.getLogger(__name__)

CapabilitiesInput = Union[CapabilityRequest, DesiredCapabilities, Mapping[str, Any], None]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TERMINATED = "terminated"


def _to_capability_request(capabilities: CapabilitiesInput) -> CapabilityRequest:
    if capabilities is None:
        return CapabilityRequest()
    if isinstance(capabilities, CapabilityRequest):
        return capabilities
    return CapabilityRequest.from_desired(capabilities)


class WebDriverSession:
    """
    Client side of one WebDriver session.

    Args:
        transport: Any object implementing the `Transport` protocol
        server_url: Remote end base URL; command paths are appended to it
        capabilities: Default capabilities used by `start()` / `async with`
        config: Wait defaults (timeouts / polling); server_url above takes precedence
    """

    def __init__(
        self,
        transport: Transport,
        server_url: str = DEFAULT_SERVER_URL,
        *,
        capabilities: CapabilitiesInput = None,
        config: DriverConfig | None = None,
    ) -> None:
        self._transport = transport
        self._owns_transport = False
        self.server_url = server_url.rstrip("/")
        self.config = config or DriverConfig(server_url=self.server_url)
        self._default_capabilities = capabilities

        self._state = SessionState.UNINITIALIZED
        self._session_id: str | None = None
        self._capabilities: dict[str, Any] = {}
        self._requested_capabilities: dict[str, Any] = {}

    @classmethod
    def from_config(
        cls,
        config: DriverConfig | None = None,
        *,
        capabilities: CapabilitiesInput = None,
    ) -> WebDriverSession:
        """Compose a session with the bundled transport named in `config` (env-driven by default)."""
        config = config or DriverConfig.from_env()
        transport = create_transport(config.transport, timeout_s=config.request_timeout_s)
        session = cls(transport, config.server_url, capabilities=capabilities, config=config)
        session._owns_transport = True
        return session

    # ----- state -----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def capabilities(self) -> dict[str, Any]:
        """Capabilities reported by the remote end at creation (a copy)."""
        return dict(self._capabilities)

    @property
    def requested_capabilities(self) -> dict[str, Any]:
        """The effective capabilities picked client-side from the request."""
        return dict(self._requested_capabilities)

    @property
    def transport(self) -> Transport:
        return self._transport

    def __repr__(self) -> str:
        return f"<WebDriverSession id={self._session_id!r} state={self._state.value} url={self.server_url!r}>"

    # ----- lifecycle -----

    async def start(self, capabilities: CapabilitiesInput = None) -> WebDriverSession:
        """
        Create the remote session.

        Raises:
            SessionNotCreated: the remote end refused or returned an unusable
                response; the session stays UNINITIALIZED and may be started again
            TransportError: the request never got a response
        """
        if self._state is not SessionState.UNINITIALIZED:
            raise SessionNotCreated(f"Session is already {self._state.value}; create a new WebDriverSession")

        request = _to_capability_request(
            capabilities if capabilities is not None else self._default_capabilities
        )
        self._requested_capabilities = request.negotiate()
        command = NewSession(request)
        try:
            result = await self._send(command, None)
        except SessionNotCreated:
            raise
        except (WireError, MalformedResponse) as e:
            raise SessionNotCreated.from_error(e) from e

        self._session_id = result.session_id
        self._capabilities = dict(result.capabilities)
        self._state = SessionState.ACTIVE
        logger.info(
            f"Session {self._session_id} created "
            f"(browser={self._capabilities.get('browserName')}, "
            f"version={self._capabilities.get('browserVersion')})"
        )
        return self

    async def quit(self) -> None:
        """Delete the remote session. The session is TERMINATED afterwards."""
        await self.execute(DeleteSession())
        self._state = SessionState.TERMINATED
        logger.info(f"Session {self._session_id} deleted")

    async def close(self) -> None:
        """Release the transport if this session created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> WebDriverSession:
        if self._state is SessionState.UNINITIALIZED:
            await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self.is_active:
                await self.quit()
        finally:
            await self.close()

    # ----- command path -----

    async def _send(self, command: Command, session_id: str | None) -> Any:
        request = command.to_request(session_id)
        url = self.server_url + request.path
        logger.debug(f"{command.name}: {request.method} {request.path}")
        response = await self._transport.execute(request.method, url, request.body)
        envelope = decode_envelope(response.status, response.body)
        return command.parse_envelope(envelope)

    async def execute(self, command: Command) -> Any:
        """
        Issue a command against this session and return its extracted result.

        Raises:
            SessionNotActive: the session is not ACTIVE (raised before any I/O)
            ElementSessionMismatch: the command references another session's element
            WireError: the remote end reported an error
            MalformedResponse: the success payload has the wrong shape
            TransportError: the exchange failed
        """
        if self._state is not SessionState.ACTIVE:
            raise SessionNotActive(self._state.value, command.name)
        for ref in command.element_refs():
            if ref.session_id != self._session_id:
                raise ElementSessionMismatch(ref.id, ref.session_id, self._session_id)
        try:
            return await self._send(command, self._session_id)
        except InvalidSessionId:
            self._state = SessionState.TERMINATED
            logger.warning(f"Session {self._session_id} is no longer valid on the remote end; marked terminated")
            raise

    def create_element(self, element_id: str) -> WebElement:
        """Wrap an element id returned by this session's remote end."""
        return WebElement(ElementRef(id=element_id, session_id=self._session_id or ""), self)

    def _unwrap(self, value: Any) -> Any:
        element_id = ElementRef.id_from_wire(value)
        if element_id is not None:
            return self.create_element(element_id)
        if isinstance(value, list):
            return [self._unwrap(v) for v in value]
        if isinstance(value, dict):
            return {k: self._unwrap(v) for k, v in value.items()}
        return value

    # ----- server -----

    async def status(self) -> ServerStatus:
        """GET /status. Not session-scoped, so it works in any state."""
        return await self._send(Status(), None)

    # ----- timeouts -----

    async def get_timeouts(self) -> Timeouts:
        return await self.execute(GetTimeouts())

    async def set_timeouts(
        self,
        timeouts: Timeouts | None = None,
        *,
        script_ms: int | None = None,
        page_load_ms: int | None = None,
        implicit_ms: int | None = None,
    ) -> None:
        if timeouts is None:
            values: dict[str, Any] = {}
            if script_ms is not None:
                values["script"] = script_ms
            if page_load_ms is not None:
                values["page_load"] = page_load_ms
            if implicit_ms is not None:
                values["implicit"] = implicit_ms
            timeouts = Timeouts(**values)
        await self.execute(SetTimeouts(timeouts))

    # ----- navigation -----

    async def get(self, url: str) -> None:
        """Navigate the current top-level browsing context to `url`."""
        await self.execute(NavigateTo(url))

    async def current_url(self) -> str:
        return await self.execute(GetCurrentUrl())

    async def back(self) -> None:
        await self.execute(Back())

    async def forward(self) -> None:
        await self.execute(Forward())

    async def refresh(self) -> None:
        await self.execute(Refresh())

    async def title(self) -> str:
        return await self.execute(GetTitle())

    async def page_source(self) -> str:
        return await self.execute(GetPageSource())

    # ----- windows -----

    async def window_handle(self) -> str:
        return await self.execute(GetWindowHandle())

    async def window_handles(self) -> list[str]:
        return await self.execute(GetWindowHandles())

    async def close_window(self) -> list[str]:
        """Close the current window and return the remaining handles."""
        return await self.execute(CloseWindow())

    async def switch_to_window(self, handle: str) -> None:
        await self.execute(SwitchToWindow(handle))

    async def new_window(self, type_hint: Literal["tab", "window"] | None = "tab") -> NewWindowResult:
        return await self.execute(NewWindow(type_hint))

    async def get_window_rect(self) -> Rect:
        return await self.execute(GetWindowRect())

    async def set_window_rect(
        self,
        x: int | None = None,
        y: int | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> Rect:
        return await self.execute(SetWindowRect(x, y, width, height))

    async def maximize_window(self) -> Rect:
        return await self.execute(MaximizeWindow())

    async def minimize_window(self) -> Rect:
        return await self.execute(MinimizeWindow())

    async def fullscreen_window(self) -> Rect:
        return await self.execute(FullscreenWindow())

    # ----- frames -----

    async def switch_to_frame(self, frame: int | WebElement | ElementRef | None) -> None:
        """Switch to a frame by index or element; None selects the top-level context."""
        if isinstance(frame, WebElement):
            frame = frame.ref
        await self.execute(SwitchToFrame(frame))

    async def switch_to_default_content(self) -> None:
        await self.execute(SwitchToFrame(None))

    async def switch_to_parent_frame(self) -> None:
        await self.execute(SwitchToParentFrame())

    # ----- elements -----

    async def find_element(self, by: By | str, value: str) -> WebElement:
        """
        Find the first element matching the locator.

        Raises:
            NoSuchElement: nothing matched (after the session's implicit wait)
        """
        using, selector = to_locator(by, value)
        return self.create_element(await self.execute(FindElement(using, selector)))

    async def find_elements(self, by: By | str, value: str) -> list[WebElement]:
        using, selector = to_locator(by, value)
        element_ids = await self.execute(FindElements(using, selector))
        return [self.create_element(element_id) for element_id in element_ids]

    async def active_element(self) -> WebElement:
        return self.create_element(await self.execute(GetActiveElement()))

    # ----- scripts -----

    async def execute_script(self, script: str, *args: Any) -> Any:
        """
        Run synchronous JavaScript in the current browsing context.

        Element arguments are sent as web element references; element results
        come back as `WebElement` handles.
        """
        return self._unwrap(await self.execute(ExecuteScript(script, tuple(args))))

    async def execute_async_script(self, script: str, *args: Any) -> Any:
        """Run JavaScript that signals completion by calling its last argument."""
        return self._unwrap(await self.execute(ExecuteAsyncScript(script, tuple(args))))

    # ----- cookies -----

    async def get_cookies(self) -> list[Cookie]:
        return await self.execute(GetAllCookies())

    async def get_cookie(self, name: str) -> Cookie:
        """
        Raises:
            NoSuchCookie: no cookie with that name is visible to the current document
        """
        return await self.execute(GetNamedCookie(name))

    async def add_cookie(self, cookie: Cookie | Mapping[str, Any]) -> None:
        if not isinstance(cookie, Cookie):
            cookie = Cookie.model_validate(dict(cookie))
        await self.execute(AddCookie(cookie))

    async def delete_cookie(self, name: str) -> None:
        await self.execute(DeleteCookie(name))

    async def delete_all_cookies(self) -> None:
        await self.execute(DeleteAllCookies())

    # ----- actions -----

    def action_chain(self, **kwargs: Any) -> ActionChain:
        """New action builder bound to this session."""
        return ActionChain(self, **kwargs)

    async def perform_actions(self, actions: ActionSequence | ActionChain) -> None:
        """Send one PerformActions command on this session. An ActionChain is cleared afterwards."""
        if isinstance(actions, ActionChain):
            sequence = actions.take()
            if not sequence.sources:
                logger.debug("perform_actions() called with an empty action chain; nothing sent")
                return
        else:
            sequence = actions.copy()
        await self.execute(PerformActions(sequence))

    async def release_actions(self) -> None:
        await self.execute(ReleaseActions())

    # ----- user prompts -----

    async def accept_alert(self) -> None:
        await self.execute(AcceptAlert())

    async def dismiss_alert(self) -> None:
        await self.execute(DismissAlert())

    async def alert_text(self) -> str | None:
        return await self.execute(GetAlertText())

    async def send_alert_text(self, text: str) -> None:
        await self.execute(SendAlertText(text))

    # ----- screen capture / print -----

    async def screenshot_base64(self) -> str:
        return await self.execute(TakeScreenshot())

    async def screenshot_png(self) -> bytes:
        return expect_base64(TakeScreenshot().name, await self.screenshot_base64())

    async def save_screenshot(self, path: str | Path) -> Path:
        target = Path(path)
        target.write_bytes(await self.screenshot_png())
        return target

    async def print_page(self, options: PrintOptions | None = None) -> str:
        """Render the page to PDF and return it base64-encoded."""
        return await self.execute(PrintPage(options or PrintOptions()))

    async def print_pdf(self, options: PrintOptions | None = None) -> bytes:
        return expect_base64(PrintPage().name, await self.print_page(options))

    # ----- waits -----

    def wait(self, timeout_s: float | None = None, poll_s: float | None = None) -> WebDriverWait:
        """Explicit wait bound to this session (defaults come from `config`)."""
        from .wait import WebDriverWait

        return WebDriverWait(self, timeout_s=timeout_s, poll_s=poll_s)
