"""
WebDriver command variants.

Each command is a frozen dataclass carrying exactly the parameters its W3C
endpoint needs. A command knows three things:

- its HTTP method and path template (`{session_id}`, `{element_id}`, ...),
- how to serialize its request body,
- how to extract its typed result from the response `value`.

Encoding is pure: `to_request()` performs no I/O and returns the same
`RequestData` for the same inputs. It raises `InvalidCommandError` on
programming errors (bad argument, session-scoped command without a session
id) and nothing else.

Result extraction (`parse_result`) raises `MalformedResponse` when the remote
end returned a success envelope of the wrong shape. Commands that return
elements return element *ids*; the session wraps them into `WebElement`
handles, because only it knows which session issued them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, Literal, Optional, Union
from urllib.parse import quote

from .actions import ActionSequence
from .by import By
from .capabilities import CapabilityRequest
from .errors import InvalidCommandError
from .models import (
    Cookie,
    ElementRef,
    NewSessionResult,
    NewWindowResult,
    PrintOptions,
    Rect,
    ServerStatus,
    Timeouts,
)
from .response import (
    expect_bool,
    expect_element_id,
    expect_element_ids,
    expect_model,
    expect_model_list,
    expect_optional_str,
    expect_str,
    expect_str_list,
)

W3C_STRATEGIES = frozenset(
    {
        By.CSS_SELECTOR.value,
        By.LINK_TEXT.value,
        By.PARTIAL_LINK_TEXT.value,
        By.TAG_NAME.value,
        By.XPATH.value,
    }
)


@dataclass(frozen=True)
class RequestData:
    """Wire request produced by a command: method, path relative to the server URL, JSON body."""

    method: Literal["GET", "POST", "DELETE"]
    path: str
    body: Optional[dict[str, Any]] = None


def to_wire_value(value: Any) -> Any:
    """Convert script arguments to JSON, replacing elements with web element reference objects."""
    if isinstance(value, ElementRef):
        return value.to_wire()
    ref = getattr(value, "ref", None)
    if isinstance(ref, ElementRef):
        return ref.to_wire()
    if isinstance(value, (list, tuple)):
        return [to_wire_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_wire_value(v) for k, v in value.items()}
    return value


def iter_element_refs(value: Any) -> Iterator[ElementRef]:
    if isinstance(value, ElementRef):
        yield value
        return
    ref = getattr(value, "ref", None)
    if isinstance(ref, ElementRef):
        yield ref
        return
    if isinstance(value, (list, tuple)):
        for v in value:
            yield from iter_element_refs(v)
    elif isinstance(value, dict):
        for v in value.values():
            yield from iter_element_refs(v)


class Command:
    """Base class of all command variants."""

    method: ClassVar[Literal["GET", "POST", "DELETE"]] = "GET"
    path: ClassVar[str] = ""
    session_scoped: ClassVar[bool] = True

    @property
    def name(self) -> str:
        return type(self).__name__

    def path_params(self) -> dict[str, str]:
        return {}

    def body(self) -> Optional[dict[str, Any]]:
        # POST endpoints always take a JSON object, even when empty.
        return {} if self.method == "POST" else None

    def element_refs(self) -> Iterator[ElementRef]:
        """Element references this command sends to the remote end."""
        return iter(())

    def to_request(self, session_id: str | None = None) -> RequestData:
        params = dict(self.path_params())
        if self.session_scoped:
            if not session_id:
                raise InvalidCommandError(f"{self.name} requires a session id")
            params["session_id"] = session_id
        quoted = {k: quote(str(v), safe="") for k, v in params.items()}
        try:
            path = self.path.format(**quoted)
        except KeyError as e:
            raise InvalidCommandError(f"{self.name}: missing path parameter {e}") from e
        return RequestData(self.method, path, self.body())

    def parse_result(self, value: Any) -> Any:
        # Commands without a result: whatever the remote end sent is discarded.
        return None

    def parse_envelope(self, envelope: dict[str, Any]) -> Any:
        return self.parse_result(envelope.get("value"))


@dataclass(frozen=True)
class ElementCommand(Command):
    element: ElementRef

    def path_params(self) -> dict[str, str]:
        return {"element_id": self.element.id}

    def element_refs(self) -> Iterator[ElementRef]:
        yield self.element


def _check_locator(command: str, using: str, value: str) -> None:
    if using not in W3C_STRATEGIES:
        raise InvalidCommandError(f"{command}: unsupported location strategy {using!r}")
    if not isinstance(value, str):
        raise InvalidCommandError(f"{command}: selector must be a string")


# ========== Sessions ==========


@dataclass(frozen=True)
class NewSession(Command):
    method = "POST"
    path = "/session"
    session_scoped = False

    capabilities: CapabilityRequest = field(default_factory=CapabilityRequest)

    def body(self) -> dict[str, Any]:
        return self.capabilities.to_wire()

    def parse_envelope(self, envelope: dict[str, Any]) -> NewSessionResult:
        value = envelope.get("value")
        # JSON wire protocol remote ends put sessionId next to value.
        if isinstance(value, dict) and "sessionId" not in value and "sessionId" in envelope:
            value = {"sessionId": envelope["sessionId"], "capabilities": value}
        return expect_model(self.name, value, NewSessionResult)


@dataclass(frozen=True)
class DeleteSession(Command):
    method = "DELETE"
    path = "/session/{session_id}"


@dataclass(frozen=True)
class Status(Command):
    path = "/status"
    session_scoped = False

    def parse_result(self, value: Any) -> ServerStatus:
        return expect_model(self.name, value, ServerStatus)


@dataclass(frozen=True)
class GetTimeouts(Command):
    path = "/session/{session_id}/timeouts"

    def parse_result(self, value: Any) -> Timeouts:
        return expect_model(self.name, value, Timeouts)


@dataclass(frozen=True)
class SetTimeouts(Command):
    method = "POST"
    path = "/session/{session_id}/timeouts"

    timeouts: Timeouts

    def body(self) -> dict[str, Any]:
        data = self.timeouts.to_wire()
        if not data:
            raise InvalidCommandError("SetTimeouts needs at least one timeout")
        return data


# ========== Navigation ==========


@dataclass(frozen=True)
class NavigateTo(Command):
    method = "POST"
    path = "/session/{session_id}/url"

    url: str

    def body(self) -> dict[str, Any]:
        if not isinstance(self.url, str) or not self.url:
            raise InvalidCommandError("NavigateTo needs a non-empty URL")
        return {"url": self.url}


@dataclass(frozen=True)
class GetCurrentUrl(Command):
    path = "/session/{session_id}/url"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class Back(Command):
    method = "POST"
    path = "/session/{session_id}/back"


@dataclass(frozen=True)
class Forward(Command):
    method = "POST"
    path = "/session/{session_id}/forward"


@dataclass(frozen=True)
class Refresh(Command):
    method = "POST"
    path = "/session/{session_id}/refresh"


@dataclass(frozen=True)
class GetTitle(Command):
    path = "/session/{session_id}/title"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


# ========== Windows & frames ==========


@dataclass(frozen=True)
class GetWindowHandle(Command):
    path = "/session/{session_id}/window"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class CloseWindow(Command):
    method = "DELETE"
    path = "/session/{session_id}/window"

    def parse_result(self, value: Any) -> list[str]:
        # Remaining window handles
        return expect_str_list(self.name, value)


@dataclass(frozen=True)
class SwitchToWindow(Command):
    method = "POST"
    path = "/session/{session_id}/window"

    handle: str

    def body(self) -> dict[str, Any]:
        return {"handle": self.handle}


@dataclass(frozen=True)
class GetWindowHandles(Command):
    path = "/session/{session_id}/window/handles"

    def parse_result(self, value: Any) -> list[str]:
        return expect_str_list(self.name, value)


@dataclass(frozen=True)
class NewWindow(Command):
    method = "POST"
    path = "/session/{session_id}/window/new"

    type_hint: Optional[Literal["tab", "window"]] = None

    def body(self) -> dict[str, Any]:
        if self.type_hint is None:
            return {}
        if self.type_hint not in ("tab", "window"):
            raise InvalidCommandError(f"NewWindow type must be 'tab' or 'window', got {self.type_hint!r}")
        return {"type": self.type_hint}

    def parse_result(self, value: Any) -> NewWindowResult:
        return expect_model(self.name, value, NewWindowResult)


@dataclass(frozen=True)
class SwitchToFrame(Command):
    """Switch to a frame by index, by element, or back to the top-level browsing context (None)."""

    method = "POST"
    path = "/session/{session_id}/frame"

    frame: Union[None, int, ElementRef] = None

    def body(self) -> dict[str, Any]:
        if self.frame is None:
            return {"id": None}
        if isinstance(self.frame, ElementRef):
            return {"id": self.frame.to_wire()}
        if isinstance(self.frame, bool) or not isinstance(self.frame, int) or not 0 <= self.frame <= 65535:
            raise InvalidCommandError(f"Frame index must be an integer in [0, 65535], got {self.frame!r}")
        return {"id": self.frame}

    def element_refs(self) -> Iterator[ElementRef]:
        if isinstance(self.frame, ElementRef):
            yield self.frame


@dataclass(frozen=True)
class SwitchToParentFrame(Command):
    method = "POST"
    path = "/session/{session_id}/frame/parent"


@dataclass(frozen=True)
class GetWindowRect(Command):
    path = "/session/{session_id}/window/rect"

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


@dataclass(frozen=True)
class SetWindowRect(Command):
    method = "POST"
    path = "/session/{session_id}/window/rect"

    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def body(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key in ("x", "y", "width", "height"):
            v = getattr(self, key)
            if v is None:
                continue
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise InvalidCommandError(f"SetWindowRect.{key} must be a number, got {v!r}")
            if key in ("width", "height") and v < 0:
                raise InvalidCommandError(f"SetWindowRect.{key} must be non-negative")
            data[key] = int(v)
        return data

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


@dataclass(frozen=True)
class MaximizeWindow(Command):
    method = "POST"
    path = "/session/{session_id}/window/maximize"

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


@dataclass(frozen=True)
class MinimizeWindow(Command):
    method = "POST"
    path = "/session/{session_id}/window/minimize"

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


@dataclass(frozen=True)
class FullscreenWindow(Command):
    method = "POST"
    path = "/session/{session_id}/window/fullscreen"

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


# ========== Elements: retrieval ==========


@dataclass(frozen=True)
class GetActiveElement(Command):
    path = "/session/{session_id}/element/active"

    def parse_result(self, value: Any) -> str:
        return expect_element_id(self.name, value)


@dataclass(frozen=True)
class FindElement(Command):
    method = "POST"
    path = "/session/{session_id}/element"

    using: str
    value: str

    def body(self) -> dict[str, Any]:
        _check_locator(self.name, self.using, self.value)
        return {"using": self.using, "value": self.value}

    def parse_result(self, value: Any) -> str:
        return expect_element_id(self.name, value)


@dataclass(frozen=True)
class FindElements(Command):
    method = "POST"
    path = "/session/{session_id}/elements"

    using: str
    value: str

    def body(self) -> dict[str, Any]:
        _check_locator(self.name, self.using, self.value)
        return {"using": self.using, "value": self.value}

    def parse_result(self, value: Any) -> list[str]:
        return expect_element_ids(self.name, value)


@dataclass(frozen=True)
class FindElementFromElement(ElementCommand):
    method = "POST"
    path = "/session/{session_id}/element/{element_id}/element"

    using: str = By.CSS_SELECTOR.value
    value: str = ""

    def body(self) -> dict[str, Any]:
        _check_locator(self.name, self.using, self.value)
        return {"using": self.using, "value": self.value}

    def parse_result(self, value: Any) -> str:
        return expect_element_id(self.name, value)


@dataclass(frozen=True)
class FindElementsFromElement(ElementCommand):
    method = "POST"
    path = "/session/{session_id}/element/{element_id}/elements"

    using: str = By.CSS_SELECTOR.value
    value: str = ""

    def body(self) -> dict[str, Any]:
        _check_locator(self.name, self.using, self.value)
        return {"using": self.using, "value": self.value}

    def parse_result(self, value: Any) -> list[str]:
        return expect_element_ids(self.name, value)


# ========== Elements: state ==========


@dataclass(frozen=True)
class IsElementSelected(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/selected"

    def parse_result(self, value: Any) -> bool:
        return expect_bool(self.name, value)


@dataclass(frozen=True)
class IsElementEnabled(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/enabled"

    def parse_result(self, value: Any) -> bool:
        return expect_bool(self.name, value)


@dataclass(frozen=True)
class IsElementDisplayed(ElementCommand):
    # Not part of W3C proper, but served by chromedriver, geckodriver and Grid.
    path = "/session/{session_id}/element/{element_id}/displayed"

    def parse_result(self, value: Any) -> bool:
        return expect_bool(self.name, value)


@dataclass(frozen=True)
class GetElementAttribute(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/attribute/{name}"

    attribute: str = ""

    def path_params(self) -> dict[str, str]:
        return {**super().path_params(), "name": self.attribute}

    def parse_result(self, value: Any) -> str | None:
        return expect_optional_str(self.name, value)


@dataclass(frozen=True)
class GetElementProperty(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/property/{name}"

    property_name: str = ""

    def path_params(self) -> dict[str, str]:
        return {**super().path_params(), "name": self.property_name}

    def parse_result(self, value: Any) -> Any:
        # Any JSON value; element-valued properties are wrapped by the session.
        return value


@dataclass(frozen=True)
class GetElementCssValue(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/css/{name}"

    property_name: str = ""

    def path_params(self) -> dict[str, str]:
        return {**super().path_params(), "name": self.property_name}

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class GetElementText(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/text"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class GetElementTagName(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/name"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class GetElementRect(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/rect"

    def parse_result(self, value: Any) -> Rect:
        return expect_model(self.name, value, Rect)


@dataclass(frozen=True)
class GetComputedRole(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/computedrole"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class GetComputedLabel(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/computedlabel"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


# ========== Elements: interaction ==========


@dataclass(frozen=True)
class ElementClick(ElementCommand):
    method = "POST"
    path = "/session/{session_id}/element/{element_id}/click"


@dataclass(frozen=True)
class ElementClear(ElementCommand):
    method = "POST"
    path = "/session/{session_id}/element/{element_id}/clear"


@dataclass(frozen=True)
class ElementSendKeys(ElementCommand):
    method = "POST"
    path = "/session/{session_id}/element/{element_id}/value"

    text: str = ""

    def body(self) -> dict[str, Any]:
        if not isinstance(self.text, str):
            raise InvalidCommandError("ElementSendKeys text must be a string")
        return {"text": self.text}


# ========== Document ==========


@dataclass(frozen=True)
class GetPageSource(Command):
    path = "/session/{session_id}/source"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class ExecuteScript(Command):
    method = "POST"
    path = "/session/{session_id}/execute/sync"

    script: str
    args: tuple[Any, ...] = ()

    def body(self) -> dict[str, Any]:
        if not isinstance(self.script, str):
            raise InvalidCommandError(f"{self.name}: script must be a string")
        return {"script": self.script, "args": to_wire_value(list(self.args))}

    def element_refs(self) -> Iterator[ElementRef]:
        return iter_element_refs(self.args)

    def parse_result(self, value: Any) -> Any:
        return value


@dataclass(frozen=True)
class ExecuteAsyncScript(ExecuteScript):
    path = "/session/{session_id}/execute/async"


# ========== Cookies ==========


@dataclass(frozen=True)
class GetAllCookies(Command):
    path = "/session/{session_id}/cookie"

    def parse_result(self, value: Any) -> list[Cookie]:
        return expect_model_list(self.name, value, Cookie)


@dataclass(frozen=True)
class GetNamedCookie(Command):
    path = "/session/{session_id}/cookie/{name}"

    cookie_name: str

    def path_params(self) -> dict[str, str]:
        return {"name": self.cookie_name}

    def parse_result(self, value: Any) -> Cookie:
        return expect_model(self.name, value, Cookie)


@dataclass(frozen=True)
class AddCookie(Command):
    method = "POST"
    path = "/session/{session_id}/cookie"

    cookie: Cookie

    def body(self) -> dict[str, Any]:
        return {"cookie": self.cookie.to_wire()}


@dataclass(frozen=True)
class DeleteCookie(Command):
    method = "DELETE"
    path = "/session/{session_id}/cookie/{name}"

    cookie_name: str

    def path_params(self) -> dict[str, str]:
        return {"name": self.cookie_name}


@dataclass(frozen=True)
class DeleteAllCookies(Command):
    method = "DELETE"
    path = "/session/{session_id}/cookie"


# ========== Actions ==========


@dataclass(frozen=True)
class PerformActions(Command):
    method = "POST"
    path = "/session/{session_id}/actions"

    actions: ActionSequence = field(default_factory=ActionSequence)

    def body(self) -> dict[str, Any]:
        return self.actions.to_wire()

    def element_refs(self) -> Iterator[ElementRef]:
        return self.actions.element_refs()


@dataclass(frozen=True)
class ReleaseActions(Command):
    method = "DELETE"
    path = "/session/{session_id}/actions"


# ========== User prompts ==========


@dataclass(frozen=True)
class DismissAlert(Command):
    method = "POST"
    path = "/session/{session_id}/alert/dismiss"


@dataclass(frozen=True)
class AcceptAlert(Command):
    method = "POST"
    path = "/session/{session_id}/alert/accept"


@dataclass(frozen=True)
class GetAlertText(Command):
    path = "/session/{session_id}/alert/text"

    def parse_result(self, value: Any) -> str | None:
        return expect_optional_str(self.name, value)


@dataclass(frozen=True)
class SendAlertText(Command):
    method = "POST"
    path = "/session/{session_id}/alert/text"

    text: str

    def body(self) -> dict[str, Any]:
        return {"text": self.text}


# ========== Screen capture / print ==========


@dataclass(frozen=True)
class TakeScreenshot(Command):
    path = "/session/{session_id}/screenshot"

    def parse_result(self, value: Any) -> str:
        # Base64-encoded PNG
        return expect_str(self.name, value)


@dataclass(frozen=True)
class TakeElementScreenshot(ElementCommand):
    path = "/session/{session_id}/element/{element_id}/screenshot"

    def parse_result(self, value: Any) -> str:
        return expect_str(self.name, value)


@dataclass(frozen=True)
class PrintPage(Command):
    method = "POST"
    path = "/session/{session_id}/print"

    options: PrintOptions = field(default_factory=PrintOptions)

    def body(self) -> dict[str, Any]:
        return self.options.to_wire()

    def parse_result(self, value: Any) -> str:
        # Base64-encoded PDF
        return expect_str(self.name, value)

