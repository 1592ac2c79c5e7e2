"""
Error taxonomy for the WebDriver client.

Every failure a caller can observe is a subclass of `WebDriverError`:

- TransportError: the HTTP exchange itself failed (connection refused, timeout).
- WireError: the remote end answered with a well-formed W3C error envelope.
  There is one subclass per W3C error code; codes this client does not know
  map to `UnknownError`, which keeps the received code string untouched.
- MalformedResponse: a success envelope whose payload does not have the
  shape the issuing command expects.
- SessionNotActive: a command was issued before the session was created or
  after it was terminated. Raised locally, without a network round trip.
- ElementSessionMismatch: an element reference was used against a session
  that did not issue it.
- WaitTimeoutError: an explicit wait ran out of time.

`InvalidCommandError` is deliberately *not* a `WebDriverError`: it signals a
programming error while encoding a command (bad argument, missing session id)
rather than a runtime condition.

Usage:
    try:
        await element.click()
    except StaleElementReference:
        element = await session.find_element(By.CSS_SELECTOR, "#submit")
        await element.click()
"""

from __future__ import annotations

from typing import Any, ClassVar


class WebDriverError(Exception):
    """Base class for every runtime error raised by w3cdriver."""


class InvalidCommandError(ValueError):
    """A command could not be encoded (caller or library bug, never a server condition)."""


class TransportError(WebDriverError):
    """The request/response exchange with the remote end failed."""

    def __init__(self, message: str, *, method: str | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url

    @classmethod
    def from_exception(cls, exc: BaseException, *, method: str, url: str) -> TransportError:
        return cls(f"{method} {url} failed: {exc}", method=method, url=url)

    @classmethod
    def timeout(cls, *, method: str, url: str, timeout_s: float) -> TransportError:
        return cls(
            f"{method} {url} timed out after {timeout_s:g}s",
            method=method,
            url=url,
        )


class WireError(WebDriverError):
    """
    An error reported by the remote end.

    Attributes:
        status_code: HTTP status of the response
        error_code: W3C error code exactly as received (the authoritative discriminant)
        message: Human readable message from the remote end
        stacktrace: Remote stack trace, if provided
        data: Extra error data (e.g. the alert text for `unexpected alert open`)
    """

    code: ClassVar[str] = ""
    http_status: ClassVar[int] = 500
    # Conditions a caller can reasonably recover from by re-finding / retrying.
    transient: ClassVar[bool] = False

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        stacktrace: str | None = None,
        data: Any | None = None,
    ) -> None:
        self.error_code = error_code if error_code is not None else self.code
        self.message = message
        self.status_code = status_code if status_code is not None else self.http_status
        self.stacktrace = stacktrace
        self.data = data
        super().__init__(f"{self.error_code}: {message}" if message else self.error_code)

    @classmethod
    def from_payload(cls, status_code: int, payload: dict[str, Any]) -> WireError:
        """Build the matching subclass from a decoded `{"error", "message", ...}` object."""
        raw_code = payload.get("error")
        error_code = str(raw_code) if raw_code is not None else UnknownError.code
        message = payload.get("message")
        stacktrace = payload.get("stacktrace")
        error_cls = error_class_for(error_code)
        return error_cls(
            str(message) if message is not None else "",
            status_code=status_code,
            error_code=error_code,
            stacktrace=str(stacktrace) if stacktrace else None,
            data=payload.get("data"),
        )


class ElementClickIntercepted(WireError):
    code = "element click intercepted"
    http_status = 400
    transient = True


class ElementNotInteractable(WireError):
    code = "element not interactable"
    http_status = 400
    transient = True


class InsecureCertificate(WireError):
    code = "insecure certificate"
    http_status = 400


class InvalidArgument(WireError):
    code = "invalid argument"
    http_status = 400


class InvalidCookieDomain(WireError):
    code = "invalid cookie domain"
    http_status = 400


class InvalidElementState(WireError):
    code = "invalid element state"
    http_status = 400
    transient = True


class InvalidSelector(WireError):
    code = "invalid selector"
    http_status = 400


class InvalidSessionId(WireError):
    code = "invalid session id"
    http_status = 404


class JavascriptError(WireError):
    code = "javascript error"
    http_status = 500


class MoveTargetOutOfBounds(WireError):
    code = "move target out of bounds"
    http_status = 500


class NoSuchAlert(WireError):
    code = "no such alert"
    http_status = 404


class NoSuchCookie(WireError):
    code = "no such cookie"
    http_status = 404


class NoSuchElement(WireError):
    code = "no such element"
    http_status = 404
    transient = True


class NoSuchFrame(WireError):
    code = "no such frame"
    http_status = 404


class NoSuchWindow(WireError):
    code = "no such window"
    http_status = 404


class NoSuchShadowRoot(WireError):
    code = "no such shadow root"
    http_status = 404


class DetachedShadowRoot(WireError):
    code = "detached shadow root"
    http_status = 404
    transient = True


class ScriptTimeout(WireError):
    code = "script timeout"
    http_status = 500


class SessionNotCreated(WireError):
    code = "session not created"
    http_status = 500

    @classmethod
    def from_error(cls, exc: WebDriverError) -> SessionNotCreated:
        if isinstance(exc, WireError):
            return cls(
                f"{exc.error_code}: {exc.message}" if exc.message else exc.error_code,
                status_code=exc.status_code,
                stacktrace=exc.stacktrace,
                data=exc.data,
            )
        return cls(str(exc))


class StaleElementReference(WireError):
    code = "stale element reference"
    http_status = 404
    transient = True


class Timeout(WireError):
    code = "timeout"
    http_status = 500


class UnableToSetCookie(WireError):
    code = "unable to set cookie"
    http_status = 500


class UnableToCaptureScreen(WireError):
    code = "unable to capture screen"
    http_status = 500


class UnexpectedAlertOpen(WireError):
    code = "unexpected alert open"
    http_status = 500

    @property
    def alert_text(self) -> str | None:
        if isinstance(self.data, dict):
            text = self.data.get("text")
            return str(text) if text is not None else None
        return None


class UnknownCommand(WireError):
    code = "unknown command"
    http_status = 404


class UnknownError(WireError):
    """
    Fallback for `unknown error` and for any code this client does not recognize.

    `error_code` (also exposed as `raw_code`) always holds the string the
    remote end sent.
    """

    code = "unknown error"
    http_status = 500

    @property
    def raw_code(self) -> str:
        return self.error_code


class UnknownMethod(WireError):
    code = "unknown method"
    http_status = 405


class UnsupportedOperation(WireError):
    code = "unsupported operation"
    http_status = 500


ERROR_CLASSES: dict[str, type[WireError]] = {
    cls.code: cls
    for cls in (
        ElementClickIntercepted,
        ElementNotInteractable,
        InsecureCertificate,
        InvalidArgument,
        InvalidCookieDomain,
        InvalidElementState,
        InvalidSelector,
        InvalidSessionId,
        JavascriptError,
        MoveTargetOutOfBounds,
        NoSuchAlert,
        NoSuchCookie,
        NoSuchElement,
        NoSuchFrame,
        NoSuchWindow,
        NoSuchShadowRoot,
        DetachedShadowRoot,
        ScriptTimeout,
        SessionNotCreated,
        StaleElementReference,
        Timeout,
        UnableToSetCookie,
        UnableToCaptureScreen,
        UnexpectedAlertOpen,
        UnknownCommand,
        UnknownError,
        UnknownMethod,
        UnsupportedOperation,
    )
}


def error_class_for(error_code: str) -> type[WireError]:
    """Resolve a W3C error code to its exception class (`UnknownError` if unrecognized)."""
    return ERROR_CLASSES.get(error_code, UnknownError)


class MalformedResponse(WebDriverError):
    """A response could not be interpreted as the payload its command expects."""

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        value: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.value = value
        self.status_code = status_code

    @classmethod
    def unexpected_value(cls, command: str, expected: str, value: Any) -> MalformedResponse:
        shown = repr(value)
        if len(shown) > 200:
            shown = shown[:200] + "..."
        return cls(
            f"{command}: expected {expected}, got {type(value).__name__} {shown}",
            command=command,
            value=value,
        )

    @classmethod
    def invalid_body(cls, status_code: int, reason: str, body: bytes) -> MalformedResponse:
        preview = body[:200].decode("utf-8", errors="replace")
        return cls(
            f"Response (HTTP {status_code}) is not a WebDriver envelope: {reason}. Body: {preview!r}",
            status_code=status_code,
            value=preview,
        )


class SessionNotActive(WebDriverError):
    """A command was issued while the session is not in the ACTIVE state."""

    def __init__(self, state: str, command: str | None = None) -> None:
        what = f"Cannot issue {command}" if command else "Cannot issue commands"
        super().__init__(f"{what}: session is {state}")
        self.state = state
        self.command = command


class ElementSessionMismatch(WebDriverError):
    """An element reference was used against a session that did not issue it."""

    def __init__(self, element_id: str, element_session_id: str, session_id: str | None) -> None:
        super().__init__(
            f"Element {element_id} belongs to session {element_session_id}, "
            f"not to session {session_id}"
        )
        self.element_id = element_id
        self.element_session_id = element_session_id
        self.session_id = session_id


class WaitTimeoutError(WebDriverError):
    """An explicit wait did not observe its condition before the deadline."""

    def __init__(self, message: str, *, timeout_s: float, last_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.timeout_s = timeout_s
        self.last_error = last_error


# JSON wire protocol (pre-W3C) numeric status -> W3C error code.
LEGACY_STATUS_CODES: dict[int, str] = {
    6: InvalidSessionId.code,
    7: NoSuchElement.code,
    8: NoSuchFrame.code,
    9: UnknownCommand.code,
    10: StaleElementReference.code,
    11: ElementNotInteractable.code,
    12: InvalidElementState.code,
    13: UnknownError.code,
    17: JavascriptError.code,
    19: InvalidSelector.code,
    21: Timeout.code,
    23: NoSuchWindow.code,
    24: InvalidCookieDomain.code,
    25: UnableToSetCookie.code,
    26: UnexpectedAlertOpen.code,
    27: NoSuchAlert.code,
    28: ScriptTimeout.code,
    32: InvalidSelector.code,
    33: SessionNotCreated.code,
    34: MoveTargetOutOfBounds.code,
    61: InvalidArgument.code,
}
