from __future__ import annotations

import base64

import pytest

from w3cdriver.actions import ActionChain
from w3cdriver.capabilities import CapabilityRequest, DesiredCapabilities
from w3cdriver.config import DriverConfig
from w3cdriver.constants import ELEMENT_KEY
from w3cdriver.element import WebElement
from w3cdriver.errors import (
    ElementSessionMismatch,
    InvalidSessionId,
    MalformedResponse,
    NoSuchElement,
    SessionNotActive,
    SessionNotCreated,
    StaleElementReference,
    TransportError,
    UnknownError,
)
from w3cdriver.models import Cookie, ElementRef, Rect, Timeouts
from w3cdriver.session import SessionState, WebDriverSession
from w3cdriver.transport import HttpxTransport, RequestsTransport

SERVER = "http://driver.test:4444"


# ----- lifecycle -----


@pytest.mark.asyncio
async def test_new_session_sends_w3c_body_and_becomes_active(session, transport) -> None:
    returned = {"browserName": "firefox", "browserVersion": "128.0", "platformName": "linux"}
    transport.reply({"sessionId": "abc123", "capabilities": returned})

    await session.start({"browserName": "firefox"})

    assert transport.last == {
        "method": "POST",
        "url": f"{SERVER}/session",
        "body": {"capabilities": {"alwaysMatch": {"browserName": "firefox"}, "firstMatch": [{}]}},
    }
    assert session.state is SessionState.ACTIVE
    assert session.session_id == "abc123"
    assert session.capabilities == returned
    assert session.requested_capabilities == {"browserName": "firefox"}


@pytest.mark.asyncio
async def test_start_records_negotiated_candidate(session, transport) -> None:
    transport.reply({"sessionId": "s1", "capabilities": {}})
    request = CapabilityRequest(
        always_match={"acceptInsecureCerts": True},
        first_match=[{"browserName": "chrome"}, {"browserName": "firefox"}],
    )

    await session.start(request)

    assert session.requested_capabilities == {"acceptInsecureCerts": True, "browserName": "chrome"}
    assert transport.last["body"]["capabilities"]["firstMatch"] == [
        {"browserName": "chrome"},
        {"browserName": "firefox"},
    ]


@pytest.mark.asyncio
async def test_start_accepts_desired_capabilities_builder(session, transport) -> None:
    transport.reply({"sessionId": "s1", "capabilities": {}})
    caps = DesiredCapabilities.chrome()
    caps.set_headless()

    await session.start(caps)

    always = transport.last["body"]["capabilities"]["alwaysMatch"]
    assert always["browserName"] == "chrome"
    assert "--headless=new" in always["goog:chromeOptions"]["args"]


@pytest.mark.asyncio
async def test_start_accepts_legacy_top_level_session_id(session, transport) -> None:
    transport.reply_raw(b'{"sessionId": "legacy1", "status": 0, "value": {"browserName": "chrome"}}')

    await session.start()

    assert session.session_id == "legacy1"
    assert session.capabilities == {"browserName": "chrome"}


@pytest.mark.asyncio
async def test_session_not_created_leaves_session_uninitialized(session, transport) -> None:
    transport.reply_error("session not created", "No matching capabilities found")

    with pytest.raises(SessionNotCreated) as exc_info:
        await session.start({"browserName": "netscape"})

    assert "No matching capabilities" in str(exc_info.value)
    assert session.state is SessionState.UNINITIALIZED
    assert session.session_id is None


@pytest.mark.asyncio
async def test_other_creation_errors_are_wrapped(session, transport) -> None:
    transport.reply_error("invalid argument", "bad capability", status=400)

    with pytest.raises(SessionNotCreated) as exc_info:
        await session.start()

    assert "invalid argument" in str(exc_info.value)
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_missing_session_id_is_wrapped(session, transport) -> None:
    transport.reply({"capabilities": {}})

    with pytest.raises(SessionNotCreated) as exc_info:
        await session.start()

    assert isinstance(exc_info.value.__cause__, MalformedResponse)
    assert session.state is SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_transport_errors_propagate_unwrapped_on_start(session, transport) -> None:
    transport.fail_with(TransportError("connection refused"))

    with pytest.raises(TransportError):
        await session.start()

    assert session.state is SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_start_can_be_retried_after_failure(session, transport) -> None:
    transport.reply_error("session not created", "busy")
    transport.reply({"sessionId": "second", "capabilities": {}})

    with pytest.raises(SessionNotCreated):
        await session.start()
    await session.start()

    assert session.session_id == "second"


@pytest.mark.asyncio
async def test_start_twice_is_rejected_without_network(active_session, transport) -> None:
    with pytest.raises(SessionNotCreated):
        await active_session.start()

    assert transport.requests == []


@pytest.mark.asyncio
async def test_commands_before_start_fail_locally(session, transport) -> None:
    with pytest.raises(SessionNotActive) as exc_info:
        await session.get("https://example.com")

    assert exc_info.value.state == "uninitialized"
    assert exc_info.value.command == "NavigateTo"
    assert transport.requests == []


@pytest.mark.asyncio
async def test_quit_deletes_session_and_blocks_further_commands(active_session, transport) -> None:
    transport.reply(None)

    await active_session.quit()

    assert transport.last["method"] == "DELETE"
    assert transport.last["url"] == f"{SERVER}/session/abc123"
    assert active_session.state is SessionState.TERMINATED

    with pytest.raises(SessionNotActive):
        await active_session.title()
    with pytest.raises(SessionNotActive):
        await active_session.quit()
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_invalid_session_id_terminates_session(active_session, transport) -> None:
    transport.reply_error("invalid session id", "session deleted", status=404)

    with pytest.raises(InvalidSessionId):
        await active_session.title()

    assert active_session.state is SessionState.TERMINATED
    with pytest.raises(SessionNotActive):
        await active_session.title()
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_other_errors_leave_session_active(active_session, transport) -> None:
    transport.reply_error("no such element", "nope", status=404)

    with pytest.raises(NoSuchElement):
        await active_session.find_element("css selector", "#missing")

    assert active_session.is_active


@pytest.mark.asyncio
async def test_async_context_manager_starts_and_quits(transport) -> None:
    transport.reply({"sessionId": "ctx", "capabilities": {}})
    transport.reply(None)

    async with WebDriverSession(transport, SERVER, capabilities={"browserName": "chrome"}) as session:
        assert session.session_id == "ctx"

    assert session.state is SessionState.TERMINATED
    assert [r["method"] for r in transport.requests] == ["POST", "DELETE"]
    # Caller-provided transports are left open.
    assert transport.closed is False


def test_server_url_trailing_slash_is_trimmed(transport) -> None:
    session = WebDriverSession(transport, "http://localhost:9515/")
    assert session.server_url == "http://localhost:9515"


def test_from_config_builds_named_transport() -> None:
    session = WebDriverSession.from_config(
        DriverConfig(server_url="http://grid:4444/wd/hub", transport="requests", request_timeout_s=15)
    )
    assert isinstance(session.transport, RequestsTransport)
    assert session.transport.timeout_s == 15
    assert session.server_url == "http://grid:4444/wd/hub"

    default = WebDriverSession.from_config(DriverConfig())
    assert isinstance(default.transport, HttpxTransport)


# ----- commands -----


@pytest.mark.asyncio
async def test_navigation_commands(active_session, transport) -> None:
    transport.reply(None).reply("https://example.com/").reply("Example Domain")

    await active_session.get("https://example.com")
    url = await active_session.current_url()
    title = await active_session.title()

    assert transport.requests[0]["body"] == {"url": "https://example.com"}
    assert transport.requests[0]["url"] == f"{SERVER}/session/abc123/url"
    assert url == "https://example.com/"
    assert title == "Example Domain"


@pytest.mark.asyncio
async def test_void_command_discards_unexpected_value(active_session, transport) -> None:
    transport.reply({"unexpected": True})

    assert await active_session.refresh() is None


@pytest.mark.asyncio
async def test_result_of_wrong_type_is_malformed(active_session, transport) -> None:
    transport.reply(42)

    with pytest.raises(MalformedResponse):
        await active_session.title()


@pytest.mark.asyncio
async def test_find_element_wraps_reference(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "el-1"})

    element = await active_session.find_element("id", "login")

    assert transport.last["body"] == {"using": "css selector", "value": '[id="login"]'}
    assert isinstance(element, WebElement)
    assert element.ref == ElementRef(id="el-1", session_id="abc123")


@pytest.mark.asyncio
async def test_find_elements_returns_empty_list(active_session, transport) -> None:
    transport.reply([])

    assert await active_session.find_elements("css selector", ".none") == []


@pytest.mark.asyncio
async def test_element_from_other_session_is_rejected(active_session, transport) -> None:
    foreign = WebElement(ElementRef(id="el-9", session_id="other"), active_session)

    with pytest.raises(ElementSessionMismatch):
        await foreign.click()
    with pytest.raises(ElementSessionMismatch):
        await active_session.execute_script("return arguments[0];", foreign)

    assert transport.requests == []


@pytest.mark.asyncio
async def test_stale_element_click(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "el-1"})
    transport.reply_error("stale element reference", "element is not attached", status=404)

    element = await active_session.find_element("css selector", "button")
    with pytest.raises(StaleElementReference) as exc_info:
        await element.click()

    assert exc_info.value.status_code == 404
    assert exc_info.value.transient is True
    assert active_session.is_active


@pytest.mark.asyncio
async def test_unknown_error_code_keeps_raw_code(active_session, transport) -> None:
    transport.reply_error("totally new error", "??", status=500)

    with pytest.raises(UnknownError) as exc_info:
        await active_session.title()

    assert exc_info.value.raw_code == "totally new error"


@pytest.mark.asyncio
async def test_execute_script_round_trips_elements(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "el-1"})
    transport.reply([{ELEMENT_KEY: "el-2"}, {"nested": {ELEMENT_KEY: "el-3"}}, 7])

    element = await active_session.find_element("tag name", "div")
    result = await active_session.execute_script("return [arguments[0], 1];", element, [element])

    assert transport.last["url"] == f"{SERVER}/session/abc123/execute/sync"
    assert transport.last["body"] == {
        "script": "return [arguments[0], 1];",
        "args": [{ELEMENT_KEY: "el-1"}, [{ELEMENT_KEY: "el-1"}]],
    }
    assert result[0] == ElementRef(id="el-2", session_id="abc123")
    assert isinstance(result[1]["nested"], WebElement)
    assert result[2] == 7


@pytest.mark.asyncio
async def test_execute_async_script_path(active_session, transport) -> None:
    transport.reply("done")

    assert await active_session.execute_async_script("arguments[0]('done')") == "done"
    assert transport.last["url"].endswith("/execute/async")


@pytest.mark.asyncio
async def test_timeouts(active_session, transport) -> None:
    transport.reply(None)
    transport.reply({"script": 30000, "pageLoad": 300000, "implicit": 0})

    await active_session.set_timeouts(implicit_ms=500, page_load_ms=10000)
    timeouts = await active_session.get_timeouts()

    assert transport.requests[0]["body"] == {"pageLoad": 10000, "implicit": 500}
    assert timeouts == Timeouts(script=30000, page_load=300000, implicit=0)


@pytest.mark.asyncio
async def test_windows_and_frames(active_session, transport) -> None:
    transport.reply(["w1", "w2"])
    transport.reply(None)
    transport.reply({"handle": "w3", "type": "tab"})
    transport.reply({"x": 0, "y": 0, "width": 800, "height": 600})
    transport.reply(None)
    transport.reply(["w1"])

    assert await active_session.window_handles() == ["w1", "w2"]
    await active_session.switch_to_window("w2")
    assert (await active_session.new_window()).handle == "w3"
    assert await active_session.set_window_rect(width=800, height=600) == Rect(x=0, y=0, width=800, height=600)
    await active_session.switch_to_frame(0)
    assert await active_session.close_window() == ["w1"]

    bodies = [r["body"] for r in transport.requests]
    assert bodies[1] == {"handle": "w2"}
    assert bodies[2] == {"type": "tab"}
    assert bodies[3] == {"width": 800, "height": 600}
    assert bodies[4] == {"id": 0}
    assert transport.requests[5]["method"] == "DELETE"


@pytest.mark.asyncio
async def test_cookies(active_session, transport) -> None:
    transport.reply(None)
    transport.reply([{"name": "sid", "value": "1", "httpOnly": True, "sameSite": "Lax"}])
    transport.reply(None)

    await active_session.add_cookie({"name": "sid", "value": "1", "httpOnly": True})
    cookies = await active_session.get_cookies()
    await active_session.delete_cookie("sid")

    assert transport.requests[0]["body"] == {"cookie": {"name": "sid", "value": "1", "httpOnly": True}}
    assert cookies == [Cookie(name="sid", value="1", http_only=True, same_site="Lax")]
    assert transport.requests[2]["url"] == f"{SERVER}/session/abc123/cookie/sid"


@pytest.mark.asyncio
async def test_alerts(active_session, transport) -> None:
    transport.reply("Are you sure?").reply(None).reply(None)

    assert await active_session.alert_text() == "Are you sure?"
    await active_session.send_alert_text("yes")
    await active_session.accept_alert()

    assert transport.requests[1]["body"] == {"text": "yes"}
    assert transport.requests[2]["url"].endswith("/alert/accept")


@pytest.mark.asyncio
async def test_screenshot_png_decodes_base64(active_session, transport) -> None:
    png = b"\x89PNG\r\n\x1a\nfake"
    transport.reply(base64.b64encode(png).decode())
    transport.reply("not base64!!")

    assert await active_session.screenshot_png() == png
    with pytest.raises(MalformedResponse):
        await active_session.screenshot_png()


@pytest.mark.asyncio
async def test_print_pdf(active_session, transport) -> None:
    transport.reply(base64.b64encode(b"%PDF-1.4").decode())

    assert await active_session.print_pdf() == b"%PDF-1.4"
    assert transport.last["body"]["orientation"] == "portrait"
    assert transport.last["body"]["shrinkToFit"] is True


@pytest.mark.asyncio
async def test_status_works_without_session(session, transport) -> None:
    transport.reply({"ready": True, "message": "ready to create sessions", "build": {"version": "4"}})

    status = await session.status()

    assert status.ready is True
    assert transport.last["url"] == f"{SERVER}/status"
    assert session.state is SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_action_chain_perform_sends_one_command_and_clears(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "el-1"})
    transport.reply(None)

    element = await active_session.find_element("css selector", "#target")
    chain = active_session.action_chain().move_to_element(element).click()
    await chain.perform()

    sent = transport.last
    assert sent["url"] == f"{SERVER}/session/abc123/actions"
    pointer = sent["body"]["actions"][0]
    assert pointer["type"] == "pointer"
    assert pointer["actions"][0]["origin"] == {ELEMENT_KEY: "el-1"}
    assert len(chain) == 0


@pytest.mark.asyncio
async def test_empty_action_chain_sends_nothing(active_session, transport) -> None:
    await active_session.perform_actions(active_session.action_chain())

    assert transport.requests == []


@pytest.mark.asyncio
async def test_perform_actions_sends_standalone_chain_through_this_session(active_session, transport) -> None:
    transport.reply(None)
    chain = ActionChain().add_key_down("a")

    await active_session.perform_actions(chain)

    assert transport.last == {
        "method": "POST",
        "url": f"{SERVER}/session/abc123/actions",
        "body": {"actions": [{"type": "key", "id": "keyboard", "actions": [{"type": "keyDown", "value": "a"}]}]},
    }
    assert len(chain) == 0


@pytest.mark.asyncio
async def test_perform_actions_ignores_the_session_a_chain_was_built_on(active_session, transport) -> None:
    other = WebDriverSession(transport, "http://other-driver.test:4444")
    transport.reply(None)

    await active_session.perform_actions(other.action_chain().add_key_down("a"))

    assert transport.last["url"] == f"{SERVER}/session/abc123/actions"
    assert len(transport.requests) == 1
