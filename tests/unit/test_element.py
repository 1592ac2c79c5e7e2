from __future__ import annotations

import base64

import pytest

from w3cdriver.constants import ELEMENT_KEY
from w3cdriver.element import WebElement
from w3cdriver.errors import StaleElementReference
from w3cdriver.keys import Keys
from w3cdriver.models import ElementRef, Rect

BASE = "http://driver.test:4444/session/abc123/element/el-1"


@pytest.fixture
async def element(active_session, transport) -> WebElement:
    transport.reply({ELEMENT_KEY: "el-1"})
    found = await active_session.find_element("css selector", "input")
    transport.requests.clear()
    return found


@pytest.mark.asyncio
async def test_click_clear_and_send_keys(element, transport) -> None:
    transport.reply(None).reply(None).reply(None)

    await element.click()
    await element.clear()
    await element.send_keys("user", Keys.TAB)

    assert [r["url"] for r in transport.requests] == [f"{BASE}/click", f"{BASE}/clear", f"{BASE}/value"]
    assert transport.requests[0]["body"] == {}
    assert transport.last["body"] == {"text": "user" + Keys.TAB}


@pytest.mark.asyncio
async def test_state_queries(element, transport) -> None:
    transport.reply("Sign in").reply("button").reply(True).reply(False).reply(True)

    assert await element.text() == "Sign in"
    assert await element.tag_name() == "button"
    assert await element.is_displayed() is True
    assert await element.is_enabled() is False
    assert await element.is_selected() is True

    assert [r["url"].rsplit("/", 1)[1] for r in transport.requests] == [
        "text",
        "name",
        "displayed",
        "enabled",
        "selected",
    ]


@pytest.mark.asyncio
async def test_no_caching_between_calls(element, transport) -> None:
    transport.reply("first").reply("second")

    assert await element.text() == "first"
    assert await element.text() == "second"
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_attribute_property_and_css(element, transport) -> None:
    transport.reply(None).reply({ELEMENT_KEY: "form-1"}).reply("rgb(0, 0, 0)")

    assert await element.get_attribute("disabled") is None
    form = await element.get_property("form")
    assert await element.value_of_css_property("color") == "rgb(0, 0, 0)"

    assert transport.requests[0]["url"] == f"{BASE}/attribute/disabled"
    assert transport.requests[1]["url"] == f"{BASE}/property/form"
    assert transport.requests[2]["url"] == f"{BASE}/css/color"
    assert isinstance(form, WebElement)
    assert form.id == "form-1"


@pytest.mark.asyncio
async def test_rect_and_accessibility(element, transport) -> None:
    transport.reply({"x": 10, "y": 20.5, "width": 100, "height": 30}).reply("button").reply("Submit")

    assert await element.rect() == Rect(x=10, y=20.5, width=100, height=30)
    assert await element.computed_role() == "button"
    assert await element.computed_label() == "Submit"
    assert transport.requests[1]["url"] == f"{BASE}/computedrole"


@pytest.mark.asyncio
async def test_scoped_find(element, transport) -> None:
    transport.reply({ELEMENT_KEY: "child-1"})
    transport.reply([{ELEMENT_KEY: "li-1"}, {ELEMENT_KEY: "li-2"}])

    child = await element.find_element("class name", "hint")
    items = await element.find_elements("tag name", "li")

    assert transport.requests[0]["url"] == f"{BASE}/element"
    assert transport.requests[0]["body"] == {"using": "css selector", "value": ".hint"}
    assert child.ref == ElementRef(id="child-1", session_id="abc123")
    assert [i.id for i in items] == ["li-1", "li-2"]


@pytest.mark.asyncio
async def test_element_screenshot(element, transport) -> None:
    transport.reply(base64.b64encode(b"png-bytes").decode())

    assert await element.screenshot_png() == b"png-bytes"
    assert transport.last["url"] == f"{BASE}/screenshot"


@pytest.mark.asyncio
async def test_stale_element_surfaces_on_next_use(element, transport) -> None:
    transport.reply_error("stale element reference", "detached", status=404)

    with pytest.raises(StaleElementReference):
        await element.text()


@pytest.mark.asyncio
async def test_equality_and_hashing(active_session) -> None:
    a = active_session.create_element("el-1")
    b = active_session.create_element("el-1")
    c = active_session.create_element("el-2")

    assert a == b
    assert a != c
    assert len({a, b, c}) == 2
    assert a == ElementRef(id="el-1", session_id="abc123")
    assert a != "el-1"
    assert a.to_wire() == {ELEMENT_KEY: "el-1"}
