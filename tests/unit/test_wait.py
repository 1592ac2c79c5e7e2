from __future__ import annotations

import pytest

from w3cdriver import conditions
from w3cdriver.config import DriverConfig
from w3cdriver.constants import ELEMENT_KEY
from w3cdriver.errors import InvalidSessionId, NoSuchElement, WaitTimeoutError
from w3cdriver.wait import WebDriverWait, wait_until


@pytest.mark.asyncio
async def test_wait_until_returns_first_truthy_value() -> None:
    results = iter([None, 0, "ready"])

    async def condition():
        return next(results)

    assert await wait_until(condition, timeout_s=1, poll_s=0.001) == "ready"


@pytest.mark.asyncio
async def test_wait_until_ignores_listed_exceptions_then_times_out() -> None:
    calls = 0

    async def condition():
        nonlocal calls
        calls += 1
        raise NoSuchElement("not yet")

    with pytest.raises(WaitTimeoutError) as exc_info:
        await wait_until(condition, timeout_s=0.02, poll_s=0.005, message="login form never appeared")

    assert calls >= 1
    assert str(exc_info.value) == "login form never appeared"
    assert isinstance(exc_info.value.last_error, NoSuchElement)
    assert exc_info.value.__cause__ is exc_info.value.last_error


@pytest.mark.asyncio
async def test_wait_until_zero_timeout_checks_once() -> None:
    calls = 0

    async def condition():
        nonlocal calls
        calls += 1
        return False

    with pytest.raises(WaitTimeoutError):
        await wait_until(condition, timeout_s=0, poll_s=0.01)

    assert calls == 1


@pytest.mark.asyncio
async def test_wait_until_propagates_other_errors() -> None:
    async def condition():
        raise InvalidSessionId("gone")

    with pytest.raises(InvalidSessionId):
        await wait_until(condition, timeout_s=1, poll_s=0.01)


@pytest.mark.asyncio
async def test_wait_until_rejects_bad_intervals() -> None:
    async def condition():
        return True

    with pytest.raises(ValueError):
        await wait_until(condition, timeout_s=-1)
    with pytest.raises(ValueError):
        await wait_until(condition, poll_s=0)


def test_wait_defaults_come_from_session_config(transport) -> None:
    from w3cdriver.session import WebDriverSession

    session = WebDriverSession(transport, config=DriverConfig(wait_timeout_s=3, poll_interval_s=0.25))
    wait = session.wait()

    assert wait.timeout_s == 3
    assert wait.poll_s == 0.25
    assert session.wait(timeout_s=1).timeout_s == 1


@pytest.mark.asyncio
async def test_until_element_located(active_session, transport) -> None:
    transport.reply_error("no such element", "", status=404)
    transport.reply({ELEMENT_KEY: "el-7"})

    element = await WebDriverWait(active_session, timeout_s=1, poll_s=0.001).until(
        conditions.element_located("css selector", "#late")
    )

    assert element.id == "el-7"
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_until_title_contains(active_session, transport) -> None:
    transport.reply("Loading").reply("Dashboard - App")

    assert await active_session.wait(timeout_s=1, poll_s=0.001).until(conditions.title_contains("Dashboard"))


@pytest.mark.asyncio
async def test_until_url_matches(active_session, transport) -> None:
    transport.reply("https://example.com/orders/42")

    assert await active_session.wait(timeout_s=1, poll_s=0.001).until(conditions.url_matches(r"/orders/\d+$"))


@pytest.mark.asyncio
async def test_until_element_clickable(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "btn"}).reply(True).reply(False)
    transport.reply({ELEMENT_KEY: "btn"}).reply(True).reply(True)

    button = await active_session.wait(timeout_s=1, poll_s=0.001).until(
        conditions.element_clickable("id", "submit")
    )

    assert button.id == "btn"


@pytest.mark.asyncio
async def test_alert_present_treats_no_such_alert_as_not_yet(active_session, transport) -> None:
    transport.reply_error("no such alert", "", status=404)
    transport.reply("Delete item?")

    text = await active_session.wait(timeout_s=1, poll_s=0.001).until(conditions.alert_present())

    assert text == "Delete item?"


@pytest.mark.asyncio
async def test_until_not_staleness(active_session, transport) -> None:
    element = active_session.create_element("old")
    transport.reply(True)
    transport.reply_error("stale element reference", "", status=404)

    assert await active_session.wait(timeout_s=1, poll_s=0.001).until(conditions.staleness_of(element))


@pytest.mark.asyncio
async def test_until_not_element_located(active_session, transport) -> None:
    transport.reply({ELEMENT_KEY: "spinner"})
    transport.reply_error("no such element", "", status=404)

    assert await active_session.wait(timeout_s=1, poll_s=0.001).until_not(
        conditions.element_located("css selector", ".spinner")
    )


@pytest.mark.asyncio
async def test_until_times_out(active_session, transport) -> None:
    for _ in range(100):
        transport.reply("Loading")

    with pytest.raises(WaitTimeoutError):
        await active_session.wait(timeout_s=0.02, poll_s=0.005).until(conditions.title_is("Done"))
