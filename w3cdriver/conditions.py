"""
Ready-made conditions for `WebDriverWait.until`.

Each factory returns `async def condition(session)`; a falsy return means
"not yet". Lookups raise `NoSuchElement` / `StaleElementReference` while the
page settles; the wait ignores those by default.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Union

from .by import By
from .element import WebElement
from .errors import NoSuchAlert, StaleElementReference

if TYPE_CHECKING:
    from .session import WebDriverSession

Condition = Callable[["WebDriverSession"], Awaitable[Any]]
Target = Union[WebElement, tuple[Union[By, str], str]]


async def _resolve(session: WebDriverSession, target: Target) -> WebElement:
    if isinstance(target, WebElement):
        return target
    by, value = target
    return await session.find_element(by, value)


def title_is(title: str) -> Condition:
    async def condition(session: WebDriverSession) -> bool:
        return await session.title() == title

    return condition


def title_contains(fragment: str) -> Condition:
    async def condition(session: WebDriverSession) -> bool:
        return fragment in await session.title()

    return condition


def url_contains(fragment: str) -> Condition:
    async def condition(session: WebDriverSession) -> bool:
        return fragment in await session.current_url()

    return condition


def url_matches(pattern: str) -> Condition:
    regex = re.compile(pattern)

    async def condition(session: WebDriverSession) -> bool:
        return regex.search(await session.current_url()) is not None

    return condition


def element_located(by: By | str, value: str) -> Condition:
    """Element is present in the DOM; returns it."""

    async def condition(session: WebDriverSession) -> WebElement:
        return await session.find_element(by, value)

    return condition


def elements_located(by: By | str, value: str) -> Condition:
    """At least one element is present; returns the list."""

    async def condition(session: WebDriverSession) -> list[WebElement]:
        return await session.find_elements(by, value)

    return condition


def element_displayed(target: Target | By | str, value: str | None = None) -> Condition:
    """Element is present and displayed; returns it (False while hidden)."""
    resolved = _target(target, value)

    async def condition(session: WebDriverSession) -> WebElement | bool:
        element = await _resolve(session, resolved)
        return element if await element.is_displayed() else False

    return condition


def element_clickable(target: Target | By | str, value: str | None = None) -> Condition:
    """Element is displayed and enabled; returns it."""
    resolved = _target(target, value)

    async def condition(session: WebDriverSession) -> WebElement | bool:
        element = await _resolve(session, resolved)
        if await element.is_displayed() and await element.is_enabled():
            return element
        return False

    return condition


def text_present(by: By | str, value: str, text: str) -> Condition:
    async def condition(session: WebDriverSession) -> bool:
        element = await session.find_element(by, value)
        return text in await element.text()

    return condition


def alert_present() -> Condition:
    """A user prompt is open; returns its text (or True for an empty prompt)."""

    async def condition(session: WebDriverSession) -> str | bool:
        try:
            text = await session.alert_text()
        except NoSuchAlert:
            return False
        return text or True

    return condition


def staleness_of(element: WebElement) -> Condition:
    """The element has left the DOM."""

    async def condition(session: WebDriverSession) -> bool:
        try:
            await element.is_enabled()
        except StaleElementReference:
            return True
        return False

    return condition


def _target(target: Target | By | str, value: str | None) -> Target:
    if isinstance(target, WebElement) or isinstance(target, tuple):
        return target
    if value is None:
        raise TypeError("a locator strategy needs a value")
    return (target, value)
