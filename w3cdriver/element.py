"""
WebElement: handle to one element of a WebDriver session.

A handle is only an id plus the session that issued it. Nothing is cached:
every accessor is a fresh round-trip, so a handle whose node left the DOM
surfaces `StaleElementReference` on its next use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .by import By, to_locator
from .commands import (
    ElementClear,
    ElementClick,
    ElementSendKeys,
    FindElementFromElement,
    FindElementsFromElement,
    GetComputedLabel,
    GetComputedRole,
    GetElementAttribute,
    GetElementCssValue,
    GetElementProperty,
    GetElementRect,
    GetElementTagName,
    GetElementText,
    IsElementDisplayed,
    IsElementEnabled,
    IsElementSelected,
    TakeElementScreenshot,
)
from .keys import key_sequence
from .models import ElementRef, Rect
from .response import expect_base64

if TYPE_CHECKING:
    from .session import WebDriverSession


class WebElement:
    def __init__(self, ref: ElementRef, session: WebDriverSession) -> None:
        self._ref = ref
        self._session = session

    @property
    def ref(self) -> ElementRef:
        return self._ref

    @property
    def id(self) -> str:
        return self._ref.id

    @property
    def session(self) -> WebDriverSession:
        return self._session

    def to_wire(self) -> dict[str, str]:
        return self._ref.to_wire()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, WebElement):
            return self._ref == other._ref
        if isinstance(other, ElementRef):
            return self._ref == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._ref)

    def __repr__(self) -> str:
        return f"<WebElement id={self._ref.id!r} session={self._ref.session_id!r}>"

    # ----- interaction -----

    async def click(self) -> None:
        """
        Scroll into view and click the element's center point.

        Raises:
            ElementClickIntercepted: another element would receive the click
            ElementNotInteractable: the element has no clickable area
            StaleElementReference: the element is no longer attached to the DOM
        """
        await self._session.execute(ElementClick(self._ref))

    async def clear(self) -> None:
        await self._session.execute(ElementClear(self._ref))

    async def send_keys(self, *values: Any) -> None:
        """Type into the element. Values are joined; use `Keys` for special keys."""
        await self._session.execute(ElementSendKeys(self._ref, key_sequence(*values)))

    # ----- state -----

    async def text(self) -> str:
        """Rendered (visible) text of the element."""
        return await self._session.execute(GetElementText(self._ref))

    async def tag_name(self) -> str:
        return await self._session.execute(GetElementTagName(self._ref))

    async def get_attribute(self, name: str) -> str | None:
        return await self._session.execute(GetElementAttribute(self._ref, name))

    async def get_property(self, name: str) -> Any:
        """DOM property value; element-valued properties come back as WebElement."""
        value = await self._session.execute(GetElementProperty(self._ref, name))
        return self._session._unwrap(value)

    async def value_of_css_property(self, name: str) -> str:
        return await self._session.execute(GetElementCssValue(self._ref, name))

    async def rect(self) -> Rect:
        return await self._session.execute(GetElementRect(self._ref))

    async def is_displayed(self) -> bool:
        return await self._session.execute(IsElementDisplayed(self._ref))

    async def is_enabled(self) -> bool:
        return await self._session.execute(IsElementEnabled(self._ref))

    async def is_selected(self) -> bool:
        return await self._session.execute(IsElementSelected(self._ref))

    async def computed_role(self) -> str:
        return await self._session.execute(GetComputedRole(self._ref))

    async def computed_label(self) -> str:
        return await self._session.execute(GetComputedLabel(self._ref))

    # ----- scoped lookup -----

    async def find_element(self, by: By | str, value: str) -> WebElement:
        using, selector = to_locator(by, value)
        element_id = await self._session.execute(FindElementFromElement(self._ref, using, selector))
        return self._session.create_element(element_id)

    async def find_elements(self, by: By | str, value: str) -> list[WebElement]:
        using, selector = to_locator(by, value)
        element_ids = await self._session.execute(FindElementsFromElement(self._ref, using, selector))
        return [self._session.create_element(element_id) for element_id in element_ids]

    # ----- capture -----

    async def screenshot_base64(self) -> str:
        return await self._session.execute(TakeElementScreenshot(self._ref))

    async def screenshot_png(self) -> bytes:
        return expect_base64("TakeElementScreenshot", await self.screenshot_base64())
