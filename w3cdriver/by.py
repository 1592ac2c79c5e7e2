"""
Element location strategies.

W3C WebDriver only defines five strategies. `By.ID`, `By.NAME` and
`By.CLASS_NAME` are kept for convenience and translated to CSS selectors
before they reach the wire.
"""

from __future__ import annotations

import re
from enum import Enum

from .errors import InvalidCommandError


class By(str, Enum):
    CSS_SELECTOR = "css selector"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    TAG_NAME = "tag name"
    XPATH = "xpath"
    # Legacy strategies, rewritten to CSS
    ID = "id"
    NAME = "name"
    CLASS_NAME = "class name"


_CSS_SPECIAL = re.compile(r"([!\"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~])")


def escape_css(value: str) -> str:
    """Escape a literal for use inside a CSS identifier or attribute value."""
    escaped = _CSS_SPECIAL.sub(r"\\\1", value)
    if escaped[:1].isdigit():
        escaped = "\\3%s " % escaped[0] + escaped[1:]
    return escaped


def to_locator(by: By | str, value: str) -> tuple[str, str]:
    """
    Normalize a (strategy, value) pair to a W3C `(using, value)` pair.

    Raises:
        InvalidCommandError: unknown strategy or non-string value
    """
    if not isinstance(value, str):
        raise InvalidCommandError(f"Locator value must be a string, got {type(value).__name__}")
    try:
        strategy = By(by)
    except ValueError as e:
        raise InvalidCommandError(f"Unknown locator strategy: {by!r}") from e

    if strategy is By.ID:
        return By.CSS_SELECTOR.value, f"[id=\"{escape_css(value)}\"]"
    if strategy is By.NAME:
        return By.CSS_SELECTOR.value, f"[name=\"{escape_css(value)}\"]"
    if strategy is By.CLASS_NAME:
        if not value or any(ch.isspace() for ch in value):
            raise InvalidCommandError("Compound class names are not supported; use a CSS selector")
        return By.CSS_SELECTOR.value, f".{escape_css(value)}"
    return strategy.value, value
