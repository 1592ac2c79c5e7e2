"""
Pydantic models for WebDriver wire payloads - field names follow the W3C WebDriver standard JSON shapes
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import ELEMENT_KEY, LEGACY_ELEMENT_KEY


class ElementRef(BaseModel):
    """
    Server-assigned element identifier scoped to one session.

    A plain lookup key: two refs are equal when both the element id and the
    owning session id match.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    session_id: str

    def to_wire(self) -> Dict[str, str]:
        """Web element reference object as sent in script arguments and action origins."""
        return {ELEMENT_KEY: self.id}

    @staticmethod
    def id_from_wire(value: Any) -> Optional[str]:
        """Extract the element id from a web element reference object, or None."""
        if not isinstance(value, dict):
            return None
        element_id = value.get(ELEMENT_KEY, value.get(LEGACY_ELEMENT_KEY))
        if isinstance(element_id, str) and element_id:
            return element_id
        return None


class Rect(BaseModel):
    """Element or window rectangle (CSS pixels)"""
    x: float
    y: float
    width: float
    height: float


class Timeouts(BaseModel):
    """
    Session timeouts in milliseconds.

    `script=None` is meaningful (no script timeout), so serialization only
    drops fields that were never set.
    """

    model_config = ConfigDict(populate_by_name=True)

    script: Optional[int] = Field(None, ge=0)
    page_load: Optional[int] = Field(None, ge=0, alias="pageLoad")
    implicit: Optional[int] = Field(None, ge=0)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class Cookie(BaseModel):
    """Cookie as serialized by the remote end"""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    path: Optional[str] = None
    domain: Optional[str] = None
    secure: Optional[bool] = None
    http_only: Optional[bool] = Field(None, alias="httpOnly")
    expiry: Optional[int] = None
    same_site: Optional[Literal["Lax", "Strict", "None"]] = Field(None, alias="sameSite")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ServerStatus(BaseModel):
    """Readiness report from GET /status"""

    model_config = ConfigDict(extra="allow")

    ready: bool
    message: str = ""


class NewWindowResult(BaseModel):
    """Handle and kind of a window opened with POST /window/new"""
    handle: str
    type: Literal["tab", "window"]


class NewSessionResult(BaseModel):
    """Payload of a successful New Session response"""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    capabilities: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("session_id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("sessionId must not be empty")
        return v


# ========== Print ==========

class PageSize(BaseModel):
    """Paper size in centimetres"""
    width: float = Field(21.59, ge=0)
    height: float = Field(27.94, ge=0)


class PageMargins(BaseModel):
    """Page margins in centimetres"""
    top: float = Field(1.0, ge=0)
    bottom: float = Field(1.0, ge=0)
    left: float = Field(1.0, ge=0)
    right: float = Field(1.0, ge=0)


class PrintOptions(BaseModel):
    """Parameters for POST /print"""

    model_config = ConfigDict(populate_by_name=True)

    orientation: Literal["portrait", "landscape"] = "portrait"
    scale: float = Field(1.0, ge=0.1, le=2.0)
    background: bool = False
    page: Optional[PageSize] = None
    margin: Optional[PageMargins] = None
    shrink_to_fit: bool = Field(True, alias="shrinkToFit")
    page_ranges: List[str] = Field(default_factory=list, alias="pageRanges")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
