"""
Capability requests and negotiation.

A new-session request carries `alwaysMatch` (applied unconditionally) and an
ordered `firstMatch` list of alternatives. The effective request for each
alternative is `alwaysMatch` merged with the alternative, the alternative
winning on key collisions. The remote end picks the first alternative it can
satisfy; the client only builds the structure and stores whatever
capabilities the remote end reports back.

Vendor keys (`goog:chromeOptions`, `moz:firefoxOptions`, ...) are opaque and
forwarded untouched.

Usage:
    caps = DesiredCapabilities.chrome()
    caps.set_headless()
    request = CapabilityRequest(
        always_match=caps.to_dict(),
        first_match=[{"platformName": "linux"}, {"platformName": "windows"}],
    )
    await session.start(request)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import OSS_W3C_CONVERSION, W3C_CAPABILITY_NAMES
from .errors import InvalidArgument


class PageLoadStrategy(str, Enum):
    # Wait for full page loading (the default).
    NORMAL = "normal"
    # Wait for DOMContentLoaded.
    EAGER = "eager"
    # Return as soon as the initial page content is received.
    NONE = "none"


class UnhandledPromptBehavior(str, Enum):
    DISMISS = "dismiss"
    ACCEPT = "accept"
    DISMISS_AND_NOTIFY = "dismiss and notify"
    ACCEPT_AND_NOTIFY = "accept and notify"
    IGNORE = "ignore"


class Proxy(BaseModel):
    """Proxy configuration object (`proxy` capability)"""

    model_config = ConfigDict(populate_by_name=True)

    proxy_type: Literal["direct", "manual", "pac", "autodetect", "system"] = Field(alias="proxyType")
    proxy_autoconfig_url: Optional[str] = Field(None, alias="proxyAutoconfigUrl")
    http_proxy: Optional[str] = Field(None, alias="httpProxy")
    ssl_proxy: Optional[str] = Field(None, alias="sslProxy")
    ftp_proxy: Optional[str] = Field(None, alias="ftpProxy")
    socks_proxy: Optional[str] = Field(None, alias="socksProxy")
    socks_version: Optional[int] = Field(None, alias="socksVersion", ge=0, le=255)
    no_proxy: Optional[list[str]] = Field(None, alias="noProxy")

    @classmethod
    def direct(cls) -> Proxy:
        return cls(proxy_type="direct")

    @classmethod
    def system(cls) -> Proxy:
        return cls(proxy_type="system")

    @classmethod
    def autodetect(cls) -> Proxy:
        return cls(proxy_type="autodetect")

    @classmethod
    def pac(cls, url: str) -> Proxy:
        return cls(proxy_type="pac", proxy_autoconfig_url=url)

    @classmethod
    def manual(
        cls,
        *,
        http_proxy: str | None = None,
        ssl_proxy: str | None = None,
        ftp_proxy: str | None = None,
        socks_proxy: str | None = None,
        socks_version: int | None = None,
        no_proxy: Iterable[str] | None = None,
    ) -> Proxy:
        return cls(
            proxy_type="manual",
            http_proxy=http_proxy,
            ssl_proxy=ssl_proxy,
            ftp_proxy=ftp_proxy,
            socks_proxy=socks_proxy,
            socks_version=socks_version,
            no_proxy=list(no_proxy) if no_proxy is not None else None,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def merge(target: dict[str, Any], other: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge `other` into `target` in place: nested objects merge, everything else overwrites."""
    for key, value in other.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def make_w3c_caps(caps: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert a legacy (JSON wire protocol) capability dict to a W3C request.

    Only W3C capability names and vendor keys (containing ':') survive; the
    legacy `acceptSslCerts`, `version` and `platform` keys are renamed.
    """
    always_match: dict[str, Any] = {}
    for key, value in caps.items():
        if value is not None:
            for old, new in OSS_W3C_CONVERSION:
                if key == old:
                    always_match[new] = copy.deepcopy(value)
        if key in W3C_CAPABILITY_NAMES or ":" in key:
            always_match[key] = copy.deepcopy(value)
    return {"firstMatch": [{}], "alwaysMatch": always_match}


@dataclass
class CapabilityRequest:
    always_match: dict[str, Any] = field(default_factory=dict)
    first_match: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_desired(cls, desired: DesiredCapabilities | Mapping[str, Any]) -> CapabilityRequest:
        caps = desired.to_dict() if isinstance(desired, DesiredCapabilities) else dict(desired)
        return cls(always_match=caps)

    @classmethod
    def from_legacy(cls, caps: Mapping[str, Any]) -> CapabilityRequest:
        w3c = make_w3c_caps(caps)
        return cls(always_match=w3c["alwaysMatch"], first_match=w3c["firstMatch"])

    def _first_match(self) -> list[dict[str, Any]]:
        # An empty firstMatch list means "alwaysMatch alone".
        return self.first_match or [{}]

    def candidates(self) -> list[dict[str, Any]]:
        """Effective request per firstMatch entry, in order. Inputs are never mutated."""
        merged = []
        for candidate in self._first_match():
            effective = copy.deepcopy(self.always_match)
            effective.update(copy.deepcopy(candidate))
            merged.append(effective)
        return merged

    def negotiate(self) -> dict[str, Any]:
        """The client-side pick: the first effective candidate."""
        return self.candidates()[0]

    def to_wire(self) -> dict[str, Any]:
        return {
            "capabilities": {
                "alwaysMatch": copy.deepcopy(self.always_match),
                "firstMatch": [copy.deepcopy(c) for c in self._first_match()],
            }
        }


# ========== Local matching (test doubles / offline checks) ==========

_BOOL_CAPS = ("acceptInsecureCerts", "setWindowRect", "strictFileInteractability")
_STR_CAPS = ("browserName", "browserVersion", "platformName")
_TIMEOUT_KEYS = ("script", "pageLoad", "implicit")


def validate_capabilities(caps: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate standard capability types the way a remote end would.

    Null-valued entries are dropped. Vendor keys are not inspected.

    Raises:
        InvalidArgument: a standard capability has the wrong type or value,
            or an unknown non-vendor key is present
    """
    result: dict[str, Any] = {}
    for key, value in caps.items():
        if value is None:
            continue
        if ":" in key:
            result[key] = value
            continue
        if key in _BOOL_CAPS:
            if not isinstance(value, bool):
                raise InvalidArgument(f"{key} must be a boolean")
        elif key in _STR_CAPS:
            if not isinstance(value, str):
                raise InvalidArgument(f"{key} must be a string")
        elif key == "pageLoadStrategy":
            if value not in {s.value for s in PageLoadStrategy}:
                raise InvalidArgument(f"Invalid pageLoadStrategy: {value!r}")
        elif key == "unhandledPromptBehavior":
            if value not in {b.value for b in UnhandledPromptBehavior}:
                raise InvalidArgument(f"Invalid unhandledPromptBehavior: {value!r}")
        elif key == "proxy":
            if not isinstance(value, dict) or "proxyType" not in value:
                raise InvalidArgument("proxy must be an object with a proxyType")
        elif key == "timeouts":
            if not isinstance(value, dict):
                raise InvalidArgument("timeouts must be an object")
            for name, ms in value.items():
                if name not in _TIMEOUT_KEYS:
                    raise InvalidArgument(f"Unknown timeout {name!r}")
                if name == "script" and ms is None:
                    continue
                if isinstance(ms, bool) or not isinstance(ms, int) or ms < 0:
                    raise InvalidArgument(f"Timeout {name!r} must be a non-negative integer")
        else:
            raise InvalidArgument(f"Unknown capability {key!r}")
        result[key] = value
    return result


def _version_matches(requested: str, actual: str) -> bool:
    if requested == actual:
        return True
    # "120" matches "120.0.6099.71"
    return actual.startswith(requested + ".")


def match_capabilities(
    request: CapabilityRequest,
    server_capabilities: Mapping[str, Any],
) -> dict[str, Any] | None:
    """
    Run the W3C matching algorithm against a remote end's advertised capabilities.

    Returns the first compatible effective candidate, with identity keys
    (browserName, browserVersion, platformName) filled from the server, or None.
    """
    for candidate in request.candidates():
        caps = validate_capabilities(candidate)

        browser_name = caps.get("browserName")
        if browser_name is not None and browser_name != server_capabilities.get("browserName"):
            continue

        version = caps.get("browserVersion")
        if version is not None and not _version_matches(
            version, str(server_capabilities.get("browserVersion", ""))
        ):
            continue

        platform = caps.get("platformName")
        if platform is not None and platform.lower() != str(
            server_capabilities.get("platformName", "")
        ).lower():
            continue

        if caps.get("acceptInsecureCerts") and not server_capabilities.get("acceptInsecureCerts", False):
            continue

        if caps.get("setWindowRect") and not server_capabilities.get("setWindowRect", False):
            continue

        if caps.get("strictFileInteractability") and not server_capabilities.get(
            "strictFileInteractability", False
        ):
            continue

        matched = dict(caps)
        for key in _STR_CAPS:
            if key in server_capabilities:
                matched[key] = server_capabilities[key]
        return matched
    return None


# ========== Desired capability builders ==========


class DesiredCapabilities:
    """
    Generic capability builder.

    Prefer the browser-specific constructors (`DesiredCapabilities.chrome()`,
    `.firefox()`, ...) which also know the browser's vendor options key.
    """

    browser_name: str | None = None
    options_key: str | None = None

    def __init__(self, capabilities: Mapping[str, Any] | None = None) -> None:
        self._caps: dict[str, Any] = copy.deepcopy(dict(capabilities or {}))
        if self.browser_name and "browserName" not in self._caps:
            self._caps["browserName"] = self.browser_name

    @staticmethod
    def chrome() -> ChromeCapabilities:
        return ChromeCapabilities()

    @staticmethod
    def firefox() -> FirefoxCapabilities:
        return FirefoxCapabilities()

    @staticmethod
    def edge() -> EdgeCapabilities:
        return EdgeCapabilities()

    @staticmethod
    def safari() -> SafariCapabilities:
        return SafariCapabilities()

    @staticmethod
    def internet_explorer() -> InternetExplorerCapabilities:
        return InternetExplorerCapabilities()

    @staticmethod
    def opera() -> OperaCapabilities:
        return OperaCapabilities()

    def __getitem__(self, key: str) -> Any:
        return self._caps[key]

    def __contains__(self, key: str) -> bool:
        return key in self._caps

    def get(self, key: str, default: Any = None) -> Any:
        return self._caps.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._caps)

    def add(self, key: str, value: Any) -> DesiredCapabilities:
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True, exclude_none=True)
        self._caps[key] = value
        return self

    def add_subkey(self, key: str, subkey: str, value: Any) -> DesiredCapabilities:
        existing = self._caps.get(key)
        if not isinstance(existing, dict):
            existing = {}
            self._caps[key] = existing
        existing[subkey] = value
        return self

    def update(self, value: Mapping[str, Any]) -> DesiredCapabilities:
        merge(self._caps, value)
        return self

    def set_browser_version(self, version: str) -> DesiredCapabilities:
        return self.add("browserVersion", version)

    def set_platform(self, platform: str) -> DesiredCapabilities:
        return self.add("platformName", platform)

    def accept_insecure_certs(self, enabled: bool = True) -> DesiredCapabilities:
        return self.add("acceptInsecureCerts", enabled)

    def set_proxy(self, proxy: Proxy) -> DesiredCapabilities:
        return self.add("proxy", proxy.to_wire())

    def set_page_load_strategy(self, strategy: PageLoadStrategy | str) -> DesiredCapabilities:
        return self.add("pageLoadStrategy", PageLoadStrategy(strategy))

    def set_unhandled_prompt_behavior(self, behavior: UnhandledPromptBehavior | str) -> DesiredCapabilities:
        return self.add("unhandledPromptBehavior", UnhandledPromptBehavior(behavior))

    def set_timeouts(
        self,
        *,
        script_ms: int | None = None,
        page_load_ms: int | None = None,
        implicit_ms: int | None = None,
    ) -> DesiredCapabilities:
        for name, ms in (("script", script_ms), ("pageLoad", page_load_ms), ("implicit", implicit_ms)):
            if ms is not None:
                self.add_subkey("timeouts", name, int(ms))
        return self

    def set_strict_file_interactability(self, enabled: bool = True) -> DesiredCapabilities:
        return self.add("strictFileInteractability", enabled)

    # ----- vendor options -----

    def _options(self) -> dict[str, Any]:
        if self.options_key is None:
            raise TypeError(f"{type(self).__name__} has no vendor options key")
        opts = self._caps.get(self.options_key)
        if not isinstance(opts, dict):
            opts = {}
            self._caps[self.options_key] = opts
        return opts

    def set_option(self, name: str, value: Any) -> DesiredCapabilities:
        self._options()[name] = value
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._caps!r})"


class _ArgsMixin(DesiredCapabilities):
    def add_argument(self, arg: str) -> DesiredCapabilities:
        args = self._options().setdefault("args", [])
        if arg not in args:
            args.append(arg)
        return self

    def arguments(self) -> list[str]:
        return list(self._options().get("args", []))

    def set_binary(self, path: str) -> DesiredCapabilities:
        return self.set_option("binary", path)


class ChromeCapabilities(_ArgsMixin):
    browser_name = "chrome"
    options_key = "goog:chromeOptions"

    def set_headless(self) -> DesiredCapabilities:
        return self.add_argument("--headless=new")

    def add_extension(self, base64_crx: str) -> DesiredCapabilities:
        self._options().setdefault("extensions", []).append(base64_crx)
        return self

    def add_experimental_option(self, name: str, value: Any) -> DesiredCapabilities:
        return self.set_option(name, value)


class EdgeCapabilities(ChromeCapabilities):
    browser_name = "MicrosoftEdge"
    options_key = "ms:edgeOptions"


class OperaCapabilities(ChromeCapabilities):
    browser_name = "opera"
    options_key = "operaOptions"


class FirefoxCapabilities(_ArgsMixin):
    browser_name = "firefox"
    options_key = "moz:firefoxOptions"

    def set_headless(self) -> DesiredCapabilities:
        return self.add_argument("-headless")

    def set_preference(self, name: str, value: Any) -> DesiredCapabilities:
        self._options().setdefault("prefs", {})[name] = value
        return self

    def set_profile(self, base64_profile: str) -> DesiredCapabilities:
        return self.set_option("profile", base64_profile)

    def set_log_level(self, level: str) -> DesiredCapabilities:
        return self.set_option("log", {"level": level})


class SafariCapabilities(DesiredCapabilities):
    browser_name = "safari"
    options_key = "safari:options"

    def set_automatic_inspection(self, enabled: bool) -> DesiredCapabilities:
        return self.set_option("automaticInspection", enabled)

    def set_automatic_profiling(self, enabled: bool) -> DesiredCapabilities:
        return self.set_option("automaticProfiling", enabled)


class InternetExplorerCapabilities(DesiredCapabilities):
    browser_name = "internet explorer"
    options_key = "se:ieOptions"

    def set_initial_browser_url(self, url: str) -> DesiredCapabilities:
        return self.set_option("initialBrowserUrl", url)

    def ignore_zoom_setting(self, enabled: bool = True) -> DesiredCapabilities:
        return self.set_option("ignoreZoomSetting", enabled)
