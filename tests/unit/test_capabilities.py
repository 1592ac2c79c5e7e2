from __future__ import annotations

import copy

import pytest

from w3cdriver.capabilities import (
    CapabilityRequest,
    DesiredCapabilities,
    PageLoadStrategy,
    Proxy,
    UnhandledPromptBehavior,
    make_w3c_caps,
    match_capabilities,
    merge,
    validate_capabilities,
)
from w3cdriver.errors import InvalidArgument


def test_first_match_order_is_preserved_on_the_wire() -> None:
    request = CapabilityRequest(
        always_match={"acceptInsecureCerts": True},
        first_match=[{"browserName": "firefox"}, {"browserName": "chrome"}],
    )

    assert request.to_wire() == {
        "capabilities": {
            "alwaysMatch": {"acceptInsecureCerts": True},
            "firstMatch": [{"browserName": "firefox"}, {"browserName": "chrome"}],
        }
    }


def test_empty_first_match_is_sent_as_single_empty_entry() -> None:
    assert CapabilityRequest().to_wire() == {"capabilities": {"alwaysMatch": {}, "firstMatch": [{}]}}


def test_candidates_merge_without_mutating_inputs() -> None:
    always = {"browserName": "chrome", "timeouts": {"implicit": 0}}
    first = [{"browserName": "firefox"}, {"platformName": "linux"}]
    request = CapabilityRequest(always_match=always, first_match=first)
    before = (copy.deepcopy(always), copy.deepcopy(first))

    candidates = request.candidates()

    assert candidates == [
        {"browserName": "firefox", "timeouts": {"implicit": 0}},
        {"browserName": "chrome", "timeouts": {"implicit": 0}, "platformName": "linux"},
    ]
    candidates[0]["timeouts"]["implicit"] = 99
    assert (always, first) == before
    assert request.negotiate() == {"browserName": "firefox", "timeouts": {"implicit": 0}}


def test_from_desired_and_from_legacy() -> None:
    request = CapabilityRequest.from_desired(DesiredCapabilities.firefox())
    assert request.always_match == {"browserName": "firefox"}

    legacy = CapabilityRequest.from_legacy({"browserName": "chrome", "version": "120", "acceptSslCerts": True})
    assert legacy.always_match == {"browserName": "chrome", "browserVersion": "120", "acceptInsecureCerts": True}
    assert legacy.first_match == [{}]


def test_make_w3c_caps_drops_unknown_legacy_keys() -> None:
    caps = {
        "browserName": "chrome",
        "platform": "LINUX",
        "javascriptEnabled": True,
        "goog:chromeOptions": {"args": ["--foo"]},
    }

    w3c = make_w3c_caps(caps)

    assert w3c == {
        "firstMatch": [{}],
        "alwaysMatch": {
            "browserName": "chrome",
            "platformName": "LINUX",
            "goog:chromeOptions": {"args": ["--foo"]},
        },
    }
    assert caps["platform"] == "LINUX"


def test_merge_is_deep() -> None:
    target = {"moz:firefoxOptions": {"args": ["-a"], "prefs": {"x": 1}}}

    merge(target, {"moz:firefoxOptions": {"prefs": {"y": 2}}})

    assert target == {"moz:firefoxOptions": {"args": ["-a"], "prefs": {"x": 1, "y": 2}}}


def test_validate_capabilities() -> None:
    assert validate_capabilities({"browserName": "chrome", "browserVersion": None, "ms:x": object}) == {
        "browserName": "chrome",
        "ms:x": object,
    }
    with pytest.raises(InvalidArgument):
        validate_capabilities({"acceptInsecureCerts": "yes"})
    with pytest.raises(InvalidArgument):
        validate_capabilities({"pageLoadStrategy": "fast"})
    with pytest.raises(InvalidArgument):
        validate_capabilities({"timeouts": {"implicit": -1}})
    with pytest.raises(InvalidArgument):
        validate_capabilities({"javascriptEnabled": True})


def test_match_capabilities_picks_first_compatible_candidate() -> None:
    request = CapabilityRequest(
        first_match=[{"browserName": "safari"}, {"browserName": "firefox", "browserVersion": "128"}]
    )
    server = {"browserName": "firefox", "browserVersion": "128.0.1", "platformName": "linux"}

    matched = match_capabilities(request, server)

    assert matched == {"browserName": "firefox", "browserVersion": "128.0.1", "platformName": "linux"}


def test_match_capabilities_returns_none_when_nothing_fits() -> None:
    request = CapabilityRequest(always_match={"browserName": "chrome", "setWindowRect": True})

    assert match_capabilities(request, {"browserName": "chrome", "setWindowRect": False}) is None
    assert match_capabilities(request, {"browserName": "firefox", "setWindowRect": True}) is None


def test_chrome_builder() -> None:
    caps = DesiredCapabilities.chrome()
    caps.set_headless().add_argument("--window-size=800,600").add_argument("--headless=new")
    caps.add_experimental_option("mobileEmulation", {"deviceName": "Pixel 7"})

    assert caps["browserName"] == "chrome"
    assert caps.arguments() == ["--headless=new", "--window-size=800,600"]
    assert caps["goog:chromeOptions"]["mobileEmulation"] == {"deviceName": "Pixel 7"}


def test_firefox_builder() -> None:
    caps = DesiredCapabilities.firefox().set_preference("dom.webnotifications.enabled", False)
    caps.set_log_level("trace")

    options = caps["moz:firefoxOptions"]
    assert options["prefs"] == {"dom.webnotifications.enabled": False}
    assert options["log"] == {"level": "trace"}


def test_standard_capability_setters() -> None:
    caps = DesiredCapabilities.edge()
    caps.set_page_load_strategy("eager")
    caps.set_unhandled_prompt_behavior(UnhandledPromptBehavior.ACCEPT)
    caps.set_timeouts(page_load_ms=5000, implicit_ms=0)
    caps.set_proxy(Proxy.manual(http_proxy="proxy:3128", no_proxy=["localhost"]))
    caps.accept_insecure_certs()

    assert caps.to_dict() == {
        "browserName": "MicrosoftEdge",
        "pageLoadStrategy": PageLoadStrategy.EAGER.value,
        "unhandledPromptBehavior": "accept",
        "timeouts": {"pageLoad": 5000, "implicit": 0},
        "proxy": {"proxyType": "manual", "httpProxy": "proxy:3128", "noProxy": ["localhost"]},
        "acceptInsecureCerts": True,
    }
    assert validate_capabilities(caps.to_dict())


def test_to_dict_is_a_copy() -> None:
    caps = DesiredCapabilities.safari().set_automatic_inspection(True)
    snapshot = caps.to_dict()
    snapshot["safari:options"]["automaticInspection"] = False

    assert caps["safari:options"]["automaticInspection"] is True


def test_generic_builder_has_no_vendor_options() -> None:
    with pytest.raises(TypeError):
        DesiredCapabilities({"browserName": "custom"}).set_option("x", 1)


def test_invalid_page_load_strategy_is_rejected() -> None:
    with pytest.raises(ValueError):
        DesiredCapabilities.chrome().set_page_load_strategy("fast")


def test_match_requires_strict_file_interactability_support() -> None:
    request = CapabilityRequest(always_match={"strictFileInteractability": True})

    assert match_capabilities(request, {"browserName": "chrome"}) is None
    assert match_capabilities(request, {"browserName": "chrome", "strictFileInteractability": True}) == {
        "strictFileInteractability": True,
        "browserName": "chrome",
    }
