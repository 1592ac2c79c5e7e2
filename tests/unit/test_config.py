from __future__ import annotations

import pytest

from w3cdriver.config import DriverConfig
from w3cdriver.constants import DEFAULT_REQUEST_TIMEOUT_S, DEFAULT_SERVER_URL


def test_defaults() -> None:
    config = DriverConfig()

    assert config.server_url == DEFAULT_SERVER_URL
    assert config.request_timeout_s == DEFAULT_REQUEST_TIMEOUT_S == 120.0
    assert config.transport == "httpx"


def test_from_env_reads_prefixed_variables() -> None:
    config = DriverConfig.from_env(
        {
            "W3CDRIVER_SERVER_URL": " http://grid:4444/wd/hub ",
            "W3CDRIVER_REQUEST_TIMEOUT_S": "30",
            "W3CDRIVER_WAIT_TIMEOUT_S": "2.5",
            "W3CDRIVER_POLL_INTERVAL_S": "",
            "W3CDRIVER_TRANSPORT": "Requests",
        }
    )

    assert config.server_url == "http://grid:4444/wd/hub"
    assert config.request_timeout_s == 30.0
    assert config.wait_timeout_s == 2.5
    assert config.poll_interval_s == DriverConfig().poll_interval_s
    assert config.transport == "requests"


def test_webdriver_url_is_a_fallback_alias() -> None:
    assert DriverConfig.from_env({"WEBDRIVER_URL": "http://localhost:9515"}).server_url == "http://localhost:9515"
    both = {"WEBDRIVER_URL": "http://old:1", "W3CDRIVER_SERVER_URL": "http://new:2"}
    assert DriverConfig.from_env(both).server_url == "http://new:2"


def test_overrides_win_over_environment() -> None:
    config = DriverConfig.from_env({"W3CDRIVER_REQUEST_TIMEOUT_S": "30"}, request_timeout_s=5.0)

    assert config.request_timeout_s == 5.0


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValueError, match="W3CDRIVER_WAIT_TIMEOUT_S"):
        DriverConfig.from_env({"W3CDRIVER_WAIT_TIMEOUT_S": "soon"})
    with pytest.raises(ValueError):
        DriverConfig(request_timeout_s=0)
    with pytest.raises(ValueError):
        DriverConfig(server_url="  ")


def test_with_overrides_returns_new_instance() -> None:
    config = DriverConfig()
    changed = config.with_overrides(wait_timeout_s=1.0)

    assert changed.wait_timeout_s == 1.0
    assert config.wait_timeout_s != 1.0
