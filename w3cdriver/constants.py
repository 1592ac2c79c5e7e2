"""w3cdriver constants."""

# Default remote end (Selenium Grid / standalone server port).
DEFAULT_SERVER_URL = "http://localhost:4444"

# Request timeout applied by the bundled transports.
DEFAULT_REQUEST_TIMEOUT_S = 120.0

DEFAULT_WAIT_TIMEOUT_S = 10.0
DEFAULT_POLL_INTERVAL_S = 0.5

# Web element identifier key defined by the W3C WebDriver standard.
ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"

# Key used by pre-W3C (JSON wire protocol) drivers.
LEGACY_ELEMENT_KEY = "ELEMENT"

USER_AGENT = "w3cdriver (python)"

W3C_CAPABILITY_NAMES = (
    "acceptInsecureCerts",
    "browserName",
    "browserVersion",
    "platformName",
    "pageLoadStrategy",
    "proxy",
    "setWindowRect",
    "timeouts",
    "unhandledPromptBehavior",
    "strictFileInteractability",
)

# Legacy capability name -> W3C capability name.
OSS_W3C_CONVERSION = (
    ("acceptSslCerts", "acceptInsecureCerts"),
    ("version", "browserVersion"),
    ("platform", "platformName"),
)
