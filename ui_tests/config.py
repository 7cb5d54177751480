"""Shared configuration for the user settings UI tests.

Every value resolves in this order:

1. environment variable (e.g. ``UI_BASE_URL=http://staging:5173``)
2. ``.env.defaults`` at the repository root
3. the built-in default below

All bounds are in seconds. Invalid numbers fail fast at import time.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urljoin

from ui_tests.env_defaults import get_env_default

DEFAULT_BASE_URL = "http://localhost:5173"
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


def _lookup(key: str, default: str) -> str:
    value = os.getenv(key)
    if value is None or value == "":
        value = get_env_default(key)
    if value is None or value == "":
        return default
    return value


def _seconds(key: str, default: float) -> float:
    raw = _lookup(key, str(default))
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise RuntimeError(f"{key} must be positive, got {raw!r}")
    return value


@dataclass
class TimeoutSettings:
    """Bounds for every wait the suite performs."""

    default: float = 5.0
    field: float = 20.0
    form: float = 30.0
    navigation: float = 30.0
    welcome: float = 10.0
    session_setup: float = 120.0
    poll_interval: float = 0.2

    @classmethod
    def from_env(cls) -> "TimeoutSettings":
        return cls(
            default=_seconds("UI_TIMEOUT_DEFAULT", cls.default),
            field=_seconds("UI_TIMEOUT_FIELD", cls.field),
            form=_seconds("UI_TIMEOUT_FORM", cls.form),
            navigation=_seconds("UI_TIMEOUT_NAVIGATION", cls.navigation),
            welcome=_seconds("UI_TIMEOUT_WELCOME", cls.welcome),
            session_setup=_seconds("UI_TIMEOUT_SESSION_SETUP", cls.session_setup),
            poll_interval=_seconds("UI_POLL_INTERVAL", cls.poll_interval),
        )


class UiTestConfig:
    """Configuration for the application under test and the browser."""

    def __init__(self) -> None:
        self.base_url: str = _lookup("UI_BASE_URL", DEFAULT_BASE_URL).rstrip("/")

        headless_str = _lookup("PLAYWRIGHT_HEADLESS", "true")
        self.playwright_headless: bool = headless_str.lower() in {"true", "1"}

        self.browser_type: str = _lookup("PLAYWRIGHT_BROWSER", "chromium").lower()
        if self.browser_type not in SUPPORTED_BROWSERS:
            raise RuntimeError(
                f"PLAYWRIGHT_BROWSER must be one of {', '.join(SUPPORTED_BROWSERS)}, "
                f"got {self.browser_type!r}"
            )

        self.screenshot_dir: str = _lookup("SCREENSHOT_DIR", "test-results")
        self.timeouts: TimeoutSettings = TimeoutSettings.from_env()

        print(f"[CONFIG] base_url={self.base_url} browser={self.browser_type} headless={self.playwright_headless}")

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided path."""
        return urljoin(self.base_url + "/", path.lstrip("/"))


# Singleton instance - initialized on first import
settings = UiTestConfig()
