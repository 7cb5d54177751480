import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from ui_tests.config import TimeoutSettings, settings

from fakes import BASE_URL, FakePage, build_auth_page


@pytest.fixture(autouse=True)
def fast_timeouts(monkeypatch, tmp_path):
    """Shrink every bound so failing waits finish quickly."""
    monkeypatch.setattr(
        settings,
        "timeouts",
        TimeoutSettings(
            default=0.2,
            field=0.2,
            form=0.2,
            navigation=0.2,
            welcome=0.2,
            session_setup=5.0,
            poll_interval=0.01,
        ),
    )
    monkeypatch.setattr(settings, "base_url", BASE_URL)
    monkeypatch.setattr(settings, "screenshot_dir", str(tmp_path / "screenshots"))


@pytest.fixture
def auth_page() -> FakePage:
    return build_auth_page()
