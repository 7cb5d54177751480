"""Offline tests for per-scenario session contexts."""

from __future__ import annotations

import pytest

from ui_tests.browser import Browser
from ui_tests.session_context import Credentials, SessionManager

from fakes import FakePage, FakePlaywrightBrowser, make_session

pytestmark = pytest.mark.asyncio


async def test_create_session_opens_isolated_context():
    browser = FakePlaywrightBrowser()
    manager = SessionManager(browser, base_url="http://app.test", timeout=7.5)

    first = await manager.create_session("Test User", Credentials("a@example.com", "Password123"))
    second = await manager.create_session("Test User", Credentials("b@example.com", "Password456"))

    assert first.session_id != second.session_id
    assert first.context is not second.context
    assert first.page is not second.page
    assert browser.contexts[0].options["base_url"] == "http://app.test"
    assert browser.contexts[0].options["viewport"] == SessionManager.DEFAULT_VIEWPORT
    assert browser.contexts[0].default_timeout == 7500
    assert isinstance(first.browser, Browser)
    assert first.browser.page is first.page
    assert manager.session_count == 2


async def test_contexts_default_to_configured_action_timeout():
    browser = FakePlaywrightBrowser()
    manager = SessionManager(browser)

    await manager.create_session("Test User", Credentials("a@example.com", "Password123"))

    # tests/conftest.py shrinks UI_TIMEOUT_DEFAULT to 0.2 s
    assert browser.contexts[0].default_timeout == 200


async def test_duplicate_session_id_is_rejected():
    manager = SessionManager(FakePlaywrightBrowser())
    await manager.create_session("Test User", Credentials("a@example.com", "Password123"), session_id="mine")

    with pytest.raises(ValueError):
        await manager.create_session("Test User", Credentials("b@example.com", "Password123"), session_id="mine")


async def test_context_manager_closes_every_session():
    browser = FakePlaywrightBrowser()

    async with SessionManager(browser) as manager:
        await manager.create_session("Test User", Credentials("a@example.com", "Password123"))
        await manager.create_session("Test User", Credentials("b@example.com", "Password123"))

    assert manager.session_count == 0
    assert all(context.closed for context in browser.contexts)


async def test_close_session_logs_and_continues_on_error(caplog):
    browser = FakePlaywrightBrowser()
    manager = SessionManager(browser)
    session = await manager.create_session("Test User", Credentials("a@example.com", "Password123"))

    async def _broken_close() -> None:
        raise RuntimeError("browser already gone")

    session.context.close = _broken_close

    await manager.close_session(session.session_id)

    assert manager.session_count == 0
    assert "browser already gone" in caplog.text


async def test_credentials_change_only_through_notes():
    session = make_session(FakePage(), email="old@example.com", password="OldPassword1")

    session.note_password_change("NewPassword1")
    session.note_email_change("new@example.com")

    assert session.password == "NewPassword1"
    assert session.email == "new@example.com"
    assert session.credentials == Credentials("new@example.com", "NewPassword1")


async def test_sessions_do_not_share_credentials():
    first = make_session(FakePage(), email="a@example.com", password="Password123")
    second = make_session(FakePage(), email="b@example.com", password="Password123")

    first.note_password_change("Changed12345")

    assert second.password == "Password123"
