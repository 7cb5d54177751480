"""Reusable workflows for sign-up, login and the user settings page.

Every workflow is blocking and strictly sequential: each step waits (bounded)
for the UI state that enables the next one. Failures propagate unchanged.
"""
from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Iterable

import anyio

from ui_tests.browser import Browser, ToolError, ValidationRejected, WaitTimeout, wait_until
from ui_tests.config import settings
from ui_tests.session_context import SessionContext

logger = logging.getLogger(__name__)

SIGNUP_SUCCESS_TEXT = "Your account has been created successfully"
WELCOME_TEXT = "Welcome back, nice to see you again!"

PROFILE_UPDATED_TEXT = "User updated successfully"
EMAIL_REQUIRED_TEXT = "Email is required"

PASSWORD_UPDATED_TEXT = "Password updated successfully."
PASSWORD_TOO_SHORT_TEXT = "Password must be at least 8 characters"
PASSWORDS_MISMATCH_TEXT = "Passwords do not match"
PASSWORD_UNCHANGED_TEXT = "New password cannot be the same as the current one"
PASSWORD_CHANGE_OUTCOMES = (
    PASSWORD_UPDATED_TEXT,
    PASSWORD_TOO_SHORT_TEXT,
    PASSWORDS_MISMATCH_TEXT,
    PASSWORD_UNCHANGED_TEXT,
)

SETTINGS_TABS = ("My profile", "Password", "Appearance")
PROFILE_FIELDS = ("Full name", "Email")

# Positions of the radio controls inside the "Appearance" group.
THEME_CONTROL_INDEX = {"light": 0, "dark": 3}
THEME_BODY_CLASS = {"light": "chakra-ui-light", "dark": "chakra-ui-dark"}

MIN_PASSWORD_LENGTH = 8


def random_email(prefix: str = "test") -> str:
    return f"{prefix}-{secrets.token_hex(6)}@example.com"


def random_password(length: int = 16) -> str:
    if length < MIN_PASSWORD_LENGTH:
        raise ValueError(f"password length must be at least {MIN_PASSWORD_LENGTH}")
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


async def fill_form_field(
    browser: Browser,
    placeholder: str,
    value: str,
    exact: bool = False,
    timeout: float | None = None,
) -> None:
    """Fill the single visible input whose placeholder is ``placeholder``.

    Use ``exact=True`` where a loose match would hit several inputs
    ("Password" vs "Repeat Password").
    """
    if timeout is None:
        timeout = settings.timeouts.field
    locator = browser.page.get_by_placeholder(placeholder, exact=exact)
    try:
        await browser.fill_unique(locator, value, f"{placeholder!r} field", timeout)
    except WaitTimeout:
        logger.error("Error filling %s field", placeholder)
        raise
    logger.info("Filled %s field", placeholder)


async def _capture_failure(browser: Browser, prefix: str) -> None:
    name = f"{prefix}-{int(time.time() * 1000)}"
    try:
        path = await browser.screenshot(name)
    except ToolError as exc:
        logger.warning("Could not capture %s: %s", name, exc)
    else:
        logger.info("Saved diagnostic screenshot %s", path)


async def sign_up_new_user(browser: Browser, name: str, email: str, password: str) -> None:
    """Create an account through /signup and land on /login.

    A screenshot is captured before any failure propagates.
    """
    logger.info("Starting sign-up for %s", email)
    try:
        await browser.goto("/signup")
        logger.info("Navigated to /signup")

        await browser.wait_for_visible(browser.page.locator("form").first, "sign-up form", settings.timeouts.form)

        await fill_form_field(browser, "Full Name", name)
        await fill_form_field(browser, "Email", email)
        await fill_form_field(browser, "Password", password, exact=True)
        await fill_form_field(browser, "Repeat Password", password)

        await browser.click(browser.role("button", "Sign Up"), "Sign Up button")
        await browser.expect_text(SIGNUP_SUCCESS_TEXT, timeout=settings.timeouts.form)
        logger.info("Account created for %s", email)

        await browser.goto("/login")
    except (Exception, anyio.get_cancelled_exc_class()):
        logger.exception("Sign-up failed for %s", email)
        # An enclosing deadline cancels us; the screenshot still has to run.
        with anyio.CancelScope(shield=True):
            await _capture_failure(browser, "signup-error")
        raise


async def log_in_user(browser: Browser, email: str, password: str) -> None:
    """Log in through /login and wait for the personalised welcome."""
    await browser.goto("/login")

    await fill_form_field(browser, "Email", email)
    await fill_form_field(browser, "Password", password, exact=True)
    await browser.click(browser.role("button", "Log In"), "Log In button")

    await browser.wait_for_path("/")
    await browser.expect_text(WELCOME_TEXT, timeout=settings.timeouts.welcome)
    logger.info("Logged in as %s", email)


async def log_out_user(browser: Browser) -> None:
    # The menu trigger is an icon, so it is addressed by test id.
    await browser.click(browser.page.get_by_test_id("user-menu"), "user menu")
    await browser.click(browser.role("menuitem", "Log out"), "Log out menu item")
    await browser.goto("/login")
    logger.info("Logged out")


async def assert_login_rejected(browser: Browser, email: str, password: str, timeout: float | None = None) -> None:
    """Submit the login form and check the app never leaves /login.

    The redirect is given the same bound a successful login gets, so a slow
    but accepted login is not mistaken for a rejection. The form must still
    be on screen afterwards.
    """
    if timeout is None:
        timeout = settings.timeouts.navigation
    await browser.goto("/login")

    await fill_form_field(browser, "Email", email)
    await fill_form_field(browser, "Password", password, exact=True)
    log_in = browser.role("button", "Log In")
    await browser.click(log_in, "Log In button")

    try:
        await wait_until(lambda: browser.path == "/", timeout, description="redirect after login")
    except WaitTimeout:
        assert browser.path == "/login", f"Expected to stay on /login, got {browser.path}"
        await browser.wait_for_visible(log_in, "Log In button")
        return
    raise AssertionError(f"Login with rejected credentials for {email} reached {browser.path}")


async def establish_session(session: SessionContext) -> SessionContext:
    """Sign up and log in the session's user within the session-setup bound."""
    timeout = settings.timeouts.session_setup
    try:
        with anyio.fail_after(timeout):
            await sign_up_new_user(session.browser, session.full_name, session.email, session.password)
            await log_in_user(session.browser, session.email, session.password)
    except TimeoutError as exc:
        raise WaitTimeout(
            name="establish_session",
            payload={"email": session.email},
            message=f"Authenticated session not ready within {timeout}s",
        ) from exc
    logger.debug("Session ready: %r", session)
    return session


# ---- settings page ----------------------------------------------------------

async def open_settings(browser: Browser, tab: str | None = None) -> None:
    """Navigate to /settings and optionally select ``tab``."""
    if tab is not None and tab not in SETTINGS_TABS:
        raise ValueError(f"Unknown settings tab {tab!r}")
    await browser.goto("/settings")
    if tab is not None:
        await browser.click(browser.role("tab", tab), f"{tab!r} tab")


async def is_tab_selected(browser: Browser, tab: str) -> bool:
    return await browser.get_attribute(browser.role("tab", tab), "aria-selected") == "true"


async def wait_for_tab_selected(browser: Browser, tab: str, timeout: float | None = None) -> None:
    if timeout is None:
        timeout = settings.timeouts.default
    await wait_until(lambda: is_tab_selected(browser, tab), timeout, description=f"{tab!r} tab to be selected")


async def wait_for_tabs_visible(browser: Browser, tabs: Iterable[str] = SETTINGS_TABS) -> None:
    for tab in tabs:
        await browser.wait_for_visible(browser.role("tab", tab), f"{tab!r} tab")


async def expect_profile_value(browser: Browser, value: str, timeout: float | None = None) -> None:
    """Wait for ``value`` to be displayed (exact) in the "My profile" panel."""
    await browser.expect_text(value, exact=True, timeout=timeout, within=browser.page.get_by_label("My profile"))


async def edit_profile_field(session: SessionContext, label: str, value: str, save: bool = True) -> None:
    """Edit one profile field, then save or cancel.

    Saving waits for either the success text or the inline validation text;
    the latter raises ValidationRejected and leaves the form in edit mode.
    A saved email becomes the session's login email.
    """
    if label not in PROFILE_FIELDS:
        raise ValueError(f"Unknown profile field {label!r}")
    browser = session.browser
    await open_settings(browser, "My profile")
    await browser.click(browser.role("button", "Edit"), "Edit button")

    field = browser.page.get_by_label(label)
    await browser.fill_unique(field, value, f"{label!r} field")

    if not save:
        await cancel_profile_edit(browser)
        logger.info("Cancelled edit of %s", label)
        return

    # Validation runs on blur; the app disables Save while the email is empty.
    await browser.blur(field, f"{label!r} field")
    save_button = browser.role("button", "Save")
    if await browser.is_enabled(save_button, "Save button"):
        await browser.click(save_button, "Save button")

    outcome = await browser.wait_for_any_text([PROFILE_UPDATED_TEXT, EMAIL_REQUIRED_TEXT], settings.timeouts.form)
    if outcome != PROFILE_UPDATED_TEXT:
        logger.info("Profile edit of %s rejected: %s", label, outcome)
        raise ValidationRejected(name="edit_profile_field", payload={"field": label, "value": value}, message=outcome)

    if label == "Email":
        session.note_email_change(value)
    logger.info("Saved %s", label)


async def cancel_profile_edit(browser: Browser) -> None:
    await browser.click(browser.role("button", "Cancel").first, "Cancel button")


async def change_password(
    session: SessionContext,
    new_password: str,
    confirm_password: str | None = None,
    current_password: str | None = None,
) -> None:
    """Submit the password form.

    On success the session's credential pair takes the new password. Any of
    the inline validation texts raises ValidationRejected with the pair left
    unchanged.
    """
    if confirm_password is None:
        confirm_password = new_password
    if current_password is None:
        current_password = session.password
    browser = session.browser
    page = browser.page

    await open_settings(browser, "Password")
    await browser.fill_unique(page.get_by_label("Current Password*"), current_password, "'Current Password*' field")
    await browser.fill_unique(page.get_by_label("Set Password*"), new_password, "'Set Password*' field")
    await browser.fill_unique(page.get_by_label("Confirm Password*"), confirm_password, "'Confirm Password*' field")
    await browser.click(browser.role("button", "Save"), "Save button")

    outcome = await browser.wait_for_any_text(PASSWORD_CHANGE_OUTCOMES, settings.timeouts.form)
    if outcome != PASSWORD_UPDATED_TEXT:
        logger.info("Password change rejected: %s", outcome)
        raise ValidationRejected(name="change_password", payload={"email": session.email}, message=outcome)

    session.note_password_change(new_password)
    logger.info("Password changed for %s", session.email)


async def select_theme(browser: Browser, mode: str) -> None:
    """Pick ``mode`` ("light" or "dark") on the Appearance tab and wait for it to apply."""
    if mode not in THEME_CONTROL_INDEX:
        raise ValueError(f"Unknown theme {mode!r}")
    await open_settings(browser, "Appearance")
    control = browser.page.get_by_label("Appearance").locator("span").nth(THEME_CONTROL_INDEX[mode])
    await browser.click(control, f"{mode} mode control")
    await wait_for_theme(browser, mode)


async def wait_for_theme(browser: Browser, mode: str, timeout: float | None = None) -> None:
    if timeout is None:
        timeout = settings.timeouts.default
    class_name = THEME_BODY_CLASS[mode]
    await wait_until(lambda: browser.body_has_class(class_name), timeout, description=f"body class {class_name!r}")
