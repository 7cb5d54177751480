"""Thin wrapper around direct Playwright with explicit bounded waits.

Every wait in the suite goes through :func:`wait_until`: a predicate, a
timeout and a poll interval. It returns the predicate's truthy value or
raises :class:`WaitTimeout`. Nothing is retried.
"""
from __future__ import annotations

import inspect
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, TypeVar, Union
from urllib.parse import urlparse

import anyio
from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeout

from ui_tests.config import settings

T = TypeVar("T")
Predicate = Callable[[], Union[T, Awaitable[T]]]


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class WaitTimeout(ToolError):
    """An expected UI state did not appear within its bound."""


class ValidationRejected(ToolError):
    """An inline validation message appeared instead of the success text."""


async def wait_until(
    predicate: Predicate,
    timeout: float,
    interval: float | None = None,
    description: str = "condition",
) -> Any:
    """Poll ``predicate`` until it returns something truthy.

    The predicate may be sync or async. Exceptions it raises count as "not
    yet" and the last one is chained onto the :class:`WaitTimeout`.
    """
    if interval is None:
        interval = settings.timeouts.poll_interval
    deadline = anyio.current_time() + timeout
    last_error: Exception | None = None

    while True:
        try:
            result = predicate()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            result = None
            last_error = exc
        if result:
            return result
        remaining = deadline - anyio.current_time()
        if remaining <= 0:
            break
        await anyio.sleep(min(interval, remaining))

    raise WaitTimeout(
        name="wait_until",
        payload={"description": description, "timeout": timeout},
        message=f"Timed out after {timeout}s waiting for {description}",
    ) from last_error


class Browser:
    """Convenience wrapper over a Playwright page for one scenario."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self.current_url: str | None = None

    @property
    def page(self) -> Page:
        return self._page

    @property
    def path(self) -> str:
        """Path component of the live page URL."""
        return urlparse(self._page.url).path or "/"

    async def goto(self, url: str, wait_until: str = "networkidle", timeout: float | None = None) -> Dict[str, Any]:
        """Navigate to ``url`` (absolute, or a path on the application under test)."""
        if timeout is None:
            timeout = settings.timeouts.navigation
        if url.startswith("/"):
            url = settings.url(url)
        try:
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout * 1000)
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="goto", payload={"url": url, "wait_until": wait_until}, message=str(exc)) from exc
        self.current_url = self._page.url
        return {"url": self.current_url, "status": response.status if response else None}

    async def wait_for_path(self, path: str, timeout: float | None = None) -> None:
        """Wait for the URL to settle on ``path`` and the network to go idle."""
        if timeout is None:
            timeout = settings.timeouts.navigation
        await wait_until(lambda: self.path == path, timeout, description=f"URL path {path!r}")
        try:
            await self._page.wait_for_load_state("networkidle", timeout=timeout * 1000)
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="wait_for_path", payload={"path": path}, message=str(exc)) from exc
        self.current_url = self._page.url

    async def wait_for_visible(self, locator: Locator, description: str, timeout: float | None = None) -> Locator:
        if timeout is None:
            timeout = settings.timeouts.default
        await wait_until(locator.is_visible, timeout, description=f"{description} to be visible")
        return locator

    async def fill_unique(self, locator: Locator, value: str, description: str, timeout: float | None = None) -> None:
        """Fill ``locator`` once it resolves to exactly one visible input."""
        if timeout is None:
            timeout = settings.timeouts.field

        async def _single_visible() -> bool:
            return await locator.count() == 1 and await locator.is_visible()

        await wait_until(_single_visible, timeout, description=f"exactly one visible {description}")
        try:
            await locator.fill(value)
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="fill", payload={"target": description}, message=str(exc)) from exc

    async def click(self, locator: Locator, description: str, timeout: float | None = None) -> None:
        await self.wait_for_visible(locator, description, timeout)
        try:
            await locator.click()
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="click", payload={"target": description}, message=str(exc)) from exc
        self.current_url = self._page.url

    async def blur(self, locator: Locator, description: str) -> None:
        try:
            await locator.blur()
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="blur", payload={"target": description}, message=str(exc)) from exc

    async def is_enabled(self, locator: Locator, description: str) -> bool:
        try:
            return await locator.is_enabled()
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="is_enabled", payload={"target": description}, message=str(exc)) from exc

    def role(self, role: str, name: str, exact: bool = False) -> Locator:
        return self._page.get_by_role(role, name=name, exact=exact)

    async def expect_text(
        self,
        text: str,
        exact: bool = False,
        timeout: float | None = None,
        within: Locator | None = None,
    ) -> Locator:
        """Wait for ``text`` to be visible, optionally inside ``within``."""
        scope = within if within is not None else self._page
        locator = scope.get_by_text(text, exact=exact).first
        return await self.wait_for_visible(locator, f"text {text!r}", timeout)

    async def wait_for_any_text(self, texts: Iterable[str], timeout: float | None = None) -> str:
        """Return whichever of ``texts`` becomes visible first."""
        if timeout is None:
            timeout = settings.timeouts.default
        candidates = list(texts)

        async def _first_visible() -> str | None:
            for text in candidates:
                if await self._page.get_by_text(text).first.is_visible():
                    return text
            return None

        return await wait_until(
            _first_visible,
            timeout,
            description="any of " + ", ".join(repr(text) for text in candidates),
        )

    async def get_attribute(self, locator: Locator, attribute: str) -> str:
        try:
            value = await locator.get_attribute(attribute, timeout=settings.timeouts.default * 1000)
        except PlaywrightTimeout as exc:
            raise WaitTimeout(name="get_attribute", payload={"attribute": attribute}, message=str(exc)) from exc
        return value or ""

    async def body_has_class(self, class_name: str) -> bool:
        """Check a class on ``document.body``."""
        return bool(await self._page.evaluate("(name) => document.body.classList.contains(name)", class_name))

    async def screenshot(self, name: str) -> str:
        """Save a full-page PNG under the configured screenshot directory."""
        try:
            os.makedirs(settings.screenshot_dir, exist_ok=True)
            path = os.path.join(settings.screenshot_dir, f"{name}.png")
            await self._page.screenshot(path=path, type="png", full_page=True)
            return path
        except Exception as exc:
            raise ToolError(name="screenshot", payload={"name": name}, message=str(exc)) from exc
