"""
Per-scenario session contexts.

Each scenario gets its own Playwright ``BrowserContext`` (isolated cookies and
storage) and a :class:`SessionContext` that carries the credential pair
explicitly. Nothing is stashed on the browser context, so scenarios can run
in parallel without sharing state.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, TypedDict
import logging

from playwright.async_api import Browser as PlaywrightBrowser, BrowserContext, Page

from ui_tests.browser import Browser
from ui_tests.config import settings

logger = logging.getLogger(__name__)


class ViewportSize(TypedDict):
    """Viewport size specification."""
    width: int
    height: int


@dataclass
class Credentials:
    """The email/password pair currently valid for logging in."""
    email: str
    password: str


@dataclass
class SessionContext:
    """Everything a scenario knows about its user and browser session."""
    session_id: str
    context: BrowserContext
    page: Page
    full_name: str
    credentials: Credentials
    browser: Browser = field(init=False)

    def __post_init__(self) -> None:
        self.browser = Browser(self.page)

    @property
    def email(self) -> str:
        return self.credentials.email

    @property
    def password(self) -> str:
        return self.credentials.password

    def note_password_change(self, new_password: str) -> None:
        """Record a password the application confirmed as saved."""
        self.credentials.password = new_password

    def note_email_change(self, new_email: str) -> None:
        """Record an email the application confirmed as saved."""
        self.credentials.email = new_email

    def __repr__(self) -> str:
        return f"SessionContext(id={self.session_id}, email={self.credentials.email})"


class SessionManager:
    """
    Creates and tears down isolated browser sessions.

    Usage:
        async with SessionManager(client.browser, base_url=settings.base_url) as manager:
            session = await manager.create_session("Test User", Credentials(email, password))
            await session.browser.goto("/login")
    """

    DEFAULT_VIEWPORT: ViewportSize = {'width': 1280, 'height': 720}
    DEFAULT_LOCALE = 'en-US'

    def __init__(
        self,
        browser: PlaywrightBrowser,
        base_url: Optional[str] = None,
        viewport: Optional[ViewportSize] = None,
        locale: str = DEFAULT_LOCALE,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            browser: Playwright Browser instance
            base_url: Base URL for relative navigation
            viewport: Viewport size for every context
            locale: Browser locale setting
            timeout: Default action timeout in seconds applied to each context
                (None = UI_TIMEOUT_DEFAULT)
        """
        self.browser = browser
        self.base_url = base_url
        self.viewport: ViewportSize = viewport or self.DEFAULT_VIEWPORT
        self.locale = locale
        self.timeout = settings.timeouts.default if timeout is None else timeout
        self.sessions: Dict[str, SessionContext] = {}
        self._counter = 0

    async def __aenter__(self) -> 'SessionManager':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_all()

    async def create_session(
        self,
        full_name: str,
        credentials: Credentials,
        session_id: Optional[str] = None,
    ) -> SessionContext:
        """Open a fresh browser context for ``credentials``."""
        if session_id is None:
            self._counter += 1
            session_id = f"session_{self._counter}"

        if session_id in self.sessions:
            raise ValueError(f"Session {session_id} already exists")

        context = await self.browser.new_context(
            viewport=self.viewport,
            locale=self.locale,
            base_url=self.base_url,
        )
        context.set_default_timeout(self.timeout * 1000)
        page = await context.new_page()

        session = SessionContext(
            session_id=session_id,
            context=context,
            page=page,
            full_name=full_name,
            credentials=credentials,
        )
        self.sessions[session_id] = session

        logger.debug("Created session: %r", session)
        return session

    async def close_session(self, session_id: str) -> None:
        """Close and remove a session."""
        if session_id in self.sessions:
            session = self.sessions.pop(session_id)
            try:
                await session.context.close()
                logger.debug("Closed session: %r", session)
            except Exception as e:
                logger.warning("Error closing session %s: %s", session_id, e)

    async def close_all(self) -> None:
        for session_id in list(self.sessions.keys()):
            await self.close_session(session_id)

    @property
    def session_count(self) -> int:
        return len(self.sessions)
