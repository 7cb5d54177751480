import logging
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ui_tests.config import settings
from ui_tests.playwright_client import PlaywrightClient
from ui_tests.session_context import Credentials, SessionContext, SessionManager
from ui_tests.workflows import establish_session, random_email, random_password

logger = logging.getLogger(__name__)

TEST_USER_FULL_NAME = "Test User"


@pytest.fixture(scope="session")
def application_available():
    """Skip browser scenarios when the application under test is not reachable."""
    try:
        httpx.get(settings.base_url, timeout=5.0, follow_redirects=True)
    except httpx.HTTPError as exc:
        pytest.skip(f"Application not reachable at {settings.base_url}: {exc}")
    return settings.base_url


@pytest_asyncio.fixture()
async def playwright_client(application_available):
    """Launch a dedicated browser for the scenario."""
    async with PlaywrightClient(headless=settings.playwright_headless) as client:
        yield client


@pytest_asyncio.fixture()
async def session_manager(playwright_client):
    """Isolated browser contexts, all closed when the scenario ends."""
    async with SessionManager(
        browser=playwright_client.browser,
        base_url=settings.base_url,
        timeout=settings.timeouts.default,
    ) as manager:
        yield manager


@pytest_asyncio.fixture()
async def signed_in(session_manager) -> SessionContext:
    """A freshly signed-up and logged-in user with its own browser context."""
    credentials = Credentials(email=random_email(), password=random_password())
    session = await session_manager.create_session(TEST_USER_FULL_NAME, credentials)
    try:
        await establish_session(session)
    except Exception:
        logger.error("signed_in fixture failed for %s", credentials.email)
        raise
    return session
