"""
Session store and login flow.

A saved session is Playwright's storage-state JSON:
``{"cookies": [{"name", "value", "domain", ...}, ...], "origins": [...]}``.
When no session exists the crawler falls back to the credential form login.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Union

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

from config.settings import AUTH_URL_MARKERS, CrawlerConfig
from alumni_crawler.utils import wait_for_enter

USERNAME_SELECTOR = 'input[id="userid"]'
PASSWORD_SELECTOR = 'input[id="password"]'
SUBMIT_SELECTOR = 'button[type="submit"]'
LOGIN_ERROR_SELECTOR = '.error, .alert, .error-message'

SESSION_INSTRUCTIONS = (
    "To fix this:\n"
    "  1. Run: python main.py save-session\n"
    "  2. Log in manually when the browser opens\n"
    "  3. Press Enter to save the session\n"
    "  4. Run the crawler again"
)


class SessionError(Exception):
    """Authentication could not be established; the run cannot continue."""


class SessionExpiredError(SessionError):
    """The saved session was rejected (redirected to the login page)."""


class LoginError(SessionError):
    """The credential form login failed."""


@dataclass
class SessionReport:
    """Result of inspecting a saved session file."""
    path: Path
    cookie_count: int
    domains: List[str] = field(default_factory=list)
    has_target_domain: bool = False


# =============================================================================
# Session store
# =============================================================================

def session_exists(path: Union[str, Path]) -> bool:
    return Path(path).is_file()


def load_session(path: Union[str, Path]) -> Dict:
    """
    Read a saved storage-state file.

    Raises:
        SessionError: File missing or not valid storage-state JSON
    """
    path = Path(path)
    if not path.exists():
        raise SessionError(f"Session file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            state = json.load(f)
    except json.JSONDecodeError as e:
        raise SessionError(f"Session file {path} is not valid JSON: {e}") from e

    if not isinstance(state, dict) or not isinstance(state.get('cookies', []), list):
        raise SessionError(f"Session file {path} has no cookie list")
    return state


def check_session(path: Union[str, Path], target_domain: str) -> SessionReport:
    """
    Summarize which domains a saved session holds cookies for.

    Args:
        path: Session file
        target_domain: Directory host the crawl needs cookies for

    Returns:
        SessionReport; ``has_target_domain`` is the "likely valid" signal
    """
    state = load_session(path)
    cookies = state.get('cookies', [])

    domains = []
    for cookie in cookies:
        domain = cookie.get('domain', '')
        if domain and domain not in domains:
            domains.append(domain)

    has_target = any(target_domain in d for d in domains)
    return SessionReport(
        path=Path(path),
        cookie_count=len(cookies),
        domains=domains,
        has_target_domain=has_target,
    )


def is_auth_redirect(url: str) -> bool:
    """True when the browser was bounced to the identity provider."""
    url = (url or '').lower()
    return any(marker in url for marker in AUTH_URL_MARKERS)


def save_session_interactively(browser_session, config: CrawlerConfig,
                               input_fn: Callable[[str], str] = input) -> Path:
    """
    Let the operator log in by hand, then persist the storage state.

    Args:
        browser_session: Started BrowserSession
        config: Crawler configuration
        input_fn: Prompt function (Enter gate)

    Returns:
        Path of the saved session file
    """
    page = browser_session.new_page()
    page.goto(config.directory_url, wait_until='networkidle', timeout=config.timeout)

    logger.info("Please log in manually in the opened browser window.")
    wait_for_enter("When you see the alumni directory, press Enter here to save your session...",
                   input_fn=input_fn)

    return browser_session.save_storage_state(config.session_file)


# =============================================================================
# Login flow
# =============================================================================

def login(page: Page, config: CrawlerConfig, typing_delay_ms: int = 150) -> None:
    """
    Drive the credential form login.

    Args:
        page: Page to log in with
        config: Crawler configuration (URL, credentials, timeouts)
        typing_delay_ms: Per-keystroke delay

    Raises:
        LoginError: Missing credentials, missing form, or the site rejected the login
    """
    if not config.username or not config.password:
        raise LoginError("Missing credentials. Please set STANFORD_USERNAME and "
                         "STANFORD_PASSWORD in your .env file")

    logger.info("Attempting to login to the alumni directory...")

    # Start at the directory and let it redirect to the login form
    page.goto(config.directory_url, wait_until='networkidle', timeout=config.timeout)

    try:
        page.wait_for_selector(USERNAME_SELECTOR, timeout=20000)
        page.wait_for_selector(PASSWORD_SELECTOR, timeout=20000)
    except PlaywrightTimeoutError as e:
        raise LoginError(f"Login form not found at {page.url}") from e

    page.type(USERNAME_SELECTOR, config.username, delay=typing_delay_ms)
    page.type(PASSWORD_SELECTOR, config.password, delay=typing_delay_ms)

    login_button = page.query_selector(SUBMIT_SELECTOR)
    if not login_button:
        raise LoginError("Could not find login button")
    login_button.click()

    page.wait_for_load_state('networkidle')

    current_url = page.url.lower()
    if 'login' in current_url or 'signin' in current_url:
        error_element = page.query_selector(LOGIN_ERROR_SELECTOR)
        if error_element:
            error_text = (error_element.text_content() or '').strip()
            raise LoginError(f"Login failed: {error_text}")
        raise LoginError("Login failed: Still on login page")

    logger.success("Successfully logged in to the alumni directory")
