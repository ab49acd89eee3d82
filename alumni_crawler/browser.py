"""
Browser bootstrap for the crawler.

Owns one Playwright Chromium browser and one context. The context reuses the
saved storage state (cookies + local storage) when the session file exists,
which is what lets a crawl skip the interactive login.

Usage:
    with BrowserSession(config) as session:
        page = session.new_page()
        ...
"""

from pathlib import Path
from typing import Optional, Union

from fake_useragent import UserAgent
from loguru import logger
from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from config.settings import CrawlerConfig, DEFAULT_USER_AGENT, VIEWPORT

LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--no-sandbox',
    '--disable-setuid-sandbox',
]


def get_user_agent(use_random: bool) -> str:
    """Fixed desktop Chrome UA, or a random one from fake_useragent."""
    if use_random:
        try:
            return UserAgent().random
        except Exception as e:
            logger.warning(f"fake_useragent unavailable ({e}), using default user agent")
    return DEFAULT_USER_AGENT


class BrowserSession:
    """
    One browser + context for a sequential crawl.
    """

    def __init__(self, config: CrawlerConfig, load_session: bool = True):
        """
        Args:
            config: Crawler configuration (headless, slow_mo, session file, ...)
            load_session: Start from the saved session file when one exists
        """
        self.config = config
        self.load_session = load_session
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.loaded_session = False

    def start(self) -> 'BrowserSession':
        """
        Launch Chromium and open a context, loading the saved session if any
        (unless load_session is off).
        """
        if self.browser is not None:
            logger.warning("Browser session already started")
            return self

        logger.info("Launching browser...")

        try:
            self.playwright = sync_playwright().start()
            self.browser = self.playwright.chromium.launch(
                headless=self.config.headless,
                slow_mo=self.config.slow_mo,
                args=LAUNCH_ARGS,
            )

            context_options = {
                'viewport': VIEWPORT,
                'user_agent': get_user_agent(self.config.use_random_user_agent),
            }
            session_file = Path(self.config.session_file)
            if self.load_session and session_file.exists():
                context_options['storage_state'] = str(session_file)
                self.loaded_session = True
                logger.info(f"Loaded session from {session_file}")

            self.context = self.browser.new_context(**context_options)
            self.context.set_default_navigation_timeout(self.config.timeout)

            logger.success("Browser initialized successfully")
            return self

        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            self.close()
            raise

    def new_page(self) -> Page:
        """Open a new tab in the session context."""
        if self.context is None:
            raise RuntimeError("Browser session not started. Call start() first.")
        return self.context.new_page()

    def save_storage_state(self, path: Union[str, Path]) -> Path:
        """
        Persist cookies and local storage so the next run can skip login.

        Returns:
            Path written
        """
        if self.context is None:
            raise RuntimeError("Browser session not started. Call start() first.")
        path = Path(path)
        self.context.storage_state(path=str(path))
        logger.success(f"Session saved to {path}")
        return path

    def close(self):
        """
        Close the context, the browser and Playwright.
        """
        for label, closer in (
            ('context', self.context and self.context.close),
            ('browser', self.browser and self.browser.close),
            ('playwright', self.playwright and self.playwright.stop),
        ):
            if not closer:
                continue
            try:
                closer()
            except Exception as e:
                logger.error(f"Error closing {label}: {e}")

        if self.browser is not None:
            logger.info("Browser closed")

        self.context = None
        self.browser = None
        self.playwright = None

    def __enter__(self):
        """Context manager support."""
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager support."""
        self.close()
