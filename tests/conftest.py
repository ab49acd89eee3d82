"""
Shared fixtures and Playwright stand-ins.

FakeElement and FakePage implement just the sync-API surface the crawler
touches, keyed by exact selector strings, so tests run without a browser.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from config.settings import CrawlerConfig
from alumni_crawler.card_reader import (
    CARD_NAME_SELECTOR,
    EMAIL_BUTTON_SELECTOR,
    EMAIL_ITEMS_SELECTOR,
    PROFILE_LINK_SELECTORS,
)
from alumni_crawler.delay_policy import DelayPolicy
from alumni_crawler.paginator import SCROLL_HEIGHT_JS

DIRECTORY_URL = 'https://alumnidirectory.stanford.edu/'


class FakeElement:
    def __init__(self, text: str = '', attrs: Optional[Dict[str, str]] = None,
                 children: Optional[Dict[str, List['FakeElement']]] = None,
                 disabled: bool = False, on_click=None):
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}
        self.disabled = disabled
        self.on_click = on_click
        self.clicks = 0
        self.typed: List[str] = []
        self.pressed: List[str] = []

    def query_selector(self, selector):
        found = self.children.get(selector, [])
        return found[0] if found else None

    def query_selector_all(self, selector):
        return list(self.children.get(selector, []))

    def text_content(self):
        return self.text

    def get_attribute(self, name):
        return self.attrs.get(name)

    def evaluate(self, script):
        return self.disabled

    def click(self):
        self.clicks += 1
        if self.on_click:
            self.on_click()

    def fill(self, value):
        self.typed = [value] if value else []

    def type(self, value, delay=0):
        self.typed.append(value)

    def press(self, key):
        self.pressed.append(key)


class FakePage:
    def __init__(self, elements: Optional[Dict[str, List[FakeElement]]] = None,
                 html: str = '', html_by_url: Optional[Dict[str, str]] = None,
                 heights: Optional[List[int]] = None, redirect_to: Optional[str] = None,
                 title: str = 'Alumni Directory', body_text: str = ''):
        self.elements = elements or {}
        self.html = html
        self.html_by_url = html_by_url or {}
        self.heights = heights or [1000]
        self._height_calls = 0
        self.redirect_to = redirect_to
        self._title = title
        self.body_text = body_text
        self.url = 'about:blank'
        self.visited: List[str] = []
        self.typed: Dict[str, str] = {}
        self.scripts: List[str] = []
        self.went_back = 0
        self.closed = False

    # navigation
    def goto(self, url, **kwargs):
        self.visited.append(url)
        self.url = self.redirect_to or url

    def go_back(self, **kwargs):
        self.went_back += 1
        if len(self.visited) > 0:
            self.url = self.visited[-1]

    def wait_for_load_state(self, *args, **kwargs):
        pass

    def wait_for_timeout(self, ms):
        pass

    def wait_for_selector(self, selector, timeout=None):
        if not self.elements.get(selector):
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        return self.elements[selector][0]

    # DOM
    def query_selector(self, selector):
        found = self.elements.get(selector, [])
        return found[0] if found else None

    def query_selector_all(self, selector):
        return list(self.elements.get(selector, []))

    def type(self, selector, text, delay=0):
        self.typed[selector] = text

    def evaluate(self, script):
        self.scripts.append(script)
        if script == SCROLL_HEIGHT_JS:
            height = self.heights[min(self._height_calls, len(self.heights) - 1)]
            self._height_calls += 1
            return height
        return None

    def content(self):
        return self.html_by_url.get(self.url, self.html)

    def title(self):
        return self._title

    def inner_text(self, selector):
        return self.body_text

    def is_closed(self):
        return self.closed

    def close(self):
        self.closed = True


class FakeBrowser:
    """BrowserSession stand-in handing out pre-built pages in order."""

    def __init__(self, pages: List[FakePage], loaded_session: bool = True):
        self.pages = list(pages)
        self.loaded_session = loaded_session
        self.started = False
        self.closed = False
        self.saved_to: Optional[Path] = None

    def start(self):
        self.started = True
        return self

    def new_page(self):
        if len(self.pages) > 1:
            return self.pages.pop(0)
        return self.pages[0]

    def save_storage_state(self, path):
        self.saved_to = Path(path)
        return self.saved_to

    def close(self):
        self.closed = True


def make_card(name: str, href: Optional[str] = None, emails: Optional[List[str]] = None) -> FakeElement:
    """Listing card with a name, optional profile link and optional inline emails."""
    children = {CARD_NAME_SELECTOR: [FakeElement(text=name)]}
    if href:
        children[PROFILE_LINK_SELECTORS[0]] = [FakeElement(attrs={'href': href})]
    if emails:
        children[EMAIL_BUTTON_SELECTOR] = [FakeElement(text='Email')]
        children[EMAIL_ITEMS_SELECTOR] = [FakeElement(attrs={'href': f'mailto:{e}'}) for e in emails]
    return FakeElement(children=children)


@pytest.fixture
def no_delay_policy():
    return DelayPolicy('test', 0, 0, 0, error_pause=0, typing_delay_ms=0)


@pytest.fixture
def crawler_config(tmp_path):
    return CrawlerConfig(
        directory_url=DIRECTORY_URL,
        username=None,
        password=None,
        headless=True,
        slow_mo=0,
        timeout=1000,
        selector_timeout=0,
        max_retries=1,
        output_csv=tmp_path / 'alumni.csv',
        resume_state_file=tmp_path / 'resume_state.json',
        session_file=tmp_path / 'auth-session.json',
        target_profiles=100,
        per_strategy_limit=100,
        use_random_user_agent=False,
    )
