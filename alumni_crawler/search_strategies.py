"""
Search-strategy enumeration.

The directory caps how many results one query returns, so the crawl walks a
fixed sequence of distinct search terms: the blank default query, then class
decades, then schools, then common surnames. Each strategy yields a bounded
slice; the dedup set absorbs the overlap between slices.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

from config.settings import CrawlerConfig

DECADES = ['1950', '1960', '1970', '1980', '1990', '2000', '2010', '2020']

SCHOOLS = [
    'Business',
    'Earth',
    'Education',
    'Engineering',
    'Humanities and Sciences',
    'Law',
    'Medicine',
    'Sustainability',
]

SURNAMES = [
    'Smith', 'Johnson', 'Williams', 'Brown', 'Jones', 'Garcia', 'Miller',
    'Davis', 'Rodriguez', 'Martinez', 'Lee', 'Wang', 'Chen', 'Kim', 'Nguyen',
    'Patel', 'Zhang', 'Liu', 'Anderson', 'Taylor',
]

SEARCH_INPUT_SELECTORS = [
    'input[type="search"]',
    'input[placeholder*="Search" i]',
    'input[aria-label*="Search" i]',
    'input[name="q"]',
    'input[name="search"]',
    'input[name="name"]',
    'input[id="name"]',
]

SEARCH_BUTTON_SELECTORS = [
    'button[type="submit"]',
    'button[aria-label*="Search" i]',
    'button:has-text("Search")',
    'input[type="submit"]',
]


@dataclass(frozen=True)
class SearchStrategy:
    """One search term (or none, for the default listing)."""
    kind: str
    term: Optional[str] = None

    @property
    def label(self) -> str:
        return self.kind if not self.term else f"{self.kind}:{self.term}"

    @property
    def is_default(self) -> bool:
        return not self.term


def build_search_strategies(
    decades: Sequence[str] = DECADES,
    schools: Sequence[str] = SCHOOLS,
    surnames: Sequence[str] = SURNAMES,
) -> List[SearchStrategy]:
    """
    Build the fixed strategy order: default, decades, schools, surnames.
    """
    strategies = [SearchStrategy('default')]
    strategies += [SearchStrategy('decade', d) for d in decades]
    strategies += [SearchStrategy('school', s) for s in schools]
    strategies += [SearchStrategy('surname', s) for s in surnames]
    return strategies


def build_custom_strategies(
    name: Optional[str] = None,
    year: Optional[str] = None,
    degree: Optional[str] = None,
) -> List[SearchStrategy]:
    """
    One strategy from CLI filters, or an empty list when none were given.
    """
    terms = [t.strip() for t in (name, year, degree) if t and t.strip()]
    if not terms:
        return []
    return [SearchStrategy('custom', ' '.join(terms))]


def find_search_input(page: Page, timeout: int = 3000):
    """First visible search input from the selector cascade, or None."""
    for selector in SEARCH_INPUT_SELECTORS:
        try:
            page.wait_for_selector(selector, timeout=timeout)
            element = page.query_selector(selector)
            if element:
                logger.debug(f"Found search input: {selector}")
                return element
        except PlaywrightTimeoutError:
            logger.debug(f"Search input selector not found: {selector}")
        except Exception as e:
            logger.debug(f"Search input selector {selector} failed: {e}")
    return None


def submit_search(page: Page, search_input) -> None:
    """Click the first search button that exists, else press Enter."""
    for selector in SEARCH_BUTTON_SELECTORS:
        try:
            button = page.query_selector(selector)
            if button:
                button.click()
                return
        except Exception as e:
            logger.debug(f"Search button {selector} failed: {e}")
    search_input.press('Enter')


def perform_search(page: Page, strategy: SearchStrategy, config: CrawlerConfig,
                   typing_delay_ms: int = 150) -> bool:
    """
    Load the result listing for a strategy.

    Returns:
        True when a listing for this strategy is on screen; False when the
        strategy had to degrade to a no-op (no search input found)
    """
    logger.info(f"Searching: {strategy.label}")

    page.goto(config.directory_url, wait_until='networkidle', timeout=config.timeout)

    if strategy.is_default:
        return True

    search_input = find_search_input(page)
    if search_input is None:
        logger.warning(f"No search input found, skipping strategy {strategy.label}")
        return False

    search_input.fill('')
    search_input.type(strategy.term, delay=typing_delay_ms)
    submit_search(page, search_input)

    try:
        page.wait_for_load_state('networkidle', timeout=config.timeout)
    except PlaywrightTimeoutError:
        logger.warning(f"Timed out waiting for results of {strategy.label}, continuing anyway")

    return True
