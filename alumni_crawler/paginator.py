"""
Listing pagination.

Cards are re-queried from the DOM on every call; element handles go stale
whenever the listing re-renders (scroll loading, back navigation).
"""

from typing import List, Optional

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

CARD_SELECTORS = [
    'div.flex.flex-col.break-words.text-saa-black.border.border-black-10.shadow-sm',
    'div[class*="flex"][class*="flex-col"][class*="shadow"]',
    'div[class*="border"][class*="shadow"]',
    '[data-test*="profile-card"]',
    '[data-test*="profile"]',
    '.profile-card',
    '.alumni-card',
]

NEXT_BUTTON_SELECTORS = [
    'button[aria-label="Next page"]',
    'button[aria-label="next"]',
    'a[aria-label="Next page"]',
    'a[aria-label="next"]',
    'button:has-text("Next")',
    'a:has-text("Next")',
    'button[data-testid="next-page"]',
    'a[data-testid="next-page"]',
    '.pagination button:last-child',
    '.pagination a:last-child',
]

IS_DISABLED_JS = (
    "el => el.disabled || el.classList.contains('disabled') "
    "|| el.getAttribute('aria-disabled') === 'true'"
)
SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"
SCROLL_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"
SCROLL_TOP_JS = "() => window.scrollTo(0, 0)"
GENTLE_SCROLL_JS = """async () => {
    const steps = 5;
    const stepSize = document.body.scrollHeight / steps;
    for (let i = 0; i < steps; i++) {
        window.scrollTo(0, stepSize * i);
        await new Promise(r => setTimeout(r, 1000));
    }
    for (let i = steps; i >= 0; i--) {
        window.scrollTo(0, stepSize * i);
        await new Promise(r => setTimeout(r, 500));
    }
}"""

# How go_to_next_page advanced the listing
NEXT_PAGE = 'next'
MORE_CARDS = 'scroll'


def find_card_selector(page: Page, timeout: int = 5000) -> Optional[str]:
    """
    First card selector that appears and matches at least one element.

    Returns:
        Selector string, or None if no alternative matched
    """
    for selector in CARD_SELECTORS:
        try:
            logger.debug(f"Trying card selector: {selector}")
            page.wait_for_selector(selector, timeout=timeout)
            cards = page.query_selector_all(selector)
            if cards:
                logger.info(f"Found {len(cards)} cards with selector: {selector}")
                return selector
        except PlaywrightTimeoutError:
            logger.debug(f"Card selector not found: {selector}")
        except Exception as e:
            logger.debug(f"Card selector {selector} failed: {e}")
    return None


def get_cards(page: Page, selector: str) -> List:
    """Fresh card handles for the current DOM."""
    try:
        return page.query_selector_all(selector)
    except Exception as e:
        logger.warning(f"Failed to query cards with {selector}: {e}")
        return []


def scroll_to_load_content(page: Page, gentle: bool = False) -> None:
    """
    Trigger lazy loading on the current listing page, then return to the top.
    """
    try:
        if gentle:
            logger.debug("Gently scrolling to load content...")
            page.evaluate(GENTLE_SCROLL_JS)
            page.wait_for_timeout(2000)
            return

        logger.debug("Scrolling to load more content...")
        page.evaluate(SCROLL_BOTTOM_JS)
        page.wait_for_timeout(2000)
        page.evaluate(SCROLL_TOP_JS)
        page.wait_for_timeout(1000)
    except Exception as e:
        logger.warning(f"Scrolling failed: {e}")


def click_next_control(page: Page) -> bool:
    """
    Click the first enabled "next page" control.

    Returns:
        True if a control was clicked
    """
    for selector in NEXT_BUTTON_SELECTORS:
        try:
            next_button = page.query_selector(selector)
            if not next_button:
                continue
            if next_button.evaluate(IS_DISABLED_JS):
                logger.debug(f"Next control disabled: {selector}")
                continue

            logger.info(f"Clicking next page button: {selector}")
            next_button.click()
            page.wait_for_timeout(2000)
            return True
        except Exception as e:
            logger.debug(f"Next control {selector} failed: {e}")
    return False


def load_more_by_scrolling(page: Page, settle_ms: int = 3000) -> bool:
    """
    Infinite-scroll check: did scrolling to the bottom grow the page?
    """
    initial_height = page.evaluate(SCROLL_HEIGHT_JS)
    page.evaluate(SCROLL_BOTTOM_JS)
    page.wait_for_timeout(settle_ms)
    new_height = page.evaluate(SCROLL_HEIGHT_JS)
    return new_height > initial_height


def go_to_next_page(page: Page) -> Optional[str]:
    """
    Advance the listing: next control first, then infinite scroll.

    Returns:
        NEXT_PAGE when a fresh page replaced the cards, MORE_CARDS when
        scrolling appended cards below the ones already shown, None when
        the strategy is exhausted
    """
    try:
        if click_next_control(page):
            return NEXT_PAGE

        logger.info("No pagination buttons found, trying infinite scroll...")
        if load_more_by_scrolling(page):
            logger.info("New content loaded via infinite scroll")
            return MORE_CARDS

        return None

    except Exception as e:
        logger.warning(f"Error navigating to next page: {e}")
        return None
