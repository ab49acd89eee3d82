"""
Listing-card reading and profile navigation.

A card gives us a name, a link to the full profile and, after clicking its
email toggle, the mailto addresses shown inline. The full profile HTML is
then loaded in a dedicated tab so the listing page keeps its search state
and scroll position.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urljoin

from loguru import logger
from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

from alumni_crawler.utils import clean_text, mailto_address

CARD_NAME_SELECTOR = 'h3, strong'
EMAIL_BUTTON_SELECTOR = 'button[data-test="profile-summary-email"]'
EMAIL_ITEMS_SELECTOR = 'ul[data-test="profile-summary-email-items"] a[href^="mailto:"]'

PROFILE_LINK_SELECTORS = [
    'a[data-test*="profile-link"]',
    'a[href*="/profile"]',
    'h3 a[href]',
    'a[href]:not([href^="mailto:"]):not([href^="tel:"])',
]


@dataclass
class CardSummary:
    """What a listing card tells us before the profile is opened."""
    name: str
    profile_url: Optional[str] = None
    emails: List[str] = field(default_factory=list)


def read_card_name(card) -> str:
    try:
        element = card.query_selector(CARD_NAME_SELECTOR)
        return clean_text(element.text_content()) if element else ''
    except Exception as e:
        logger.debug(f"Card name lookup failed: {e}")
        return ''


def read_profile_url(card, base_url: str) -> Optional[str]:
    for selector in PROFILE_LINK_SELECTORS:
        try:
            link = card.query_selector(selector)
            if not link:
                continue
            href = link.get_attribute('href')
            if href and not href.startswith('#') and not href.lower().startswith('javascript:'):
                return urljoin(base_url, href)
        except Exception as e:
            logger.debug(f"Profile link selector {selector} failed: {e}")
    return None


def read_card_emails(card, page: Page, name: str = '') -> List[str]:
    """
    Expand the card's email section and collect its mailto addresses.
    """
    emails = []
    try:
        email_button = card.query_selector(EMAIL_BUTTON_SELECTOR)
        if email_button:
            logger.debug(f"Clicking email button for {name}...")
            email_button.click()
            page.wait_for_timeout(1000)

        for element in card.query_selector_all(EMAIL_ITEMS_SELECTOR):
            address = mailto_address(element.get_attribute('href'))
            if address and address not in emails:
                emails.append(address)

        if emails:
            logger.debug(f"Found {len(emails)} card emails for {name}: {', '.join(emails)}")
    except Exception as e:
        logger.warning(f"Email extraction failed for {name}: {e}")
    return emails


def read_card(card, page: Page, base_url: str) -> CardSummary:
    """
    Summarize one listing card.

    Args:
        card: Card element handle
        page: Listing page (for waits after clicks)
        base_url: Base for resolving relative profile links
    """
    name = read_card_name(card)
    return CardSummary(
        name=name,
        profile_url=read_profile_url(card, base_url),
        emails=read_card_emails(card, page, name),
    )


class ProfileVisitor:
    """
    Loads full-profile HTML, one profile at a time.

    Profiles with a URL open in a single reused tab; cards without one are
    clicked on the listing page, read, and navigated back from.
    """

    def __init__(self, browser_session, timeout: int = 90000):
        self.browser_session = browser_session
        self.timeout = timeout
        self._profile_page: Optional[Page] = None

    def _tab(self) -> Page:
        if self._profile_page is None or self._profile_page.is_closed():
            self._profile_page = self.browser_session.new_page()
        return self._profile_page

    def fetch_html(self, card_summary: CardSummary, listing_page: Page, card=None) -> str:
        """
        Get the profile HTML for a card.

        Raises:
            Playwright errors on navigation failure; the caller skips the profile.
        """
        if card_summary.profile_url:
            tab = self._tab()
            tab.goto(card_summary.profile_url, wait_until='domcontentloaded', timeout=self.timeout)
            try:
                tab.wait_for_load_state('networkidle', timeout=15000)
            except PlaywrightTimeoutError:
                logger.debug(f"Profile {card_summary.profile_url} never went idle, reading anyway")
            return tab.content()

        if card is None:
            raise ValueError(f"No profile link or card element for {card_summary.name}")

        # No link: open the profile in place and come back
        listing_url = listing_page.url
        card.click()
        listing_page.wait_for_load_state('networkidle')
        html = listing_page.content()
        if listing_page.url != listing_url:
            listing_page.go_back(wait_until='networkidle')
        return html

    def close(self):
        if self._profile_page is not None and not self._profile_page.is_closed():
            try:
                self._profile_page.close()
            except Exception as e:
                logger.debug(f"Error closing profile tab: {e}")
        self._profile_page = None
