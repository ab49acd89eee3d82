"""
Tests for listing-card reading and profile navigation.
"""

import pytest

from conftest import DIRECTORY_URL, FakeBrowser, FakeElement, FakePage, make_card
from alumni_crawler.card_reader import (
    EMAIL_BUTTON_SELECTOR,
    PROFILE_LINK_SELECTORS,
    CardSummary,
    ProfileVisitor,
    read_card,
    read_profile_url,
)


class TestReadCard:
    """Test card summaries."""

    def test_name_link_and_emails(self):
        """The email toggle is clicked and its mailto addresses collected."""
        card = make_card('Jane Doe', href='/profile/1',
                         emails=['jane@stanford.edu', 'jane@gmail.com', 'jane@stanford.edu'])

        summary = read_card(card, FakePage(), DIRECTORY_URL)

        assert summary.name == 'Jane Doe'
        assert summary.profile_url == DIRECTORY_URL + 'profile/1'
        assert summary.emails == ['jane@stanford.edu', 'jane@gmail.com']
        assert card.query_selector(EMAIL_BUTTON_SELECTOR).clicks == 1

    def test_bare_card(self):
        summary = read_card(make_card('  Jane   Doe '), FakePage(), DIRECTORY_URL)

        assert summary.name == 'Jane Doe'
        assert summary.profile_url is None
        assert summary.emails == []

    def test_ignores_script_links(self):
        card = FakeElement(children={
            PROFILE_LINK_SELECTORS[0]: [FakeElement(attrs={'href': 'javascript:void(0)'})],
            PROFILE_LINK_SELECTORS[1]: [FakeElement(attrs={'href': 'https://alumnidirectory.stanford.edu/profile/9'})],
        })
        assert read_profile_url(card, DIRECTORY_URL) == 'https://alumnidirectory.stanford.edu/profile/9'


class TestProfileVisitor:
    """Test loading profile HTML."""

    def test_reuses_one_tab(self):
        tab = FakePage(html_by_url={
            DIRECTORY_URL + 'profile/1': '<h1>Jane</h1>',
            DIRECTORY_URL + 'profile/2': '<h1>John</h1>',
        })
        browser = FakeBrowser([tab])
        visitor = ProfileVisitor(browser)
        listing = FakePage()

        first = visitor.fetch_html(CardSummary('Jane', DIRECTORY_URL + 'profile/1'), listing)
        second = visitor.fetch_html(CardSummary('John', DIRECTORY_URL + 'profile/2'), listing)

        assert (first, second) == ('<h1>Jane</h1>', '<h1>John</h1>')
        assert tab.visited == [DIRECTORY_URL + 'profile/1', DIRECTORY_URL + 'profile/2']

        visitor.close()
        assert tab.closed

    def test_click_and_go_back_without_link(self):
        """Cards without a link are opened in place and navigated back from."""
        listing = FakePage(html_by_url={DIRECTORY_URL + 'profile/7': '<h1>Ada</h1>'})
        listing.goto(DIRECTORY_URL)

        def open_profile():
            listing.url = DIRECTORY_URL + 'profile/7'

        card = FakeElement(on_click=open_profile)
        visitor = ProfileVisitor(FakeBrowser([FakePage()]))

        html = visitor.fetch_html(CardSummary('Ada'), listing, card)

        assert html == '<h1>Ada</h1>'
        assert listing.went_back == 1
        assert listing.url == DIRECTORY_URL

    def test_no_link_and_no_card(self):
        visitor = ProfileVisitor(FakeBrowser([FakePage()]))
        with pytest.raises(ValueError):
            visitor.fetch_html(CardSummary('Ada'), FakePage())
