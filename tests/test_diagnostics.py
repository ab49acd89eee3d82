"""
Tests for page-state diagnostics.
"""

from conftest import FakeElement, FakePage
from alumni_crawler.diagnostics import BODY_PREVIEW_LENGTH, describe_page_state, log_page_state


class TestDescribePageState:
    """Test the page snapshot."""

    def test_counts_and_preview(self):
        page = FakePage(
            elements={
                'form': [FakeElement()],
                'button': [FakeElement(), FakeElement()],
                'a': [FakeElement()] * 3,
            },
            title='Sign in',
            body_text='x' * (BODY_PREVIEW_LENGTH + 100),
        )
        page.url = 'https://login.stanford.edu/'

        state = describe_page_state(page)

        assert state['url'] == 'https://login.stanford.edu/'
        assert state['title'] == 'Sign in'
        assert len(state['body_preview']) == BODY_PREVIEW_LENGTH
        assert (state['forms'], state['buttons'], state['links']) == (1, 2, 3)

    def test_failed_probe_keeps_default(self):
        """One broken probe does not spoil the others."""
        page = FakePage(title='Directory')

        def broken(selector):
            raise RuntimeError('page crashed')

        page.inner_text = broken

        state = describe_page_state(page)

        assert state['body_preview'] == ''
        assert state['title'] == 'Directory'


class TestLogPageState:
    """Test logging the snapshot."""

    def test_no_page(self):
        assert log_page_state(None) == {}

    def test_returns_state(self):
        state = log_page_state(FakePage(elements={'form': [FakeElement()]}))
        assert state['forms'] == 1
