"""
Unit tests for utility functions.
"""

import pytest

from alumni_crawler.utils import (
    clean_text,
    extract_domain,
    extract_emails,
    extract_phones,
    mailto_address,
    phone_digits,
    wait_for_enter,
)


class TestCleanText:
    """Test text cleaning."""

    def test_clean_text(self):
        assert clean_text("  Jane \n\t Doe  ") == "Jane Doe"
        assert clean_text("Palo\xa0Alto") == "Palo Alto"
        assert clean_text("Zero\u200bWidth") == "ZeroWidth"
        assert clean_text("") == ""
        assert clean_text(None) == ""


class TestExtractEmails:
    """Test email extraction."""

    def test_ordered_and_unique(self):
        text = "Reach me at jane@stanford.edu or Jane@Stanford.edu, also jane.doe@gmail.com."
        assert extract_emails(text) == ['jane@stanford.edu', 'jane.doe@gmail.com']

    def test_no_emails(self):
        assert extract_emails("no addresses here") == []
        assert extract_emails("") == []


class TestExtractPhones:
    """Test phone extraction."""

    def test_us_formats(self):
        phones = extract_phones("Office (650) 555-0100, cell 415.555.0199")
        assert phones == ['(650) 555-0100', '415.555.0199']

    def test_international_and_duplicate(self):
        """A +1 number and its local form are the same number."""
        phones = extract_phones("Call +1 650 555 0100 or (650) 555-0100")
        assert len(phones) == 1
        assert phone_digits(phones[0]).endswith('6505550100')

    def test_too_short(self):
        assert extract_phones("Room 555-0100") == []


class TestMailtoAndDomain:
    """Test URL helpers."""

    def test_mailto_address(self):
        assert mailto_address("mailto:jane@stanford.edu") == "jane@stanford.edu"
        assert mailto_address("MAILTO:jane@stanford.edu?subject=Hi") == "jane@stanford.edu"
        assert mailto_address("https://example.com") == ""
        assert mailto_address(None) == ""

    def test_extract_domain(self):
        assert extract_domain("https://www.LinkedIn.com/in/jane") == "linkedin.com"
        assert extract_domain("github.com/jane") == "github.com"
        assert extract_domain("") == ""


class TestMisc:
    """Test the prompt gate."""

    def test_wait_for_enter(self):
        prompts = []
        wait_for_enter("Press Enter", input_fn=prompts.append)
        assert prompts == ["Press Enter"]

    def test_wait_for_enter_eof(self):
        """Closed stdin counts as acknowledgment."""
        def closed(prompt):
            raise EOFError

        wait_for_enter("Press Enter", input_fn=closed)

    def test_wait_for_enter_interrupt_propagates(self):
        def interrupted(prompt):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            wait_for_enter("Press Enter", input_fn=interrupted)
