"""
Tests for output statistics.
"""

import pandas as pd
import pytest

from alumni_crawler.models import AlumniRecord
from alumni_crawler.statistics import (
    calculate_field_coverage,
    get_email_breakdown,
    get_flag_breakdown,
    log_summary,
    summarize_output,
)


@pytest.fixture
def records_df():
    return pd.DataFrame([
        AlumniRecord(name='Jane Doe', stanford_email='jane@stanford.edu',
                     personal_email='jane@gmail.com', career_support='Yes').to_row(),
        AlumniRecord(name='John Smith', personal_email='john@gmail.com',
                     professional_contact='Yes').to_row(),
        AlumniRecord(name='Ada Lee', location='Palo Alto, CA').to_row(),
        AlumniRecord(name='Bo Chen', career_support='Yes').to_row(),
    ])


class TestFieldCoverage:
    """Test per-column coverage."""

    def test_counts_and_percentages(self, records_df):
        coverage = calculate_field_coverage(records_df)

        assert coverage['Name'] == {'count': 4, 'percentage': 100.0}
        assert coverage['Location'] == {'count': 1, 'percentage': 25.0}
        assert coverage['Personal Email'] == {'count': 2, 'percentage': 50.0}
        assert coverage['Skills'] == {'count': 0, 'percentage': 0.0}

    def test_blank_is_not_populated(self):
        df = pd.DataFrame({'Company': ['', '  ', 'Acme', None]})
        assert calculate_field_coverage(df)['Company']['count'] == 1

    def test_empty(self):
        assert calculate_field_coverage(pd.DataFrame()) == {}


class TestBreakdowns:
    """Test email and flag breakdowns."""

    def test_email_breakdown(self, records_df):
        assert get_email_breakdown(records_df) == {
            'stanford_email': 1,
            'personal_email': 2,
            'any_email': 2,
            'any_email_pct': 50.0,
        }

    def test_email_breakdown_empty(self):
        assert get_email_breakdown(pd.DataFrame())['any_email'] == 0

    def test_flag_breakdown(self, records_df):
        assert get_flag_breakdown(records_df) == {'Career Support': 2, 'Professional Contact': 1}

    def test_flag_breakdown_missing_columns(self):
        assert get_flag_breakdown(pd.DataFrame({'Name': ['Jane']})) == {
            'Career Support': 0, 'Professional Contact': 0,
        }


class TestSummarizeOutput:
    """Test summarizing a CSV file."""

    def test_summarize(self, tmp_path, records_df):
        path = tmp_path / 'alumni.csv'
        records_df.to_csv(path, index=False)

        stats = summarize_output(path)

        assert stats['total_records'] == 4
        assert stats['field_coverage']['Name']['count'] == 4
        assert stats['email_breakdown']['stanford_email'] == 1
        assert stats['flags']['Career Support'] == 2
        log_summary(stats)

    def test_missing_file(self, tmp_path):
        stats = summarize_output(tmp_path / 'missing.csv')
        assert stats['total_records'] == 0
        assert stats['field_coverage'] == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.csv'
        path.write_text('')
        assert summarize_output(path)['total_records'] == 0
