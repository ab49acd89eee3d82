"""
Tests for re-filtering an existing output CSV.
"""

import pandas as pd
import pytest

from alumni_crawler.csv_cleaner import clean_csv
from alumni_crawler.models import CSV_HEADERS, AlumniRecord


def write_csv(path, names):
    pd.DataFrame([AlumniRecord(name=name).to_row() for name in names]).to_csv(path, index=False)


class TestCleanCsv:
    """Test dropping chrome names and duplicates."""

    def test_removes_invalid_and_duplicates(self, tmp_path):
        path = tmp_path / 'alumni.csv'
        write_csv(path, ['Jane Doe', 'Terms of Use', 'JANE  DOE', 'John Smith', 'Stanford Alumni Directory'])

        kept, removed = clean_csv(path)

        assert (kept, removed) == (2, 3)
        df = pd.read_csv(path, dtype=str)
        assert list(df['Name']) == ['Jane Doe', 'John Smith']
        assert list(df.columns) == CSV_HEADERS

    def test_keeps_na_sentinels_as_text(self, tmp_path):
        """Sentinel values survive the rewrite unchanged."""
        path = tmp_path / 'alumni.csv'
        write_csv(path, ['Jane Doe'])

        clean_csv(path)

        assert pd.read_csv(path, dtype=str, keep_default_na=False)['Location'][0] == 'N/A'

    def test_clean_file_untouched(self, tmp_path):
        path = tmp_path / 'alumni.csv'
        write_csv(path, ['Jane Doe', 'John Smith'])
        assert clean_csv(path) == (2, 0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            clean_csv(tmp_path / 'missing.csv')

    def test_no_name_column(self, tmp_path):
        path = tmp_path / 'other.csv'
        path.write_text('Title,Email\nDean,dean@stanford.edu\n')
        with pytest.raises(ValueError):
            clean_csv(path)
