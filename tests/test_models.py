"""
Tests for the alumni record model.
"""

from alumni_crawler.models import CSV_HEADERS, NOT_AVAILABLE, AlumniRecord, join_values


class TestAlumniRecord:
    """Test record serialization."""

    def test_defaults(self):
        record = AlumniRecord(name='Jane Doe')
        assert record.degree == NOT_AVAILABLE
        assert record.career_support == 'No'
        assert record.extracted_at

    def test_to_row_column_order(self):
        row = AlumniRecord(name='Jane Doe', location='Palo Alto, CA').to_row()
        assert list(row) == CSV_HEADERS
        assert row['Location'] == 'Palo Alto, CA'


class TestJoinValues:
    def test_join(self):
        assert join_values(['a@x.com', '', 'b@y.com']) == 'a@x.com, b@y.com'
        assert join_values([]) == NOT_AVAILABLE
