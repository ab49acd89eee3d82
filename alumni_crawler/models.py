"""
Alumni record model and the fixed CSV layout it serializes to.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Tuple

NOT_AVAILABLE = 'N/A'

# (attribute, CSV header) in output order
CSV_COLUMNS: List[Tuple[str, str]] = [
    ('name', 'Name'),
    ('class_year', 'Class Year'),
    ('degree', 'Degree'),
    ('location', 'Location'),
    ('company', 'Company'),
    ('stanford_email', 'Stanford Email'),
    ('personal_email', 'Personal Email'),
    ('urls', 'URLs'),
    ('phone', 'Phone'),
    ('skills', 'Skills'),
    ('career_support', 'Career Support'),
    ('professional_contact', 'Professional Contact'),
    ('extracted_at', 'Extracted At'),
]

CSV_HEADERS: List[str] = [header for _, header in CSV_COLUMNS]
NAME_HEADER = 'Name'


def _now() -> str:
    return datetime.now().isoformat()


@dataclass
class AlumniRecord:
    """
    One alumni profile, built transiently per profile visit.

    Every field except ``name`` is best-effort; ``N/A`` marks a field that
    could not be extracted. Multi-valued fields (emails, urls, phones) are
    stored comma-joined.
    """
    name: str
    class_year: str = NOT_AVAILABLE
    degree: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    company: str = NOT_AVAILABLE
    stanford_email: str = NOT_AVAILABLE
    personal_email: str = NOT_AVAILABLE
    urls: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    skills: str = NOT_AVAILABLE
    career_support: str = 'No'
    professional_contact: str = 'No'
    extracted_at: str = field(default_factory=_now)

    def to_row(self) -> Dict[str, str]:
        """Header-keyed dict in CSV column order."""
        return {header: getattr(self, attr) for attr, header in CSV_COLUMNS}


def join_values(values: List[str]) -> str:
    """Comma-join multi-valued fields, falling back to the sentinel."""
    values = [v for v in values if v]
    return ', '.join(values) if values else NOT_AVAILABLE
