"""
Profile Extraction Module for the Alumni Directory Crawler.

Pulls name, degree, location, employer, emails, phones, external links,
skills and two "offers support" flags out of one profile page.

Every field is a cascade: structured selectors first, then labelled lines,
then free-text regular expressions. These heuristics are tuned to the
directory's current markup and are best-effort only. Each extractor is
wrapped in ``safe_extraction`` so a broken heuristic yields "N/A" (or an
empty list) instead of losing the whole profile.
"""

import re
from functools import wraps
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from loguru import logger

from alumni_crawler.deduplication import is_valid_alumni_name
from alumni_crawler.models import AlumniRecord, NOT_AVAILABLE, join_values
from alumni_crawler.utils import (
    clean_text,
    extract_domain,
    extract_emails,
    extract_phones,
    mailto_address,
    phone_digits,
)

# =============================================================================
# Patterns & selector cascades
# =============================================================================

DEGREE_ABBREVIATIONS = [
    'AB', 'AM', 'BA', 'BS', 'BSE', 'BAS', 'MA', 'MS', 'MSE', 'MBA', 'MPP', 'MPH',
    'MFA', 'MEd', 'EdD', 'JD', 'JSD', 'LLM', 'MD', 'PhD', r'Ph\.D\.', 'MSx',
    'MLA', 'DMA', 'Engr',
]
_DEGREE_ALT = '|'.join(DEGREE_ABBREVIATIONS)

# Abbreviation patterns only look at the top of the profile, where the
# headline lives; lower down they collide with class notes and bios.
DEGREE_HEADLINE_WINDOW = 500

DEGREE_PATTERNS = [
    # MBA '24, PhD ’09
    re.compile(r"\b(?:%s)\s*['‘’]\d{2}\b" % _DEGREE_ALT),
    # MBA 2024, MS, 1998
    re.compile(r"\b(?:%s),?\s+(?:19|20)\d{2}\b" % _DEGREE_ALT),
]

DEGREE_PHRASE_PATTERN = re.compile(
    r"\b(?:Bachelor|Master|Doctor)(?:'s)?\s+of\s+[A-Z][A-Za-z]+(?:\s+(?:and\s+|in\s+|of\s+)?[A-Z][A-Za-z]+){0,4}"
)

CLASS_YEAR_PATTERN = re.compile(r"\bClass\s+of\s+((?:19|20)\d{2})\b", re.I)

NAME_SELECTORS = ['[data-test*="profile-name"]', '[data-test*="name"]', 'h1', 'h2']

LOCATION_SELECTORS = ['[data-test*="location"]', '[class*="location"]']
LOCATION_LABEL_PATTERN = re.compile(r'^(?:Location|Lives in|Based in|Home town|Hometown)\s*[:\-]?\s*(.*)$', re.I)
CITY_REGION_PATTERN = re.compile(
    r"\b([A-Z][a-zA-Z.'\-]+(?:\s[A-Z][a-zA-Z.'\-]+){0,3}),\s"
    r"([A-Z]{2}\b|[A-Z][a-z]+(?:\s[A-Z][a-z]+){0,2})"
)
MAX_LOCATION_LENGTH = 60

US_STATES = {
    'AL', 'AK', 'AZ', 'AR', 'CA', 'CO', 'CT', 'DE', 'FL', 'GA',
    'HI', 'ID', 'IL', 'IN', 'IA', 'KS', 'KY', 'LA', 'ME', 'MD',
    'MA', 'MI', 'MN', 'MS', 'MO', 'MT', 'NE', 'NV', 'NH', 'NJ',
    'NM', 'NY', 'NC', 'ND', 'OH', 'OK', 'OR', 'PA', 'RI', 'SC',
    'SD', 'TN', 'TX', 'UT', 'VT', 'VA', 'WA', 'WV', 'WI', 'WY', 'DC',
    # Canadian provinces
    'AB', 'BC', 'MB', 'NB', 'NL', 'NS', 'ON', 'PE', 'QC', 'SK',
}

# Words that turn a "City, Region" match into a false positive
LOCATION_STOPWORDS = {
    'university', 'school', 'college', 'inc', 'llc', 'corp', 'corporation',
    'company', 'department', 'class', 'alumni', 'directory', 'center',
    'institute', 'foundation', 'group', 'partners', 'ventures', 'terms',
    'privacy', 'copyright', 'skills', 'specialties', 'email', 'phone',
    'january', 'february', 'march', 'april', 'june', 'july', 'august',
    'september', 'october', 'november', 'december',
}

COMPANY_SELECTORS = ['[data-test*="current-position"]', '[data-test*="position"]', '[data-test*="employer"]']
COMPANY_LABEL_PATTERN = re.compile(r'^Current\s+(?:position|employer|role|job)\s*[:\-]?\s*(.*)$', re.I)
TITLE_AT_PATTERN = re.compile(
    r"\b([A-Z][\w&/\-]*(?:\s+[\w&/\-]+){0,6}?)\s+(?:at|@)\s+"
    r"([A-Z0-9][\w&.'\-]*(?:\s+[A-Z0-9&][\w&.'\-]*){0,5})"
)
# Leading words that make "X at Y" a sentence rather than a job
COMPANY_TITLE_STOPWORDS = {
    'studied', 'graduated', 'born', 'lives', 'living', 'based', 'joined',
    'posted', 'member', 'met', 'taught', 'located', 'email', 'contact',
}
MAX_COMPANY_LINE_LENGTH = 150

INSTITUTIONAL_EMAIL_PATTERN = re.compile(r'@(alumni\.|gsb\.)?stanford\.edu$', re.I)

# Hosts (and host/path prefixes) for links that belong to the institution
# or to site chrome rather than to the person
URL_DENYLIST = [
    'stanford.edu',
    'stanfordalumni.org',
    'stanfordhealthcare.org',
    'stanfordchildrens.org',
    'stanforddaily.com',
    'stanfordmag.org',
    'gostanford.com',
    'stanfordbookstore.com',
    'stanfordshopping.com',
    'facebook.com/stanford',
    'facebook.com/stanfordalumni',
    'facebook.com/stanfordgsb',
    'twitter.com/stanford',
    'twitter.com/stanfordalumni',
    'x.com/stanford',
    'x.com/stanfordalumni',
    'instagram.com/stanford',
    'instagram.com/stanfordalumni',
    'linkedin.com/school/stanford-university',
    'linkedin.com/company/stanford-alumni-association',
    'youtube.com/stanford',
    'youtube.com/user/stanford',
    'youtube.com/stanfordalumni',
    'tiktok.com/@stanford',
    'threads.net/@stanford',
    'maps.google.com',
    'google.com/maps',
    'apps.apple.com',
    'play.google.com',
    'cookiepro.com',
    'onetrust.com',
]

URL_TYPES = [
    ('linkedin.com', 'LinkedIn'),
    ('twitter.com', 'Twitter'),
    ('x.com', 'Twitter'),
    ('github.com', 'GitHub'),
    ('facebook.com', 'Facebook'),
    ('instagram.com', 'Instagram'),
    ('youtube.com', 'YouTube'),
]

SKILLS_SELECTORS = ['[data-test*="skills"]']
SKILLS_HEADING_PATTERN = re.compile(r'^skills\s*(?:&|and)\s*specialties\b\s*:?\s*(.*)$', re.I)
SECTION_HEADINGS = {
    'about', 'bio', 'biography', 'education', 'experience', 'work experience',
    'career', 'current position', 'contact', 'contact information', 'interests',
    'affinities', 'groups', 'volunteer', 'volunteering', 'languages',
    'location', 'how i can help', 'career support', 'professional contact',
    'links', 'websites', 'email', 'phone',
}
MAX_SKILLS_LINES = 15
MAX_SKILLS_LENGTH = 500

CAREER_SUPPORT_PHRASES = [
    'career support',
    'offers career advice',
    'open to career conversations',
    'willing to help with career',
]
PROFESSIONAL_CONTACT_PHRASES = [
    'professional contact',
    'open to professional networking',
    'open to being contacted',
]

CHROME_TAGS = ['script', 'style', 'noscript', 'nav', 'header', 'footer']


# =============================================================================
# Fallback contract
# =============================================================================

def safe_extraction(default):
    """
    Decorator: never let a field extractor raise past its caller.

    On any exception, logs a warning and returns ``default`` (a fresh copy
    for list defaults).

    Example:
        @safe_extraction(NOT_AVAILABLE)
        def extract_degree(text):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(f"{func.__name__} failed, using {default!r}: {e}")
                return list(default) if isinstance(default, list) else default
        return wrapper
    return decorator


# =============================================================================
# Parsed page
# =============================================================================

class ProfileDocument:
    """
    A profile page parsed once for all extractors.

    ``soup`` keeps the full markup for selector lookups; ``lines`` and
    ``text`` come from a copy with scripts and nav/header/footer chrome
    removed.
    """

    def __init__(self, html: str):
        html = html or ''
        self.soup = BeautifulSoup(html, 'html.parser')

        body = BeautifulSoup(html, 'html.parser')
        for tag in body(CHROME_TAGS):
            tag.decompose()

        self.lines: List[str] = [
            line for line in (clean_text(raw) for raw in body.get_text('\n').splitlines()) if line
        ]
        self.text = '\n'.join(self.lines)


def _first_selector_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    for selector in selectors:
        element = soup.select_one(selector)
        if element:
            text = clean_text(element.get_text(' '))
            if text:
                return text
    return ''


def _labelled_value(lines: List[str], pattern: re.Pattern) -> str:
    """Value after a label, on the same line or the next one."""
    for i, line in enumerate(lines):
        match = pattern.match(line)
        if not match:
            continue
        value = clean_text(match.group(1))
        if value:
            return value
        if i + 1 < len(lines):
            return lines[i + 1]
    return ''


# =============================================================================
# Field extractors
# =============================================================================

@safe_extraction(NOT_AVAILABLE)
def extract_name(soup: BeautifulSoup, card_name: Optional[str] = None) -> str:
    """
    Card name first, then profile headings. Prefers a candidate that passes
    the alumni-name filter; otherwise returns the first non-empty one so
    the caller can log what it rejected.
    """
    candidates = [clean_text(card_name or '')]
    for selector in NAME_SELECTORS:
        element = soup.select_one(selector)
        if element:
            candidates.append(clean_text(element.get_text(' ')))

    candidates = [c for c in candidates if c]
    for candidate in candidates:
        if is_valid_alumni_name(candidate):
            return candidate
    return candidates[0] if candidates else NOT_AVAILABLE


@safe_extraction(NOT_AVAILABLE)
def extract_degree(text: str) -> str:
    """
    Degree from the profile headline ("MBA '24"), else a spelled-out
    degree phrase anywhere on the page.
    """
    headline = (text or '')[:DEGREE_HEADLINE_WINDOW]
    for pattern in DEGREE_PATTERNS:
        match = pattern.search(headline)
        if match:
            return match.group(0).replace('’', "'").replace('‘', "'")

    match = DEGREE_PHRASE_PATTERN.search(text or '')
    if match:
        return clean_text(match.group(0))
    return NOT_AVAILABLE


@safe_extraction(NOT_AVAILABLE)
def extract_class_year(text: str) -> str:
    match = CLASS_YEAR_PATTERN.search(text or '')
    return match.group(1) if match else NOT_AVAILABLE


def is_plausible_location(candidate: str, name: Optional[str] = None) -> bool:
    """
    Filter "City, Region" false positives: org names, dates, degrees,
    "Last, First" renderings of the person's own name.
    """
    candidate = clean_text(candidate)
    if not candidate or len(candidate) > MAX_LOCATION_LENGTH:
        return False
    if candidate[0].isdigit() or ',' not in candidate:
        return False

    words = {w.strip(".,'").lower() for w in candidate.split()}
    if words & LOCATION_STOPWORDS:
        return False

    # Only the city part: "Boston, MA" is a state, not a degree
    city, region = (part.strip() for part in candidate.rsplit(',', 1))
    if re.search(r'\b(?:%s)\b' % _DEGREE_ALT, city):
        return False
    if not city or not region:
        return False

    if name and name != NOT_AVAILABLE:
        name_words = {w.lower() for w in name.split() if len(w) > 1}
        if len(words & name_words) >= 2 or words <= name_words:
            return False

    if len(region) == 2 and region.isupper():
        return region in US_STATES
    return True


@safe_extraction(NOT_AVAILABLE)
def extract_location(soup: BeautifulSoup, lines: List[str], name: Optional[str] = None) -> str:
    """Selector, then labelled line, then the first plausible "City, Region"."""
    selected = _first_selector_text(soup, LOCATION_SELECTORS)
    if selected and is_plausible_location(selected, name):
        return selected

    labelled = _labelled_value(lines, LOCATION_LABEL_PATTERN)
    if labelled:
        match = CITY_REGION_PATTERN.search(labelled)
        if match and is_plausible_location(match.group(0), name):
            return match.group(0)

    for line in lines:
        for match in CITY_REGION_PATTERN.finditer(line):
            if is_plausible_location(match.group(0), name):
                return match.group(0)
    return NOT_AVAILABLE


def _strip_company_label(text: str) -> str:
    match = COMPANY_LABEL_PATTERN.match(text)
    return clean_text(match.group(1)) if match else text


def _title_at_employer(line: str) -> str:
    if len(line) > MAX_COMPANY_LINE_LENGTH:
        return ''
    match = TITLE_AT_PATTERN.search(line)
    if not match:
        return ''
    title, employer = clean_text(match.group(1)), clean_text(match.group(2))
    if title.split()[0].lower() in COMPANY_TITLE_STOPWORDS:
        return ''
    return f"{title} at {employer}"


@safe_extraction(NOT_AVAILABLE)
def extract_company(soup: BeautifulSoup, lines: List[str]) -> str:
    """Current position: selector, then "Current position" label, then "Title at Employer"."""
    selected = _first_selector_text(soup, COMPANY_SELECTORS)
    if selected:
        selected = _strip_company_label(selected)
        if selected:
            return selected

    labelled = _labelled_value(lines, COMPANY_LABEL_PATTERN)
    if labelled:
        return labelled

    for line in lines:
        found = _title_at_employer(line)
        if found:
            return found
    return NOT_AVAILABLE


@safe_extraction([])
def extract_profile_emails(soup: BeautifulSoup, text: str,
                           card_emails: Optional[List[str]] = None) -> List[str]:
    """Card emails, mailto anchors, then addresses in the page text; unique, in order."""
    found = list(card_emails or [])
    for anchor in soup.find_all('a', href=True):
        address = mailto_address(anchor['href'])
        if address:
            found.append(address)
    found.extend(extract_emails(text))

    emails, seen = [], set()
    for email in found:
        key = email.strip().lower()
        if key and key not in seen:
            seen.add(key)
            emails.append(email.strip())
    return emails


@safe_extraction(([], []))
def classify_emails(emails: List[str]) -> Tuple[List[str], List[str]]:
    """
    Split emails into (institutional, personal) by domain suffix.
    """
    institutional = [e for e in emails if INSTITUTIONAL_EMAIL_PATTERN.search(e)]
    personal = [e for e in emails if not INSTITUTIONAL_EMAIL_PATTERN.search(e)]
    return institutional, personal


def is_denylisted_url(url: str) -> bool:
    """True for institutional/site-chrome links."""
    host = extract_domain(url)
    if not host:
        return True
    path = urlparse(url).path.rstrip('/').lower()
    host_path = host + path

    for entry in URL_DENYLIST:
        if '/' in entry:
            if host_path == entry or host_path.startswith(entry + '/'):
                return True
        elif host == entry or host.endswith('.' + entry):
            return True
    return False


def classify_url(url: str) -> str:
    host = extract_domain(url)
    for domain, label in URL_TYPES:
        if host == domain or host.endswith('.' + domain):
            return label
    return 'Website'


@safe_extraction([])
def extract_urls(soup: BeautifulSoup, base_url: Optional[str] = None) -> List[str]:
    """External links as "Type: URL", institutional links dropped."""
    urls, seen = [], set()
    for anchor in soup.find_all('a', href=True):
        href = anchor['href'].strip()
        if base_url:
            href = urljoin(base_url, href)
        if not href.lower().startswith(('http://', 'https://')):
            continue
        if is_denylisted_url(href):
            continue
        key = href.rstrip('/').lower()
        if key in seen:
            continue
        seen.add(key)
        urls.append(f"{classify_url(href)}: {href}")
    return urls


@safe_extraction([])
def extract_phone_numbers(soup: BeautifulSoup, text: str) -> List[str]:
    """tel: anchors, then phone patterns in the text; unique by digits."""
    candidates = []
    for anchor in soup.find_all('a', href=True):
        href = anchor['href'].strip()
        if href.lower().startswith('tel:'):
            candidates.append(href[4:].strip())
    candidates.extend(extract_phones(text))

    phones, seen = [], []
    for phone in candidates:
        digits = phone_digits(phone)
        if len(digits) < 7 or len(digits) > 15:
            continue
        if any(digits.endswith(d) or d.endswith(digits) for d in seen):
            continue
        seen.append(digits)
        phones.append(phone)
    return phones


def _is_section_heading(line: str) -> bool:
    return line.lower().rstrip(':') in SECTION_HEADINGS


@safe_extraction(NOT_AVAILABLE)
def extract_skills(soup: BeautifulSoup, lines: List[str]) -> str:
    """Text of the "Skills & specialties" section, up to the next heading."""
    selected = _first_selector_text(soup, SKILLS_SELECTORS)
    if selected:
        match = SKILLS_HEADING_PATTERN.match(selected)
        selected = clean_text(match.group(1)) if match else selected
        if selected:
            return selected[:MAX_SKILLS_LENGTH]

    for i, line in enumerate(lines):
        match = SKILLS_HEADING_PATTERN.match(line)
        if not match:
            continue

        parts = [clean_text(match.group(1))] if match.group(1) else []
        for following in lines[i + 1:i + 1 + MAX_SKILLS_LINES]:
            if _is_section_heading(following) or SKILLS_HEADING_PATTERN.match(following):
                break
            parts.append(following)

        skills = ', '.join(p for p in parts if p)
        return skills[:MAX_SKILLS_LENGTH] if skills else NOT_AVAILABLE
    return NOT_AVAILABLE


@safe_extraction('No')
def detect_flag(text: str, phrases: Sequence[str]) -> str:
    """'Yes' if any phrase occurs (case-insensitive)."""
    lowered = (text or '').lower()
    return 'Yes' if any(phrase in lowered for phrase in phrases) else 'No'


# =============================================================================
# Profile assembly
# =============================================================================

def extract_profile(html: str, card=None, source_url: Optional[str] = None) -> AlumniRecord:
    """
    Build an AlumniRecord from one profile page.

    Args:
        html: Profile page HTML
        card: Optional CardSummary from the listing (name, inline emails)
        source_url: Profile URL, used to resolve relative links

    Returns:
        AlumniRecord; individual fields are "N/A" where their heuristics failed
    """
    doc = ProfileDocument(html)

    card_name = getattr(card, 'name', None)
    card_emails = getattr(card, 'emails', None)

    name = extract_name(doc.soup, card_name)
    emails = extract_profile_emails(doc.soup, doc.text, card_emails)
    institutional, personal = classify_emails(emails)

    return AlumniRecord(
        name=name,
        class_year=extract_class_year(doc.text),
        degree=extract_degree(doc.text),
        location=extract_location(doc.soup, doc.lines, name),
        company=extract_company(doc.soup, doc.lines),
        stanford_email=join_values(institutional),
        personal_email=join_values(personal),
        urls=join_values(extract_urls(doc.soup, source_url)),
        phone=join_values(extract_phone_numbers(doc.soup, doc.text)),
        skills=extract_skills(doc.soup, doc.lines),
        career_support=detect_flag(doc.text, CAREER_SUPPORT_PHRASES),
        professional_contact=detect_flag(doc.text, PROFESSIONAL_CONTACT_PHRASES),
    )
