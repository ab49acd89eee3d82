"""
Utility functions for the Alumni Directory Crawler.

Provides logging setup, text helpers, and the operator prompt gate.
"""

import re
import sys
from datetime import datetime
from typing import Callable, List, Optional
from urllib.parse import urlparse

from loguru import logger

from config.settings import (
    LOGS_DIR,
    LOG_LEVEL,
    LOG_MAX_SIZE,
    LOG_BACKUP_COUNT,
)


EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')

PHONE_PATTERNS = [
    # +1 (555) 123-4567, +44 20 7946 0958
    re.compile(r'\+\d{1,3}[\s.-]?\(?\d{1,4}\)?(?:[\s.-]?\d{2,4}){2,4}'),
    # (555) 123-4567, 555-123-4567, 555.123.4567
    re.compile(r'\(?\b\d{3}\)?[-.\s]?\d{3}[-.\s]\d{4}\b'),
]


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logger(name: str = "crawler", log_file: Optional[str] = None) -> logger:
    """
    Configure and return a logger instance.

    Args:
        name: Logger name
        log_file: Optional custom log file name (default: crawler_YYYYMMDD.log)

    Returns:
        Configured logger instance
    """
    # Remove default logger
    logger.remove()

    # Only colorize for interactive terminals
    is_tty = sys.stdout.isatty()

    logger.add(
        sink=lambda msg: print(msg, end=''),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=LOG_LEVEL,
        colorize=is_tty,
    )

    # File handler with rotation
    if log_file is None:
        log_file = f"crawler_{datetime.now().strftime('%Y%m%d')}.log"

    log_path = LOGS_DIR / log_file

    logger.add(
        sink=log_path,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        level=LOG_LEVEL,
        rotation=LOG_MAX_SIZE,
        retention=LOG_BACKUP_COUNT,
        compression="zip",
    )

    logger.debug(f"Logger initialized: {name} -> {log_path}")

    return logger


# =============================================================================
# Text Processing
# =============================================================================

def clean_text(text: str) -> str:
    """
    Clean and normalize text.

    Args:
        text: Text to clean

    Returns:
        Cleaned text
    """
    if not text:
        return ''

    text = text.replace('\xa0', ' ')
    text = text.replace('\u200b', '')  # Zero-width space

    # Remove extra whitespace
    text = ' '.join(text.split())

    return text.strip()


def extract_emails(text: str) -> List[str]:
    """
    Extract every email address from text, in order of first appearance.

    Args:
        text: Text containing potential emails

    Returns:
        List of unique email addresses (case-insensitive uniqueness)
    """
    if not text:
        return []

    emails = []
    seen = set()
    for match in EMAIL_PATTERN.findall(text):
        email = match.strip('.')
        key = email.lower()
        if key not in seen:
            seen.add(key)
            emails.append(email)
    return emails


def phone_digits(phone: str) -> str:
    """Digits of a phone number, used as its identity."""
    return re.sub(r'\D', '', phone or '')


def extract_phones(text: str) -> List[str]:
    """
    Extract phone numbers from text, deduplicated by digit string.

    Args:
        text: Text containing potential phone numbers

    Returns:
        List of phone numbers as they appear in the text
    """
    if not text:
        return []

    phones = []
    seen_digits = set()
    for pattern in PHONE_PATTERNS:
        for match in pattern.finditer(text):
            phone = match.group(0).strip()
            digits = phone_digits(phone)
            if len(digits) < 10 or len(digits) > 15:
                continue
            # "+1 555..." and "555..." are the same number
            if any(digits.endswith(d) or d.endswith(digits) for d in seen_digits):
                continue
            seen_digits.add(digits)
            phones.append(phone)
    return phones


def mailto_address(href: Optional[str]) -> str:
    """``mailto:a@b.edu?subject=x`` -> ``a@b.edu``"""
    if not href or not href.lower().startswith('mailto:'):
        return ''
    return href[len('mailto:'):].split('?', 1)[0].strip()


# =============================================================================
# URL Utilities
# =============================================================================

def extract_domain(url: str) -> str:
    """
    Extract lowercase host from URL, without a leading "www.".

    Args:
        url: URL to extract domain from

    Returns:
        Domain (e.g., 'example.com')
    """
    if not url:
        return ''
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url.strip()
    netloc = urlparse(url).netloc.lower()
    return netloc[4:] if netloc.startswith('www.') else netloc


# =============================================================================
# Misc
# =============================================================================

def wait_for_enter(prompt: str, input_fn: Callable[[str], str] = input) -> None:
    """
    Block until the operator presses Enter.

    EOF (stdin closed, e.g. under nohup) is treated as acknowledgment.
    """
    try:
        input_fn(prompt)
    except EOFError:
        logger.debug("stdin closed, continuing without operator acknowledgment")


# =============================================================================
# Export public API
# =============================================================================

__all__ = [
    'setup_logger',
    'clean_text',
    'extract_emails',
    'extract_phones',
    'phone_digits',
    'mailto_address',
    'extract_domain',
    'wait_for_enter',
]
