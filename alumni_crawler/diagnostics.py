"""
Page-state diagnostics, logged when a crawl pass fails unexpectedly.
"""

from typing import Any, Dict

from loguru import logger

BODY_PREVIEW_LENGTH = 500


def _probe(label: str, func, default):
    try:
        return func()
    except Exception as e:
        logger.debug(f"Diagnostics probe '{label}' failed: {e}")
        return default


def describe_page_state(page) -> Dict[str, Any]:
    """
    Snapshot of what the browser is showing.

    Each probe is independent; a failed probe leaves its default in place.

    Returns:
        Dict with url, title, body_preview, forms, buttons, links
    """
    body = _probe('body', lambda: page.inner_text('body'), '') or ''
    return {
        'url': _probe('url', lambda: page.url, ''),
        'title': _probe('title', page.title, ''),
        'body_preview': body[:BODY_PREVIEW_LENGTH],
        'forms': _probe('forms', lambda: len(page.query_selector_all('form')), 0),
        'buttons': _probe('buttons', lambda: len(page.query_selector_all('button')), 0),
        'links': _probe('links', lambda: len(page.query_selector_all('a')), 0),
    }


def log_page_state(page) -> Dict[str, Any]:
    """Log the page snapshot; returns it for callers that want the values."""
    if page is None:
        logger.warning("No page available for diagnostics")
        return {}

    state = describe_page_state(page)
    logger.info(f"Current URL: {state['url']}")
    logger.info(f"Page title: {state['title']}")
    logger.info(f"Page content preview: {state['body_preview']}")
    logger.info(f"Found {state['forms']} forms, {state['buttons']} buttons, {state['links']} links")

    if state['forms'] > 0:
        logger.warning("Page has forms - may be a login or authentication page")
    return state
