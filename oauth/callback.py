"""Parsing of the provider redirect back to the application"""

from typing import Optional
from urllib.parse import parse_qs, urlsplit, urlunsplit

from browser.context import BrowserContext
from .models import CallbackParameters


def parse_callback(url: str) -> Optional[CallbackParameters]:
    """Extract ``code`` and ``state`` from a redirect URL

    Nothing is validated here: the state is checked by the caller and the
    code by the backend.

    Args:
        url: Current page address

    Returns:
        CallbackParameters, or None when the query string is empty or
        either parameter is missing
    """
    query = urlsplit(url).query
    if not query:
        return None

    params = parse_qs(query, keep_blank_values=True)
    code = params.get("code")
    state = params.get("state")
    if code is None or state is None:
        return None

    return CallbackParameters(code=code[0], state=state[0])


def strip_query(url: str) -> str:
    """``url`` without its query string and fragment"""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def clear_url_params(browser: BrowserContext) -> None:
    """Rewrite the address bar so a refresh cannot replay the callback"""
    current = browser.current_url
    cleaned = strip_query(current)
    if cleaned != current:
        browser.rewrite_url(cleaned)
