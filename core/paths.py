"""Inbound path extraction and target URL normalization."""

import re

import httpx

_LEADING_SCHEME = re.compile(r"^https?:/+")
_HAS_SCHEME = re.compile(r"^https?://")


def extract_path(href: str, origin: str, prefix: str) -> str:
    """Strip our own origin and mount prefix from a request URL.

    The query string stays part of the remainder. A repeated or mangled
    leading scheme (``https:/github.com``, ``http:///github.com``) collapses to
    a single ``https://``.
    """
    remainder = href[len(origin) + len(prefix):]
    return _LEADING_SCHEME.sub("https://", remainder, count=1)


def ensure_scheme(url: str) -> str:
    """Prepend ``https://`` when the URL carries no http(s) scheme."""
    if _HAS_SCHEME.match(url):
        return url
    return "https://" + url


def new_url(text: str | None) -> httpx.URL | None:
    """Parse ``text`` into a URL, returning None if it is not usable."""
    if not text:
        return None
    try:
        url = httpx.URL(text)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    if not url.scheme or not url.host:
        return None
    return url


def query_redirect_url(host: str, prefix: str, target: str) -> str:
    """Build the canonical short-link URL for the ``q`` query parameter."""
    return f"https://{host}{prefix}{target}"
