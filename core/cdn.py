"""Rewrites from GitHub content URLs to a jsDelivr-style CDN mirror."""

import re

DEFAULT_CDN_URL = "https://cdn.jsdelivr.net/gh"

_GITHUB_HOST = re.compile(r"^(?:https?://)?github\.com", re.IGNORECASE)
_RAW_HOST = re.compile(r"^(?:https?://)?raw\.(?:githubusercontent|github)\.com", re.IGNORECASE)
# owner/repo are kept, the following ref segment gets an "@" in front
_RAW_REF = re.compile(
    r"^((?:https?://)?raw\.(?:githubusercontent|github)\.com/[^/]+/[^/]+)/([^/]+/)",
    re.IGNORECASE,
)


def blob_to_cdn(path: str, cdn_url: str = DEFAULT_CDN_URL) -> str:
    """github.com/o/r/blob/ref/f -> <cdn>/o/r@ref/f"""
    path = path.replace("/blob/", "@", 1)
    return _GITHUB_HOST.sub(lambda _: cdn_url, path, count=1)


def raw_to_cdn(path: str, cdn_url: str = DEFAULT_CDN_URL) -> str:
    """raw.githubusercontent.com/o/r/ref/f -> <cdn>/o/r@ref/f"""
    path = _RAW_REF.sub(r"\1@\2", path, count=1)
    return _RAW_HOST.sub(lambda _: cdn_url, path, count=1)


def blob_to_raw(path: str) -> str:
    """Turn a blob page URL into its raw download form on github.com."""
    return path.replace("/blob/", "/raw/", 1)
