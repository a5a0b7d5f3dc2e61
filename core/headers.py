"""Header construction for upstream requests and proxied responses."""

from collections.abc import Iterable

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# Response headers that would stop clients from using proxied content cross-origin
STRIPPED_RESPONSE_HEADERS = {
    "content-security-policy",
    "content-security-policy-report-only",
    "clear-site-data",
}

PREFLIGHT_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET,POST,PUT,PATCH,TRACE,DELETE,HEAD,OPTIONS",
    "access-control-max-age": "1728000",
}


class HeaderBuilder:
    """Build outbound request headers and sanitize upstream response headers."""

    def build_upstream_headers(
        self,
        headers: Iterable[tuple[str, str]],
    ) -> list[tuple[str, str]]:
        """Copy inbound headers, dropping host and hop-by-hop headers."""
        upstream = []
        for key, value in headers:
            key_lower = key.lower()
            if key_lower == "host" or key_lower in HOP_BY_HOP_HEADERS:
                continue
            upstream.append((key, value))
        return upstream

    def sanitize_response_headers(
        self,
        headers: Iterable[tuple[str, str]],
        *,
        location: str | None = None,
    ) -> list[tuple[str, str]]:
        """Build the header list relayed to the caller.

        CORS headers are forced to wildcards and CSP / clear-site-data are
        removed. ``location`` replaces any upstream Location value.
        """
        sanitized = []
        for key, value in headers:
            key_lower = key.lower()
            if key_lower in STRIPPED_RESPONSE_HEADERS or key_lower in HOP_BY_HOP_HEADERS:
                continue
            if key_lower in ("access-control-expose-headers", "access-control-allow-origin"):
                continue
            if location is not None and key_lower == "location":
                continue
            sanitized.append((key_lower, value))
        if location is not None:
            sanitized.append(("location", location))
        sanitized.append(("access-control-expose-headers", "*"))
        sanitized.append(("access-control-allow-origin", "*"))
        return sanitized

    def passthrough_headers(self, headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Relay headers unchanged apart from hop-by-hop ones."""
        return [
            (key.lower(), value)
            for key, value in headers
            if key.lower() not in HOP_BY_HOP_HEADERS
        ]
