"""Custom exception hierarchy for the GitHub proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class InvalidTargetURL(ProxyError):
    """Raised when a forwarding target cannot be parsed into a URL.

    Attributes:
        target: The raw target string that failed to parse
    """

    def __init__(self, target: str | None) -> None:
        super().__init__(f"Invalid target URL: {target!r}")
        self.target = target


class RedirectLoopError(ProxyError):
    """Raised when an upstream keeps redirecting past the hop limit.

    Attributes:
        hops: Number of forwarding attempts made
        last_location: The redirect target that would have been followed next
    """

    def __init__(self, hops: int, last_location: str) -> None:
        super().__init__(f"Too many redirects ({hops} hops), last location: {last_location}")
        self.hops = hops
        self.last_location = last_location
