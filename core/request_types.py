"""Shared request data types."""

from dataclasses import dataclass, replace

from core.patterns import Shape


@dataclass(frozen=True)
class RouteDecision:
    """Dispatch decision for a classified path."""

    route: str
    target: str
    shape: Shape | None = None


@dataclass(frozen=True)
class ForwardRequest:
    """Outbound request descriptor for one forwarding attempt."""

    method: str
    headers: list[tuple[str, str]]
    body: bytes | None = None
    follow_redirects: bool = False

    def following(self) -> "ForwardRequest":
        """Copy of this descriptor with automatic redirect following enabled."""
        return replace(self, follow_redirects=True)


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    route_name: str
    target_url: str
    outbound: ForwardRequest
