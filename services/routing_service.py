"""Routing orchestration for proxy requests."""

from collections.abc import Iterable

from core.config import Config
from core.headers import HeaderBuilder
from core.paths import ensure_scheme
from core.protocols import RequestLogger
from core.request_types import ForwardRequest, PreparedRequest, RouteDecision
from core.router import RouteDecider


class RoutingService:
    """Classify inbound paths and prepare requests for forwarding."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        decider: RouteDecider,
        header_builder: HeaderBuilder,
    ) -> None:
        self._whitelist = config.routing.whitelist
        self._logger = logger
        self._decider = decider
        self._headers = header_builder

    def decide(self, method: str, path: str) -> RouteDecision:
        """Classify ``path`` and record the decision."""
        decision = self._decider.decide(path)
        self._logger.log_route(
            decision.route,
            method,
            path,
            shape=str(decision.shape) if decision.shape else None,
        )
        return decision

    def is_allowed(self, path: str) -> bool:
        """Check the path against the allow-list (empty list allows everything)."""
        if not self._whitelist:
            return True
        return any(entry in path for entry in self._whitelist)

    def prepare_forward(
        self,
        decision: RouteDecision,
        method: str,
        headers: Iterable[tuple[str, str]],
        body: bytes | None,
    ) -> PreparedRequest:
        """Build the outbound request descriptor for a forwarded path."""
        outbound = ForwardRequest(
            method=method,
            headers=self._headers.build_upstream_headers(headers),
            body=body or None,
        )
        return PreparedRequest(decision.route, ensure_scheme(decision.target), outbound)
