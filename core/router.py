"""Dispatch logic - decides between forwarding, CDN redirect and asset fallback."""

from collections.abc import Callable

from core.cdn import DEFAULT_CDN_URL, blob_to_cdn, blob_to_raw
from core.patterns import Shape, classify
from core.request_types import RouteDecision

ROUTE_PROXY = "proxy"
ROUTE_CDN = "cdn"
ROUTE_ASSET = "asset"


class RouteDecider:
    """Decide how a normalized path is served.

    RAW paths are always forwarded. The jsDelivr rewrite only applies to
    github.com blob/raw pages.
    """

    def __init__(
        self,
        asset_url: str,
        *,
        jsdelivr: bool = False,
        cdn_url: str = DEFAULT_CDN_URL,
    ):
        self.asset_url = asset_url
        self.jsdelivr = jsdelivr
        self.cdn_url = cdn_url
        self._handlers: dict[Shape, Callable[[str, Shape], RouteDecision]] = {
            Shape.RELEASE: self._forward,
            Shape.GIST: self._forward,
            Shape.TAGS: self._forward,
            Shape.GIT: self._forward,
            Shape.RAW: self._forward,
            Shape.BLOB: self._blob,
        }

    def decide(self, path: str) -> RouteDecision:
        """Return the route for ``path``."""
        shape = classify(path)
        if shape is None:
            return RouteDecision(route=ROUTE_ASSET, target=self.asset_url + path)
        return self._handlers[shape](path, shape)

    def _forward(self, path: str, shape: Shape) -> RouteDecision:
        return RouteDecision(route=ROUTE_PROXY, target=path, shape=shape)

    def _blob(self, path: str, shape: Shape) -> RouteDecision:
        if self.jsdelivr:
            return RouteDecision(route=ROUTE_CDN, target=blob_to_cdn(path, self.cdn_url), shape=shape)
        return RouteDecision(route=ROUTE_PROXY, target=blob_to_raw(path), shape=shape)
