"""HTTP proxying utilities for upstream requests."""

from collections.abc import Iterable

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import InvalidTargetURL, RedirectLoopError
from core.headers import HeaderBuilder
from core.paths import new_url
from core.patterns import is_upstream_url
from core.protocols import RequestLogger
from core.router import ROUTE_PROXY
from core.request_types import ForwardRequest


class UpstreamClient:
    """Forward requests upstream and stream the responses back."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder,
        *,
        prefix: str = "/",
        max_redirect_hops: int = 10,
    ) -> None:
        self._client = client
        self._headers = header_builder
        self._prefix = prefix
        self._max_hops = max_redirect_hops

    async def forward(
        self,
        target: str,
        outbound: ForwardRequest,
        logger: RequestLogger,
        *,
        route: str = ROUTE_PROXY,
    ) -> StreamingResponse:
        """Forward a request, resolving redirects the way a transparent proxy should.

        A Location pointing at a recognized GitHub shape is rewritten to come
        back through this proxy and returned to the caller. Any other Location
        is fetched server-side with redirect following turned on.
        """
        url = new_url(target)
        hops = 0
        while True:
            if url is None:
                raise InvalidTargetURL(target)
            hops += 1
            response = await self._send(url, outbound)

            location = response.headers.get("location")
            if location is None:
                return self._relay(response, logger, route=route)

            if is_upstream_url(location):
                logger.log_redirect(str(url), location, followed=False)
                return self._relay(
                    response, logger, route=route, location=self._prefix + location
                )

            await response.aclose()
            if hops >= self._max_hops:
                raise RedirectLoopError(hops, location)
            logger.log_redirect(str(url), location, followed=True)

            target = location
            url = _resolve(response.url, location)
            outbound = outbound.following()

    async def fetch_asset(self, target: str, logger: RequestLogger) -> StreamingResponse:
        """GET a static page from the asset host and relay it as-is."""
        url = new_url(target)
        if url is None:
            raise InvalidTargetURL(target)
        request = self._client.build_request("GET", url)
        response = await self._client.send(request, stream=True, follow_redirects=True)
        if response.status_code >= 400:
            logger.log_error("asset", response.status_code, str(url))
        return _streaming(
            response,
            self._headers.passthrough_headers(response.headers.multi_items()),
        )

    async def _send(self, url: httpx.URL, outbound: ForwardRequest) -> httpx.Response:
        request = self._client.build_request(
            outbound.method,
            url,
            headers=outbound.headers,
            content=outbound.body,
        )
        return await self._client.send(
            request,
            stream=True,
            follow_redirects=outbound.follow_redirects,
        )

    def _relay(
        self,
        response: httpx.Response,
        logger: RequestLogger,
        *,
        route: str,
        location: str | None = None,
    ) -> StreamingResponse:
        """Stream an upstream response back with sanitized headers."""
        if response.status_code >= 400:
            logger.log_error(route, response.status_code, str(response.url))
        headers = self._headers.sanitize_response_headers(
            response.headers.multi_items(),
            location=location,
        )
        return _streaming(response, headers)


def _resolve(base: httpx.URL, location: str) -> httpx.URL | None:
    """Resolve a possibly relative Location against the URL that returned it."""
    try:
        joined = base.join(location)
    except httpx.InvalidURL:
        return None
    return new_url(str(joined))


def _streaming(response: httpx.Response, headers: Iterable[tuple[str, str]]) -> StreamingResponse:
    # Raw bytes keep the upstream content-encoding and content-length valid
    streaming = StreamingResponse(
        response.aiter_raw(),
        status_code=response.status_code,
        background=BackgroundTask(response.aclose),
    )
    streaming.raw_headers = [
        (key.encode("latin-1"), value.encode("latin-1", errors="replace"))
        for key, value in headers
    ]
    return streaming
