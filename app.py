"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.router import RouteDecider
from services.routing_service import RoutingService
from services.upstream import UpstreamClient

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.limits.upstream_timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(
            client,
            header_builder,
            prefix=config.routing.prefix,
            max_redirect_hops=config.routing.max_redirect_hops,
        )
        app.state.routing_service = RoutingService(
            config=config,
            logger=logger,
            decider=RouteDecider(
                config.routing.asset_url,
                jsdelivr=config.routing.jsdelivr,
                cdn_url=config.routing.cdn_url,
            ),
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await client.aclose()

    # Every path belongs to the proxy, so the docs routes are disabled
    app = FastAPI(
        title="GitHub Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request, config, logger)

    return app
