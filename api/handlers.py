"""FastAPI route handlers."""

import traceback

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from core.config import Config
from core.headers import PREFLIGHT_HEADERS
from core.paths import extract_path, query_redirect_url
from core.protocols import RequestLogger
from core.router import ROUTE_ASSET, ROUTE_CDN
from ui.log_utils import write_incoming_log


def _is_preflight(request: Request) -> bool:
    return request.method == "OPTIONS" and "access-control-request-headers" in request.headers


def _raw_href(request: Request, origin: str) -> str:
    """Rebuild the request URL with its percent-escapes intact."""
    raw_path = request.scope.get("raw_path") or request.url.path.encode()
    # Some servers include the query in raw_path
    path = raw_path.split(b"?", 1)[0].decode("latin-1")
    query = request.scope.get("query_string", b"").decode("latin-1")
    return origin + path + ("?" + query if query else "")


async def handle_proxy(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle any inbound request; every failure becomes a 502."""
    try:
        return await _dispatch(request, config, logger)
    except Exception as e:
        logger.log_error("proxy", 502, f"{type(e).__name__}: {e}")
        return PlainTextResponse(
            "Server Error:\n" + traceback.format_exc(),
            status_code=502,
            headers={"access-control-allow-origin": "*"},
        )


async def _dispatch(request: Request, config: Config, logger: RequestLogger) -> Response:
    routing = config.routing

    target = request.query_params.get("q")
    if target:
        return RedirectResponse(
            query_redirect_url(request.url.netloc, routing.prefix, target),
            status_code=301,
        )

    if _is_preflight(request):
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    origin = f"{request.url.scheme}://{request.url.netloc}"
    path = extract_path(_raw_href(request, origin), origin, routing.prefix)

    routing_service = request.app.state.routing_service
    upstream = request.app.state.upstream_client
    decision = routing_service.decide(request.method, path)

    if config.proxy.debug:
        write_incoming_log(request.method, path, dict(request.headers), route=decision.route)

    if decision.route == ROUTE_CDN:
        return RedirectResponse(decision.target, status_code=302)

    if decision.route == ROUTE_ASSET:
        return await upstream.fetch_asset(decision.target, logger)

    if not routing_service.is_allowed(decision.target):
        return PlainTextResponse("blocked", status_code=403)

    body = await request.body()
    prepared = routing_service.prepare_forward(
        decision,
        request.method,
        request.headers.items(),
        body,
    )
    return await upstream.forward(
        prepared.target_url,
        prepared.outbound,
        logger,
        route=prepared.route_name,
    )
