"""Tests for the upstream forwarder: redirect handling and header sanitization."""

import httpx
import pytest

from core.exceptions import InvalidTargetURL, RedirectLoopError
from core.headers import HeaderBuilder
from core.request_types import ForwardRequest
from services.upstream import UpstreamClient

RELEASE_URL = "https://github.com/octocat/hello/releases/download/v1/app.zip"
RAW_URL = "https://raw.githubusercontent.com/octocat/hello/main/README.md"
OBJECT_URL = "https://objects.example.com/blob/123?sig=abc"


def _make_upstream(handler, *, prefix="/", max_redirect_hops=10):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sent = []
    original_send = client.send

    async def spy_send(request, **kwargs):
        sent.append((str(request.url), kwargs.get("follow_redirects")))
        return await original_send(request, **kwargs)

    client.send = spy_send
    upstream = UpstreamClient(
        client,
        HeaderBuilder(),
        prefix=prefix,
        max_redirect_hops=max_redirect_hops,
    )
    return upstream, client, sent


async def _read(response) -> bytes:
    chunks = [chunk async for chunk in response.body_iterator]
    await response.background()
    return b"".join(chunks)


def _response(status, headers=None, body=b""):
    # An explicit stream keeps the body unread, as with a real transport
    return httpx.Response(status, headers=headers, stream=httpx.ByteStream(body))


def _outbound(method="GET", body=None):
    return ForwardRequest(method=method, headers=[("user-agent", "curl/8")], body=body)


@pytest.mark.asyncio
async def test_plain_response_streamed_with_sanitized_headers(recording_logger):
    def handler(request):
        return _response(
            200,
            headers={
                "content-type": "application/zip",
                "content-security-policy": "default-src 'none'",
                "content-security-policy-report-only": "default-src 'none'",
                "clear-site-data": '"*"',
                "access-control-allow-origin": "https://github.com",
            },
            body=b"zip-bytes",
        )

    upstream, client, sent = _make_upstream(handler)
    async with client:
        response = await upstream.forward(RELEASE_URL, _outbound(), recording_logger)
        body = await _read(response)

    assert response.status_code == 200
    assert body == b"zip-bytes"
    assert "content-security-policy" not in response.headers
    assert "content-security-policy-report-only" not in response.headers
    assert "clear-site-data" not in response.headers
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-expose-headers"] == "*"
    assert sent == [(RELEASE_URL, False)]


@pytest.mark.asyncio
async def test_recognized_redirect_rewritten_through_prefix(recording_logger):
    def handler(request):
        return _response(302, headers={"location": RAW_URL}, body=b"moved")

    upstream, client, sent = _make_upstream(handler, prefix="/gh/")
    async with client:
        response = await upstream.forward(
            "https://github.com/octocat/hello/raw/main/README.md",
            _outbound(),
            recording_logger,
        )
        body = await _read(response)

    assert response.status_code == 302
    assert response.headers["location"] == "/gh/" + RAW_URL
    assert body == b"moved"
    assert len(sent) == 1
    assert recording_logger.redirects[0][1:] == (RAW_URL, False)


@pytest.mark.asyncio
async def test_unrecognized_redirect_followed_once(recording_logger):
    def handler(request):
        if request.url.host == "github.com":
            return _response(302, headers={"location": OBJECT_URL})
        return _response(
            200,
            headers={"content-type": "application/octet-stream", "content-security-policy": "x"},
            body=b"asset",
        )

    upstream, client, sent = _make_upstream(handler)
    async with client:
        response = await upstream.forward(RELEASE_URL, _outbound(), recording_logger)
        body = await _read(response)

    assert response.status_code == 200
    assert body == b"asset"
    assert "content-security-policy" not in response.headers
    assert response.headers["access-control-allow-origin"] == "*"
    assert sent == [(RELEASE_URL, False), (OBJECT_URL, True)]
    assert recording_logger.redirects == [(RELEASE_URL, OBJECT_URL, True)]


@pytest.mark.asyncio
async def test_relative_redirect_resolved_against_current_url(recording_logger):
    def handler(request):
        if request.url.path.startswith("/octocat/"):
            return _response(301, headers={"location": "/mirror/app.zip"})
        return _response(200, body=b"ok")

    upstream, client, sent = _make_upstream(handler)
    async with client:
        response = await upstream.forward(RELEASE_URL, _outbound(), recording_logger)
        await _read(response)

    assert response.status_code == 200
    assert sent[1] == ("https://github.com/mirror/app.zip", True)


@pytest.mark.asyncio
async def test_body_replayed_on_followed_hop(recording_logger):
    bodies = []

    def handler(request):
        bodies.append(request.content)
        if request.url.host == "github.com":
            return _response(307, headers={"location": OBJECT_URL})
        return _response(201)

    upstream, client, _ = _make_upstream(handler)
    async with client:
        response = await upstream.forward(
            "https://github.com/octocat/hello/git-receive-pack",
            _outbound("POST", b"pack-data"),
            recording_logger,
        )
        await _read(response)

    assert response.status_code == 201
    assert bodies == [b"pack-data", b"pack-data"]


@pytest.mark.asyncio
async def test_redirect_loop_hits_hop_limit(recording_logger):
    # A non-3xx response with a Location is not followed by httpx, so the
    # forwarder itself keeps looping until the guard trips.
    def handler(request):
        return _response(200, headers={"location": OBJECT_URL})

    upstream, client, sent = _make_upstream(handler, max_redirect_hops=3)
    async with client:
        with pytest.raises(RedirectLoopError) as exc_info:
            await upstream.forward(RELEASE_URL, _outbound(), recording_logger)

    assert exc_info.value.hops == 3
    assert len(sent) == 3


@pytest.mark.asyncio
async def test_invalid_target_raises(recording_logger):
    upstream, client, sent = _make_upstream(lambda request: _response(200))
    async with client:
        with pytest.raises(InvalidTargetURL):
            await upstream.forward("https://", _outbound(), recording_logger)

    assert sent == []


@pytest.mark.asyncio
async def test_transport_error_propagates(recording_logger):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream, client, _ = _make_upstream(handler)
    async with client:
        with pytest.raises(httpx.ConnectError):
            await upstream.forward(RELEASE_URL, _outbound(), recording_logger)


@pytest.mark.asyncio
async def test_fetch_asset_passthrough(recording_logger):
    def handler(request):
        assert request.method == "GET"
        return _response(404, headers={"content-type": "text/html"}, body=b"<h1>404</h1>")

    upstream, client, sent = _make_upstream(handler)
    async with client:
        response = await upstream.fetch_asset("https://assets.example/favicon.ico", recording_logger)
        body = await _read(response)

    assert response.status_code == 404
    assert body == b"<h1>404</h1>"
    assert response.headers["content-type"] == "text/html"
    assert sent == [("https://assets.example/favicon.ico", True)]
    assert recording_logger.errors[0][:2] == ("asset", 404)


@pytest.mark.asyncio
async def test_error_status_logged_under_route(recording_logger):
    upstream, client, _ = _make_upstream(lambda request: _response(404, body=b"missing"))
    async with client:
        response = await upstream.forward(
            RELEASE_URL, _outbound(), recording_logger, route="mirror"
        )
        await _read(response)

    assert response.status_code == 404
    assert recording_logger.errors == [("mirror", 404, RELEASE_URL)]
