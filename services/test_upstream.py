"""Tests for the redirect-following forwarder.

Upstreams are simulated with httpx.MockTransport; every request the proxy
sends is recorded so hop-by-hop method/body rewriting can be checked.
"""

import httpx
import pytest

from core.exceptions import (
    TooManyRedirectsError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
)
from core.request_types import PreparedRequest
from services.upstream import UpstreamClient

CORS = {"Access-Control-Allow-Origin": "http://localhost:3000", "Vary": "Origin"}
TARGET = "https://upstream.test/api/cart/placeorder"
AUTH = "Basic dGVzdC1rZXk6dGVzdC1wYXNzd29yZA=="


def _prepared(method="POST", body=b'{"cartid": "abc"}', content_type="application/json"):
    headers = {"Authorization": AUTH, "Accept": "application/json"}
    if content_type:
        headers["Content-Type"] = content_type
    return PreparedRequest(
        api="cart", method=method, target_url=TARGET, headers=headers, body=body
    )


def _client(responses):
    """Build an UpstreamClient replaying `responses` and recording requests."""
    sent: list[httpx.Request] = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UpstreamClient(client, timeout=5.0), sent


async def _body(response) -> bytes:
    chunks = [chunk async for chunk in response.body_iterator]
    if response.background:
        await response.background()
    return b"".join(c if isinstance(c, bytes) else c.encode() for c in chunks)


@pytest.mark.asyncio
async def test_non_redirect_is_relayed(recording_logger):
    upstream, sent = _client(
        [
            httpx.Response(
                200,
                content=b'{"ok": true}',
                headers={"Content-Type": "application/json", "Cache-Control": "max-age=600"},
            )
        ]
    )

    prepared = _prepared()
    response = await upstream.forward(prepared, CORS, recording_logger)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert await _body(response) == b'{"ok": true}'
    assert len(sent) == 1
    assert sent[0].headers["authorization"] == AUTH
    assert recording_logger.responses == [("cart", 200, 0)]
    assert recording_logger.response_ids == [prepared.request_id]


@pytest.mark.asyncio
async def test_missing_content_type_is_omitted(recording_logger):
    upstream, _ = _client([httpx.Response(204)])

    response = await upstream.forward(_prepared(), CORS, recording_logger)

    assert response.status_code == 204
    assert "content-type" not in response.headers


@pytest.mark.asyncio
async def test_upstream_error_status_passed_through(recording_logger):
    upstream, _ = _client(
        [httpx.Response(404, content=b"not found", headers={"Content-Type": "text/plain"})]
    )

    response = await upstream.forward(_prepared(method="GET", body=None), CORS, recording_logger)

    assert response.status_code == 404
    assert await _body(response) == b"not found"
    assert recording_logger.errors[0][:2] == ("cart", 404)


@pytest.mark.asyncio
async def test_303_switches_post_to_get_without_body(recording_logger):
    upstream, sent = _client(
        [
            httpx.Response(303, headers={"Location": "order/42"}),
            httpx.Response(200, content=b"done"),
        ]
    )

    response = await upstream.forward(_prepared(), CORS, recording_logger)

    assert response.status_code == 200
    assert [r.method for r in sent] == ["POST", "GET"]
    assert sent[0].content == b'{"cartid": "abc"}'
    second = sent[1]
    assert str(second.url) == "https://upstream.test/api/cart/order/42"
    assert second.content == b""
    assert "content-length" not in second.headers
    assert "content-type" not in second.headers
    assert second.headers["authorization"] == AUTH
    assert recording_logger.responses == [("cart", 200, 1)]


@pytest.mark.asyncio
async def test_307_preserves_post_and_body(recording_logger):
    body = b'{"cartid": "abc", "items": [1, 2, 3]}'
    upstream, sent = _client(
        [
            httpx.Response(307, headers={"Location": "/api/cart/v2/placeorder"}),
            httpx.Response(201, content=b"created"),
        ]
    )

    response = await upstream.forward(_prepared(body=body), CORS, recording_logger)

    assert response.status_code == 201
    assert [r.method for r in sent] == ["POST", "POST"]
    assert sent[1].content == body
    assert sent[1].headers["content-type"] == "application/json"
    assert str(sent[1].url) == "https://upstream.test/api/cart/v2/placeorder"


@pytest.mark.asyncio
async def test_302_keeps_get(recording_logger):
    upstream, sent = _client(
        [
            httpx.Response(302, headers={"Location": "https://cdn.test/products"}),
            httpx.Response(200),
        ]
    )

    await upstream.forward(_prepared(method="GET", body=None), CORS, recording_logger)

    assert [r.method for r in sent] == ["GET", "GET"]
    assert str(sent[1].url) == "https://cdn.test/products"


@pytest.mark.asyncio
async def test_redirect_without_location_is_final(recording_logger):
    upstream, sent = _client([httpx.Response(302, content=b"moved somewhere")])

    response = await upstream.forward(_prepared(), CORS, recording_logger)

    assert response.status_code == 302
    assert await _body(response) == b"moved somewhere"
    assert len(sent) == 1


@pytest.mark.asyncio
async def test_five_redirects_then_success(recording_logger):
    responses = [httpx.Response(302, headers={"Location": f"/hop{i}"}) for i in range(5)]
    upstream, sent = _client(responses + [httpx.Response(200)])

    response = await upstream.forward(_prepared(method="GET", body=None), CORS, recording_logger)

    assert response.status_code == 200
    assert len(sent) == 6


@pytest.mark.asyncio
async def test_six_redirects_exhaust_hop_limit(recording_logger):
    responses = [httpx.Response(302, headers={"Location": f"/hop{i}"}) for i in range(6)]
    upstream, sent = _client(responses)

    with pytest.raises(TooManyRedirectsError) as exc_info:
        await upstream.forward(_prepared(method="GET", body=None), CORS, recording_logger)

    assert exc_info.value.api == "cart"
    assert exc_info.value.status_code == 502
    assert "too many redirects" in exc_info.value.payload()["detail"]
    assert len(sent) == 6


@pytest.mark.asyncio
async def test_connect_error_becomes_upstream_error(recording_logger):
    upstream, _ = _client([httpx.ConnectError("Name or service not known")])

    with pytest.raises(UpstreamConnectionError) as exc_info:
        await upstream.forward(_prepared(), CORS, recording_logger)

    assert exc_info.value.payload() == {
        "error": "Upstream fetch failed",
        "detail": "Name or service not known",
    }


@pytest.mark.asyncio
async def test_timeout_becomes_upstream_timeout(recording_logger):
    upstream, _ = _client([httpx.ReadTimeout("")])

    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await upstream.forward(_prepared(), CORS, recording_logger)

    assert exc_info.value.message == "ReadTimeout"


@pytest.mark.asyncio
async def test_failure_on_redirect_hop_becomes_upstream_error(recording_logger):
    upstream, sent = _client(
        [
            httpx.Response(307, headers={"Location": "/down"}),
            httpx.ConnectError("connection refused"),
        ]
    )

    with pytest.raises(UpstreamConnectionError, match="connection refused"):
        await upstream.forward(_prepared(), CORS, recording_logger)
    assert len(sent) == 2
