"""FastAPI route handlers."""

import json

from fastapi import Request, Response
from fastapi.responses import StreamingResponse

from core.exceptions import ProxyError
from core.protocols import RequestLogger
from core.request_types import InboundRequest
from ui.log_utils import write_incoming_log

MAX_BODY_SIZE = 10 * 1024 * 1024  # 10MB


def _error_response(error: ProxyError, cors_headers: dict[str, str]) -> Response:
    return Response(
        content=json.dumps(error.payload()),
        status_code=error.status_code,
        media_type="application/json",
        headers=cors_headers,
    )


def _encoded_path(request: Request) -> str:
    """Return the request path as sent, with percent-escapes intact."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        # raw_path is optional in ASGI
        return request.url.path
    return raw_path.split(b"?", 1)[0].decode("ascii")


async def _read_inbound(request: Request) -> InboundRequest | Response:
    """Collect the request parts the proxy uses, or an error Response."""
    raw_body = await request.body()
    if len(raw_body) > MAX_BODY_SIZE:
        return Response(
            content='{"error": "Request body too large"}',
            status_code=413,
            media_type="application/json",
        )

    path = _encoded_path(request)
    headers = dict(request.headers)
    query = dict(request.query_params)
    write_incoming_log(request.method, path, headers, query)
    return InboundRequest(
        method=request.method,
        path=path,
        query=query,
        headers=headers,
        body=raw_body,
    )


async def handle_proxy(request: Request, logger: RequestLogger) -> Response | StreamingResponse:
    """Handle any request under the mount prefix."""
    routing_service = request.app.state.routing_service
    cors_headers = routing_service.cors_headers(request.headers.get("origin"))

    # Preflight never reaches the upstream
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=cors_headers)

    inbound = await _read_inbound(request)
    if isinstance(inbound, Response):
        inbound.headers.update(cors_headers)
        return inbound

    try:
        prepared = routing_service.prepare(inbound)
    except ProxyError as e:
        logger.log_error("proxy", e.status_code, str(e))
        return _error_response(e, cors_headers)

    upstream = request.app.state.upstream_client
    try:
        return await upstream.forward(prepared, cors_headers, logger)
    except ProxyError as e:
        logger.log_error(prepared.api, e.status_code, str(e), request_id=prepared.request_id)
        return _error_response(e, cors_headers)
