"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.router import UpstreamResolver
from core.transform import RequestTransformer
from services.routing_service import RoutingService
from services.upstream import UpstreamClient

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    `transport` replaces the network transport of the upstream client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(
            timeout=config.proxy.timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(client, timeout=config.proxy.timeout)
        app.state.routing_service = RoutingService(
            logger=logger,
            resolver=UpstreamResolver(config.upstreams),
            transformer=RequestTransformer(config.proxy.mount_prefix),
            header_builder=HeaderBuilder(config.cors, config.credentials),
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Florist One Proxy", version="0.1.0", lifespan=lifespan)
    prefix = config.proxy.mount_prefix.rstrip("/")

    async def proxy(request: Request):
        return await handle_proxy(request, logger)

    app.add_api_route(prefix or "/", proxy, methods=PROXY_METHODS, include_in_schema=False)
    app.add_api_route(
        prefix + "/{path:path}", proxy, methods=PROXY_METHODS, include_in_schema=False
    )

    return app
