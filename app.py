"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_relay
from core.config import VERSION, Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.prefetch import PrefetchService
from services.relay import RelayService
from services.upstream import UpstreamClient

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the origin client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        origin_client = httpx.AsyncClient(
            base_url=config.origin.base_url,
            timeout=config.origin.timeout,
            limits=limits,
            transport=transport,
        )
        upstream = UpstreamClient(origin_client, name=config.origin.name)
        app.state.relay_service = RelayService(
            config=config,
            logger=logger,
            upstream=upstream,
            header_builder=HeaderBuilder(),
            prefetch=PrefetchService(upstream, logger, max_fetches=config.prefetch.max_fetches),
        )
        try:
            yield
        finally:
            await upstream.aclose()

    app = FastAPI(
        title="Prefetch Relay",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=RELAY_METHODS)
    async def relay(request: Request):
        return await handle_relay(request, config, logger)

    return app
