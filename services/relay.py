"""Relay orchestration: primary fetch, client delivery, then prefetch."""

import asyncio
import socket

import httpx
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.types import Receive, Scope, Send

from core.config import VERSION, Config
from core.exceptions import UpstreamError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import RelayContext, RequestTarget
from services.prefetch import PrefetchService
from services.upstream import UpstreamClient


class RelayStreamingResponse(StreamingResponse):
    """StreamingResponse whose background task also runs if the client goes away.

    Starlette skips ``background`` when sending the body fails; here it runs
    either way and the send error is re-raised afterwards.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        background, self.background = self.background, None
        try:
            await super().__call__(scope, receive, send)
        finally:
            if background is not None:
                await background()


class RelayService:
    """Relay one GET to the origin and warm the hinted objects afterwards.

    The client response is streamed first. Hint collection and follow-up
    fetches run as a background task once the client response is finished
    (or the client has gone away), so nothing they do can reach the client.
    """

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        upstream: UpstreamClient,
        header_builder: HeaderBuilder,
        prefetch: PrefetchService | None = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self._upstream = upstream
        self._headers = header_builder
        self._prefetch = prefetch or PrefetchService(
            upstream, logger, max_fetches=config.prefetch.max_fetches
        )

    def build_context(self, request: Request) -> RelayContext:
        """Capture target, outbound headers and the diagnostics flag."""
        target = RequestTarget.from_request(request)
        debug = self._config.proxy.debug or bool(
            request.headers.get(self._config.prefetch.debug_header)
        )
        host = target.host if self._config.origin.preserve_host else None
        origin_headers = self._headers.build_origin_headers(request.headers.raw, host=host)
        return RelayContext(
            method=request.method,
            target=target,
            origin_headers=origin_headers,
            debug=debug,
        )

    async def relay(self, request: Request, context: RelayContext | None = None) -> Response:
        """Fetch from the origin and stream the answer to the client."""
        context = context or self.build_context(request)
        if context.debug:
            client = request.client.host if request.client else "unknown"
            self._logger.log_debug(
                "Service version",
                version=VERSION,
                hostname=socket.gethostname(),
                client=client,
            )

        try:
            upstream_response = await self._upstream.open(
                context.target.origin_path, context.origin_headers
            )
        except UpstreamError as e:
            self._logger.log_error(self._upstream.name, 502, str(e))
            return PlainTextResponse(f"{e}\n", status_code=502)

        response = RelayStreamingResponse(
            upstream_response.aiter_raw(),
            status_code=upstream_response.status_code,
            background=BackgroundTask(self._after_response, context, upstream_response),
        )
        response.raw_headers = self._headers.build_client_headers(
            upstream_response.headers, debug=context.debug
        )
        return response

    async def _after_response(
        self,
        context: RelayContext,
        upstream_response: httpx.Response,
    ) -> None:
        """Runs once the client response is committed or abandoned."""
        await upstream_response.aclose()

        urls = self._prefetch.collect(
            context.target, upstream_response.headers, debug=context.debug
        )
        self._logger.log_relay(
            context.method,
            context.target.path,
            upstream_response.status_code,
            hints=len(urls),
        )

        budget = self._prefetch.new_budget()
        try:
            await self._prefetch.run(urls, context.origin_headers, budget, debug=context.debug)
        except asyncio.CancelledError:
            self._logger.log_debug(
                "Prefetch abandoned",
                fetched=budget.fetched,
                pending=len(urls) - budget.fetched,
            )
            raise
