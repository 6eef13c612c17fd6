"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from core.config import Config
from core.protocols import RequestLogger
from ui.log_utils import write_incoming_log

ALLOWED_METHODS = ("GET",)


async def handle_relay(
    request: Request,
    _config: Config,
    logger: RequestLogger,
) -> Response:
    """Relay GET requests to the origin; reject every other method."""
    if request.method not in ALLOWED_METHODS:
        await request.body()  # consume body
        logger.log_relay(request.method, request.url.path, 405)
        return PlainTextResponse(
            "This method is not allowed\n",
            status_code=405,
            headers={"Allow": ", ".join(ALLOWED_METHODS)},
        )

    relay_service = request.app.state.relay_service
    context = relay_service.build_context(request)
    if context.debug:
        write_incoming_log(request.method, context.target.url, dict(request.headers))

    return await relay_service.relay(request, context)
