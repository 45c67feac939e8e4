import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from roadmap_chat.agents.orchestrator import GenerationOrchestrator
from roadmap_chat.api.schemas.chat import ErrorResponse
from roadmap_chat.core.errors import ChatRequestError, ModelNotConfiguredError
from roadmap_chat.core.settings import Settings
from roadmap_chat.services.request_envelope import decode_request_envelope
from roadmap_chat.services.stream_emitter import ServerEventEmitter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])

UNEXPECTED_FAILURE_MESSAGE = "Something went wrong. Please try again later."


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


@router.post(
    "",
    summary="Stream an assistant answer for a conversation",
    description=(
        "Accepts a base64 or plain JSON envelope of chat messages and streams the answer as "
        "base64-encoded server-sent events terminated by a done or error event."
    ),
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def chat(request: Request) -> Response:
    container = request.app.state.container

    # Validate the envelope and configuration before opening the stream so failures
    # are reported as plain JSON errors rather than truncated event streams.
    try:
        payload = decode_request_envelope(await request.body(), request.headers.get("content-type"))
        settings: Settings = container.resolve(Settings)
        if not settings.chat_configured:
            logger.error("chat backend credentials are not configured")
            raise ModelNotConfiguredError()

        orchestrator: GenerationOrchestrator = container.resolve(GenerationOrchestrator)
        emitter: ServerEventEmitter = container.resolve(ServerEventEmitter)
        events = orchestrator.stream(payload.messages)
    except ChatRequestError as exc:
        logger.info("rejected chat request", extra={"status_code": exc.status_code})
        return _error_response(exc.status_code, exc.message)
    except Exception:
        logger.exception("unexpected failure before streaming")
        return _error_response(500, UNEXPECTED_FAILURE_MESSAGE)

    logger.info("streaming chat response", extra={"messages_count": len(payload.messages)})
    return emitter.stream_response(events)
