# =============================================================================
# API Gateway Handler
# =============================================================================
# Greeting endpoint: echoes method and path back, greets by name and echoes
# the message when the JSON body carries them.
# =============================================================================

import logging

from lambda_router.runtime.deps import Deps
from lambda_router.runtime.dispatch import register
from lambda_router.runtime.envelope import CORS_HEADERS, Envelope, EventKind, HandlerOutcome, Reply, error_reply
from lambda_router.runtime.errors import RequestBodyError
from lambda_router.runtime.events import ApiGatewayRequest, GreetingRequest

logger = logging.getLogger(__name__)


@register(EventKind.HTTP_REQUEST)
def handle_http_request(envelope: Envelope, deps: Deps) -> HandlerOutcome:
    """
    Handle an API Gateway proxy request.

    The body is optional; when present it must be a JSON object with
    optional string fields name and message. Anything else is a 400.
    """
    request = ApiGatewayRequest.from_event(envelope.event)
    logger.info(f"Received API Gateway request: {request.http_method} {request.path}")

    greeting = GreetingRequest()
    try:
        body = request.body_text()
        if body:
            greeting = GreetingRequest.from_body(body)
    except RequestBodyError as e:
        logger.warning(f"Error parsing request body: {e}")
        return error_reply("Invalid request body", 400)

    response = {
        "message": deps.config["GREETING_MESSAGE"],
        "method": request.http_method,
        "path": request.path,
    }
    if greeting.name:
        response["greeting"] = f"Hello, {greeting.name}!"
    if greeting.message:
        response["echo"] = greeting.message

    return Reply(status_code=200, body=response, headers=dict(CORS_HEADERS))
