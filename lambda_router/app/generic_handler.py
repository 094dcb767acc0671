# =============================================================================
# Generic Handler
# =============================================================================
# Fallback for every payload that is neither an API Gateway request nor an
# SQS batch, including payloads that failed to decode.
# =============================================================================

import logging

from lambda_router.runtime.decoded import raw_text
from lambda_router.runtime.deps import Deps
from lambda_router.runtime.dispatch import register
from lambda_router.runtime.envelope import Envelope, EventKind, HandlerOutcome, Reply

logger = logging.getLogger(__name__)

MAX_LOGGED_CHARS = 2048


@register(EventKind.UNSTRUCTURED)
def handle_generic(envelope: Envelope, deps: Deps) -> HandlerOutcome:
    """Echo the raw event back to the caller."""
    text = raw_text(envelope.raw)
    logger.info(f"Received generic event: {text[:MAX_LOGGED_CHARS]}")

    return Reply(
        status_code=200,
        body={
            "message": deps.config["GREETING_MESSAGE"],
            "event": text,
        },
    )
