# =============================================================================
# SQS Batch Handler
# =============================================================================
# Worker mode: every record of the batch is decoded and processed on its own.
# A bad record is logged and skipped; it never stops the rest of the batch.
# =============================================================================

import json
import logging
from typing import Any, Dict

from lambda_router.runtime.deps import Deps
from lambda_router.runtime.dispatch import register
from lambda_router.runtime.envelope import Envelope, EventKind, HandlerOutcome, Void
from lambda_router.runtime.events import SqsEvent, SqsMessage

logger = logging.getLogger(__name__)


def _load_object(text: str, what: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(text)
    except RecursionError as e:
        raise ValueError(f"{what} is nested too deeply") from e
    if not isinstance(parsed, dict):
        raise ValueError(f"{what} is {type(parsed).__name__}, expected a JSON object")
    return parsed


def decode_message_body(message: SqsMessage) -> Dict[str, Any]:
    """
    Decode a record body, unwrapping SNS notifications delivered through SQS.

    Raises:
        ValueError: the body (or a wrapped SNS message) is not a JSON object
    """
    parsed = _load_object(message.body, "message body")

    if parsed.get("Type") == "Notification":
        inner = parsed.get("Message", "")
        if not isinstance(inner, str):
            raise ValueError(f"SNS Message is {type(inner).__name__}, expected a string")
        return _load_object(inner, "SNS Message")

    return parsed


def process_message(message: SqsMessage, payload: Dict[str, Any], deps: Deps) -> None:
    """Business logic for one decoded message."""
    logger.info(f"Processing message {message.message_id}: {payload}")


@register(EventKind.QUEUE_BATCH)
def handle_queue_batch(envelope: Envelope, deps: Deps) -> HandlerOutcome:
    """Process every record of an SQS batch; there is no reply channel."""
    batch = SqsEvent.from_event(envelope.event)
    logger.info(f"Received SQS event with {len(batch.records)} records")

    results = {"processed": 0, "skipped": 0, "errors": 0}

    for message in batch.records:
        logger.info(f"Processing SQS message: {message.message_id}")
        try:
            payload = decode_message_body(message)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Error parsing SQS message body ({message.message_id}): {e}")
            results["skipped"] += 1
            continue

        try:
            process_message(message, payload, deps)
            results["processed"] += 1
        except Exception as e:
            logger.exception(f"Error processing SQS message {message.message_id}: {e}")
            results["errors"] += 1

    logger.info(f"SQS batch done requestId={envelope.request_id} {results}")
    return Void()
