# =============================================================================
# Shape Classifier - Detect Lambda Event Kind
# =============================================================================
# Assigns an EventKind from the decoded tree's shape alone. Rules are tried
# in order and the first match wins; UNSTRUCTURED is the catch-all.
# =============================================================================

import logging
from typing import Any, Callable, List, Optional, Tuple

from lambda_router.runtime.decoded import Node, RawEvent, decode
from lambda_router.runtime.envelope import Envelope, EventKind

logger = logging.getLogger(__name__)

ShapePredicate = Callable[[Node], bool]

REQUEST_CONTEXT_KEY = "requestContext"
RECORDS_KEY = "Records"
EVENT_SOURCE_KEY = "eventSource"


def has_request_context(event: Node) -> bool:
    """API Gateway (REST v1 and HTTP API v2) events carry requestContext."""
    return event.has(REQUEST_CONTEXT_KEY)


def has_event_source_records(event: Node) -> bool:
    """Records is a non-empty list whose first entry is a mapping with eventSource."""
    records = event.get(RECORDS_KEY)
    if records is None:
        return False
    first = records.first()
    return first is not None and first.has(EVENT_SOURCE_KEY)


# Order is the tie-break: an event matching several rules gets the first kind.
CLASSIFICATION_RULES: List[Tuple[ShapePredicate, EventKind]] = [
    (has_request_context, EventKind.HTTP_REQUEST),
    (has_event_source_records, EventKind.QUEUE_BATCH),
]


def classify(event: Node, ok: bool = True) -> EventKind:
    """
    Classify a decoded event.

    A failed decode is always UNSTRUCTURED, whatever the tree looks like.
    """
    if not ok:
        return EventKind.UNSTRUCTURED
    for predicate, kind in CLASSIFICATION_RULES:
        if predicate(event):
            return kind
    return EventKind.UNSTRUCTURED


def parse_event(raw: RawEvent, request_id: Optional[str] = None, context: Any = None) -> Envelope:
    """
    Decode and classify a raw payload into an Envelope.

    Args:
        raw: Payload as delivered by the runtime
        request_id: Explicit request id (takes precedence over context)
        context: Lambda context, used for aws_request_id when present
    """
    event, ok = decode(raw)
    kind = classify(event, ok)

    request_id = request_id or getattr(context, "aws_request_id", None)
    envelope = Envelope(kind=kind, event=event, raw=raw, ok=ok)
    if request_id:
        envelope.request_id = request_id

    logger.info(f"Detected event: {envelope.to_dict()}")
    return envelope
