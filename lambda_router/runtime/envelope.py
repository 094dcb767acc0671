# =============================================================================
# Envelope - Per-invocation Event Container and Handler Outcomes
# =============================================================================
# Every invocation is wrapped in one Envelope (kind + decoded tree + raw
# payload). Handlers answer with exactly one HandlerOutcome.
# =============================================================================

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from lambda_router.runtime.decoded import Node, RawEvent

JSON_HEADERS = {"Content-Type": "application/json"}
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


class EventKind(str, Enum):
    """Classification buckets for inbound payloads."""
    HTTP_REQUEST = "http_request"      # API Gateway proxy request
    QUEUE_BATCH = "queue_batch"        # SQS Records batch
    UNSTRUCTURED = "unstructured"      # Anything else, including undecodable input


@dataclass
class Envelope:
    """
    Container for a single invocation.

    Attributes:
        kind: Classification assigned from the event's shape
        event: Decoded tree (empty mapping when decoding failed)
        raw: The payload exactly as received
        ok: Whether decoding succeeded
        request_id: Lambda request id, or a generated one
    """
    kind: EventKind
    event: Node
    raw: RawEvent
    ok: bool = True
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Loggable summary (the raw payload is left out)."""
        return {
            "kind": self.kind.value,
            "requestId": self.request_id,
            "ok": self.ok,
            "topLevelKeys": self.event.keys(),
        }


# =============================================================================
# HANDLER OUTCOMES
# =============================================================================

@dataclass
class Reply:
    """Synchronous response for a caller awaiting one."""
    status_code: int
    body: Any
    headers: Dict[str, str] = field(default_factory=lambda: dict(JSON_HEADERS))


@dataclass
class Void:
    """Acknowledgment with no response channel (queue batches)."""


@dataclass
class Failure:
    """Handler failed; detail is logged and never returned to the caller."""
    error: Optional[BaseException] = None
    detail: str = ""


HandlerOutcome = Union[Reply, Void, Failure]


def error_reply(message: str, status_code: int = 400, headers: Dict[str, str] = None) -> Reply:
    """Create a standardized error reply."""
    return Reply(
        status_code=status_code,
        body={"error": message},
        headers=dict(headers if headers is not None else JSON_HEADERS),
    )
