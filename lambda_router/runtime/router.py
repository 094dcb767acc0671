# =============================================================================
# Router - Composition Root
# =============================================================================
# decode -> classify -> dispatch -> normalize, once per invocation.
# =============================================================================

import logging
from typing import Any, Dict, Optional

from lambda_router.runtime.classify import parse_event
from lambda_router.runtime.decoded import RawEvent
from lambda_router.runtime.deps import Deps
from lambda_router.runtime.dispatch import HandlerMap, dispatch
from lambda_router.runtime.normalize import normalize

logger = logging.getLogger(__name__)


def route(
    raw: RawEvent,
    deps: Deps = None,
    handlers: HandlerMap = None,
    context: Any = None,
) -> Optional[Dict[str, Any]]:
    """
    Route one invocation payload end to end.

    Args:
        raw: Payload as delivered by the runtime
        deps: Dependency injection container (optional)
        handlers: Per-call handler overrides keyed by EventKind
        context: Lambda context (optional)

    Returns:
        Response dict for reply-capable events, None for queue batches
    """
    envelope = parse_event(raw, context=context)
    outcome = dispatch(envelope, deps, handlers)
    response = normalize(outcome)

    if response is None:
        logger.info(f"Completed kind={envelope.kind.value} with no response")
    else:
        logger.info(f"Completed kind={envelope.kind.value} statusCode={response['statusCode']}")
    return response
