# =============================================================================
# Runtime Package - Shape-sniffing Dispatch Core
# =============================================================================
# decode -> classify -> dispatch -> normalize for every Lambda invocation:
# - API Gateway proxy requests (requestContext present)
# - SQS batches (Records[0].eventSource present)
# - Anything else, including payloads that are not JSON at all
# =============================================================================

from lambda_router.runtime.decoded import Node, NodeKind, decode
from lambda_router.runtime.envelope import Envelope, EventKind, Failure, HandlerOutcome, Reply, Void
from lambda_router.runtime.classify import CLASSIFICATION_RULES, classify, parse_event
from lambda_router.runtime.dispatch import dispatch, register, register_handler
from lambda_router.runtime.normalize import normalize
from lambda_router.runtime.deps import Deps, create_deps
from lambda_router.runtime.router import route
from lambda_router.runtime.tracing import traced

__all__ = [
    "Node",
    "NodeKind",
    "decode",
    "Envelope",
    "EventKind",
    "Failure",
    "HandlerOutcome",
    "Reply",
    "Void",
    "CLASSIFICATION_RULES",
    "classify",
    "parse_event",
    "dispatch",
    "register",
    "register_handler",
    "normalize",
    "Deps",
    "create_deps",
    "route",
    "traced",
]
