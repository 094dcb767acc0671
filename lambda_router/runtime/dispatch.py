# =============================================================================
# Handler Registry & Dispatcher
# =============================================================================
# One handler per EventKind. Every handler has the same signature:
#     handler(envelope: Envelope, deps: Deps) -> HandlerOutcome
# dispatch() always returns an outcome; handler errors never escape.
# =============================================================================

import logging
from typing import Callable, Dict, Mapping

from lambda_router.runtime.deps import Deps, get_deps
from lambda_router.runtime.envelope import Envelope, EventKind, Failure, HandlerOutcome, Reply, Void
from lambda_router.runtime.errors import EventShapeError

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[Envelope, Deps], HandlerOutcome]
HandlerMap = Mapping[EventKind, HandlerFunc]

# =============================================================================
# HANDLER REGISTRY
# =============================================================================
_HANDLERS: Dict[EventKind, HandlerFunc] = {}


def register_handler(kind: EventKind, handler: HandlerFunc):
    """Register handler as the implementation for an event kind."""
    _HANDLERS[kind] = handler


def register(kind: EventKind):
    """
    Decorator to register a handler.

    Usage:
        @register(EventKind.HTTP_REQUEST)
        def handle_http_request(envelope: Envelope, deps: Deps) -> HandlerOutcome:
            return Reply(200, {"ok": True})
    """
    def decorator(func: HandlerFunc) -> HandlerFunc:
        register_handler(kind, func)
        return func
    return decorator


_handlers_loaded = False


def _ensure_handlers_loaded():
    """Import the leaf handler modules so their @register decorators run."""
    global _handlers_loaded
    if _handlers_loaded:
        return

    import lambda_router.app  # noqa: F401
    _handlers_loaded = True

    logger.debug(f"Loaded {len(_HANDLERS)} handlers into registry")


# =============================================================================
# DISPATCH
# =============================================================================

def _invoke(handler: HandlerFunc, envelope: Envelope, deps: Deps) -> HandlerOutcome:
    outcome = handler(envelope, deps)
    if not isinstance(outcome, (Reply, Void, Failure)):
        return Failure(detail=f"Handler {getattr(handler, '__name__', handler)} returned {type(outcome).__name__}")
    return outcome


def _fallback(envelope: Envelope, deps: Deps, handlers: HandlerMap) -> HandlerOutcome:
    handler = handlers.get(EventKind.UNSTRUCTURED)
    if handler is None:
        return Failure(detail="No fallback handler registered")
    try:
        return _invoke(handler, envelope, deps)
    except Exception as e:
        logger.exception(f"Fallback handler error: {e}")
        return Failure(error=e, detail=str(e))


def dispatch(envelope: Envelope, deps: Deps = None, handlers: HandlerMap = None) -> HandlerOutcome:
    """
    Dispatch an envelope to the handler for its kind.

    Args:
        envelope: Classified event envelope
        deps: Dependency injection container (optional, uses global if not provided)
        handlers: Per-call overrides of the registered handlers

    Returns:
        The handler's outcome. A typed-projection failure (EventShapeError)
        is retried with the UNSTRUCTURED handler; any other exception becomes
        a Failure.
    """
    if deps is None:
        deps = get_deps()

    _ensure_handlers_loaded()
    registry: Dict[EventKind, HandlerFunc] = {**_HANDLERS, **(handlers or {})}

    handler = registry.get(envelope.kind)
    if handler is None:
        logger.warning(f"No handler for kind={envelope.kind.value}, using fallback")
        return _fallback(envelope, deps, registry)

    logger.info(f"Dispatching kind={envelope.kind.value} to {getattr(handler, '__name__', handler)} requestId={envelope.request_id}")

    try:
        return _invoke(handler, envelope, deps)
    except EventShapeError as e:
        if envelope.kind == EventKind.UNSTRUCTURED:
            logger.exception(f"Fallback handler rejected event: {e}")
            return Failure(error=e, detail=str(e))
        logger.warning(f"Error parsing {envelope.kind.value} event: {e}")
        return _fallback(envelope, deps, registry)
    except Exception as e:
        logger.exception(f"Handler error for kind '{envelope.kind.value}': {e}")
        return Failure(error=e, detail=str(e))
