# =============================================================================
# Tracing Wrapper
# =============================================================================
# Optional decorator for Lambda entry points. When tracing is enabled the
# handler runs inside a Powertools X-Ray subsegment and an invocation log
# middleware; inputs, outputs and exceptions pass through untouched either way.
# =============================================================================

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.middleware_factory import lambda_handler_decorator

from lambda_router import config

logger = logging.getLogger(__name__)

LambdaHandler = Callable[[Any, Any], Any]

tracer = Tracer(service=config.service_name(), disabled=not config.tracing_enabled())


def trace_summary(response: Any) -> Dict[str, Any]:
    """Small loggable description of an entry point's return value."""
    if response is None:
        return {"response": "none"}
    if isinstance(response, dict):
        return {"response": "reply", "statusCode": response.get("statusCode")}
    return {"response": type(response).__name__}


def _log_end(function_name: str, request_id: str, started: float, outcome: str, summary: Dict[str, Any] = None):
    elapsed_ms = (time.perf_counter() - started) * 1000
    summary = summary or {}
    logger.info(
        f"TRACE end function={function_name} requestId={request_id} "
        f"outcome={outcome} durationMs={elapsed_ms:.2f} summary={summary}"
    )


@lambda_handler_decorator
def log_invocation(handler: LambdaHandler, event: Any, context: Any) -> Any:
    """Middleware: log start and end of an invocation with its duration."""
    request_id = getattr(context, "aws_request_id", "") or "-"
    function_name = getattr(context, "function_name", "") or handler.__name__
    logger.info(f"TRACE start function={function_name} requestId={request_id}")

    started = time.perf_counter()
    try:
        response = handler(event, context)
    except Exception:
        _log_end(function_name, request_id, started, "error")
        raise
    _log_end(function_name, request_id, started, "ok", trace_summary(response))
    return response


def traced(func: LambdaHandler) -> LambdaHandler:
    """
    Wrap a (event, context) handler with invocation tracing.

    The switch is read on every call, so the plain handler runs whenever
    tracing is off.
    """
    captured = tracer.capture_lambda_handler(log_invocation(func), capture_response=False)

    @wraps(func)
    def wrapper(event: Any, context: Any) -> Any:
        if not config.tracing_enabled():
            return func(event, context)
        return captured(event, context)

    return wrapper
