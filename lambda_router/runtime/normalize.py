# =============================================================================
# Result Normalizer
# =============================================================================
# Converts a HandlerOutcome into what the Lambda runtime returns to the
# caller: an API Gateway style dict for Reply/Failure, None for Void.
# =============================================================================

import json
import logging
from typing import Any, Dict, Optional

from lambda_router.runtime.envelope import JSON_HEADERS, Failure, HandlerOutcome, Reply, Void

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = '{"error": "Internal server error"}'


def _response(status_code: int, headers: Dict[str, str], body: str) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {str(k): str(v) for k, v in headers.items()},
        "body": body,
    }


def internal_error_response() -> Dict[str, Any]:
    return _response(500, JSON_HEADERS, INTERNAL_ERROR_BODY)


def normalize(outcome: HandlerOutcome) -> Optional[Dict[str, Any]]:
    """
    Normalize a handler outcome.

    Returns:
        {"statusCode", "headers", "body"} for Reply and Failure (body is
        always valid JSON), None for Void
    """
    if isinstance(outcome, Void):
        return None

    if isinstance(outcome, Reply):
        try:
            body = json.dumps(outcome.body, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.exception(f"Error marshaling response: {e}")
            return internal_error_response()
        headers = outcome.headers if outcome.headers is not None else JSON_HEADERS
        return _response(outcome.status_code, headers, body)

    if isinstance(outcome, Failure):
        if outcome.error is not None:
            logger.error(f"Handler failure: {outcome.detail or outcome.error!r}", exc_info=outcome.error)
        else:
            logger.error(f"Handler failure: {outcome.detail}")
        return internal_error_response()

    logger.error(f"Unknown handler outcome type: {type(outcome).__name__}")
    return internal_error_response()
