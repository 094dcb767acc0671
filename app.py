import logging
from typing import Any, Dict, Optional

from lambda_router import config
from lambda_router.app.email_handler import handle_email_request
from lambda_router.runtime.envelope import EventKind
from lambda_router.runtime.router import route
from lambda_router.runtime.tracing import traced

# ---------- Logger ----------
logger = logging.getLogger()
logger.setLevel(config.log_level())

if config.tracing_enabled():
    logger.info("Tracing enabled - wrapping Lambda handlers")
else:
    logger.info("Tracing disabled - using plain Lambda handlers")


@traced
def lambda_handler(event: Any, context: Any) -> Optional[Dict[str, Any]]:
    """
    Router entry point.

    API Gateway requests get a greeting reply, SQS batches are processed
    with no response, anything else is echoed back.
    """
    return route(event, context=context)


@traced
def email_lambda_handler(event: Any, context: Any) -> Optional[Dict[str, Any]]:
    """Email entry point: same routing, with HTTP requests relayed to SES."""
    return route(event, handlers={EventKind.HTTP_REQUEST: handle_email_request}, context=context)
