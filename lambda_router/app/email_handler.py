# =============================================================================
# Email Request Handler
# =============================================================================
# API Gateway handler that relays {to, subject, body} to SES. Not bound to
# a kind by default; the email Lambda passes it as the HTTP_REQUEST override.
# =============================================================================

import logging

from lambda_router.notifications.email_sender import send_email
from lambda_router.runtime.deps import Deps
from lambda_router.runtime.envelope import Envelope, HandlerOutcome, Reply, error_reply
from lambda_router.runtime.errors import RequestBodyError
from lambda_router.runtime.events import ApiGatewayRequest, EmailRequest

logger = logging.getLogger(__name__)


def handle_email_request(envelope: Envelope, deps: Deps) -> HandlerOutcome:
    """Send the email described by the request body."""
    request = ApiGatewayRequest.from_event(envelope.event)

    try:
        email_request = EmailRequest.from_body(request.body_text())
    except RequestBodyError as e:
        logger.warning(f"Error parsing email request body: {e}")
        return error_reply("Invalid request body", 400)

    missing = email_request.missing_fields()
    if missing:
        return error_reply(f"Missing required fields: {', '.join(missing)}", 400)

    response = send_email(email_request, deps)
    return Reply(status_code=response.status_code, body=response.to_dict())
