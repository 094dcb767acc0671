# =============================================================================
# Email Sender - Plain-text emails via SES
# =============================================================================
# The only outbound I/O in the project. Provider errors are logged here and
# reported as a generic failure; their text never reaches the caller.
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from lambda_router.runtime.deps import Deps, get_deps
from lambda_router.runtime.events import EmailRequest

logger = logging.getLogger(__name__)

SEND_FAILED_MESSAGE = "Failed to send email"


@dataclass
class EmailResponse:
    """Result of a send attempt."""
    status_code: int
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"statusCode": self.status_code}
        if self.message_id:
            data["messageId"] = self.message_id
        if self.error:
            data["error"] = self.error
        return data


def send_email(request: EmailRequest, deps: Deps = None) -> EmailResponse:
    """Send a plain-text email through SES."""
    deps = deps or get_deps()

    try:
        output = deps.ses.send_email(
            Source=deps.formatted_sender(),
            Destination={"ToAddresses": [request.to]},
            Message={
                "Subject": {"Data": request.subject, "Charset": "UTF-8"},
                "Body": {
                    "Text": {"Data": request.body, "Charset": "UTF-8"},
                },
            },
        )
    except (ClientError, BotoCoreError) as e:
        logger.exception(f"Error sending email: {e}")
        return EmailResponse(status_code=500, error=SEND_FAILED_MESSAGE)

    message_id = output.get("MessageId")
    logger.info(f"Email sent messageId={message_id}")
    return EmailResponse(status_code=200, message_id=message_id)
