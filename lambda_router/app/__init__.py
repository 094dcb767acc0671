# =============================================================================
# Leaf Handlers
# =============================================================================
# Importing this package registers the default handler for every EventKind.
# =============================================================================

from lambda_router.app.http_handler import handle_http_request
from lambda_router.app.queue_handler import handle_queue_batch
from lambda_router.app.generic_handler import handle_generic
from lambda_router.app.email_handler import handle_email_request

__all__ = [
    "handle_http_request",
    "handle_queue_batch",
    "handle_generic",
    "handle_email_request",
]
