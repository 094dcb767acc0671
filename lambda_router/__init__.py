# =============================================================================
# lambda_router - Shape-sniffing dispatcher for AWS Lambda events
# =============================================================================
# Classifies an untyped Lambda event by structure (API Gateway request,
# SQS batch, or anything else), runs the matching handler and returns a
# runtime-compatible response.
# =============================================================================

__version__ = "0.1.0"
