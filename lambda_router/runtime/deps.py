# =============================================================================
# Dependency Injection Container
# =============================================================================
# Provides lazy-loaded AWS clients and configuration to handlers.
# Handlers receive Deps instead of creating their own clients.
# =============================================================================

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Optional

import boto3

from lambda_router import config as env

logger = logging.getLogger(__name__)


@dataclass
class Deps:
    """
    Dependency injection container for handlers.

    Clients are created on first access, so building a Deps never needs
    AWS credentials.

    Usage:
        def handle_something(envelope: Envelope, deps: Deps) -> HandlerOutcome:
            deps.ses.send_email(...)
    """
    region: str = field(default_factory=env.aws_region)

    @cached_property
    def ses(self):
        """SES client."""
        return boto3.client("ses", region_name=env.ses_region() or self.region)

    @cached_property
    def config(self) -> Dict[str, Any]:
        """Environment configuration."""
        return {
            "AWS_REGION": self.region,
            "SES_REGION": env.ses_region() or self.region,
            "SES_SENDER_EMAIL": env.ses_sender_email(),
            "SES_SENDER_NAME": env.ses_sender_name(),
            "LOG_LEVEL": env.log_level(),
            "MAX_EVENT_BYTES": env.max_event_bytes(),
            "MAX_EVENT_DEPTH": env.max_event_depth(),
            "TRACING_ENABLED": env.tracing_enabled(),
            "GREETING_MESSAGE": env.greeting_message(),
        }

    def formatted_sender(self) -> str:
        """SES Source address, with display name when one is configured."""
        email = self.config["SES_SENDER_EMAIL"]
        name = self.config["SES_SENDER_NAME"]
        return f'"{name}" <{email}>' if name else email


def create_deps(region: str = None) -> Deps:
    """Create a new Deps instance."""
    return Deps(region=region or env.aws_region())


# Reused across warm invocations so clients are built once per container
_global_deps: Optional[Deps] = None


def get_deps() -> Deps:
    """Get or create global Deps instance."""
    global _global_deps
    if _global_deps is None:
        _global_deps = create_deps()
    return _global_deps
