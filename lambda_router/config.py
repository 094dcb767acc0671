# =============================================================================
# Environment Configuration
# =============================================================================
# All settings come from Lambda environment variables.
# =============================================================================

import os

DEFAULT_REGION = "us-east-1"
DEFAULT_MAX_EVENT_BYTES = 6 * 1024 * 1024  # Lambda synchronous payload limit
DEFAULT_MAX_EVENT_DEPTH = 64
DEFAULT_GREETING_MESSAGE = "Hello from AWS Lambda with Python!"
DEFAULT_SERVICE_NAME = "lambda-router"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _get_env_bool(key: str, default: bool = False) -> bool:
    return _get_env(key, str(default)).strip().lower() == "true"


def _get_env_int(key: str, default: int) -> int:
    try:
        return int(_get_env(key, str(default)))
    except ValueError:
        return default


def aws_region() -> str:
    return _get_env("AWS_REGION", DEFAULT_REGION)


def ses_region() -> str:
    return _get_env("SES_REGION", "")


def ses_sender_email() -> str:
    return _get_env("SES_SENDER_EMAIL", "noreply@yourdomain.com")


def ses_sender_name() -> str:
    return _get_env("SES_SENDER_NAME", "")


def log_level() -> str:
    level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    return level if level in LOG_LEVELS else "INFO"


def max_event_bytes() -> int:
    return _get_env_int("MAX_EVENT_BYTES", DEFAULT_MAX_EVENT_BYTES)


def max_event_depth() -> int:
    return _get_env_int("MAX_EVENT_DEPTH", DEFAULT_MAX_EVENT_DEPTH)


def tracing_enabled() -> bool:
    """Tracing is on when explicitly enabled or when a Datadog key is wired in."""
    return _get_env_bool("TRACING_ENABLED") or bool(_get_env("DD_API_KEY_SECRET_ARN"))


def service_name() -> str:
    return _get_env("POWERTOOLS_SERVICE_NAME", DEFAULT_SERVICE_NAME)


def greeting_message() -> str:
    return _get_env("GREETING_MESSAGE", DEFAULT_GREETING_MESSAGE)
