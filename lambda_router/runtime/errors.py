# =============================================================================
# Runtime Errors
# =============================================================================
# Raised inside the runtime package and always caught there; callers of
# route() never see them.
# =============================================================================


class RouterError(Exception):
    """Base class for router errors."""


class EventShapeError(RouterError):
    """A classified event does not fit its strongly-typed projection."""


class RequestBodyError(RouterError):
    """An HTTP request body could not be decoded into the expected record."""
