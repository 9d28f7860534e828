"""Error types raised while building or sending a completion request.

Every error is surfaced to the immediate caller; nothing here is retried or
recovered locally. The underlying exception is kept as ``__cause__``.
"""


class CompletionError(Exception):
    """Base class for completion client errors."""
    pass


class SerializationError(CompletionError):
    """The request payload could not be encoded as JSON."""
    pass


class RequestConstructionError(CompletionError):
    """The HTTP request could not be built (e.g. a malformed URL)."""
    pass


class TransportError(CompletionError):
    """The request could not be sent or its response body could not be read."""
    pass
