"""Client for a text-completion HTTP API.

Build a request with ``new_completion_request()``, adjust it through its
setters and hand it to ``Client.send_completion_request`` to get the raw
response body back.
"""
from completions.client import Client
from completions.errors import (
    CompletionError,
    RequestConstructionError,
    SerializationError,
    TransportError,
)
from completions.request import CompletionRequest, new_completion_request

__all__ = [
    "Client",
    "CompletionError",
    "CompletionRequest",
    "RequestConstructionError",
    "SerializationError",
    "TransportError",
    "new_completion_request",
]
