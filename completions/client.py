"""HTTP client for the completion endpoint.

Sends a built ``CompletionRequest`` over a ``requests.Session`` and returns
the raw response body. There is no retry and no status interpretation: a
non-2xx response is logged and its body returned like any other.
"""
import threading
from typing import Optional

import requests
from loguru import logger

from completions.errors import TransportError
from completions.request import CompletionRequest


class Client:
    """Owns a bearer token and a transport session.

    Attributes:
        session (requests.Session): transport used to execute requests
        timeout: passed to ``Session.send`` as is; None leaves it to the transport

    Example:
        client = Client(os.environ["OPENAI_API_KEY"])
        body = client.send_completion_request(new_completion_request())
    """

    def __init__(self, token: str, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self._bearer_token = token
        self._lock = threading.Lock()

    def set_bearer_token(self, token: str):
        with self._lock:
            self._bearer_token = token

    def send_completion_request(self, req: CompletionRequest) -> bytes:
        """Send ``req`` to its endpoint and return the response body.

        The client's token is stamped into ``req`` before it is converted.

        Raises:
            SerializationError: the payload could not be encoded.
            RequestConstructionError: the HTTP request could not be built.
            TransportError: sending failed or the body could not be read.
        """
        with self._lock:
            req.set_bearer(self._bearer_token)

        try:
            prepared = req.get_request()
        except Exception as e:
            logger.error("Error transforming completion request", error=str(e))
            raise

        logger.debug("Sending completion request", url=prepared.url, model=req.model)
        try:
            resp = self.session.send(prepared, stream=True, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Error sending completion request", url=prepared.url, error=str(e))
            raise TransportError(f"Failed to send completion request: {e}") from e

        try:
            body = resp.content
        except requests.exceptions.RequestException as e:
            logger.error("Error reading completion response body", url=prepared.url, error=str(e))
            raise TransportError(f"Failed to read completion response: {e}") from e
        finally:
            resp.close()

        if not resp.ok:
            logger.warning("Completion endpoint returned an error status",
                           status=resp.status_code, bytes=len(body))
        else:
            logger.debug("Completion response received", status=resp.status_code, bytes=len(body))
        return body

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
