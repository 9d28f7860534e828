"""Completion request builder.

Holds every parameter of one completion call. Numeric parameters are clamped
to their documented ranges by the setters, so an out-of-range value is never
observable after a setter returns. ``get_request`` turns the builder into a
``requests.PreparedRequest`` ready for a session to send.

Example:
    req = new_completion_request()
    req.set_prompt("Hello")
    req.set_max_tokens(60)
    req.set_temperature(0.9)
"""
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from completions.errors import RequestConstructionError, SerializationError
from completions.schema import CompletionPayload


DEFAULT_URL = "https://api.openai.com/v1/completions"
DEFAULT_MODEL = "text-davinci-003"
DEFAULT_STOP = "User:"
DEFAULT_MAX_TOKENS = 16
DEFAULT_COMPLETIONS = 1
DEFAULT_TEMPERATURE = 1.0
DEFAULT_TOP_P = 1.0
DEFAULT_LOGPROBS = 0
DEFAULT_BEST_OF = 1
DEFAULT_FREQUENCY_PENALTY = 0.0
DEFAULT_PRESENCE_PENALTY = 0.0

TEMPERATURE_RANGE = (0.0, 1.0)
TOP_P_RANGE = (0.0, 1.0)
LOGPROBS_RANGE = (0, 5)
FREQUENCY_PENALTY_RANGE = (0.0, 1.0)
PRESENCE_PENALTY_RANGE = (-2.0, 2.0)
LOGIT_BIAS_RANGE = (-100, 100)
MIN_BEST_OF = 1


def _clamp(value, bounds):
    if isinstance(value, float) and math.isnan(value):
        raise ValueError("NaN is not a valid parameter value")
    low, high = bounds
    if value < low:
        return low
    if value > high:
        return high
    return value


@dataclass
class CompletionRequest:
    """Parameters of a single completion call.

    ``url`` and ``bearer`` address and authenticate the request; they are
    never part of the JSON body.
    """
    url: str = DEFAULT_URL
    bearer: str = ""
    model: str = DEFAULT_MODEL
    prompt: str = ""
    stop: Optional[List[str]] = field(default_factory=lambda: [DEFAULT_STOP])
    max_tokens: int = DEFAULT_MAX_TOKENS
    completions: int = DEFAULT_COMPLETIONS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    logprobs: int = DEFAULT_LOGPROBS
    echo: bool = False
    best_of: int = DEFAULT_BEST_OF
    frequency_penalty: float = DEFAULT_FREQUENCY_PENALTY
    presence_penalty: float = DEFAULT_PRESENCE_PENALTY
    logit_bias: Optional[Dict[str, int]] = None
    user: str = ""
    stream: bool = False

    def __post_init__(self):
        """Clamp values passed directly to the constructor."""
        self.set_temperature(self.temperature)
        self.set_top_p(self.top_p)
        self.set_logprobs(self.logprobs)
        self.set_best_of(self.best_of)
        self.set_frequency_penalty(self.frequency_penalty)
        self.set_presence_penalty(self.presence_penalty)
        if self.logit_bias:
            self.logit_bias = {tok: _clamp(bias, LOGIT_BIAS_RANGE) for tok, bias in self.logit_bias.items()}

    def set_bearer(self, token: str):
        self.bearer = token

    def set_model(self, model: str):
        self.model = model

    def set_prompt(self, prompt: str):
        self.prompt = prompt

    def add_stop(self, stop: str):
        """Append a stop sequence. Order is kept on the wire."""
        if self.stop is None:
            self.stop = []
        self.stop.append(stop)

    def set_max_tokens(self, max_tokens: int):
        """Set the generation length cap (one token is about 4 characters)."""
        self.max_tokens = max_tokens

    def set_completions(self, completions: int):
        self.completions = completions

    def set_temperature(self, temperature: float):
        """Set sampling temperature, clamped to [0, 1]. 1 is the most random.

        Raises:
            ValueError: if ``temperature`` is NaN.
        """
        self.temperature = _clamp(temperature, TEMPERATURE_RANGE)

    def set_top_p(self, top_p: float):
        self.top_p = _clamp(top_p, TOP_P_RANGE)

    def set_logprobs(self, logprobs: int):
        """Set how many most-likely tokens get log probabilities, clamped to [0, 5]."""
        self.logprobs = _clamp(logprobs, LOGPROBS_RANGE)

    def set_echo(self, echo: bool):
        self.echo = echo

    def set_best_of(self, best_of: int):
        self.best_of = max(best_of, MIN_BEST_OF)

    def set_frequency_penalty(self, penalty: float):
        self.frequency_penalty = _clamp(penalty, FREQUENCY_PENALTY_RANGE)

    def set_presence_penalty(self, penalty: float):
        self.presence_penalty = _clamp(penalty, PRESENCE_PENALTY_RANGE)

    def add_bias(self, token: str, bias: int):
        """Raise the likelihood of ``token``.

        An unseen token takes ``bias`` (clamped to [-100, 100]); a known token
        has ``bias`` added and the sum saturates at the range bounds.
        """
        self._adjust_bias(token, bias)

    def remove_bias(self, token: str, bias: int):
        """Lower the likelihood of ``token``.

        The entry is kept: a known token has ``bias`` subtracted (saturating at
        [-100, 100]). An unseen token takes ``bias`` as given, clamped.
        """
        self._adjust_bias(token, -bias, initial=bias)

    def _adjust_bias(self, token: str, delta: int, initial: Optional[int] = None):
        if self.logit_bias is None:
            self.logit_bias = {}
        if token not in self.logit_bias:
            self.logit_bias[token] = _clamp(delta if initial is None else initial, LOGIT_BIAS_RANGE)
        else:
            self.logit_bias[token] = _clamp(self.logit_bias[token] + delta, LOGIT_BIAS_RANGE)

    def set_user(self, user: str):
        """Set the opaque end-user id used by the service for tracking and moderation."""
        self.user = user

    def set_stream(self, stream: bool):
        self.stream = stream

    def make_default(self):
        """Reset every parameter to its default. The bearer token is kept."""
        self.url = DEFAULT_URL
        self.model = DEFAULT_MODEL
        self.prompt = ""
        self.stop = [DEFAULT_STOP]
        self.max_tokens = DEFAULT_MAX_TOKENS
        self.completions = DEFAULT_COMPLETIONS
        self.temperature = DEFAULT_TEMPERATURE
        self.top_p = DEFAULT_TOP_P
        self.logprobs = DEFAULT_LOGPROBS
        self.echo = False
        self.best_of = DEFAULT_BEST_OF
        self.frequency_penalty = DEFAULT_FREQUENCY_PENALTY
        self.presence_penalty = DEFAULT_PRESENCE_PENALTY
        self.logit_bias = None
        self.stream = False
        self.user = ""

    def update(self, **params: Any) -> "CompletionRequest":
        """Apply wire-named parameters through the setters.

        ``stop`` entries (a list or a single string) are appended in order and
        ``logit_bias`` entries go through ``add_bias``, so overrides obey the
        same ranges as the setters.

        Raises:
            ValueError: for an unknown parameter name or a NaN value.
        """
        for name, value in params.items():
            if name == "stop":
                if isinstance(value, str):
                    value = [value]
                for item in value or []:
                    self.add_stop(item)
            elif name == "logit_bias":
                for token, bias in (value or {}).items():
                    self.add_bias(token, bias)
            elif name in _SETTERS:
                getattr(self, _SETTERS[name])(value)
            else:
                raise ValueError(f"Unknown completion parameter: {name}")
        return self

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body as a dict, without ``url`` and ``bearer``."""
        try:
            payload = CompletionPayload(
                model=self.model,
                prompt=self.prompt,
                stop=list(self.stop) if self.stop else None,
                max_tokens=self.max_tokens,
                completions=self.completions,
                temperature=self.temperature,
                top_p=self.top_p,
                logprobs=self.logprobs,
                echo=self.echo,
                best_of=self.best_of,
                frequency_penalty=self.frequency_penalty,
                presence_penalty=self.presence_penalty,
                logit_bias=dict(self.logit_bias) if self.logit_bias else None,
                user=self.user,
                stream=self.stream,
            )
        except ValidationError as e:
            raise SerializationError(f"Invalid completion payload: {e}") from e
        return payload.to_wire()

    def to_json(self) -> bytes:
        """Encode the payload as JSON bytes.

        Raises:
            SerializationError: when a value has no JSON form (e.g. NaN assigned directly).
        """
        payload = self.to_payload()
        try:
            return json.dumps(payload, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to encode completion payload: {e}") from e

    def get_request(self) -> requests.PreparedRequest:
        """Build the POST request for this completion call.

        Raises:
            SerializationError: if the body cannot be encoded.
            RequestConstructionError: if the URL is malformed.
        """
        body = self.to_json()
        headers = {
            "Content-Type": "application/json",
            "Authorization": "Bearer " + self.bearer,
        }
        try:
            return requests.Request("POST", self.url, headers=headers, data=body).prepare()
        except (requests.exceptions.RequestException, ValueError, TypeError) as e:
            raise RequestConstructionError(f"Failed to build request for {self.url!r}: {e}") from e


_SETTERS = {
    "model": "set_model",
    "prompt": "set_prompt",
    "max_tokens": "set_max_tokens",
    "n": "set_completions",
    "completions": "set_completions",
    "temperature": "set_temperature",
    "top_p": "set_top_p",
    "logprobs": "set_logprobs",
    "echo": "set_echo",
    "best_of": "set_best_of",
    "frequency_penalty": "set_frequency_penalty",
    "presence_penalty": "set_presence_penalty",
    "user": "set_user",
    "stream": "set_stream",
}


def new_completion_request() -> CompletionRequest:
    """Return a request with every parameter at its default."""
    return CompletionRequest()

