"""Schema validation helpers for completion parameters.

Provides a JSON Schema for the completion request body and a helper to check
parameter overrides (e.g. the ``request`` section of the configuration)
before they are applied to a ``CompletionRequest``.
"""
from jsonschema import validate, ValidationError


COMPLETION_PARAMS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "model": {"type": "string"},
        "prompt": {"type": "string"},
        "stop": {"type": ["array", "null"], "items": {"type": "string"}},
        "max_tokens": {"type": "integer"},
        "n": {"type": "integer"},
        "temperature": {"type": "number"},
        "top_p": {"type": "number"},
        "logprobs": {"type": "integer"},
        "echo": {"type": "boolean"},
        "best_of": {"type": "integer"},
        "frequency_penalty": {"type": "number"},
        "presence_penalty": {"type": "number"},
        "logit_bias": {"type": ["object", "null"], "additionalProperties": {"type": "integer"}},
        "user": {"type": "string"},
        "stream": {"type": "boolean"}
    }
}


def validate_completion_params(payload: dict) -> bool:
    """Validate completion parameters against the request body schema.

    Ranges are not checked here; the request setters clamp them.

    Raises:
        jsonschema.ValidationError: on unknown names or wrongly typed values.

    Returns:
        True when valid.
    """
    try:
        validate(instance=payload, schema=COMPLETION_PARAMS_SCHEMA)
    except ValidationError as exc:
        raise ValidationError(f"Invalid completion parameters: {exc.message}") from exc

    return True
