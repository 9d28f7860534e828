"""Resolve the completion endpoint URL from environment, config, or default.
"""
import os
from typing import Optional, Any

from completions.request import DEFAULT_URL


ENV_KEY = "COMPLETIONS_URL"


def resolve_endpoint_url(config: Optional[Any] = None) -> str:
    """Return the resolved completion endpoint URL.

    Precedence: ENV > config.client.url > DEFAULT_URL
    """
    env_val = os.getenv(ENV_KEY)
    if env_val:
        return env_val

    if config is not None:
        client = getattr(config, "client", None)
        url = getattr(client, "url", None)
        if url:
            return url

    return DEFAULT_URL
