"""
Configuration schema validation for the completion client.

This module defines dataclasses that provide type safety and validation
for configuration files. Used with Hydra and OmegaConf for structured
configuration management.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List
import os


@dataclass
class ClientConfig:
    """Completion endpoint and credential settings."""
    url: str = "https://api.openai.com/v1/completions"
    api_key_env: str = "OPENAI_API_KEY"
    timeout: Optional[float] = None

    def __post_init__(self):
        """Validate client configuration values."""
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("Client url must start with http:// or https://")
        if not self.api_key_env:
            raise ValueError("Client api_key_env must name an environment variable")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("Client timeout must be positive")

    def get_api_key(self) -> str:
        """Get the bearer token from the configured environment variable."""
        api_key = os.environ.get(self.api_key_env)
        if not api_key:
            raise ValueError(
                f"{self.api_key_env} environment variable is required. "
                f"Set it with: export {self.api_key_env}='your-key-here'"
            )
        return api_key


@dataclass
class RequestConfig:
    """Completion parameters applied on top of the request defaults."""
    model: str = "text-davinci-003"
    prompt: str = ""
    stop: List[str] = field(default_factory=list)
    max_tokens: int = 16
    n: int = 1
    temperature: float = 1.0
    top_p: float = 1.0
    logprobs: int = 0
    echo: bool = False
    best_of: int = 1
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    logit_bias: Dict[str, int] = field(default_factory=dict)
    user: str = ""
    stream: bool = False

    def __post_init__(self):
        """Validate request configuration values."""
        if self.max_tokens < 1:
            raise ValueError("Request max_tokens must be at least 1")
        if self.n < 1:
            raise ValueError("Request n must be at least 1")


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "detailed"  # simple, detailed, json
    file: Optional[str] = None
    rotation: str = "100 MB"
    retention: str = "30 days"
    colorize: bool = True

    def __post_init__(self):
        """Validate logging configuration values."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        self.level = self.level.upper()

        valid_formats = ["simple", "detailed", "json"]
        if self.format not in valid_formats:
            raise ValueError(f"Invalid log format. Must be one of: {valid_formats}")


@dataclass
class CompletionClientConfig:
    """Complete configuration for the completion client entry point."""
    client: ClientConfig = field(default_factory=ClientConfig)
    request: RequestConfig = field(default_factory=RequestConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Perform cross-section validation."""
        if self.request.best_of < self.request.n:
            raise ValueError("Request best_of must be greater than or equal to n")

