#!/usr/bin/env python3
"""
Configuration Manager for the completion client

Provides configuration loading using Hydra and OmegaConf frameworks.
Handles schema validation, parameter checks, and command-line overrides.

Features:
- YAML-based hierarchical configuration files
- Type-safe configuration validation with dataclasses
- Hydra overrides with nested dot notation
- JSON Schema check of completion parameter overrides

Dependencies:
- hydra-core: Configuration management framework by Facebook
- omegaconf: Configuration objects with validation
- jsonschema: Completion parameter validation
"""

from pathlib import Path
from typing import List, Optional, Dict, Any

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig, OmegaConf, ValidationError
import jsonschema

from config.schema import CompletionClientConfig
from validation import validate_completion_params


class ConfigManager:
    """Configuration management using Hydra and OmegaConf frameworks.

    Attributes:
        config_dir (Path): Directory containing configuration files
        config (DictConfig): Currently loaded configuration
        schema_class: Configuration schema class for validation

    Example:
        config_manager = ConfigManager()
        config = config_manager.load_config("default", ["request.max_tokens=60"])
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_dir (Path, optional): Directory containing config files.
                                       Defaults to ./config/
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = config_dir
        self.config: Optional[DictConfig] = None
        self.schema_class = CompletionClientConfig

    def load_config(self,
                    config_name: str = "default",
                    overrides: Optional[List[str]] = None) -> DictConfig:
        """Load configuration from YAML files with optional overrides.

        Args:
            config_name (str): Name of the configuration file to load
            overrides (List[str], optional): Parameter overrides in dot
                                           notation (e.g., "request.temperature=0.5")

        Returns:
            DictConfig: Loaded and validated configuration object

        Raises:
            ConfigurationError: If configuration files are not found or invalid
        """
        if overrides is None:
            overrides = []

        if GlobalHydra().is_initialized():
            GlobalHydra.instance().clear()

        try:
            with initialize_config_dir(
                config_dir=str(self.config_dir.resolve()),
                version_base=None
            ):
                self.config = compose(
                    config_name=config_name,
                    overrides=overrides
                )
                self.validate_config(self.config)
                return self.config

        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def validate_config(self, config: DictConfig) -> CompletionClientConfig:
        """Validate configuration against the schema.

        Merges the loaded values over the structured schema, instantiates the
        dataclasses (running their ``__post_init__`` checks) and validates the
        ``request`` section against the completion parameter schema.

        Args:
            config (DictConfig): Configuration object to validate

        Returns:
            CompletionClientConfig: Typed configuration

        Raises:
            ConfigurationError: If validation fails, with the underlying message
        """
        try:
            structured_config = OmegaConf.structured(self.schema_class)
            merged = OmegaConf.merge(structured_config, config)
            typed = OmegaConf.to_object(merged)
            validate_completion_params(self.request_params(config))
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
        except jsonschema.ValidationError as e:
            raise ConfigurationError(str(e.message)) from e
        except Exception as e:
            raise ConfigurationError(f"Unexpected validation error: {e}") from e
        return typed

    @staticmethod
    def request_params(config: DictConfig) -> Dict[str, Any]:
        """Return the ``request`` section as plain completion parameters.

        Empty ``stop`` and ``logit_bias`` entries are dropped so the request
        defaults apply.
        """
        section = config.get("request") or {}
        params = OmegaConf.to_container(section, resolve=True) if isinstance(section, DictConfig) else dict(section)
        for key in ("stop", "logit_bias"):
            if not params.get(key):
                params.pop(key, None)
        return params

    def get_config_summary(self, config: DictConfig) -> Dict[str, Any]:
        """Get a summary of current configuration for logging/debugging.

        The API key itself is never included.
        """
        return {
            "client_url": config.client.url,
            "client_api_key_env": config.client.api_key_env,
            "client_timeout": config.client.timeout,
            "request_model": config.request.model,
            "request_max_tokens": config.request.max_tokens,
            "logging_level": config.logging.level,
            "logging_format": config.logging.format,
        }


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""
    pass

