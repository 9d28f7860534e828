#!/usr/bin/env python3
"""
Completion client demo

Builds one completion request from the Hydra configuration, sends it with
the bearer token read from the environment and prints the raw response body.

Example Usage:
    # Default configuration (config/default.yaml)
    OPENAI_API_KEY=sk-... python3 complete.py

    # Override request parameters
    python3 complete.py request.prompt="Say hello" request.max_tokens=20

    # Development profile with debug logging to a file
    python3 complete.py --config-name=development
"""

import sys
from typing import Optional

import hydra
from loguru import logger
from omegaconf import DictConfig

from completions import Client, CompletionError, CompletionRequest, new_completion_request
from config_manager import ConfigManager, ConfigurationError
from logging_manager import setup_logging, log_request_operation
from utils.endpoint_resolver import resolve_endpoint_url


def build_request(cfg: DictConfig) -> CompletionRequest:
    """Create a default request and apply the ``request`` config section."""
    req = new_completion_request()
    req.url = resolve_endpoint_url(cfg)
    req.update(**ConfigManager.request_params(cfg))
    return req


def run(cfg: DictConfig, client: Optional[Client] = None) -> bytes:
    """Validate ``cfg``, send the configured request and return the body.

    Raises:
        ConfigurationError: invalid configuration
        ValueError: missing API key
        CompletionError: the request could not be built or sent
    """
    manager = ConfigManager()
    typed = manager.validate_config(cfg)
    logger.debug("Configuration loaded", **manager.get_config_summary(cfg))
    req = build_request(cfg)

    owns_client = client is None
    if owns_client:
        client = Client(typed.client.get_api_key(), timeout=typed.client.timeout)

    log_request_operation("Sending completion request", url=req.url,
                          model=req.model, max_tokens=req.max_tokens)
    try:
        body = client.send_completion_request(req)
    finally:
        if owns_client:
            client.close()
    log_request_operation("Completion request finished", url=req.url, bytes=len(body))
    return body


def debug_enabled(cfg: DictConfig) -> bool:
    """True when the configured log level is DEBUG, in any letter case."""
    return str(cfg.logging.level).upper() == "DEBUG"


@hydra.main(version_base=None, config_path="config", config_name="default")
def main(cfg: DictConfig) -> None:
    """Main entry point with Hydra configuration management.

    Args:
        cfg: Hydra configuration loaded from config files
    """
    try:
        setup_logging(cfg)
        body = run(cfg)
        print(body.decode("utf-8", errors="replace"))

    except (ConfigurationError, CompletionError, ValueError) as e:
        logger.error("Application error", error=str(e))
        if debug_enabled(cfg):
            logger.exception("Full traceback:")
        sys.exit(1)

if __name__ == "__main__":
    main()
