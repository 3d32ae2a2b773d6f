"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic_core import ValidationError

from src.unieats.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}"
)


def substitute_env_vars(text: str) -> str:
    """Expand shell-style ``${...}`` placeholders in a config template.

    ``${NAME:-fallback}`` falls back when NAME is unset or empty,
    ``${NAME:?hint}`` fails with hint in the error, and a bare ``${NAME}``
    must be set.

    Raises:
        ValueError: If a mandatory variable has no value.
    """

    def expand(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.getenv(name)

        if op == "-":
            return value or arg
        if op == "?" and not value:
            raise ValueError(f"{name} is not set: {arg}")
        if value is None:
            raise ValueError(f"{name} is not set and has no fallback")
        return value

    return _PLACEHOLDER.sub(expand, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_FOO`` variables to ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    overrides = [(var, value) for var, value in os.environ.items() if var.startswith(prefix)]
    for var_name, var_value in overrides:
        os.environ[var_name[len(prefix):]] = var_value
        logger.debug(f"Set environment variable {var_name[len(prefix):]} from {var_name}")


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed YAML with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    # .env never overrides variables already present in the process environment
    load_dotenv(override=False)

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")
    apply_environment_overrides(env_mode)

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config = ConfigData(**loaded.get("config", {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.oidc.providers:
        enabled_providers = {}
        for name, provider in config.oidc.providers.items():
            if provider.enabled:
                enabled_providers[name] = provider
            else:
                logger.info(f"Skipping disabled OIDC provider '{name}'")
        config.oidc.providers = enabled_providers

        if not config.oidc.providers:
            logger.warning("No OIDC providers are enabled after applying configuration filters")

    return config
