"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from .schema import MentorConfig

# Process environment variable holding the model API key
API_KEY_ENV_VAR = "ANTHROPIC_API_KEY"


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None) -> MentorConfig:
    """
    Load configuration from an optional YAML file.

    Without a file, defaults (plus CODE_MENTOR_* settings from the
    environment) are used. The API key falls back to ANTHROPIC_API_KEY.

    Args:
        path: Path to YAML configuration file, or None

    Returns:
        Validated MentorConfig instance

    Raises:
        FileNotFoundError: If a config path is given but doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    config_dict: dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with path.open() as f:
            raw_yaml = f.read()

        loaded = yaml.safe_load(substitute_env_vars(raw_yaml))
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")
        config_dict = loaded or {}

    # CODE_MENTOR_* environment settings are only read through __init__
    config = MentorConfig(**config_dict)
    apply_environment_credentials(config)
    return config


def apply_environment_credentials(config: MentorConfig) -> None:
    """
    Fill in the API key from the process environment if not configured.

    A missing key is not an error here: every model call fails fast
    with a missing-credential error instead.

    Args:
        config: Configuration to update in place
    """
    anthropic = config.llm.anthropic
    if not anthropic.api_key:
        anthropic.api_key = os.environ.get(API_KEY_ENV_VAR) or None
