"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AnthropicConfig,
    FileLoggingConfig,
    LLMConfig,
    LoggingConfig,
    MentorConfig,
    ServerConfig,
    TemperatureConfig,
    UploadConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "MentorConfig",
    # Top-level configs
    "LLMConfig",
    "ServerConfig",
    "UploadConfig",
    "LoggingConfig",
    # Nested configs
    "AnthropicConfig",
    "TemperatureConfig",
    "FileLoggingConfig",
]
