"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_EXTENSIONS = [
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".c",
    ".cpp",
    ".html",
    ".css",
]


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    api_key: str | None = None
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = Field(8192, ge=256, le=64000)
    timeout: float = Field(120.0, gt=0, le=600.0, description="Transport timeout in seconds")


class TemperatureConfig(BaseModel):
    """Sampling temperature per request kind."""

    analyze: float = Field(0.2, ge=0.0, le=1.0)
    trace: float = Field(0.1, ge=0.0, le=1.0)
    refine: float = Field(0.3, ge=0.0, le=1.0)


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: Literal["anthropic"] = "anthropic"
    anthropic: AnthropicConfig = AnthropicConfig()
    temperatures: TemperatureConfig = TemperatureConfig()


class ServerConfig(BaseModel):
    """HTTP server and session configuration."""

    host: str = "127.0.0.1"
    port: int = Field(8000, ge=1, le=65535)
    session_ttl: int = Field(3600, ge=60, description="Idle session lifetime in seconds")
    max_sessions: int = Field(1024, ge=1)
    session_cookie: str = "code_mentor_session"


class UploadConfig(BaseModel):
    """Local file upload configuration."""

    allowed_extensions: list[str] = DEFAULT_ALLOWED_EXTENSIONS
    max_bytes: int = Field(512 * 1024, ge=1)

    @field_validator("allowed_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and require the leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"Invalid file extension: {ext!r}. Expected e.g. '.py'")
            normalized.append(ext)
        return normalized


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/code-mentor/server.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class MentorConfig(BaseSettings):
    """Root configuration for CodeMentor."""

    llm: LLMConfig = LLMConfig()
    server: ServerConfig = ServerConfig()
    uploads: UploadConfig = UploadConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="CODE_MENTOR_",
        env_nested_delimiter="__",
    )
