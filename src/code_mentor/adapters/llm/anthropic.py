"""Anthropic Claude LLM adapter.

This module implements the LLMProvider protocol for Anthropic's Claude models.

- The client is created lazily, after the credential check, so a missing
  API key never results in a network attempt.
- The SDK's automatic retries are disabled: every retry is an explicit
  user action.
- Timeouts are owned by the transport (httpx) and configured here.
"""

from __future__ import annotations

import anthropic
import httpx
import structlog

from ...config.schema import AnthropicConfig
from ...models.request import ModelRequest
from ...utils.errors import (
    MissingCredentialError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
)
from ...utils.logging import LogEventNames

log = structlog.get_logger()

# Connect timeout in seconds; the read timeout comes from configuration
CONNECT_TIMEOUT = 10.0


class AnthropicAdapter:
    """Anthropic LLM adapter implementing the LLMProvider protocol.

    Example:
        config = AnthropicConfig(api_key="sk-ant-...")
        adapter = AnthropicAdapter(config)

        text = await adapter.generate(build_analyze_request(code))
    """

    def __init__(self, config: AnthropicConfig) -> None:
        """Initialize the Anthropic adapter.

        Args:
            config: Anthropic-specific configuration. The API key may be
                missing; calls then fail with MissingCredentialError.
        """
        self._config = config
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    def check_credentials(self) -> None:
        """Raise MissingCredentialError if no API key is configured."""
        if not self._config.api_key:
            raise MissingCredentialError("Anthropic API key is not configured")

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Return the SDK client, creating it on first use."""
        self.check_credentials()
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.api_key,
                timeout=httpx.Timeout(self._config.timeout, connect=CONNECT_TIMEOUT),
                max_retries=0,
            )
        return self._client

    async def generate(self, request: ModelRequest) -> str | None:
        """Send one request and return the concatenated reply text.

        Args:
            request: The request to send.

        Returns:
            Reply text, or None if the reply contained no text blocks.

        Raises:
            MissingCredentialError: If no API key is configured.
            RateLimitError: If rate limit exceeded.
            RequestTimeoutError: If the request timed out.
            TransportError: For any other API or connection failure.
        """
        client = self._get_client()

        log.debug(
            LogEventNames.LLM_REQUEST_START,
            kind=request.kind.value,
            model=self._config.model,
            prompt_chars=len(request.prompt),
        )

        try:
            response = await client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=request.temperature,
                system=request.system_prompt,
                messages=[{"role": "user", "content": request.prompt}],
            )
        except anthropic.RateLimitError as e:
            log.warning("anthropic_rate_limit", kind=request.kind.value, error=str(e))
            raise RateLimitError(
                f"Anthropic rate limit exceeded: {e}",
                retry_after=_retry_after(e.response),
            ) from e
        except anthropic.APITimeoutError as e:
            log.error("anthropic_timeout", kind=request.kind.value, error=str(e))
            raise RequestTimeoutError(f"Anthropic request timed out: {e}") from e
        except anthropic.APIError as e:
            log.error("anthropic_api_error", kind=request.kind.value, error=str(e))
            raise TransportError(f"Anthropic API error: {e}") from e

        # Extract text from response
        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        if response.stop_reason == "max_tokens":
            log.warning(
                "anthropic_reply_truncated",
                kind=request.kind.value,
                max_tokens=self._config.max_tokens,
            )

        return response_text or None


def _retry_after(response: httpx.Response) -> int | None:
    """Read the Retry-After header in seconds, if present and numeric."""
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None
