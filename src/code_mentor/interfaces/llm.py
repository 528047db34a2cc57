"""Abstract interface for LLM integrations."""

from typing import Protocol

from ..models.request import ModelRequest


class LLMProvider(Protocol):
    """Contract every model adapter implements.

    Adapters only move text: they send a ModelRequest and return the raw
    reply. Validating the reply against the declared schema is the
    caller's job (see code_mentor.core.schemas).
    """

    def check_credentials(self) -> None:
        """
        Fail fast if the provider cannot authenticate.

        Called before a request is built, so a missing key never
        results in a network attempt.

        Raises:
            MissingCredentialError: If no API key is configured
        """
        ...

    async def generate(self, request: ModelRequest) -> str | None:
        """
        Send one request and return the reply text.

        Args:
            request: Prompt, system prompt, schema and temperature

        Returns:
            The concatenated reply text, or None if the model returned no text

        Raises:
            MissingCredentialError: If no API key is configured
            RateLimitError: If rate limit exceeded
            RequestTimeoutError: If the transport timed out
            TransportError: For any other API or connection failure
        """
        ...

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        ...
