"""Concrete implementations of provider interfaces."""

from .llm.anthropic import AnthropicAdapter

__all__ = ["AnthropicAdapter"]
