"""Web layer: server-rendered pages and the JSON API."""

from code_mentor.web.app import create_app, create_llm_provider

__all__ = ["create_app", "create_llm_provider"]
