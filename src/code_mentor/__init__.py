"""CodeMentor - LLM-backed code review and execution tracing for students."""

from code_mentor._version import __version__

__all__ = ["__version__"]
