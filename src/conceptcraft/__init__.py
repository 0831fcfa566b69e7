"""Conceptcraft - concept prompts and image guidance through a chat-completion relay."""

__version__ = "0.1.0"

__all__ = ["__version__"]
