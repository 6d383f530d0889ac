"""Shared utilities."""

from .gemini import GeminiAPI, generate_content_async

__all__ = ["GeminiAPI", "generate_content_async"]
