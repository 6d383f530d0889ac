"""
Gemini API utilities for StoryWeaver.

Centralized module for all Google Gen AI (Gemini) interactions.
"""

import asyncio
from typing import Optional, Any
from google import genai

from storyweaver.config import get_api_key, get_text_model


class GeminiAPI:
    """Wrapper for Gemini API operations."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[Any] = None
    ):
        """
        Initialize Gemini API client.

        Args:
            model_name: Default model for generate_content (configured text model if None)
            api_key: API key (if None, loads from environment)
            client: Pre-built genai.Client, mainly for tests
        """
        self.model_name = model_name or get_text_model()
        self._configured = False
        self.client = None

        if client is not None:
            self.client = client
            self._configured = True
        elif api_key:
            self._configure_with_key(api_key)
        else:
            self._configure_from_env()

    def _configure_from_env(self):
        """Read API_KEY from the environment (.env already loaded) and configure Gemini."""
        self._configure_with_key(get_api_key())

    def _configure_with_key(self, api_key: str):
        """Configure Gemini with provided API key."""
        self.client = genai.Client(api_key=api_key)
        self._configured = True

    async def generate_content_async(
        self,
        contents: Any,
        model: Optional[str] = None,
        config: Optional[Any] = None
    ) -> Any:
        """
        Generate content without blocking the event loop.

        Args:
            contents: Prompt text, or a list of parts
            model: Model override (defaults to self.model_name)
            config: Optional GenerateContentConfig

        Returns:
            GenerateContentResponse
        """
        if not self._configured:
            raise RuntimeError("Gemini API not configured.")

        return await generate_content_async(
            client=self.client,
            model=model or self.model_name,
            contents=contents,
            config=config
        )


async def generate_content_async(
    client: genai.Client,
    model: str,
    contents: Any,
    config: Optional[Any] = None
) -> Any:
    """
    Async wrapper for generate_content using asyncio.to_thread.

    The blocking client call runs in a worker thread so the event loop keeps
    serving other requests (e.g. sibling scene illustrations) meanwhile.

    Args:
        client: genai.Client instance
        model: Model name (e.g., "gemini-2.5-flash-image")
        contents: Content to send to the model
        config: Optional generation config

    Returns:
        Response object with .text and .candidates

    Example:
        client = genai.Client(api_key=os.getenv("API_KEY"))
        response = await generate_content_async(
            client=client,
            model="gemini-3-pro-preview",
            contents="Hello",
        )
    """
    return await asyncio.to_thread(
        client.models.generate_content,
        model=model,
        contents=contents,
        config=config
    )
