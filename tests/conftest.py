"""
Shared pytest fixtures for StoryWeaver tests.
"""

import base64
import json
import os
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from google.genai import types

from storyweaver.story.models import Scene, Story

DEFAULT_MARKEXPR = "not integration"


def pytest_addoption(parser):
    """Add --full flag to run entire test suite"""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite, including tests that call the real Gemini API"
    )


def pytest_configure(config):
    """Configure test run based on flags"""
    if config.getoption("--full"):
        # Only clear default marker if no explicit -m flag was provided
        if config.option.markexpr == DEFAULT_MARKEXPR:
            config.option.markexpr = ""  # Run all tests


# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def check_api_key():
    """Check if the Gemini API key is available."""
    from dotenv import load_dotenv
    load_dotenv(PROJECT_ROOT / ".env")
    api_key = os.getenv("API_KEY")
    if not api_key:
        pytest.skip("Gemini API key not found. Set API_KEY in .env file.")
    return api_key


@pytest.fixture(scope="session")
def png_bytes():
    """Raw bytes of a tiny PNG image."""
    return PNG_BYTES


@pytest.fixture(scope="session")
def png_data_url():
    """The tiny PNG as a base64 data URL."""
    return "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def text_response():
    """Factory for a GenerateContentResponse carrying text (or a JSON payload)."""
    def _make(payload):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        return types.GenerateContentResponse(
            candidates=[
                types.Candidate(
                    content=types.Content(role="model", parts=[types.Part(text=text)])
                )
            ]
        )
    return _make


@pytest.fixture
def image_response():
    """Factory for a GenerateContentResponse with one inline image part."""
    def _make(data: bytes = PNG_BYTES, mime_type: str = "image/png", with_text: bool = False):
        parts = []
        if with_text:
            parts.append(types.Part(text="Here is your illustration."))
        parts.append(types.Part(inline_data=types.Blob(data=data, mime_type=mime_type)))
        return types.GenerateContentResponse(
            candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
        )
    return _make


@pytest.fixture
def empty_image_response():
    """A response that carries text but no inline image data."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text="I cannot draw that.")])
            )
        ]
    )


@pytest.fixture
def mock_api():
    """GeminiAPI stand-in whose generate_content_async is an AsyncMock."""
    api = MagicMock()
    api.generate_content_async = AsyncMock()
    return api


@pytest.fixture
def dragon_structure():
    """Structured response for the "A friendly dragon" prompt."""
    return {
        "title": "The Dragon's Gift",
        "scenes": [
            {"text": "A small dragon hatched in a quiet valley.", "imagePrompt": "baby dragon in a green valley"},
            {"text": "The dragon found a lost child in the woods.", "imagePrompt": "dragon and child in a forest"},
            {"text": "Together they lit the village lanterns.", "imagePrompt": "dragon lighting lanterns at dusk"},
        ],
    }


@pytest.fixture
def sample_story():
    """Three-scene story without images."""
    return Story(
        title="The Dragon's Gift",
        scenes=(
            Scene(id="scene-a", text="Scene A text", image_prompt="prompt A"),
            Scene(id="scene-b", text="Scene B text", image_prompt="prompt B"),
            Scene(id="scene-c", text="Scene C text", image_prompt="prompt C"),
        ),
    )
