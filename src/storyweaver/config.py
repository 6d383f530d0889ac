"""Centralized configuration for StoryWeaver.

This module provides:
- PROJECT_ROOT and SRC_DIR paths
- Environment variable access with get_env()
- Automatic .env loading

Usage:
    from storyweaver.config import get_env, get_api_key

    api_key = get_api_key()
    model = get_env("STORY_TEXT_MODEL", default="gemini-3-pro-preview")
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from storyweaver.exceptions import ConfigurationError

# Calculate paths once at import time
SRC_DIR = Path(__file__).parent.parent.resolve()
PROJECT_ROOT = SRC_DIR.parent.resolve()

# Load .env from project root
_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

API_KEY_VAR = "API_KEY"
DEFAULT_TEXT_MODEL = "gemini-3-pro-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
IMAGE_ASPECT_RATIO = "16:9"


def get_env(key: str, default: Optional[str] = None) -> str:
    """Get environment variable value.

    Args:
        key: Environment variable name
        default: Default value if not set. If None and key not found, raises KeyError.

    Returns:
        Environment variable value or default

    Raises:
        KeyError: If key not found and no default provided
    """
    value = os.environ.get(key)
    if value is not None:
        return value
    if default is not None:
        return default
    raise KeyError(f"Environment variable '{key}' not set and no default provided")


def get_api_key() -> str:
    """Get the generative service API key from the environment.

    Raises:
        ConfigurationError: If API_KEY is unset or empty
    """
    api_key = os.environ.get(API_KEY_VAR, "").strip()
    if not api_key:
        raise ConfigurationError(
            f"Gemini API key not found. Set {API_KEY_VAR} in .env file or pass api_key parameter."
        )
    return api_key


def get_text_model() -> str:
    """Model used for story structure and extension."""
    return get_env("STORY_TEXT_MODEL", default=DEFAULT_TEXT_MODEL)


def get_image_model() -> str:
    """Model used for scene illustrations and edits."""
    return get_env("STORY_IMAGE_MODEL", default=DEFAULT_IMAGE_MODEL)
