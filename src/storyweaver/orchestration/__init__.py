"""Story orchestration: application state and the session that drives it."""

from .state import (
    AppState,
    EDIT_FAILED_MESSAGE,
    EXTENSION_FAILED_MESSAGE,
    STORY_FAILED_MESSAGE,
)
from .session import StorySession

__all__ = [
    "AppState",
    "EDIT_FAILED_MESSAGE",
    "EXTENSION_FAILED_MESSAGE",
    "STORY_FAILED_MESSAGE",
    "StorySession",
]
