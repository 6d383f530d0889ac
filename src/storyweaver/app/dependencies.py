"""Shared FastAPI dependencies."""

from typing import Optional

from storyweaver.orchestration import StorySession
from storyweaver.story import StoryGenerationClient

_session: Optional[StorySession] = None


def get_session() -> StorySession:
    """
    Return the process-wide story session, creating it on first use.

    The generation client reads API_KEY only when it first calls Gemini, so
    a missing key shows up as a failed action in the state's error field.
    """
    global _session
    if _session is None:
        _session = StorySession(StoryGenerationClient())
    return _session


def reset_session() -> None:
    """Forget the current session (next request builds a new one)."""
    global _session
    _session = None
