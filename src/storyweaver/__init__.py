"""StoryWeaver: turn a prompt into an illustrated, multi-scene story with Gemini."""

__version__ = "0.1.0"
