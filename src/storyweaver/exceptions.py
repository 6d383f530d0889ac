"""Centralized exception hierarchy for StoryWeaver.

Usage:
    from storyweaver.exceptions import GenerationFailure, NoImageProduced

    raise GenerationFailure("Story structure response was not valid JSON")
    raise NoImageProduced("No image was generated")
"""


class StoryWeaverError(Exception):
    """Base exception for all StoryWeaver errors."""
    pass


class ConfigurationError(StoryWeaverError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Missing API key
        - Unknown model name
    """
    pass


class GenerationFailure(StoryWeaverError):
    """Raised when a structure or extension request fails.

    Examples:
        - Transport error from the Gemini API
        - Response is not valid JSON
        - Response is missing the title or scenes
    """
    pass


class NoImageProduced(StoryWeaverError):
    """Raised when an image response carries no inline image data."""
    pass


class InvalidImageFormat(StoryWeaverError):
    """Raised when a locally held image is not a base64 data URL.

    Detected before any network call is made.
    """
    pass


class EditPrecondition(StoryWeaverError):
    """Raised when an edit is requested for a scene that has no image yet."""
    pass
