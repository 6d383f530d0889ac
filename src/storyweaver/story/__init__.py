"""Story records and the Gemini generation client."""

from .models import EncodedImage, Scene, Story, new_scene_id
from .generation import StoryGenerationClient, extract_inline_image

__all__ = [
    'EncodedImage',
    'Scene',
    'Story',
    'new_scene_id',
    'StoryGenerationClient',
    'extract_inline_image',
]
