"""Story and illustration generation against the Gemini API.

StoryGenerationClient exposes the four service operations used by the
orchestration layer:

1. generate_structure - prompt -> titled Story with three scenes
2. extend_story       - Story + instruction -> two new scenes
3. generate_image     - image prompt -> EncodedImage (16:9)
4. edit_image         - EncodedImage + instruction -> EncodedImage (16:9)

Each call is a single attempt. The client keeps no state between calls
beyond the lazily created GeminiAPI, so a missing API key surfaces as a
GenerationFailure on the first request rather than at construction time.
"""

import logging
from typing import Any, List, Optional, Type, TypeVar, Union

from google.genai import types
from pydantic import BaseModel, ValidationError

from storyweaver.config import IMAGE_ASPECT_RATIO, get_image_model, get_text_model
from storyweaver.exceptions import GenerationFailure, NoImageProduced
from storyweaver.story.models import EncodedImage, Scene, Story, new_scene_id
from storyweaver.story.prompting import (
    EXTENSION_SCENE_COUNT,
    EXTENSION_SCHEMA,
    STRUCTURE_SCENE_COUNT,
    STRUCTURE_SCHEMA,
    SceneDraft,
    StoryExtension,
    StoryStructure,
    build_edit_prompt,
    build_extension_prompt,
    build_image_prompt,
    build_structure_prompt,
)
from storyweaver.util.gemini import GeminiAPI

logger = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


def _strip_code_fence(response_text: str) -> str:
    """Remove a markdown code fence if the model wrapped its JSON in one."""
    response_text = response_text.strip()
    if response_text.startswith("```"):
        lines = response_text.split("\n")
        response_text = "\n".join(lines[1:-1])
        if response_text.startswith("json"):
            response_text = response_text[4:].strip()
    return response_text


def _scenes_from_drafts(drafts: List[SceneDraft]) -> List[Scene]:
    return [
        Scene(
            id=new_scene_id(),
            text=draft.text,
            image_prompt=draft.image_prompt,
            is_generating_image=False,
        )
        for draft in drafts
    ]


def extract_inline_image(response: Any) -> Optional[EncodedImage]:
    """
    Return the first inline image part of a generate_content response.

    Args:
        response: GenerateContentResponse

    Returns:
        EncodedImage, or None if no part carries inline data
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = candidates[0].content
    parts = (content.parts if content is not None else None) or []
    for part in parts:
        if part.inline_data is not None and part.inline_data.data:
            return EncodedImage(
                mime_type=part.inline_data.mime_type or "image/png",
                data=part.inline_data.data,
            )
    return None


class StoryGenerationClient:
    """Maps story requests onto Gemini calls and parses the responses."""

    def __init__(
        self,
        api: Optional[GeminiAPI] = None,
        text_model: Optional[str] = None,
        image_model: Optional[str] = None
    ):
        """
        Initialize the generation client.

        Args:
            api: GeminiAPI instance (built from API_KEY on the first request if not provided)
            text_model: Model for structure/extension requests
            image_model: Model for illustration requests
        """
        self.text_model = text_model or get_text_model()
        self.image_model = image_model or get_image_model()
        self._api = api

    @property
    def api(self) -> GeminiAPI:
        """GeminiAPI for this client, created on first use.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if self._api is None:
            self._api = GeminiAPI(model_name=self.text_model)
        return self._api

    async def generate_structure(self, prompt: str) -> Story:
        """
        Generate a titled story divided into scenes.

        Args:
            prompt: Free-text story idea (non-empty, checked by the caller)

        Returns:
            Story whose scenes all have fresh ids and no image yet

        Raises:
            GenerationFailure: If the request fails or the response is malformed
        """
        logger.info(f"Generating story structure for prompt: {prompt[:80]}")

        response_text = await self._request_json(
            build_structure_prompt(prompt), STRUCTURE_SCHEMA, "story structure"
        )
        structure = self._parse(StoryStructure, response_text, "story structure")

        if len(structure.scenes) != STRUCTURE_SCENE_COUNT:
            logger.warning(
                f"Expected {STRUCTURE_SCENE_COUNT} scenes, model returned {len(structure.scenes)}"
            )

        story = Story(title=structure.title, scenes=tuple(_scenes_from_drafts(structure.scenes)))
        logger.info(f"Story '{story.title}' generated with {len(story.scenes)} scenes")
        return story

    async def extend_story(self, story: Story, instruction: str) -> List[Scene]:
        """
        Generate scenes that continue `story`.

        Args:
            story: Current story; every scene is sent as context
            instruction: What should happen next (non-empty, checked by the caller)

        Returns:
            New scenes with ids distinct from every existing scene id

        Raises:
            GenerationFailure: If the request fails or the response is malformed
        """
        logger.info(f"Extending '{story.title}' ({len(story.scenes)} scenes): {instruction[:80]}")

        response_text = await self._request_json(
            build_extension_prompt(story, instruction), EXTENSION_SCHEMA, "story extension"
        )
        extension = self._parse(StoryExtension, response_text, "story extension")

        if len(extension.new_scenes) != EXTENSION_SCENE_COUNT:
            logger.warning(
                f"Expected {EXTENSION_SCENE_COUNT} new scenes, model returned {len(extension.new_scenes)}"
            )

        existing_ids = set(story.scene_ids)
        scenes = _scenes_from_drafts(extension.new_scenes)
        for index, scene in enumerate(scenes):
            while scenes[index].id in existing_ids:
                scenes[index] = scene.model_copy(update={"id": new_scene_id()})

        logger.info(f"Generated {len(scenes)} new scenes for '{story.title}'")
        return scenes

    async def generate_image(self, image_prompt: str) -> EncodedImage:
        """
        Generate one 16:9 illustration.

        Args:
            image_prompt: Descriptive prompt for the scene

        Returns:
            EncodedImage from the first inline image part

        Raises:
            NoImageProduced: If the response has no inline image data
            GenerationFailure: If the request itself fails
        """
        logger.debug(f"Image generation prompt: {image_prompt}")
        image = await self._request_image(build_image_prompt(image_prompt), "image generation")
        if image is None:
            raise NoImageProduced("No image was generated")
        return image

    async def edit_image(
        self,
        existing_image: Union[str, EncodedImage],
        instruction: str
    ) -> EncodedImage:
        """
        Apply an edit instruction to an existing illustration.

        Args:
            existing_image: Data URL or EncodedImage of the current illustration
            instruction: Desired modification

        Returns:
            EncodedImage of the edited illustration

        Raises:
            InvalidImageFormat: If existing_image is not a data URL (no request is made)
            NoImageProduced: If the response has no inline image data
            GenerationFailure: If the request itself fails
        """
        if not isinstance(existing_image, EncodedImage):
            existing_image = EncodedImage.from_data_url(existing_image)

        logger.debug(f"Editing {existing_image.mime_type} image ({len(existing_image.data)} bytes): {instruction}")

        contents = [
            types.Part.from_bytes(data=existing_image.data, mime_type=existing_image.mime_type),
            types.Part.from_text(text=build_edit_prompt(instruction)),
        ]
        image = await self._request_image(contents, "image edit")
        if image is None:
            raise NoImageProduced("Image editing failed")
        return image

    async def _request_json(self, prompt: str, schema: types.Schema, label: str) -> str:
        """Send a structured-output request and return the raw JSON text."""
        logger.debug(f"{label} prompt: {prompt}")
        try:
            response = await self.api.generate_content_async(
                contents=prompt,
                model=self.text_model,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
            response_text = response.text
        except Exception as e:
            logger.error(f"{label} request failed: {e}")
            raise GenerationFailure(f"{label} request failed: {e}") from e

        if not response_text:
            raise GenerationFailure(f"Empty {label} response from Gemini")

        logger.debug(f"Gemini {label} response: {response_text}")
        return _strip_code_fence(response_text)

    @staticmethod
    def _parse(model: Type[ResponseModel], response_text: str, label: str) -> ResponseModel:
        try:
            return model.model_validate_json(response_text)
        except ValidationError as e:
            logger.error(f"Failed to parse Gemini {label} response: {response_text}")
            raise GenerationFailure(f"Failed to parse {label} response: {e}") from e

    async def _request_image(self, contents: Any, label: str) -> Optional[EncodedImage]:
        try:
            response = await self.api.generate_content_async(
                contents=contents,
                model=self.image_model,
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(aspect_ratio=IMAGE_ASPECT_RATIO),
                ),
            )
        except Exception as e:
            logger.error(f"{label} request failed: {e}")
            raise GenerationFailure(f"{label} request failed: {e}") from e

        image = extract_inline_image(response)
        if image is not None:
            logger.info(f"{label} returned {image.mime_type} ({len(image.data)} bytes)")
        return image
