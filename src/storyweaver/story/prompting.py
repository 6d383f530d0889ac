"""Prompt builders and structured-response schemas for story generation."""

from typing import List

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, field_validator

from storyweaver.story.models import Story

STRUCTURE_SCENE_COUNT = 3
EXTENSION_SCENE_COUNT = 2


def _scene_list_schema() -> types.Schema:
    return types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(
            type=types.Type.OBJECT,
            properties={
                "text": types.Schema(type=types.Type.STRING),
                "imagePrompt": types.Schema(type=types.Type.STRING),
            },
            required=["text", "imagePrompt"],
        ),
    )


STRUCTURE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING),
        "scenes": _scene_list_schema(),
    },
    required=["title", "scenes"],
)

EXTENSION_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "newScenes": _scene_list_schema(),
    },
    required=["newScenes"],
)


class SceneDraft(BaseModel):
    """A scene as returned by the model, before it gets an id."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    image_prompt: str = Field(alias="imagePrompt")


class StoryStructure(BaseModel):
    """Structured response for a new story."""

    title: str
    scenes: List[SceneDraft]

    @field_validator('title')
    @classmethod
    def validate_title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Story title cannot be empty")
        return v

    @field_validator('scenes')
    @classmethod
    def validate_scenes_not_empty(cls, v: List[SceneDraft]) -> List[SceneDraft]:
        if not v:
            raise ValueError("Story must contain at least one scene")
        return v


class StoryExtension(BaseModel):
    """Structured response for a story continuation."""

    model_config = ConfigDict(populate_by_name=True)

    new_scenes: List[SceneDraft] = Field(alias="newScenes")

    @field_validator('new_scenes')
    @classmethod
    def validate_scenes_not_empty(cls, v: List[SceneDraft]) -> List[SceneDraft]:
        if not v:
            raise ValueError("Extension must contain at least one scene")
        return v


def build_structure_prompt(prompt: str) -> str:
    """Prompt for a titled story split into three illustrated scenes."""
    return f"""Write a creative short story based on this prompt: "{prompt}".
The story should be divided into {STRUCTURE_SCENE_COUNT} distinct scenes.
Provide a title and for each scene, provide the narrative text and a descriptive prompt for an image generator to illustrate that scene."""


def build_story_context(story: Story) -> str:
    """Serialize every scene in narrative order, one `Scene N: ...` line each."""
    return "\n".join(
        f"Scene {index}: {scene.text}"
        for index, scene in enumerate(story.scenes, start=1)
    )


def build_extension_prompt(story: Story, instruction: str) -> str:
    """Prompt for two scenes that continue `story` according to `instruction`."""
    return f"""You are continuing a story titled "{story.title}".
The story so far:
{build_story_context(story)}

The user wants to add more to the story with this instruction: "{instruction}".
Provide {EXTENSION_SCENE_COUNT} more distinct scenes that naturally follow the current narrative and move the plot forward.
For each scene, provide the narrative text and a descriptive prompt for an image generator."""


def build_image_prompt(image_prompt: str) -> str:
    return f"A high-quality illustration for: {image_prompt}"


def build_edit_prompt(instruction: str) -> str:
    return (
        f"Modify this image based on the following instruction: {instruction}. "
        "Keep the core content but apply the requested changes."
    )
