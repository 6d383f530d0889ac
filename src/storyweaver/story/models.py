"""Data models for stories, scenes and encoded images."""

import base64
import binascii
import re
import uuid
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from storyweaver.exceptions import InvalidImageFormat

DATA_URL_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


def new_scene_id() -> str:
    """Return a fresh, never reused scene identifier."""
    return f"scene-{uuid.uuid4().hex}"


class EncodedImage(BaseModel):
    """A self-describing image payload (MIME type + raw bytes)."""

    model_config = ConfigDict(frozen=True)

    mime_type: str  # e.g. "image/png"
    data: bytes

    def to_data_url(self) -> str:
        """Render as `data:<mime>;base64,<payload>`, renderable without lookup."""
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    @classmethod
    def from_data_url(cls, value: str) -> "EncodedImage":
        """
        Parse a base64 data URL.

        Raises:
            InvalidImageFormat: If the value is not an image data URL or the
                payload is not valid base64
        """
        match = DATA_URL_PATTERN.match(value or "")
        if not match:
            raise InvalidImageFormat("Invalid image format")

        mime_type, payload = match.group(1), match.group(2)
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidImageFormat(f"Invalid image payload: {e}") from e

        return cls(mime_type=mime_type, data=data)


class Scene(BaseModel):
    """One narrative unit of a story with its own illustration."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    image_prompt: str
    image_url: Optional[str] = None  # data URL, set once the image request resolves
    is_generating_image: bool = False

    @field_validator('id')
    @classmethod
    def validate_id_not_empty(cls, v: str) -> str:
        """Ensure id is not empty."""
        if not v or not v.strip():
            raise ValueError("Scene id cannot be empty")
        return v


class Story(BaseModel):
    """A title plus an ordered, append-only sequence of scenes."""

    model_config = ConfigDict(frozen=True)

    title: str
    scenes: Tuple[Scene, ...] = ()

    @property
    def scene_ids(self) -> Tuple[str, ...]:
        return tuple(scene.id for scene in self.scenes)

    def find_scene(self, scene_id: str) -> Optional[Scene]:
        """Return the scene with this id, or None."""
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None

    def with_scenes_appended(self, scenes) -> "Story":
        """Return a copy with `scenes` added after the existing ones."""
        return self.model_copy(update={"scenes": self.scenes + tuple(scenes)})

    def with_scene_updated(self, scene_id: str, **changes) -> "Story":
        """
        Return a copy with one scene replaced by an updated copy.

        Unknown ids leave the story untouched (the same object is returned),
        which is how stale completions are absorbed.
        """
        if self.find_scene(scene_id) is None:
            return self

        scenes = tuple(
            scene.model_copy(update=changes) if scene.id == scene_id else scene
            for scene in self.scenes
        )
        return self.model_copy(update={"scenes": scenes})
