"""Application state and the pure transitions that update it.

Every transition takes an AppState and returns a new one; nothing is mutated
in place. Scene-targeted transitions are no-ops when there is no story or the
scene id is not part of the current story, so completions that arrive after
a reset are absorbed silently.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from storyweaver.story.models import Scene, Story

STORY_FAILED_MESSAGE = "Failed to weave the story. Please try again."
EXTENSION_FAILED_MESSAGE = "The narrative thread broke. Could not extend the story."
EDIT_FAILED_MESSAGE = "Failed to edit image. The AI might be busy."


class AppState(BaseModel):
    """Everything the presentation layer renders."""

    model_config = ConfigDict(frozen=True)

    prompt: str = ""
    story: Optional[Story] = None
    story_epoch: int = 0  # bumped whenever the live story is installed or discarded
    is_generating_story: bool = False
    is_extending_story: bool = False
    error: Optional[str] = None

    @computed_field
    @property
    def is_generating_image(self) -> bool:
        """True while any scene of the current story awaits an image."""
        if self.story is None:
            return False
        return any(scene.is_generating_image for scene in self.story.scenes)


def _update_scene(state: AppState, scene_id: str, **changes) -> AppState:
    if state.story is None:
        return state
    story = state.story.with_scene_updated(scene_id, **changes)
    if story is state.story:
        return state
    return state.model_copy(update={"story": story})


def set_prompt(state: AppState, prompt: str) -> AppState:
    return state.model_copy(update={"prompt": prompt})


def story_requested(state: AppState, prompt: str) -> AppState:
    """A new story was requested: drop the old one and any error."""
    return state.model_copy(update={
        "prompt": prompt,
        "story": None,
        "story_epoch": state.story_epoch + 1,
        "is_generating_story": True,
        "error": None,
    })


def story_generated(state: AppState, story: Story, epoch: int) -> AppState:
    """Install a freshly generated story unless the user started over meanwhile."""
    if state.story_epoch != epoch:
        return state.model_copy(update={"is_generating_story": False})
    return state.model_copy(update={
        "story": story,
        "story_epoch": state.story_epoch + 1,
        "is_generating_story": False,
    })


def story_failed(state: AppState, message: str = STORY_FAILED_MESSAGE) -> AppState:
    return state.model_copy(update={"is_generating_story": False, "error": message})


def extension_requested(state: AppState) -> AppState:
    return state.model_copy(update={"is_extending_story": True, "error": None})


def scenes_appended(state: AppState, scenes: Iterable[Scene], epoch: int) -> AppState:
    """
    Append extension scenes and clear the extension flag.

    The scenes are only appended when the story they were generated for
    (identified by `epoch`) is still the live one.
    """
    update = {"is_extending_story": False}
    if state.story is not None and state.story_epoch == epoch:
        update["story"] = state.story.with_scenes_appended(scenes)
    return state.model_copy(update=update)


def extension_failed(state: AppState, message: str = EXTENSION_FAILED_MESSAGE) -> AppState:
    return state.model_copy(update={"is_extending_story": False, "error": message})


def image_requested(state: AppState, scene_id: str) -> AppState:
    return _update_scene(state, scene_id, is_generating_image=True)


def image_succeeded(state: AppState, scene_id: str, image_url: str) -> AppState:
    return _update_scene(state, scene_id, image_url=image_url, is_generating_image=False)


def image_failed(state: AppState, scene_id: str) -> AppState:
    """Clear the scene's flag; any previous image stays as it was."""
    return _update_scene(state, scene_id, is_generating_image=False)


def edit_failed(state: AppState, scene_id: str, message: str = EDIT_FAILED_MESSAGE) -> AppState:
    """Surface the edit error and release the scene in a single step."""
    return image_failed(report_error(state, message), scene_id)


def report_error(state: AppState, message: str) -> AppState:
    return state.model_copy(update={"error": message})


def dismiss_error(state: AppState) -> AppState:
    return state.model_copy(update={"error": None})


def start_over(state: AppState) -> AppState:
    """Discard the story and prompt; in-flight work will find nothing to update."""
    return state.model_copy(update={
        "prompt": "",
        "story": None,
        "story_epoch": state.story_epoch + 1,
    })
