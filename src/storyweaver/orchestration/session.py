"""Story session: drives generation requests and owns the live state.

A StorySession runs on a single asyncio event loop. User actions await the
generation client; per-scene illustrations run as independent background
tasks (fan-out). Every state change, whichever task produced it, goes through
StorySession._apply, which swaps in a new immutable AppState and notifies
subscribers.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Set

from storyweaver.exceptions import EditPrecondition, StoryWeaverError
from storyweaver.orchestration import state as transitions
from storyweaver.orchestration.state import AppState
from storyweaver.story.generation import StoryGenerationClient
from storyweaver.story.models import Scene

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


def _is_blank(text: Optional[str]) -> bool:
    return not text or not text.strip()


class StorySession:
    """Single-user story session over a StoryGenerationClient."""

    def __init__(self, client: StoryGenerationClient):
        """
        Args:
            client: Generation client (or any object with the same async methods)
        """
        self.client = client
        self.last_failure: Optional[Exception] = None
        self._state = AppState()
        self._listeners: List[StateListener] = []
        self._pending: Set[asyncio.Task] = set()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def pending_count(self) -> int:
        """Number of background image tasks still running."""
        return len(self._pending)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call `listener` with every new state.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, transition: Callable[..., AppState], **kwargs) -> AppState:
        """Replace the state with transition(state, **kwargs) and notify listeners."""
        new_state = transition(self._state, **kwargs)
        if new_state is self._state:
            return new_state

        logger.debug(f"State transition: {transition.__name__}")
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception(f"State listener {listener!r} failed")
        return new_state

    def _record_failure(self, error: Exception) -> None:
        self.last_failure = error

    def set_prompt(self, prompt: str) -> AppState:
        return self._apply(transitions.set_prompt, prompt=prompt)

    def dismiss_error(self) -> AppState:
        return self._apply(transitions.dismiss_error)

    def start_over(self) -> AppState:
        """Discard the story and prompt. Requests still in flight become no-ops."""
        logger.info("Starting over")
        return self._apply(transitions.start_over)

    async def start_story(self, prompt: str) -> bool:
        """
        Generate a new story and start illustrating every scene.

        Args:
            prompt: Story idea

        Returns:
            True if a story was installed, False if ignored or failed
        """
        if _is_blank(prompt):
            return False
        if self._state.is_generating_story:
            logger.warning("Story generation already in progress, ignoring request")
            return False

        self._apply(transitions.story_requested, prompt=prompt)
        epoch = self._state.story_epoch

        try:
            story = await self.client.generate_structure(prompt)
        except Exception as e:
            logger.error(f"Failed to generate story: {e}")
            self._record_failure(e)
            self._apply(transitions.story_failed)
            return False

        self._apply(transitions.story_generated, story=story, epoch=epoch)
        if self._state.story is not story:
            logger.info(f"Discarding story '{story.title}', session was reset meanwhile")
            return False

        self._illustrate(story.scenes)
        return True

    async def extend_story(self, instruction: str) -> bool:
        """
        Append continuation scenes to the current story and illustrate them.

        Args:
            instruction: What should happen next

        Returns:
            True if scenes were appended, False if ignored or failed
        """
        if _is_blank(instruction) or self._state.story is None:
            return False
        if self._state.is_extending_story:
            logger.warning("Story extension already in progress, ignoring request")
            return False

        story = self._state.story
        epoch = self._state.story_epoch
        self._apply(transitions.extension_requested)

        try:
            new_scenes = await self.client.extend_story(story, instruction)
        except Exception as e:
            logger.error(f"Failed to extend story '{story.title}': {e}")
            self._record_failure(e)
            self._apply(transitions.extension_failed)
            return False

        self._apply(transitions.scenes_appended, scenes=new_scenes, epoch=epoch)
        if self._state.story is None or self._state.story_epoch != epoch:
            logger.info("Discarding extension scenes, story was replaced meanwhile")
            return False

        self._illustrate(new_scenes)
        return True

    async def edit_scene_image(self, scene_id: str, instruction: str) -> bool:
        """
        Replace a scene's illustration with an edited version.

        Ignored when the instruction is blank, the scene is unknown, or the
        scene already has an image request in flight.

        Returns:
            True if the image was replaced
        """
        if _is_blank(instruction) or self._state.story is None:
            return False

        scene = self._state.story.find_scene(scene_id)
        if scene is None:
            logger.warning(f"Edit requested for unknown scene {scene_id}")
            return False
        if scene.is_generating_image:
            logger.warning(f"Scene {scene_id} already has an image request in flight, ignoring edit")
            return False

        self._apply(transitions.image_requested, scene_id=scene_id)

        try:
            if not scene.image_url:
                raise EditPrecondition(f"Scene {scene_id} has no image to edit")
            image = await self.client.edit_image(scene.image_url, instruction)
        except Exception as e:
            logger.error(f"Failed to edit image for scene {scene_id}: {e}")
            self._record_failure(e)
            self._apply(transitions.edit_failed, scene_id=scene_id)
            return False

        before = self._state
        self._apply(transitions.image_succeeded, scene_id=scene_id, image_url=image.to_data_url())
        if self._state is before:
            logger.info(f"Discarding edited image for scene {scene_id}, story was replaced meanwhile")
            return False

        logger.info(f"Replaced image for scene {scene_id}")
        return True

    def _illustrate(self, scenes: Iterable[Scene]) -> None:
        """Fan out one independent image request per scene."""
        for scene in scenes:
            self._apply(transitions.image_requested, scene_id=scene.id)
            task = asyncio.create_task(self._generate_scene_image(scene.id, scene.image_prompt))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _generate_scene_image(self, scene_id: str, image_prompt: str) -> None:
        try:
            image = await self.client.generate_image(image_prompt)
        except StoryWeaverError as e:
            logger.error(f"Failed to generate image for scene {scene_id}: {e}")
            self._image_failed(scene_id, e)
            return
        except Exception as e:
            logger.exception(f"Unexpected error generating image for scene {scene_id}")
            self._image_failed(scene_id, e)
            return

        self._apply(transitions.image_succeeded, scene_id=scene_id, image_url=image.to_data_url())
        logger.info(f"Image ready for scene {scene_id}")

    def _image_failed(self, scene_id: str, error: Exception) -> None:
        self._record_failure(error)
        self._apply(transitions.image_failed, scene_id=scene_id)

    async def wait_for_pending(self) -> None:
        """Wait until every background image task has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
