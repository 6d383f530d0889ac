"""Story endpoints.

Each action endpoint forwards a user action to the StorySession and returns
the resulting state. Failures never surface as HTTP errors: they are reported
through the state's `error` field, exactly as the front end renders them.
Scene illustrations keep generating in the background after the response;
the front end polls GET /api/story to pick them up.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storyweaver.app.config import settings
from storyweaver.app.dependencies import get_session
from storyweaver.orchestration import AppState, StorySession

router = APIRouter(prefix="/api/story", tags=["story"])


class StoryRequest(BaseModel):
    """Request body for a new story."""
    prompt: str = ""


class InstructionRequest(BaseModel):
    """Request body for extensions and image edits."""
    instruction: str = ""


@router.get("", response_model=AppState)
async def get_state(session: StorySession = Depends(get_session)):
    """Return the current story, busy flags and error."""
    return session.state


@router.get("/suggestions", response_model=List[str])
async def get_suggestions():
    """Prompt ideas for the empty story screen."""
    return settings.SUGGESTED_PROMPTS


@router.post("", response_model=AppState)
async def start_story(request: StoryRequest, session: StorySession = Depends(get_session)):
    """
    Weave a new story from a prompt.

    Waits for the story structure; scene images are generated afterwards in
    the background.
    """
    await session.start_story(request.prompt)
    return session.state


@router.post("/extend", response_model=AppState)
async def extend_story(request: InstructionRequest, session: StorySession = Depends(get_session)):
    """Append continuation scenes to the current story."""
    await session.extend_story(request.instruction)
    return session.state


@router.post("/scenes/{scene_id}/edit", response_model=AppState)
async def edit_scene_image(
    scene_id: str,
    request: InstructionRequest,
    session: StorySession = Depends(get_session)
):
    """Replace one scene's illustration with an edited version."""
    await session.edit_scene_image(scene_id, request.instruction)
    return session.state


@router.delete("/error", response_model=AppState)
async def dismiss_error(session: StorySession = Depends(get_session)):
    """Clear the visible error message."""
    return session.dismiss_error()


@router.post("/reset", response_model=AppState)
async def start_over(session: StorySession = Depends(get_session)):
    """Discard the current story and prompt."""
    return session.start_over()
