"""Live Gemini tests for story generation.

These call the real API and are excluded by default.
Run with: pytest tests/story/test_generation_live.py --full -v
"""

import pytest

from storyweaver.story.generation import StoryGenerationClient


@pytest.mark.integration
@pytest.mark.requires_api
@pytest.mark.asyncio
class TestStoryGenerationLive:

    async def test_structure_and_illustration(self, check_api_key):
        client = StoryGenerationClient()

        story = await client.generate_structure("A friendly dragon")

        assert story.title
        assert len(story.scenes) >= 1
        assert len(set(story.scene_ids)) == len(story.scenes)

        image = await client.generate_image(story.scenes[0].image_prompt)

        assert image.mime_type.startswith("image/")
        assert image.to_data_url().startswith("data:image/")
