"""Tests for the Gemini story generation client."""

import base64
import json

import pytest
from google.genai import types

from storyweaver.exceptions import (
    ConfigurationError,
    GenerationFailure,
    InvalidImageFormat,
    NoImageProduced,
)
from storyweaver.story.generation import StoryGenerationClient, extract_inline_image
from storyweaver.story.models import EncodedImage


@pytest.fixture
def client(mock_api):
    """Generation client over a mocked GeminiAPI."""
    return StoryGenerationClient(
        api=mock_api,
        text_model="test-text-model",
        image_model="test-image-model",
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateStructure:
    """Tests for generate_structure."""

    @pytest.mark.smoke
    async def test_friendly_dragon_story(self, client, mock_api, text_response, dragon_structure):
        """Prompt "A friendly dragon" yields the mocked title and three scenes."""
        mock_api.generate_content_async.return_value = text_response(dragon_structure)

        story = await client.generate_structure("A friendly dragon")

        assert story.title == "The Dragon's Gift"
        assert len(story.scenes) == 3
        assert [s.text for s in story.scenes] == [s["text"] for s in dragon_structure["scenes"]]
        assert [s.image_prompt for s in story.scenes] == [s["imagePrompt"] for s in dragon_structure["scenes"]]
        assert all(s.is_generating_image is False for s in story.scenes)
        assert all(s.image_url is None for s in story.scenes)
        assert len(set(story.scene_ids)) == 3

    async def test_requests_json_with_schema(self, client, mock_api, text_response, dragon_structure):
        mock_api.generate_content_async.return_value = text_response(dragon_structure)

        await client.generate_structure("A friendly dragon")

        kwargs = mock_api.generate_content_async.call_args.kwargs
        assert kwargs["model"] == "test-text-model"
        assert '"A friendly dragon"' in kwargs["contents"]
        config = kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert set(config.response_schema.required) == {"title", "scenes"}

    async def test_scene_count_follows_response(self, client, mock_api, text_response, dragon_structure):
        """Two scenes in the response means two scenes in the story."""
        dragon_structure["scenes"] = dragon_structure["scenes"][:2]
        mock_api.generate_content_async.return_value = text_response(dragon_structure)

        story = await client.generate_structure("A friendly dragon")

        assert len(story.scenes) == 2

    async def test_accepts_fenced_json(self, client, mock_api, text_response, dragon_structure):
        fenced = "```json\n" + json.dumps(dragon_structure) + "\n```"
        mock_api.generate_content_async.return_value = text_response(fenced)

        story = await client.generate_structure("A friendly dragon")

        assert story.title == "The Dragon's Gift"

    @pytest.mark.parametrize("payload", [
        "this is not json",
        '{"title": "No scenes"}',
        '{"scenes": [{"text": "t", "imagePrompt": "p"}]}',
        '{"title": "Empty", "scenes": []}',
    ])
    async def test_malformed_response_raises_generation_failure(self, client, mock_api, text_response, payload):
        mock_api.generate_content_async.return_value = text_response(payload)

        with pytest.raises(GenerationFailure):
            await client.generate_structure("A friendly dragon")

    async def test_empty_response_raises_generation_failure(self, client, mock_api):
        mock_api.generate_content_async.return_value = types.GenerateContentResponse(candidates=[])

        with pytest.raises(GenerationFailure, match="Empty"):
            await client.generate_structure("A friendly dragon")

    async def test_transport_error_raises_generation_failure(self, client, mock_api):
        mock_api.generate_content_async.side_effect = ConnectionError("network down")

        with pytest.raises(GenerationFailure) as exc_info:
            await client.generate_structure("A friendly dragon")

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    async def test_missing_api_key_raises_generation_failure(self, monkeypatch):
        """The GeminiAPI is only built on the first request."""
        monkeypatch.delenv("API_KEY", raising=False)
        client = StoryGenerationClient(text_model="test-text-model", image_model="test-image-model")

        with pytest.raises(GenerationFailure) as exc_info:
            await client.generate_structure("A friendly dragon")

        assert isinstance(exc_info.value.__cause__, ConfigurationError)


@pytest.mark.unit
@pytest.mark.asyncio
class TestExtendStory:
    """Tests for extend_story."""

    async def test_returns_new_scenes_with_fresh_ids(self, client, mock_api, text_response, sample_story):
        mock_api.generate_content_async.return_value = text_response({
            "newScenes": [
                {"text": "A storm rolled in.", "imagePrompt": "storm over the valley"},
                {"text": "The dragon sheltered the village.", "imagePrompt": "dragon wings over houses"},
            ]
        })

        scenes = await client.extend_story(sample_story, "A storm arrives")

        assert [s.text for s in scenes] == ["A storm rolled in.", "The dragon sheltered the village."]
        assert all(s.id not in sample_story.scene_ids for s in scenes)
        assert scenes[0].id != scenes[1].id
        assert all(s.is_generating_image is False for s in scenes)

    async def test_sends_existing_scenes_as_context(self, client, mock_api, text_response, sample_story):
        mock_api.generate_content_async.return_value = text_response({
            "newScenes": [{"text": "D", "imagePrompt": "d"}, {"text": "E", "imagePrompt": "e"}]
        })

        await client.extend_story(sample_story, "A storm arrives")

        kwargs = mock_api.generate_content_async.call_args.kwargs
        contents = kwargs["contents"]
        assert "Scene 1: Scene A text" in contents
        assert "Scene 2: Scene B text" in contents
        assert "Scene 3: Scene C text" in contents
        assert '"A storm arrives"' in contents
        assert kwargs["config"].response_schema.required == ["newScenes"]

    async def test_malformed_response_raises_generation_failure(self, client, mock_api, text_response, sample_story):
        mock_api.generate_content_async.return_value = text_response({"scenes": []})

        with pytest.raises(GenerationFailure):
            await client.extend_story(sample_story, "A storm arrives")

    async def test_transport_error_raises_generation_failure(self, client, mock_api, sample_story):
        mock_api.generate_content_async.side_effect = TimeoutError("deadline exceeded")

        with pytest.raises(GenerationFailure):
            await client.extend_story(sample_story, "A storm arrives")


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateImage:
    """Tests for generate_image."""

    async def test_returns_first_inline_image(self, client, mock_api, image_response, png_bytes):
        mock_api.generate_content_async.return_value = image_response(with_text=True)

        image = await client.generate_image("baby dragon in a green valley")

        assert image == EncodedImage(mime_type="image/png", data=png_bytes)

    async def test_requests_16_9_illustration(self, client, mock_api, image_response):
        mock_api.generate_content_async.return_value = image_response()

        await client.generate_image("baby dragon")

        kwargs = mock_api.generate_content_async.call_args.kwargs
        assert kwargs["model"] == "test-image-model"
        assert kwargs["contents"] == "A high-quality illustration for: baby dragon"
        assert kwargs["config"].image_config.aspect_ratio == "16:9"

    async def test_no_inline_data_raises_no_image_produced(self, client, mock_api, empty_image_response):
        mock_api.generate_content_async.return_value = empty_image_response

        with pytest.raises(NoImageProduced):
            await client.generate_image("baby dragon")

    async def test_transport_error_raises_generation_failure(self, client, mock_api):
        mock_api.generate_content_async.side_effect = ConnectionError("network down")

        with pytest.raises(GenerationFailure):
            await client.generate_image("baby dragon")


@pytest.mark.unit
@pytest.mark.asyncio
class TestEditImage:
    """Tests for edit_image."""

    async def test_sends_image_and_instruction(self, client, mock_api, image_response, png_bytes, png_data_url):
        edited = b"edited-image-bytes"
        mock_api.generate_content_async.return_value = image_response(data=edited, mime_type="image/jpeg")

        image = await client.edit_image(png_data_url, "make it sunset")

        assert image.mime_type == "image/jpeg"
        assert image.data == edited
        assert image.to_data_url() == "data:image/jpeg;base64," + base64.b64encode(edited).decode()

        kwargs = mock_api.generate_content_async.call_args.kwargs
        image_part, text_part = kwargs["contents"]
        assert image_part.inline_data.data == png_bytes
        assert image_part.inline_data.mime_type == "image/png"
        assert "make it sunset" in text_part.text
        assert kwargs["config"].image_config.aspect_ratio == "16:9"

    async def test_accepts_encoded_image(self, client, mock_api, image_response, png_bytes):
        mock_api.generate_content_async.return_value = image_response()

        await client.edit_image(EncodedImage(mime_type="image/png", data=png_bytes), "add a moon")

        mock_api.generate_content_async.assert_awaited_once()

    async def test_malformed_image_fails_before_network_call(self, client, mock_api):
        """A string without the data: prefix is rejected locally."""
        with pytest.raises(InvalidImageFormat):
            await client.edit_image("iVBORw0KGgoAAAANSUhEUg==", "make it sunset")

        mock_api.generate_content_async.assert_not_called()

    async def test_no_inline_data_raises_no_image_produced(self, client, mock_api, empty_image_response, png_data_url):
        mock_api.generate_content_async.return_value = empty_image_response

        with pytest.raises(NoImageProduced, match="editing failed"):
            await client.edit_image(png_data_url, "make it sunset")


@pytest.mark.unit
class TestExtractInlineImage:

    def test_no_candidates(self):
        assert extract_inline_image(types.GenerateContentResponse(candidates=[])) is None

    def test_candidate_without_content(self):
        response = types.GenerateContentResponse(candidates=[types.Candidate()])

        assert extract_inline_image(response) is None

    def test_skips_text_parts(self, image_response, png_bytes):
        image = extract_inline_image(image_response(with_text=True))

        assert image.data == png_bytes
