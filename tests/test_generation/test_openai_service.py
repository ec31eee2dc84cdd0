"""OpenAIGenerationService tests (OpenAI client mocked)"""

import asyncio
import base64
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from studioflow.core.generation import (
    EMPTY_PROMPT_MESSAGE,
    OpenAIGenerationService,
    VideoGenerationError,
)
from studioflow.settings import GenerationSettings
from studioflow.workflow import CancellationToken, RunCancelledError

MODULE = "studioflow.core.generation.openai_service"


@pytest.fixture
def settings():
    return GenerationSettings(
        text_model="test-text",
        text_temperature=0.5,
        image_model="test-image",
        video_model="test-video",
        video_poll_interval_seconds=0.001,
        video_seconds="4",
    )


@pytest.fixture
def service(settings, tmp_path):
    return OpenAIGenerationService(settings, video_output_dir=tmp_path / "videos")


@pytest.fixture
def client():
    mock_client = MagicMock()
    with patch(f"{MODULE}.get_llm_client", return_value=mock_client):
        yield mock_client


def video(status, progress=None, error=None):
    return SimpleNamespace(id="vid_1", status=status, progress=progress, error=error)


class TestGenerateText:
    def test_returns_model_text(self, service):
        with patch(f"{MODULE}.call_llm", return_value="Hola!") as call_llm:
            assert asyncio.run(service.generate_text("Di hola")) == "Hola!"

        call_llm.assert_called_once_with(
            [{"role": "user", "content": "Di hola"}], "test-text", 0.5
        )

    def test_failure_becomes_error_string(self, service):
        with patch(f"{MODULE}.call_llm", side_effect=RuntimeError("quota exceeded")):
            result = asyncio.run(service.generate_text("Di hola"))
        assert result == "Error generating text: quota exceeded"

    def test_empty_prompt(self, service):
        with patch(f"{MODULE}.call_llm") as call_llm:
            assert asyncio.run(service.generate_text("")) == EMPTY_PROMPT_MESSAGE
        call_llm.assert_not_called()


class TestEditImage:
    def test_edit(self, service, client):
        client.images.edit.return_value = SimpleNamespace(
            data=[SimpleNamespace(b64_json="QUJD", revised_prompt="a blue bracelet")],
            output_format="webp",
        )
        image_b64 = base64.b64encode(b"png-bytes").decode("ascii")

        result = asyncio.run(service.edit_image(image_b64, "image/png", "make it blue"))

        assert result.image_b64 == "QUJD"
        assert result.text == "a blue bracelet"
        assert result.mime_type == "image/webp"
        kwargs = client.images.edit.call_args.kwargs
        assert kwargs["model"] == "test-image"
        assert kwargs["prompt"] == "make it blue"
        assert kwargs["image"] == ("input.png", b"png-bytes", "image/png")

    def test_no_data(self, service, client):
        client.images.edit.return_value = SimpleNamespace(data=[], output_format=None)
        result = asyncio.run(service.edit_image("QUJD", "image/png", "make it blue"))
        assert result.image_b64 is None
        assert result.text


class TestGenerateVideo:
    def test_polls_until_complete_and_downloads(self, service, client, tmp_path):
        client.videos.create.return_value = video("queued", 0)
        client.videos.retrieve.side_effect = [video("in_progress", 40), video("completed", 100)]
        messages = []

        path = asyncio.run(service.generate_video(None, None, "a boat", messages.append))

        expected = tmp_path / "videos" / "vid_1.mp4"
        assert path == str(expected)
        client.videos.download_content.assert_called_once_with("vid_1", variant="video")
        client.videos.download_content.return_value.write_to_file.assert_called_once_with(expected)
        assert "input_reference" not in client.videos.create.call_args.kwargs
        assert client.videos.create.call_args.kwargs["seconds"] == "4"
        assert messages[0] == "Starting video generation..."
        assert "Checking video status... 40%" in messages
        assert messages[-1] == "Video fetched successfully."

    def test_first_frame_image_is_uploaded(self, service, client):
        client.videos.create.return_value = video("completed", 100)
        image_b64 = base64.b64encode(b"jpeg-bytes").decode("ascii")

        asyncio.run(service.generate_video(image_b64, "image/jpeg", "a boat", lambda m: None))

        reference = client.videos.create.call_args.kwargs["input_reference"]
        assert reference[1:] == (b"jpeg-bytes", "image/jpeg")
        client.videos.retrieve.assert_not_called()

    def test_failed_job(self, service, client):
        client.videos.create.return_value = video("queued")
        client.videos.retrieve.return_value = video(
            "failed", error=SimpleNamespace(message="moderation blocked")
        )
        with pytest.raises(VideoGenerationError, match="moderation blocked"):
            asyncio.run(service.generate_video(None, None, "a boat", lambda m: None))
        client.videos.download_content.assert_not_called()

    def test_cancelled_between_polls(self, service, client):
        client.videos.create.return_value = video("queued")
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RunCancelledError):
            asyncio.run(service.generate_video(None, None, "a boat", lambda m: None, token))
        client.videos.retrieve.assert_not_called()

    def test_empty_prompt(self, service, client):
        with pytest.raises(ValueError):
            asyncio.run(service.generate_video(None, None, "", lambda m: None))
        client.videos.create.assert_not_called()


def test_live_text_generation(check_env_vars):
    """Hits the real API; skipped without credentials"""
    check_env_vars("OPENAI_API_KEY")

    result = asyncio.run(OpenAIGenerationService().generate_text("Reply with the word: pong"))

    assert isinstance(result, str)
    assert not result.startswith("Error")
