"""OpenAI backed generation service"""

from __future__ import annotations

import asyncio
import base64
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from studioflow.config import VIDEO_OUTPUT_PATH
from studioflow.core.generation.base import (
    EMPTY_PROMPT_MESSAGE,
    TEXT_ERROR_PREFIX,
    EditedImage,
    GenerationService,
    ProgressCallback,
    VideoGenerationError,
)
from studioflow.core.llm import call_llm, call_with_rate_limit_retry, get_llm_client
from studioflow.core.utils.logger import setup_logger
from studioflow.settings import GenerationSettings, get_generation_settings

if TYPE_CHECKING:
    from studioflow.workflow.context import CancellationToken

logger = setup_logger("openai_generation")

# Terminal states of a video job
_VIDEO_DONE_STATES = ("completed", "failed")


def _upload_name(mime_type: str) -> str:
    extension = mimetypes.guess_extension(mime_type) or ".png"
    return f"input{extension}"


class OpenAIGenerationService(GenerationService):
    """Chat completions for text, images.edit for images, videos API for video"""

    def __init__(
        self,
        settings: Optional[GenerationSettings] = None,
        video_output_dir: Path = VIDEO_OUTPUT_PATH,
    ):
        self.settings = settings or get_generation_settings()
        self.video_output_dir = Path(video_output_dir)

    async def generate_text(self, prompt: str) -> str:
        if not prompt:
            return EMPTY_PROMPT_MESSAGE
        try:
            return await asyncio.to_thread(
                call_llm,
                [{"role": "user", "content": prompt}],
                self.settings.text_model,
                self.settings.text_temperature,
            )
        except Exception as e:
            # Contract: text failures are reported through the result
            logger.error(f"Text generation failed: {e}")
            return f"{TEXT_ERROR_PREFIX} {e}"

    async def edit_image(self, image_b64: str, mime_type: str, prompt: str) -> EditedImage:
        image_bytes = base64.b64decode(image_b64)
        response = await asyncio.to_thread(
            call_with_rate_limit_retry,
            get_llm_client().images.edit,
            model=self.settings.image_model,
            image=(_upload_name(mime_type), image_bytes, mime_type),
            prompt=prompt,
        )

        if not response.data:
            return EditedImage(image_b64=None, text="Image editing returned no data.")

        first = response.data[0]
        output_format = getattr(response, "output_format", None)
        return EditedImage(
            image_b64=first.b64_json,
            text=getattr(first, "revised_prompt", None),
            mime_type=f"image/{output_format}" if output_format else None,
        )

    async def generate_video(
        self,
        image_b64: Optional[str],
        mime_type: Optional[str],
        prompt: str,
        on_progress: ProgressCallback,
        cancel_token: Optional["CancellationToken"] = None,
    ) -> str:
        if not prompt:
            raise ValueError(EMPTY_PROMPT_MESSAGE)

        client = get_llm_client()
        on_progress("Starting video generation...")

        create_kwargs: dict[str, Any] = {
            "model": self.settings.video_model,
            "prompt": prompt,
            "seconds": self.settings.video_seconds,
        }
        if image_b64 and mime_type:
            create_kwargs["input_reference"] = (
                _upload_name(mime_type),
                base64.b64decode(image_b64),
                mime_type,
            )

        video = await asyncio.to_thread(
            call_with_rate_limit_retry, client.videos.create, **create_kwargs
        )
        on_progress("Video processing has started. This may take a few minutes...")

        while video.status not in _VIDEO_DONE_STATES:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            await asyncio.sleep(self.settings.video_poll_interval_seconds)
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            video = await asyncio.to_thread(client.videos.retrieve, video.id)
            progress = getattr(video, "progress", None)
            if progress is not None:
                on_progress(f"Checking video status... {progress}%")
            else:
                on_progress("Checking video status...")

        if video.status == "failed":
            error = getattr(video, "error", None)
            message = getattr(error, "message", None) or "Video generation failed."
            raise VideoGenerationError(message)

        if not video.id:
            raise VideoGenerationError("Video URI not found in response.")

        on_progress("Video processing complete. Fetching video...")
        content = await asyncio.to_thread(
            client.videos.download_content, video.id, variant="video"
        )

        self.video_output_dir.mkdir(parents=True, exist_ok=True)
        target = self.video_output_dir / f"{video.id}.mp4"
        await asyncio.to_thread(content.write_to_file, target)

        on_progress("Video fetched successfully.")
        logger.info(f"Video saved: {target}")
        return str(target)
