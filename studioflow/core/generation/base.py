"""Generation service contract consumed by the workflow executors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from studioflow.workflow.context import CancellationToken

ProgressCallback = Callable[[str], None]

EMPTY_PROMPT_MESSAGE = "Error: Prompt is empty."
TEXT_ERROR_PREFIX = "Error generating text:"


class VideoGenerationError(RuntimeError):
    """The video job finished without a usable video"""

    pass


@dataclass
class EditedImage:
    """Result of an image edit: base64 image payload and optional model text"""

    image_b64: Optional[str] = None
    text: Optional[str] = None
    # None: same type as the input image
    mime_type: Optional[str] = None


class GenerationService(ABC):
    """Text, image and video generation backend.

    Contract notes:
    - generate_text never raises. Failures come back as a human readable
      string starting with ``Error`` and are indistinguishable from a normal
      result for downstream nodes.
    - edit_image and generate_video may raise; the run coordinator records the
      exception message on the node.
    """

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        pass

    @abstractmethod
    async def edit_image(self, image_b64: str, mime_type: str, prompt: str) -> EditedImage:
        pass

    @abstractmethod
    async def generate_video(
        self,
        image_b64: Optional[str],
        mime_type: Optional[str],
        prompt: str,
        on_progress: ProgressCallback,
        cancel_token: Optional["CancellationToken"] = None,
    ) -> str:
        """Generate a video and return a playable reference (local file path).

        Args:
            image_b64: Optional first-frame image, base64 encoded
            mime_type: MIME type of image_b64
            prompt: Video prompt
            on_progress: Called with human readable status updates while the
                long-running job is polled
            cancel_token: Checked between polls

        Raises:
            VideoGenerationError: The job finished without a video
        """
        pass
