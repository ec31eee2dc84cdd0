"""External generation service (text, image editing, video)."""

from .base import (
    EMPTY_PROMPT_MESSAGE,
    TEXT_ERROR_PREFIX,
    EditedImage,
    GenerationService,
    ProgressCallback,
    VideoGenerationError,
)
from .openai_service import OpenAIGenerationService

__all__ = [
    "EMPTY_PROMPT_MESSAGE",
    "TEXT_ERROR_PREFIX",
    "EditedImage",
    "GenerationService",
    "OpenAIGenerationService",
    "ProgressCallback",
    "VideoGenerationError",
]
