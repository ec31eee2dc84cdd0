"""Input, generation and output node executors"""

from __future__ import annotations

from typing import Any

from studioflow.core.export import normalize_items
from studioflow.core.generation import GenerationService, VideoGenerationError
from studioflow.core.utils.logger import setup_logger
from studioflow.core.utils.media import parse_data_url, to_data_url
from studioflow.workflow.models import Node, NodeType
from studioflow.workflow.node_base import (
    NodeExecutor,
    NodeInputs,
    NodeValidationError,
    ProgressReporter,
)

logger = setup_logger("workflow_nodes")


# ============ Input capture ============


class TextInputNode(NodeExecutor):
    """Emits the text typed by the user"""

    node_type = NodeType.TEXT_INPUT

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        return node.data.content


class ImageInputNode(NodeExecutor):
    """Emits the uploaded image (data URL)"""

    node_type = NodeType.IMAGE_INPUT

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        return node.data.content


# ============ Generation ============


class TextGeneratorNode(NodeExecutor):
    """Prompt in, generated text out.

    Service failures arrive as error strings, so this node only fails when
    its prompt port is not wired.
    """

    node_type = NodeType.TEXT_GENERATOR

    def __init__(self, service: GenerationService):
        self.service = service

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        if node.port_id("input") not in inputs:
            raise NodeValidationError("No prompt connected to Text Generator.")
        prompt = self.input_value(node, inputs, "input")
        return await self.service.generate_text("" if prompt is None else str(prompt))


class ImageEditorNode(NodeExecutor):
    """Image + prompt in, {"image", "text"} out"""

    node_type = NodeType.IMAGE_EDITOR

    def __init__(self, service: GenerationService):
        self.service = service

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        image = parse_data_url(self.input_value(node, inputs, "input-image"))
        prompt = self.input_value(node, inputs, "input-text")

        if image is None or not prompt:
            raise NodeValidationError("Missing image or prompt for Image Editor.")

        progress("Editing image...")
        result = await self.service.edit_image(image.data, image.mime_type, str(prompt))
        if not result.image_b64:
            raise RuntimeError(result.text or "Image editing failed to produce an image.")

        return {
            "image": to_data_url(result.image_b64, result.mime_type or image.mime_type),
            "text": result.text,
        }


class VideoGeneratorNode(NodeExecutor):
    """Optional first-frame image + prompt in, local video path out"""

    node_type = NodeType.VIDEO_GENERATOR

    def __init__(self, service: GenerationService):
        self.service = service

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        image = parse_data_url(self.input_value(node, inputs, "input-image"))
        prompt = self.input_value(node, inputs, "input-text")

        if not prompt:
            raise NodeValidationError("Missing prompt for Video Generator.")

        video_ref = await self.service.generate_video(
            image.data if image else None,
            image.mime_type if image else None,
            str(prompt),
            progress,
            progress.cancel_token,
        )
        if not video_ref:
            raise VideoGenerationError("Video URI not found in response.")

        logger.info(f"Video generated for node {node.id}: {video_ref}")
        return video_ref


# ============ Output ============


class ExporterNode(NodeExecutor):
    """Normalizes any upstream value into {"items": [...]} records"""

    node_type = NodeType.EXPORTER

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        incoming = self.input_value(node, inputs, "input")
        return {"items": normalize_items(incoming)}


class OutputDisplayNode(NodeExecutor):
    """Terminal sink, passes its input through for display"""

    node_type = NodeType.OUTPUT_DISPLAY

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        return self.input_value(node, inputs, "input")
