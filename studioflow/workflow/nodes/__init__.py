"""Workflow node executors"""

from studioflow.workflow.nodes.core import (
    ExporterNode,
    ImageEditorNode,
    ImageInputNode,
    OutputDisplayNode,
    TextGeneratorNode,
    TextInputNode,
    VideoGeneratorNode,
)
from studioflow.workflow.nodes.product import (
    ProductImageLoaderNode,
    ProductNode,
    SocialPostGeneratorNode,
    extract_json,
)

__all__ = [
    # Input capture
    "TextInputNode",
    "ImageInputNode",
    "ProductNode",
    # Generation
    "TextGeneratorNode",
    "ImageEditorNode",
    "VideoGeneratorNode",
    "SocialPostGeneratorNode",
    # Catalog
    "ProductImageLoaderNode",
    # Output
    "ExporterNode",
    "OutputDisplayNode",
    "extract_json",
]
