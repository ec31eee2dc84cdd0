"""Product catalog node executors"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from studioflow.core.catalog import CatalogService
from studioflow.core.generation import GenerationService
from studioflow.core.prompts import get_prompt
from studioflow.core.utils.logger import setup_logger
from studioflow.workflow.models import Node, NodeType
from studioflow.workflow.node_base import (
    NodeExecutor,
    NodeInputs,
    NodeValidationError,
    ProgressReporter,
)

logger = setup_logger("product_nodes")

NO_PRODUCT_MESSAGE = "No product connected"


def _as_record(value: Any) -> Optional[Dict[str, Any]]:
    """Product records travel as plain dicts, or as their JSON text"""
    if not value:
        return None
    if isinstance(value, str):
        value = extract_json(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return dict(value)
    return None


def extract_json(text: str) -> Any:
    """
    Best-effort JSON extraction from a model reply.

    Tries the whole text first, then the outermost ``{...}`` block (models
    often wrap JSON in code fences or prose).

    Returns:
        Parsed value, or None when nothing parses
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None


class ProductNode(NodeExecutor):
    """Emits the product record selected by the user"""

    node_type = NodeType.PRODUCT

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        return node.data.content


class SocialPostGeneratorNode(NodeExecutor):
    """Product (+ optional style) in, multi-channel post object out.

    When the reply is not JSON the raw text is emitted instead of failing.
    """

    node_type = NodeType.SOCIAL_POST_GENERATOR

    def __init__(self, service: GenerationService, brand_name: str):
        self.service = service
        self.brand_name = brand_name

    def build_prompt(self, product: Dict[str, Any], style: str) -> str:
        return get_prompt(
            "social/post",
            brand_name=self.brand_name,
            product_json=json.dumps(product, ensure_ascii=False),
            style_block=f"Preferencias de estilo: {style}" if style else "",
        )

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        product = _as_record(self.input_value(node, inputs, "input-product"))
        style = self.input_value(node, inputs, "input-style") or ""
        if product is None:
            raise NodeValidationError(NO_PRODUCT_MESSAGE)

        progress("Writing social posts...")
        raw = await self.service.generate_text(self.build_prompt(product, str(style)))

        parsed = extract_json(raw) if isinstance(raw, str) else None
        if parsed is None:
            logger.warning(f"Social post reply for node {node.id} is not JSON, keeping raw text")
            return raw
        return parsed


class ProductImageLoaderNode(NodeExecutor):
    """Product in, first local image (data URL) + info text out"""

    node_type = NodeType.PRODUCT_IMAGE_LOADER

    def __init__(self, catalog: CatalogService):
        self.catalog = catalog

    async def execute(self, node: Node, inputs: NodeInputs, progress: ProgressReporter) -> Any:
        product = _as_record(self.input_value(node, inputs, "input-product"))
        if product is None:
            raise NodeValidationError(NO_PRODUCT_MESSAGE)

        paths = await asyncio.to_thread(self.catalog.find_image_paths, product)
        if not paths:
            raise NodeValidationError(
                "No local images found for this product. Download the catalog images first."
            )

        progress("Loading product image...")
        first_path = paths[0]
        image = await asyncio.to_thread(self.catalog.load_image_data_url, first_path)
        name = product.get("name") or product.get("id") or "product"
        return {
            "image": image,
            "text": f"{name}: {first_path} ({len(paths)} image(s) available)",
        }
