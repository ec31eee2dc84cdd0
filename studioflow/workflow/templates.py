"""Port templates per node type"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from studioflow.workflow.models import DataKind, NodeType, Port


class UnknownNodeTypeError(Exception):
    """Node type is not part of the closed variant set"""

    pass


@dataclass(frozen=True)
class NodeTemplate:
    label: str
    # (port id suffix, label, data kind)
    inputs: Tuple[Tuple[str, str, DataKind], ...] = ()
    outputs: Tuple[Tuple[str, str, DataKind], ...] = ()

    def build_ports(self, node_id: str) -> Tuple[List[Port], List[Port]]:
        inputs = [Port(id=f"{node_id}-{s}", label=l, data_kind=k) for s, l, k in self.inputs]
        outputs = [Port(id=f"{node_id}-{s}", label=l, data_kind=k) for s, l, k in self.outputs]
        return inputs, outputs


NODE_TEMPLATES: Dict[NodeType, NodeTemplate] = {
    NodeType.TEXT_INPUT: NodeTemplate(
        label="Text Input",
        outputs=(("output", "Text", DataKind.TEXT),),
    ),
    NodeType.IMAGE_INPUT: NodeTemplate(
        label="Image Input",
        outputs=(("output", "Image", DataKind.IMAGE),),
    ),
    NodeType.TEXT_GENERATOR: NodeTemplate(
        label="Text Generator",
        inputs=(("input", "Prompt", DataKind.TEXT),),
        outputs=(("output", "Text", DataKind.TEXT),),
    ),
    NodeType.IMAGE_EDITOR: NodeTemplate(
        label="Image Editor",
        inputs=(
            ("input-image", "Image", DataKind.IMAGE),
            ("input-text", "Prompt", DataKind.TEXT),
        ),
        outputs=(
            ("output-image", "Image", DataKind.IMAGE),
            ("output-text", "Text", DataKind.TEXT),
        ),
    ),
    NodeType.VIDEO_GENERATOR: NodeTemplate(
        label="Video Generator",
        inputs=(
            ("input-image", "Image (Opt.)", DataKind.IMAGE),
            ("input-text", "Prompt", DataKind.TEXT),
        ),
        outputs=(("output", "Video", DataKind.VIDEO),),
    ),
    NodeType.PRODUCT: NodeTemplate(
        label="Product",
        outputs=(("output", "Product", DataKind.ANY),),
    ),
    NodeType.SOCIAL_POST_GENERATOR: NodeTemplate(
        label="Social Post Generator",
        inputs=(
            ("input-product", "Product", DataKind.ANY),
            ("input-style", "Style (opt.)", DataKind.TEXT),
        ),
        outputs=(("output", "Posts JSON", DataKind.TEXT),),
    ),
    NodeType.PRODUCT_IMAGE_LOADER: NodeTemplate(
        label="Product Image Loader",
        inputs=(("input-product", "Product", DataKind.ANY),),
        outputs=(
            ("output-image", "Image", DataKind.IMAGE),
            ("output-info", "Info", DataKind.TEXT),
        ),
    ),
    NodeType.EXPORTER: NodeTemplate(
        label="Exporter",
        inputs=(("input", "Data", DataKind.ANY),),
        outputs=(("output", "Pass-through", DataKind.ANY),),
    ),
    NodeType.OUTPUT_DISPLAY: NodeTemplate(
        label="Output",
        inputs=(("input", "Input", DataKind.ANY),),
    ),
}


def get_template(node_type: NodeType) -> NodeTemplate:
    try:
        return NODE_TEMPLATES[NodeType(node_type)]
    except (KeyError, ValueError) as e:
        raise UnknownNodeTypeError(f"Unknown node type: {node_type}") from e
