"""Node executor unit tests"""

import asyncio
import json

import pytest

from studioflow.core.generation import EMPTY_PROMPT_MESSAGE
from studioflow.workflow import (
    CancellationToken,
    NodeType,
    NodeValidationError,
    ProgressReporter,
    RunCancelledError,
)
from studioflow.workflow.nodes import (
    ExporterNode,
    ImageEditorNode,
    ProductImageLoaderNode,
    SocialPostGeneratorNode,
    TextGeneratorNode,
    TextInputNode,
    extract_json,
)


@pytest.fixture
def progress_log():
    return []


@pytest.fixture
def progress(progress_log):
    return ProgressReporter("n1", lambda node_id, message: progress_log.append((node_id, message)))


def execute(executor, node, inputs, progress):
    return asyncio.run(executor.execute(node, inputs, progress))


class TestProgressReporter:
    def test_forwards_messages(self, progress, progress_log):
        progress("Working...")
        assert progress_log == [("n1", "Working...")]

    def test_cancellation_checkpoint(self, progress_log):
        token = CancellationToken()
        reporter = ProgressReporter("n1", lambda n, m: progress_log.append(m), token)
        token.cancel()

        with pytest.raises(RunCancelledError):
            reporter("never delivered")
        assert progress_log == []


class TestInputCapture:
    def test_text_input_emits_content(self, store, progress):
        node = store.create_node(NodeType.TEXT_INPUT)
        node = store.update_node_data(node.id, {"content": "Hola"})
        assert execute(TextInputNode(), node, {}, progress) == "Hola"


class TestTextGenerator:
    def test_unwired_prompt(self, store, stub_service, progress):
        node = store.create_node(NodeType.TEXT_GENERATOR)
        with pytest.raises(NodeValidationError, match="No prompt connected"):
            execute(TextGeneratorNode(stub_service), node, {}, progress)

    def test_empty_prompt_is_passed_to_service(self, store, stub_service, progress):
        """Only an unwired port is a validation error"""
        node = store.create_node(NodeType.TEXT_GENERATOR)
        result = execute(TextGeneratorNode(stub_service), node, {node.port_id("input"): ""}, progress)
        assert result == EMPTY_PROMPT_MESSAGE

    def test_wired_but_unpublished_prompt(self, store, stub_service, progress):
        node = store.create_node(NodeType.TEXT_GENERATOR)
        result = execute(TextGeneratorNode(stub_service), node, {node.port_id("input"): None}, progress)
        assert result == EMPTY_PROMPT_MESSAGE
        assert stub_service.text_prompts == [""]


class TestImageEditor:
    def test_non_data_url_image_is_missing(self, store, stub_service, progress):
        node = store.create_node(NodeType.IMAGE_EDITOR)
        inputs = {
            node.port_id("input-image"): "https://example.com/a.png",
            node.port_id("input-text"): "make it blue",
        }
        with pytest.raises(NodeValidationError, match="Missing image or prompt"):
            execute(ImageEditorNode(stub_service), node, inputs, progress)

    def test_service_mime_type_wins(self, store, stub_service, png_data_url, progress, progress_log):
        stub_service.edited.mime_type = "image/webp"
        node = store.create_node(NodeType.IMAGE_EDITOR)
        inputs = {
            node.port_id("input-image"): png_data_url,
            node.port_id("input-text"): "make it blue",
        }
        result = execute(ImageEditorNode(stub_service), node, inputs, progress)

        assert result == {"image": "data:image/webp;base64,RURJVEVE", "text": "Edited as requested"}
        assert progress_log == [("n1", "Editing image...")]


class TestSocialPostGenerator:
    def test_missing_product(self, store, stub_service, progress):
        node = store.create_node(NodeType.SOCIAL_POST_GENERATOR)
        with pytest.raises(NodeValidationError, match="No product connected"):
            execute(SocialPostGeneratorNode(stub_service, "Acme"), node, {}, progress)

    def test_non_record_product(self, store, stub_service, progress):
        node = store.create_node(NodeType.SOCIAL_POST_GENERATOR)
        inputs = {node.port_id("input-product"): "just a name"}
        with pytest.raises(NodeValidationError):
            execute(SocialPostGeneratorNode(stub_service, "Acme"), node, inputs, progress)

    def test_product_as_json_text(self, store, stub_service, sample_product, progress):
        stub_service.text_reply = '{"product_id": "p1"}'
        node = store.create_node(NodeType.SOCIAL_POST_GENERATOR)
        inputs = {node.port_id("input-product"): json.dumps(sample_product)}

        result = execute(SocialPostGeneratorNode(stub_service, "Acme"), node, inputs, progress)

        assert result == {"product_id": "p1"}
        assert "Pulsera" in stub_service.text_prompts[0]

    def test_prompt_without_style(self, stub_service, sample_product):
        prompt = SocialPostGeneratorNode(stub_service, "Acme").build_prompt(sample_product, "")
        assert "$" not in prompt.split("Datos del producto:")[1]
        assert "Preferencias de estilo" not in prompt
        assert "de Acme" in prompt


class TestProductImageLoader:
    def test_catalog_product_model_accepted(self, store, catalog_service, progress):
        product = catalog_service.get_product("p1")
        node = store.create_node(NodeType.PRODUCT_IMAGE_LOADER)
        inputs = {node.port_id("input-product"): product}

        result = execute(ProductImageLoaderNode(catalog_service), node, inputs, progress)

        assert result["image"].startswith("data:image/png;base64,")
        assert "(1 image(s) available)" in result["text"]

    def test_product_as_json_text(self, store, catalog_service, sample_product, progress):
        node = store.create_node(NodeType.PRODUCT_IMAGE_LOADER)
        inputs = {node.port_id("input-product"): json.dumps(sample_product)}

        result = execute(ProductImageLoaderNode(catalog_service), node, inputs, progress)

        assert result["image"].startswith("data:image/png;base64,")

    def test_missing_product(self, store, catalog_service, progress):
        node = store.create_node(NodeType.PRODUCT_IMAGE_LOADER)
        with pytest.raises(NodeValidationError, match="No product connected"):
            execute(ProductImageLoaderNode(catalog_service), node, {}, progress)


class TestExporter:
    def test_record_is_wrapped(self, store, progress):
        node = store.create_node(NodeType.EXPORTER)
        inputs = {node.port_id("input"): {"product_id": "p1"}}
        assert execute(ExporterNode(), node, inputs, progress) == {"items": [{"product_id": "p1"}]}

    def test_unwired_input(self, store, progress):
        node = store.create_node(NodeType.EXPORTER)
        assert execute(ExporterNode(), node, {}, progress) == {"items": []}


class TestExtractJson:
    def test_plain_json(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        assert extract_json('Aquí tienes:\n```json\n{"a": 1}\n```') == {"a": 1}

    def test_not_json(self):
        assert extract_json("not json") is None

    def test_broken_braces(self):
        assert extract_json("{oops}") is None
