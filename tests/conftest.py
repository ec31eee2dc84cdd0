"""Root-level test configuration and shared fixtures.

This conftest.py provides shared fixtures and utilities for all tests.
Module-specific fixtures should be placed in their respective conftest.py files.
"""

import base64
import json
import os
from pathlib import Path
from typing import Callable, List, Optional

import pytest
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

from studioflow.core.catalog import CatalogService
from studioflow.core.generation import EMPTY_PROMPT_MESSAGE, EditedImage, GenerationService
from studioflow.core.utils import cache
from studioflow.settings import CatalogSettings
from studioflow.workflow import GraphStore

# Disable cache for testing
cache.disable_cache()

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


# ============================================================================
# Generation service stub
# ============================================================================


class StubGenerationService(GenerationService):
    """In-memory generation backend recording every call.

    Attributes:
        text_reply: Fixed reply, or a callable prompt -> reply.
            Defaults to ``"Echo: <prompt>"``; an empty prompt gets the
            service's empty-prompt message.
        edited: Result returned by edit_image
        video_ref: Returned by generate_video
        video_hook: Called with the progress callback before the video
            reference is returned (cancel a run mid-node, report progress)
    """

    def __init__(self):
        self.text_reply: Optional[object] = None
        self.edited = EditedImage(image_b64="RURJVEVE", text="Edited as requested")
        self.video_ref = "/videos/stub.mp4"
        self.video_hook: Optional[Callable] = None
        self.text_prompts: List[str] = []
        self.edit_calls: List[tuple] = []
        self.video_calls: List[tuple] = []

    async def generate_text(self, prompt: str) -> str:
        self.text_prompts.append(prompt)
        if not prompt:
            return EMPTY_PROMPT_MESSAGE
        if callable(self.text_reply):
            return self.text_reply(prompt)
        if self.text_reply is not None:
            return self.text_reply
        return f"Echo: {prompt}"

    async def edit_image(self, image_b64: str, mime_type: str, prompt: str) -> EditedImage:
        self.edit_calls.append((image_b64, mime_type, prompt))
        return self.edited

    async def generate_video(self, image_b64, mime_type, prompt, on_progress, cancel_token=None):
        self.video_calls.append((image_b64, mime_type, prompt))
        on_progress("Video processing has started...")
        if self.video_hook is not None:
            self.video_hook(on_progress)
        on_progress("Video fetched successfully.")
        return self.video_ref


@pytest.fixture
def png_data_url():
    return PNG_DATA_URL


@pytest.fixture
def stub_service():
    return StubGenerationService()


@pytest.fixture
def store():
    """Empty graph store"""
    return GraphStore()


# ============================================================================
# Catalog fixtures
# ============================================================================


@pytest.fixture
def sample_product():
    return {
        "id": "p1",
        "name": "Pulsera Náutica",
        "url": "https://shop.example.com/pulsera-nautica",
        "categories": ["Pulseras"],
        "colors": ["azul marino"],
        "short_description": "Pulsera de cuerda trenzada.",
        "price": 24.9,
    }


@pytest.fixture
def catalog_dir(tmp_path, sample_product):
    """catalog.json + images_manifest.json + one downloaded image"""
    images_dir = tmp_path / "images" / "p1"
    images_dir.mkdir(parents=True)
    (images_dir / "0.png").write_bytes(PNG_BYTES)

    catalog = {
        "updatedAt": "2025-01-01T00:00:00Z",
        "brand": {"name": "Hispania Colors", "site": "https://shop.example.com"},
        "products": [sample_product, {"id": "p2", "name": "Collar", "url": "https://shop.example.com/collar"}],
    }
    manifest = {"p1": ["/images/p1/0.png"], "https://shop.example.com/collar": []}

    (tmp_path / "catalog.json").write_text(json.dumps(catalog), encoding="utf-8")
    (tmp_path / "images_manifest.json").write_text(json.dumps(manifest), encoding="utf-8")
    return tmp_path


@pytest.fixture
def catalog_settings(catalog_dir):
    return CatalogSettings(
        source=str(catalog_dir / "catalog.json"),
        manifest_path=str(catalog_dir / "images_manifest.json"),
        data_root=str(catalog_dir),
    )


@pytest.fixture
def catalog_service(catalog_settings):
    return CatalogService(catalog_settings)


# ============================================================================
# Shared Utility Fixtures
# ============================================================================


@pytest.fixture
def check_env_vars():
    """Check if required environment variables are set.

    Returns:
        Function that takes variable names and skips test if any are missing
    """

    def _check(*var_names):
        missing = [var for var in var_names if not os.getenv(var)]
        if missing:
            pytest.skip(f"Required environment variables not set: {', '.join(missing)}")

    return _check
