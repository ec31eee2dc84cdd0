"""Product catalog and local image manifest.

The catalog is a JSON document (``catalog.json``) produced by an offline
scraper; the manifest (``images_manifest.json``) maps a product id or URL to
the list of image paths downloaded for it. Both are read-only here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field

from studioflow.core.utils.logger import setup_logger
from studioflow.core.utils.media import file_to_data_url
from studioflow.settings import CatalogSettings, get_catalog_settings

logger = setup_logger("catalog_service")


class CatalogError(Exception):
    """Catalog or manifest could not be loaded"""

    pass


class Brand(BaseModel):
    name: str = ""
    site: str = ""


class Product(BaseModel):
    """One catalog entry; unknown scraper fields are kept"""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    url: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    price: Optional[Union[float, str]] = None


class Catalog(BaseModel):
    updated_at: str = Field(default="", alias="updatedAt")
    brand: Brand = Field(default_factory=Brand)
    products: List[Product] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class CatalogService:
    """Reads the catalog and resolves product images through the manifest"""

    def __init__(self, settings: Optional[CatalogSettings] = None):
        self.settings = settings or get_catalog_settings()
        self.data_root = Path(self.settings.data_root)

    def _read_json(self, source: str) -> Any:
        if _is_url(source):
            try:
                response = requests.get(source, timeout=self.settings.request_timeout)
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as e:
                raise CatalogError(f"Could not fetch {source}: {e}") from e

        path = Path(source)
        if not path.exists():
            raise CatalogError(f"File not found: {path}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in {path}: {e}") from e

    def get_catalog(self) -> Catalog:
        """Load the product listing.

        Raises:
            CatalogError: The catalog is missing or malformed
        """
        raw = self._read_json(self.settings.source)
        catalog = Catalog.model_validate(raw)
        logger.info(f"Catalog loaded: {len(catalog.products)} products")
        return catalog

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.get_catalog().products:
            if product.id == product_id:
                return product
        return None

    def load_manifest(self) -> Dict[str, List[str]]:
        """Return the image manifest; a missing manifest is an empty one"""
        source = self.settings.manifest_path
        if not _is_url(source) and not Path(source).exists():
            logger.warning(f"Image manifest not found: {source}")
            return {}
        manifest = self._read_json(source)
        if not isinstance(manifest, dict):
            raise CatalogError("Image manifest must be a JSON object")
        return manifest

    def find_image_paths(self, product: Mapping[str, Any]) -> List[str]:
        """Local image paths for a product, looked up by id then by URL"""
        manifest = self.load_manifest()
        key = product.get("id") or product.get("url") or ""
        return list(manifest.get(key) or manifest.get(product.get("url") or "") or [])

    def resolve_image_path(self, image_path: str) -> Path:
        """Manifest entries are web-style paths relative to the data root"""
        path = Path(image_path)
        if path.is_absolute() and path.exists():
            return path
        return self.data_root / image_path.lstrip("/")

    def load_image_data_url(self, image_path: str) -> str:
        path = self.resolve_image_path(image_path)
        if not path.exists():
            raise CatalogError(f"Image file not found: {path}")
        return file_to_data_url(path)
