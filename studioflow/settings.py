"""
Runtime configuration based on pydantic-settings.

Each settings class reads environment variables with its own prefix; the
lru_cache getters make sure every class is instantiated once per process.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from studioflow.config import CATALOG_FILE, DATA_PATH, IMAGES_MANIFEST_FILE


class GenerationSettings(BaseSettings):
    """Generation backend models and polling, env prefix GENERATION_."""

    model_config = SettingsConfigDict(env_prefix="GENERATION_", extra="ignore")

    text_model: str = Field(default="gpt-4o-mini", min_length=1)
    text_temperature: float = Field(default=1.0, ge=0, le=2)
    image_model: str = Field(default="gpt-image-1", min_length=1)
    video_model: str = Field(default="sora-2", min_length=1)
    # Fixed wait between two polls of a video generation job
    video_poll_interval_seconds: float = Field(default=10.0, gt=0)
    video_seconds: Literal["4", "8", "12"] = "8"


class WorkflowSettings(BaseSettings):
    """Run coordinator behaviour, env prefix WORKFLOW_."""

    model_config = SettingsConfigDict(env_prefix="WORKFLOW_", extra="ignore")

    # error: nodes stuck in a cycle fail the run before anything executes
    # skip: legacy behaviour, cycle members are left idle
    cycle_policy: Literal["error", "skip"] = "error"


class CatalogSettings(BaseSettings):
    """Product catalog collaborator, env prefix CATALOG_."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_", extra="ignore")

    # Local path or http(s) URL of catalog.json
    source: str = str(CATALOG_FILE)
    manifest_path: str = str(IMAGES_MANIFEST_FILE)
    # Manifest image paths are resolved against this directory
    data_root: str = str(DATA_PATH)
    # Substituted into the social post prompt
    brand_name: str = "Hispania Colors"
    request_timeout: float = Field(default=15.0, gt=0)


@lru_cache
def get_generation_settings() -> GenerationSettings:
    return GenerationSettings()


@lru_cache
def get_workflow_settings() -> WorkflowSettings:
    return WorkflowSettings()


@lru_cache
def get_catalog_settings() -> CatalogSettings:
    return CatalogSettings()


__all__ = [
    "CatalogSettings",
    "GenerationSettings",
    "WorkflowSettings",
    "get_catalog_settings",
    "get_generation_settings",
    "get_workflow_settings",
]
