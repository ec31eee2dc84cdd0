import logging
from pathlib import Path

VERSION = "v0.3.0"
APP_NAME = "StudioFlow"

# Core paths
ROOT_PATH = Path(__file__).parent.parent

APPDATA_PATH = ROOT_PATH / "AppData"
WORK_PATH = ROOT_PATH / "work-dir"

LOG_PATH = APPDATA_PATH / "logs"
LOG_FILE = LOG_PATH / "studioflow.log"
GENERATION_LOG_FILE = LOG_PATH / "generation_requests.jsonl"
CACHE_PATH = APPDATA_PATH / "cache"

# Generated artifacts
VIDEO_OUTPUT_PATH = WORK_PATH / "videos"

# Product catalog data (catalog.json, images_manifest.json and local images)
DATA_PATH = ROOT_PATH / "data"
CATALOG_FILE = DATA_PATH / "catalog.json"
IMAGES_MANIFEST_FILE = DATA_PATH / "images_manifest.json"

# Logging
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Create core paths
for p in [CACHE_PATH, LOG_PATH, WORK_PATH, VIDEO_OUTPUT_PATH]:
    p.mkdir(parents=True, exist_ok=True)
