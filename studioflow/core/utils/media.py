"""Helpers for moving images between data URLs, base64 payloads and files."""

import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

DEFAULT_IMAGE_MIME = "image/png"


@dataclass
class InlineImage:
    """Base64 image payload plus its MIME type"""

    data: str
    mime_type: str

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def is_image_data_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("data:image")


def parse_data_url(value: Any) -> Optional[InlineImage]:
    """Split a ``data:image/<type>;base64,<payload>`` string.

    Args:
        value: Anything received on an image port

    Returns:
        The inline image, or None when the value is not an image data URL
    """
    if not is_image_data_url(value) or "," not in value:
        return None

    meta, payload = value.split(",", 1)
    mime_type = meta.split(":", 1)[1].split(";", 1)[0] or DEFAULT_IMAGE_MIME
    return InlineImage(data=payload, mime_type=mime_type)


def to_data_url(data_b64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{data_b64}"


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_IMAGE_MIME


def file_to_data_url(path: Path) -> str:
    """Read an image file and return it as an embeddable data URL"""
    path = Path(path)
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return to_data_url(encoded, guess_mime_type(path))
