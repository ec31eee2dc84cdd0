"""Export of generated social posts to JSON or CSV."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Literal, Mapping

ExportFormat = Literal["json", "csv"]

CSV_COLUMNS = [
    "product_id",
    "product_name",
    "product_url",
    "title_suggestion",
    "instagram_caption",
    "facebook_post",
    "tiktok_script",
    "linkedin_post",
    "suggested_hashtags",
    "short_copy",
]

DEFAULT_FILENAME_PREFIX = "posts"

_LINE_BREAK_RE = re.compile(r"\r?\n")


@dataclass
class ExportPayload:
    content: str
    media_type: str
    extension: str


def normalize_items(value: Any, unwrap_items: bool = False) -> List[Any]:
    """Normalize an upstream value into a list of records.

    - JSON string: parsed; a single object is wrapped in a list
    - list: string elements are parsed as JSON
    - mapping: wrapped in a list (or its ``items`` list when unwrap_items)

    Anything that cannot be parsed yields an empty list instead of an error.

    Args:
        value: Value received from an upstream node
        unwrap_items: Accept an exporter result (``{"items": [...]}``) as-is
    """
    try:
        if isinstance(value, str):
            parsed = json.loads(value)
            return parsed if isinstance(parsed, list) else [parsed]
        if isinstance(value, list):
            return [json.loads(x) if isinstance(x, str) else x for x in value]
        if isinstance(value, Mapping):
            if unwrap_items and isinstance(value.get("items"), list):
                return list(value["items"])
            return [dict(value)]
    except (json.JSONDecodeError, TypeError):
        return []
    return []


def _csv_cell(value: Any) -> str:
    text = _LINE_BREAK_RE.sub(" ", str(value)).replace('"', '""')
    return f'"{text}"'


def _row_values(item: Any) -> List[Any]:
    record = item if isinstance(item, Mapping) else {}
    hashtags = record.get("suggested_hashtags")
    if isinstance(hashtags, list):
        hashtags = " ".join(str(tag) for tag in hashtags)

    values = []
    for column in CSV_COLUMNS:
        value = hashtags if column == "suggested_hashtags" else record.get(column)
        values.append(value or "")
    return values


def to_csv(items: List[Any]) -> str:
    """Every cell quoted, quotes doubled, line breaks collapsed to a space."""
    rows = [",".join(CSV_COLUMNS)]
    for item in items:
        rows.append(",".join(_csv_cell(v) for v in _row_values(item)))
    return "\n".join(rows)


def to_json(items: List[Any]) -> str:
    return json.dumps(items, ensure_ascii=False, indent=2)


def export_items(items: List[Any], fmt: ExportFormat = "json") -> ExportPayload:
    if fmt == "csv":
        return ExportPayload(to_csv(items), "text/csv; charset=utf-8", "csv")
    if fmt == "json":
        return ExportPayload(to_json(items), "application/json; charset=utf-8", "json")
    raise ValueError(f"Unsupported export format: {fmt}")


def default_export_filename(now: datetime | None = None) -> str:
    """posts_YYYY-MM-DD-HH-MM-SS"""
    now = now or datetime.now()
    return f"{DEFAULT_FILENAME_PREFIX}_{now.strftime('%Y-%m-%d-%H-%M-%S')}"
