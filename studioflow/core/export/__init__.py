from .formatter import (
    CSV_COLUMNS,
    ExportFormat,
    ExportPayload,
    default_export_filename,
    export_items,
    normalize_items,
    to_csv,
    to_json,
)

__all__ = [
    "CSV_COLUMNS",
    "ExportFormat",
    "ExportPayload",
    "default_export_filename",
    "export_items",
    "normalize_items",
    "to_csv",
    "to_json",
]
