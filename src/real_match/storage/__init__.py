"""Storage layer for profiles, match snapshots and alerts."""

from .db import Storage
from .export import export_csv, export_json

__all__ = [
    "Storage",
    "export_csv",
    "export_json",
]
