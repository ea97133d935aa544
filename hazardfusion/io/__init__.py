"""HazardFusion I/O package.

Storage and file operations only — no fusion logic in this layer.
"""

from hazardfusion.io.persistence import load_json, save_fusion_result, save_json
from hazardfusion.io.repository import HazardRepository, InMemoryRepository
from hazardfusion.io.sqlite_repository import SQLiteRepository

__all__ = [
    "save_json",
    "load_json",
    "save_fusion_result",
    "HazardRepository",
    "InMemoryRepository",
    "SQLiteRepository",
]
