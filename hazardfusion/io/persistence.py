"""JSON persistence for fusion cycle outputs.

Writes are atomic (write-to-temp-then-rename) so a crashed cycle never leaves a
half-written result file behind. No business logic — file I/O only.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class _FusionEncoder(json.JSONEncoder):
    """JSON encoder for dataclasses, datetimes and Path objects."""

    def default(self, obj: Any) -> Any:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Atomically write data to a JSON file, creating parent directories.

    Args:
        data: Dicts, lists, dataclasses, datetimes and Paths are supported.
        path: Output file path.
        indent: JSON indentation level.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        serialized = json.dumps(data, indent=indent, ensure_ascii=False, cls=_FusionEncoder)
    except (TypeError, ValueError) as exc:
        logger.error("JSON serialization failed for %s: %s", path, exc)
        raise

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        suffix=".tmp",
    ) as tmp:
        tmp.write(serialized)
        tmp_path = tmp.name

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        os.unlink(tmp_path)
        logger.error("Atomic rename failed for %s: %s", path, exc)
        raise

    logger.debug("Saved JSON to %s (%d bytes)", path, len(serialized))


def load_json(path: str | Path) -> Optional[Any]:
    """Load a JSON file; None when it is missing or unparseable."""
    path = Path(path)
    if not path.exists():
        logger.debug("JSON file not found: %s", path)
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to load JSON from %s: %s", path, exc)
        return None


def ensure_output_dir(base_dir: str | Path, cycle_id: str) -> Path:
    """Create and return the output directory for one fusion cycle.

    Args:
        base_dir: Root output directory (e.g. outputs/cycles).
        cycle_id: Fusion cycle identifier.
    """
    cycle_dir = Path(base_dir) / cycle_id
    cycle_dir.mkdir(parents=True, exist_ok=True)
    return cycle_dir


def save_fusion_result(result: Any, base_dir: str | Path) -> Path:
    """Write a FusionResult to ``<base_dir>/<cycle_id>/fusion_result.json``.

    Returns:
        Path of the written file.
    """
    cycle_dir = ensure_output_dir(base_dir, result.cycle_id or "unnamed")
    out_path = cycle_dir / "fusion_result.json"
    save_json(result, out_path)
    logger.info("Fusion result written to %s", out_path)
    return out_path
