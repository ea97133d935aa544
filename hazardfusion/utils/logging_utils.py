"""Logging utilities for HazardFusion.

Provides YAML-based logging configuration and a cycle-aware logger adapter.
All loggers are namespaced under 'hazardfusion'.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, MutableMapping, Optional

import yaml


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging from the YAML configuration file.

    Falls back to basicConfig if the YAML file is not found.

    Args:
        config_path: Path to logging.yaml (defaults to config/logging.yaml).
        log_level: Override log level (e.g., "DEBUG", "INFO", "WARNING").
        log_file: Override the log file path.
    """
    if config_path is None:
        config_path = str(Path(__file__).parent.parent.parent / "config" / "logging.yaml")

    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)

        if log_file and "handlers" in cfg:
            for handler_cfg in cfg["handlers"].values():
                if handler_cfg.get("class") == "logging.FileHandler":
                    handler_cfg["filename"] = log_file

        if log_level and "loggers" in cfg:
            for logger_cfg in cfg["loggers"].values():
                logger_cfg["level"] = log_level.upper()
            if "root" in cfg:
                cfg["root"]["level"] = log_level.upper()

        logging.config.dictConfig(cfg)
    else:
        logging.basicConfig(
            level=getattr(logging, (log_level or "INFO").upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def get_logger(name: str) -> logging.Logger:
    """Get a namespaced logger under 'hazardfusion'.

    Args:
        name: Module or component name (e.g., "analysis.cluster_engine").

    Returns:
        Logger instance with full 'hazardfusion.<name>' namespace.
    """
    if name.startswith("hazardfusion"):
        return logging.getLogger(name)
    return logging.getLogger(f"hazardfusion.{name}")


class CycleContextAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes every record with the fusion cycle id.

    Usage:
        logger = get_cycle_logger("pipeline", cycle_id="c-20240115T120000-1a2b")
        logger.info("Clustering 12 reports")
        # Output: [INFO] hazardfusion.pipeline: [c-20240115T120000-1a2b] Clustering 12 reports
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        cycle_id = self.extra.get("cycle_id", "unknown")
        return f"[{cycle_id}] {msg}", kwargs


def get_cycle_logger(name: str, cycle_id: str) -> CycleContextAdapter:
    """Get a cycle-context-aware logger adapter.

    Args:
        name: Module or component name.
        cycle_id: Fusion cycle identifier.

    Returns:
        LoggerAdapter that prefixes all messages with [cycle_id].
    """
    return CycleContextAdapter(get_logger(name), {"cycle_id": cycle_id})
