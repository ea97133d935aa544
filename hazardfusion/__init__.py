"""HazardFusion — coastal hazard report fusion engine.

Public API surface:
    - FusionConfig: Runtime configuration
    - FusionOrchestrator: Runs fusion cycles against a repository
    - run_fusion: Convenience entry point for a single cycle
"""

__version__ = "1.0.0"
__author__ = "HazardFusion Contributors"

from config.settings import FusionConfig
from hazardfusion.pipeline import FusionOrchestrator, run_fusion

__all__ = [
    "__version__",
    "FusionConfig",
    "FusionOrchestrator",
    "run_fusion",
]
