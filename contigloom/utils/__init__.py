"""
Utilities module for ContigLoom.

This module provides core utilities for the assembly pipeline:
- Pipeline orchestration (fixed, fail-fast stage sequence)
- Output directory and artifact management
"""

from .pipeline import (
    PipelineOrchestrator,
    PipelineResult,
    FinalArtifactPaths,
    Stage,
    StageResult,
    run,
)
from .artifacts import ArtifactManager

__all__ = [
    # Pipeline
    "PipelineOrchestrator",
    "PipelineResult",
    "FinalArtifactPaths",
    "Stage",
    "StageResult",
    "run",
    # Artifacts
    "ArtifactManager",
]
