"""
ContigLoom v0.1.0

Configuration management for ContigLoom.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .schema import DEFAULT_CONFIG, load_config, save_config_template, validate_config
from .pipeline_config import PipelineConfig, ToolSettings, build_pipeline_config, parse_threads

__all__ = [
    "DEFAULT_CONFIG",
    "load_config",
    "save_config_template",
    "validate_config",
    "PipelineConfig",
    "ToolSettings",
    "build_pipeline_config",
    "parse_threads",
]
