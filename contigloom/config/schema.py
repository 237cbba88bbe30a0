"""
ContigLoom v0.1.0

Configuration schema for ContigLoom.

Defines the settings file layout with defaults and validation. Command-line
flags override these values before they are frozen into a PipelineConfig.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..errors import ConfigValidationError


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # External Tools
    # ========================================================================
    'tools': {
        'trimmer': {
            'executable': 'trimmomatic',
            'quality': 10,  # LEADING/TRAILING quality threshold
        },
        'kmer_profiler': {
            'executable': 'kmergenie',
        },
        'assembler': {
            'executable': 'spades.py',
            'memory_gb': 16,
        },
        'tiler': {
            'executable': 'ragtag.py',
        },
    },

    # ========================================================================
    # Read Profiling / K-mer Range
    # ========================================================================
    'profiling': {
        'sample_size': 100000,  # FASTQ records sampled for the length histogram
        'min_read_length': 31,  # Also the lower bound of the k-mer range
        'max_kmer': 127,  # Upper bound of the k-mer range
    },

    # ========================================================================
    # Hardware
    # ========================================================================
    'hardware': {
        'threads': 8,
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': 'contigloom.log',
        },
    },

    # ========================================================================
    # Intermediate Cleanup
    # ========================================================================
    'cleanup': {
        # Directories removed after assembly (K<digits> per-k folders always go)
        'directories': [
            'tmp', 'misc', 'corrected', 'split_input',
            'pipeline_state', 'mismatch_corrector',
        ],
        # Glob patterns for intermediate files
        'patterns': [
            '*.fastg', '*.gfa', '*.paths',
            'contigs.fasta', 'before_rr.fasta',
            'params.txt', 'dataset.info', 'input_dataset.yaml',
            'run_spades.sh', 'run_spades.yaml',
            '*.histo', '*_report.html', '*.pdf',
        ],
    },
}

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        ConfigValidationError: If the file is missing or is not valid YAML
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigValidationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Invalid YAML in config file {config_path}: {e}"
            )

        if user_config is not None and not isinstance(user_config, dict):
            raise ConfigValidationError(
                f"Config file {config_path} must contain a mapping at top level"
            )

        # Deep merge user config into defaults
        if user_config:
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path):
    """
    Save the default configuration as a YAML template.

    Args:
        output_path: Output file path
    """
    with open(output_path, 'w') as f:
        yaml.dump(copy.deepcopy(DEFAULT_CONFIG), f, default_flow_style=False, sort_keys=False)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _section(parent: Dict[str, Any], key: str, label: str, errors: List[str]) -> Dict[str, Any]:
    """Return parent[key] if it is a mapping; otherwise record an error and return {}."""
    value = parent.get(key, {})
    if not isinstance(value, dict):
        errors.append(f"{label} must be a mapping, got {type(value).__name__}")
        return {}
    return value


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Tool executables
    tools = _section(config, 'tools', 'tools', errors)
    tool_sections = {
        role: _section(tools, role, f"tools.{role}", errors)
        for role in ['trimmer', 'kmer_profiler', 'assembler', 'tiler']
    }
    for role, section in tool_sections.items():
        executable = section.get('executable')
        if not executable or not isinstance(executable, str):
            errors.append(f"tools.{role}.executable must be a non-empty string")

    quality = tool_sections['trimmer'].get('quality')
    if not isinstance(quality, int) or isinstance(quality, bool) or quality < 0:
        errors.append("tools.trimmer.quality must be a non-negative integer")

    if not _is_positive_int(tool_sections['assembler'].get('memory_gb')):
        errors.append("tools.assembler.memory_gb must be a positive integer")

    # Profiling / k-mer range
    profiling = _section(config, 'profiling', 'profiling', errors)
    sample_size = profiling.get('sample_size')
    min_length = profiling.get('min_read_length')
    max_kmer = profiling.get('max_kmer')

    if not _is_positive_int(sample_size):
        errors.append("profiling.sample_size must be a positive integer")
    if not _is_positive_int(min_length):
        errors.append("profiling.min_read_length must be a positive integer")
    if not _is_positive_int(max_kmer):
        errors.append("profiling.max_kmer must be a positive integer")
    if _is_positive_int(min_length) and _is_positive_int(max_kmer) and min_length > max_kmer:
        errors.append(
            f"Invalid k-mer range: min_read_length ({min_length}) exceeds max_kmer ({max_kmer})"
        )

    # Hardware
    hardware = _section(config, 'hardware', 'hardware', errors)
    if not _is_positive_int(hardware.get('threads')):
        errors.append("hardware.threads must be a positive integer")

    # Logging
    output = _section(config, 'output', 'output', errors)
    logging_cfg = _section(output, 'logging', 'output.logging', errors)
    if logging_cfg.get('level') not in VALID_LOG_LEVELS:
        errors.append(
            f"output.logging.level must be one of {', '.join(VALID_LOG_LEVELS)}"
        )
    if not logging_cfg.get('log_file'):
        errors.append("output.logging.log_file must be set")

    # Cleanup
    cleanup = _section(config, 'cleanup', 'cleanup', errors)
    for key in ['directories', 'patterns']:
        if not isinstance(cleanup.get(key, []), list):
            errors.append(f"cleanup.{key} must be a list")

    return errors
