#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Immutable run configuration.

A PipelineConfig is built once from the command line and the settings file,
validated, and then handed unchanged to every stage.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import InvalidArgumentError, ConfigValidationError, OutputExistsError
from .schema import load_config, validate_config

_THREADS_LITERAL = re.compile(r'^[0-9]+$')


@dataclass(frozen=True)
class ToolSettings:
    """Executable names and fixed parameters for the external tools."""
    trimmer: str = 'trimmomatic'
    kmer_profiler: str = 'kmergenie'
    assembler: str = 'spades.py'
    tiler: str = 'ragtag.py'
    trim_quality: int = 10
    memory_gb: int = 16


@dataclass(frozen=True)
class PipelineConfig:
    """
    Validated, read-only configuration for a single pipeline run.

    Attributes:
        output_dir: Directory receiving every artifact
        read1: Forward reads (FASTQ, optionally gzipped)
        read2: Reverse reads (FASTQ, optionally gzipped)
        threads: Thread count passed to the external tools
        force: Allow reuse of an existing output directory
        trim: Run the read trimmer before profiling
        reference: Optional reference FASTA for contig tiling
        min_read_length: Shortest usable read, also the lowest k tested
        max_kmer: Highest k the profiler may test
        sample_size: FASTQ records sampled for the length histogram
    """
    output_dir: Path
    read1: Path
    read2: Path
    threads: int = 8
    force: bool = False
    trim: bool = True
    reference: Optional[Path] = None
    min_read_length: int = 31
    max_kmer: int = 127
    sample_size: int = 100000
    tools: ToolSettings = field(default_factory=ToolSettings)
    log_level: str = 'INFO'
    log_file: str = 'contigloom.log'
    cleanup_dirs: Tuple[str, ...] = ()
    cleanup_patterns: Tuple[str, ...] = ()

    @property
    def executables(self) -> Dict[str, str]:
        """Tool role -> executable needed by this run."""
        needed = {}
        if self.trim:
            needed['trimmer'] = self.tools.trimmer
        needed['kmer_profiler'] = self.tools.kmer_profiler
        needed['assembler'] = self.tools.assembler
        if self.reference is not None:
            needed['tiler'] = self.tools.tiler
        return needed

    def validate(self):
        """
        Check the run invariants.

        Raises:
            InvalidArgumentError: Bad thread count, unreadable input, bad range
            OutputExistsError: Output directory present without force
        """
        if not isinstance(self.threads, int) or isinstance(self.threads, bool) or self.threads < 1:
            raise InvalidArgumentError(f"Thread count must be a positive integer, got {self.threads!r}")

        for label, path in [('read1', self.read1), ('read2', self.read2)]:
            _require_readable(path, label)
        if self.reference is not None:
            _require_readable(self.reference, 'reference')

        if self.min_read_length < 1 or self.min_read_length > self.max_kmer:
            raise InvalidArgumentError(
                f"Invalid k-mer range [{self.min_read_length}, {self.max_kmer}]"
            )
        if self.sample_size < 1:
            raise InvalidArgumentError(f"Sample size must be positive, got {self.sample_size}")

        if self.output_dir.exists() and not self.force:
            raise OutputExistsError(self.output_dir)
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise InvalidArgumentError(f"Output path exists and is not a directory: {self.output_dir}")


def _require_readable(path: Path, label: str):
    if not path.is_file() or not os.access(path, os.R_OK):
        raise InvalidArgumentError(f"Cannot read {label} file: {path}")


def parse_threads(value: Union[str, int, None]) -> int:
    """
    Parse a thread count given as a positive integer literal.

    Raises:
        InvalidArgumentError: For anything but digits forming a value >= 1
    """
    if isinstance(value, int) and not isinstance(value, bool):
        text = str(value)
    elif isinstance(value, str):
        text = value
    else:
        raise InvalidArgumentError(f"Thread count must be a positive integer, got {value!r}")

    if not _THREADS_LITERAL.match(text) or int(text) < 1:
        raise InvalidArgumentError(f"Thread count must be a positive integer, got {value!r}")
    return int(text)


def build_pipeline_config(
    output_dir: Union[str, Path, None],
    read1: Union[str, Path, None],
    read2: Union[str, Path, None],
    threads: Union[str, int, None] = None,
    force: bool = False,
    trim: bool = True,
    reference: Union[str, Path, None] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> PipelineConfig:
    """
    Merge command-line values over the settings file and validate.

    Args:
        output_dir: Output directory (positional)
        read1: Forward reads (positional)
        read2: Reverse reads (positional)
        threads: Thread count literal; None falls back to the settings value
        force: Overwrite an existing output directory
        trim: Run the trimmer
        reference: Optional reference FASTA
        settings: Settings dictionary from load_config (None = defaults)

    Returns:
        Validated PipelineConfig

    Raises:
        InvalidArgumentError: Missing/invalid arguments or settings
        OutputExistsError: Output directory exists without force
    """
    missing = [name for name, value in
               [('outdir', output_dir), ('read1', read1), ('read2', read2)] if not value]
    if missing:
        raise InvalidArgumentError(f"Missing required argument(s): {', '.join(missing)}")

    if settings is None:
        settings = load_config(None)
    errors = validate_config(settings)
    if errors:
        raise ConfigValidationError("; ".join(errors))

    thread_count = parse_threads(threads if threads is not None else settings['hardware']['threads'])

    tools_cfg = settings['tools']
    profiling = settings['profiling']
    cleanup = settings.get('cleanup', {})

    # Tools run with the output directory as cwd
    config = PipelineConfig(
        output_dir=Path(output_dir).absolute(),
        read1=Path(read1).absolute(),
        read2=Path(read2).absolute(),
        threads=thread_count,
        force=force,
        trim=trim,
        reference=Path(reference).absolute() if reference else None,
        min_read_length=profiling['min_read_length'],
        max_kmer=profiling['max_kmer'],
        sample_size=profiling['sample_size'],
        tools=ToolSettings(
            trimmer=tools_cfg['trimmer']['executable'],
            kmer_profiler=tools_cfg['kmer_profiler']['executable'],
            assembler=tools_cfg['assembler']['executable'],
            tiler=tools_cfg['tiler']['executable'],
            trim_quality=tools_cfg['trimmer']['quality'],
            memory_gb=tools_cfg['assembler']['memory_gb'],
        ),
        log_level=settings['output']['logging']['level'],
        log_file=settings['output']['logging']['log_file'],
        cleanup_dirs=tuple(cleanup.get('directories', [])),
        cleanup_patterns=tuple(cleanup.get('patterns', [])),
    )
    config.validate()
    return config


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
