#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Assembly QC metrics.

Extracts the contig count, total basepairs, mismatch correction count and
average coverage from the assembler's log and contig FASTA, and writes the
run summary JSON alongside the final contigs.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import json
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from ..errors import MalformedOutputError

logger = logging.getLogger(__name__)

TOTAL_MARKER = 'TOTAL'
COVERAGE_MARKER = 'Average coverage'

_NUMBER = re.compile(r'[-+]?[0-9]+(?:\.[0-9]+)?(?:[eE][-+]?[0-9]+)?')


@dataclass
class AssemblyMetrics:
    """QC values reported after assembly."""
    contigs: int
    average_coverage: float
    corrections: int
    total_bp: int

    def summary(self) -> str:
        """Return human-readable summary."""
        return (
            f"Assembly Summary:\n"
            f"  Contigs: {self.contigs:,}\n"
            f"  Total length: {self.total_bp:,} bp\n"
            f"  Average coverage: {self.average_coverage:.1f}x\n"
            f"  Mismatch corrections: {self.corrections:,}"
        )


def _count_corrections(log_text: str) -> int:
    """Last number on the final line that begins with TOTAL."""
    total_lines = [line for line in log_text.splitlines()
                   if line.lstrip().startswith(TOTAL_MARKER)]
    if not total_lines:
        raise MalformedOutputError("assembly log", f"no line beginning with '{TOTAL_MARKER}'")

    remainder = total_lines[-1].lstrip()[len(TOTAL_MARKER):]
    numbers = re.findall(r'\d+', remainder)
    if not numbers:
        raise MalformedOutputError("assembly log", f"'{TOTAL_MARKER}' line has no count")
    return int(numbers[-1])


def _average_coverage(log_text: str) -> float:
    """Number following the last 'Average coverage' marker."""
    position = log_text.rfind(COVERAGE_MARKER)
    if position < 0:
        raise MalformedOutputError("assembly log", f"no '{COVERAGE_MARKER}' line")

    tail = log_text[position + len(COVERAGE_MARKER):].splitlines()
    match = _NUMBER.search(tail[0]) if tail else None
    if match is None:
        raise MalformedOutputError("assembly log", f"'{COVERAGE_MARKER}' has no value")
    return float(match.group(0))


def extract_assembly_metrics(log_text: str, contig_fasta_text: str) -> AssemblyMetrics:
    """
    Compute AssemblyMetrics from the canonical log and contig FASTA.

    Args:
        log_text: Assembler run log
        contig_fasta_text: Contents of the contig FASTA

    Returns:
        AssemblyMetrics

    Raises:
        MalformedOutputError: If a log marker is missing or the FASTA has no header
    """
    contigs = 0
    total_bp = 0
    for line in contig_fasta_text.splitlines():
        if line.startswith('>'):
            contigs += 1
        else:
            total_bp += len(line)

    if contigs == 0:
        raise MalformedOutputError("contig FASTA", "no header lines")

    return AssemblyMetrics(
        contigs=contigs,
        average_coverage=_average_coverage(log_text),
        corrections=_count_corrections(log_text),
        total_bp=total_bp,
    )


def compute_length_stats(lengths: Sequence[int]) -> Dict[str, int]:
    """
    N50/L50 and extremes of a set of contig lengths.

    Returns zeros for an empty input.
    """
    if len(lengths) == 0:
        return {'n50': 0, 'l50': 0, 'longest': 0, 'shortest': 0}

    sorted_lengths = np.sort(np.asarray(lengths, dtype=np.int64))[::-1]
    cumulative = np.cumsum(sorted_lengths)
    index = int(np.searchsorted(cumulative, cumulative[-1] / 2.0))

    return {
        'n50': int(sorted_lengths[index]),
        'l50': index + 1,
        'longest': int(sorted_lengths[0]),
        'shortest': int(sorted_lengths[-1]),
    }


def write_stats_report(
    output_path: Union[str, Path],
    metrics: AssemblyMetrics,
    contig_lengths: Optional[List[int]] = None,
    decisions: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Write metrics, length statistics and run decisions to JSON.

    Returns:
        The dictionary that was written
    """
    output_path = Path(output_path)
    report: Dict[str, Any] = {'metrics': asdict(metrics)}
    report['lengths'] = compute_length_stats(contig_lengths or [])
    report['decisions'] = decisions or {}

    with open(output_path, 'w') as f:
        json.dump(report, f, indent=2)

    logger.info(f"✓ Assembly statistics saved: {output_path}")
    return report


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
