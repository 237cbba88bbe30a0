#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

K-mer optimization table parsing and selection.

The k-mer profiler reports, for every k it tested, the number of genomic
k-mers (used as the genome size estimate) and the best abundance cutoff.
The row with the largest genome size estimate supplies the assembler's k.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..errors import MalformedOutputError

logger = logging.getLogger(__name__)

KMER_TABLE_COLUMNS = ('k', 'genomic_kmers', 'best_cutoff')


@dataclass(frozen=True)
class KmerOptimizationRow:
    """One tested k-mer size."""
    k: int                  # K-mer size tested
    genome_size: int        # Estimated number of genomic k-mers
    coverage_cutoff: int    # Abundance below which k-mers are treated as errors

    def to_dict(self) -> Dict[str, int]:
        return {
            'k': self.k,
            'genome_size': self.genome_size,
            'coverage_cutoff': self.coverage_cutoff,
        }


def parse_kmer_table(text: str) -> List[KmerOptimizationRow]:
    """
    Parse the profiler's per-k statistics table.

    Schema: whitespace-separated columns `k genomic_kmers best_cutoff`, one
    row per k, optionally preceded by a header line starting with `k`. Row
    order is preserved.

    Raises:
        MalformedOutputError: Wrong column count, non-integer value, or no rows
    """
    rows: List[KmerOptimizationRow] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields or fields[0].startswith('#'):
            continue
        if fields[0] == 'k':
            continue  # header
        if len(fields) != len(KMER_TABLE_COLUMNS):
            raise MalformedOutputError(
                "k-mer table",
                f"line {line_number} has {len(fields)} columns, expected {len(KMER_TABLE_COLUMNS)}",
            )
        try:
            k, genome_size, cutoff = (int(value) for value in fields)
        except ValueError:
            raise MalformedOutputError(
                "k-mer table", f"line {line_number} is not numeric: {line.strip()!r}"
            )
        rows.append(KmerOptimizationRow(k=k, genome_size=genome_size, coverage_cutoff=cutoff))

    if not rows:
        raise MalformedOutputError("k-mer table", "no rows found")
    return rows


def select_optimal_kmer_row(rows: Sequence[KmerOptimizationRow]) -> KmerOptimizationRow:
    """
    Pick the row with the largest genome size estimate.

    Ties keep the first row in table order, regardless of k.

    Raises:
        MalformedOutputError: If `rows` is empty
    """
    if not rows:
        raise MalformedOutputError("k-mer table", "no rows to select from")

    best = rows[0]
    for row in rows[1:]:
        if row.genome_size > best.genome_size:
            best = row

    logger.debug(f"Selected k={best.k} out of {len(rows)} tested sizes")
    return best


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
