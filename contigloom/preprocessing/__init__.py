"""
Preprocessing module for ContigLoom.

This module provides the decision-making steps ahead of assembly:
- Read-length profiling from a bounded FASTQ sample
- K-mer optimization table parsing and k selection
"""

from .read_length_module import (
    ReadLengthHistogram,
    build_read_length_histogram,
    histogram_from_files,
    write_histogram_table,
    read_histogram_table,
    kmer_upper_bound,
)
from .kmer_selection_module import (
    KmerOptimizationRow,
    parse_kmer_table,
    select_optimal_kmer_row,
)

__all__ = [
    "ReadLengthHistogram",
    "build_read_length_histogram",
    "histogram_from_files",
    "write_histogram_table",
    "read_histogram_table",
    "kmer_upper_bound",
    "KmerOptimizationRow",
    "parse_kmer_table",
    "select_optimal_kmer_row",
]
