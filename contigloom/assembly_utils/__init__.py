"""
Assembly utilities for ContigLoom.

Post-assembly QC: metrics extraction from assembler output, contig length
statistics, and the JSON run summary.
"""

from .assembly_metrics import (
    AssemblyMetrics,
    extract_assembly_metrics,
    compute_length_stats,
    write_stats_report,
)

__all__ = [
    "AssemblyMetrics",
    "extract_assembly_metrics",
    "compute_length_stats",
    "write_stats_report",
]
