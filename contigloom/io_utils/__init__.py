"""
ContigLoom v0.1.0

I/O helpers for read and contig files.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .fastx import (
    is_gzipped,
    open_text,
    iter_fastq_sequences,
    iter_concatenated_sequences,
    contig_lengths,
    write_fofn,
)

__all__ = [
    "is_gzipped",
    "open_text",
    "iter_fastq_sequences",
    "iter_concatenated_sequences",
    "contig_lengths",
    "write_fofn",
]
