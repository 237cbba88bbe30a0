#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Read-length profiling.

Builds a read-length histogram from a bounded sample of FASTQ records and
serialises it as a two-column table sorted by descending length. The longest
sampled read decides whether assembly is worth attempting and caps the k-mer
range handed to the profiler.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import zlib
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, TextIO, Tuple, Union

from ..errors import MalformedOutputError
from ..io_utils import open_text, iter_concatenated_sequences

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_CAP = 100000


@dataclass
class ReadLengthHistogram:
    """Read length -> number of sampled reads with that length."""
    counts: Dict[int, int] = field(default_factory=dict)

    @property
    def longest(self) -> int:
        """Maximum observed read length."""
        if not self.counts:
            raise MalformedOutputError("read sample", "no FASTQ records were sampled")
        return max(self.counts)

    @property
    def total_reads(self) -> int:
        return sum(self.counts.values())

    def rows(self) -> List[Tuple[int, int]]:
        """(length, count) pairs sorted by descending length."""
        return sorted(self.counts.items(), key=lambda item: item[0], reverse=True)


def build_read_length_histogram(
    streams: Iterable[TextIO],
    sample_cap: int = DEFAULT_SAMPLE_CAP,
) -> ReadLengthHistogram:
    """
    Build a histogram from the first `sample_cap` FASTQ records.

    The streams are read as one concatenation, so with the default cap a
    large R1 file alone fills the sample.

    Args:
        streams: Open text streams of decompressed FASTQ
        sample_cap: Maximum number of records to inspect

    Returns:
        ReadLengthHistogram

    Raises:
        MalformedOutputError: If no record is available
    """
    counts: Counter = Counter()
    sampled = 0

    for sequence in iter_concatenated_sequences(streams):
        if sampled >= sample_cap:
            break
        length = len(sequence)
        if length > 0:
            counts[length] += 1
        sampled += 1

    if not counts:
        raise MalformedOutputError("read sample", "no FASTQ records with a sequence were found")

    logger.debug(f"Sampled {sampled:,} records, {len(counts)} distinct lengths")
    return ReadLengthHistogram(counts=dict(counts))


def histogram_from_files(
    read_files: Sequence[Union[str, Path]],
    sample_cap: int = DEFAULT_SAMPLE_CAP,
) -> ReadLengthHistogram:
    """
    Open (gzip-transparent) and sample the given read files in order.

    Raises:
        MalformedOutputError: If a file is truncated, corrupt or unreadable
    """
    try:
        with ExitStack() as stack:
            streams = [stack.enter_context(open_text(path)) for path in read_files]
            return build_read_length_histogram(streams, sample_cap)
    except (EOFError, zlib.error, OSError) as e:
        names = ", ".join(str(path) for path in read_files)
        raise MalformedOutputError("read sample", f"cannot read {names}: {e}")


def write_histogram_table(histogram: ReadLengthHistogram, output_path: Union[str, Path]) -> Path:
    """Write `length<TAB>count` lines, longest first."""
    output_path = Path(output_path)
    with open(output_path, 'w') as handle:
        for length, count in histogram.rows():
            handle.write(f"{length}\t{count}\n")
    return output_path


def read_histogram_table(text: str) -> ReadLengthHistogram:
    """
    Parse a table written by write_histogram_table.

    Raises:
        MalformedOutputError: On rows that are not two positive integers
    """
    counts: Dict[int, int] = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise MalformedOutputError(
                "read-length table", f"line {line_number} has {len(fields)} columns, expected 2"
            )
        try:
            length, count = int(fields[0]), int(fields[1])
        except ValueError:
            raise MalformedOutputError(
                "read-length table", f"line {line_number} is not numeric: {line.strip()!r}"
            )
        if length < 1 or count < 0:
            raise MalformedOutputError(
                "read-length table", f"line {line_number} has out-of-range values"
            )
        counts[length] = counts.get(length, 0) + count

    if not counts:
        raise MalformedOutputError("read-length table", "no rows")
    return ReadLengthHistogram(counts=counts)


def kmer_upper_bound(longest: int, max_kmer: int = 127) -> int:
    """Highest k to test: the longest read, capped at `max_kmer`."""
    return min(longest, max_kmer)


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
