#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Sequence file helpers for ContigLoom.

- gzip-transparent text opening of read files
- streaming of FASTQ sequence lines in four-line records
- FASTA contig length collection (Biopython)
- file-of-file-names manifests for the k-mer profiler
"""

import gzip
import io
from pathlib import Path
from typing import Iterable, Iterator, List, TextIO, Union

from Bio import SeqIO

GZIP_MAGIC = b'\x1f\x8b'


def is_gzipped(path: Union[str, Path]) -> bool:
    """Check the first two bytes for the gzip signature."""
    with open(path, 'rb') as handle:
        return handle.read(2) == GZIP_MAGIC


def open_text(path: Union[str, Path]) -> TextIO:
    """
    Open a possibly compressed file for text reading.

    Compression is detected from the content, not the file extension, so
    symlinks with canonical names behave like their targets.
    """
    path = Path(path)
    if is_gzipped(path):
        return io.TextIOWrapper(gzip.open(path, 'rb'), encoding='ascii', errors='replace')
    return open(path, 'r', encoding='ascii', errors='replace')


def iter_fastq_sequences(handle: TextIO) -> Iterator[str]:
    """
    Yield the sequence line of every four-line FASTQ record.

    Only the second line of each record contributes; header, separator and
    quality lines are skipped. A truncated trailing record still yields its
    sequence if that line was present.
    """
    for index, line in enumerate(handle):
        if index % 4 == 1:
            yield line.rstrip('\r\n')


def iter_concatenated_sequences(handles: Iterable[TextIO]) -> Iterator[str]:
    """Yield FASTQ sequence lines from several streams, one after another."""
    for handle in handles:
        yield from iter_fastq_sequences(handle)


def contig_lengths(fasta_path: Union[str, Path]) -> List[int]:
    """Return the length of every record in a FASTA file."""
    with open(fasta_path, 'r') as handle:
        return [len(record.seq) for record in SeqIO.parse(handle, 'fasta')]


def write_fofn(paths: Iterable[Union[str, Path]], output_path: Union[str, Path]) -> Path:
    """
    Write a file-of-file-names manifest, one absolute path per line.

    Symlinks are kept as given so the profiler reads through them.
    """
    output_path = Path(output_path)
    with open(output_path, 'w') as handle:
        for path in paths:
            handle.write(f"{Path(path).absolute()}\n")
    return output_path
