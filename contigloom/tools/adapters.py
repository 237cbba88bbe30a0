#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Adapters for the four external collaborators:

- Trimmomatic (paired-end quality trimming)
- KmerGenie (k-mer range profiling)
- SPAdes (assembly, assembler-only with mismatch correction)
- RagTag (reference-guided contig ordering and orientation)

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from pathlib import Path

from .base import ExternalTool, ToolInvocation

# Files written by each tool, relative to its output location
TRIMMED_R1 = 'R1.fq.gz'
TRIMMED_R2 = 'R2.fq.gz'
UNPAIRED_R1 = 'R1.unpaired.fq.gz'
UNPAIRED_R2 = 'R2.unpaired.fq.gz'

KMERGENIE_PREFIX = 'kmergenie'
KMERGENIE_TABLE = f'{KMERGENIE_PREFIX}.dat'

SPADES_SCAFFOLDS = 'scaffolds.fasta'
SPADES_LOG = 'spades.log'

RAGTAG_DIR = 'ragtag'
RAGTAG_SCAFFOLDS = 'ragtag.scaffold.fasta'


class ReadTrimmer(ExternalTool):
    """Trimmomatic in PE mode with leading/trailing quality and minimum length."""

    name = "trimmer"

    def build_invocation(self, read1: Path, read2: Path, output_dir: Path,
                         quality: int, min_length: int, threads: int) -> ToolInvocation:
        out_r1 = output_dir / TRIMMED_R1
        out_r2 = output_dir / TRIMMED_R2
        argv = [
            self.executable, 'PE',
            '-threads', str(threads),
            '-phred33',
            str(read1), str(read2),
            str(out_r1), str(output_dir / UNPAIRED_R1),
            str(out_r2), str(output_dir / UNPAIRED_R2),
            f'LEADING:{quality}',
            f'TRAILING:{quality}',
            f'MINLEN:{min_length}',
        ]
        return ToolInvocation(
            tool=self.name,
            argv=argv,
            expected_outputs=[out_r1, out_r2],
            cwd=output_dir,
        )


class KmerProfiler(ExternalTool):
    """KmerGenie over a closed [min_k, max_k] range."""

    name = "kmer_profiler"

    def build_invocation(self, manifest: Path, output_dir: Path, min_k: int,
                         max_k: int, threads: int, log_path: Path) -> ToolInvocation:
        argv = [
            self.executable, str(manifest),
            '-l', str(min_k),
            '-k', str(max_k),
            '-t', str(threads),
            '-o', KMERGENIE_PREFIX,
        ]
        return ToolInvocation(
            tool=self.name,
            argv=argv,
            expected_outputs=[output_dir / KMERGENIE_TABLE],
            cwd=output_dir,
            log_path=log_path,
        )


class Assembler(ExternalTool):
    """SPAdes, assembler-only with --careful mismatch correction."""

    name = "assembler"

    def build_invocation(self, read1: Path, read2: Path, output_dir: Path, k: int,
                         threads: int, memory_gb: int) -> ToolInvocation:
        argv = [
            self.executable,
            '--only-assembler',
            '--careful',
            '-k', str(k),
            '-t', str(threads),
            '-m', str(memory_gb),
            '-1', str(read1),
            '-2', str(read2),
            '-o', str(output_dir),
        ]
        return ToolInvocation(
            tool=self.name,
            argv=argv,
            expected_outputs=[output_dir / SPADES_SCAFFOLDS, output_dir / SPADES_LOG],
            cwd=output_dir,
        )


class ReferenceTiler(ExternalTool):
    """RagTag scaffold: order and orient contigs against a reference."""

    name = "tiler"

    def build_invocation(self, reference: Path, contigs: Path, output_dir: Path,
                         threads: int) -> ToolInvocation:
        work_dir = output_dir / RAGTAG_DIR
        argv = [
            self.executable, 'scaffold',
            '-t', str(threads),
            '-o', str(work_dir),
            str(reference), str(contigs),
        ]
        return ToolInvocation(
            tool=self.name,
            argv=argv,
            expected_outputs=[work_dir / RAGTAG_SCAFFOLDS],
            cwd=output_dir,
        )


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
