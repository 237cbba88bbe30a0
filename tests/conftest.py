#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Pytest configuration and shared fixtures.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import gzip
import pytest
from pathlib import Path
import tempfile
import shutil

from contigloom.config import build_pipeline_config
from contigloom.io_utils import open_text
from contigloom.tools import ToolRunner, ToolOutcome


KMER_TABLE = "k genomic_kmers best_cutoff\n31 4800 2\n41 5100 3\n51 5100 4\n61 4900 3\n"
SPADES_LOG = (
    "Command line: spades.py --only-assembler --careful\n"
    "== Running assembler: K41\n"
    "  0:00:01.000   Average coverage = 37.25\n"
    "== Running mismatch corrector\n"
    "TOTAL\t12\n"
    "SPAdes pipeline finished.\n"
)
SCAFFOLDS = ">NODE_1_length_60_cov_37.2\n" + "ACGT" * 15 + "\n>NODE_2_length_20_cov_30.1\n" + "GGCC" * 5 + "\n"
TILED = ">chr1_RagTag\n" + "ACGT" * 15 + "N" * 100 + "GGCC" * 5 + "\n"


def write_fastq(path, lengths, compress=False):
    """Write a FASTQ file with one record per requested read length."""
    records = []
    for i, length in enumerate(lengths):
        seq = ("ACGT" * (length // 4 + 1))[:length]
        records.append(f"@read{i}\n{seq}\n+\n{'I' * length}\n")
    text = "".join(records)
    path = Path(path)
    if compress:
        with gzip.open(path, 'wt') as f:
            f.write(text)
    else:
        path.write_text(text)
    return path


class FakeToolRunner(ToolRunner):
    """
    Stand-in for the external tools.

    Records every invocation and writes canned outputs where the real tool
    would. `missing` lists executables reported as absent, `fail` maps tool
    names to exit codes, and `silent` lists tools that exit 0 without
    writing anything.
    """

    def __init__(self, missing=(), fail=None, silent=(), kmer_table=KMER_TABLE,
                 trim_by=5):
        self.missing = set(missing)
        self.fail = dict(fail or {})
        self.silent = set(silent)
        self.kmer_table = kmer_table
        self.trim_by = trim_by
        self.invocations = []

    def which(self, executable):
        if executable in self.missing:
            return None
        return f"/usr/local/bin/{executable}"

    def calls(self, tool):
        return [inv for inv in self.invocations if inv.tool == tool]

    def run(self, invocation):
        self.invocations.append(invocation)
        if invocation.tool in self.fail:
            return ToolOutcome(returncode=self.fail[invocation.tool], detail="simulated failure")
        if invocation.tool in self.silent:
            return ToolOutcome(returncode=0)

        getattr(self, f"_{invocation.tool}")(invocation)
        return ToolOutcome(returncode=0)

    def _trimmer(self, invocation):
        argv = invocation.argv
        read1, read2 = Path(argv[5]), Path(argv[6])
        out1, unpaired1, out2, unpaired2 = (Path(p) for p in argv[7:11])
        for source, target in [(read1, out1), (read2, out2)]:
            with open_text(source) as handle:
                lines = handle.read().splitlines()
            with gzip.open(target, 'wt') as out:
                for i in range(0, len(lines) - 3, 4):
                    seq = lines[i + 1][:max(len(lines[i + 1]) - self.trim_by, 1)]
                    out.write(f"{lines[i]}\n{seq}\n+\n{'I' * len(seq)}\n")
        for path in (unpaired1, unpaired2):
            with gzip.open(path, 'wt') as out:
                out.write("")

    def _kmer_profiler(self, invocation):
        invocation.expected_outputs[0].write_text(self.kmer_table)
        (invocation.cwd / 'kmergenie-k31.histo').write_text("1 100\n")
        (invocation.cwd / 'kmergenie_report.html').write_text("<html></html>")
        with open(invocation.log_path, 'a') as log:
            log.write("running histogram estimation\n")

    def _assembler(self, invocation):
        out = invocation.cwd
        for name in ['K41', 'tmp', 'misc', 'corrected']:
            (out / name).mkdir(exist_ok=True)
            (out / name / 'data.bin').write_text("x")
        (out / 'assembly_graph.fastg').write_text("graph")
        (out / 'assembly_graph_with_scaffolds.gfa').write_text("graph")
        (out / 'contigs.fasta').write_text(SCAFFOLDS)
        (out / 'params.txt').write_text("params")
        (out / 'scaffolds.fasta').write_text(SCAFFOLDS)
        (out / 'spades.log').write_text(SPADES_LOG)

    def _tiler(self, invocation):
        target = invocation.expected_outputs[0]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(TILED)
        (target.parent / 'ragtag.scaffold.agp').write_text("agp")


@pytest.fixture
def temp_output_dir():
    """Create temporary working directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="contigloom_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def paired_reads(temp_output_dir):
    """Two gzipped FASTQ files with read lengths 40-100."""
    lengths = [40, 60, 80, 100, 100, 75]
    read1 = write_fastq(temp_output_dir / "sample_R1.fastq.gz", lengths, compress=True)
    read2 = write_fastq(temp_output_dir / "sample_R2.fastq.gz", lengths, compress=True)
    return read1, read2


@pytest.fixture
def reference_fasta(temp_output_dir):
    path = temp_output_dir / "reference.fa"
    path.write_text(">chr1\n" + "ACGT" * 50 + "\n")
    return path


@pytest.fixture
def fake_runner():
    return FakeToolRunner()


@pytest.fixture
def make_config(temp_output_dir, paired_reads):
    """Build a validated PipelineConfig pointing at `<tmp>/out`."""
    def _make(**kwargs):
        read1, read2 = paired_reads
        options = dict(threads=4, force=False, trim=False, reference=None)
        options.update(kwargs)
        return build_pipeline_config(temp_output_dir / "out", read1, read2, **options)
    return _make


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
