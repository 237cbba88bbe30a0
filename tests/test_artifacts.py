#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Tests for output directory management.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest

from contigloom.config import DEFAULT_CONFIG
from contigloom.errors import MissingOutputError, OutputExistsError
from contigloom.utils import ArtifactManager
from conftest import write_fastq, SCAFFOLDS, SPADES_LOG, KMER_TABLE


@pytest.fixture
def manager(temp_output_dir):
    cleanup = DEFAULT_CONFIG['cleanup']
    return ArtifactManager(
        temp_output_dir / "run",
        cleanup_dirs=cleanup['directories'],
        cleanup_patterns=cleanup['patterns'],
    )


class TestPrepare:

    def test_creates_directory(self, manager):
        assert manager.prepare(force=False).is_dir()

    def test_refuses_existing_without_force(self, manager):
        manager.output_dir.mkdir()
        with pytest.raises(OutputExistsError):
            manager.prepare(force=False)

    def test_force_keeps_existing_files(self, manager):
        manager.output_dir.mkdir()
        (manager.output_dir / "keep.txt").write_text("x")

        manager.prepare(force=True)

        assert (manager.output_dir / "keep.txt").exists()


class TestReadLinks:
    """Untrimmed reads are linked, never copied."""

    def test_links_keep_gzip_suffix(self, manager, paired_reads):
        manager.prepare(force=False)
        read1, read2 = paired_reads

        links = manager.link_reads(read1, read2)

        assert [link.name for link in links] == ['R1.fq.gz', 'R2.fq.gz']
        for link, target in zip(links, paired_reads):
            assert link.is_symlink()
            assert link.resolve() == target.resolve()

    def test_plain_reads_get_plain_suffix(self, manager, temp_output_dir):
        manager.prepare(force=False)
        read1 = write_fastq(temp_output_dir / "a.fastq", [50])
        read2 = write_fastq(temp_output_dir / "b.fastq", [50])

        links = manager.link_reads(read1, read2)

        assert [link.name for link in links] == ['R1.fq', 'R2.fq']

    def test_relinking_replaces_previous_links(self, manager, paired_reads):
        manager.prepare(force=False)
        manager.link_reads(*paired_reads)
        links = manager.link_reads(*paired_reads)

        assert all(link.is_symlink() for link in links)

    def test_trimmed_names(self, manager):
        names = [p.name for p in manager.clipped_read_paths(trimmed=True)]
        assert names == ['R1.fq.gz', 'R2.fq.gz']


class TestCanonicalize:

    def _tool_outputs(self, manager):
        manager.prepare(force=False)
        out = manager.output_dir
        (out / "scaffolds.fasta").write_text(SCAFFOLDS)
        (out / "spades.log").write_text(SPADES_LOG)
        (out / "kmergenie.dat").write_text(KMER_TABLE)

    def test_renames(self, manager):
        self._tool_outputs(manager)

        renamed = manager.canonicalize('post_process')

        assert set(renamed) == {'contigs.fa', 'assembly.log', 'kmers.tab'}
        assert (manager.output_dir / "contigs.fa").read_text() == SCAFFOLDS
        assert not (manager.output_dir / "scaffolds.fasta").exists()

    def test_missing_source(self, manager):
        self._tool_outputs(manager)
        (manager.output_dir / "spades.log").unlink()

        with pytest.raises(MissingOutputError) as excinfo:
            manager.canonicalize('post_process')
        assert excinfo.value.stage == 'post_process'


class TestPurge:

    def _populate(self, manager):
        manager.prepare(force=False)
        out = manager.output_dir
        for name in ['K21', 'K33', 'tmp', 'misc', 'corrected', 'Keep']:
            (out / name).mkdir()
            (out / name / "data").write_text("x")
        for name in ['assembly_graph.fastg', 'graph.gfa', 'contigs.fasta', 'params.txt',
                     'kmergenie-k31.histo', 'kmergenie_report.html',
                     'contigs.fa', 'assembly.log', 'kmers.tab', 'readlengths.tab']:
            (out / name).write_text("x")

    def test_removes_intermediates_only(self, manager):
        self._populate(manager)

        manager.purge_intermediates()

        remaining = {p.name for p in manager.output_dir.iterdir()}
        assert remaining == {'Keep', 'contigs.fa', 'assembly.log', 'kmers.tab', 'readlengths.tab'}

    def test_idempotent(self, manager):
        self._populate(manager)

        manager.purge_intermediates()
        assert manager.purge_intermediates() == []

    def test_missing_directory(self, manager):
        assert manager.purge_intermediates() == []

    def test_replace_contigs(self, manager):
        manager.prepare(force=False)
        (manager.output_dir / "contigs.fa").write_text(SCAFFOLDS)
        tiled = manager.output_dir / "ragtag" / "ragtag.scaffold.fasta"
        tiled.parent.mkdir()
        tiled.write_text(">tiled\nACGT\n")

        manager.replace_contigs(tiled)

        assert (manager.output_dir / "contigs.fa").read_text() == ">tiled\nACGT\n"
        assert not (manager.output_dir / "ragtag").exists()


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
