#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Tests for settings file handling and run configuration.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import dataclasses
from pathlib import Path

import pytest
import yaml

from contigloom.config import (
    DEFAULT_CONFIG,
    load_config,
    save_config_template,
    validate_config,
    parse_threads,
    build_pipeline_config,
)
from contigloom.errors import (
    ConfigValidationError,
    InvalidArgumentError,
    OutputExistsError,
)


class TestSettingsFile:
    """YAML settings loading and validation."""

    def test_defaults_are_valid(self):
        assert validate_config(load_config(None)) == []

    def test_defaults_not_shared(self):
        config = load_config(None)
        config['hardware']['threads'] = 99
        assert DEFAULT_CONFIG['hardware']['threads'] == 8

    def test_partial_override_merges(self, temp_output_dir):
        path = temp_output_dir / "settings.yaml"
        path.write_text("hardware:\n  threads: 2\ntools:\n  assembler:\n    memory_gb: 64\n")

        config = load_config(path)

        assert config['hardware']['threads'] == 2
        assert config['tools']['assembler']['memory_gb'] == 64
        assert config['tools']['assembler']['executable'] == 'spades.py'

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(ConfigValidationError):
            load_config(temp_output_dir / "absent.yaml")

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "broken.yaml"
        path.write_text("hardware: [threads\n")
        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_top_level_must_be_mapping(self, temp_output_dir):
        path = temp_output_dir / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_template_round_trips(self, temp_output_dir):
        path = temp_output_dir / "template.yaml"
        save_config_template(path)

        assert yaml.safe_load(path.read_text()) == DEFAULT_CONFIG

    @pytest.mark.parametrize("text,label", [
        ("tools: null\n", "tools"),
        ("profiling: 5\n", "profiling"),
        ("hardware: [1, 2]\n", "hardware"),
        ("output:\n  logging: verbose\n", "output.logging"),
        ("tools:\n  assembler: null\n", "tools.assembler"),
    ])
    def test_non_mapping_section(self, temp_output_dir, text, label):
        path = temp_output_dir / "settings.yaml"
        path.write_text(text)

        errors = validate_config(load_config(path))

        assert f"{label} must be a mapping" in "\n".join(errors)

    def test_validation_reports_each_problem(self):
        config = load_config(None)
        config['hardware']['threads'] = 0
        config['output']['logging']['level'] = 'LOUD'
        config['profiling']['min_read_length'] = 200

        errors = validate_config(config)

        assert any('hardware.threads' in e for e in errors)
        assert any('output.logging.level' in e for e in errors)
        assert any('k-mer range' in e for e in errors)


class TestParseThreads:
    """Thread count literals."""

    @pytest.mark.parametrize("value,expected", [("1", 1), ("16", 16), (8, 8)])
    def test_valid(self, value, expected):
        assert parse_threads(value) == expected

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "+4", "1.5", "", " 4", True, None])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_threads(value)


class TestBuildPipelineConfig:
    """Building and validating the frozen run configuration."""

    def test_defaults(self, make_config):
        config = make_config(threads=None)

        assert config.threads == 8
        assert config.min_read_length == 31
        assert config.max_kmer == 127
        assert config.tools.assembler == 'spades.py'
        assert 'tmp' in config.cleanup_dirs

    def test_config_is_frozen(self, make_config):
        config = make_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.threads = 2

    def test_executables_follow_options(self, make_config, reference_fasta):
        assert set(make_config(trim=False).executables) == {'kmer_profiler', 'assembler'}
        assert set(make_config(trim=True, reference=reference_fasta).executables) == {
            'trimmer', 'kmer_profiler', 'assembler', 'tiler',
        }

    def test_missing_positional(self, paired_reads, temp_output_dir):
        read1, _ = paired_reads
        with pytest.raises(InvalidArgumentError, match="read2"):
            build_pipeline_config(temp_output_dir / "out", read1, None)

    def test_bad_threads(self, make_config):
        with pytest.raises(InvalidArgumentError):
            make_config(threads="x4")

    def test_unreadable_read(self, paired_reads, temp_output_dir):
        read1, _ = paired_reads
        with pytest.raises(InvalidArgumentError, match="read2"):
            build_pipeline_config(temp_output_dir / "out", read1, temp_output_dir / "nope.fq")

    def test_unreadable_reference(self, make_config, temp_output_dir):
        with pytest.raises(InvalidArgumentError, match="reference"):
            make_config(reference=temp_output_dir / "missing.fa")

    def test_existing_output_dir(self, make_config, temp_output_dir):
        (temp_output_dir / "out").mkdir()
        with pytest.raises(OutputExistsError):
            make_config()

    def test_existing_output_dir_with_force(self, make_config, temp_output_dir):
        (temp_output_dir / "out").mkdir()
        assert make_config(force=True).force is True

    def test_relative_paths_made_absolute(self, paired_reads, reference_fasta,
                                          temp_output_dir, monkeypatch):
        monkeypatch.chdir(temp_output_dir)
        read1, read2 = paired_reads

        config = build_pipeline_config('out', read1.name, read2.name,
                                       reference=reference_fasta.name)

        assert config.output_dir == Path.cwd() / 'out'
        assert config.read1.samefile(read1)
        assert config.read2.samefile(read2)
        assert config.reference.samefile(reference_fasta)
        assert all(p.is_absolute() for p in
                   (config.output_dir, config.read1, config.read2, config.reference))

    def test_null_section_rejected(self, paired_reads, temp_output_dir):
        read1, read2 = paired_reads
        settings = load_config(None)
        settings['tools'] = None
        with pytest.raises(ConfigValidationError, match="tools must be a mapping"):
            build_pipeline_config(temp_output_dir / "out", read1, read2, settings=settings)

    def test_invalid_settings_rejected(self, paired_reads, temp_output_dir):
        read1, read2 = paired_reads
        settings = load_config(None)
        settings['tools']['assembler']['executable'] = ''
        with pytest.raises(ConfigValidationError):
            build_pipeline_config(temp_output_dir / "out", read1, read2, settings=settings)


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
