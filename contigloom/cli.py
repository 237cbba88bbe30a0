#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for ContigLoom.

`contigloom OUTDIR READ1 READ2` runs the paired-end assembly pipeline;
`contigloom-config` manages the optional YAML settings file.
"""

import sys
import logging
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import load_config, save_config_template, validate_config
from .config.pipeline_config import build_pipeline_config
from .errors import PipelineError, ConfigValidationError

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()],
    )


def _fail(ctx, error: PipelineError):
    click.echo(f"contigloom: {error.describe()}", err=True)
    ctx.exit(1)


# ============================================================================
# Pipeline Command
# ============================================================================

@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.argument('outdir', required=False)
@click.argument('read1', required=False)
@click.argument('read2', required=False)
@click.option('--threads', '-t', metavar='N', default=None,
              help='Number of threads for the external tools (default: 8)')
@click.option('--force', '-f', is_flag=True,
              help='Reuse an existing output directory')
@click.option('--no-trim', '-n', is_flag=True,
              help='Skip read trimming (reads are linked, not copied)')
@click.option('--reference', '-r', metavar='FASTA', default=None,
              help='Reference FASTA used to order and orient the contigs')
@click.option('--config', '-c', 'config_file', metavar='YAML', default=None,
              help='Settings file (generate with: contigloom-config init)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, outdir, read1, read2, threads, force, no_trim, reference, config_file, verbose):
    """
    ContigLoom: paired-end genome assembly pipeline.

    Trims reads, profiles read lengths, picks the k-mer size with KmerGenie,
    assembles with SPAdes, tidies the output directory and, given a
    reference, orders the contigs with RagTag.

    Examples:
        contigloom out/ reads_R1.fq.gz reads_R2.fq.gz

        contigloom -t 16 -n -r ref.fa out/ reads_R1.fq.gz reads_R2.fq.gz
    """
    try:
        settings = load_config(Path(config_file) if config_file else None)
        errors = validate_config(settings)
        if errors:
            raise ConfigValidationError("; ".join(errors))
        _setup_logging('DEBUG' if verbose else settings['output']['logging']['level'])
        pipeline_config = build_pipeline_config(
            outdir, read1, read2,
            threads=threads,
            force=force,
            trim=not no_trim,
            reference=reference,
            settings=settings,
        )
    except PipelineError as e:
        _fail(ctx, e)
        return

    # ========================================================================
    # Display pipeline configuration
    # ========================================================================
    click.echo(f"{'='*60}")
    click.echo(f"ContigLoom v{__version__}")
    click.echo(f"{'='*60}")
    click.echo(f"\n📁 Reads: {pipeline_config.read1}, {pipeline_config.read2}")
    click.echo(f"📂 Output: {pipeline_config.output_dir}")
    click.echo(f"💻 Threads: {pipeline_config.threads}")

    click.echo(f"\n🔄 Pipeline Flow:")
    click.echo(f"{'─'*60}")
    trim_status = '✓ Trimmomatic' if pipeline_config.trim else '○ Skipped (-n)'
    click.echo(f"  1. Read Trimming ({trim_status})")
    click.echo(f"  2. Read-Length Profiling")
    click.echo(f"  3. K-mer Optimization (KmerGenie, k {pipeline_config.min_read_length}-"
               f"{pipeline_config.max_kmer} max)")
    click.echo(f"  4. Assembly (SPAdes --careful)")
    click.echo(f"  5. Output Cleanup & QC")
    if pipeline_config.reference:
        click.echo(f"  6. Reference Tiling (RagTag: {pipeline_config.reference.name})")
    click.echo(f"{'='*60}\n")

    # ========================================================================
    # Run Pipeline
    # ========================================================================
    from .utils.pipeline import run

    result = run(pipeline_config)
    if not result.ok:
        _fail(ctx, result.error)
        return

    click.echo("\n" + "="*60)
    click.echo("✅ Pipeline completed successfully!")
    click.echo("="*60)
    if result.metrics:
        click.echo(result.metrics.summary())
    click.echo(f"Selected k: {result.decisions.get('k')}")
    click.echo(f"Contigs: {result.artifacts.contigs}")


# ============================================================================
# Configuration Management Commands
# ============================================================================

@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
def config():
    """ContigLoom configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='contigloom_config.yaml',
              help='Output configuration file path')
def config_init(output):
    """Generate a settings file with every available parameter."""
    click.echo(f"Generating configuration template: {output}")

    try:
        save_config_template(Path(output))
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nThe configuration file includes:")
    click.echo("  • External tool executables and fixed parameters")
    click.echo("  • Read sampling and k-mer range limits")
    click.echo("  • Logging and intermediate cleanup settings")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        settings = load_config(Path(config_file))
    except PipelineError as e:
        click.echo(f"✗ {e.describe()}", err=True)
        sys.exit(1)

    errors = validate_config(settings)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        settings = load_config(Path(config_file))
    except PipelineError as e:
        click.echo(f"✗ {e.describe()}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(settings, default_flow_style=False, sort_keys=False))
        return

    errors = validate_config(settings)
    if errors:
        click.echo("✗ Configuration is invalid (run 'contigloom-config validate' for details)", err=True)
        sys.exit(1)

    tools = settings['tools']
    profiling = settings['profiling']
    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\n🔧 Tools:")
    click.echo(f"  Trimmer: {tools['trimmer']['executable']} (quality {tools['trimmer']['quality']})")
    click.echo(f"  K-mer profiler: {tools['kmer_profiler']['executable']}")
    click.echo(f"  Assembler: {tools['assembler']['executable']} ({tools['assembler']['memory_gb']} GB)")
    click.echo(f"  Tiler: {tools['tiler']['executable']}")

    click.echo("\n🧬 Profiling:")
    click.echo(f"  Sample size: {profiling['sample_size']:,} reads")
    click.echo(f"  K-mer range: {profiling['min_read_length']}-{profiling['max_kmer']}")

    click.echo("\n💻 Hardware:")
    click.echo(f"  Threads: {settings['hardware']['threads']}")


if __name__ == '__main__':
    main()
