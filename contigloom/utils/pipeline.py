"""
ContigLoom Pipeline Orchestrator.

Runs the fixed paired-end assembly workflow:

    validate config → check dependencies → prepare output dir → trim →
    profile read lengths → optimize k-mer → assemble → post-process → [tile]

Each stage declares the files it needs and the files it must produce. A
stage succeeds only when its work completes AND every declared output is
present; the first failure ends the run and is reported with the stage name.
There are no retries and no resumption.
"""

from pathlib import Path
from typing import Callable, Optional, Dict, Any, List
import logging
from dataclasses import dataclass, field

from ..config.pipeline_config import PipelineConfig
from ..errors import PipelineError, MissingOutputError, AssemblyTooShortError
from ..io_utils import write_fofn, contig_lengths
from ..preprocessing import (
    ReadLengthHistogram,
    KmerOptimizationRow,
    histogram_from_files,
    write_histogram_table,
    kmer_upper_bound,
    parse_kmer_table,
    select_optimal_kmer_row,
)
from ..assembly_utils import AssemblyMetrics, extract_assembly_metrics, write_stats_report
from ..tools import (
    ToolRunner,
    SubprocessToolRunner,
    ReadTrimmer,
    KmerProfiler,
    Assembler,
    ReferenceTiler,
    artifact_ready,
)
from ..tools.adapters import KMERGENIE_TABLE, SPADES_LOG, SPADES_SCAFFOLDS
from .artifacts import (
    ArtifactManager,
    CONTIGS,
    ASSEMBLY_LOG,
    KMER_STATS,
    HISTOGRAM,
    MANIFEST,
    PROFILER_LOG,
    STATS_REPORT,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# ============================================================================
# Data Structures
# ============================================================================

@dataclass
class Stage:
    """
    One step of the workflow.

    Attributes:
        name: Stage identifier used in logs and diagnostics
        description: Short human-readable summary
        action: Performs the work and returns the produced files
        inputs: Files that must exist before the stage runs
        enabled: False when the stage is skipped for this run
    """
    name: str
    description: str
    action: Callable[[], List[Path]]
    inputs: Callable[[], List[Path]] = field(default=lambda: [])
    enabled: bool = True


@dataclass
class StageResult:
    """Outcome of one stage: its outputs, or the error that stopped it."""
    stage: str
    outputs: List[Path] = field(default_factory=list)
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, stage: str, outputs: List[Path]) -> 'StageResult':
        return cls(stage=stage, outputs=outputs)

    @classmethod
    def failure(cls, stage: str, error: PipelineError) -> 'StageResult':
        if error.stage is None:
            error.stage = stage
        return cls(stage=stage, error=error)


@dataclass
class FinalArtifactPaths:
    """Canonical files left in the output directory after a successful run."""
    contigs: Path
    assembly_log: Path
    kmer_stats: Path
    histogram: Path
    manifest: Path
    profiler_log: Path
    stats_report: Path

    @classmethod
    def in_directory(cls, output_dir: Path) -> 'FinalArtifactPaths':
        return cls(
            contigs=output_dir / CONTIGS,
            assembly_log=output_dir / ASSEMBLY_LOG,
            kmer_stats=output_dir / KMER_STATS,
            histogram=output_dir / HISTOGRAM,
            manifest=output_dir / MANIFEST,
            profiler_log=output_dir / PROFILER_LOG,
            stats_report=output_dir / STATS_REPORT,
        )


@dataclass
class PipelineResult:
    """Result of a full pipeline run."""
    status: str
    artifacts: Optional[FinalArtifactPaths] = None
    failed_stage: Optional[str] = None
    error: Optional[PipelineError] = None
    completed_stages: List[str] = field(default_factory=list)
    skipped_stages: List[str] = field(default_factory=list)
    decisions: Dict[str, Any] = field(default_factory=dict)
    metrics: Optional[AssemblyMetrics] = None

    @property
    def ok(self) -> bool:
        return self.status == 'success'


# ============================================================================
# Orchestrator
# ============================================================================

class PipelineOrchestrator:
    """
    Sequential controller for the ContigLoom workflow.

    Manages:
    - Stage ordering and the declared input/output contract of each stage
    - Decision values passed between stages (longest read, chosen k)
    - The run log file inside the output directory
    - Fail-fast termination on the first stage error

    The configuration is never modified; stages only communicate through the
    files they write and the run state recorded here.
    """

    def __init__(self, config: PipelineConfig, runner: Optional[ToolRunner] = None):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Validated, immutable run configuration
            runner: Executes external tools (default: subprocesses)
        """
        self.config = config
        self.runner = runner or SubprocessToolRunner()
        self.output_dir = Path(config.output_dir)
        self.artifacts = ArtifactManager(
            self.output_dir,
            cleanup_dirs=config.cleanup_dirs,
            cleanup_patterns=config.cleanup_patterns,
        )

        self.trimmer = ReadTrimmer(config.tools.trimmer)
        self.profiler = KmerProfiler(config.tools.kmer_profiler)
        self.assembler = Assembler(config.tools.assembler)
        self.tiler = ReferenceTiler(config.tools.tiler)

        # Runtime state
        self.state: Dict[str, Any] = {
            'current_step': None,
            'completed_steps': [],
            'clipped_reads': [],
            'histogram': None,
            'longest_read': None,
            'kmer_upper': None,
            'kmer_row': None,
            'metrics': None,
        }
        self._log_handler: Optional[logging.Handler] = None
        self._previous_level = logging.NOTSET

    # ------------------------------------------------------------------
    # Stage table
    # ------------------------------------------------------------------

    def stages(self) -> List[Stage]:
        """The fixed stage sequence for this configuration."""
        config = self.config
        return [
            Stage('validate_config', "Validate run configuration", self._step_validate_config),
            Stage('check_dependencies', "Check external tools", self._step_check_dependencies),
            Stage('prepare_output_dir', "Create output directory", self._step_prepare_output_dir),
            Stage('trim', "Trim reads" if config.trim else "Link untrimmed reads",
                  self._step_trim,
                  inputs=lambda: [config.read1, config.read2]),
            Stage('profile_read_lengths', "Profile read lengths", self._step_profile_read_lengths,
                  inputs=lambda: list(self.state['clipped_reads'])),
            Stage('optimize_kmer', "Optimize k-mer size", self._step_optimize_kmer,
                  inputs=lambda: list(self.state['clipped_reads']) + [self.output_dir / HISTOGRAM]),
            Stage('assemble', "Assemble reads", self._step_assemble,
                  inputs=lambda: list(self.state['clipped_reads'])),
            Stage('post_process', "Canonicalize outputs and compute QC", self._step_post_process,
                  inputs=lambda: [self.output_dir / SPADES_SCAFFOLDS,
                                  self.output_dir / SPADES_LOG,
                                  self.output_dir / KMERGENIE_TABLE]),
            Stage('tile', "Tile contigs against reference", self._step_tile,
                  inputs=lambda: [config.reference, self.output_dir / CONTIGS],
                  enabled=config.reference is not None),
        ]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        """
        Run every stage in order, stopping at the first failure.

        Returns:
            PipelineResult with the final artifact paths on success, or the
            failing stage and its error
        """
        logger.info("=" * 60)
        logger.info("Starting ContigLoom Pipeline")
        logger.info("=" * 60)

        stages = self.stages()
        skipped = []

        try:
            for i, stage in enumerate(stages, start=1):
                if not stage.enabled:
                    logger.info(f"Skipping {stage.name}: {stage.description.lower()} not requested")
                    skipped.append(stage.name)
                    continue

                self.state['current_step'] = stage.name
                logger.info(f"\n{'=' * 60}")
                logger.info(f"STEP {i}/{len(stages)}: {stage.name.upper()} - {stage.description}")
                logger.info(f"{'=' * 60}")

                result = self.execute_stage(stage)
                if not result.ok:
                    logger.error(f"Stage {stage.name} failed: {result.error.message}")
                    return PipelineResult(
                        status='failed',
                        failed_stage=stage.name,
                        error=result.error,
                        completed_stages=list(self.state['completed_steps']),
                        skipped_stages=skipped,
                        decisions=self.decisions(),
                    )

                self.state['completed_steps'].append(stage.name)

            logger.info("\n" + "=" * 60)
            logger.info("Pipeline Complete!")
            logger.info("=" * 60)

            return PipelineResult(
                status='success',
                artifacts=FinalArtifactPaths.in_directory(self.output_dir),
                completed_stages=list(self.state['completed_steps']),
                skipped_stages=skipped,
                decisions=self.decisions(),
                metrics=self.state['metrics'],
            )
        finally:
            self._detach_log_file()

    def execute_stage(self, stage: Stage) -> StageResult:
        """
        Run one stage under its input/output contract.

        Missing inputs, errors raised by the work, and missing or empty
        declared outputs all become a failed StageResult.
        """
        try:
            for path in stage.inputs():
                if path is None or not Path(path).exists():
                    raise MissingOutputError(stage.name, path)

            outputs = stage.action()

            for path in outputs:
                if not artifact_ready(path):
                    raise MissingOutputError(stage.name, path)
        except PipelineError as e:
            return StageResult.failure(stage.name, e)
        except OSError as e:
            return StageResult.failure(stage.name, PipelineError(str(e), stage=stage.name))

        return StageResult.success(stage.name, outputs)

    def decisions(self) -> Dict[str, Any]:
        """Decision values gathered so far, for reporting."""
        row: Optional[KmerOptimizationRow] = self.state['kmer_row']
        return {
            'trimmed': self.config.trim,
            'threads': self.config.threads,
            'longest_read': self.state['longest_read'],
            'kmer_range': [self.config.min_read_length, self.state['kmer_upper']]
            if self.state['kmer_upper'] is not None else None,
            'k': row.k if row else None,
            'genome_size': row.genome_size if row else None,
            'coverage_cutoff': row.coverage_cutoff if row else None,
            'reference': str(self.config.reference) if self.config.reference else None,
        }

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _step_validate_config(self) -> List[Path]:
        self.config.validate()
        logger.info(f"Reads: {self.config.read1}, {self.config.read2}")
        logger.info(f"Threads: {self.config.threads}")
        logger.info(f"Trimming: {'enabled' if self.config.trim else 'disabled'}")
        if self.config.reference:
            logger.info(f"Reference: {self.config.reference}")
        return []

    def _step_check_dependencies(self) -> List[Path]:
        by_role = {tool.name: tool for tool in
                   (self.trimmer, self.profiler, self.assembler, self.tiler)}

        for role in self.config.executables:
            tool = by_role[role]
            resolved = tool.check_available(self.runner, stage='check_dependencies')
            logger.info(f"  ✓ {tool.name}: {resolved}")
        return []

    def _step_prepare_output_dir(self) -> List[Path]:
        self.artifacts.prepare(force=self.config.force)
        self._attach_log_file()
        return []

    def _step_trim(self) -> List[Path]:
        config = self.config
        if config.trim:
            logger.info(f"Trimming with quality {config.tools.trim_quality}, "
                        f"minimum length {config.min_read_length}")
            clipped = self.trimmer.invoke(
                self.runner, 'trim',
                read1=config.read1,
                read2=config.read2,
                output_dir=self.output_dir,
                quality=config.tools.trim_quality,
                min_length=config.min_read_length,
                threads=config.threads,
            )
            self.artifacts.discard_unpaired()
        else:
            logger.info("Trimming disabled, linking original reads")
            clipped = self.artifacts.link_reads(config.read1, config.read2)

        self.state['clipped_reads'] = clipped
        return clipped

    def _step_profile_read_lengths(self) -> List[Path]:
        config = self.config
        histogram: ReadLengthHistogram = histogram_from_files(
            self.state['clipped_reads'], config.sample_size
        )
        table = write_histogram_table(histogram, self.output_dir / HISTOGRAM)

        longest = histogram.longest
        self.state['histogram'] = histogram
        self.state['longest_read'] = longest
        logger.info(f"Sampled {histogram.total_reads:,} reads, longest {longest} bp")

        if longest < config.min_read_length:
            raise AssemblyTooShortError(longest, config.min_read_length, stage='profile_read_lengths')
        return [table]

    def _step_optimize_kmer(self) -> List[Path]:
        config = self.config
        upper = kmer_upper_bound(self.state['longest_read'], config.max_kmer)
        self.state['kmer_upper'] = upper
        logger.info(f"K-mer range: [{config.min_read_length}, {upper}]")

        manifest = write_fofn(self.state['clipped_reads'], self.output_dir / MANIFEST)
        table_path, = self.profiler.invoke(
            self.runner, 'optimize_kmer',
            manifest=manifest,
            output_dir=self.output_dir,
            min_k=config.min_read_length,
            max_k=upper,
            threads=config.threads,
            log_path=self.output_dir / PROFILER_LOG,
        )

        rows = parse_kmer_table(table_path.read_text())
        row = select_optimal_kmer_row(rows)
        self.state['kmer_row'] = row
        logger.info(f"Selected k={row.k} (genome size estimate {row.genome_size:,}, "
                    f"coverage cutoff {row.coverage_cutoff})")
        return [manifest, table_path]

    def _step_assemble(self) -> List[Path]:
        config = self.config
        read1, read2 = self.state['clipped_reads']
        return self.assembler.invoke(
            self.runner, 'assemble',
            read1=read1,
            read2=read2,
            output_dir=self.output_dir,
            k=self.state['kmer_row'].k,
            threads=config.threads,
            memory_gb=config.tools.memory_gb,
        )

    def _step_post_process(self) -> List[Path]:
        renamed = self.artifacts.canonicalize('post_process')
        self.artifacts.purge_intermediates()

        contigs = renamed[CONTIGS]
        log_path = renamed[ASSEMBLY_LOG]
        metrics = extract_assembly_metrics(log_path.read_text(), contigs.read_text())
        self.state['metrics'] = metrics
        for line in metrics.summary().splitlines():
            logger.info(line)

        report = self.output_dir / STATS_REPORT
        write_stats_report(report, metrics, contig_lengths(contigs), self.decisions())
        return [contigs, log_path, renamed[KMER_STATS], report]

    def _step_tile(self) -> List[Path]:
        config = self.config
        tiled, = self.tiler.invoke(
            self.runner, 'tile',
            reference=config.reference,
            contigs=self.output_dir / CONTIGS,
            output_dir=self.output_dir,
            threads=config.threads,
        )
        return [self.artifacts.replace_contigs(tiled)]

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _attach_log_file(self):
        """Mirror log records into the run log inside the output directory."""
        if self._log_handler is not None:
            return
        level = getattr(logging, self.config.log_level, logging.INFO)
        handler = logging.FileHandler(self.output_dir / self.config.log_file)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        self._previous_level = root.level
        if root.level > level:
            root.setLevel(level)
        root.addHandler(handler)
        self._log_handler = handler

    def _detach_log_file(self):
        if self._log_handler is None:
            return
        root = logging.getLogger()
        root.removeHandler(self._log_handler)
        root.setLevel(self._previous_level)
        self._log_handler.close()
        self._log_handler = None


def run(config: PipelineConfig, runner: Optional[ToolRunner] = None) -> PipelineResult:
    """Run the workflow for `config` and return its result."""
    return PipelineOrchestrator(config, runner=runner).run()
