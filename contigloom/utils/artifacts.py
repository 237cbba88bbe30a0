"""
Output directory management for ContigLoom runs.

Handles creation of the output directory, canonical naming of final
artifacts, and removal of tool intermediates.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..errors import MissingOutputError, OutputExistsError
from ..io_utils import is_gzipped
from ..tools.adapters import (
    KMERGENIE_TABLE,
    RAGTAG_DIR,
    SPADES_LOG,
    SPADES_SCAFFOLDS,
    TRIMMED_R1,
    TRIMMED_R2,
    UNPAIRED_R1,
    UNPAIRED_R2,
)

# Canonical artifact names inside the output directory
CONTIGS = 'contigs.fa'
ASSEMBLY_LOG = 'assembly.log'
KMER_STATS = 'kmers.tab'
HISTOGRAM = 'readlengths.tab'
MANIFEST = 'input.fofn'
PROFILER_LOG = 'kmergenie.log'
STATS_REPORT = 'assembly_stats.json'

PER_K_DIR = re.compile(r'^K\d+$')

# Tool output -> canonical name, applied after assembly
CANONICAL_RENAMES = {
    SPADES_SCAFFOLDS: CONTIGS,
    SPADES_LOG: ASSEMBLY_LOG,
    KMERGENIE_TABLE: KMER_STATS,
}


class ArtifactManager:
    """
    Manage the output directory of a single run.

    Features:
    - Create the directory, refusing to reuse it without force
    - Provide canonical read names (trimmed files or links to the originals)
    - Rename final tool outputs to canonical names
    - Purge per-k working directories, temporary directories and intermediates

    The directory itself is never deleted.
    """

    def __init__(self, output_dir: Path,
                 cleanup_dirs: Iterable[str] = (),
                 cleanup_patterns: Iterable[str] = ()):
        """
        Initialize artifact manager.

        Args:
            output_dir: Run output directory
            cleanup_dirs: Directory names removed after assembly
            cleanup_patterns: Glob patterns of intermediate files
        """
        self.output_dir = Path(output_dir)
        self.cleanup_dirs = list(cleanup_dirs)
        self.cleanup_patterns = list(cleanup_patterns)
        self.logger = logging.getLogger(__name__)

    def path(self, name: str) -> Path:
        return self.output_dir / name

    @property
    def protected(self) -> List[str]:
        """Canonical names that cleanup must never touch."""
        return [CONTIGS, ASSEMBLY_LOG, KMER_STATS, HISTOGRAM, MANIFEST,
                PROFILER_LOG, STATS_REPORT, TRIMMED_R1, TRIMMED_R2,
                'R1.fq', 'R2.fq']

    def prepare(self, force: bool) -> Path:
        """
        Create the output directory.

        Args:
            force: Allow an existing directory to be reused

        Raises:
            OutputExistsError: If the directory exists and force is unset
        """
        if self.output_dir.exists() and not force:
            raise OutputExistsError(self.output_dir)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Output directory: {self.output_dir}")
        return self.output_dir

    def clipped_read_paths(self, trimmed: bool,
                           originals: Optional[List[Path]] = None) -> List[Path]:
        """
        Canonical names of the two reads files used downstream.

        Trimmed reads are always gzipped; links to untrimmed originals keep a
        `.gz` suffix only when the original is compressed.
        """
        if trimmed:
            return [self.path(TRIMMED_R1), self.path(TRIMMED_R2)]

        names = []
        for mate, original in zip(('R1', 'R2'), originals or []):
            suffix = '.fq.gz' if is_gzipped(original) else '.fq'
            names.append(self.path(f"{mate}{suffix}"))
        return names

    def link_reads(self, read1: Path, read2: Path) -> List[Path]:
        """
        Link canonical read names to the untouched original files.

        Returns:
            The two link paths
        """
        links = self.clipped_read_paths(trimmed=False, originals=[read1, read2])

        for link, target in zip(links, (read1, read2)):
            if link.is_symlink() or link.exists():
                link.unlink()
            os.symlink(Path(target).resolve(), link)
            self.logger.info(f"  Linked {link.name} -> {target}")

        return links

    def discard_unpaired(self):
        """Remove unpaired leftovers from trimming."""
        self.remove([UNPAIRED_R1, UNPAIRED_R2])

    def canonicalize(self, stage: str) -> Dict[str, Path]:
        """
        Rename tool outputs to canonical names.

        Returns:
            Canonical name -> path

        Raises:
            MissingOutputError: If a tool output is absent
        """
        renamed = {}
        for source_name, canonical_name in CANONICAL_RENAMES.items():
            source = self.path(source_name)
            target = self.path(canonical_name)
            if not source.exists():
                raise MissingOutputError(stage, source)
            source.replace(target)
            self.logger.info(f"  Renamed {source_name} -> {canonical_name}")
            renamed[canonical_name] = target
        return renamed

    def purge_intermediates(self) -> List[str]:
        """
        Delete per-k directories, temporary directories and intermediate files.

        Best-effort and idempotent: targets that are already gone are skipped.

        Returns:
            Names of removed entries
        """
        removed = []
        if not self.output_dir.is_dir():
            return removed

        for entry in sorted(self.output_dir.iterdir()):
            if entry.name in self.protected:
                continue
            if entry.is_dir() and not entry.is_symlink():
                if PER_K_DIR.match(entry.name) or entry.name in self.cleanup_dirs:
                    if self._delete(entry):
                        removed.append(entry.name)

        for pattern in self.cleanup_patterns:
            for entry in sorted(self.output_dir.glob(pattern)):
                if entry.name in self.protected:
                    continue
                if self._delete(entry):
                    removed.append(entry.name)

        self.logger.debug(f"Removed intermediates: {', '.join(removed) or 'none'}")
        return removed

    def replace_contigs(self, tiled_contigs: Path) -> Path:
        """Overwrite the canonical contigs with the tiled result and drop the tiler's work dir."""
        target = self.path(CONTIGS)
        Path(tiled_contigs).replace(target)
        self.remove([RAGTAG_DIR])
        self.logger.info(f"  Replaced {CONTIGS} with tiled contigs")
        return target

    def remove(self, names: Iterable[Union[str, Path]]):
        """Delete files or directories under the output directory if present."""
        for name in names:
            self._delete(self.path(str(name)))

    def _delete(self, entry: Path) -> bool:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            self.logger.warning(f"Could not remove {entry}: {e}")
            return False
        self.logger.debug(f"Removed: {entry}")
        return True
