#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Exception hierarchy for the assembly pipeline.

Every error raised by a stage is fatal: the orchestrator stops at the first
one and the command line exits with status 1.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from pathlib import Path
from typing import Optional, Union


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def describe(self) -> str:
        """Single diagnostic line identifying the failing stage."""
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidArgumentError(PipelineError):
    """Bad thread count, unreadable input file or missing positional argument."""
    pass


class ConfigValidationError(InvalidArgumentError):
    """Raised when the YAML settings file fails validation."""
    pass


class OutputExistsError(PipelineError):
    """Output directory already exists and --force was not given."""

    def __init__(self, path: Union[str, Path], stage: Optional[str] = None):
        super().__init__(
            f"Output directory already exists: {path} (use -f to overwrite)",
            stage=stage,
        )
        self.path = Path(path)


class MissingDependencyError(PipelineError):
    """A required external executable could not be found on PATH."""

    def __init__(self, tool: str, executable: str, stage: Optional[str] = None):
        super().__init__(
            f"Required tool '{tool}' not found on PATH (looked for '{executable}')",
            stage=stage,
        )
        self.tool = tool
        self.executable = executable


class StageExecutionError(PipelineError):
    """An external tool exited with a non-zero status."""

    def __init__(self, stage: str, tool: str, returncode: int,
                 detail: Optional[str] = None):
        message = f"{tool} exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, stage=stage)
        self.tool = tool
        self.returncode = returncode


class MissingOutputError(PipelineError):
    """A declared stage artifact is absent or empty."""

    def __init__(self, stage: str, path: Union[str, Path, None]):
        super().__init__(f"Expected file is missing or empty: {path}", stage=stage)
        self.path = Path(path) if path is not None else None


class AssemblyTooShortError(PipelineError):
    """Longest sampled read is shorter than the minimum usable read length."""

    def __init__(self, longest: int, minimum: int, stage: Optional[str] = None):
        super().__init__(
            f"Longest sampled read is {longest} bp, shorter than the minimum of {minimum} bp",
            stage=stage,
        )
        self.longest = longest
        self.minimum = minimum


class MalformedOutputError(PipelineError):
    """Expected markers or columns are absent from a tool's output."""

    def __init__(self, source: str, detail: str, stage: Optional[str] = None):
        super().__init__(f"Malformed {source}: {detail}", stage=stage)
        self.source = source
        self.detail = detail


__all__ = [
    "PipelineError",
    "InvalidArgumentError",
    "ConfigValidationError",
    "OutputExistsError",
    "MissingDependencyError",
    "StageExecutionError",
    "MissingOutputError",
    "AssemblyTooShortError",
    "MalformedOutputError",
]


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
