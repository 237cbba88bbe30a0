#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ContigLoom v0.1.0

Uniform contract for external tool invocations.

Each tool adapter turns stage inputs into a ToolInvocation: the command line,
the working directory, where console output goes, and the files the tool must
leave behind. A ToolRunner executes invocations; the subprocess runner is the
production implementation and tests substitute a runner that writes canned
outputs instead of launching binaries.

Author: ContigLoom Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import logging
import os
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from ..errors import MissingDependencyError, MissingOutputError, StageExecutionError

logger = logging.getLogger(__name__)


@dataclass
class ToolInvocation:
    """A single external command and the artifacts it must produce."""
    tool: str
    argv: List[str]
    expected_outputs: List[Path] = field(default_factory=list)
    cwd: Optional[Path] = None
    log_path: Optional[Path] = None   # stdout+stderr appended here when set

    @property
    def command_line(self) -> str:
        return " ".join(shlex.quote(arg) for arg in self.argv)


@dataclass
class ToolOutcome:
    """Exit status of an invocation, with a short error excerpt."""
    returncode: int
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ToolRunner(ABC):
    """Executes ToolInvocations synchronously."""

    @abstractmethod
    def run(self, invocation: ToolInvocation) -> ToolOutcome:
        """Run the invocation to completion and report its exit status."""

    def which(self, executable: str) -> Optional[str]:
        """Resolve an executable; None when not available."""
        return shutil.which(executable)


class SubprocessToolRunner(ToolRunner):
    """Runs tools as child processes, blocking until they exit."""

    def __init__(self, stderr_tail_lines: int = 5):
        self.stderr_tail_lines = stderr_tail_lines

    def run(self, invocation: ToolInvocation) -> ToolOutcome:
        logger.info(f"Running {invocation.tool}: {invocation.command_line}")

        try:
            if invocation.log_path is not None:
                with open(invocation.log_path, 'a') as log_handle:
                    result = subprocess.run(
                        invocation.argv,
                        cwd=invocation.cwd,
                        stdout=log_handle,
                        stderr=subprocess.STDOUT,
                        check=False,
                    )
                detail = f"see {invocation.log_path}" if result.returncode else None
            else:
                result = subprocess.run(
                    invocation.argv,
                    cwd=invocation.cwd,
                    capture_output=True,
                    text=True,
                    check=False,
                )
                detail = self._tail(result.stderr) if result.returncode else None
        except FileNotFoundError as e:
            return ToolOutcome(returncode=127, detail=str(e))
        except PermissionError as e:
            return ToolOutcome(returncode=126, detail=str(e))

        return ToolOutcome(returncode=result.returncode, detail=detail)

    def _tail(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        lines = [line for line in text.strip().splitlines() if line.strip()]
        return " | ".join(lines[-self.stderr_tail_lines:]) or None


def artifact_ready(path: Path) -> bool:
    """A declared output counts only if it exists, is readable and non-empty."""
    try:
        return path.is_file() and path.stat().st_size > 0 and os.access(path, os.R_OK)
    except OSError:
        return False


class ExternalTool(ABC):
    """
    Base adapter for one external tool.

    Subclasses implement build_invocation(); invoke() applies the shared
    success predicate: zero exit status AND every expected output present.
    """

    #: Role name used in diagnostics and configuration
    name: str = "tool"

    def __init__(self, executable: str):
        self.executable = executable

    @abstractmethod
    def build_invocation(self, **kwargs: Any) -> ToolInvocation:
        """Build the command line and declared outputs."""

    def check_available(self, runner: ToolRunner, stage: Optional[str] = None) -> str:
        """
        Resolve the executable on PATH.

        Raises:
            MissingDependencyError: If it cannot be resolved
        """
        resolved = runner.which(self.executable)
        if not resolved:
            raise MissingDependencyError(self.name, self.executable, stage=stage)
        logger.debug(f"{self.name}: {resolved}")
        return resolved

    def invoke(self, runner: ToolRunner, stage: str, **kwargs: Any) -> List[Path]:
        """
        Build, run and verify an invocation.

        Returns:
            The declared output paths

        Raises:
            StageExecutionError: Non-zero exit status
            MissingOutputError: A declared output is absent or empty
        """
        invocation = self.build_invocation(**kwargs)
        outcome = runner.run(invocation)

        if not outcome.ok:
            raise StageExecutionError(stage, self.name, outcome.returncode, outcome.detail)

        for path in invocation.expected_outputs:
            if not artifact_ready(path):
                raise MissingOutputError(stage, path)

        return list(invocation.expected_outputs)


# ContigLoom v0.1.0
# Any usage is subject to this software's license.
