"""
External tool adapters for ContigLoom.

Every external program is wrapped by an ExternalTool adapter that builds a
ToolInvocation; a ToolRunner executes it.
"""

from .base import (
    ToolInvocation,
    ToolOutcome,
    ToolRunner,
    SubprocessToolRunner,
    ExternalTool,
    artifact_ready,
)
from .adapters import (
    ReadTrimmer,
    KmerProfiler,
    Assembler,
    ReferenceTiler,
)

__all__ = [
    "ToolInvocation",
    "ToolOutcome",
    "ToolRunner",
    "SubprocessToolRunner",
    "ExternalTool",
    "artifact_ready",
    "ReadTrimmer",
    "KmerProfiler",
    "Assembler",
    "ReferenceTiler",
]
