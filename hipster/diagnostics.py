#!/usr/bin/env python3
"""
Diagnostic sink for non-fatal failures.

Scanning, parsing and resolution never abort a request. Each recoverable
failure is recorded here as a Diagnostic and forwarded to the logger, and
the operation continues with a smaller result set.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """Taxonomy of recoverable failures"""
    MISSING_BUILD_DIRECTORY = "missing_build_directory"
    UNREADABLE_FILE = "unreadable_file"
    NO_KERNEL_SYMBOL = "no_kernel_symbol"
    NO_SOURCE_FILE_MATCH = "no_source_file_match"
    DEMANGLE_UNAVAILABLE = "demangle_unavailable"


# Kinds that only explain why a result set is smaller are logged at DEBUG.
_LOG_LEVELS = {
    DiagnosticKind.MISSING_BUILD_DIRECTORY: logging.WARNING,
    DiagnosticKind.UNREADABLE_FILE: logging.WARNING,
    DiagnosticKind.NO_KERNEL_SYMBOL: logging.WARNING,
    DiagnosticKind.NO_SOURCE_FILE_MATCH: logging.DEBUG,
    DiagnosticKind.DEMANGLE_UNAVAILABLE: logging.DEBUG,
}


@dataclass
class Diagnostic:
    """A single recoverable failure"""
    kind: DiagnosticKind
    message: str
    path: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        location = ""
        if self.path:
            location = self.path if self.line is None else f"{self.path}:{self.line}"
            location = f" ({location})"
        return f"{self.kind.value}: {self.message}{location}"


class DiagnosticSink:
    """Collects diagnostics and forwards them to the logger"""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def report(self, kind: DiagnosticKind, message: str,
               path: Optional[str] = None, line: Optional[int] = None) -> Diagnostic:
        """Record a diagnostic and log it at the level for its kind.

        Args:
            kind: Category of the failure
            message: Human-readable description
            path: File or directory the failure refers to (optional)
            line: 0-indexed line within path (optional)

        Returns:
            The recorded Diagnostic
        """
        diagnostic = Diagnostic(kind=kind, message=message, path=path, line=line)
        self.diagnostics.append(diagnostic)
        logger.log(_LOG_LEVELS[kind], "%s", diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        """Return recorded diagnostics of the given kind."""
        return [d for d in self.diagnostics if d.kind == kind]

    def clear(self) -> None:
        """Forget all recorded diagnostics."""
        self.diagnostics.clear()

    def __len__(self) -> int:
        return len(self.diagnostics)
