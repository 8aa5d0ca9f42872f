#!/usr/bin/env python3
"""
Resolution of source files to the kernels compiled from them.

A queried source file is matched against every kernel's file table by
basename only, so kernels built in different directories (or different
checkouts) of the same project all match. Two distinct files sharing a
basename cannot be told apart; the first table entry with that basename,
in file-id declaration order, wins.
"""

import os
import logging
from typing import Dict, List, Optional, Tuple

from .config import HipsterConfig
from .debug_info import DebugInfoParser
from .diagnostics import DiagnosticKind, DiagnosticSink
from .line_mapping import LineMappingIndex
from .models import KernelRegion, MatchRecord, SourceFileTable, StalenessInfo
from .scanner import AssemblyScanner

logger = logging.getLogger(__name__)


def find_source_file_id(file_table: SourceFileTable, source_basename: str) -> Optional[int]:
    """First file id whose path has the given basename, in declaration order."""
    for file_id, file_path in file_table.items():
        if os.path.basename(file_path) == source_basename:
            return file_id
    return None


class MatchResolver:
    """Finds every kernel candidate that references a source file"""

    def __init__(self, config: HipsterConfig, sink: Optional[DiagnosticSink] = None):
        self.config = config
        self.sink = sink if sink is not None else DiagnosticSink()
        self.scanner = AssemblyScanner(config, self.sink)
        self.parser = DebugInfoParser(self.sink)

    def discover_kernels(self, workspace_root: str) -> List[KernelRegion]:
        """Scan all build directories and parse every kernel region.

        Args:
            workspace_root: Directory the build directories are relative to

        Returns:
            KernelRegions in discovery order
        """
        kernels: List[KernelRegion] = []
        for buffer in self.scanner.scan(workspace_root):
            kernels.extend(self.parser.parse(buffer))
        logger.debug("Discovered %d kernels", len(kernels))
        return kernels

    def resolve(self, workspace_root: str, source_file: str,
                source_line: int = 0) -> List[MatchRecord]:
        """Find kernels referencing a source file, with per-line hits.

        Args:
            workspace_root: Directory the build directories are relative to
            source_file: Queried source file; only its basename is compared
            source_line: 1-based source line as written in .loc directives,
                0 to return the kernel list only

        Returns:
            MatchRecords in discovery order (unranked)
        """
        return self.resolve_kernels(self.discover_kernels(workspace_root),
                                    source_file, source_line)

    def resolve_kernels(self, kernels: List[KernelRegion], source_file: str,
                        source_line: int = 0) -> List[MatchRecord]:
        """Match already discovered kernels against a source file."""
        source_basename = os.path.basename(source_file)
        matches: List[MatchRecord] = []
        # One index per (buffer, file id) within this resolution
        indexes: Dict[Tuple[int, int], LineMappingIndex] = {}

        logger.debug("Looking for matches of %s (line %d) in %d kernels",
                     source_basename, source_line, len(kernels))

        for kernel in kernels:
            file_id = find_source_file_id(kernel.file_table, source_basename)
            if file_id is None:
                self.sink.report(DiagnosticKind.NO_SOURCE_FILE_MATCH,
                                 f"Kernel {kernel.symbol} does not reference {source_basename}",
                                 path=kernel.assembly_path, line=kernel.start_line)
                continue

            matched_path = kernel.file_table[file_id]
            asm_lines: List[int] = []
            if source_line > 0:
                key = (id(kernel.buffer), file_id)
                if key not in indexes:
                    indexes[key] = LineMappingIndex.build(
                        kernel.buffer.lines, kernel.file_table, file_ids=[file_id])
                asm_lines = [i for i in indexes[key].forward(matched_path, source_line - 1)
                             if kernel.contains(i)]

            # An empty hit list is still a match; the kernel stays selectable
            matches.append(MatchRecord(
                kernel=kernel,
                source_file=matched_path,
                file_id=file_id,
                asm_lines=asm_lines,
            ))
            logger.debug("Added match: %s [%s] (%d asm lines for line %d, kernel at lines %d-%d)",
                         kernel.symbol, kernel.build_tag, len(asm_lines), source_line,
                         kernel.start_line, kernel.end_line)

        return matches


def unique_source_files(kernels: List[KernelRegion]) -> List[str]:
    """Sorted basenames of every source file referenced by the kernels."""
    basenames = set()
    for kernel in kernels:
        for file_path in kernel.file_table.values():
            basenames.add(os.path.basename(file_path))
    return sorted(basenames)


def order_matches(matches: List[MatchRecord]) -> List[MatchRecord]:
    """Most recently modified first; ties keep discovery order."""
    return sorted(matches, key=lambda m: m.mtime, reverse=True)


def group_by_source_file(matches: List[MatchRecord]) -> Dict[str, List[MatchRecord]]:
    """Group matches by matched source basename, preserving order."""
    groups: Dict[str, List[MatchRecord]] = {}
    for match in matches:
        groups.setdefault(os.path.basename(match.source_file), []).append(match)
    return groups


def _same_file(a: MatchRecord, b: MatchRecord) -> bool:
    return os.path.normpath(a.kernel.assembly_path) == os.path.normpath(b.kernel.assembly_path)


def check_staleness(selected: MatchRecord, candidates: List[MatchRecord]) -> StalenessInfo:
    """Decide whether a match is an outdated build of its kernel.

    Among candidates with the selected symbol, the one with the greatest
    modification time is the latest; the selected match is outdated when
    it comes from a different assembly file.

    Args:
        selected: The match being displayed
        candidates: All matches of the current resolution

    Returns:
        StalenessInfo with the outdated flag and the latest version
    """
    versions = [m for m in candidates if m.symbol == selected.symbol]
    if len(versions) <= 1:
        return StalenessInfo(outdated=False, latest=selected, versions=max(len(versions), 1))

    latest = max(versions, key=lambda m: m.mtime)
    return StalenessInfo(
        outdated=not _same_file(selected, latest),
        latest=latest,
        versions=len(versions),
    )


def comparable_versions(selected: MatchRecord, matches: List[MatchRecord]) -> List[MatchRecord]:
    """Other versions of the selected kernel, most recent first."""
    others = [m for m in matches if m.symbol == selected.symbol and m is not selected]
    return order_matches(others)
