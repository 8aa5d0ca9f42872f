#!/usr/bin/env python3
"""
Debug directive parsing for GCN assembly text.

This module extracts the two per-buffer structures everything else builds
on: the source file table declared by .file directives, and the kernel
regions delimited by per-function .text sections (or, when the compiler
emitted none, by exported symbols).
"""

import os
import re
import logging
from typing import List, Optional

from .diagnostics import DiagnosticKind, DiagnosticSink
from .models import AssemblyBuffer, KernelRegion, SourceFileTable

logger = logging.getLogger(__name__)

# .file <id> "<dir>" "<file>"  or  .file <id> "<path>"
FILE_DIRECTIVE_RE = re.compile(r'^\s*\.file\s+(\d+)\s+"([^"]+)"(?:\s+"([^"]+)")?')
# .section .text.<name>,"axG",@progbits,<name>,comdat
TEXT_SECTION_RE = re.compile(r'^\s*\.section\s+\.text\.')
GLOBL_RE = re.compile(r'^\s*\.globl\s+(\S+)')

# Number of lines after a section start searched for the kernel's .globl
SYMBOL_SEARCH_WINDOW = 20
# Exported names this short are metadata, not kernels
MIN_KERNEL_SYMBOL_LENGTH = 6
SYMBOL_SEPARATOR = '.'


def normalize_source_path(directory: Optional[str], filename: str) -> str:
    """Join a declared directory and filename into a normalized path.

    An absolute filename is used as-is, like DW_AT_name against
    DW_AT_comp_dir. This deliberately differs from a plain string join,
    which would nest the filename under the directory ("/build" and
    "/src/a.hip" give /src/a.hip, not /build/src/a.hip).
    """
    if directory and not os.path.isabs(filename):
        return os.path.normpath(os.path.join(directory, filename))
    return os.path.normpath(filename)


def is_kernel_symbol(symbol: str) -> bool:
    """Check that an exported name can name a kernel."""
    return SYMBOL_SEPARATOR not in symbol and len(symbol) >= MIN_KERNEL_SYMBOL_LENGTH


def match_kernel_symbol(line: str) -> Optional[str]:
    """Return the exported name on a .globl line if it passes the kernel filter."""
    match = GLOBL_RE.match(line)
    if match and is_kernel_symbol(match.group(1)):
        return match.group(1)
    return None


class DebugInfoParser:
    """Extracts source file tables and kernel regions from assembly buffers"""

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        self.sink = sink if sink is not None else DiagnosticSink()

    @staticmethod
    def extract_source_files(lines: List[str]) -> SourceFileTable:
        """Build the file-id table from .file directives.

        A later directive for an id overwrites the earlier path; the id keeps
        its original position in iteration order.

        Args:
            lines: Assembly buffer lines

        Returns:
            Dictionary mapping file id to normalized path
        """
        source_files: SourceFileTable = {}

        for line in lines:
            match = FILE_DIRECTIVE_RE.match(line)
            if not match:
                continue
            file_id = int(match.group(1))
            if match.group(3) is not None:
                source_files[file_id] = normalize_source_path(match.group(2), match.group(3))
            else:
                source_files[file_id] = normalize_source_path(None, match.group(2))

        return source_files

    @staticmethod
    def find_region_starts(lines: List[str]) -> List[int]:
        """Find the line indices that start kernel regions.

        Per-function .text sections delimit kernels. Without any, every
        .globl of a kernel-like symbol starts a region instead.
        """
        starts = [i for i, line in enumerate(lines) if TEXT_SECTION_RE.match(line)]
        if starts:
            return starts

        logger.debug("No .section .text.* directives found, falling back to .globl boundaries")
        return [i for i, line in enumerate(lines) if match_kernel_symbol(line)]

    def extract_kernels(self, buffer: AssemblyBuffer,
                        file_table: Optional[SourceFileTable] = None) -> List[KernelRegion]:
        """Split a buffer into named kernel regions.

        Each region runs from its start line to the line before the next
        start (or the end of the buffer). A region without a kernel .globl
        in its first lines is dropped and reported.

        Args:
            buffer: Assembly buffer to split
            file_table: The buffer's file table, shared by all regions
                (extracted from the buffer when omitted)

        Returns:
            KernelRegions ordered by start line
        """
        lines = buffer.lines
        if file_table is None:
            file_table = self.extract_source_files(lines)

        starts = self.find_region_starts(lines)
        kernels: List[KernelRegion] = []

        for i, start_line in enumerate(starts):
            end_line = starts[i + 1] - 1 if i + 1 < len(starts) else len(lines) - 1

            symbol = None
            for j in range(start_line, min(end_line, start_line + SYMBOL_SEARCH_WINDOW) + 1):
                symbol = match_kernel_symbol(lines[j])
                if symbol:
                    logger.debug("Found kernel symbol: %s at line %d (section starts at %d)",
                                 symbol, j, start_line)
                    break

            if not symbol:
                self.sink.report(DiagnosticKind.NO_KERNEL_SYMBOL,
                                 "Section has no kernel .globl directive, skipping",
                                 path=buffer.path, line=start_line)
                continue

            kernels.append(KernelRegion(
                symbol=symbol,
                start_line=start_line,
                end_line=end_line,
                buffer=buffer,
                file_table=file_table,
            ))

        return kernels

    def parse(self, buffer: AssemblyBuffer) -> List[KernelRegion]:
        """Extract the file table and all kernel regions of a buffer."""
        file_table = self.extract_source_files(buffer.lines)
        kernels = self.extract_kernels(buffer, file_table)
        for kernel in kernels:
            logger.debug("Found kernel: %s in %s [%s] (lines %d-%d)",
                         kernel.symbol, buffer.name, buffer.build_tag,
                         kernel.start_line, kernel.end_line)
        return kernels
