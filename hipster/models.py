#!/usr/bin/env python3
"""
Data models for assembly buffers, kernel regions and match results.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# file-id -> normalized source path, in first-declaration order of the ids
SourceFileTable = Dict[int, str]


@dataclass
class SourceLocation:
    """A source position; line is 0-indexed"""
    file: str
    line: int

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary format for JSON serialization"""
        return {'file': self.file, 'line': self.line}


@dataclass
class AssemblyBuffer:
    """Full text of one scanned assembly file"""
    path: str
    content: str
    build_tag: str
    mtime: float
    lines: List[str] = field(init=False, repr=False)

    def __post_init__(self):
        self.lines = self.content.split('\n')

    @property
    def name(self) -> str:
        """Basename of the assembly file"""
        return os.path.basename(self.path)


@dataclass
class KernelRegion:
    """A kernel's inclusive line span within an AssemblyBuffer.

    The file table is the buffer's table, shared by every region parsed
    from the same buffer.
    """
    symbol: str
    start_line: int
    end_line: int
    buffer: AssemblyBuffer = field(repr=False, compare=False)
    file_table: SourceFileTable = field(repr=False, compare=False)

    @property
    def build_tag(self) -> str:
        """Name of the build root the buffer was found under"""
        return self.buffer.build_tag

    @property
    def mtime(self) -> float:
        """Modification time of the assembly file"""
        return self.buffer.mtime

    @property
    def assembly_path(self) -> str:
        """Path of the assembly file"""
        return self.buffer.path

    @property
    def lines(self) -> List[str]:
        """The region's own lines"""
        return self.buffer.lines[self.start_line:self.end_line + 1]

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1

    def contains(self, line_index: int) -> bool:
        """Check whether a buffer line index lies inside this region."""
        return self.start_line <= line_index <= self.end_line


@dataclass
class MatchRecord:
    """A kernel known to reference the queried source file"""
    kernel: KernelRegion
    source_file: str
    file_id: int
    asm_lines: List[int] = field(default_factory=list)

    @property
    def symbol(self) -> str:
        """Mangled kernel symbol"""
        return self.kernel.symbol

    @property
    def buffer(self) -> AssemblyBuffer:
        """The buffer the kernel was parsed from"""
        return self.kernel.buffer

    @property
    def build_tag(self) -> str:
        """Build root of the kernel"""
        return self.kernel.build_tag

    @property
    def mtime(self) -> float:
        """Modification time of the kernel's assembly file"""
        return self.kernel.mtime

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary format for JSON serialization"""
        return {
            'symbol': self.symbol,
            'source_file': self.source_file,
            'file_id': self.file_id,
            'assembly_file': self.kernel.assembly_path,
            'build_directory': self.build_tag,
            'start_line': self.kernel.start_line,
            'end_line': self.kernel.end_line,
            'mtime': self.mtime,
            'asm_lines': list(self.asm_lines),
        }


@dataclass
class StalenessInfo:
    """Whether a match is the most recent build of its symbol"""
    outdated: bool
    latest: Optional[MatchRecord]
    versions: int

    @property
    def latest_build_tag(self) -> Optional[str]:
        """Build root holding the most recent version"""
        return self.latest.build_tag if self.latest else None


@dataclass
class DiffLine:
    """One aligned position of a side-by-side diff.

    line_index is the buffer line index, or None for padding.
    """
    text: str
    changed: bool
    line_index: Optional[int] = None


@dataclass
class DiffAlignment:
    """Positional alignment of two kernel regions"""
    left_kernel: KernelRegion
    right_kernel: KernelRegion
    left: List[DiffLine]
    right: List[DiffLine]

    @property
    def changed(self) -> List[bool]:
        """Per-position changed flags"""
        return [line.changed for line in self.left]

    @property
    def changed_count(self) -> int:
        """Number of positions that differ"""
        return sum(1 for line in self.left if line.changed)

    def __len__(self) -> int:
        return len(self.left)
