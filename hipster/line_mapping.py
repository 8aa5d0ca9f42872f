#!/usr/bin/env python3
"""
Bidirectional source/assembly line mapping built from .loc directives.

A single pass over the buffer tracks the current (file id, source line)
set by the latest .loc directive. Every line under an active location is
recorded in the reverse map; only genuine instructions go into the forward
buckets, so highlighting a source line never selects labels or directives.
"""

import os
import re
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .asm_lines import is_instruction
from .models import SourceFileTable, SourceLocation

logger = logging.getLogger(__name__)

# .loc <file_id> <line> <column>
LOC_DIRECTIVE_RE = re.compile(r'^\s*\.loc\s+(\d+)\s+(\d+)\s+(\d+)')


class LineMappingIndex:
    """Forward and reverse line maps for one assembly buffer.

    Source lines are 0-indexed throughout; .loc lines are converted on
    parse. Assembly line indices are positions in the buffer's line list.
    """

    def __init__(self):
        self.forward_map: Dict[Tuple[str, int], List[int]] = {}
        self.reverse_map: Dict[int, SourceLocation] = {}

    @classmethod
    def build(cls, lines: List[str], file_table: SourceFileTable,
              file_ids: Optional[Iterable[int]] = None) -> 'LineMappingIndex':
        """Build the index in one pass over the buffer lines.

        Args:
            lines: Assembly buffer lines
            file_table: File-id table of the same buffer
            file_ids: Only record locations for these file ids (all when None)

        Returns:
            A new LineMappingIndex
        """
        index = cls()
        allowed: Optional[Set[int]] = set(file_ids) if file_ids is not None else None
        current_file_id: Optional[int] = None
        current_line: Optional[int] = None

        for i, line in enumerate(lines):
            loc_match = LOC_DIRECTIVE_RE.match(line)
            if loc_match:
                current_file_id = int(loc_match.group(1))
                # Line 0 means "no source line"; it deactivates the mapping
                source_line = int(loc_match.group(2)) - 1
                current_line = source_line if source_line >= 0 else None

            if current_file_id is None or current_line is None:
                continue
            if allowed is not None and current_file_id not in allowed:
                continue

            source_path = file_table.get(current_file_id)
            if not source_path:
                continue

            index.reverse_map[i] = SourceLocation(file=source_path, line=current_line)
            if is_instruction(line):
                index.forward_map.setdefault((source_path, current_line), []).append(i)

        logger.debug("Built line mapping: %d source lines, %d assembly lines",
                     len(index.forward_map), len(index.reverse_map))
        return index

    def forward(self, source_file: str, source_line: int) -> List[int]:
        """Assembly line indices generated for a source line.

        Args:
            source_file: Source path, normalized before lookup
            source_line: 0-indexed source line

        Returns:
            Ordered list of assembly line indices, empty when unmapped
        """
        key = (os.path.normpath(source_file), source_line)
        return list(self.forward_map.get(key, []))

    def reverse(self, asm_line: int) -> Optional[SourceLocation]:
        """Source location of an assembly line, None when unmapped."""
        location = self.reverse_map.get(asm_line)
        if location:
            logger.debug("Assembly line %d -> %s:%d", asm_line, location.file, location.line)
        else:
            logger.debug("Assembly line %d has no mapping", asm_line)
        return location

    def source_lines(self, source_file: str) -> List[int]:
        """Sorted source lines of a file that produced instructions."""
        normalized = os.path.normpath(source_file)
        return sorted(line for path, line in self.forward_map if path == normalized)
