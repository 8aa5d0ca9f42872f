#!/usr/bin/env python3
"""
Side-by-side alignment of two kernel versions.

Alignment is positional: line i of one region is compared with line i of
the other, and the shorter region is padded with empty lines. An inserted
or deleted line therefore shifts every following position.
"""

import logging
from typing import List, Optional

from .models import DiffAlignment, DiffLine, KernelRegion

logger = logging.getLogger(__name__)


def _padded(lines: List[str], start_line: int, length: int) -> List[tuple]:
    """Pair each text with its buffer index, padding with ('', None)."""
    pairs = [(text, start_line + i) for i, text in enumerate(lines)]
    pairs.extend(('', None) for _ in range(length - len(lines)))
    return pairs


def align_versions(left: KernelRegion, right: KernelRegion) -> DiffAlignment:
    """Positionally align two kernel regions.

    Args:
        left: First kernel region
        right: Second kernel region (need not share the symbol)

    Returns:
        DiffAlignment whose sides have equal length; a position is changed
        when the raw texts differ, whitespace included
    """
    left_lines = left.lines
    right_lines = right.lines
    length = max(len(left_lines), len(right_lines))

    left_side: List[DiffLine] = []
    right_side: List[DiffLine] = []
    for (left_text, left_index), (right_text, right_index) in zip(
            _padded(left_lines, left.start_line, length),
            _padded(right_lines, right.start_line, length)):
        changed = left_text != right_text
        left_side.append(DiffLine(text=left_text, changed=changed, line_index=left_index))
        right_side.append(DiffLine(text=right_text, changed=changed, line_index=right_index))

    alignment = DiffAlignment(left_kernel=left, right_kernel=right,
                              left=left_side, right=right_side)
    logger.debug("Compared %s [%s] vs [%s]: %d of %d positions changed",
                 left.symbol, left.build_tag, right.build_tag,
                 alignment.changed_count, length)
    return alignment


def diff_side_location(alignment: DiffAlignment, side: str,
                       position: int) -> Optional[int]:
    """Buffer line index behind a diff position, None for padding.

    Args:
        alignment: The alignment being displayed
        side: 'left' or 'right'
        position: Position within the aligned sequences

    Raises:
        ValueError: If side is not 'left' or 'right'
    """
    if side == 'left':
        lines = alignment.left
    elif side == 'right':
        lines = alignment.right
    else:
        raise ValueError(f"Invalid diff side: {side}")
    if not 0 <= position < len(lines):
        return None
    return lines[position].line_index
