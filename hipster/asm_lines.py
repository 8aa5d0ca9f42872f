#!/usr/bin/env python3
"""
Classification of GCN assembly text lines.
"""

import re
from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Optional

COMMENT_PREFIXES = (';', '//', '#')

_MNEMONIC_RE = re.compile(r'^(\w+)')


class LineKind(Enum):
    """Kinds of assembly text lines"""
    EMPTY = "empty"
    DIRECTIVE = "directive"
    COMMENT = "comment"
    LABEL = "label"
    INSTRUCTION = "instruction"


def classify_line(line: str) -> LineKind:
    """Classify a raw assembly line.

    Args:
        line: Line text, leading/trailing whitespace allowed

    Returns:
        The LineKind of the trimmed text
    """
    trimmed = line.strip()
    if not trimmed:
        return LineKind.EMPTY
    if trimmed.startswith('.'):
        return LineKind.DIRECTIVE
    if trimmed.startswith(COMMENT_PREFIXES):
        return LineKind.COMMENT
    if trimmed.endswith(':') and ' ' not in trimmed:
        return LineKind.LABEL
    return LineKind.INSTRUCTION


def is_instruction(line: str) -> bool:
    """Check whether a line is a genuine instruction."""
    return classify_line(line) == LineKind.INSTRUCTION


def instruction_mnemonic(line: str) -> Optional[str]:
    """Lower-cased leading word of an instruction line, None otherwise."""
    if not is_instruction(line):
        return None
    match = _MNEMONIC_RE.match(line.strip())
    return match.group(1).lower() if match else None


def instruction_filter_classes(line: str) -> List[str]:
    """Filter tags for a line, as used to toggle line kinds in a viewer.

    Returns:
        Any of 'filter-directive', 'filter-comment', 'filter-empty', or a
        single 'instr-<mnemonic>' tag for instructions
    """
    kind = classify_line(line)
    if kind == LineKind.DIRECTIVE:
        return ['filter-directive']
    if kind == LineKind.COMMENT:
        return ['filter-comment']
    if kind == LineKind.EMPTY:
        return ['filter-empty']
    mnemonic = instruction_mnemonic(line)
    return [f'instr-{mnemonic}'] if mnemonic else []


def instruction_histogram(lines: Iterable[str]) -> Dict[str, int]:
    """Count instruction mnemonics, most common first."""
    counts = Counter(m for m in map(instruction_mnemonic, lines) if m)
    return dict(counts.most_common())
