"""Tests for assembly line classification."""

import pytest

from hipster.asm_lines import (
    LineKind,
    classify_line,
    instruction_filter_classes,
    instruction_histogram,
    instruction_mnemonic,
    is_instruction,
)


@pytest.mark.parametrize('line, kind', [
    ('', LineKind.EMPTY),
    ('   \t', LineKind.EMPTY),
    ('\t.loc\t1 5 1', LineKind.DIRECTIVE),
    ('.Lfunc_end0:', LineKind.DIRECTIVE),
    ('; %bb.0:', LineKind.COMMENT),
    ('// kernel body', LineKind.COMMENT),
    ('# comment', LineKind.COMMENT),
    ('_Z6kernelPi:', LineKind.LABEL),
    ('  BB0_2:', LineKind.LABEL),
    ('\ts_endpgm', LineKind.INSTRUCTION),
    ('\tglobal_store_dword v0, v1, s[0:1]', LineKind.INSTRUCTION),
    ('\ts_waitcnt lgkmcnt(0) :', LineKind.INSTRUCTION),
])
def test_classify_line(line, kind):
    """Each line falls into exactly one kind."""
    assert classify_line(line) == kind


def test_label_with_space_is_instruction():
    """Text ending in ':' only counts as a label without spaces."""
    assert is_instruction('weird label:')
    assert not is_instruction('label:')


def test_instruction_mnemonic():
    """Mnemonics are the lower-cased leading word of instructions."""
    assert instruction_mnemonic('\tV_ADD_U32 v0, v1, v2') == 'v_add_u32'
    assert instruction_mnemonic('\ts_endpgm') == 's_endpgm'
    assert instruction_mnemonic('\t.p2align 8') is None
    assert instruction_mnemonic('; s_nop 0') is None


def test_instruction_filter_classes():
    """Viewer filter tags follow the line kind."""
    assert instruction_filter_classes('\t.text') == ['filter-directive']
    assert instruction_filter_classes('; note') == ['filter-comment']
    assert instruction_filter_classes('') == ['filter-empty']
    assert instruction_filter_classes('\ts_nop 0') == ['instr-s_nop']
    assert instruction_filter_classes('_Z6kernelPi:') == []


def test_instruction_histogram_most_common_first():
    """Histogram counts instructions only, most frequent first."""
    lines = [
        '\t.loc\t1 5 1',
        '\ts_nop 0',
        '\tv_mov_b32 v0, 0',
        '\ts_nop 1',
        '; s_nop in a comment',
        '\ts_nop 2',
        '\tv_mov_b32 v1, 0',
        '\ts_endpgm',
    ]
    histogram = instruction_histogram(lines)

    assert histogram == {'s_nop': 3, 'v_mov_b32': 2, 's_endpgm': 1}
    assert list(histogram)[0] == 's_nop'
