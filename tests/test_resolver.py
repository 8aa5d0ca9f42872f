"""Tests for source file resolution, staleness and match ordering."""

import pytest

from hipster.config import HipsterConfig
from hipster.diagnostics import DiagnosticKind, DiagnosticSink
from hipster.resolver import (
    MatchResolver,
    check_staleness,
    comparable_versions,
    find_source_file_id,
    group_by_source_file,
    order_matches,
    unique_source_files,
)

# Line index of global_store_dword in make_assembly_file([make_kernel_asm()])
STORE_LINE = 13


def test_end_to_end_single_match(workspace, kernel_asm, assembly_file):
    """Querying a.hip line 5 yields the store attributed to .loc 1 5 1."""
    path = workspace.add_assembly('build', assembly_file([kernel_asm()]), name='foo')

    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip', 5)

    assert len(matches) == 1
    match = matches[0]
    assert match.symbol == '_Z6kernelPi'
    assert match.asm_lines == [STORE_LINE]
    assert 'global_store_dword' in match.buffer.lines[STORE_LINE]
    assert match.kernel.assembly_path == str(path)
    assert match.source_file == '/p/a.hip'
    assert match.file_id == 1
    assert match.build_tag == 'build'


def test_basename_match_ignores_directories(workspace, kernel_asm, assembly_file):
    """The queried file is compared by basename only."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))

    matches = MatchResolver(HipsterConfig()).resolve(
        str(workspace.root), '/somewhere/else/entirely/a.hip', 5)

    assert [m.asm_lines for m in matches] == [[STORE_LINE]]


def test_line_zero_returns_kernels_only(workspace, kernel_asm, assembly_file):
    """Without a line the kernel is listed with no instruction hits."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))

    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip')

    assert len(matches) == 1
    assert matches[0].asm_lines == []


def test_line_without_instructions_still_matches(workspace, kernel_asm, assembly_file):
    """A kernel stays selectable when the queried line produced no code."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))

    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip', 42)

    assert len(matches) == 1
    assert matches[0].asm_lines == []


def test_kernels_not_referencing_file_excluded(workspace, kernel_asm, assembly_file):
    """Kernels whose file table lacks the basename are not matches."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))
    sink = DiagnosticSink()

    matches = MatchResolver(HipsterConfig(), sink).resolve(str(workspace.root), 'other.hip', 5)

    assert matches == []
    assert len(sink.of_kind(DiagnosticKind.NO_SOURCE_FILE_MATCH)) == 1


def test_first_basename_match_wins(workspace, kernel_asm, assembly_file):
    """Among same-basename entries the first declared file id is used."""
    files = [
        '\t.file\t3 "/p/lib" "a.hip"',
        '\t.file\t1 "/p" "a.hip"',
    ]
    body = [
        '\t.loc\t1 5 1',
        '\tv_mov_b32 v0, 1',
        '\t.loc\t3 5 1',
        '\tv_mov_b32 v0, 3',
    ]
    workspace.add_assembly('build', assembly_file([kernel_asm(body=body)], files=files))

    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip', 5)

    assert len(matches) == 1
    assert matches[0].file_id == 3
    assert matches[0].source_file == '/p/lib/a.hip'
    hit = matches[0].asm_lines
    assert len(hit) == 1
    assert 'v0, 3' in matches[0].buffer.lines[hit[0]]


def test_hits_restricted_to_kernel_region(workspace, kernel_asm, assembly_file):
    """Each kernel reports only instructions inside its own span."""
    first = kernel_asm('_Z5firstPi')
    second = kernel_asm('_Z6secondPi')
    workspace.add_assembly('build', assembly_file([first, second]))

    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip', 5)

    assert [m.symbol for m in matches] == ['_Z5firstPi', '_Z6secondPi']
    for match in matches:
        assert len(match.asm_lines) == 1
        assert match.kernel.contains(match.asm_lines[0])
    assert matches[0].asm_lines != matches[1].asm_lines


def test_two_build_roots_staleness(workspace, kernel_asm, assembly_file):
    """The older of two same-symbol builds is outdated; the newer is latest."""
    content = assembly_file([kernel_asm()])
    workspace.add_assembly('build', content, mtime=1_000_000)
    workspace.add_assembly('build2', content, mtime=2_000_000)
    config = HipsterConfig(build_directories=['build', 'build2'])

    matches = MatchResolver(config).resolve(str(workspace.root), 'a.hip', 5)

    assert [m.build_tag for m in matches] == ['build', 'build2']
    older, newer = matches
    older_info = check_staleness(older, matches)
    assert older_info.outdated is True
    assert older_info.latest_build_tag == 'build2'
    assert older_info.versions == 2

    newer_info = check_staleness(newer, matches)
    assert newer_info.outdated is False
    assert newer_info.latest is newer


def test_single_version_never_outdated(workspace, kernel_asm, assembly_file):
    """A kernel with one build is its own latest version."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))
    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip')

    info = check_staleness(matches[0], matches)

    assert info.outdated is False
    assert info.latest is matches[0]
    assert info.versions == 1


def test_staleness_ignores_other_symbols(workspace, kernel_asm, assembly_file):
    """Newer builds of a different kernel do not make a match outdated."""
    workspace.add_assembly('build', assembly_file([kernel_asm('_Z5firstPi')]), mtime=1000)
    workspace.add_assembly('build2', assembly_file([kernel_asm('_Z6secondPi')]), mtime=5000)
    config = HipsterConfig(build_directories=['build', 'build2'])
    matches = MatchResolver(config).resolve(str(workspace.root), 'a.hip')

    assert check_staleness(matches[0], matches).outdated is False


def test_order_matches_most_recent_first(workspace, kernel_asm, assembly_file):
    """Ordering is by modification time descending, ties in discovery order."""
    content = assembly_file([kernel_asm()])
    workspace.add_assembly('old', content, mtime=1000)
    workspace.add_assembly('tie_a', content, mtime=3000)
    workspace.add_assembly('tie_b', content, mtime=3000)
    workspace.add_assembly('mid', content, mtime=2000)
    config = HipsterConfig(build_directories=['old', 'tie_a', 'tie_b', 'mid'])
    matches = MatchResolver(config).resolve(str(workspace.root), 'a.hip')

    ordered = order_matches(matches)

    assert [m.build_tag for m in ordered] == ['tie_a', 'tie_b', 'mid', 'old']


def test_comparable_versions(workspace, kernel_asm, assembly_file):
    """Other versions exclude the selected match and other symbols."""
    workspace.add_assembly('build', assembly_file([kernel_asm(), kernel_asm('_Z5otherPi')]),
                           mtime=1000)
    workspace.add_assembly('build2', assembly_file([kernel_asm()]), mtime=2000)
    workspace.add_assembly('build3', assembly_file([kernel_asm()]), mtime=3000)
    config = HipsterConfig(build_directories=['build', 'build2', 'build3'])
    matches = MatchResolver(config).resolve(str(workspace.root), 'a.hip')
    selected = matches[0]

    versions = comparable_versions(selected, matches)

    assert [(m.symbol, m.build_tag) for m in versions] == [
        ('_Z6kernelPi', 'build3'),
        ('_Z6kernelPi', 'build2'),
    ]


def test_group_by_source_file(workspace, kernel_asm, assembly_file):
    """Matches are grouped under the matched source basename."""
    workspace.add_assembly('build', assembly_file([kernel_asm()]))
    matches = MatchResolver(HipsterConfig()).resolve(str(workspace.root), 'a.hip')

    groups = group_by_source_file(matches)

    assert list(groups) == ['a.hip']
    assert groups['a.hip'] == matches


def test_unique_source_files(workspace, kernel_asm, assembly_file):
    """The inventory lists every referenced basename once, sorted."""
    files = [
        '\t.file\t1 "/p" "z.hip"',
        '\t.file\t2 "/opt/rocm/include/hip/amd_detail/amd_hip_runtime.h"',
        '\t.file\t3 "/q" "z.hip"',
    ]
    workspace.add_assembly('build', assembly_file([kernel_asm()], files=files))
    kernels = MatchResolver(HipsterConfig()).discover_kernels(str(workspace.root))

    assert unique_source_files(kernels) == ['amd_hip_runtime.h', 'z.hip']


@pytest.mark.parametrize('table, basename, expected', [
    ({1: '/p/a.hip', 2: '/q/a.hip'}, 'a.hip', 1),
    ({2: '/q/a.hip', 1: '/p/a.hip'}, 'a.hip', 2),
    ({1: '/p/a.hip'}, 'b.hip', None),
    ({}, 'a.hip', None),
])
def test_find_source_file_id(table, basename, expected):
    """File ids are searched in declaration order."""
    assert find_source_file_id(table, basename) == expected
