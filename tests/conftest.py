"""Shared pytest fixtures for hipster tests."""

import os
from pathlib import Path
from typing import List, Optional

import pytest

from hipster.demangle import clear_demangle_cache

TARGET_SUFFIX = '-hip-amdgcn-amd-amdhsa-gfx90a.s'


def make_kernel_asm(symbol: str = '_Z6kernelPi', body: Optional[List[str]] = None,
                    section: bool = True) -> str:
    """
    Create the text of one kernel as clang emits it with -g -save-temps.

    Args:
        symbol: Mangled kernel symbol
        body: Instruction/directive lines placed after the kernel label
            (default: a store attributed to a.hip:5)
        section: Emit the per-function .text section line

    Returns:
        Assembly text without .file directives
    """
    if body is None:
        body = [
            '\t.loc\t1 4 0',
            '\ts_load_dwordx2 s[0:1], s[4:5], 0x0',
            '\tv_mov_b32_e32 v0, 0',
            '\t.loc\t1 5 1 prologue_end',
            '\tglobal_store_dword v0, v1, s[0:1]',
            '\t.loc\t1 6 1',
            '\ts_endpgm',
        ]
    lines = []
    if section:
        lines.append(f'\t.section\t.text.{symbol},"axG",@progbits,{symbol},comdat')
    lines.extend([
        f'\t.protected\t{symbol}',
        f'\t.globl\t{symbol}',
        '\t.p2align\t8',
        f'\t.type\t{symbol},@function',
        f'{symbol}:',
    ])
    lines.extend(body)
    lines.append('.Lfunc_end0:')
    lines.append(f'\t.size\t{symbol}, .Lfunc_end0-{symbol}')
    return '\n'.join(lines)


def make_assembly_file(kernels: List[str],
                       files: Optional[List[str]] = None) -> str:
    """
    Create a whole assembly file: header, .file table, then kernels.

    Args:
        kernels: Kernel texts from make_kernel_asm
        files: .file directive lines (default: file 1 is /p/a.hip)
    """
    if files is None:
        files = ['\t.file\t1 "/p" "a.hip"']
    header = ['\t.text', '\t.amdgcn_target "amdgcn-amd-amdhsa--gfx90a"']
    return '\n'.join(header + files + kernels) + '\n'


class Workspace:
    """Builds a workspace with build directories of assembly files."""

    def __init__(self, root: Path):
        self.root = root

    def add_assembly(self, build_dir: str, content: str, name: str = 'a',
                     subdir: str = '', mtime: Optional[float] = None) -> Path:
        """Write an assembly file and optionally pin its modification time."""
        directory = self.root / build_dir / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f'{name}{TARGET_SUFFIX}'
        path.write_text(content, encoding='utf-8')
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path


@pytest.fixture
def workspace(tmp_path):
    """An empty workspace rooted in a temporary directory."""
    return Workspace(tmp_path)


@pytest.fixture
def kernel_asm():
    """Factory for single-kernel assembly text."""
    return make_kernel_asm


@pytest.fixture
def assembly_file():
    """Factory for whole assembly files."""
    return make_assembly_file


@pytest.fixture(autouse=True)
def _fresh_demangle_cache():
    """Isolate memoized demangler results between tests."""
    clear_demangle_cache()
    yield
    clear_demangle_cache()
