"""Build template contexts for kernel listings, matches and diffs, and render them."""

import os
from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Environment, FileSystemLoader

from .asm_lines import instruction_histogram
from .config import HipsterConfig
from .demangle import demangle_symbol
from .diagnostics import DiagnosticSink
from .models import DiffAlignment, KernelRegion, MatchRecord
from .resolver import check_staleness, unique_source_files

TEMPLATE_DIR = Path(__file__).parent / 'templates'


# ── Shared helpers ──────────────────────────────────────────────────

def kernel_summary(kernel: KernelRegion, config: Optional[HipsterConfig] = None,
                   sink: Optional[DiagnosticSink] = None) -> dict:
    """Display fields for one kernel region."""
    return {
        'symbol': kernel.symbol,
        'name': demangle_symbol(kernel.symbol, config, sink),
        'build_directory': kernel.build_tag,
        'assembly_file': kernel.assembly_path,
        'assembly_name': os.path.basename(kernel.assembly_path),
        'start_line': kernel.start_line,
        'end_line': kernel.end_line,
        'line_count': len(kernel),
        'mtime': kernel.mtime,
    }


def render_jinja2_template(template_path: str, context: dict) -> str:
    """Load and render a Jinja2 template.

    Raises:
        FileNotFoundError: If template file doesn't exist
        jinja2.TemplateError: If template has syntax errors
    """
    template_file = Path(template_path)
    if not template_file.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")

    env = Environment(
        loader=FileSystemLoader(template_file.parent),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    template = env.get_template(template_file.name)
    return template.render(**context)


def render_builtin_template(name: str, context: dict) -> str:
    """Render one of the templates shipped with the package."""
    return render_jinja2_template(str(TEMPLATE_DIR / name), context)


# ── Context builders ────────────────────────────────────────────────

def build_kernels_context(kernels: List[KernelRegion],
                          config: Optional[HipsterConfig] = None,
                          sink: Optional[DiagnosticSink] = None) -> dict[str, Any]:
    """
    Build template context for a kernel inventory.

    Returns:
        Dictionary with template variables:
        - kernels: display fields per kernel, in discovery order
        - source_files: sorted basenames referenced by any kernel
    """
    return {
        'kernels': [kernel_summary(k, config, sink) for k in kernels],
        'source_files': unique_source_files(kernels),
    }


def build_matches_context(matches: List[MatchRecord], source_file: str,
                          source_line: int = 0,
                          config: Optional[HipsterConfig] = None,
                          sink: Optional[DiagnosticSink] = None) -> dict[str, Any]:
    """
    Build template context for resolver output.

    Args:
        matches: Ordered matches (most recent first)
        source_file: Queried source file
        source_line: Queried 1-based line, 0 for none

    Returns:
        Dictionary with template variables:
        - source_file, source_line: the query
        - matches: kernel fields plus staleness, hit lines and instruction counts
        - has_matches: False when nothing references the source file
    """
    entries = []
    for position, match in enumerate(matches):
        staleness = check_staleness(match, matches)
        lines = match.buffer.lines
        entries.append({
            **kernel_summary(match.kernel, config, sink),
            'position': position,
            'source_path': match.source_file,
            'file_id': match.file_id,
            'outdated': staleness.outdated,
            'latest_build_directory': staleness.latest_build_tag,
            'versions': staleness.versions,
            'asm_lines': [{'index': i, 'text': lines[i].strip()} for i in match.asm_lines],
            'instructions': instruction_histogram(match.kernel.lines),
        })

    return {
        'source_file': os.path.basename(source_file),
        'source_line': source_line,
        'matches': entries,
        'has_matches': bool(entries),
    }


def build_diff_context(alignment: DiffAlignment,
                       config: Optional[HipsterConfig] = None,
                       sink: Optional[DiagnosticSink] = None,
                       width: int = 60) -> dict[str, Any]:
    """
    Build template context for a side-by-side diff.

    Line numbers are 1-based for display; padding rows carry None.
    """
    rows = []
    for left, right in zip(alignment.left, alignment.right):
        rows.append({
            'changed': left.changed,
            'left_number': left.line_index + 1 if left.line_index is not None else None,
            'right_number': right.line_index + 1 if right.line_index is not None else None,
            'left': left.text.rstrip()[:width],
            'right': right.text.rstrip()[:width],
        })

    return {
        'left': kernel_summary(alignment.left_kernel, config, sink),
        'right': kernel_summary(alignment.right_kernel, config, sink),
        'rows': rows,
        'width': width,
        'changed_count': alignment.changed_count,
        'total': len(alignment),
    }
