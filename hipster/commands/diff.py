"""Diff subcommand - compare two builds of the same kernel side by side."""

import argparse
import logging
from typing import List

from jinja2 import TemplateError as Jinja2TemplateError

from ..diagnostics import DiagnosticSink
from ..exceptions import HipsterError, SelectionError
from ..formatter import build_diff_context, render_builtin_template
from ..models import MatchRecord
from ..resolver import MatchResolver, check_staleness
from ..compare import align_versions
from .common import add_workspace_arguments, config_from_args, print_json, resolve_ordered

logger = logging.getLogger(__name__)


def add_diff_parser(subparsers) -> argparse.ArgumentParser:
    """Add 'diff' subcommand parser."""
    parser = subparsers.add_parser(
        'diff',
        help='Compare two versions of a kernel',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=(
            'Positionally compare two builds of a kernel found in different\n'
            'build directories. Versions are numbered most recent first.'
        ),
        epilog="""
examples:
  hipster diff . vector_add.hip _Z10vector_addPfS_S_i --build-dir build --build-dir build-old
        """
    )
    add_workspace_arguments(parser)
    parser.add_argument('source', help='Source file the kernel was compiled from')
    parser.add_argument('symbol', help='Mangled kernel symbol')
    parser.add_argument('--left', type=int, default=0, help='Left version (default: 0, latest)')
    parser.add_argument('--right', type=int, default=1, help='Right version (default: 1)')
    parser.add_argument('--width', type=int, default=60, help='Column width (default: 60)')
    parser.add_argument('--json', action='store_true', help='Output JSON instead of text')
    parser.set_defaults(func=run_diff)
    return parser


def _pick(versions: List[MatchRecord], position: int) -> MatchRecord:
    if not 0 <= position < len(versions):
        raise SelectionError(
            f"Version {position} does not exist ({len(versions)} version(s) found)")
    return versions[position]


def run_diff(args) -> int:
    """
    Run diff subcommand.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = config_from_args(args)
        sink = DiagnosticSink()
        matches = resolve_ordered(MatchResolver(config, sink), args)
        versions = [m for m in matches if m.symbol == args.symbol]
        left = _pick(versions, args.left)
        right = _pick(versions, args.right)

        context = build_diff_context(align_versions(left.kernel, right.kernel),
                                     config, sink, args.width)
        context['left']['outdated'] = check_staleness(left, matches).outdated
        context['right']['outdated'] = check_staleness(right, matches).outdated

        if args.json:
            print_json(context)
        else:
            print(render_builtin_template('diff.j2', context), end='')
        return 0

    except (FileNotFoundError, Jinja2TemplateError) as e:
        logger.error("Template error: %s", e)
        return 1
    except HipsterError as e:
        logger.error("%s", e)
        return 1
