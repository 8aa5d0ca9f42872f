"""Match subcommand - find the kernels and instructions for a source line."""

import argparse
import logging

from jinja2 import TemplateError as Jinja2TemplateError

from ..diagnostics import DiagnosticSink
from ..exceptions import HipsterError
from ..formatter import build_matches_context, render_builtin_template
from ..resolver import MatchResolver
from .common import add_workspace_arguments, config_from_args, print_json, resolve_ordered

logger = logging.getLogger(__name__)


def add_match_parser(subparsers) -> argparse.ArgumentParser:
    """Add 'match' subcommand parser."""
    parser = subparsers.add_parser(
        'match',
        help='Find kernels compiled from a source file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=(
            'Find every kernel, across all build directories, whose debug info\n'
            'references the source file. Files are compared by basename.\n\n'
            'With --line, also list the instructions generated for that line.'
        ),
        epilog="""
examples:
  hipster match . src/vector_add.hip
  hipster match . vector_add.hip --line 42 --build-dir build --build-dir build-old
        """
    )
    add_workspace_arguments(parser)
    parser.add_argument('source', help='Source file (only the basename is compared)')
    parser.add_argument(
        '--line',
        type=int,
        default=0,
        help='1-based source line to map (default: 0, kernels only)'
    )
    parser.add_argument('--json', action='store_true', help='Output JSON instead of text')
    parser.set_defaults(func=run_match)
    return parser


def run_match(args) -> int:
    """
    Run match subcommand.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args.line < 0:
        logger.error("--line must not be negative")
        return 1

    try:
        config = config_from_args(args)
        sink = DiagnosticSink()
        matches = resolve_ordered(MatchResolver(config, sink), args, args.line)
        context = build_matches_context(matches, args.source, args.line, config, sink)

        if args.json:
            print_json(context)
        else:
            print(render_builtin_template('matches.j2', context), end='')
        return 0

    except (FileNotFoundError, Jinja2TemplateError) as e:
        logger.error("Template error: %s", e)
        return 1
    except HipsterError as e:
        logger.error("%s", e)
        return 1
