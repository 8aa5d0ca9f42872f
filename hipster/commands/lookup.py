"""Lookup subcommand - map an assembly line back to its source location."""

import argparse
import logging

from ..diagnostics import DiagnosticSink
from ..exceptions import HipsterError
from ..session import AssemblySession
from .common import add_workspace_arguments, config_from_args, print_json

logger = logging.getLogger(__name__)


def add_lookup_parser(subparsers) -> argparse.ArgumentParser:
    """Add 'lookup' subcommand parser."""
    parser = subparsers.add_parser(
        'lookup',
        help='Map an assembly line to its source location',
        description='Reverse-map a line of the selected kernel\'s assembly file to source.',
    )
    add_workspace_arguments(parser)
    parser.add_argument('source', help='Source file used to select kernels')
    parser.add_argument(
        '--asm-line',
        type=int,
        required=True,
        help='1-based line in the assembly file'
    )
    parser.add_argument(
        '--index',
        type=int,
        default=0,
        help='Position of the kernel in the match list (default: 0, most recent)'
    )
    parser.add_argument('--json', action='store_true', help='Output JSON instead of text')
    parser.set_defaults(func=run_lookup)
    return parser


def run_lookup(args) -> int:
    """
    Run lookup subcommand.

    Returns:
        Exit code (0 for success, 1 for error, 2 when the line has no mapping)
    """
    try:
        config = config_from_args(args)
        session = AssemblySession(args.workspace, config, sink=DiagnosticSink())
        active = session.refresh(args.source)
        if not active.matches:
            logger.error("No assembly found for %s", args.source)
            return 1
        if args.index:
            active = session.select(args.index)

        location = session.source_for(args.asm_line - 1)
    except HipsterError as e:
        logger.error("%s", e)
        return 1

    if location is None:
        print(f"Assembly line {args.asm_line} has no source mapping")
        return 2

    if args.json:
        print_json({
            'symbol': active.selected.symbol,
            'assembly_file': active.selected.kernel.assembly_path,
            'asm_line': args.asm_line,
            'file': location.file,
            'line': location.line + 1,
        })
    else:
        print(f"{location.file}:{location.line + 1}")
    return 0
