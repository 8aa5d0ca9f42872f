"""Kernels subcommand - list every kernel found in the build directories."""

import argparse
import logging

from jinja2 import TemplateError as Jinja2TemplateError

from ..diagnostics import DiagnosticSink
from ..exceptions import HipsterError
from ..formatter import build_kernels_context, render_builtin_template
from ..resolver import MatchResolver
from .common import add_workspace_arguments, config_from_args, print_json

logger = logging.getLogger(__name__)


def add_kernels_parser(subparsers) -> argparse.ArgumentParser:
    """Add 'kernels' subcommand parser."""
    parser = subparsers.add_parser(
        'kernels',
        help='List kernels and referenced source files',
        description='Scan the build directories and list every kernel region found.',
    )
    add_workspace_arguments(parser)
    parser.add_argument('--json', action='store_true', help='Output JSON instead of text')
    parser.set_defaults(func=run_kernels)
    return parser


def run_kernels(args) -> int:
    """
    Run kernels subcommand.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = config_from_args(args)
        sink = DiagnosticSink()
        kernels = MatchResolver(config, sink).discover_kernels(args.workspace)
        context = build_kernels_context(kernels, config, sink)

        if args.json:
            print_json(context)
        else:
            print(render_builtin_template('kernels.j2', context), end='')
        return 0

    except (FileNotFoundError, Jinja2TemplateError) as e:
        logger.error("Template error: %s", e)
        return 1
    except HipsterError as e:
        logger.error("%s", e)
        return 1
