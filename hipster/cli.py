#!/usr/bin/env python3
"""
Command-line entry point for hipster.

Subcommands are defined in hipster.commands; each module contributes an
add_<name>_parser function that registers its handler.
"""

import sys
import argparse
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import List, Optional

from .commands.diff import add_diff_parser
from .commands.kernels import add_kernels_parser
from .commands.lookup import add_lookup_parser
from .commands.match import add_match_parser


def _package_version() -> str:
    try:
        return version('hipster')
    except PackageNotFoundError:
        return 'unknown'


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog='hipster',
        description='Map HIP source lines to generated GCN assembly and back',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {_package_version()}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True
    add_kernels_parser(subparsers)
    add_match_parser(subparsers)
    add_lookup_parser(subparsers)
    add_diff_parser(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
