"""Arguments and helpers shared by subcommands."""

import argparse
import json
from typing import Any, Dict, List

from ..config import HipsterConfig, load_config
from ..models import MatchRecord
from ..resolver import MatchResolver, order_matches


def add_workspace_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the workspace positional and build directory options."""
    parser.add_argument('workspace', help='Workspace root containing the build directories')
    parser.add_argument(
        '--build-dir',
        dest='build_dirs',
        action='append',
        metavar='DIR',
        help='Build directory relative to the workspace (repeatable, default: build)'
    )


def config_from_args(args) -> HipsterConfig:
    """Load the layered configuration for the parsed arguments."""
    return load_config(args.workspace, args.build_dirs)


def resolve_ordered(resolver: MatchResolver, args, source_line: int = 0) -> List[MatchRecord]:
    """Resolve args.source and order the matches most recent first."""
    return order_matches(resolver.resolve(args.workspace, args.source, source_line))


def print_json(data: Dict[str, Any]) -> None:
    """Print a context dictionary as JSON."""
    print(json.dumps(data, indent=2))
