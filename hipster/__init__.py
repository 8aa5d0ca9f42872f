#!/usr/bin/env python3
"""
Source-to-assembly line mapping for AMD GCN kernels.

This package scans HIP build trees for retained GCN ISA text files, parses
their debug directives, and maps source lines to the instructions generated
for them (and back), across one or more build directories.
"""

from .config import HipsterConfig, load_config
from .debug_info import DebugInfoParser
from .line_mapping import LineMappingIndex
from .resolver import MatchResolver, check_staleness
from .compare import align_versions

__all__ = [
    'HipsterConfig',
    'load_config',
    'DebugInfoParser',
    'LineMappingIndex',
    'MatchResolver',
    'check_staleness',
    'align_versions',
]
