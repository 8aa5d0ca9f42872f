#!/usr/bin/env python3
"""
Discovery of retained GCN assembly files under build directories.

Each configured build directory is walked recursively; every file whose name
follows the per-target ISA dump convention is read once and returned as an
AssemblyBuffer tagged with the build directory's name. A missing directory
or an unreadable file is reported and skipped, never fatal.
"""

import os
import logging
from typing import List, Optional

from .config import HipsterConfig
from .diagnostics import DiagnosticKind, DiagnosticSink
from .exceptions import AssemblyReadError
from .models import AssemblyBuffer

logger = logging.getLogger(__name__)


def read_assembly_file(path: str, build_tag: str) -> AssemblyBuffer:
    """Read one assembly file.

    Args:
        path: Path to the assembly text file
        build_tag: Name of the build directory the file was found under

    Bytes that are not valid UTF-8 (e.g. Latin-1 in comments) decode to
    U+FFFD; the directives read from the text are ASCII.

    Returns:
        AssemblyBuffer with the file's content and modification time

    Raises:
        AssemblyReadError: If the file cannot be read
    """
    try:
        mtime = os.stat(path).st_mtime
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            content = f.read()
    except (IOError, OSError) as e:
        raise AssemblyReadError(f"Failed to read assembly file {path}: {e}") from e

    return AssemblyBuffer(path=path, content=content, build_tag=build_tag, mtime=mtime)


class AssemblyScanner:
    """Finds assembly files across the configured build directories"""

    def __init__(self, config: HipsterConfig, sink: Optional[DiagnosticSink] = None):
        self.config = config
        self.sink = sink if sink is not None else DiagnosticSink()

    def scan(self, workspace_root: str) -> List[AssemblyBuffer]:
        """Scan every configured build directory, in configuration order.

        Args:
            workspace_root: Directory the build directories are relative to

        Returns:
            AssemblyBuffers in discovery order
        """
        buffers: List[AssemblyBuffer] = []

        for build_dir in self.config.build_directories:
            build_path = os.path.join(workspace_root, build_dir)

            if not os.path.isdir(build_path):
                self.sink.report(DiagnosticKind.MISSING_BUILD_DIRECTORY,
                                 "Build directory not found", path=build_path)
                continue

            logger.debug("Scanning build directory: %s", build_path)
            found = self.scan_directory(build_path, build_dir)
            logger.debug("Found %d assembly files in %s", len(found), build_dir)
            buffers.extend(found)

        logger.debug("Total: found %d assembly files across %d directories",
                     len(buffers), len(self.config.build_directories))
        return buffers

    def scan_directory(self, build_path: str, build_tag: str) -> List[AssemblyBuffer]:
        """Recursively collect assembly files below one directory.

        Directory entries are visited in sorted order so that discovery
        order is stable between scans. Symlinked subdirectories are
        followed; a directory already visited through another path is
        pruned, so link cycles terminate.
        """
        buffers: List[AssemblyBuffer] = []
        visited = set()

        def on_walk_error(error: OSError) -> None:
            self.sink.report(DiagnosticKind.UNREADABLE_FILE,
                             f"Cannot list directory: {error.strerror or error}",
                             path=error.filename)

        for dirpath, dirnames, filenames in os.walk(build_path, onerror=on_walk_error,
                                                    followlinks=True):
            real_dir = os.path.realpath(dirpath)
            if real_dir in visited:
                logger.debug("Skipping already scanned directory: %s", dirpath)
                dirnames[:] = []
                continue
            visited.add(real_dir)
            dirnames.sort()
            for filename in sorted(filenames):
                if not self.config.is_assembly_file(filename):
                    continue
                full_path = os.path.join(dirpath, filename)
                try:
                    buffers.append(read_assembly_file(full_path, build_tag))
                except AssemblyReadError as e:
                    self.sink.report(DiagnosticKind.UNREADABLE_FILE, str(e), path=full_path)

        return buffers
