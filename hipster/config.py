#!/usr/bin/env python3
"""
Configuration for build-tree scanning and demangling.

Settings are layered, lowest precedence first: built-in defaults, the
workspace editor settings file, the HIPSTER_BUILD_DIRECTORIES environment
variable, and explicit arguments.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIRECTORIES = ['build']
DEFAULT_TARGET_INFIX = '-hip-amdgcn-amd-amdhsa-'
DEFAULT_ASSEMBLY_SUFFIX = '.s'
DEFAULT_DEMANGLER = ['c++filt', '-n']
DEFAULT_DEMANGLE_TIMEOUT = 5

SETTINGS_FILE = Path('.vscode') / 'settings.json'
SETTINGS_KEY = 'hipster.buildDirectories'
BUILD_DIRECTORIES_ENV = 'HIPSTER_BUILD_DIRECTORIES'


@dataclass
class HipsterConfig:
    """Scanner and demangler settings"""
    build_directories: List[str] = field(
        default_factory=lambda: list(DEFAULT_BUILD_DIRECTORIES))
    target_infix: str = DEFAULT_TARGET_INFIX
    assembly_suffix: str = DEFAULT_ASSEMBLY_SUFFIX
    demangler: List[str] = field(default_factory=lambda: list(DEFAULT_DEMANGLER))
    demangle_timeout: float = DEFAULT_DEMANGLE_TIMEOUT

    def __post_init__(self):
        # Always scan at least one directory
        if not self.build_directories:
            self.build_directories = list(DEFAULT_BUILD_DIRECTORIES)

    def is_assembly_file(self, filename: str) -> bool:
        """Check if a filename follows the per-target ISA dump convention.

        Args:
            filename: Basename of the file

        Returns:
            True for names like kernel-hip-amdgcn-amd-amdhsa-gfx90a.s
        """
        return self.target_infix in filename and filename.endswith(self.assembly_suffix)


def _read_settings_build_directories(workspace_root: Path) -> Optional[List[str]]:
    """Read the build directory list from the workspace settings file."""
    settings_path = workspace_root / SETTINGS_FILE
    if not settings_path.is_file():
        return None

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            settings = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {settings_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {settings_path}: {e}") from e

    if not isinstance(settings, dict) or SETTINGS_KEY not in settings:
        return None

    value = settings[SETTINGS_KEY]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(
            f"{SETTINGS_KEY} in {settings_path} must be a list of strings")

    logger.debug("Build directories from %s: %s", settings_path, value)
    return value


def load_config(workspace_root: str,
                build_directories: Optional[List[str]] = None) -> HipsterConfig:
    """Build the effective configuration for a workspace.

    Args:
        workspace_root: Workspace directory that build directories are relative to
        build_directories: Explicit build directory list (highest precedence)

    Returns:
        HipsterConfig with layered settings applied

    Raises:
        ConfigurationError: If the workspace settings file is malformed
    """
    config = HipsterConfig()

    from_settings = _read_settings_build_directories(Path(workspace_root))
    if from_settings is not None:
        config.build_directories = from_settings

    from_env = os.environ.get(BUILD_DIRECTORIES_ENV, '')
    if from_env:
        config.build_directories = [d for d in from_env.split(os.pathsep) if d]

    if build_directories:
        config.build_directories = list(build_directories)

    if not config.build_directories:
        config.build_directories = list(DEFAULT_BUILD_DIRECTORIES)

    return config
