#!/usr/bin/env python3
"""
Symbol demangling through an external demangler (c++filt by default).

Demangling is for display only. Whenever the tool is missing, fails or
times out, the mangled name is returned unchanged.
"""

import logging
import subprocess
from functools import lru_cache
from typing import List, Optional, Tuple

from .config import HipsterConfig
from .diagnostics import DiagnosticKind, DiagnosticSink
from .exceptions import DemangleError

logger = logging.getLogger(__name__)

# Upper bound on memoized demangler results
DEMANGLE_CACHE_SIZE = 4096


def run_demangler(name: str, command: List[str], timeout: float) -> str:
    """Demangle one name with an external command reading stdin.

    Raises:
        DemangleError: If the command is unavailable, fails, times out or
            prints nothing
    """
    try:
        result = subprocess.run(
            command,
            input=name + '\n',
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout
        )
    except FileNotFoundError as e:
        raise DemangleError(f"Demangler not found: {command[0]}") from e
    except subprocess.CalledProcessError as e:
        raise DemangleError(f"Demangler exited with status {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        raise DemangleError(f"Demangler timed out after {timeout} seconds") from e
    except OSError as e:
        raise DemangleError(f"Failed to run demangler: {e}") from e

    demangled = result.stdout.strip()
    if not demangled:
        raise DemangleError("Demangler produced no output")
    return demangled


@lru_cache(maxsize=DEMANGLE_CACHE_SIZE)
def _cached_demangle(command: Tuple[str, ...], name: str, timeout: float) -> str:
    # DemangleError propagates and is not memoized
    return run_demangler(name, list(command), timeout)


def demangle_symbol(name: str, config: Optional[HipsterConfig] = None,
                    sink: Optional[DiagnosticSink] = None) -> str:
    """Demangle a kernel symbol for display.

    Successful results are memoized per demangler command, keeping at most
    DEMANGLE_CACHE_SIZE names.

    Args:
        name: Mangled symbol
        config: Supplies the demangler command and timeout (defaults when None)
        sink: Receives a diagnostic when demangling is unavailable

    Returns:
        Demangled name, or the mangled name on any failure
    """
    if not name:
        return name

    config = config or HipsterConfig()
    try:
        return _cached_demangle(tuple(config.demangler), name, config.demangle_timeout)
    except DemangleError as e:
        if sink is not None:
            sink.report(DiagnosticKind.DEMANGLE_UNAVAILABLE, f"Failed to demangle {name}: {e}")
        else:
            logger.debug("Failed to demangle %s: %s", name, e)
        return name


def clear_demangle_cache() -> None:
    """Forget memoized demangler results."""
    _cached_demangle.cache_clear()
