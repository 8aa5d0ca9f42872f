#!/usr/bin/env python3
"""
Active viewing session: the selected kernel and its line mapping.

The session is the boundary between the mapping core and a presentation
layer. All derived state lives in one immutable ActiveSession value that
each request replaces as a whole, so a presentation sink never observes a
selected kernel paired with another kernel's mapping.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .compare import align_versions
from .config import HipsterConfig
from .diagnostics import DiagnosticSink
from .exceptions import SelectionError
from .line_mapping import LineMappingIndex
from .models import DiffAlignment, MatchRecord, SourceLocation, StalenessInfo
from .resolver import MatchResolver, check_staleness, order_matches

logger = logging.getLogger(__name__)


class PresentationSink:
    """Receives session results for rendering. The default does nothing."""

    def show_matches(self, session: 'ActiveSession') -> None:
        """Display the match list and the selected kernel."""

    def show_empty(self, source_file: str) -> None:
        """Report that no kernel references the source file."""

    def highlight_assembly(self, asm_lines: List[int]) -> None:
        """Highlight assembly lines of the selected kernel."""

    def reveal_source(self, location: SourceLocation) -> None:
        """Open and highlight a source location."""

    def show_diff(self, comparison: 'VersionComparison') -> None:
        """Display a side-by-side comparison."""


@dataclass
class RequestContext:
    """Per-request state passed through a chain of session calls.

    suppress_highlight is set when a request moves the source cursor
    itself, so the resulting selection event must not highlight again.
    """
    suppress_highlight: bool = False


@dataclass(frozen=True)
class ActiveSession:
    """Snapshot of matches, selection and the selection's line mapping"""
    source_file: str
    matches: List[MatchRecord] = field(default_factory=list)
    selected: Optional[MatchRecord] = None
    index: LineMappingIndex = field(default_factory=LineMappingIndex)
    generation: int = 0

    @property
    def selected_position(self) -> Optional[int]:
        """Position of the selected match in the match list"""
        for i, match in enumerate(self.matches):
            if match is self.selected:
                return i
        return None


@dataclass
class VersionComparison:
    """A diff between two matches plus their staleness"""
    alignment: DiffAlignment
    left: MatchRecord
    right: MatchRecord
    left_staleness: StalenessInfo
    right_staleness: StalenessInfo


class AssemblySession:
    """Serializes requests against the active session"""

    def __init__(self, workspace_root: str, config: HipsterConfig,
                 presentation: Optional[PresentationSink] = None,
                 sink: Optional[DiagnosticSink] = None):
        self.workspace_root = workspace_root
        self.config = config
        self.presentation = presentation or PresentationSink()
        self.sink = sink if sink is not None else DiagnosticSink()
        self.resolver = MatchResolver(config, self.sink)
        self.active: Optional[ActiveSession] = None
        self._issued_generation = 0

    def _begin(self) -> int:
        """Issue a generation number for a new request."""
        self._issued_generation += 1
        return self._issued_generation

    def _commit(self, session: ActiveSession) -> bool:
        """Install a session unless a newer request has already started.

        Returns:
            True if the session became active
        """
        if session.generation != self._issued_generation:
            logger.debug("Discarding superseded session (generation %d, latest %d)",
                         session.generation, self._issued_generation)
            return False
        self.active = session
        return True

    def _require_active(self) -> ActiveSession:
        if self.active is None or self.active.selected is None:
            raise SelectionError("No kernel is selected")
        return self.active

    def refresh(self, source_file: str, source_line: int = 0) -> ActiveSession:
        """Rescan the build trees and select the most recent match.

        Args:
            source_file: Source file being viewed
            source_line: 1-based line for initial hits, 0 for none

        Returns:
            The new ActiveSession (also installed as active unless superseded)
        """
        generation = self._begin()
        matches = order_matches(
            self.resolver.resolve(self.workspace_root, source_file, source_line))

        if not matches:
            session = ActiveSession(source_file=source_file, generation=generation)
            if self._commit(session):
                self.presentation.show_empty(source_file)
            return session

        selected = matches[0]
        session = ActiveSession(
            source_file=source_file,
            matches=matches,
            selected=selected,
            index=LineMappingIndex.build(selected.buffer.lines, selected.kernel.file_table),
            generation=generation,
        )
        if self._commit(session):
            self.presentation.show_matches(session)
            if selected.asm_lines:
                self.presentation.highlight_assembly(list(selected.asm_lines))
        return session

    def select(self, position: int) -> ActiveSession:
        """Select another match of the current list and rebuild its mapping.

        Raises:
            SelectionError: If position is outside the match list
        """
        current = self.active
        if current is None or not 0 <= position < len(current.matches):
            raise SelectionError(f"No match at position {position}")

        generation = self._begin()
        selected = current.matches[position]
        session = ActiveSession(
            source_file=current.source_file,
            matches=current.matches,
            selected=selected,
            index=LineMappingIndex.build(selected.buffer.lines, selected.kernel.file_table),
            generation=generation,
        )
        if self._commit(session):
            self.presentation.show_matches(session)
        return session

    def asm_lines_for(self, source_file: str, source_line: int) -> List[int]:
        """Forward lookup in the selected kernel's buffer (0-indexed line)."""
        if self.active is None:
            return []
        return self.active.index.forward(source_file, source_line)

    def highlight(self, source_file: str, source_line: int,
                  context: Optional[RequestContext] = None) -> List[int]:
        """Highlight the assembly for a source cursor position.

        Args:
            source_file: Full path of the source file
            source_line: 0-indexed source line
            context: Request state; nothing happens while highlighting is suppressed

        Returns:
            Highlighted assembly line indices
        """
        context = context or RequestContext()
        if context.suppress_highlight:
            logger.debug("Skipping highlight - selection came from assembly")
            return []

        asm_lines = self.asm_lines_for(source_file, source_line)
        if asm_lines:
            self.presentation.highlight_assembly(asm_lines)
        return asm_lines

    def source_for(self, asm_line: int,
                   context: Optional[RequestContext] = None) -> Optional[SourceLocation]:
        """Reveal the source location of an assembly line.

        Sets context.suppress_highlight when a location is revealed.
        """
        context = context or RequestContext()
        if self.active is None or self.active.selected is None:
            logger.debug("No selected match for assembly line %d", asm_line)
            return None

        location = self.active.index.reverse(asm_line)
        if location is not None:
            context.suppress_highlight = True
            self.presentation.reveal_source(location)
        return location

    def staleness(self) -> StalenessInfo:
        """Staleness of the selected match among the current matches."""
        active = self._require_active()
        return check_staleness(active.selected, active.matches)

    def compare(self, other_position: int) -> VersionComparison:
        """Compare the selected match with another match of the list.

        Raises:
            SelectionError: If nothing is selected or other_position is invalid
        """
        active = self._require_active()
        if not 0 <= other_position < len(active.matches):
            raise SelectionError(f"No match at position {other_position}")

        left = active.selected
        right = active.matches[other_position]
        logger.debug("Comparing: %s [%s] vs [%s]", left.symbol, left.build_tag, right.build_tag)

        comparison = VersionComparison(
            alignment=align_versions(left.kernel, right.kernel),
            left=left,
            right=right,
            left_staleness=check_staleness(left, active.matches),
            right_staleness=check_staleness(right, active.matches),
        )
        self.presentation.show_diff(comparison)
        return comparison

    def diff_source_for(self, comparison: VersionComparison, side: str,
                        asm_line: int,
                        context: Optional[RequestContext] = None) -> Optional[SourceLocation]:
        """Reverse lookup of a buffer line shown on one side of a diff."""
        context = context or RequestContext()
        if side not in ('left', 'right'):
            raise ValueError(f"Invalid diff side: {side}")
        match = comparison.left if side == 'left' else comparison.right
        index = LineMappingIndex.build(match.buffer.lines, match.kernel.file_table)
        location = index.reverse(asm_line)
        if location is not None:
            context.suppress_highlight = True
            self.presentation.reveal_source(location)
        return location
