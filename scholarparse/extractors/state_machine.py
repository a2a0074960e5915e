"""
Section state machine.

Consumes classified lines in document order and accumulates them into a
DocumentSections value. The machine state is an explicit frozen
MachineState; everything that grows while lines stream past lives in an
Accumulator handed to every transition.

The machine produces a SectionDraft and never decides on its own whether
the result is good enough; SectionExtractor makes that call.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scholarparse.extractors.classifier import ClassifierContext, LineClassifier
from scholarparse.extractors.references import ReferenceCollector
from scholarparse.models import (
    STANDARD_SECTIONS,
    DeclarationKind,
    DocumentSections,
    LineClass,
    LineKind,
    Phase,
    SectionKind,
)

if TYPE_CHECKING:
    from scholarparse.config import ParserConfig

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")
NON_WORD = re.compile(r"[^\w\s]")


def split_keywords(text: str) -> list[str]:
    """Split a keyword line on ';', else ',', else whitespace."""
    text = text.strip()
    if not text:
        return []
    if ";" in text:
        parts = text.split(";")
    elif "," in text:
        parts = text.split(",")
    else:
        parts = WHITESPACE.split(text)
    keywords = [part.strip().rstrip(".").strip() for part in parts]
    return [keyword for keyword in keywords if keyword]


def frequent_terms(text: str, limit: int = 5) -> list[str]:
    """Most frequent lowercase words longer than three characters.

    Ties keep first-occurrence order.
    """
    words = [word for word in NON_WORD.sub(" ", text.lower()).split() if len(word) > 3]
    return [word for word, _ in Counter(words).most_common(limit)]


@dataclass(frozen=True)
class MachineState:
    """Current phase plus the section/subsection it points at."""

    phase: Phase = Phase.NO_SECTION
    section: SectionKind | None = None
    declaration: DeclarationKind | None = None


@dataclass
class Accumulator:
    """Mutable side of a run: sections filled so far plus the open buffer."""

    sections: DocumentSections = field(default_factory=DocumentSections)
    buffer: list[str] = field(default_factory=list)
    references: ReferenceCollector = field(default_factory=ReferenceCollector)
    entered: list[SectionKind] = field(default_factory=list)
    entry_starts: int = 0
    abstract_explicit: bool = False
    title_index: int | None = None
    lines_seen: int = 0


@dataclass
class SectionDraft:
    """Uncommitted result of one state machine pass.

    Attributes:
        sections: Sections filled by the pass.
        entered: Section kinds entered, in document order.
        entry_starts: ReferenceEntryStart lines seen inside References.
        abstract_explicit: Whether the abstract came from an Abstract header.
        title_index: Index of the title line in the input, if one was found.
    """

    sections: DocumentSections
    entered: list[SectionKind]
    entry_starts: int = 0
    abstract_explicit: bool = False
    title_index: int | None = None

    @property
    def found_standard_section(self) -> bool:
        """Whether Introduction, Methods, Results or Discussion was entered."""
        return any(kind in STANDARD_SECTIONS for kind in self.entered)


class SectionStateMachine:
    """Walks classified lines and fills DocumentSections.

    Usage:
        machine = SectionStateMachine()
        draft = machine.run(text.splitlines())
        if draft.found_standard_section:
            sections = draft.sections
    """

    def __init__(
        self,
        classifier: LineClassifier | None = None,
        *,
        max_abstract_lines: int = 15,
        abstract_boundary_lines: int = 5,
        max_title_length: int = 200,
        title_search_lines: int = 20,
        subsection_max_chars: int = 20,
    ):
        """Initialize the machine.

        Args:
            classifier: Line classifier (default creates one).
            max_abstract_lines: Abstract buffering stops after this many lines.
            abstract_boundary_lines: A blank line ends the abstract once this
                many lines are buffered.
            max_title_length: Longest line accepted as a title.
            title_search_lines: Title must appear within this many non-blank lines.
            subsection_max_chars: Declaration subsection headings are shorter than this.
        """
        self.classifier = classifier or LineClassifier()
        self.max_abstract_lines = max_abstract_lines
        self.abstract_boundary_lines = abstract_boundary_lines
        self.max_title_length = max_title_length
        self.title_search_lines = title_search_lines
        self.subsection_max_chars = subsection_max_chars

    @classmethod
    def from_config(cls, config: ParserConfig) -> SectionStateMachine:
        return cls(
            max_abstract_lines=config.max_abstract_lines,
            abstract_boundary_lines=config.abstract_boundary_lines,
            max_title_length=config.max_title_length,
            title_search_lines=config.title_search_lines,
            subsection_max_chars=config.subsection_max_chars,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Driving
    # ─────────────────────────────────────────────────────────────────────────

    def run(self, lines: Iterable[str]) -> SectionDraft:
        """Run one pass over the lines and return the uncommitted draft."""
        state = MachineState()
        acc = Accumulator()

        for index, raw in enumerate(lines):
            text = raw.strip()
            line_class = self.classifier.classify(text, self.context(state, acc))
            if line_class.kind is LineKind.TITLE or (
                line_class.kind is LineKind.TITLE_HEADER and line_class.remainder
            ):
                acc.title_index = index
            state = self.step(state, acc, line_class, text)
            if text:
                acc.lines_seen += 1

        self._flush(state, acc)
        acc.sections.references = acc.references.finish()

        logger.debug(
            "State machine entered %s; %d reference entries",
            [kind.value for kind in acc.entered] or "no sections",
            len(acc.sections.references),
        )
        return SectionDraft(
            sections=acc.sections,
            entered=acc.entered,
            entry_starts=acc.entry_starts,
            abstract_explicit=acc.abstract_explicit,
            title_index=acc.title_index,
        )

    def context(self, state: MachineState, acc: Accumulator) -> ClassifierContext:
        """Classifier view of the current state."""
        return ClassifierContext(
            phase=state.phase,
            section=state.section,
            title_seen=bool(acc.sections.title),
            entry_started=acc.references.started,
            lines_seen=acc.lines_seen,
            max_title_length=self.max_title_length,
            title_search_lines=self.title_search_lines,
            subsection_max_chars=self.subsection_max_chars,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────────

    def step(
        self,
        state: MachineState,
        acc: Accumulator,
        line_class: LineClass,
        text: str,
    ) -> MachineState:
        """Apply one classified line and return the next state."""
        kind = line_class.kind

        if kind is LineKind.BLANK:
            return self._on_blank(state, acc)

        if kind in (LineKind.SECTION_HEADER, LineKind.REFERENCE_HEADER):
            self._flush(state, acc)
            section = line_class.section
            acc.entered.append(section)
            if section is SectionKind.REFERENCES:
                return MachineState(Phase.IN_REFERENCES, section)
            return MachineState(Phase.IN_SECTION, section)

        if kind is LineKind.ABSTRACT_HEADER:
            if state.phase is Phase.ABSTRACT and not acc.abstract_explicit:
                # Lines after the title (authors, affiliations) were not the abstract
                acc.buffer = []
            else:
                self._flush(state, acc)
            acc.abstract_explicit = True
            if line_class.remainder:
                acc.buffer.append(line_class.remainder)
            return MachineState(Phase.ABSTRACT)

        if kind is LineKind.KEYWORDS_HEADER:
            self._flush(state, acc)
            acc.sections.keywords.extend(split_keywords(line_class.remainder))
            return MachineState(Phase.KEYWORDS)

        if kind is LineKind.SUBSECTION_HEADER:
            self._flush(state, acc)
            if line_class.remainder:
                acc.buffer.append(line_class.remainder)
            return MachineState(
                Phase.IN_DECLARATION, SectionKind.DECLARATIONS, line_class.declaration
            )

        if kind is LineKind.REFERENCE_ENTRY_START:
            acc.references.start(text)
            acc.entry_starts += 1
            return state

        if kind is LineKind.TITLE_HEADER:
            # A bare label leaves the title to the next plausible line
            if not line_class.remainder:
                return state
            acc.sections.title = line_class.remainder
            return MachineState(Phase.ABSTRACT)

        if kind is LineKind.TITLE:
            acc.sections.title = text
            # Implicit abstract: whatever follows the title until a header
            return MachineState(Phase.ABSTRACT)

        return self._on_content(state, acc, text)

    def _on_blank(self, state: MachineState, acc: Accumulator) -> MachineState:
        if state.phase is Phase.ABSTRACT and len(acc.buffer) >= self.abstract_boundary_lines:
            self._flush(state, acc)
            return MachineState(Phase.AWAITING_SECTION)
        if state.phase is Phase.KEYWORDS and acc.sections.keywords:
            return MachineState(Phase.AWAITING_SECTION)
        # Blank lines never end a body section
        return state

    def _on_content(self, state: MachineState, acc: Accumulator, text: str) -> MachineState:
        phase = state.phase

        if phase is Phase.NO_SECTION or phase is Phase.AWAITING_SECTION:
            # Front-matter furniture or text between blocks; kept only in content
            return state

        if phase is Phase.ABSTRACT:
            acc.buffer.append(text)
            if len(acc.buffer) >= self.max_abstract_lines:
                self._flush(state, acc)
                return MachineState(Phase.AWAITING_SECTION)
            return state

        if phase is Phase.KEYWORDS:
            acc.sections.keywords.extend(split_keywords(text))
            return state

        if phase is Phase.IN_REFERENCES:
            acc.references.extend(text)
            return state

        acc.buffer.append(text)
        return state

    def _flush(self, state: MachineState, acc: Accumulator) -> None:
        """Move the open buffer into the field the state points at."""
        lines, acc.buffer = acc.buffer, []

        if state.phase is Phase.IN_REFERENCES:
            acc.references.flush()
            return
        if not lines:
            return

        if state.phase is Phase.ABSTRACT:
            acc.sections.abstract = " ".join(lines)
        elif state.phase is Phase.IN_DECLARATION and state.declaration is not None:
            acc.sections.declarations.set(state.declaration, "\n".join(lines))
        elif state.phase is Phase.IN_SECTION and state.section is not None:
            if state.section.is_body:
                acc.sections.set_section(state.section, "\n".join(lines))
            else:
                logger.debug("Dropped %d declaration line(s) before any subsection", len(lines))
