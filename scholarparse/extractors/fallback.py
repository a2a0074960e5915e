"""
Loose section location for documents without recognizable headings.

Used when the state machine never entered a standard section. Each target
section is located at the first line containing one of its keywords
(case-insensitive substring) after the title; the document is then sliced
between consecutive located lines, in document order.

Only empty fields are filled. Results are best effort and flagged with a
warning by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from scholarparse.extractors.references import ReferenceItemizer
from scholarparse.models import DocumentSections, SectionKind

logger = logging.getLogger(__name__)

# Section -> substrings that mark its start
FALLBACK_TARGETS: tuple[tuple[SectionKind, tuple[str, ...]], ...] = (
    (SectionKind.INTRODUCTION, ("introduction",)),
    (SectionKind.METHODS, ("method", "materials")),
    (SectionKind.RESULTS, ("result",)),
    (SectionKind.DISCUSSION, ("discussion",)),
    (SectionKind.REFERENCES, ("reference",)),
)


class LooseSectionLocator:
    """Fills sections by keyword search instead of heading recognition."""

    def __init__(
        self,
        targets: tuple[tuple[SectionKind, tuple[str, ...]], ...] = FALLBACK_TARGETS,
        itemizer: ReferenceItemizer | None = None,
    ):
        self.targets = targets
        self.itemizer = itemizer or ReferenceItemizer()

    def find_offsets(self, lines: Sequence[str], start: int = 0) -> list[tuple[int, SectionKind]]:
        """First matching line index per target, sorted by position."""
        found = []
        lowered = [line.lower() for line in lines]
        for kind, needles in self.targets:
            for index in range(start, len(lowered)):
                if any(needle in lowered[index] for needle in needles):
                    found.append((index, kind))
                    break
        return sorted(found, key=lambda item: (item[0], item[1].order))

    def locate(
        self,
        lines: Sequence[str],
        sections: DocumentSections,
        title_index: int | None = None,
    ) -> list[SectionKind]:
        """Fill empty fields of ``sections`` in place.

        Args:
            lines: Raw document lines.
            sections: Sections from the primary pass; populated fields are kept.
            title_index: Index of the title line; the search starts after it.

        Returns:
            Section kinds that were filled.
        """
        start = 0 if title_index is None else title_index + 1
        offsets = self.find_offsets(lines, start)
        filled = []

        for i, (index, kind) in enumerate(offsets):
            end = offsets[i + 1][0] if i + 1 < len(offsets) else len(lines)
            body = [line.strip() for line in lines[index + 1 : end] if line.strip()]
            if not body:
                continue

            if kind is SectionKind.REFERENCES:
                if not sections.references:
                    sections.references = self.itemizer.itemize(body)
                    filled.append(kind)
            elif not sections.get_section(kind):
                sections.set_section(kind, "\n".join(body))
                filled.append(kind)

        logger.debug("Loose search located %s", [kind.value for kind in filled] or "nothing")
        return filled
