"""
Reference list segmentation and citation-style checks.

Reference sections arrive as wrapped lines. An entry starts at a numbering
marker ("[12]", "12."), at a "Surname," line, or - once an entry exists -
at any line starting with an uppercase letter. Everything else continues
the current entry and is joined with a single space.

Style checks are syntactic only: each finished entry is tested against the
style's pattern and non-conforming entries are reported with ONE
aggregated warning.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Entry-start markers, checked in this order
BRACKET_NUMBER = re.compile(r"^\[\d+\]")
DOTTED_NUMBER = re.compile(r"^\d+\.")
SURNAME_COMMA = re.compile(r"^[A-Z][a-z'\-]+,")
UPPERCASE_INITIAL = re.compile(r"^[A-Z]")


def is_entry_start(line: str, entry_started: bool) -> bool:
    """Whether a trimmed reference line begins a new entry.

    Args:
        line: Trimmed, non-empty line from a references section.
        entry_started: Whether at least one entry already exists.
    """
    if BRACKET_NUMBER.match(line) or DOTTED_NUMBER.match(line) or SURNAME_COMMA.match(line):
        return True
    return entry_started and bool(UPPERCASE_INITIAL.match(line))


@dataclass
class ReferenceCollector:
    """Accumulates reference lines into entries.

    Shared by the section state machine and ReferenceItemizer so both
    paths reflow entries identically.
    """

    entries: list[str] = field(default_factory=list)
    _buffer: list[str] = field(default_factory=list, repr=False)

    @property
    def started(self) -> bool:
        """Whether any entry (finished or buffered) exists."""
        return bool(self.entries or self._buffer)

    def start(self, line: str) -> None:
        """Begin a new entry, pushing the buffered one."""
        self.flush()
        self._buffer.append(line.strip())

    def extend(self, line: str) -> None:
        """Continue the buffered entry (or open one if none is buffered)."""
        self._buffer.append(line.strip())

    def flush(self) -> None:
        entry = " ".join(part for part in self._buffer if part).strip()
        if entry:
            self.entries.append(entry)
        self._buffer = []

    def finish(self) -> list[str]:
        self.flush()
        return self.entries


@dataclass(frozen=True)
class ReferenceStyle:
    """A citation style the reference list is checked against."""

    name: str
    description: str
    pattern: re.Pattern[str]
    examples: tuple[str, ...]

    def matches(self, entry: str) -> bool:
        return bool(self.pattern.match(entry.strip()))


IEEE = ReferenceStyle(
    name="IEEE",
    description="IEEE numeric",
    pattern=re.compile(r"^\[\d+\]\s+.*$"),
    examples=(
        '[1] J. A. Smith and M. Doe, "Title of the article," Journal Name, '
        "vol. 12, no. 3, pp. 45–67, 2023.",
        "[2] A. Johnson, Book Title: Subtitle. City, State, Country: Publisher, "
        "Year, pp. 15–37.",
        '[3] L. Brown, "Conference Paper Title," in Proceedings of the Conference '
        "Name, City, Country, Year, pp. 12–17.",
    ),
)

APA = ReferenceStyle(
    name="APA",
    description="APA author-date",
    pattern=re.compile(r"^[A-Z][A-Za-z'\-]+,\s+(?:[A-Z]\.\s?)+.*\(\d{4}[a-z]?\)"),
    examples=(
        "Smith, J. A., & Doe, M. (2023). Title of the article. Journal Name, "
        "12(3), 45–67.",
    ),
)

VANCOUVER = ReferenceStyle(
    name="Vancouver",
    description="Vancouver numbered",
    pattern=re.compile(r"^\d+\.\s+\S"),
    examples=("1. Smith JA, Doe M. Title of the article. Journal Name. 2023;12(3):45-67.",),
)

# Style lookup dictionary
STYLES: dict[str, ReferenceStyle] = {
    "IEEE": IEEE,
    "APA": APA,
    "Vancouver": VANCOUVER,
}


class ReferenceItemizer:
    """Segments reference text into entries and checks their style.

    Usage:
        itemizer = ReferenceItemizer("IEEE")
        entries = itemizer.itemize(lines)
        warning = itemizer.check(entries)
    """

    def __init__(self, style: ReferenceStyle | str = IEEE):
        """Initialize the itemizer.

        Args:
            style: A ReferenceStyle or the name of a built-in style.

        Raises:
            KeyError: If a style name is unknown.
        """
        self.style = STYLES[style] if isinstance(style, str) else style

    def itemize(self, lines: Iterable[str]) -> list[str]:
        """Split loose reference lines into entries, in document order."""
        collector = ReferenceCollector()
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            if is_entry_start(line, collector.started):
                collector.start(line)
            else:
                collector.extend(line)
        return collector.finish()

    def nonconforming(self, entries: Iterable[str]) -> list[str]:
        """Entries that do not match the configured style."""
        return [entry for entry in entries if not self.style.matches(entry)]

    def check(self, entries: list[str]) -> str | None:
        """Return one aggregated warning if any entry breaks the style."""
        bad = self.nonconforming(entries)
        if not bad:
            return None

        logger.debug("%d of %d references are not %s", len(bad), len(entries), self.style.name)
        return (
            f"{len(bad)} of {len(entries)} references do not follow the required "
            f"{self.style.description} format ({self.style.name}). "
            f"Example format: {self.style.examples[0]}"
        )
