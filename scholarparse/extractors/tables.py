"""
Tabular content detection and formatting.

Some uploads are spreadsheets or vocabulary lists rather than manuscripts.
TableDetector flags them before section parsing so they are not forced
into academic sections; TableFormatter renders them as Markdown instead.

The heuristics are deliberately simple and tuned on word-list style
inputs; detection can be disabled with ParserConfig.detect_tables.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import PurePath

logger = logging.getLogger(__name__)

TABLE_ABSTRACT = (
    "This document contains tabular data that has been extracted. "
    "Please review the content carefully."
)
TABLE_WARNING = (
    "Content looks like tabular data rather than a manuscript; it was formatted "
    "as a table and not split into sections."
)

TABLE_WORD = re.compile(r"\btables?\b", re.I)
ROW_OR_COLUMN = re.compile(r"\b(?:rows?|columns?)\b", re.I)
NUMBER_WORD_PATTERN = re.compile(r"\d+\s+\w+\s+\d+\s+\w+")
COLUMN_SPLIT = re.compile(r"\s{2,}|\t")

EXTENSION = re.compile(r"\.\w+$")
LEADING_NUMBER = re.compile(r"^\d+\s+")
NON_WORD = re.compile(r"[^\w\s]")

BILINGUAL_MARKERS = ("Russian", "English")
HEADER_MARKERS = ("russian", "english", "translation")


class TableDetector:
    """Statistical check for tabular (non-prose) input.

    Any one indicator is enough:
    - more than ``tab_threshold`` tab characters
    - more than ``min_lines`` non-empty lines sharing at most
      ``max_distinct_counts`` distinct word counts
    - the words "table" and "row"/"column" both appear
    - "12 word 34 word" appears on at least ``pattern_rows`` lines (a match
      never spans a line break)
    """

    def __init__(
        self,
        *,
        tab_threshold: int = 10,
        min_lines: int = 10,
        max_distinct_counts: int = 3,
        pattern_rows: int = 1,
    ):
        self.tab_threshold = tab_threshold
        self.min_lines = min_lines
        self.max_distinct_counts = max_distinct_counts
        self.pattern_rows = pattern_rows

    def indicators(self, lines: Sequence[str]) -> list[str]:
        """Names of the indicators that fired."""
        fired = []
        text = "\n".join(lines)

        if text.count("\t") > self.tab_threshold:
            fired.append("tabs")

        non_empty = [line for line in lines if line.strip()]
        if len(non_empty) > self.min_lines:
            word_counts = {len(line.split()) for line in non_empty}
            if len(word_counts) <= self.max_distinct_counts:
                fired.append("uniform_word_counts")

        if TABLE_WORD.search(text) and ROW_OR_COLUMN.search(text):
            fired.append("table_vocabulary")

        pattern_lines = sum(1 for line in non_empty if NUMBER_WORD_PATTERN.search(line))
        if pattern_lines >= self.pattern_rows:
            fired.append("number_word_pattern")

        return fired

    def detect(self, lines: Sequence[str]) -> bool:
        """Whether the lines look like tabular data."""
        fired = self.indicators(lines)
        if fired:
            logger.debug("Table indicators fired: %s", ", ".join(fired))
        return bool(fired)


def collapse_duplicates(lines: Sequence[str]) -> list[str]:
    """Trimmed non-empty lines with adjacent duplicates removed."""
    unique: list[str] = []
    for line in (line.strip() for line in lines):
        if line and (not unique or unique[-1] != line):
            unique.append(line)
    return unique


class TableFormatter:
    """Renders tabular lines as Markdown.

    Vocabulary lists (a line mentions one of ``bilingual_markers``) become a
    ``| # | Term | Translation |`` table; anything else becomes a numbered
    list under a heading.
    """

    def __init__(self, bilingual_markers: tuple[str, ...] = BILINGUAL_MARKERS):
        self.bilingual_markers = bilingual_markers

    def is_bilingual(self, lines: Sequence[str]) -> bool:
        return any(marker in line for line in lines for marker in self.bilingual_markers)

    def format(self, lines: Sequence[str]) -> str:
        unique = collapse_duplicates(lines)
        parts = ["## Document Content", ""]

        if self.is_bilingual(unique):
            parts += ["### Vocabulary List", ""]
            parts += ["| # | Term | Translation |", "|---|------|-------------|"]
            rows = [line for line in unique if not _is_header_line(line)]
            for number, line in enumerate(rows, start=1):
                columns = COLUMN_SPLIT.split(line)
                if len(columns) >= 2:
                    term, translation = columns[0], " ".join(columns[1:])
                else:
                    term, translation = line, "-"
                parts.append(f"| {number} | {term} | {translation} |")
        else:
            parts += [f"{number}. {line}" for number, line in enumerate(unique, start=1)]

        return "\n".join(parts)


def _is_header_line(line: str) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in HEADER_MARKERS)


def sanitize_filename(filename: str) -> str:
    """Title from a filename: directory, extension and leading numbering removed."""
    name = PurePath(filename).name
    name = LEADING_NUMBER.sub("", EXTENSION.sub("", name)).strip()
    return name or "Untitled"


def filename_keywords(filename: str) -> list[str]:
    """Unique lowercase words longer than three characters from a filename."""
    name = LEADING_NUMBER.sub("", EXTENSION.sub("", PurePath(filename).name))
    words = [word.lower() for word in NON_WORD.sub(" ", name).split() if len(word) > 3]
    return list(dict.fromkeys(words))
