"""
Line classification for manuscript text.

classify() is a pure function of a trimmed line and a ClassifierContext
describing where the state machine currently is. Rules are an ordered
table of (name, predicate) pairs; the first predicate that returns a
LineClass wins, so tie-breaks are visible in RULES rather than buried in
nested conditionals.

Header labels are matched by equality (case-insensitive, optional trailing
colon), optionally preceded by a numbering prefix ("1.", "1", "1.2",
"I.", "1.Introduction") or Markdown hashes.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from scholarparse.extractors.references import is_entry_start
from scholarparse.models import (
    BLANK,
    CONTENT,
    REFERENCE_ENTRY_START,
    TITLE,
    DeclarationKind,
    LineClass,
    LineKind,
    Phase,
    SectionKind,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Vocabulary
# ═══════════════════════════════════════════════════════════════════════════════

SECTION_LABELS: dict[SectionKind, tuple[str, ...]] = {
    SectionKind.INTRODUCTION: ("introduction", "overview"),
    SectionKind.LITERATURE_REVIEW: (
        "literature review",
        "related work",
        "related works",
        "background",
        "background and related work",
    ),
    SectionKind.METHODS: (
        "methods",
        "method",
        "materials and methods",
        "methods and materials",
        "methodology",
        "experimental methods",
    ),
    SectionKind.RESULTS: ("results", "findings"),
    SectionKind.DISCUSSION: (
        "discussion",
        "discussion and conclusion",
        "discussion and conclusions",
    ),
    SectionKind.CONCLUSION: ("conclusion", "conclusions", "concluding remarks"),
    SectionKind.ACKNOWLEDGMENTS: (
        "acknowledgments",
        "acknowledgements",
        "acknowledgment",
        "acknowledgement",
    ),
    SectionKind.DECLARATIONS: ("declarations", "declaration", "statements and declarations"),
    SectionKind.REFERENCES: (
        "references",
        "bibliography",
        "works cited",
        "literature cited",
        "reference list",
    ),
    SectionKind.APPENDICES: ("appendix", "appendices"),
    SectionKind.SUPPLEMENTARY: (
        "supplementary",
        "supplementary material",
        "supplementary materials",
    ),
}

_LABEL_LOOKUP = {label: kind for kind, labels in SECTION_LABELS.items() for label in labels}

# "1.", "1", "1.2", "1.Introduction", "I.", "IV " (roman numerals need a dot or space)
NUMBERING_PREFIX = re.compile(r"^(?:\d+(?:\.\d+)*\.?\s*|[IVXLC]+\.\s*|[IVXLC]+\s+)(?=[A-Za-z])")
MARKDOWN_PREFIX = re.compile(r"^#{1,6}\s*")
LETTERED_APPENDIX = re.compile(r"^appendix\s+[a-z0-9]$")

# Matched after any Markdown prefix: "Title", "Title:" (label line) or "Title: My Paper"
TITLE_HEADER = re.compile(r"^title\s*(?::\s*(?P<rest>.*))?$", re.I)
ABSTRACT_HEADER = re.compile(r"^(?:abstract|summary)\s*(?:[:.\-–—]\s*(?P<rest>.*))?$", re.I)
KEYWORDS_HEADER = re.compile(
    r"^(?:keywords?|key\s+words|index\s+terms)\s*(?:[:.\-–—]\s*(?P<rest>.*))?$", re.I
)

DECLARATION_MARKERS: tuple[tuple[DeclarationKind, tuple[str, ...]], ...] = (
    (DeclarationKind.ETHICS, ("ethic",)),
    (DeclarationKind.CONFLICT_OF_INTEREST, ("conflict", "competing")),
    (DeclarationKind.FUNDING, ("funding", "financial")),
)

# Lines that are journal furniture, never the article title
METADATA_MARKERS = ("doi:", "http", "www.", "received:", "accepted:", "published:", "citation:")
METADATA_MARKERS_CASED = ("ISSN", "Volume", "©")


@dataclass(frozen=True)
class ClassifierContext:
    """Everything classify() may look at besides the line itself.

    Attributes:
        phase: Current state machine phase.
        section: Current top-level section, None before the first header.
        title_seen: Whether a title has already been captured.
        entry_started: Whether a reference entry exists in the current list.
        lines_seen: Non-blank lines consumed so far.
        max_title_length: Longest line accepted as a title.
        title_search_lines: Title must appear within this many non-blank lines.
        subsection_max_chars: Declaration subsection headings are shorter than this.
    """

    phase: Phase = Phase.NO_SECTION
    section: SectionKind | None = None
    title_seen: bool = False
    entry_started: bool = False
    lines_seen: int = 0
    max_title_length: int = 200
    title_search_lines: int = 20
    subsection_max_chars: int = 20


# ═══════════════════════════════════════════════════════════════════════════════
# Label parsing
# ═══════════════════════════════════════════════════════════════════════════════


def _normalize(text: str) -> str:
    text = MARKDOWN_PREFIX.sub("", text)
    text = text.rstrip(":. ").lower()
    return " ".join(text.split()).replace("&", "and")


def parse_section_label(line: str) -> tuple[SectionKind, bool] | None:
    """Match a heading line against the canonical labels.

    Returns:
        (kind, numbered) if the line is a canonical heading, else None.
        ``numbered`` tells whether a numbering prefix was present.
    """
    text = MARKDOWN_PREFIX.sub("", line.strip())
    numbered = False
    match = NUMBERING_PREFIX.match(text)
    if match:
        numbered = True
        text = text[match.end() :]

    label = _normalize(text)
    kind = _LABEL_LOOKUP.get(label)
    if kind is None and LETTERED_APPENDIX.match(label):
        kind = SectionKind.APPENDICES
    if kind is None:
        return None
    return kind, numbered


def is_metadata(line: str) -> bool:
    """Whether a line looks like journal furniture (DOI, dates, ISSN, ...)."""
    lowered = line.lower()
    if any(marker in lowered for marker in METADATA_MARKERS):
        return True
    if "journal" in lowered:
        return True
    return any(marker in line for marker in METADATA_MARKERS_CASED)


# ═══════════════════════════════════════════════════════════════════════════════
# Rules (checked in order, first match wins)
# ═══════════════════════════════════════════════════════════════════════════════


def _blank(line: str, ctx: ClassifierContext) -> LineClass | None:
    return BLANK if not line else None


def _section_header(line: str, ctx: ClassifierContext) -> LineClass | None:
    parsed = parse_section_label(line)
    if parsed is None:
        return None
    kind, numbered = parsed

    # Numbered lines inside a reference list are entries, not headings
    if numbered and ctx.section is SectionKind.REFERENCES:
        return None
    # Headers only move forward: an earlier or repeated kind stays content
    if ctx.section is not None and kind.order <= ctx.section.order:
        return None

    if kind is SectionKind.REFERENCES:
        return LineClass(LineKind.REFERENCE_HEADER, section=kind)
    return LineClass(LineKind.SECTION_HEADER, section=kind)


def _abstract_header(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.section is not None:
        return None
    match = ABSTRACT_HEADER.match(MARKDOWN_PREFIX.sub("", line))
    if not match:
        return None
    return LineClass(LineKind.ABSTRACT_HEADER, remainder=(match.group("rest") or "").strip())


def _keywords_header(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.section is not None:
        return None
    match = KEYWORDS_HEADER.match(MARKDOWN_PREFIX.sub("", line))
    if not match:
        return None
    return LineClass(LineKind.KEYWORDS_HEADER, remainder=(match.group("rest") or "").strip())


def _subsection_header(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.section is not SectionKind.DECLARATIONS:
        return None

    heading, _, rest = line.partition(":")
    if len(heading.strip()) >= ctx.subsection_max_chars:
        return None

    lowered = heading.lower()
    for kind, markers in DECLARATION_MARKERS:
        if any(marker in lowered for marker in markers):
            return LineClass(LineKind.SUBSECTION_HEADER, declaration=kind, remainder=rest.strip())
    return None


def _reference_entry_start(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.section is not SectionKind.REFERENCES:
        return None
    return REFERENCE_ENTRY_START if is_entry_start(line, ctx.entry_started) else None


def _title_header(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.title_seen or ctx.phase is not Phase.NO_SECTION or ctx.section is not None:
        return None
    if ctx.lines_seen >= ctx.title_search_lines:
        return None
    match = TITLE_HEADER.match(MARKDOWN_PREFIX.sub("", line))
    if not match:
        return None
    return LineClass(LineKind.TITLE_HEADER, remainder=(match.group("rest") or "").strip())


def _title(line: str, ctx: ClassifierContext) -> LineClass | None:
    if ctx.title_seen or ctx.phase is not Phase.NO_SECTION or ctx.section is not None:
        return None
    if ctx.lines_seen >= ctx.title_search_lines:
        return None
    if len(line) > ctx.max_title_length or not any(c.isalpha() for c in line):
        return None
    if is_metadata(line):
        return None
    return TITLE


Rule = Callable[[str, ClassifierContext], LineClass | None]

RULES: tuple[tuple[str, Rule], ...] = (
    ("blank", _blank),
    ("section_header", _section_header),
    ("abstract_header", _abstract_header),
    ("keywords_header", _keywords_header),
    ("subsection_header", _subsection_header),
    ("reference_entry_start", _reference_entry_start),
    ("title_header", _title_header),
    ("title", _title),
)


class LineClassifier:
    """Classifies lines by running RULES in order.

    Usage:
        classifier = LineClassifier()
        line_class = classifier.classify("1. Introduction", ClassifierContext())
        assert line_class.section is SectionKind.INTRODUCTION
    """

    def __init__(self, rules: tuple[tuple[str, Rule], ...] = RULES):
        self.rules = rules

    def classify(self, line: str, context: ClassifierContext) -> LineClass:
        """Classify one line; falls through to CONTENT."""
        return self.explain(line, context)[1]

    def explain(self, line: str, context: ClassifierContext) -> tuple[str, LineClass]:
        """Like classify(), also returning the name of the rule that matched."""
        text = line.strip()
        for name, rule in self.rules:
            result = rule(text, context)
            if result is not None:
                return name, result
        return "content", CONTENT


_DEFAULT_CLASSIFIER = LineClassifier()


def classify(line: str, context: ClassifierContext | None = None) -> LineClass:
    """Classify a line with the standard rule table."""
    return _DEFAULT_CLASSIFIER.classify(line, context or ClassifierContext())
