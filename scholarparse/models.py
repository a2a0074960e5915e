"""
Data models for ScholarParse.

These models carry a manuscript from raw extracted lines through line
classification to the final ParsedDocument handed back to callers.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Raw extraction output
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LinePosition:
    """Where a reconstructed line sits in a page-description source."""

    x: float
    y: float
    page: int  # 0-based page index


@dataclass(frozen=True)
class RawLine:
    """One line of extracted text, optionally with its position."""

    text: str
    position: LinePosition | None = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


# ═══════════════════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════════════════


class SectionKind(Enum):
    """Canonical top-level academic divisions, in document order."""

    INTRODUCTION = "introduction"
    LITERATURE_REVIEW = "literature_review"
    METHODS = "methods"
    RESULTS = "results"
    DISCUSSION = "discussion"
    CONCLUSION = "conclusion"
    ACKNOWLEDGMENTS = "acknowledgments"
    DECLARATIONS = "declarations"
    REFERENCES = "references"
    APPENDICES = "appendices"
    SUPPLEMENTARY = "supplementary"

    @property
    def order(self) -> int:
        """Position in document order (used for section monotonicity)."""
        return _SECTION_ORDER[self]

    @property
    def is_body(self) -> bool:
        """Whether the section is stored as a plain text field."""
        return self not in (SectionKind.DECLARATIONS, SectionKind.REFERENCES)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


_SECTION_ORDER = {kind: i for i, kind in enumerate(SectionKind)}

# Sections whose presence means the primary pass found real structure
STANDARD_SECTIONS = (
    SectionKind.INTRODUCTION,
    SectionKind.METHODS,
    SectionKind.RESULTS,
    SectionKind.DISCUSSION,
)


class DeclarationKind(Enum):
    """Subsections nested under Declarations."""

    ETHICS = "ethics"
    CONFLICT_OF_INTEREST = "conflict_of_interest"
    FUNDING = "funding"


class LineKind(Enum):
    """Tag of a LineClass."""

    TITLE = "title"
    TITLE_HEADER = "title_header"
    ABSTRACT_HEADER = "abstract_header"
    KEYWORDS_HEADER = "keywords_header"
    SECTION_HEADER = "section_header"
    SUBSECTION_HEADER = "subsection_header"
    REFERENCE_HEADER = "reference_header"
    REFERENCE_ENTRY_START = "reference_entry_start"
    CONTENT = "content"
    BLANK = "blank"


@dataclass(frozen=True)
class LineClass:
    """
    Classification of a single line.

    A tagged variant: ``section`` is set for SECTION_HEADER and
    REFERENCE_HEADER, ``declaration`` for SUBSECTION_HEADER. ``remainder``
    holds text that followed a header label on the same line
    (e.g. "Keywords: a, b" -> "a, b").
    """

    kind: LineKind
    section: SectionKind | None = None
    declaration: DeclarationKind | None = None
    remainder: str = ""

    @property
    def is_header(self) -> bool:
        return self.kind in (
            LineKind.TITLE_HEADER,
            LineKind.ABSTRACT_HEADER,
            LineKind.KEYWORDS_HEADER,
            LineKind.SECTION_HEADER,
            LineKind.SUBSECTION_HEADER,
            LineKind.REFERENCE_HEADER,
        )


BLANK = LineClass(LineKind.BLANK)
CONTENT = LineClass(LineKind.CONTENT)
TITLE = LineClass(LineKind.TITLE)
REFERENCE_ENTRY_START = LineClass(LineKind.REFERENCE_ENTRY_START)


class Phase(Enum):
    """Where the section state machine currently is."""

    NO_SECTION = "no_section"  # Before a title or header
    ABSTRACT = "abstract"  # Explicit or implicit abstract
    KEYWORDS = "keywords"
    AWAITING_SECTION = "awaiting_section"  # Front matter closed, no header yet
    IN_SECTION = "in_section"
    IN_DECLARATION = "in_declaration"  # Inside a Declarations subsection
    IN_REFERENCES = "in_references"


# ═══════════════════════════════════════════════════════════════════════════════
# Document structure
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class Declarations:
    """Ethics, conflict-of-interest and funding statements."""

    ethics: str | None = None
    conflict_of_interest: str | None = None
    funding: str | None = None

    def get(self, kind: DeclarationKind) -> str | None:
        return getattr(self, kind.value)

    def set(self, kind: DeclarationKind, text: str) -> None:
        setattr(self, kind.value, text)

    def is_empty(self) -> bool:
        return not any(self.get(kind) for kind in DeclarationKind)

    def text(self) -> str:
        """All declaration statements joined, in subsection order."""
        return "\n".join(self.get(kind) for kind in DeclarationKind if self.get(kind))


@dataclass
class DocumentSections:
    """
    Structured academic content extracted from a manuscript.

    Mutable while the section state machine fills it; copied into the
    immutable ParsedDocument when parsing finishes.
    """

    title: str = ""
    abstract: str = ""
    keywords: list[str] = field(default_factory=list)
    introduction: str = ""
    literature_review: str = ""
    methods: str = ""
    results: str = ""
    discussion: str = ""
    conclusion: str = ""
    acknowledgments: str = ""
    appendices: str = ""
    supplementary: str = ""
    declarations: Declarations = field(default_factory=Declarations)
    references: list[str] = field(default_factory=list)

    def get_section(self, kind: SectionKind) -> str:
        """Text of a section; declarations and references are rendered as text."""
        if kind is SectionKind.DECLARATIONS:
            return self.declarations.text()
        if kind is SectionKind.REFERENCES:
            return "\n".join(self.references)
        return getattr(self, kind.value)

    def set_section(self, kind: SectionKind, text: str) -> None:
        """Store body text for a section kind."""
        if not kind.is_body:
            raise ValueError(f"{kind.name} is not a plain text section")
        setattr(self, kind.value, text)

    def has_content(self) -> bool:
        """Whether any field was populated."""
        return bool(
            self.title
            or self.abstract
            or self.keywords
            or self.references
            or not self.declarations.is_empty()
            or any(self.get_section(kind) for kind in SectionKind if kind.is_body)
        )

    def copy(self) -> "DocumentSections":
        """Independent copy (lists and declarations are not shared)."""
        return replace(
            self,
            keywords=list(self.keywords),
            references=list(self.references),
            declarations=replace(self.declarations),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the sections
        """
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Declarations):
                value = {d.value: value.get(d) for d in DeclarationKind}
            elif isinstance(value, list):
                value = list(value)
            result[f.name] = value
        return result


@dataclass(frozen=True)
class ParsedDocument:
    """
    The main output type for users.

    Holds the extracted sections, the full fallback text, and any warnings.
    When extraction itself failed, ``error`` is set and everything else is
    empty. Section fields are reachable directly on the document:

    Example:
        >>> doc = scholarparse.parse(Path("paper.pdf"))
        >>> doc.title
        'My Paper Title'
        >>> doc.references[0]
        '[1] A. Smith, "Title," Journal, 2023.'
        >>> for warning in doc.warnings:
        ...     print(warning)
    """

    sections: DocumentSections = field(default_factory=DocumentSections)
    content: str = ""
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    # Source info
    source_name: str = ""
    format: str = ""

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: fall through to the sections
        if name.startswith("_") or name == "sections":
            raise AttributeError(name)
        return getattr(self.sections, name)

    @property
    def ok(self) -> bool:
        """Whether extraction succeeded."""
        return self.error is None

    @classmethod
    def failed(cls, error: str, *, source_name: str = "", format: str = "") -> "ParsedDocument":
        """Build the result for a hard extraction failure."""
        return cls(error=error, source_name=source_name, format=format)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the document
        """
        result = self.sections.to_dict()
        result.update(
            {
                "content": self.content,
                "warnings": list(self.warnings),
                "error": self.error,
                "source_name": self.source_name,
                "format": self.format,
            }
        )
        return result
