"""
ScholarParse: Extract structured sections from academic manuscripts.

This library reads PDF, DOCX, Apple Pages and plain-text manuscripts and
splits them into the standard sections of a research article (title,
abstract, keywords, introduction, methods, ... references), checks them
against a journal template, and reports problems as warnings rather than
failures.

Example:
    >>> import scholarparse
    >>> doc = scholarparse.parse("paper.pdf")
    >>> print(doc.title)
    >>> print(doc.sections.references[:3])
    >>> for warning in doc.warnings:
    ...     print(warning)

    >>> # Optional AI enhancement (async)
    >>> config = scholarparse.ParserConfig(
    ...     enhancement=scholarparse.EnhancementConfig(enabled=True)
    ... )
    >>> doc = await scholarparse.parse_async(data, filename="paper.docx", config=config)
"""

from scholarparse.config import EnhancementConfig, ParserConfig
from scholarparse.exceptions import (
    ConfigurationError,
    DecodeError,
    EnhancementError,
    ExtractionError,
    NotADocumentError,
    ScholarParseError,
    UnreadableContainerError,
    UnsupportedFormatError,
)
from scholarparse.extractors.templates import (
    DEFAULT_TEMPLATE,
    MINIMAL_TEMPLATE,
    DocumentTemplate,
    get_template,
    load_template,
)
from scholarparse.models import (
    # Output
    Declarations,
    DeclarationKind,
    DocumentSections,
    ParsedDocument,
    # Lines
    LineClass,
    LineKind,
    LinePosition,
    RawLine,
    # Enums
    Phase,
    SectionKind,
)
from scholarparse.parse import (
    detect_format,
    parse,
    parse_async,
    parse_batch,
    supported_formats,
)

__version__ = "0.1.0"
__all__ = [
    # Main API
    "parse",
    "parse_async",
    "parse_batch",
    "detect_format",
    "supported_formats",
    # Configuration
    "ParserConfig",
    "EnhancementConfig",
    # Templates
    "DocumentTemplate",
    "DEFAULT_TEMPLATE",
    "MINIMAL_TEMPLATE",
    "get_template",
    "load_template",
    # Output
    "ParsedDocument",
    "DocumentSections",
    "Declarations",
    # Enums
    "SectionKind",
    "DeclarationKind",
    "LineKind",
    "Phase",
    # Lines
    "RawLine",
    "LinePosition",
    "LineClass",
    # Exceptions
    "ScholarParseError",
    "UnsupportedFormatError",
    "ExtractionError",
    "DecodeError",
    "NotADocumentError",
    "UnreadableContainerError",
    "ConfigurationError",
    "EnhancementError",
]
