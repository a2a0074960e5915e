"""
Document parsing orchestrator.

This module provides the main `parse()` function that turns an uploaded
manuscript into a ParsedDocument by wiring together:
- readers (bytes -> lines, per format)
- TableDetector / TableFormatter (tabular inputs)
- SectionExtractor (state machine with keyword-search fallback)
- TemplateValidator (non-fatal template warnings)
- EnhancementGateway (optional, async, last)

Hard failures (unsupported format, undecodable bytes, unreadable
container) end up in ParsedDocument.error; everything else is a warning.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Union

from scholarparse.config import ParserConfig
from scholarparse.enhancement import EnhancementGateway, TextGenerator
from scholarparse.exceptions import ScholarParseError, UnsupportedFormatError
from scholarparse.extractors.sections import SectionExtractor
from scholarparse.extractors.state_machine import frequent_terms
from scholarparse.extractors.tables import (
    TABLE_ABSTRACT,
    TABLE_WARNING,
    TableDetector,
    TableFormatter,
    filename_keywords,
    sanitize_filename,
)
from scholarparse.extractors.validation import TemplateValidator
from scholarparse.models import DocumentSections, ParsedDocument
from scholarparse.readers import detect_format as _detect_format
from scholarparse.readers import get_reader
from scholarparse.readers import supported_formats as _supported_formats

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, str, Path]


# ═══════════════════════════════════════════════════════════════════════════════
# Document Parser
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class ParseContext:
    """Context accumulated while parsing one document."""

    config: ParserConfig
    source_name: str = ""
    format: str = ""
    processing_log: list[str] = field(default_factory=list)

    lines: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class DocumentParser:
    """
    Builds ParsedDocument from raw bytes.

    Each call owns its own ParseContext and DocumentSections, so one parser
    can be reused across documents.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        """Initialize the parser."""
        self.config = config or ParserConfig()
        self.section_extractor = SectionExtractor.from_config(self.config)
        self.table_detector = TableDetector(pattern_rows=self.config.table_pattern_rows)
        self.table_formatter = TableFormatter()
        self.validator = TemplateValidator(self.config.template)

    def parse_bytes(
        self,
        data: bytes,
        *,
        filename: str | None = None,
        mime_type: str | None = None,
        format: str | None = None,
    ) -> ParsedDocument:
        """
        Parse an in-memory document.

        Args:
            data: Raw file bytes
            filename: Original filename (format hint and table-path title)
            mime_type: Declared MIME type (format hint)
            format: Explicit format name, skipping detection

        Returns:
            ParsedDocument; ``error`` is set on hard failures

        Raises:
            ScholarParseError: Only when config.on_extraction_error == "raise"
        """
        ctx = ParseContext(config=self.config, source_name=filename or "")

        # Step 1: Pick a reader
        try:
            fmt = format or _detect_format(filename, data, mime_type)
            reader = get_reader(fmt, self.config)
        except UnsupportedFormatError as e:
            return self._fail(ctx, e)
        ctx.format = reader.format
        ctx.processing_log.append(f"Format: {ctx.format}")

        # Step 2: Extract lines
        extraction = reader.extract(data)
        if not extraction.ok:
            return self._fail(ctx, extraction.error)
        ctx.lines = extraction.texts
        ctx.warnings.extend(extraction.warnings)
        ctx.processing_log.append(f"Extracted {len(ctx.lines)} lines")
        content = "\n".join(ctx.lines).strip()

        # Step 3: Tabular inputs bypass section parsing
        if self.config.detect_tables and self.table_detector.detect(ctx.lines):
            ctx.processing_log.append("Tabular content detected")
            return self._finish(ctx, self._table_sections(ctx), self.table_formatter.format(ctx.lines))

        # Step 4: Sections
        result = self.section_extractor.extract(ctx.lines)
        ctx.processing_log.extend(result.processing_log)
        ctx.warnings.extend(result.warnings)

        # Step 5: Template validation
        if self.config.validate:
            template_warnings = self.validator.validate(result.sections)
            ctx.processing_log.append(
                f"Template {self.config.template.name!r}: {len(template_warnings)} warning(s)"
            )
            ctx.warnings.extend(template_warnings)

        # Step 6: Keywords fallback (after validation)
        if self.config.derive_keywords and not result.sections.keywords:
            self._derive_keywords(ctx, result.sections, content)

        return self._finish(ctx, result.sections, content)

    def _table_sections(self, ctx: ParseContext) -> DocumentSections:
        ctx.warnings.append(TABLE_WARNING)
        name = ctx.source_name or "Untitled"
        return DocumentSections(
            title=sanitize_filename(name),
            abstract=TABLE_ABSTRACT,
            keywords=filename_keywords(name),
        )

    def _derive_keywords(
        self, ctx: ParseContext, sections: DocumentSections, content: str
    ) -> None:
        keywords = filename_keywords(ctx.source_name) if ctx.source_name else []
        source = "filename"
        if not keywords:
            keywords, source = frequent_terms(content), "term frequency"
        sections.keywords = keywords
        ctx.processing_log.append(f"Derived {len(keywords)} keyword(s) from {source}")

    def _finish(
        self, ctx: ParseContext, sections: DocumentSections, content: str
    ) -> ParsedDocument:
        ctx.processing_log.append(f"Parse complete: {len(ctx.warnings)} warning(s)")
        logger.info(
            "Parsed %s (%s): %d lines, %d warning(s)",
            ctx.source_name or "<bytes>",
            ctx.format,
            len(ctx.lines),
            len(ctx.warnings),
        )
        logger.debug("Processing log:\n  %s", "\n  ".join(ctx.processing_log))
        return ParsedDocument(
            sections=sections,
            content=content,
            warnings=ctx.warnings,
            source_name=ctx.source_name,
            format=ctx.format,
        )

    def _fail(self, ctx: ParseContext, error: ScholarParseError) -> ParsedDocument:
        if self.config.on_extraction_error == "raise":
            raise error
        logger.warning("Extraction failed for %s: %s", ctx.source_name or "<bytes>", error)
        return ParsedDocument.failed(str(error), source_name=ctx.source_name, format=ctx.format)


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


def _load(source: Source, filename: str | None) -> tuple[bytes, str | None]:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), filename
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return path.read_bytes(), filename or path.name


def parse(
    source: Source,
    *,
    filename: str | None = None,
    mime_type: str | None = None,
    format: str | None = None,
    config: ParserConfig | None = None,
) -> ParsedDocument:
    """
    Parse a manuscript into a structured ParsedDocument.

    This is the main entry point for ScholarParse. It handles:
    - Format detection (extension, MIME type, magic bytes)
    - Raw extraction (text, PDF, DOCX, Pages)
    - Table detection
    - Section extraction and reference itemization
    - Template validation

    Enhancement is async-only; see parse_async().

    Args:
        source: File bytes, or a path to the document
        filename: Original filename when passing bytes
        mime_type: Declared MIME type
        format: Explicit format name ("pdf", "docx", "pages", "text")
        config: Parser configuration (uses defaults if None)

    Returns:
        ParsedDocument with sections, content and warnings

    Raises:
        FileNotFoundError: If a path source doesn't exist
        ScholarParseError: On hard failures when on_extraction_error="raise"

    Example:
        >>> doc = parse(Path("paper.pdf"))
        >>> print(doc.title)
        >>> for warning in doc.warnings:
        ...     print(warning)
    """
    data, filename = _load(source, filename)
    return DocumentParser(config).parse_bytes(
        data, filename=filename, mime_type=mime_type, format=format
    )


async def _read_async(source: Source | AsyncIterable[bytes]) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {path}")
        return await asyncio.to_thread(path.read_bytes)

    chunks = []
    async for chunk in source:
        chunks.append(bytes(chunk))
    return b"".join(chunks)


async def parse_async(
    source: Source | AsyncIterable[bytes],
    *,
    filename: str | None = None,
    mime_type: str | None = None,
    format: str | None = None,
    config: ParserConfig | None = None,
    generator: TextGenerator | None = None,
) -> ParsedDocument:
    """
    Parse a manuscript, then run the optional enhancement pass.

    Reads the input (bytes, path or async chunk iterator), runs the same
    synchronous pipeline as parse(), and only then awaits the enhancement
    gateway when config.enhancement.enabled is set. Enhancement failures
    leave the document unchanged.

    Args:
        source: File bytes, a path, or an async iterator of byte chunks
        filename: Original filename
        mime_type: Declared MIME type
        format: Explicit format name
        config: Parser configuration (uses defaults if None)
        generator: Text generator to use instead of the configured HTTP client

    Returns:
        ParsedDocument, enhanced when the enhancement pass succeeded
    """
    config = config or ParserConfig()
    if isinstance(source, (str, Path)) and filename is None:
        filename = Path(source).name
    data = await _read_async(source)

    doc = DocumentParser(config).parse_bytes(
        data, filename=filename, mime_type=mime_type, format=format
    )
    if not doc.ok or not config.enhancement.enabled:
        return doc

    if generator is not None:
        gateway = EnhancementGateway(generator, config.enhancement)
    else:
        gateway = EnhancementGateway.from_config(config.enhancement)

    result = await gateway.run(doc.sections.copy(), doc.content)
    if result.applied:
        return replace(doc, sections=result.sections, content=result.content)
    if result.warning and config.enhancement.warn_on_failure:
        return replace(doc, warnings=[*doc.warnings, result.warning])
    return doc


def parse_batch(
    sources: Iterable[str | Path],
    config: ParserConfig | None = None,
) -> Iterator[tuple[str, ParsedDocument]]:
    """
    Parse multiple documents sequentially, yielding results as completed.

    Args:
        sources: Paths to document files
        config: Parser configuration

    Yields:
        (name, ParsedDocument) tuples; unreadable files yield a failed document
    """
    config = config or ParserConfig()
    parser = DocumentParser(config)

    for source in sources:
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            if config.on_extraction_error == "raise":
                raise
            logger.warning("Could not read %s: %s", path, e)
            yield (path.name, ParsedDocument.failed(f"Could not read file: {e}", source_name=path.name))
            continue
        yield (path.name, parser.parse_bytes(data, filename=path.name))


def detect_format(
    filename: str | Path | None = None,
    data: bytes | None = None,
    mime_type: str | None = None,
) -> str:
    """
    Detect document format from extension, MIME type and magic bytes.

    Returns:
        Format string: "pdf", "docx", "pages", "text" (or "doc" for legacy Word)

    Raises:
        UnsupportedFormatError: If the format cannot be detected
    """
    return _detect_format(str(filename) if filename is not None else None, data, mime_type)


def supported_formats() -> list[str]:
    """Return list of currently supported input formats."""
    return _supported_formats()
