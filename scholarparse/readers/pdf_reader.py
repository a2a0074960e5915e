"""
PDF reader using PyMuPDF (fitz).

Extracts text spans with their positions and rebuilds reading order:
spans are sorted top to bottom, spans whose top edge lies within a
tolerance band of the line's first span share a line, and each line is
ordered left to right. Pages are separated by one blank line.

Only the text layer is read; scanned pages without one are reported as
an extraction failure (OCR is out of scope).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from itertools import groupby
from typing import TYPE_CHECKING

import fitz  # PyMuPDF

from scholarparse.exceptions import UnreadableContainerError
from scholarparse.models import LinePosition, RawLine
from scholarparse.readers.base import DocumentReader, register_reader

if TYPE_CHECKING:
    from collections.abc import Iterator

    from scholarparse.config import ParserConfig


@dataclass(frozen=True)
class TextFragment:
    """A positioned span of text from a page.

    Extracted from PyMuPDF's get_text("dict") output.
    """

    text: str
    x: float  # Left edge
    y: float  # Top edge
    page: int  # 0-based page index


def reconstruct_lines(fragments: Iterable[TextFragment], tolerance: float = 5.0) -> list[RawLine]:
    """Rebuild reading-order lines from positioned fragments.

    Args:
        fragments: Fragments in any order.
        tolerance: Fragments whose top edge is within this distance of the
            line's first fragment are on the same line.

    Returns:
        Lines in reading order; consecutive pages separated by a blank line.
    """
    lines: list[RawLine] = []
    ordered = sorted(fragments, key=lambda f: (f.page, f.y, f.x))

    for page, page_fragments in groupby(ordered, key=lambda f: f.page):
        if lines:
            lines.append(RawLine(""))

        current: list[TextFragment] = []
        for fragment in page_fragments:
            if current and abs(fragment.y - current[0].y) > tolerance:
                lines.append(_join(current))
                current = []
            current.append(fragment)
        if current:
            lines.append(_join(current))

    return lines


def _join(fragments: list[TextFragment]) -> RawLine:
    anchor = fragments[0]
    by_x = sorted(fragments, key=lambda f: f.x)
    text = " ".join(f.text for f in by_x)
    return RawLine(text, LinePosition(x=by_x[0].x, y=anchor.y, page=anchor.page))


@register_reader
class PDFReader(DocumentReader):
    """Extracts positioned lines from PDFs using PyMuPDF.

    Usage:
        reader = PDFReader(line_tolerance=5.0)
        extraction = reader.extract(pdf_bytes)
        for line in extraction.lines:
            print(line.position.page, line.text)
    """

    format = "pdf"
    extensions = ("pdf",)
    mime_types = ("application/pdf",)

    def __init__(self, *, line_tolerance: float = 5.0):
        """Initialize the PDF reader.

        Args:
            line_tolerance: Vertical distance within which spans share a line.
        """
        self.line_tolerance = line_tolerance

    @classmethod
    def from_config(cls, config: ParserConfig | None = None) -> PDFReader:
        if config is None:
            return cls()
        return cls(line_tolerance=config.line_tolerance)

    def sniff(self, data: bytes) -> bool:
        return data[:1024].lstrip().startswith(b"%PDF")

    def _read(self, data: bytes) -> list[RawLine]:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise UnreadableContainerError(f"Failed to open PDF: {e}") from e

        try:
            if doc.needs_pass:
                raise UnreadableContainerError("PDF is encrypted and cannot be read.")
            fragments = list(self._extract_fragments(doc))
        finally:
            doc.close()

        return reconstruct_lines(fragments, self.line_tolerance)

    def _extract_fragments(self, doc: fitz.Document) -> Iterator[TextFragment]:
        """Yield text spans with their top-left corner."""
        for page_idx in range(len(doc)):
            page_dict = doc[page_idx].get_text("dict")

            for block in page_dict.get("blocks", []):
                # Skip image blocks
                if block.get("type") != 0:
                    continue

                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        text = span.get("text", "").strip()
                        if not text:
                            continue

                        bbox = span.get("bbox", (0, 0, 0, 0))
                        yield TextFragment(text=text, x=bbox[0], y=bbox[1], page=page_idx)
