"""
Word (.docx) reader using python-docx.

Only paragraph text is read; styles and formatting are ignored. Soft line
breaks inside a paragraph become separate lines. Table cells are read only
when the body has no paragraph text (e.g. a vocabulary list kept in a
table), one tab-joined line per row.
"""

from __future__ import annotations

from io import BytesIO

from docx import Document as DocxDocument

from scholarparse.exceptions import UnreadableContainerError
from scholarparse.models import RawLine
from scholarparse.readers.base import DocumentReader, register_reader, zip_members

DOCX_MAIN_PART = "word/document.xml"


@register_reader
class DocxReader(DocumentReader):
    """Reads Office Open XML word-processing documents."""

    format = "docx"
    extensions = ("docx",)
    mime_types = ("application/vnd.openxmlformats-officedocument.wordprocessingml.document",)

    def sniff(self, data: bytes) -> bool:
        return DOCX_MAIN_PART in zip_members(data)

    def _read(self, data: bytes) -> list[RawLine]:
        try:
            doc = DocxDocument(BytesIO(data))
        except Exception as e:
            raise UnreadableContainerError(f"Failed to open DOCX: {e}") from e

        lines = []
        for paragraph in doc.paragraphs:
            for part in paragraph.text.split("\n"):
                lines.append(RawLine(part.rstrip()))

        if any(line.text.strip() for line in lines):
            return lines

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                # Merged cells repeat their text in every spanned column
                deduped = [c for i, c in enumerate(cells) if i == 0 or c != cells[i - 1]]
                lines.append(RawLine("\t".join(deduped)))
        return lines
