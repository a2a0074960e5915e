"""
Apple Pages reader.

Older Pages files are ZIP archives holding an XML document (document.xml
or index.xml); some exports are the bare XML. Newer archives carry no XML
but usually include a QuickLook/Preview.pdf, which is read with the PDF
reader as a last resort.

Markup is stripped without an XML parser: paragraph-closing tags become
line breaks, every other tag is removed, the five standard entities are
decoded and whitespace is collapsed within each line.
"""

from __future__ import annotations

import re
import zipfile
from io import BytesIO
from typing import TYPE_CHECKING

from scholarparse.exceptions import NotADocumentError, UnreadableContainerError
from scholarparse.models import RawLine
from scholarparse.readers.base import ZIP_MAGIC, DocumentReader, register_reader, zip_members
from scholarparse.readers.pdf_reader import PDFReader

if TYPE_CHECKING:
    from scholarparse.config import ParserConfig

# Markers looked for in the first SNIFF_CHARS decoded characters
DOCUMENT_MARKERS = ("<?xml", "<document", "<iWork", "<sl:document")
SNIFF_CHARS = 1000

XML_MEMBERS = ("document.xml", "index.xml")
PREVIEW_PDF = "QuickLook/Preview.pdf"
PREVIEW_WARNING = "Using Preview.pdf from Pages document - text extraction may be limited"

PARAGRAPH_END = re.compile(r"</(?:\w+:)?(?:p|para|paragraph|br)\s*>|<(?:\w+:)?br\s*/>", re.I)
TAG = re.compile(r"<[^>]*>")
SPACES = re.compile(r"\s+")
ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&amp;", "&"),  # Last, so "&amp;lt;" stays "&lt;"
)


def looks_like_document(text: str) -> bool:
    """Sniff test on decoded text for Pages/iWork XML markers."""
    prefix = text[:SNIFF_CHARS]
    return any(marker in prefix for marker in DOCUMENT_MARKERS)


def extract_text_from_xml(xml: str) -> list[str]:
    """Strip markup and return non-empty text lines."""
    text = PARAGRAPH_END.sub("\n", xml)
    text = TAG.sub(" ", text)
    for entity, char in ENTITIES:
        text = text.replace(entity, char)
    lines = (SPACES.sub(" ", line).strip() for line in text.split("\n"))
    return [line for line in lines if line]


@register_reader
class PagesReader(DocumentReader):
    """Reads Apple Pages documents (XML flavour)."""

    format = "pages"
    extensions = ("pages",)
    mime_types = ("application/vnd.apple.pages", "application/x-iwork-pages-sffpages")

    def __init__(self, *, pdf_reader: PDFReader | None = None):
        self.pdf_reader = pdf_reader or PDFReader()

    @classmethod
    def from_config(cls, config: ParserConfig | None = None) -> PagesReader:
        return cls(pdf_reader=PDFReader.from_config(config))

    def sniff(self, data: bytes) -> bool:
        if data.startswith(ZIP_MAGIC):
            members = zip_members(data)
            return any(name in members for name in (*XML_MEMBERS, PREVIEW_PDF))
        return looks_like_document(data[:SNIFF_CHARS].decode("utf-8", errors="replace"))

    def _read(self, data: bytes) -> list[RawLine]:
        if data.startswith(ZIP_MAGIC):
            return self._read_archive(data)
        return self._read_xml(data)

    def _read_xml(self, data: bytes) -> list[RawLine]:
        text = data.decode("utf-8", errors="replace")
        if not looks_like_document(text):
            raise NotADocumentError(
                "The uploaded file does not appear to be a valid document. "
                "Please check the file and try again."
            )
        lines = extract_text_from_xml(text)
        if not lines:
            raise NotADocumentError(
                "Could not extract text from Pages document. "
                "Please export as PDF or Word and try again."
            )
        return [RawLine(line) for line in lines]

    def _read_archive(self, data: bytes) -> list[RawLine]:
        try:
            with zipfile.ZipFile(BytesIO(data)) as archive:
                members = set(archive.namelist())
                for name in XML_MEMBERS:
                    if name in members:
                        return self._read_xml(archive.read(name))
                preview = archive.read(PREVIEW_PDF) if PREVIEW_PDF in members else None
        except zipfile.BadZipFile as e:
            raise UnreadableContainerError(f"Pages archive is corrupt: {e}") from e

        if preview is None:
            raise NotADocumentError(
                "Pages archive contains no readable document. "
                "Please export as PDF or Word and try again."
            )

        extraction = self.pdf_reader.extract(preview)
        if not extraction.ok:
            raise extraction.error
        self.warn(PREVIEW_WARNING)
        return extraction.lines
