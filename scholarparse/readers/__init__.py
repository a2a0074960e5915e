"""Document reading module.

One reader per input format; each turns bytes into RawLines and reports
failures as values (see readers.base). Registration order is also the
magic-byte sniffing order; the permissive text reader is imported last.
"""

from scholarparse.readers.base import (
    READERS,
    DocumentReader,
    Extraction,
    detect_format,
    get_reader,
    register_reader,
    supported_formats,
)
from scholarparse.readers.docx_reader import DocxReader
from scholarparse.readers.pages_reader import PagesReader, extract_text_from_xml
from scholarparse.readers.pdf_reader import PDFReader, TextFragment, reconstruct_lines
from scholarparse.readers.text_reader import TextReader, decode_text, split_lines

__all__ = [
    # Base and registry
    "DocumentReader",
    "Extraction",
    "READERS",
    "register_reader",
    "get_reader",
    "detect_format",
    "supported_formats",
    # Readers
    "PDFReader",
    "DocxReader",
    "PagesReader",
    "TextReader",
    # Utility functions
    "TextFragment",
    "reconstruct_lines",
    "extract_text_from_xml",
    "decode_text",
    "split_lines",
]
