"""Plain text reader."""

from __future__ import annotations

import codecs
import re

from scholarparse.exceptions import DecodeError
from scholarparse.models import RawLine
from scholarparse.readers.base import DocumentReader, register_reader

LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Tried in order after BOM detection; cp1252 covers most legacy Western text
FALLBACK_ENCODINGS = ("utf-8", "cp1252")


def decode_text(data: bytes) -> str:
    """Decode bytes as UTF-8 (BOM-aware), UTF-16 with a BOM, or cp1252.

    Raises:
        DecodeError: On NUL bytes outside UTF-16, or bytes no encoding accepts.
    """
    try:
        if data.startswith(codecs.BOM_UTF8):
            return data[len(codecs.BOM_UTF8) :].decode("utf-8")
        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            return data.decode("utf-16")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Text has a byte order mark but does not decode: {e}") from e

    if b"\x00" in data:
        raise DecodeError("File contains NUL bytes; it does not look like plain text.")

    for encoding in FALLBACK_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise DecodeError("Text could not be decoded as UTF-8 or Windows-1252.")


def split_lines(text: str) -> list[str]:
    """Split on any line break convention, trimming trailing whitespace."""
    return [line.rstrip() for line in LINE_BREAK.split(text)]


@register_reader
class TextReader(DocumentReader):
    """Reads .txt / .md files."""

    format = "text"
    extensions = ("txt", "text", "md", "markdown")
    mime_types = ("text/plain", "text/markdown")

    def sniff(self, data: bytes) -> bool:
        try:
            decode_text(data[:4096])
        except DecodeError:
            return False
        return True

    def _read(self, data: bytes) -> list[RawLine]:
        return [RawLine(line) for line in split_lines(decode_text(data))]
