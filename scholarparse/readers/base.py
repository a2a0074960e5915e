"""
Reader base class, registry and format detection.

Every reader turns an input byte buffer into RawLines. Readers raise
typed ExtractionErrors internally; DocumentReader.extract() is the
boundary that converts any failure (including third-party library errors)
into an Extraction value, so nothing throws past a reader.
"""

from __future__ import annotations

import logging
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import PurePath
from typing import TYPE_CHECKING

from scholarparse.exceptions import (
    ExtractionError,
    UnreadableContainerError,
    UnsupportedFormatError,
)
from scholarparse.models import RawLine

if TYPE_CHECKING:
    from scholarparse.config import ParserConfig

logger = logging.getLogger(__name__)

# OLE2 compound file (legacy .doc, .xls, ...)
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
ZIP_MAGIC = b"PK\x03\x04"

LEGACY_DOC_MESSAGE = (
    "Legacy Word (.doc) files are not supported. Please save the document as "
    ".docx or PDF and upload it again."
)


@dataclass(frozen=True)
class Extraction:
    """Outcome of a reader: lines on success, a typed error on failure."""

    lines: list[RawLine] = field(default_factory=list)
    error: ExtractionError | None = None
    format: str = ""
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def texts(self) -> list[str]:
        """Line texts without positions."""
        return [line.text for line in self.lines]


class DocumentReader(ABC):
    """Abstract base for format readers.

    Subclasses declare ``format``, ``extensions`` and ``mime_types``,
    implement ``_read`` and optionally ``sniff``.
    """

    format: str = "base"
    extensions: tuple[str, ...] = ()
    mime_types: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: ParserConfig | None = None) -> DocumentReader:
        """Create a reader configured from ParserConfig."""
        return cls()

    def sniff(self, data: bytes) -> bool:
        """Whether the bytes look like this format (used without a filename)."""
        return False

    @abstractmethod
    def _read(self, data: bytes) -> list[RawLine]:
        """Turn bytes into lines.

        Raises:
            ExtractionError: If the bytes cannot be read.
        """
        pass

    def extract(self, data: bytes) -> Extraction:
        """Read bytes into an Extraction; never raises."""
        self._warnings: list[str] = []
        try:
            lines = self._read(data)
            if not any(not line.is_blank for line in lines):
                raise ExtractionError(f"No text could be extracted from the {self.format} file.")
        except ExtractionError as e:
            logger.warning("%s reader failed: %s", self.format, e)
            return Extraction(error=e, format=self.format)
        except Exception as e:
            # Third-party parser failures mean the container itself is broken
            logger.warning("%s reader failed: %s", self.format, e)
            error = UnreadableContainerError(f"Failed to read {self.format} document: {e}")
            error.__cause__ = e
            return Extraction(error=error, format=self.format)

        logger.debug("%s reader produced %d lines", self.format, len(lines))
        return Extraction(lines=lines, format=self.format, warnings=self._warnings)

    def warn(self, message: str) -> None:
        """Record a soft finding for the current extract() call."""
        self._warnings.append(message)


# ═══════════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════════

# Registration order is also sniffing order
READERS: dict[str, type[DocumentReader]] = {}


def register_reader(cls: type[DocumentReader]) -> type[DocumentReader]:
    """Class decorator adding a reader to the registry."""
    READERS[cls.format] = cls
    return cls


def get_reader(format: str, config: ParserConfig | None = None) -> DocumentReader:
    """Get a configured reader for a format name.

    Raises:
        UnsupportedFormatError: For legacy .doc or unknown formats.
    """
    format = format.lower().lstrip(".")
    if format == "doc":
        raise UnsupportedFormatError(LEGACY_DOC_MESSAGE)
    try:
        cls = READERS[format]
    except KeyError:
        raise UnsupportedFormatError(
            f"Unsupported format {format!r}. Supported: {', '.join(supported_formats())}"
        ) from None
    return cls.from_config(config)


def supported_formats() -> list[str]:
    """Names of registered formats."""
    return list(READERS)


def zip_members(data: bytes) -> set[str]:
    """Member names of a ZIP archive, or an empty set if it is not one."""
    if not data.startswith(ZIP_MAGIC):
        return set()
    try:
        with zipfile.ZipFile(BytesIO(data)) as archive:
            return set(archive.namelist())
    except zipfile.BadZipFile:
        return set()


def detect_format(
    filename: str | None = None,
    data: bytes | None = None,
    mime_type: str | None = None,
) -> str:
    """Decide which reader handles an input.

    Checks, in order: the filename extension, the MIME type, then magic
    bytes via each reader's sniff().

    Returns:
        A format name accepted by get_reader() ("doc" for legacy Word).

    Raises:
        UnsupportedFormatError: If nothing identifies the input.
    """
    if filename:
        suffix = PurePath(filename).suffix.lower().lstrip(".")
        if suffix == "doc":
            return "doc"
        for name, cls in READERS.items():
            if suffix in cls.extensions:
                return name

    if mime_type:
        mime = mime_type.split(";")[0].strip().lower()
        if mime == "application/msword":
            return "doc"
        for name, cls in READERS.items():
            if mime in cls.mime_types:
                return name

    if data:
        if data.startswith(OLE2_MAGIC):
            return "doc"
        for name, cls in READERS.items():
            if cls().sniff(data):
                return name

    raise UnsupportedFormatError(
        f"Could not determine the format of {filename or 'the input'!s}. "
        f"Supported: {', '.join(supported_formats())}"
    )
