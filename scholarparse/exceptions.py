"""
Exception classes for ScholarParse.

All ScholarParse exceptions inherit from ScholarParseError,
making it easy to catch all library errors.

Extraction errors normally never reach the caller: readers convert them
into an ``Extraction`` value and the pipeline reports them through
``ParsedDocument.error``. They are only raised when
``ParserConfig.on_extraction_error == "raise"``.

Example:
    >>> try:
    ...     doc = scholarparse.parse(data, filename="paper.xyz",
    ...                              config=ParserConfig(on_extraction_error="raise"))
    ... except scholarparse.UnsupportedFormatError as e:
    ...     print(f"Format not supported: {e}")
    ... except scholarparse.ScholarParseError as e:
    ...     print(f"ScholarParse error: {e}")
"""


class ScholarParseError(Exception):
    """
    Base exception for all ScholarParse errors.

    Catch this to handle any ScholarParse-specific error.
    """

    pass


class UnsupportedFormatError(ScholarParseError):
    """
    Raised when document format is not supported.

    Example:
        >>> get_reader("doc")
        UnsupportedFormatError: Legacy Word (.doc) files are not supported. ...
    """

    pass


class ExtractionError(ScholarParseError):
    """
    Raised when a reader cannot turn the input bytes into lines.

    Subclasses name the specific failure so callers can tell an
    undecodable text file from a corrupt container.
    """

    pass


class DecodeError(ExtractionError):
    """Raised when plain text bytes cannot be decoded."""

    pass


class NotADocumentError(ExtractionError):
    """Raised when the input fails the "looks like a document" sniff test."""

    pass


class UnreadableContainerError(ExtractionError):
    """Raised when a PDF, DOCX or ZIP container cannot be opened."""

    pass


class ConfigurationError(ScholarParseError, ValueError):
    """
    Raised for invalid configuration or template values.

    Example:
        >>> ParserConfig(line_tolerance=-1)
        ConfigurationError: line_tolerance must be >= 0, got -1
    """

    pass


class EnhancementError(ScholarParseError):
    """
    Raised inside the enhancement gateway when the remote reply is unusable.

    The gateway catches it and falls back to the unmodified document.
    """

    pass
