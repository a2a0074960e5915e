"""
Configuration for ScholarParse document parsing.

All options have sensible defaults; create a config only when you need to
customize behaviour.
"""

from dataclasses import dataclass, field
from typing import Literal

from scholarparse.exceptions import ConfigurationError
from scholarparse.extractors.references import STYLES
from scholarparse.extractors.templates import DEFAULT_TEMPLATE, DocumentTemplate


@dataclass
class EnhancementConfig:
    """
    Configuration for the optional generative-text enhancement pass.

    Enhancement is DISABLED by default. The endpoint must speak the
    OpenAI-compatible chat-completions API (OpenAI, vLLM, Ollama, ...).

    Example:
        >>> config = ParserConfig(
        ...     enhancement=EnhancementConfig(enabled=True, model="gpt-4o-mini")
        ... )
        >>> doc = await scholarparse.parse_async(data, filename="paper.pdf", config=config)
    """

    enabled: bool = False

    # Connection
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None  # Falls back to $SCHOLARPARSE_API_KEY
    model: str = "gpt-4o-mini"
    timeout: float = 60.0  # seconds, bounded wait for the whole call

    # Request / reply budget
    max_content_chars: int = 4000  # Body text sent with the prompt
    max_response_chars: int = 20000  # Longer replies are rejected
    temperature: float = 0.3
    max_tokens: int = 2000

    # Surface failures in ParsedDocument.warnings (they are always logged)
    warn_on_failure: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {self.timeout}")
        if self.max_content_chars < 0:
            raise ConfigurationError(
                f"max_content_chars must be >= 0, got {self.max_content_chars}"
            )
        if self.max_response_chars < 1:
            raise ConfigurationError(
                f"max_response_chars must be >= 1, got {self.max_response_chars}"
            )


@dataclass
class ParserConfig:
    """
    Configuration for document parsing.

    Example:
        >>> config = ParserConfig(
        ...     reference_style="APA",
        ...     detect_tables=False,
        ... )
        >>> doc = scholarparse.parse(Path("paper.docx"), config=config)
    """

    # PDF reading order: fragments within this vertical distance share a line
    line_tolerance: float = 5.0

    # Title / abstract heuristics
    max_title_length: int = 200
    title_search_lines: int = 20  # Non-blank lines scanned for a title
    max_abstract_lines: int = 15  # Abstract buffering soft cap
    abstract_boundary_lines: int = 5  # Blank after this many lines ends the abstract

    # Declarations subsection headings are short lines
    subsection_max_chars: int = 20

    # Fill missing keywords from the filename, else the most frequent terms
    derive_keywords: bool = True

    # Table detection
    detect_tables: bool = True
    table_pattern_rows: int = 1  # Lines matching "12 word 34 word" needed

    # Citation style for reference checks; None uses the template's style
    reference_style: str | None = None

    # Template validation
    validate: bool = True
    template: DocumentTemplate = field(default_factory=lambda: DEFAULT_TEMPLATE)

    # Error handling
    on_extraction_error: Literal["report", "raise"] = "report"

    # Optional enhancement pass (disabled by default)
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)

    @property
    def citation_style(self) -> str:
        """Name of the reference style in effect."""
        return self.reference_style or self.template.reference_style

    def __post_init__(self):
        """Validate configuration."""
        if self.line_tolerance < 0:
            raise ConfigurationError(f"line_tolerance must be >= 0, got {self.line_tolerance}")

        for name in (
            "max_title_length",
            "title_search_lines",
            "max_abstract_lines",
            "abstract_boundary_lines",
            "subsection_max_chars",
            "table_pattern_rows",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {value}")

        if self.abstract_boundary_lines > self.max_abstract_lines:
            raise ConfigurationError(
                "abstract_boundary_lines must not exceed max_abstract_lines, "
                f"got {self.abstract_boundary_lines} > {self.max_abstract_lines}"
            )

        if self.citation_style not in STYLES:
            source = "reference_style" if self.reference_style else "template reference_style"
            raise ConfigurationError(
                f"{source} must be one of {tuple(STYLES)}, got {self.citation_style!r}"
            )

        valid_error_modes = ("report", "raise")
        if self.on_extraction_error not in valid_error_modes:
            raise ConfigurationError(
                f"on_extraction_error must be one of {valid_error_modes}, "
                f"got {self.on_extraction_error!r}"
            )
