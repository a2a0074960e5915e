"""
Basic tests for ScholarParse package structure.

These tests verify the public API is importable and
basic configuration works correctly.
"""

import pytest


class TestImports:
    """Test that the public API is importable."""

    def test_import_package(self):
        """Can import the main package."""
        import scholarparse

        assert scholarparse.__version__ == "0.1.0"

    def test_import_parse_functions(self):
        """Can import the main parse functions."""
        from scholarparse import parse, parse_async, parse_batch

        assert callable(parse)
        assert callable(parse_async)
        assert callable(parse_batch)

    def test_import_core_types(self):
        """Can import core data types."""
        from scholarparse import DeclarationKind, LineKind, SectionKind

        assert SectionKind.METHODS.value == "methods"
        assert DeclarationKind.FUNDING.value == "funding"
        assert LineKind.REFERENCE_HEADER.value == "reference_header"

    def test_import_exceptions(self):
        """Can import exception classes."""
        from scholarparse import (
            ConfigurationError,
            DecodeError,
            EnhancementError,
            ExtractionError,
            NotADocumentError,
            ScholarParseError,
            UnreadableContainerError,
            UnsupportedFormatError,
        )

        # Verify inheritance
        assert issubclass(UnsupportedFormatError, ScholarParseError)
        assert issubclass(ExtractionError, ScholarParseError)
        assert issubclass(DecodeError, ExtractionError)
        assert issubclass(NotADocumentError, ExtractionError)
        assert issubclass(UnreadableContainerError, ExtractionError)
        assert issubclass(ConfigurationError, ScholarParseError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(EnhancementError, ScholarParseError)

    def test_supported_formats(self):
        """All four readers are registered."""
        from scholarparse import supported_formats

        assert set(supported_formats()) == {"text", "pdf", "docx", "pages"}


class TestParserConfig:
    """Test ParserConfig behavior."""

    def test_default_config(self):
        """Default config has expected values."""
        from scholarparse import DEFAULT_TEMPLATE, ParserConfig

        config = ParserConfig()

        assert config.line_tolerance == 5.0
        assert config.max_title_length == 200
        assert config.max_abstract_lines == 15
        assert config.abstract_boundary_lines == 5
        assert config.subsection_max_chars == 20
        assert config.table_pattern_rows == 1
        assert config.derive_keywords is True
        assert config.detect_tables is True
        assert config.validate is True
        assert config.template is DEFAULT_TEMPLATE
        assert config.on_extraction_error == "report"
        assert config.enhancement.enabled is False
        assert config.enhancement.warn_on_failure is False

    def test_citation_style_follows_template(self):
        """citation_style defaults to the template's reference style."""
        from scholarparse import ParserConfig

        assert ParserConfig().citation_style == "IEEE"
        assert ParserConfig(reference_style="APA").citation_style == "APA"

    def test_invalid_reference_style(self):
        """Unknown reference styles are rejected."""
        from scholarparse import ConfigurationError, ParserConfig

        with pytest.raises(ConfigurationError, match="reference_style"):
            ParserConfig(reference_style="Chicago")

    def test_invalid_error_mode(self):
        """on_extraction_error must be report or raise."""
        from scholarparse import ConfigurationError, ParserConfig

        with pytest.raises(ConfigurationError, match="on_extraction_error"):
            ParserConfig(on_extraction_error="warn")

    def test_negative_tolerance(self):
        """line_tolerance must not be negative."""
        from scholarparse import ConfigurationError, ParserConfig

        with pytest.raises(ConfigurationError, match="line_tolerance"):
            ParserConfig(line_tolerance=-1)

    @pytest.mark.parametrize(
        "field", ["max_title_length", "max_abstract_lines", "subsection_max_chars"]
    )
    def test_positive_limits(self, field):
        """Line and length limits must be at least 1."""
        from scholarparse import ConfigurationError, ParserConfig

        with pytest.raises(ConfigurationError, match=field):
            ParserConfig(**{field: 0})

    def test_boundary_not_above_cap(self):
        """abstract_boundary_lines cannot exceed max_abstract_lines."""
        from scholarparse import ConfigurationError, ParserConfig

        with pytest.raises(ConfigurationError, match="abstract_boundary_lines"):
            ParserConfig(max_abstract_lines=3, abstract_boundary_lines=4)

    def test_configuration_error_is_value_error(self):
        """Invalid config can be caught as ValueError."""
        from scholarparse import ParserConfig

        with pytest.raises(ValueError):
            ParserConfig(table_pattern_rows=0)


class TestEnhancementConfig:
    """Test EnhancementConfig behavior."""

    def test_disabled_by_default(self):
        """Enhancement is off unless requested."""
        from scholarparse import EnhancementConfig

        config = EnhancementConfig()
        assert config.enabled is False
        assert config.timeout == 60.0
        assert config.max_content_chars == 4000
        assert config.warn_on_failure is False

    def test_invalid_timeout(self):
        """Timeout must be positive."""
        from scholarparse import ConfigurationError, EnhancementConfig

        with pytest.raises(ConfigurationError, match="timeout"):
            EnhancementConfig(timeout=0)

    def test_invalid_response_budget(self):
        """Response budget must be at least one character."""
        from scholarparse import ConfigurationError, EnhancementConfig

        with pytest.raises(ConfigurationError, match="max_response_chars"):
            EnhancementConfig(max_response_chars=0)
