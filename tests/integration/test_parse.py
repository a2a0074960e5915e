"""
Integration tests for the parse() orchestrator.

Documents are generated in memory and run through the whole pipeline:
reader -> table check -> sections -> validation -> (enhancement).
"""

import asyncio
import json
import logging

import pytest

from scholarparse import (
    MINIMAL_TEMPLATE,
    EnhancementConfig,
    ExtractionError,
    ParsedDocument,
    ParserConfig,
    UnsupportedFormatError,
    parse,
    parse_async,
    parse_batch,
)
from scholarparse.extractors.tables import TABLE_ABSTRACT


def no_validation() -> ParserConfig:
    return ParserConfig(validate=False)


class TestScenarios:
    """End-to-end behaviour on reference inputs."""

    def test_scenario_a(self, scenario_a_bytes):
        """Title, abstract, introduction and references are extracted."""
        doc = parse(scenario_a_bytes, filename="paper.txt")

        assert doc.ok
        assert doc.title == "My Paper Title"
        assert doc.abstract == "This is the abstract text spanning one line."
        assert doc.introduction == "Some intro text."
        assert doc.references == ['[1] A. Smith, "Title," Journal, 2023.']
        assert not any("references do not follow" in w for w in doc.warnings)

    def test_scenario_b(self):
        """Non-conforming references give one aggregated warning."""
        text = (
            "My Paper Title\n\nAbstract\nText.\n\nIntroduction\nBody.\n\nReferences\n"
            "Smith, J. (2020). First work. Publisher.\n"
            "Doe, A. (2021). Second work.\n"
            "Roe, B. (2022). Third work."
        )
        doc = parse(text.encode(), filename="paper.txt", config=no_validation())

        style_warnings = [w for w in doc.warnings if "references do not follow" in w]
        assert len(style_warnings) == 1
        assert "IEEE" in style_warnings[0]
        assert "[1]" in style_warnings[0]
        assert len(doc.references) == 3

    def test_scenario_c(self):
        """Table-like input is flagged and titled from the filename."""
        rows = [f"term{i} word{i} more{i} last{i}" for i in range(20)]
        doc = parse("\n".join(rows).encode(), filename="03 Vocabulary list.txt")

        assert doc.ok
        assert doc.title == "Vocabulary list"
        assert doc.abstract == TABLE_ABSTRACT
        assert doc.keywords == ["vocabulary", "list"]
        assert doc.content.startswith("## Document Content")
        assert len(doc.warnings) == 1
        assert "tabular" in doc.warnings[0]

    def test_scenario_d(self, scenario_a_bytes, fake_generator):
        """An undecodable enhancement reply leaves the document unchanged."""
        config = ParserConfig(enhancement=EnhancementConfig(enabled=True))
        baseline = parse(scenario_a_bytes, filename="paper.txt", config=config)
        generator = fake_generator("Sorry, I can't produce JSON today.")

        enhanced = asyncio.run(
            parse_async(scenario_a_bytes, filename="paper.txt", config=config, generator=generator)
        )

        assert len(generator.prompts) == 1
        assert enhanced == baseline

    def test_scenario_e(self, manuscript_factory):
        """A complete manuscript missing Methods yields one warning naming Methods."""
        text = manuscript_factory(include_methods=False)
        doc = parse(text.encode(), filename="paper.txt")

        assert doc.ok
        assert doc.error is None
        assert doc.warnings == ["Required section 'Methods' is missing or empty."]

    def test_complete_manuscript(self, manuscript):
        """A manuscript meeting the default template has no warnings."""
        doc = parse(manuscript.encode(), filename="paper.txt")

        assert doc.warnings == []
        assert doc.keywords == ["structure", "parsing", "manuscripts", "templates", "validation"]
        assert len(doc.references) == 35
        assert doc.declarations.funding
        assert doc.declarations.conflict_of_interest


class TestFrontMatterFallbacks:
    """Title labels and derived keywords."""

    def test_markdown_title_label(self):
        """The line after "# Title" is the title."""
        data = b"# Title\nMy Real Paper\n\n## Abstract\nShort abstract.\n\n## Introduction\nBody."
        doc = parse(data, filename="a.md")

        assert doc.title == "My Real Paper"
        assert doc.abstract == "Short abstract."
        assert doc.introduction == "Body."

    def test_keywords_from_filename(self):
        """Missing keywords come from the filename."""
        data = b"My Paper\n\nAbstract\nWe entangle things.\n\nIntroduction\nBody text."
        doc = parse(data, filename="quantum-entanglement-study.txt")

        assert doc.keywords == ["quantum", "entanglement", "study"]

    def test_keywords_from_term_frequency(self):
        """Without a usable filename, the most frequent terms are used."""
        data = b"Graph Theory Notes\n\nIntroduction\nGraphs connect nodes. Graphs have edges. Nodes matter."
        doc = parse(data, filename="a.md")

        assert doc.keywords == ["graphs", "nodes", "graph", "theory", "notes"]

    def test_derived_keywords_still_warn(self):
        """Template validation sees the keywords the author supplied."""
        data = b"My Paper\n\nAbstract\nWe entangle things.\n\nIntroduction\nBody text."
        doc = parse(data, filename="quantum-entanglement-study.txt")

        assert doc.keywords
        assert "Required section 'Keywords' is missing or empty." in doc.warnings

    def test_explicit_keywords_kept(self, manuscript):
        """Keywords from the manuscript are never replaced."""
        doc = parse(manuscript.encode(), filename="quantum-entanglement-study.txt")
        assert doc.keywords == ["structure", "parsing", "manuscripts", "templates", "validation"]

    def test_derivation_can_be_disabled(self):
        """derive_keywords=False leaves keywords empty."""
        data = b"My Paper\n\nAbstract\nWe entangle things.\n\nIntroduction\nBody text."
        doc = parse(
            data, filename="quantum-entanglement-study.txt", config=ParserConfig(derive_keywords=False)
        )

        assert doc.keywords == []


class TestFormats:
    """Each reader feeds the same pipeline."""

    def test_pdf(self, pdf_factory):
        """PDF text is sectioned like plain text."""
        data = pdf_factory(
            [
                ["My Paper Title", "Abstract", "Short abstract here."],
                ["Introduction", "Intro body.", "References", "[1] A. Smith, Title, 2023."],
            ]
        )
        doc = parse(data, filename="paper.pdf", config=no_validation())

        assert doc.format == "pdf"
        assert doc.title == "My Paper Title"
        assert doc.abstract == "Short abstract here."
        assert doc.introduction == "Intro body."
        assert doc.references == ["[1] A. Smith, Title, 2023."]

    def test_docx(self, docx_factory):
        """DOCX paragraphs are sectioned."""
        data = docx_factory(
            ["My Paper Title", "Abstract", "Short abstract.", "", "Methods", "We measured."]
        )
        doc = parse(data, config=no_validation())

        assert doc.format == "docx"
        assert doc.methods == "We measured."

    def test_pages(self, zip_factory):
        """Pages XML is sectioned."""
        xml = (
            "<?xml version='1.0'?><sl:document><sl:p>My Paper Title</sl:p>"
            "<sl:p>Abstract</sl:p><sl:p>Short abstract.</sl:p>"
            "<sl:p>Results</sl:p><sl:p>It worked.</sl:p></sl:document>"
        )
        data = zip_factory({"index.xml": xml.encode()})
        doc = parse(data, filename="paper.pages", config=no_validation())

        assert doc.format == "pages"
        assert doc.results == "It worked."

    def test_path_source(self, tmp_path, scenario_a_bytes):
        """Paths are read and their name used as the source name."""
        path = tmp_path / "paper.txt"
        path.write_bytes(scenario_a_bytes)
        doc = parse(path)

        assert doc.source_name == "paper.txt"
        assert doc.title == "My Paper Title"

    def test_missing_path(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            parse(tmp_path / "nope.pdf")


class TestHardFailures:
    """Hard failures end up in ParsedDocument.error."""

    @pytest.mark.parametrize(
        "data,filename",
        [
            (b"abc\x00def", "notes.txt"),
            (b"\x81\x8d\x8f", "notes.txt"),
            (b"PK\x03\x04 broken", "paper.docx"),
            (b"hello there", "paper.pages"),
            (b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", "paper.doc"),
            (b"\x00\x01\x02", "paper.xyz"),
        ],
    )
    def test_error_without_sections(self, data, filename):
        """Failed documents never carry sections or content."""
        doc = parse(data, filename=filename)

        assert not doc.ok
        assert doc.error
        assert not doc.sections.has_content()
        assert doc.content == ""
        assert doc.warnings == []

    def test_legacy_doc_message(self):
        """Legacy Word files are rejected with guidance."""
        doc = parse(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", filename="paper.doc")
        assert ".docx or PDF" in doc.error

    def test_raise_mode(self):
        """on_extraction_error='raise' raises typed errors."""
        config = ParserConfig(on_extraction_error="raise")
        with pytest.raises(ExtractionError):
            parse(b"abc\x00def", filename="notes.txt", config=config)
        with pytest.raises(UnsupportedFormatError):
            parse(b"\x00\x01\x02", filename="paper.xyz", config=config)

    def test_failure_logged(self, caplog):
        """Hard failures are logged at WARNING."""
        with caplog.at_level(logging.WARNING, logger="scholarparse"):
            parse(b"abc\x00def", filename="notes.txt")
        assert any("Extraction failed" in record.message for record in caplog.records)


class TestInvariants:
    """Properties that hold for every successful parse."""

    @pytest.mark.parametrize(
        "text",
        [
            "Just one line",
            "\n\n   \nTrailing text after blanks\n\n",
            "doi: 10.1/abc\nhttps://example.org",
            "Introduction\nOnly a section.",
        ],
    )
    def test_content_never_empty(self, text):
        """Successful extraction always yields content."""
        doc = parse(text.encode(), filename="x.txt")
        assert doc.ok
        assert doc.content.strip()

    def test_content_is_raw_text(self, scenario_a_bytes):
        """content holds the full extracted text."""
        doc = parse(scenario_a_bytes, filename="paper.txt")
        assert doc.content == scenario_a_bytes.decode().strip()

    def test_fallback_reported(self):
        """Keyword-search fallback is reported as a warning."""
        text = "Loose Title\nSome text.\n\nOur methods in brief\nWe measured."
        doc = parse(text.encode(), filename="x.txt", config=no_validation())
        assert doc.methods == "We measured."
        assert any("keyword search" in w for w in doc.warnings)

    def test_table_detection_can_be_disabled(self):
        """detect_tables=False forces section parsing."""
        rows = [f"term{i} word{i} more{i} last{i}" for i in range(20)]
        config = ParserConfig(detect_tables=False, validate=False)
        doc = parse("\n".join(rows).encode(), filename="list.txt", config=config)
        assert doc.title == "term0 word0 more0 last0"

    def test_custom_template(self, scenario_a_bytes):
        """Validation uses the configured template."""
        config = ParserConfig(template=MINIMAL_TEMPLATE)
        doc = parse(scenario_a_bytes, filename="paper.txt", config=config)
        assert doc.warnings == [
            "Required section 'Methods' is missing or empty.",
            "Required section 'Results' is missing or empty.",
            "Required section 'Discussion' is missing or empty.",
        ]

    def test_info_log_per_parse(self, scenario_a_bytes, caplog):
        """One INFO line is logged per parse."""
        with caplog.at_level(logging.INFO, logger="scholarparse.parse"):
            parse(scenario_a_bytes, filename="paper.txt")
        info = [r for r in caplog.records if r.levelno == logging.INFO]
        assert len(info) == 1
        assert "paper.txt" in info[0].message


class TestParseAsync:
    """Test the async entry point."""

    def test_chunked_input(self, scenario_a_bytes):
        """Async byte chunks are joined before parsing."""

        async def chunks():
            for i in range(0, len(scenario_a_bytes), 7):
                yield scenario_a_bytes[i : i + 7]

        doc = asyncio.run(parse_async(chunks(), filename="paper.txt"))
        assert doc == parse(scenario_a_bytes, filename="paper.txt")

    def test_enhancement_disabled_by_default(self, scenario_a_bytes, fake_generator):
        """The generator is not called unless enabled."""
        generator = fake_generator("{}")
        asyncio.run(parse_async(scenario_a_bytes, filename="paper.txt", generator=generator))
        assert generator.prompts == []

    def test_enhancement_applied(self, scenario_a_bytes, fake_generator):
        """A valid reply replaces front matter and content."""
        reply = json.dumps(
            {"title": "New Title", "abstract": "New abstract.", "content": "New content."}
        )
        config = ParserConfig(enhancement=EnhancementConfig(enabled=True))
        doc = asyncio.run(
            parse_async(
                scenario_a_bytes,
                filename="paper.txt",
                config=config,
                generator=fake_generator(reply),
            )
        )

        assert doc.title == "New Title"
        assert doc.abstract == "New abstract."
        assert doc.content == "New content."
        assert doc.introduction == "Some intro text."

    def test_enhancement_failure_warning(self, scenario_a_bytes, fake_generator):
        """warn_on_failure surfaces enhancement failures."""
        config = ParserConfig(enhancement=EnhancementConfig(enabled=True, warn_on_failure=True))
        doc = asyncio.run(
            parse_async(
                scenario_a_bytes,
                filename="paper.txt",
                config=config,
                generator=fake_generator(error=RuntimeError("boom")),
            )
        )
        assert doc.title == "My Paper Title"
        assert doc.warnings[-1] == "AI enhancement failed: boom"

    def test_failed_extraction_skips_enhancement(self, fake_generator):
        """Hard failures are never sent for enhancement."""
        generator = fake_generator("{}")
        config = ParserConfig(enhancement=EnhancementConfig(enabled=True))
        doc = asyncio.run(
            parse_async(b"abc\x00", filename="x.txt", config=config, generator=generator)
        )
        assert not doc.ok
        assert generator.prompts == []


class TestParseBatch:
    """Test batch parsing."""

    def test_yields_in_order(self, tmp_path, scenario_a_bytes):
        """Results are yielded per file, failures included."""
        good = tmp_path / "good.txt"
        good.write_bytes(scenario_a_bytes)
        bad = tmp_path / "bad.txt"
        bad.write_bytes(b"\x00\x00")
        missing = tmp_path / "missing.txt"

        results = list(parse_batch([good, bad, missing], no_validation()))

        assert [name for name, _ in results] == ["good.txt", "bad.txt", "missing.txt"]
        assert all(isinstance(doc, ParsedDocument) for _, doc in results)
        assert results[0][1].title == "My Paper Title"
        assert not results[1][1].ok
        assert "Could not read file" in results[2][1].error
