"""
Pytest configuration and fixtures for ScholarParse tests.

Documents are generated in memory: PDFs with PyMuPDF, DOCX with
python-docx, Pages archives with zipfile.
"""

import asyncio
import zipfile
from io import BytesIO

import fitz  # PyMuPDF
import pytest
from docx import Document as DocxDocument

SCENARIO_A = (
    "My Paper Title\n"
    "\n"
    "Abstract\n"
    "This is the abstract text spanning one line.\n"
    "\n"
    "Introduction\n"
    "Some intro text.\n"
    "\n"
    "References\n"
    '[1] A. Smith, "Title," Journal, 2023.'
)

FILLER = (
    "manuscript evidence sample analysis cohort measure outcome signal model "
    "approach finding context prior theory effect response group design"
).split()


def words(n: int, offset: int = 0) -> str:
    """n filler words (no digits, no table vocabulary)."""
    return " ".join(FILLER[(offset + i) % len(FILLER)] for i in range(n))


def make_pdf(pages: list[list[str]], start_y: float = 72, line_gap: float = 18) -> bytes:
    """PDF with one text line per entry, one page per inner list."""
    doc = fitz.open()
    for page_lines in pages:
        page = doc.new_page()
        for i, text in enumerate(page_lines):
            page.insert_text((72, start_y + i * line_gap), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(paragraphs: list[str], table_rows: list[list[str]] | None = None) -> bytes:
    """DOCX with the given paragraphs and an optional table."""
    document = DocxDocument()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for row, values in zip(table.rows, table_rows):
            for cell, value in zip(row.cells, values):
                cell.text = value
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_zip(members: dict[str, bytes]) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in members.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def complete_manuscript(include_methods: bool = True) -> str:
    """A manuscript satisfying every DEFAULT_TEMPLATE rule."""
    parts = [
        "A Study of Structured Manuscripts",
        "",
        "Abstract",
        words(200),
        "",
        "Keywords: structure; parsing; manuscripts; templates; validation",
        "",
        "1. Introduction",
        words(500, 1),
        "",
    ]
    if include_methods:
        parts += ["2. Methods", words(800, 2), ""]
    parts += [
        "3. Results",
        words(600, 3),
        "",
        "4. Discussion",
        words(1200, 4),
        "",
        "Declarations",
        "Ethics: " + words(25, 5),
        "Competing Interests: " + words(25, 6),
        "Funding: " + words(25, 7),
        "",
        "References",
    ]
    parts += [f'[{n}] A. Author, "Study of things," Proceedings, 2023.' for n in range(1, 36)]
    return "\n".join(parts)


class FakeGenerator:
    """TextGenerator returning a canned reply (or raising / stalling)."""

    def __init__(self, reply: str = "", error: Exception | None = None, delay: float = 0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def scenario_a_bytes() -> bytes:
    """Scenario A manuscript as UTF-8 bytes."""
    return SCENARIO_A.encode("utf-8")


@pytest.fixture
def scenario_a_lines() -> list[str]:
    """Scenario A manuscript split into lines."""
    return SCENARIO_A.split("\n")


@pytest.fixture
def manuscript() -> str:
    """A complete manuscript that passes the default template."""
    return complete_manuscript()


@pytest.fixture
def manuscript_factory():
    """Return complete_manuscript for building template-complete manuscripts."""
    return complete_manuscript


@pytest.fixture
def filler():
    """Return words() for generating n filler words."""
    return words


@pytest.fixture
def pdf_factory():
    """Return make_pdf for building PDFs in tests."""
    return make_pdf


@pytest.fixture
def docx_factory():
    """Return make_docx for building DOCX files in tests."""
    return make_docx


@pytest.fixture
def zip_factory():
    """Return make_zip for building ZIP archives in tests."""
    return make_zip


@pytest.fixture
def fake_generator():
    """Return the FakeGenerator class."""
    return FakeGenerator
