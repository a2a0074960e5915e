"""Tests for reference segmentation and citation-style checks."""

import pytest

from scholarparse.extractors.references import (
    APA,
    IEEE,
    STYLES,
    VANCOUVER,
    ReferenceCollector,
    ReferenceItemizer,
    is_entry_start,
)


class TestIsEntryStart:
    """Test entry-start markers."""

    @pytest.mark.parametrize("line", ["[1] A.", "[23] B.", "4. C.", "Smith, J."])
    def test_markers(self, line):
        """Numbering and Surname-comma always start an entry."""
        assert is_entry_start(line, entry_started=False)

    def test_uppercase_after_first_entry(self):
        """Uppercase initials start entries once one exists."""
        assert not is_entry_start("Proceedings of X", entry_started=False)
        assert is_entry_start("Proceedings of X", entry_started=True)

    def test_lowercase_never(self):
        """Lowercase lines continue the entry."""
        assert not is_entry_start("vol. 3, pp. 1-9.", entry_started=True)


class TestReferenceCollector:
    """Test entry accumulation."""

    def test_start_flushes_previous(self):
        """Starting an entry pushes the buffered one."""
        collector = ReferenceCollector()
        collector.start("[1] First")
        collector.extend("continued")
        collector.start("[2] Second")
        assert collector.finish() == ["[1] First continued", "[2] Second"]

    def test_started(self):
        """started reflects buffered and finished entries."""
        collector = ReferenceCollector()
        assert not collector.started
        collector.extend("orphan")
        assert collector.started

    def test_empty_entries_dropped(self):
        """Whitespace-only buffers never become entries."""
        collector = ReferenceCollector()
        collector.extend("   ")
        collector.flush()
        assert collector.finish() == []


class TestReferenceStyles:
    """Test built-in styles."""

    def test_registry(self):
        """Styles are looked up by name."""
        assert STYLES["IEEE"] is IEEE
        assert STYLES["APA"] is APA
        assert STYLES["Vancouver"] is VANCOUVER

    def test_ieee(self):
        """IEEE entries start with a bracketed number."""
        assert IEEE.matches('[1] A. Smith, "Title," Journal, 2023.')
        assert not IEEE.matches("Smith, A. (2023). Title.")

    def test_apa(self):
        """APA entries lead with Surname, initials and a year."""
        assert APA.matches("Smith, J. A., & Doe, M. (2023). Title. Journal, 12(3), 45-67.")
        assert not APA.matches('[1] A. Smith, "Title," 2023.')

    def test_vancouver(self):
        """Vancouver entries are numbered with a dot."""
        assert VANCOUVER.matches("1. Smith JA. Title. J Ex. 2023;12:45-67.")
        assert not VANCOUVER.matches("[1] Smith JA.")


class TestReferenceItemizer:
    """Test itemization and style checks."""

    def test_itemize_wrapped_lines(self):
        """Loose lines are segmented into entries."""
        lines = [
            '[1] A. Smith, "A long',
            'title," Journal, 2023.',
            "",
            '[2] B. Jones, "Other," 2022.',
        ]
        assert ReferenceItemizer().itemize(lines) == [
            '[1] A. Smith, "A long title," Journal, 2023.',
            '[2] B. Jones, "Other," 2022.',
        ]

    def test_check_conforming(self):
        """Conforming lists produce no warning."""
        assert ReferenceItemizer("IEEE").check(["[1] A.", "[2] B."]) is None

    def test_check_aggregates(self):
        """All non-conforming entries share one warning."""
        itemizer = ReferenceItemizer("IEEE")
        warning = itemizer.check(["[1] A. Good.", "Smith, J. Bad.", "Doe, J. Bad."])

        assert warning is not None
        assert warning.startswith("2 of 3 references")
        assert "IEEE" in warning
        assert IEEE.examples[0] in warning

    def test_nonconforming(self):
        """nonconforming() lists the offending entries."""
        itemizer = ReferenceItemizer(VANCOUVER)
        assert itemizer.nonconforming(["1. Ok.", "[2] No."]) == ["[2] No."]

    def test_unknown_style_name(self):
        """Unknown style names raise KeyError."""
        with pytest.raises(KeyError):
            ReferenceItemizer("Chicago")
