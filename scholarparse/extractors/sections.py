"""
Cascading section extractor.

Two strategies, chosen before anything is committed:
1. Primary: SectionStateMachine (heading recognition)
2. Fallback: LooseSectionLocator (keyword search), used only when the
   primary pass never entered Introduction, Methods, Results or Discussion

Abstract and reference-style findings are reported as warnings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scholarparse.extractors.fallback import LooseSectionLocator
from scholarparse.extractors.references import ReferenceItemizer
from scholarparse.extractors.state_machine import SectionStateMachine
from scholarparse.models import DocumentSections

if TYPE_CHECKING:
    from scholarparse.config import ParserConfig

logger = logging.getLogger(__name__)

IMPLICIT_ABSTRACT_WARNING = (
    "No explicit 'Abstract' section found. Using the first paragraph as abstract."
)
MISSING_ABSTRACT_WARNING = "Could not identify an abstract section."
FALLBACK_WARNING = (
    "No standard section headings were recognized; sections were located by "
    "keyword search and may be inaccurate."
)


@dataclass
class SectionResult:
    """Result of section extraction."""

    sections: DocumentSections
    warnings: list[str] = field(default_factory=list)
    strategy: str = "state_machine"  # Which strategy produced the sections
    processing_log: list[str] = field(default_factory=list)


class SectionExtractor:
    """Orchestrates section extraction with a fallback strategy.

    Usage:
        extractor = SectionExtractor()
        result = extractor.extract(lines)
        print(result.sections.introduction)
        for warning in result.warnings:
            print(warning)
    """

    def __init__(
        self,
        *,
        machine: SectionStateMachine | None = None,
        locator: LooseSectionLocator | None = None,
        itemizer: ReferenceItemizer | None = None,
    ):
        """Initialize the extractor.

        Args:
            machine: Primary state machine (default creates one).
            locator: Fallback locator (default creates one).
            itemizer: Reference itemizer used for the style check (default IEEE).
        """
        self.itemizer = itemizer or ReferenceItemizer()
        self.machine = machine or SectionStateMachine()
        self.locator = locator or LooseSectionLocator(itemizer=self.itemizer)

    @classmethod
    def from_config(cls, config: ParserConfig) -> SectionExtractor:
        """Create an extractor configured from ParserConfig."""
        itemizer = ReferenceItemizer(config.citation_style)
        return cls(
            machine=SectionStateMachine.from_config(config),
            locator=LooseSectionLocator(itemizer=itemizer),
            itemizer=itemizer,
        )

    def extract(self, lines: Sequence[str]) -> SectionResult:
        """Extract sections from document lines.

        Args:
            lines: Raw document lines in reading order.

        Returns:
            SectionResult with sections, warnings and the strategy used.
        """
        log = []
        warnings = []

        # Step 1: Primary pass, not yet committed
        draft = self.machine.run(lines)
        log.append(f"State machine entered {len(draft.entered)} section(s)")

        # Step 2: Choose the strategy
        sections = draft.sections
        if draft.found_standard_section:
            strategy = "state_machine"
        else:
            strategy = "fallback"
            log.append("No standard section entered, falling back to keyword search")
            filled = self.locator.locate(lines, sections, draft.title_index)
            log.append(f"Keyword search filled {len(filled)} section(s)")
            warnings.append(FALLBACK_WARNING)

        # Step 3: Abstract findings
        if not sections.abstract:
            warnings.append(MISSING_ABSTRACT_WARNING)
        elif not draft.abstract_explicit:
            warnings.append(IMPLICIT_ABSTRACT_WARNING)

        # Step 4: Reference style
        if sections.references:
            log.append(f"Itemized {len(sections.references)} reference(s)")
            style_warning = self.itemizer.check(sections.references)
            if style_warning:
                warnings.append(style_warning)

        logger.debug("Section extraction used %s strategy", strategy)
        return SectionResult(
            sections=sections,
            warnings=warnings,
            strategy=strategy,
            processing_log=log,
        )
