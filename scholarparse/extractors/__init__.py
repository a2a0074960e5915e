"""
Structure extraction module.

Turns a document's lines into DocumentSections:
- Primary: line classifier + section state machine (ordered headers)
- Fallback: loose keyword search when no standard section header is found
- References: entry collection and citation-style itemization
- Tables: tabular inputs are detected and formatted instead of sectioned
- Validation: template rules (required sections, word/item limits)

Templates describe what a manuscript must contain:
- DEFAULT_TEMPLATE: Research article with word and item limits
- MINIMAL_TEMPLATE: Core sections required, no limits
"""

from scholarparse.extractors.classifier import (
    RULES,
    SECTION_LABELS,
    ClassifierContext,
    LineClassifier,
    classify,
    is_metadata,
    parse_section_label,
)
from scholarparse.extractors.fallback import FALLBACK_TARGETS, LooseSectionLocator
from scholarparse.extractors.references import (
    STYLES,
    ReferenceCollector,
    ReferenceItemizer,
    ReferenceStyle,
    is_entry_start,
)
from scholarparse.extractors.sections import SectionExtractor, SectionResult
from scholarparse.extractors.state_machine import (
    MachineState,
    SectionDraft,
    SectionStateMachine,
    split_keywords,
)
from scholarparse.extractors.tables import (
    TableDetector,
    TableFormatter,
    filename_keywords,
    sanitize_filename,
)
from scholarparse.extractors.templates import (
    DEFAULT_TEMPLATE,
    MINIMAL_TEMPLATE,
    TEMPLATES,
    DocumentTemplate,
    Limits,
    SectionRule,
    get_template,
    load_template,
)
from scholarparse.extractors.validation import (
    ItemCountValidator,
    RequiredSectionValidator,
    TemplateValidator,
    ValidationIssue,
    ValidationRule,
    WordCountValidator,
)

__all__ = [
    # Main extractor
    "SectionExtractor",
    "SectionResult",
    # Classification
    "ClassifierContext",
    "LineClassifier",
    "classify",
    "parse_section_label",
    "is_metadata",
    "RULES",
    "SECTION_LABELS",
    # State machine
    "SectionStateMachine",
    "SectionDraft",
    "MachineState",
    "split_keywords",
    # Fallback
    "LooseSectionLocator",
    "FALLBACK_TARGETS",
    # References
    "ReferenceCollector",
    "ReferenceItemizer",
    "ReferenceStyle",
    "STYLES",
    "is_entry_start",
    # Tables
    "TableDetector",
    "TableFormatter",
    "sanitize_filename",
    "filename_keywords",
    # Templates
    "DocumentTemplate",
    "SectionRule",
    "Limits",
    "get_template",
    "load_template",
    "TEMPLATES",
    "DEFAULT_TEMPLATE",
    "MINIMAL_TEMPLATE",
    # Validators
    "ValidationRule",
    "RequiredSectionValidator",
    "WordCountValidator",
    "ItemCountValidator",
    "TemplateValidator",
    "ValidationIssue",
]
