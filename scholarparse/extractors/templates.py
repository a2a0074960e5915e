"""Submission templates for manuscript validation.

A template declares, per section, whether it is required and what word or
item counts are acceptable. Templates only drive warnings; they never
block extraction.

Standard templates are provided in code; journals with their own rules can
describe them in YAML and load them with load_template().
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from scholarparse.exceptions import ConfigurationError
from scholarparse.extractors.references import STYLES
from scholarparse.models import DeclarationKind, SectionKind

# Fields a rule may target: front matter, every section kind, and declarations
FRONT_MATTER_FIELDS = ("title", "abstract", "keywords")
SECTION_FIELDS = tuple(kind.value for kind in SectionKind)
DECLARATION_FIELDS = tuple(kind.value for kind in DeclarationKind)


@dataclass(frozen=True)
class Limits:
    """Inclusive numeric bounds; None means unbounded."""

    min: int | None = None
    max: int | None = None

    def __post_init__(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ConfigurationError(f"min must not exceed max, got {self.min} > {self.max}")


@dataclass(frozen=True)
class SectionRule:
    """Constraints for one section of a manuscript.

    Attributes:
        field: DocumentSections attribute the rule applies to.
        label: Human-readable name used in warnings.
        required: Whether absence is reported.
        word_limits: Word-count bounds for text sections.
        count_limits: Item-count bounds for list sections (keywords, references).
        subsections: Rules for declaration subsections.
    """

    field: str
    label: str
    required: bool = False
    word_limits: Limits | None = None
    count_limits: Limits | None = None
    subsections: tuple[SectionRule, ...] = ()


@dataclass(frozen=True)
class DocumentTemplate:
    """A named set of section rules plus the expected citation style."""

    name: str
    description: str
    rules: tuple[SectionRule, ...] = ()
    reference_style: str = "IEEE"

    def __post_init__(self):
        if self.reference_style not in STYLES:
            raise ConfigurationError(
                f"Template {self.name!r}: reference_style must be one of {tuple(STYLES)}, "
                f"got {self.reference_style!r}"
            )

    def rule_for(self, field: str) -> SectionRule | None:
        for rule in self.rules:
            if rule.field == field:
                return rule
        return None


# Standard journal template: full-length research article

DEFAULT_TEMPLATE = DocumentTemplate(
    name="research_article",
    description="Full research article with declarations and IEEE references",
    rules=(
        SectionRule("title", "Title", required=True),
        SectionRule("abstract", "Abstract", required=True, word_limits=Limits(150, 350)),
        SectionRule("keywords", "Keywords", required=True, count_limits=Limits(4, 8)),
        SectionRule("introduction", "Introduction", required=True, word_limits=Limits(400, 750)),
        SectionRule(
            "literature_review",
            "Literature Review/Background",
            word_limits=Limits(500, 1500),
        ),
        SectionRule("methods", "Methods", required=True, word_limits=Limits(700, 2000)),
        SectionRule("results", "Results", required=True, word_limits=Limits(500, 1500)),
        SectionRule("discussion", "Discussion", required=True, word_limits=Limits(1000, 2500)),
        SectionRule("conclusion", "Conclusion", word_limits=Limits(100, 400)),
        SectionRule("acknowledgments", "Acknowledgments", word_limits=Limits(50, 200)),
        SectionRule(
            "declarations",
            "Declarations",
            required=True,
            word_limits=Limits(50, 200),
            subsections=(
                SectionRule("ethics", "Ethics", required=True),
                SectionRule("conflict_of_interest", "Conflict of Interest", required=True),
                SectionRule("funding", "Funding", required=True),
            ),
        ),
        SectionRule("references", "References", required=True, count_limits=Limits(30, 50)),
        SectionRule("appendices", "Appendices", word_limits=Limits(100, 2500)),
        SectionRule("supplementary", "Supplementary Material", word_limits=Limits(100, 2500)),
    ),
    reference_style="IEEE",
)

MINIMAL_TEMPLATE = DocumentTemplate(
    name="minimal",
    description="Presence checks for the core IMRaD sections only",
    rules=(
        SectionRule("title", "Title", required=True),
        SectionRule("abstract", "Abstract", required=True),
        SectionRule("introduction", "Introduction", required=True),
        SectionRule("methods", "Methods", required=True),
        SectionRule("results", "Results", required=True),
        SectionRule("discussion", "Discussion", required=True),
        SectionRule("references", "References", required=True),
    ),
    reference_style="IEEE",
)

# Template lookup dictionary
TEMPLATES: dict[str, DocumentTemplate] = {
    "research_article": DEFAULT_TEMPLATE,
    "minimal": MINIMAL_TEMPLATE,
}


def get_template(name: str) -> DocumentTemplate:
    """Get a standard template by name.

    Raises:
        ConfigurationError: If no template has that name.
    """
    try:
        return TEMPLATES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown template {name!r}. Available: {', '.join(TEMPLATES)}"
        ) from None


def load_template(path: str | Path) -> DocumentTemplate:
    """Load a template from a YAML file.

    Expected layout::

        name: my_journal
        description: Short communications
        reference_style: APA
        sections:
          abstract: {label: Abstract, required: true, words: {min: 100, max: 250}}
          keywords: {required: true, items: {min: 3}}
          declarations:
            required: true
            subsections:
              funding: {label: Funding, required: true}

    Raises:
        ConfigurationError: If the file is not valid YAML or not a template.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Template root must be a mapping: {path}")
    return template_from_dict(data, default_name=path.stem)


def template_from_dict(data: dict[str, Any], default_name: str = "custom") -> DocumentTemplate:
    """Build a DocumentTemplate from plain data (e.g. parsed YAML)."""
    sections = data.get("sections") or {}
    if not isinstance(sections, dict):
        raise ConfigurationError("'sections' must be a mapping of field name to rule")

    rules = tuple(
        _rule_from_dict(name, entry, FRONT_MATTER_FIELDS + SECTION_FIELDS)
        for name, entry in sections.items()
    )
    return DocumentTemplate(
        name=str(data.get("name", default_name)),
        description=str(data.get("description", "")),
        rules=rules,
        reference_style=str(data.get("reference_style", "IEEE")),
    )


def _rule_from_dict(name: str, entry: Any, allowed: tuple[str, ...]) -> SectionRule:
    if name not in allowed:
        raise ConfigurationError(f"Unknown section {name!r}; expected one of {', '.join(allowed)}")
    entry = entry or {}
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Rule for {name!r} must be a mapping")

    subsections = entry.get("subsections") or {}
    if subsections and name != "declarations":
        raise ConfigurationError(f"Only 'declarations' may have subsections, not {name!r}")

    return SectionRule(
        field=name,
        label=str(entry.get("label", name.replace("_", " ").title())),
        required=bool(entry.get("required", False)),
        word_limits=_limits(entry.get("words")),
        count_limits=_limits(entry.get("items")),
        subsections=tuple(
            _rule_from_dict(sub, sub_entry, DECLARATION_FIELDS)
            for sub, sub_entry in subsections.items()
        ),
    )


def _limits(entry: Any) -> Limits | None:
    if entry is None:
        return None
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Limits must be a mapping with min/max, got {entry!r}")
    return Limits(min=entry.get("min"), max=entry.get("max"))
