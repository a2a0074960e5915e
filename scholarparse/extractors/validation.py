"""
Template validation for extracted manuscripts.

Validators check extracted sections against a DocumentTemplate.
Issues are reported as warnings but never block extraction (graceful
degradation): manuscript structure is too variable for hard failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from scholarparse.extractors.templates import DEFAULT_TEMPLATE, DocumentTemplate, SectionRule
from scholarparse.models import DeclarationKind, DocumentSections

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """A template violation found in extracted sections."""

    type: str  # "missing", "word_count", "item_count"
    message: str
    field: str  # Affected DocumentSections field


def count_words(text: str) -> int:
    """Whitespace-delimited token count after trimming."""
    return len(text.split())


def _value(sections: DocumentSections, field: str) -> str | list[str]:
    if field == "declarations":
        return sections.declarations.text()
    if field in {kind.value for kind in DeclarationKind}:
        return sections.declarations.get(DeclarationKind(field)) or ""
    return getattr(sections, field)


def _is_empty(value: str | list[str]) -> bool:
    if isinstance(value, list):
        return not value
    return not value.strip()


class ValidationRule(ABC):
    """Abstract base for template rules."""

    name: str = "base"

    @abstractmethod
    def check(self, sections: DocumentSections, rule: SectionRule) -> list[ValidationIssue]:
        """Check one section against its rule.

        Returns list of issues found (empty if all good).
        """
        pass


class RequiredSectionValidator(ValidationRule):
    """Required sections must be present and non-empty."""

    name = "required"

    def check(self, sections: DocumentSections, rule: SectionRule) -> list[ValidationIssue]:
        issues = []
        if rule.required and _is_empty(_value(sections, rule.field)):
            issues.append(
                ValidationIssue(
                    type="missing",
                    message=f"Required section '{rule.label}' is missing or empty.",
                    field=rule.field,
                )
            )

        # Declarations subsections are only checked once the section exists
        if rule.subsections and not sections.declarations.is_empty():
            for sub in rule.subsections:
                issues.extend(self.check(sections, sub))
        return issues


class WordCountValidator(ValidationRule):
    """Text sections must stay within word-count bounds.

    Missing sections are left to RequiredSectionValidator.
    """

    name = "word_count"

    def check(self, sections: DocumentSections, rule: SectionRule) -> list[ValidationIssue]:
        limits = rule.word_limits
        value = _value(sections, rule.field)
        if limits is None or isinstance(value, list) or _is_empty(value):
            return []

        words = count_words(value)
        if limits.min is not None and words < limits.min:
            return [
                ValidationIssue(
                    type="word_count",
                    message=f"Section '{rule.label}' has {words} words, "
                    f"which is below the minimum of {limits.min} words.",
                    field=rule.field,
                )
            ]
        if limits.max is not None and words > limits.max:
            return [
                ValidationIssue(
                    type="word_count",
                    message=f"Section '{rule.label}' has {words} words, "
                    f"which exceeds the maximum of {limits.max} words.",
                    field=rule.field,
                )
            ]
        return []


class ItemCountValidator(ValidationRule):
    """List sections (keywords, references) must stay within item-count bounds."""

    name = "item_count"

    def check(self, sections: DocumentSections, rule: SectionRule) -> list[ValidationIssue]:
        limits = rule.count_limits
        value = _value(sections, rule.field)
        if limits is None or not isinstance(value, list) or not value:
            return []

        count = len(value)
        if limits.min is not None and count < limits.min:
            return [
                ValidationIssue(
                    type="item_count",
                    message=f"Section '{rule.label}' has {count} items, "
                    f"which is below the minimum of {limits.min}.",
                    field=rule.field,
                )
            ]
        if limits.max is not None and count > limits.max:
            return [
                ValidationIssue(
                    type="item_count",
                    message=f"Section '{rule.label}' has {count} items, "
                    f"which exceeds the maximum of {limits.max}.",
                    field=rule.field,
                )
            ]
        return []


DEFAULT_RULES: tuple[ValidationRule, ...] = (
    RequiredSectionValidator(),
    WordCountValidator(),
    ItemCountValidator(),
)


class TemplateValidator:
    """Checks DocumentSections against a DocumentTemplate.

    Usage:
        validator = TemplateValidator(DEFAULT_TEMPLATE)
        warnings = validator.validate(sections)
    """

    def __init__(
        self,
        template: DocumentTemplate = DEFAULT_TEMPLATE,
        rules: tuple[ValidationRule, ...] = DEFAULT_RULES,
    ):
        self.template = template
        self.rules = rules

    def issues(self, sections: DocumentSections) -> list[ValidationIssue]:
        """All issues, in template order."""
        found: list[ValidationIssue] = []
        for section_rule in self.template.rules:
            for rule in self.rules:
                found.extend(rule.check(sections, section_rule))
        return found

    def validate(self, sections: DocumentSections) -> list[str]:
        """Warning messages, one per violated constraint."""
        issues = self.issues(sections)
        if issues:
            logger.debug(
                "Template %r: %d issue(s) (%s)",
                self.template.name,
                len(issues),
                ", ".join(sorted({issue.type for issue in issues})),
            )
        return [issue.message for issue in issues]
