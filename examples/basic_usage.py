#!/usr/bin/env python3
"""
Basic ScholarParse Usage Example

This example demonstrates the core workflow:
1. Parse a manuscript into a ParsedDocument
2. Inspect sections, references and warnings
3. Validate against a journal template
4. Run the optional AI enhancement pass
5. Parse a folder of submissions
"""

import asyncio
import json
import logging
from pathlib import Path

from scholarparse import (
    EnhancementConfig,
    ParserConfig,
    get_template,
    load_template,
    parse,
    parse_async,
    parse_batch,
)


def main():
    # ─────────────────────────────────────────────────────────────────────────
    # 1. Basic Parsing
    # ─────────────────────────────────────────────────────────────────────────

    # Parse a PDF, DOCX, Pages or text file with default settings
    doc = parse(Path("path/to/manuscript.pdf"))

    if not doc.ok:
        print(f"Could not parse: {doc.error}")
        return

    print(f"Parsed: {doc.title}")
    print(f"  Format: {doc.format}")
    print(f"  Keywords: {', '.join(doc.keywords)}")
    print(f"  References: {len(doc.references)}")
    print(f"  Text length: {len(doc.content):,} characters")

    # ─────────────────────────────────────────────────────────────────────────
    # 2. Sections and Warnings
    # ─────────────────────────────────────────────────────────────────────────

    # Section fields are available directly on the document
    print(f"  Abstract: {doc.abstract[:100]}...")
    print(f"  Methods: {len(doc.methods.split())} words")

    # Declarations are split into their own subsections
    if doc.declarations.funding:
        print(f"  Funding: {doc.declarations.funding[:60]}...")

    # Warnings never stop parsing; they describe what to fix
    for warning in doc.warnings:
        print(f"  ! {warning}")

    # Serialize for an API response
    print(json.dumps(doc.to_dict(), indent=2)[:500])

    # ─────────────────────────────────────────────────────────────────────────
    # 3. Template Validation
    # ─────────────────────────────────────────────────────────────────────────

    # Presence checks only
    config = ParserConfig(template=get_template("minimal"))
    doc = parse(Path("path/to/manuscript.docx"), config=config)

    # A journal's own rules, loaded from YAML
    config = ParserConfig(
        template=load_template("templates/short_communication.yaml"),
        on_extraction_error="raise",  # Raise typed errors instead of returning them
    )
    doc = parse(Path("path/to/manuscript.docx"), config=config)

    # Raw bytes work too; the filename is a format hint
    data = Path("path/to/upload.bin").read_bytes()
    doc = parse(data, filename="Submission.pages")


def enhancement_example():
    """Rewrite front matter with an OpenAI-compatible endpoint."""
    config = ParserConfig(
        enhancement=EnhancementConfig(
            enabled=True,
            base_url="http://localhost:8000/v1",
            model="qwen2.5-7b-instruct",
            timeout=30.0,
            warn_on_failure=True,  # Report enhancement failures as warnings
        )
    )

    # Enhancement never fails the parse: on any error the document is unchanged
    doc = asyncio.run(parse_async(Path("path/to/manuscript.pdf"), config=config))
    print(f"Title: {doc.title}")


def batch_example():
    """Parse a folder of submissions."""
    logging.basicConfig(level=logging.INFO)

    for name, doc in parse_batch(sorted(Path("submissions/").glob("*.*"))):
        if doc.ok:
            print(f"{name}: {len(doc.warnings)} warning(s)")
        else:
            print(f"{name}: FAILED ({doc.error})")


if __name__ == "__main__":
    # Note: These examples use placeholder paths.
    # Replace with actual manuscript paths to run.
    print("ScholarParse Usage Examples")
    print("=" * 50)
    print("\nSee the code for detailed examples of:")
    print("  - Basic parsing")
    print("  - Sections and warnings")
    print("  - Template validation")
    print("  - AI enhancement")
    print("  - Batch parsing")
