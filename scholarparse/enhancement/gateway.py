"""
Enhancement gateway.

Last, optional pipeline stage: sends title, abstract, keywords and the start
of the body to a text generator and applies the structured reply. The
remote side is untrusted; on timeout, transport error, oversize or
undecodable reply, or missing required fields the gateway is a no-op and
hands back the original sections untouched.

Replies are decoded by an ordered list of strategies, first success wins:
1. the whole reply as JSON
2. the body of a fenced code block
3. the first brace-delimited substring
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from scholarparse.config import EnhancementConfig
from scholarparse.enhancement.client import OpenAICompatibleClient, TextGenerator
from scholarparse.exceptions import EnhancementError
from scholarparse.models import DocumentSections

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
Your task is to enhance the structure and quality of the following document sections.
Please analyze and improve the document while maintaining its original meaning and key information.

DOCUMENT:
Title: {title}

Abstract: {abstract}

Keywords: {keywords}

Content:
{content}

Please provide an enhanced version of this document with the following improvements:
1. Format the title to be clear, concise, and academically appropriate
2. Structure the abstract to follow academic standards (problem, methods, results, conclusion)
3. Identify and suggest the most relevant keywords (max 10)
4. Organize the content into logical sections with appropriate headings
5. Correct any grammatical or spelling errors
6. Enhance clarity and readability while preserving the original meaning

Return your response as a JSON object with the following structure:
{{
  "title": "Enhanced title",
  "abstract": "Enhanced abstract",
  "keywords": ["keyword1", "keyword2", "..."],
  "content": "Enhanced content with proper sections and formatting"
}}
"""

FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n([\s\S]*?)\n```")
BRACED = re.compile(r"\{[\s\S]*\}")

NOT_ENOUGH_CONTENT = "Not enough content to enhance with AI"


def build_prompt(sections: DocumentSections, content: str, max_content_chars: int = 4000) -> str:
    """Prompt with the front matter and the first ``max_content_chars`` of content."""
    return PROMPT_TEMPLATE.format(
        title=sections.title or "No title provided",
        abstract=sections.abstract or "No abstract provided",
        keywords=", ".join(sections.keywords) or "No keywords provided",
        content=content[:max_content_chars] or "No content provided",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Reply decoding
# ═══════════════════════════════════════════════════════════════════════════════


def _loads_mapping(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        # Deeply nested replies exhaust the decoder's recursion limit
        return None
    return value if isinstance(value, dict) else None


def decode_direct(reply: str) -> dict[str, Any] | None:
    return _loads_mapping(reply.strip())


def decode_fenced(reply: str) -> dict[str, Any] | None:
    match = FENCED_BLOCK.search(reply)
    return _loads_mapping(match.group(1)) if match else None


def decode_first_object(reply: str) -> dict[str, Any] | None:
    match = BRACED.search(reply)
    return _loads_mapping(match.group(0)) if match else None


DecodeStrategy = Callable[[str], dict[str, Any] | None]

DECODE_STRATEGIES: tuple[tuple[str, DecodeStrategy], ...] = (
    ("direct", decode_direct),
    ("fenced", decode_fenced),
    ("first_object", decode_first_object),
)


def decode_reply(reply: str) -> dict[str, Any]:
    """Decode a reply with the first strategy that yields a JSON object.

    Raises:
        EnhancementError: If no strategy succeeds.
    """
    for name, strategy in DECODE_STRATEGIES:
        data = strategy(reply)
        if data is not None:
            logger.debug("Enhancement reply decoded with %s strategy", name)
            return data
    raise EnhancementError("No valid JSON found in enhancement reply")


def _nonempty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Gateway
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class EnhancementResult:
    """Outcome of one enhancement attempt.

    When ``applied`` is False, ``sections`` and ``content`` are the inputs,
    unchanged, and ``warning`` says why.
    """

    sections: DocumentSections
    content: str
    applied: bool = False
    warning: str | None = None


class EnhancementGateway:
    """Fallible, at-most-once enhancement of extracted sections.

    Usage:
        gateway = EnhancementGateway.from_config(EnhancementConfig(enabled=True))
        result = await gateway.run(sections, content)
        if result.applied:
            sections = result.sections
    """

    def __init__(self, generator: TextGenerator, config: EnhancementConfig | None = None):
        self.generator = generator
        self.config = config or EnhancementConfig()

    @classmethod
    def from_config(cls, config: EnhancementConfig) -> EnhancementGateway:
        """Gateway backed by an OpenAI-compatible HTTP client."""
        return cls(OpenAICompatibleClient(config), config)

    async def enhance(self, sections: DocumentSections, content: str = "") -> DocumentSections:
        """Enhanced sections, or the original sections on any failure."""
        return (await self.run(sections, content)).sections

    async def run(self, sections: DocumentSections, content: str = "") -> EnhancementResult:
        """Attempt enhancement once; never raises."""
        if not (sections.title or sections.abstract or content.strip()):
            return self._unchanged(sections, content, NOT_ENOUGH_CONTENT)

        prompt = build_prompt(sections, content, self.config.max_content_chars)
        try:
            reply = await asyncio.wait_for(
                self.generator.generate(prompt), timeout=self.config.timeout
            )
        except asyncio.TimeoutError:
            return self._unchanged(
                sections, content, f"AI enhancement timed out after {self.config.timeout:g}s"
            )
        except Exception as e:
            return self._unchanged(sections, content, f"AI enhancement failed: {e}")

        try:
            data = self._validate(reply)
        except EnhancementError as e:
            return self._unchanged(sections, content, f"AI enhancement failed: {e}")

        enhanced = sections.copy()
        enhanced.title = data["title"]
        enhanced.abstract = data["abstract"]
        keywords = data.get("keywords")
        if isinstance(keywords, list) and all(isinstance(k, str) for k in keywords):
            enhanced.keywords = [k.strip() for k in keywords if k.strip()]
        new_content = _nonempty_str(data.get("content")) or content

        logger.info("Document enhanced successfully with AI")
        return EnhancementResult(enhanced, new_content, applied=True)

    def _validate(self, reply: str) -> dict[str, Any]:
        if len(reply) > self.config.max_response_chars:
            raise EnhancementError(
                f"reply of {len(reply)} characters exceeds the limit of "
                f"{self.config.max_response_chars}"
            )

        data = decode_reply(reply)
        title = _nonempty_str(data.get("title"))
        abstract = _nonempty_str(data.get("abstract"))
        if title is None or abstract is None:
            raise EnhancementError("reply is missing a title or abstract")
        return {**data, "title": title, "abstract": abstract}

    def _unchanged(self, sections: DocumentSections, content: str, reason: str) -> EnhancementResult:
        logger.warning("%s; keeping the original document", reason)
        return EnhancementResult(sections, content, applied=False, warning=reason)
