"""Optional generative-text enhancement of extracted documents.

Disabled by default; enable with ParserConfig(enhancement=EnhancementConfig(enabled=True))
and call scholarparse.parse_async().
"""

from scholarparse.enhancement.client import OpenAICompatibleClient, TextGenerator
from scholarparse.enhancement.gateway import (
    DECODE_STRATEGIES,
    EnhancementGateway,
    EnhancementResult,
    build_prompt,
    decode_reply,
)

__all__ = [
    "EnhancementGateway",
    "EnhancementResult",
    "OpenAICompatibleClient",
    "TextGenerator",
    "DECODE_STRATEGIES",
    "build_prompt",
    "decode_reply",
]
