"""Extraction of structured fields from raw model replies.

Three independent regex passes:
- review topic: first `[TÓPICO_REVISÃO: ...]` marker is kept, every marker
  is removed from the visible text
- citations: every `(Fonte: ...)` in order, left inline
- reasoning: the text after the reasoning heading up to a blank line, left
  inline

A missing pattern is never an error; it yields an empty value.
"""
import re

from eduassist.domain.chat import PostprocessResult
from eduassist.services.prompt_composer import REASONING_HEADING

TOPIC_PATTERN = re.compile(r"\[TÓPICO_REVISÃO:\s*(.+?)\]")
CITATION_PATTERN = re.compile(r"\(Fonte: ([^)]+)\)")
REASONING_PATTERN = re.compile(re.escape(REASONING_HEADING) + r"([\s\S]*?)(?=\n\s*\n|\Z)")


def extract_topic(raw: str) -> tuple[str, str]:
    """Return (text without any topic marker, first topic or "").

    Only the first marker's name is returned even though all markers are
    stripped; replies are asked to carry at most one.
    """
    match = TOPIC_PATTERN.search(raw)
    if not match:
        return raw, ""
    text = TOPIC_PATTERN.sub("", raw).strip()
    return text, match.group(1).strip()


def extract_citations(text: str) -> list[str]:
    return CITATION_PATTERN.findall(text)


def extract_reasoning(text: str) -> str:
    match = REASONING_PATTERN.search(text)
    return match.group(1).strip() if match else ""


def postprocess(raw: str, citation_mode: bool = False, transparency_mode: bool = False) -> PostprocessResult:
    """Split a raw reply into visible text and side-channel fields.

    Example:
        >>> result = postprocess("A célula é a unidade básica da vida. [TÓPICO_REVISÃO: Célula]")
        >>> result.text, result.extracted_topic
        ('A célula é a unidade básica da vida.', 'Célula')
    """
    text, topic = extract_topic(raw)
    return PostprocessResult(
        text=text,
        citations=extract_citations(text) if citation_mode else [],
        reasoning=extract_reasoning(text) if transparency_mode else "",
        extracted_topic=topic,
    )
