"""Validation and cleanup of raw model output.

A response is either usable (cleaned content, success=True) or replaced
with a placeholder the user is asked to edit by hand. Cut-off or
under-cited responses stay usable but carry warnings.
"""

import re
from typing import Optional

from research_assistant.models import ParsedResponse

# Minimum non-whitespace characters for a response to count as content
MIN_CONTENT_CHARS = 20

PLACEHOLDER_TEMPLATE = "[Generation produced no usable content for '{title}'. Please edit manually.]"

REFUSAL_PATTERN = re.compile(
    r"^\s*(?:"
    r"i'?m sorry|i am sorry|i apologi[sz]e|"
    r"i cannot|i can'?t|i can not|i'?m unable|i am unable|"
    r"i'?m not able to|i am not able to|"
    r"as an ai(?: language model)?|as a language model"
    r")\b",
    re.IGNORECASE,
)

_FENCE_PATTERN = re.compile(r"^```[\w+-]*[ \t]*\n(.*?)\n?```$", re.DOTALL)
_HEADING_PATTERN = re.compile(r"^\s*(?:#{1,6}\s*(.+?)\s*#*|\*\*(.+?)\*\*|__(.+?)__)\s*$")
_DOCUMENT_REF_PATTERN = re.compile(r"\bDocument\s+(\d+)\b", re.IGNORECASE)
_NUMERIC_REF_PATTERN = re.compile(r"\[(\d+)\]")

# A response ending with one of these is considered complete
_TERMINAL_CHARS = frozenset('.!?"\')]}*`|>:')


def _normalize_title(text: str) -> str:
    return re.sub(r"[^\w]+", " ", text).strip().lower()


def _strip_code_fence(text: str) -> str:
    match = _FENCE_PATTERN.match(text)
    return match.group(1) if match else text


def _strip_title_heading(text: str, section_title: str) -> str:
    lines = text.split("\n")
    if not lines:
        return text
    match = _HEADING_PATTERN.match(lines[0])
    if not match:
        return text
    heading = next(group for group in match.groups() if group is not None)
    if _normalize_title(heading) != _normalize_title(section_title):
        return text
    return "\n".join(lines[1:])


def _normalize_whitespace(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _clean(text: str, section_title: str) -> str:
    # Repeat until stable so parsing cleaned output is a no-op
    previous = None
    while text != previous:
        previous = text
        text = _normalize_whitespace(text)
        text = _strip_code_fence(text)
        text = _strip_title_heading(text, section_title)
        text = _normalize_whitespace(text)
    return text


def _failure(section_title: str, warning: str) -> ParsedResponse:
    return ParsedResponse(
        success=False,
        content=PLACEHOLDER_TEMPLATE.format(title=section_title),
        warnings=[warning],
    )


def _looks_cut_off(text: str) -> bool:
    return text[-1] not in _TERMINAL_CHARS


def parse_section_content(raw_response: Optional[str], section_title: str) -> ParsedResponse:
    """Validate and clean a model response for one section.

    Args:
        raw_response: Text returned by the model (may be None or empty).
        section_title: Title of the section the response was generated for.

    Returns:
        ParsedResponse with cleaned content, or a placeholder and
        success=False when the response is empty, degenerate or a refusal.
    """
    if raw_response is None or not raw_response.strip():
        return _failure(section_title, "Model returned an empty response")

    content = _clean(raw_response, section_title)

    if REFUSAL_PATTERN.match(content):
        return _failure(section_title, "Model declined to generate this section")

    if len(re.sub(r"\s", "", content)) < MIN_CONTENT_CHARS:
        return _failure(section_title, "Model response was too short to be usable")

    warnings = []
    if _looks_cut_off(content):
        warnings.append("Response may have been cut off mid-sentence")

    return ParsedResponse(success=True, content=content, warnings=warnings)


def count_document_references(content: str) -> int:
    """Count distinct source documents cited as 'Document N' or '[N]'."""
    numbers = {int(n) for n in _DOCUMENT_REF_PATTERN.findall(content)}
    numbers.update(int(n) for n in _NUMERIC_REF_PATTERN.findall(content))
    return len(numbers)


def parse_multi_doc_response(
    raw_response: Optional[str],
    expected_doc_count: int,
    section_title: str = "this section",
) -> ParsedResponse:
    """Validate a response synthesized from several documents.

    Same contract as parse_section_content, plus a warning when fewer
    distinct documents are cited than were supplied.
    """
    parsed = parse_section_content(raw_response, section_title)
    if not parsed.success or expected_doc_count <= 1:
        return parsed

    cited = count_document_references(parsed.content)
    if cited < expected_doc_count:
        parsed.warnings.append(
            f"Response cites {cited} of {expected_doc_count} source documents"
        )
    return parsed


def format_for_storage(content: str) -> str:
    """Normalize line endings and collapse runs of blank lines."""
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    content = re.sub(r"\n{3,}", "\n\n", content)
    return content.strip()
