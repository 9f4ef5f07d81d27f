"""Prompt templates for section generation.

Contains prompts for:
1. Section rewrite - one source document into one template section
2. Multi-document synthesis - several documents into one section
3. Comparative analysis - contrasting several documents in one section

All builders are pure: the same inputs always give the same prompt, and
missing optional inputs are omitted rather than rendered empty.
"""

from __future__ import annotations

from typing import Optional

from research_assistant.models import DocumentContent, DocumentMetadata, ProjectPurpose, TruncationResult


# ==============================================================================
# Guidance
# ==============================================================================

PURPOSE_GUIDANCE: dict[ProjectPurpose, str] = {
    ProjectPurpose.FULL_REPORT: (
        "This section is part of a complete research report. Preserve the "
        "technical depth, methodology details and quantitative results of the source."
    ),
    ProjectPurpose.SUMMARY: (
        "This section is part of a concise summary. Keep only the main findings "
        "and the minimum context a reader needs to understand them."
    ),
    ProjectPurpose.LITERATURE_REVIEW: (
        "This section is part of a literature review. Situate each work in the "
        "field, group related contributions and point out open gaps."
    ),
    ProjectPurpose.COMPARATIVE: (
        "This section is part of a comparative analysis. Make similarities and "
        "differences between the works explicit."
    ),
}

TARGET_LENGTH_GUIDANCE: dict[str, str] = {
    "short": "Keep it short: one or two paragraphs (about 150-250 words).",
    "medium": "Aim for a medium length: three to five paragraphs (about 400-700 words).",
    "long": "Write a thorough section: six or more paragraphs (about 1000 words or more).",
}

BASE_RULES = """## Rules
- Write in formal academic prose.
- Use only information present in the source material. Do not invent data, citations or results.
- Do not repeat the section title as a heading.
- Output only the section body in markdown, with no preamble or closing remarks."""


def _purpose_guidance(purpose: ProjectPurpose | str | None) -> Optional[str]:
    if purpose is None:
        return None
    try:
        return PURPOSE_GUIDANCE[ProjectPurpose(purpose)]
    except ValueError:
        return None


def _length_guidance(target_length: Optional[str]) -> Optional[str]:
    if not target_length or not target_length.strip():
        return None
    hint = target_length.strip()
    return TARGET_LENGTH_GUIDANCE.get(hint.lower(), f"Target length: {hint}.")


def _instruction_lines(
    instructions: Optional[str],
    global_instructions: Optional[str],
) -> list[str]:
    lines: list[str] = []
    if global_instructions and global_instructions.strip():
        lines.extend(["", "## Project Instructions", global_instructions.strip()])
    if instructions and instructions.strip():
        lines.extend(["", "## Section Instructions", instructions.strip()])
    return lines


def _document_block(number: int, document: DocumentContent) -> list[str]:
    lines = [f"[Document {number}] {document.title}"]
    if document.authors:
        lines.append(f"Authors: {', '.join(document.authors)}")
    lines.append(f"```\n{document.content}\n```")
    return lines


# ==============================================================================
# Section Prompts
# ==============================================================================

def build_section_rewrite_prompt(
    section_title: str,
    source_content: str,
    instructions: Optional[str] = None,
    global_instructions: Optional[str] = None,
    target_length: Optional[str] = None,
    purpose: ProjectPurpose | str | None = ProjectPurpose.FULL_REPORT,
    document_metadata: Optional[DocumentMetadata] = None,
) -> str:
    """Build the prompt rewriting one document's content into a section.

    Args:
        section_title: Title of the template section to write.
        source_content: Extracted source text (already truncated).
        instructions: Per-section instructions from the mapping.
        global_instructions: Project-wide instructions.
        target_length: "short", "medium", "long" or a free-text hint.
        purpose: Project purpose selecting the guidance paragraph.
        document_metadata: Title and authors of the source document.

    Returns:
        Formatted prompt string.
    """
    parts = [
        f'You are an expert academic writer. Rewrite the source material below into the "{section_title}" section of a research document.',
    ]

    guidance = _purpose_guidance(purpose)
    if guidance:
        parts.extend(["", "## Purpose", guidance])

    if document_metadata and (document_metadata.title or document_metadata.authors):
        parts.extend(["", "## Source Document"])
        if document_metadata.title:
            parts.append(f"Title: {document_metadata.title}")
        if document_metadata.authors:
            parts.append(f"Authors: {', '.join(document_metadata.authors)}")

    parts.extend(_instruction_lines(instructions, global_instructions))

    length = _length_guidance(target_length)
    if length:
        parts.extend(["", "## Length", length])

    parts.extend([
        "",
        BASE_RULES,
        "",
        "## Source Material",
        f"```\n{source_content}\n```",
        "",
        f"Write the {section_title} section.",
    ])

    return "\n".join(parts)


def build_multi_document_synthesis_prompt(
    section_title: str,
    documents: list[DocumentContent],
    instructions: Optional[str] = None,
    global_instructions: Optional[str] = None,
    target_length: Optional[str] = None,
    purpose: ProjectPurpose | str | None = ProjectPurpose.LITERATURE_REVIEW,
) -> str:
    """Build the prompt synthesizing several documents into one section.

    Documents are rendered as numbered [Document N] blocks in list order,
    and the model is asked to cite them by that number.
    """
    parts = [
        f'You are an expert academic writer. Synthesize the {len(documents)} source documents below into the "{section_title}" section of a research document.',
    ]

    guidance = _purpose_guidance(purpose)
    if guidance:
        parts.extend(["", "## Purpose", guidance])

    parts.extend(_instruction_lines(instructions, global_instructions))

    length = _length_guidance(target_length)
    if length:
        parts.extend(["", "## Length", length])

    parts.extend([
        "",
        BASE_RULES,
        "- Integrate the documents into one narrative instead of summarizing them one after another.",
        "- Attribute every claim with its document number, e.g. [Document 2].",
        "",
        "## Source Documents",
    ])

    for number, document in enumerate(documents, start=1):
        parts.append("")
        parts.extend(_document_block(number, document))

    parts.extend(["", f"Write the {section_title} section."])

    return "\n".join(parts)


def build_comparative_analysis_prompt(
    section_title: str,
    documents: list[DocumentContent],
    instructions: Optional[str] = None,
    global_instructions: Optional[str] = None,
) -> str:
    """Build the prompt comparing several documents in one section."""
    parts = [
        f'You are an expert academic reviewer. Compare the {len(documents)} source documents below in the "{section_title}" section of a comparative analysis.',
        "",
        "## Purpose",
        PURPOSE_GUIDANCE[ProjectPurpose.COMPARATIVE],
    ]

    parts.extend(_instruction_lines(instructions, global_instructions))

    parts.extend([
        "",
        BASE_RULES,
        "- Organize the comparison by theme (approach, data, findings, limitations), not by document.",
        "- State where the documents agree, where they disagree and what may explain the difference.",
        "- Refer to each document by its number, e.g. [Document 1].",
        "",
        "## Source Documents",
    ])

    for number, document in enumerate(documents, start=1):
        parts.append("")
        parts.extend(_document_block(number, document))

    parts.extend(["", f"Write the {section_title} section."])

    return "\n".join(parts)


def truncate_for_context(text: str, max_chars: int) -> TruncationResult:
    """Keep the first max_chars characters of text.

    Raises:
        ValueError: If max_chars is negative.
    """
    if max_chars < 0:
        raise ValueError(f"max_chars must be >= 0, got {max_chars}")

    if len(text) <= max_chars:
        return TruncationResult(text=text, truncated=False)

    return TruncationResult(text=text[:max_chars], truncated=True)
