"""Aggregation of source document bibliographies into a draft reference list."""

import re

from research_assistant.models import DraftReference, Reference, SourceDocument


def format_reference(ref: Reference) -> str:
    """Format a reference as 'Authors (Year). Title. Journal.'"""
    authors = ", ".join(ref.authors) if ref.authors else "Unknown"
    year = ref.year if ref.year not in (None, "") else "n.d."
    title = ref.title or "Untitled"
    journal = f". {ref.journal}" if ref.journal else ""
    return f"{authors} ({year}). {title}{journal}."


def _dedupe_key(ref: Reference) -> tuple[str, ...] | None:
    if ref.doi and ref.doi.strip():
        return ("doi", ref.doi.strip().lower())
    if ref.title and ref.title.strip():
        title = re.sub(r"[^\w]+", " ", ref.title).strip().lower()
        return ("title", title, str(ref.year or ""))
    # Nothing to compare on; keep every such entry
    return None


def collect_references(documents: list[SourceDocument]) -> list[DraftReference]:
    """Flatten the references of all documents, in document order.

    Entries are numbered from 1 (id "ref_<n>"). A reference already seen
    in an earlier document (same DOI, or same title and year when there
    is no DOI) is skipped.
    """
    collected: list[DraftReference] = []
    seen: set[tuple[str, ...]] = set()

    for document in documents:
        for ref in document.references:
            key = _dedupe_key(ref)
            if key is not None:
                if key in seen:
                    continue
                seen.add(key)

            index = len(collected) + 1
            collected.append(
                DraftReference(
                    id=f"ref_{index}",
                    index=index,
                    sourceDocumentId=document.id,
                    sourceRefId=ref.id,
                    authors=ref.authors,
                    title=ref.title,
                    year=ref.year,
                    journal=ref.journal,
                    doi=ref.doi,
                    formatted=ref.rawText or format_reference(ref),
                )
            )

    return collected
