"""Draft service: storage of generated drafts.

A project has at most one current draft. Sections are addressed by their
template section ID, so concurrent writes for different sections of the
same draft never conflict.
"""

import logging
from datetime import UTC, datetime
from typing import Optional

from research_assistant.api.exceptions import DraftNotFoundError, DraftSectionNotFoundError
from research_assistant.db.mongo import get_database, parse_object_id
from research_assistant.models import Draft, DraftReference, DraftSection

logger = logging.getLogger(__name__)

COLLECTION_NAME = "drafts"


def _to_draft(doc: dict) -> Draft:
    """Convert MongoDB document to Draft model."""
    return Draft(
        id=str(doc["_id"]),
        projectId=doc["projectId"],
        isCurrent=doc.get("isCurrent", False),
        sections=doc.get("sections", []),
        references=doc.get("references", []),
        createdAt=doc["createdAt"],
        updatedAt=doc["updatedAt"],
    )


def _section_doc(section: DraftSection) -> dict:
    doc = section.model_dump(mode="json")
    doc["updatedAt"] = section.updatedAt
    return doc


async def create_draft(project_id: str) -> Draft:
    """Create a new current draft, demoting the project's previous one."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    await collection.update_many(
        {"projectId": project_id, "isCurrent": True},
        {"$set": {"isCurrent": False}},
    )

    now = datetime.now(UTC)
    doc = {
        "projectId": project_id,
        "isCurrent": True,
        "sections": [],
        "references": [],
        "createdAt": now,
        "updatedAt": now,
    }

    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.debug(f"Created draft {result.inserted_id} for project {project_id}")
    return _to_draft(doc)


async def get_draft(draft_id: str) -> Draft:
    """Get a draft by ID."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    object_id = parse_object_id(draft_id)
    if object_id is None:
        raise DraftNotFoundError(draft_id)

    doc = await collection.find_one({"_id": object_id})
    if doc is None:
        raise DraftNotFoundError(draft_id)

    return _to_draft(doc)


async def get_current_draft(project_id: str) -> Draft:
    """Get the current draft of a project."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    doc = await collection.find_one({"projectId": project_id, "isCurrent": True})
    if doc is None:
        raise DraftNotFoundError(project_id, f"Project '{project_id}' has no current draft")

    return _to_draft(doc)


async def upsert_draft_section(draft_id: str, section: DraftSection) -> None:
    """Replace the section with the same template section ID, or append it."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    object_id = parse_object_id(draft_id)
    if object_id is None:
        raise DraftNotFoundError(draft_id)

    section_doc = _section_doc(section)
    now = datetime.now(UTC)

    result = await collection.update_one(
        {"_id": object_id, "sections.templateSectionId": section.templateSectionId},
        {"$set": {"sections.$": section_doc, "updatedAt": now}},
    )
    if result.matched_count:
        return

    result = await collection.update_one(
        {"_id": object_id},
        {"$push": {"sections": section_doc}, "$set": {"updatedAt": now}},
    )
    if result.matched_count == 0:
        raise DraftNotFoundError(draft_id)


async def update_draft_references(
    draft_id: str,
    references: list[DraftReference],
    section_order: Optional[list[str]] = None,
) -> Draft:
    """Store the aggregated reference list on a draft.

    Args:
        draft_id: Draft to update.
        references: Aggregated references, already numbered.
        section_order: Template section IDs in mapping order. When given,
            the draft's sections are reordered to match (sections are
            appended in completion order while a run is in flight).
    """
    draft = await get_draft(draft_id)

    update: dict = {
        "references": [ref.model_dump(mode="json") for ref in references],
        "updatedAt": datetime.now(UTC),
    }

    if section_order is not None:
        position = {section_id: i for i, section_id in enumerate(section_order)}
        ordered = sorted(
            draft.sections,
            key=lambda s: position.get(s.templateSectionId, len(position)),
        )
        update["sections"] = [_section_doc(s) for s in ordered]

    db = await get_database()
    await db[COLLECTION_NAME].update_one({"_id": parse_object_id(draft_id)}, {"$set": update})

    return await get_draft(draft_id)


async def update_draft_section_content(draft_id: str, section_id: str, content: str) -> Draft:
    """Apply a manual edit to one section of a draft."""
    draft = await get_draft(draft_id)
    if not any(s.templateSectionId == section_id for s in draft.sections):
        raise DraftSectionNotFoundError(
            section_id, f"Draft '{draft_id}' has no section '{section_id}'"
        )

    db = await get_database()
    now = datetime.now(UTC)
    await db[COLLECTION_NAME].update_one(
        {"_id": parse_object_id(draft_id), "sections.templateSectionId": section_id},
        {"$set": {"sections.$.content": content, "sections.$.updatedAt": now, "updatedAt": now}},
    )

    return await get_draft(draft_id)


async def delete_drafts_for_project(project_id: str) -> int:
    """Delete every draft of a project. Returns the number deleted."""
    db = await get_database()
    result = await db[COLLECTION_NAME].delete_many({"projectId": project_id})
    return result.deleted_count
