"""Template service: storage of parsed report templates."""

from datetime import UTC, datetime

from research_assistant.api.exceptions import TemplateNotFoundError
from research_assistant.db.mongo import get_database, parse_object_id
from research_assistant.models import CreateTemplateRequest, Template

COLLECTION_NAME = "templates"


def _to_template(doc: dict) -> Template:
    """Convert MongoDB document to Template model."""
    return Template(
        id=str(doc["_id"]),
        name=doc["name"],
        sections=doc.get("sections", []),
        createdAt=doc["createdAt"],
    )


async def create_template(request: CreateTemplateRequest) -> Template:
    """Store a template's detected sections."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    doc = {
        "name": request.name,
        "sections": [section.model_dump() for section in request.sections],
        "createdAt": datetime.now(UTC),
    }

    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    return _to_template(doc)


async def find_template(template_id: str) -> Template | None:
    """Get a template by ID, or None if it does not exist."""
    object_id = parse_object_id(template_id)
    if object_id is None:
        return None

    db = await get_database()
    doc = await db[COLLECTION_NAME].find_one({"_id": object_id})
    return _to_template(doc) if doc else None


async def get_template(template_id: str) -> Template:
    """Get a template by ID."""
    template = await find_template(template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template
