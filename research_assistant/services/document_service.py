"""Document service: storage of extracted source documents."""

from datetime import UTC, datetime

from research_assistant.api.exceptions import DocumentNotFoundError
from research_assistant.db.mongo import get_database, parse_object_id
from research_assistant.models import CreateDocumentRequest, DocumentSummary, SourceDocument

COLLECTION_NAME = "documents"


def _to_document(doc: dict) -> SourceDocument:
    """Convert MongoDB document to SourceDocument model."""
    return SourceDocument(
        id=str(doc["_id"]),
        filename=doc["filename"],
        extractedContent=doc.get("extractedContent") or {},
        references=doc.get("references", []),
        parsingWarnings=doc.get("parsingWarnings", []),
        createdAt=doc["createdAt"],
    )


def _to_document_summary(doc: dict) -> DocumentSummary:
    """Convert MongoDB document to DocumentSummary model."""
    extracted = doc.get("extractedContent") or {}
    return DocumentSummary(
        id=str(doc["_id"]),
        filename=doc["filename"],
        title=(extracted.get("metadata") or {}).get("title"),
        sectionKeys=list((extracted.get("sections") or {}).keys()),
        createdAt=doc["createdAt"],
    )


async def create_document(request: CreateDocumentRequest) -> SourceDocument:
    """Store the extractor output for one PDF."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    doc = {
        **request.model_dump(mode="json"),
        "createdAt": datetime.now(UTC),
    }

    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    return _to_document(doc)


async def list_documents() -> list[DocumentSummary]:
    """List all documents, newest first."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    cursor = collection.find().sort("createdAt", -1)
    docs = await cursor.to_list(length=None)

    return [_to_document_summary(doc) for doc in docs]


async def get_document(document_id: str) -> SourceDocument:
    """Get a document by ID."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    object_id = parse_object_id(document_id)
    if object_id is None:
        raise DocumentNotFoundError(document_id)

    doc = await collection.find_one({"_id": object_id})
    if doc is None:
        raise DocumentNotFoundError(document_id)

    return _to_document(doc)


async def get_documents(document_ids: list[str]) -> list[SourceDocument]:
    """Load documents in the order of document_ids, skipping missing ones."""
    object_ids = [oid for oid in (parse_object_id(d) for d in document_ids) if oid is not None]
    if not object_ids:
        return []

    db = await get_database()
    collection = db[COLLECTION_NAME]

    docs = await collection.find({"_id": {"$in": object_ids}}).to_list(length=None)
    by_id = {str(doc["_id"]): doc for doc in docs}

    return [_to_document(by_id[d]) for d in document_ids if d in by_id]


async def delete_document(document_id: str) -> bool:
    """Delete a document by ID."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    object_id = parse_object_id(document_id)
    if object_id is None:
        raise DocumentNotFoundError(document_id)

    result = await collection.delete_one({"_id": object_id})
    if result.deleted_count == 0:
        raise DocumentNotFoundError(document_id)

    return True
