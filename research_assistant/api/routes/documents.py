"""Source document endpoints.

Documents arrive already extracted: the body is the PDF analyzer's output.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from research_assistant.api.request import parse_body
from research_assistant.api.response import success_response
from research_assistant.models import CreateDocumentRequest
from research_assistant.services import document_service

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post("", status_code=201)
async def create_document(request: Request) -> JSONResponse:
    """Register an extracted document."""
    create_request = await parse_body(request, CreateDocumentRequest)

    document = await document_service.create_document(create_request)
    return JSONResponse(
        status_code=201,
        content=success_response(document.model_dump(mode="json")),
    )


@router.get("")
async def list_documents() -> JSONResponse:
    """List all documents."""
    documents = await document_service.list_documents()
    return JSONResponse(
        content=success_response([d.model_dump(mode="json") for d in documents])
    )


@router.get("/{document_id}")
async def get_document(document_id: str) -> JSONResponse:
    """Get a document by ID."""
    document = await document_service.get_document(document_id)
    return JSONResponse(
        content=success_response(document.model_dump(mode="json"))
    )


@router.delete("/{document_id}")
async def delete_document(document_id: str) -> JSONResponse:
    """Delete a document by ID."""
    await document_service.delete_document(document_id)
    return JSONResponse(
        content=success_response({"deleted": True}),
    )
