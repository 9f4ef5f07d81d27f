"""Draft endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from research_assistant.api.request import parse_body
from research_assistant.api.response import success_response
from research_assistant.models import UpdateDraftSectionRequest
from research_assistant.services import draft_service, project_service

router = APIRouter(tags=["Drafts"])


@router.get("/projects/{project_id}/draft")
async def get_current_draft(project_id: str) -> JSONResponse:
    """Get the current draft of a project."""
    await project_service.get_project(project_id)
    draft = await draft_service.get_current_draft(project_id)
    return JSONResponse(
        content=success_response(draft.model_dump(mode="json"))
    )


@router.get("/drafts/{draft_id}")
async def get_draft(draft_id: str) -> JSONResponse:
    """Get a draft by ID."""
    draft = await draft_service.get_draft(draft_id)
    return JSONResponse(
        content=success_response(draft.model_dump(mode="json"))
    )


@router.patch("/drafts/{draft_id}/sections/{section_id}")
async def update_draft_section(draft_id: str, section_id: str, request: Request) -> JSONResponse:
    """Replace the content of one draft section with a manual edit."""
    update_request = await parse_body(request, UpdateDraftSectionRequest)

    draft = await draft_service.update_draft_section_content(
        draft_id, section_id, update_request.content
    )
    return JSONResponse(
        content=success_response(draft.model_dump(mode="json"))
    )
