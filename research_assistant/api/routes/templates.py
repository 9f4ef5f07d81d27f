"""Template endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from research_assistant.api.request import parse_body
from research_assistant.api.response import success_response
from research_assistant.models import CreateTemplateRequest
from research_assistant.services import template_service

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.post("", status_code=201)
async def create_template(request: Request) -> JSONResponse:
    """Register a parsed template."""
    create_request = await parse_body(request, CreateTemplateRequest)

    template = await template_service.create_template(create_request)
    return JSONResponse(
        status_code=201,
        content=success_response(template.model_dump(mode="json")),
    )


@router.get("/{template_id}")
async def get_template(template_id: str) -> JSONResponse:
    """Get a template by ID."""
    template = await template_service.get_template(template_id)
    return JSONResponse(
        content=success_response(template.model_dump(mode="json"))
    )
