"""Project CRUD endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from research_assistant.api.request import parse_body
from research_assistant.api.response import success_response
from research_assistant.models import CreateProjectRequest, UpdateProjectRequest
from research_assistant.services import project_service

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("")
async def list_projects() -> JSONResponse:
    """List all projects."""
    projects = await project_service.list_projects()
    return JSONResponse(
        content=success_response([p.model_dump(mode="json") for p in projects])
    )


@router.get("/{project_id}")
async def get_project(project_id: str) -> JSONResponse:
    """Get a project by ID."""
    project = await project_service.get_project(project_id)
    return JSONResponse(
        content=success_response(project.model_dump(mode="json"))
    )


@router.post("", status_code=201)
async def create_project(request: Request) -> JSONResponse:
    """Create a new project."""
    create_request = await parse_body(request, CreateProjectRequest)

    project = await project_service.create_project(create_request)
    return JSONResponse(
        status_code=201,
        content=success_response(project.model_dump(mode="json")),
    )


@router.patch("/{project_id}")
async def update_project(project_id: str, request: Request) -> JSONResponse:
    """Update the given fields of a project."""
    update_request = await parse_body(request, UpdateProjectRequest)

    project = await project_service.update_project(project_id, update_request)
    return JSONResponse(
        content=success_response(project.model_dump(mode="json")),
    )


@router.delete("/{project_id}")
async def delete_project(project_id: str) -> JSONResponse:
    """Delete a project and its drafts."""
    await project_service.delete_project(project_id)
    return JSONResponse(
        content=success_response({"deleted": True}),
    )


@router.get("/{project_id}/readiness")
async def get_readiness(project_id: str) -> JSONResponse:
    """Report whether the project can be generated, and what is missing."""
    readiness = await project_service.check_generation_readiness(project_id)
    return JSONResponse(
        content=success_response(readiness.model_dump(mode="json")),
    )
