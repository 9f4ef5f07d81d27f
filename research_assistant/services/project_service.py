"""Project service for business logic."""

import logging
from datetime import UTC, datetime
from typing import Optional

from research_assistant.api.exceptions import (
    GenerationInProgressError,
    GenerationNotReadyError,
    ProjectNotFoundError,
    ValidationError,
)
from research_assistant.db.mongo import get_database, parse_object_id
from research_assistant.models import (
    CreateProjectRequest,
    GenerationContext,
    GenerationProgress,
    GenerationReadiness,
    Project,
    ProjectMode,
    ProjectPurpose,
    ProjectStatus,
    ProjectSummary,
    SourceDocument,
    UpdateProjectRequest,
)
from research_assistant.models.project import mode_purpose_error
from research_assistant.services import document_service, draft_service, template_service

logger = logging.getLogger(__name__)

COLLECTION_NAME = "projects"


def _to_project_summary(doc: dict) -> ProjectSummary:
    """Convert MongoDB document to ProjectSummary model."""
    return ProjectSummary(
        id=str(doc["_id"]),
        name=doc["name"],
        mode=ProjectMode(doc["mode"]),
        purpose=ProjectPurpose(doc["purpose"]),
        status=ProjectStatus(doc.get("status", ProjectStatus.DRAFT.value)),
        updatedAt=doc["updatedAt"],
    )


def _to_project(doc: dict) -> Project:
    """Convert MongoDB document to Project model."""
    return Project(
        id=str(doc["_id"]),
        name=doc["name"],
        mode=ProjectMode(doc["mode"]),
        purpose=ProjectPurpose(doc["purpose"]),
        status=ProjectStatus(doc.get("status", ProjectStatus.DRAFT.value)),
        templateId=doc.get("templateId"),
        documentIds=doc.get("documentIds", []),
        sectionMapping=doc.get("sectionMapping", []),
        globalInstructions=doc.get("globalInstructions"),
        generationProgress=doc.get("generationProgress"),
        error=doc.get("error"),
        createdAt=doc["createdAt"],
        updatedAt=doc["updatedAt"],
    )


async def _find_project_doc(project_id: str) -> dict:
    db = await get_database()
    collection = db[COLLECTION_NAME]

    object_id = parse_object_id(project_id)
    if object_id is None:
        raise ProjectNotFoundError(project_id)

    doc = await collection.find_one({"_id": object_id})
    if doc is None:
        raise ProjectNotFoundError(project_id)

    return doc


async def list_projects() -> list[ProjectSummary]:
    """List all projects, sorted by updatedAt descending."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    cursor = collection.find().sort("updatedAt", -1)
    docs = await cursor.to_list(length=None)

    return [_to_project_summary(doc) for doc in docs]


async def create_project(request: CreateProjectRequest) -> Project:
    """Create a new project in the database."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    now = datetime.now(UTC)
    doc = {
        **request.model_dump(mode="json"),
        "status": ProjectStatus.DRAFT.value,
        "generationProgress": None,
        "error": None,
        "createdAt": now,
        "updatedAt": now,
    }

    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    return _to_project(doc)


async def get_project(project_id: str) -> Project:
    """Get a project by ID."""
    doc = await _find_project_doc(project_id)
    return _to_project(doc)


async def update_project(project_id: str, request: UpdateProjectRequest) -> Project:
    """Apply the fields present in request to a project.

    Raises:
        ProjectNotFoundError: If the project does not exist.
        ValidationError: If the resulting mode/purpose combination is invalid.
        GenerationInProgressError: If the section mapping is changed while
            the project is generating.
    """
    existing = _to_project(await _find_project_doc(project_id))

    changes = request.model_dump(mode="json", exclude_unset=True)

    mode = request.mode if "mode" in changes and request.mode else existing.mode
    purpose = request.purpose if "purpose" in changes and request.purpose else existing.purpose
    message = mode_purpose_error(mode, purpose)
    if message:
        raise ValidationError(message)

    if "sectionMapping" in changes and existing.status is ProjectStatus.GENERATING:
        raise GenerationInProgressError(project_id)

    # Required fields cannot be cleared with an explicit null
    for field_name in ("name", "mode", "purpose", "documentIds", "sectionMapping"):
        if field_name in changes and changes[field_name] is None:
            del changes[field_name]

    changes["updatedAt"] = datetime.now(UTC)

    db = await get_database()
    collection = db[COLLECTION_NAME]
    object_id = parse_object_id(project_id)
    await collection.update_one({"_id": object_id}, {"$set": changes})

    updated_doc = await collection.find_one({"_id": object_id})
    return _to_project(updated_doc)


async def delete_project(project_id: str) -> bool:
    """Delete a project by ID, along with its drafts."""
    await _find_project_doc(project_id)

    deleted_drafts = await draft_service.delete_drafts_for_project(project_id)
    if deleted_drafts:
        logger.info(f"Deleted {deleted_drafts} drafts of project {project_id}")

    db = await get_database()
    await db[COLLECTION_NAME].delete_one({"_id": parse_object_id(project_id)})
    return True


async def update_project_status(
    project_id: str,
    status: ProjectStatus,
    progress: Optional[GenerationProgress] = None,
    error: Optional[str] = None,
) -> None:
    """Persist a status transition and, optionally, the run's progress.

    `error` is written as given, so passing None clears a previous error.
    """
    update: dict = {
        "status": status.value,
        "error": error,
        "updatedAt": datetime.now(UTC),
    }
    if progress is not None:
        update["generationProgress"] = progress.model_dump()

    db = await get_database()
    result = await db[COLLECTION_NAME].update_one(
        {"_id": parse_object_id(project_id)},
        {"$set": update},
    )
    if result.matched_count == 0:
        raise ProjectNotFoundError(project_id)


async def check_generation_readiness(project_id: str) -> GenerationReadiness:
    """Check that a project has a template, documents and a section mapping."""
    project = await get_project(project_id)
    issues, _ = await _readiness_issues(project)
    return GenerationReadiness(ready=not issues, issues=issues)


async def _readiness_issues(project: Project) -> tuple[list[str], list[SourceDocument]]:
    issues: list[str] = []

    if not project.templateId:
        issues.append("No template selected")
    elif await template_service.find_template(project.templateId) is None:
        issues.append(f"Template '{project.templateId}' not found")

    documents: list[SourceDocument] = []
    if not project.documentIds:
        issues.append("No source documents selected")
    else:
        documents = await document_service.get_documents(project.documentIds)
        if not documents:
            issues.append("None of the selected source documents were found")
        else:
            found = {document.id for document in documents}
            missing = [d for d in project.documentIds if d not in found]
            if missing:
                logger.warning(
                    f"Project {project.id}: skipping missing documents {missing}"
                )

    if not project.sectionMapping:
        issues.append("No section mapping configured")

    return issues, documents


async def prepare_generation(project_id: str, run_active: bool = False) -> GenerationContext:
    """Load the snapshot a generation run works from.

    Args:
        project_id: Project to generate.
        run_active: Whether a supervised run for this project is still alive.

    Raises:
        ProjectNotFoundError: If the project does not exist.
        GenerationInProgressError: If a run for the project is active.
        GenerationNotReadyError: If required inputs are missing.
    """
    project = await get_project(project_id)

    if run_active:
        raise GenerationInProgressError(project_id)

    if project.status is ProjectStatus.GENERATING:
        # No live task owns this status, e.g. the process restarted mid-run
        logger.warning(f"Project {project_id}: overriding stale 'generating' status")

    issues, documents = await _readiness_issues(project)
    if issues:
        raise GenerationNotReadyError(project_id, issues)

    return GenerationContext(project=project, documents=documents)
