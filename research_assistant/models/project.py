"""Pydantic models for Project and related entities."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator

from .document import SectionKey

# Sentinel in SourceMapping.sourceDocuments selecting every project document
ALL_DOCUMENTS = "all"


class ProjectMode(str, Enum):
    """Whether a project draws on one or several source documents."""

    SINGLE = "single"
    MULTI = "multi"


class ProjectPurpose(str, Enum):
    """Kind of report the project produces."""

    FULL_REPORT = "full_report"
    SUMMARY = "summary"
    LITERATURE_REVIEW = "literature_review"
    COMPARATIVE = "comparative"


# Purposes that only make sense across several documents
MULTI_ONLY_PURPOSES = frozenset({ProjectPurpose.LITERATURE_REVIEW, ProjectPurpose.COMPARATIVE})


class ProjectStatus(str, Enum):
    """Generation lifecycle of a project."""

    DRAFT = "draft"
    GENERATING = "generating"
    READY = "ready"


def mode_purpose_error(mode: ProjectMode, purpose: ProjectPurpose) -> str | None:
    """Return a validation message if the purpose is not allowed in the mode."""
    if purpose in MULTI_ONLY_PURPOSES and mode is not ProjectMode.MULTI:
        return f"Purpose '{purpose.value}' requires mode 'multi'"
    return None


class SourceMapping(BaseModel):
    """Selects the source content feeding one template section."""

    sourceSections: list[SectionKey] = []
    sourceDocuments: list[str] = [ALL_DOCUMENTS]


class SectionConfig(BaseModel):
    """One entry of a project's section mapping."""

    templateSectionId: Annotated[str, Field(min_length=1)]
    templateSectionTitle: Annotated[str, Field(min_length=1)]
    sourceMapping: SourceMapping = Field(default_factory=SourceMapping)
    instructions: str | None = None
    targetLength: str | None = None


def _check_unique_section_ids(mapping: list[SectionConfig] | None) -> list[SectionConfig] | None:
    if mapping is None:
        return mapping
    seen: set[str] = set()
    for section in mapping:
        if section.templateSectionId in seen:
            raise ValueError(f"Duplicate templateSectionId '{section.templateSectionId}'")
        seen.add(section.templateSectionId)
    return mapping


class SectionError(BaseModel):
    """A section that failed during a generation run."""

    section: str
    error: str


class GenerationProgress(BaseModel):
    """Progress of the current or last generation run."""

    totalSections: Annotated[int, Field(ge=0)] = 0
    completedSections: Annotated[int, Field(ge=0)] = 0
    currentSection: str | None = None
    errors: list[SectionError] = []
    startedAt: datetime | None = None
    completedAt: datetime | None = None
    failedAt: datetime | None = None

    @model_validator(mode="after")
    def _completed_within_total(self) -> "GenerationProgress":
        if self.completedSections > self.totalSections:
            raise ValueError("completedSections cannot exceed totalSections")
        return self


# Request schemas
class CreateProjectRequest(BaseModel):
    """Request body for creating a new project."""

    name: Annotated[str, Field(min_length=1)]
    mode: ProjectMode = ProjectMode.SINGLE
    purpose: ProjectPurpose = ProjectPurpose.FULL_REPORT
    templateId: str | None = None
    documentIds: list[str] = []
    sectionMapping: list[SectionConfig] = []
    globalInstructions: str | None = None

    @field_validator("sectionMapping")
    @classmethod
    def _unique_section_ids(cls, value: list[SectionConfig]) -> list[SectionConfig]:
        return _check_unique_section_ids(value)

    @model_validator(mode="after")
    def _purpose_allowed(self) -> "CreateProjectRequest":
        message = mode_purpose_error(self.mode, self.purpose)
        if message:
            raise ValueError(message)
        return self


class UpdateProjectRequest(BaseModel):
    """Request body for a partial project update.

    Only fields present in the body are applied.
    """

    name: Annotated[str, Field(min_length=1)] | None = None
    mode: ProjectMode | None = None
    purpose: ProjectPurpose | None = None
    templateId: str | None = None
    documentIds: list[str] | None = None
    sectionMapping: list[SectionConfig] | None = None
    globalInstructions: str | None = None

    @field_validator("sectionMapping")
    @classmethod
    def _unique_section_ids(cls, value: list[SectionConfig] | None) -> list[SectionConfig] | None:
        return _check_unique_section_ids(value)


# Response schemas
class ProjectSummary(BaseModel):
    """Summary of a project for list view."""

    id: str
    name: str
    mode: ProjectMode
    purpose: ProjectPurpose
    status: ProjectStatus
    updatedAt: datetime


class Project(BaseModel):
    """Full project representation."""

    id: str
    name: str
    mode: ProjectMode = ProjectMode.SINGLE
    purpose: ProjectPurpose = ProjectPurpose.FULL_REPORT
    status: ProjectStatus = ProjectStatus.DRAFT
    templateId: str | None = None
    documentIds: list[str] = []
    sectionMapping: list[SectionConfig] = []
    globalInstructions: str | None = None
    generationProgress: GenerationProgress | None = None
    error: str | None = None
    createdAt: datetime
    updatedAt: datetime


class GenerationReadiness(BaseModel):
    """Result of the pre-flight check before a generation run."""

    ready: bool
    issues: list[str] = []
