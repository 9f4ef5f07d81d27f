"""Pydantic models for generated drafts."""

from datetime import datetime

from pydantic import BaseModel

from .document import SectionKey


class SourceRef(BaseModel):
    """Source sections of one document that fed a draft section."""

    documentId: str
    sections: list[SectionKey] = []


class DraftSection(BaseModel):
    """One generated (or manually edited) section of a draft."""

    templateSectionId: str
    templateSectionTitle: str
    content: str = ""
    sourceRefs: list[SourceRef] = []
    warnings: list[str] = []
    updatedAt: datetime


class DraftReference(BaseModel):
    """A bibliography entry aggregated from the source documents."""

    id: str
    index: int
    sourceDocumentId: str
    sourceRefId: str
    authors: list[str] = []
    title: str | None = None
    year: int | str | None = None
    journal: str | None = None
    doi: str | None = None
    formatted: str


class Draft(BaseModel):
    """Full draft representation."""

    id: str
    projectId: str
    isCurrent: bool = True
    sections: list[DraftSection] = []
    references: list[DraftReference] = []
    createdAt: datetime
    updatedAt: datetime


class UpdateDraftSectionRequest(BaseModel):
    """Request body for a manual edit of a draft section."""

    content: str
