"""Pydantic models for source documents and their extracted content.

Extracted content is produced by the external PDF analyzer and validated
here, at the boundary: section keys form a closed vocabulary, so a mapping
can never point at a key the extractor does not know about.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field


class SectionKey(str, Enum):
    """Canonical section of a research paper."""

    ABSTRACT = "abstract"
    INTRODUCTION = "introduction"
    LITERATURE_REVIEW = "literature_review"
    METHODS = "methods"
    RESULTS = "results"
    DISCUSSION = "discussion"
    CONCLUSION = "conclusion"
    REFERENCES = "references"
    APPENDIX = "appendix"


class ExtractedSection(BaseModel):
    """Text of one detected section, with the headings found inside it."""

    text: str = ""
    headings: list[str] = []


class DocumentMetadata(BaseModel):
    """Bibliographic metadata read from the PDF."""

    title: str | None = None
    authors: list[str] = []
    creationDate: str | None = None


class ExtractedContent(BaseModel):
    """Structured content tree of a parsed document."""

    fullText: str = ""
    pageCount: Annotated[int, Field(ge=0)] = 0
    sections: dict[SectionKey, ExtractedSection] = {}
    tables: list[dict[str, Any]] = []
    figures: list[dict[str, Any]] = []
    equations: list[dict[str, Any]] = []
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)


class Reference(BaseModel):
    """A citation record parsed from a document's bibliography."""

    id: str
    authors: list[str] = []
    title: str | None = None
    year: int | str | None = None
    journal: str | None = None
    doi: str | None = None
    rawText: str | None = None


# Request schemas
class CreateDocumentRequest(BaseModel):
    """Request body for registering an extracted document."""

    filename: Annotated[str, Field(min_length=1)]
    extractedContent: ExtractedContent = Field(default_factory=ExtractedContent)
    references: list[Reference] = []
    parsingWarnings: list[str] = []


# Response schemas
class DocumentSummary(BaseModel):
    """Summary of a document for list view."""

    id: str
    filename: str
    title: str | None = None
    sectionKeys: list[SectionKey] = []
    createdAt: datetime


class SourceDocument(BaseModel):
    """Full document representation."""

    id: str
    filename: str
    extractedContent: ExtractedContent = Field(default_factory=ExtractedContent)
    references: list[Reference] = []
    parsingWarnings: list[str] = []
    createdAt: datetime

    @property
    def display_title(self) -> str:
        """Title from the PDF metadata, falling back to the filename."""
        return self.extractedContent.metadata.title or self.filename
