"""Pydantic models for report templates."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field


class TemplateSection(BaseModel):
    """A target section detected in the DOCX template."""

    id: Annotated[str, Field(min_length=1)]
    title: Annotated[str, Field(min_length=1)]


class CreateTemplateRequest(BaseModel):
    """Request body for registering a parsed template."""

    name: Annotated[str, Field(min_length=1)]
    sections: list[TemplateSection] = []


class Template(BaseModel):
    """Full template representation."""

    id: str
    name: str
    sections: list[TemplateSection] = []
    createdAt: datetime
