"""Generation progress events.

Published by the orchestrator on the progress channel and forwarded to
clients by the streaming endpoint as named server-sent events.
"""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel

from .project import ProjectStatus, SectionError


class EventKind(str, Enum):
    """Name of a progress event on the wire."""

    PROGRESS = "progress"
    SECTION_COMPLETE = "section-complete"
    ERROR = "error"
    COMPLETE = "complete"


class GenerationEvent(BaseModel):
    """Base class for all events of a generation run."""

    kind: ClassVar[EventKind]

    projectId: str


class ProgressEvent(GenerationEvent):
    """A section is about to be processed."""

    kind: ClassVar[EventKind] = EventKind.PROGRESS

    totalSections: int
    completedSections: int
    currentSection: str | None = None


class SectionCompleteEvent(GenerationEvent):
    """A section finished, successfully or with a placeholder."""

    kind: ClassVar[EventKind] = EventKind.SECTION_COMPLETE

    sectionId: str
    sectionTitle: str
    preview: str
    success: bool


class GenerationErrorEvent(GenerationEvent):
    """A section failed (recoverable) or the whole run failed."""

    kind: ClassVar[EventKind] = EventKind.ERROR

    sectionId: str | None = None
    sectionTitle: str | None = None
    error: str
    recoverable: bool


class CompleteEvent(GenerationEvent):
    """The run finished and the draft is ready for review."""

    kind: ClassVar[EventKind] = EventKind.COMPLETE

    draftId: str
    status: ProjectStatus = ProjectStatus.READY
    sectionsGenerated: int
    completedSections: int
    errors: list[SectionError] = []
