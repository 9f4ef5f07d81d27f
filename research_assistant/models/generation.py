"""Internal value types of the generation pipeline."""

from dataclasses import dataclass, field

from .document import SourceDocument
from .draft import SourceRef
from .project import Project, SectionError


@dataclass
class DocumentContent:
    """One document's source text as rendered into a multi-document prompt."""
    title: str
    content: str
    authors: list[str] = field(default_factory=list)


@dataclass
class TruncationResult:
    """Text cut to a character budget."""
    text: str
    truncated: bool


@dataclass
class ParsedResponse:
    """Cleaned model output, or a placeholder when unusable."""
    success: bool
    content: str
    warnings: list[str] = field(default_factory=list)


@dataclass
class SectionResult:
    """Outcome of generating one section."""
    success: bool
    content: str
    warnings: list[str] = field(default_factory=list)
    source_refs: list[SourceRef] = field(default_factory=list)


@dataclass
class GenerationContext:
    """Snapshot a run works from: the project and its documents in project order."""
    project: Project
    documents: list[SourceDocument]


@dataclass
class GenerationResult:
    """Summary of a finished run."""
    project_id: str
    draft_id: str
    total_sections: int
    sections_generated: int
    errors: list[SectionError] = field(default_factory=list)
