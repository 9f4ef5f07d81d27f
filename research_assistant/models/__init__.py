"""Backend models package.

Note: keep backend models as the source-of-truth schemas for the API contract.
"""

from .document import (
    CreateDocumentRequest,
    DocumentMetadata,
    DocumentSummary,
    ExtractedContent,
    ExtractedSection,
    Reference,
    SectionKey,
    SourceDocument,
)
from .draft import (
    Draft,
    DraftReference,
    DraftSection,
    SourceRef,
    UpdateDraftSectionRequest,
)
from .events import (
    CompleteEvent,
    EventKind,
    GenerationErrorEvent,
    GenerationEvent,
    ProgressEvent,
    SectionCompleteEvent,
)
from .generation import (
    DocumentContent,
    GenerationContext,
    GenerationResult,
    ParsedResponse,
    SectionResult,
    TruncationResult,
)
from .project import (
    ALL_DOCUMENTS,
    CreateProjectRequest,
    GenerationProgress,
    GenerationReadiness,
    Project,
    ProjectMode,
    ProjectPurpose,
    ProjectStatus,
    ProjectSummary,
    SectionConfig,
    SectionError,
    SourceMapping,
    UpdateProjectRequest,
)
from .template import CreateTemplateRequest, Template, TemplateSection

__all__ = [
    # Documents
    "CreateDocumentRequest",
    "DocumentMetadata",
    "DocumentSummary",
    "ExtractedContent",
    "ExtractedSection",
    "Reference",
    "SectionKey",
    "SourceDocument",
    # Drafts
    "Draft",
    "DraftReference",
    "DraftSection",
    "SourceRef",
    "UpdateDraftSectionRequest",
    # Events
    "CompleteEvent",
    "EventKind",
    "GenerationErrorEvent",
    "GenerationEvent",
    "ProgressEvent",
    "SectionCompleteEvent",
    # Generation
    "DocumentContent",
    "GenerationContext",
    "GenerationResult",
    "ParsedResponse",
    "SectionResult",
    "TruncationResult",
    # Projects
    "ALL_DOCUMENTS",
    "CreateProjectRequest",
    "GenerationProgress",
    "GenerationReadiness",
    "Project",
    "ProjectMode",
    "ProjectPurpose",
    "ProjectStatus",
    "ProjectSummary",
    "SectionConfig",
    "SectionError",
    "SourceMapping",
    "UpdateProjectRequest",
    # Templates
    "CreateTemplateRequest",
    "Template",
    "TemplateSection",
]
