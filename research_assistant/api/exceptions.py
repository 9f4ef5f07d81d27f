"""Custom exception classes for the API."""


class ResourceNotFoundError(Exception):
    """Raised when a stored resource is not found."""

    resource = "Resource"
    code = "NOT_FOUND"

    def __init__(self, resource_id: str, message: str | None = None):
        self.resource_id = resource_id
        super().__init__(message or f"{self.resource} with ID '{resource_id}' not found")


class ProjectNotFoundError(ResourceNotFoundError):
    """Raised when a project is not found."""

    resource = "Project"
    code = "PROJECT_NOT_FOUND"

    @property
    def project_id(self) -> str:
        return self.resource_id


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a source document is not found."""

    resource = "Document"
    code = "DOCUMENT_NOT_FOUND"


class TemplateNotFoundError(ResourceNotFoundError):
    """Raised when a template is not found."""

    resource = "Template"
    code = "TEMPLATE_NOT_FOUND"


class DraftNotFoundError(ResourceNotFoundError):
    """Raised when a draft is not found."""

    resource = "Draft"
    code = "DRAFT_NOT_FOUND"


class DraftSectionNotFoundError(ResourceNotFoundError):
    """Raised when a draft has no section with the given template section ID."""

    resource = "Draft section"
    code = "DRAFT_SECTION_NOT_FOUND"


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GenerationNotReadyError(Exception):
    """Raised when a project lacks the inputs required to start generation."""

    def __init__(self, project_id: str, issues: list[str]):
        self.project_id = project_id
        self.issues = issues
        super().__init__(
            f"Project '{project_id}' is not ready for generation: {'; '.join(issues)}"
        )


class GenerationInProgressError(Exception):
    """Raised when a generation run for the project is already active."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Generation is already in progress for project '{project_id}'")
