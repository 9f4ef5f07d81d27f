"""Section generation orchestrator.

Turns a project's section mapping into a draft:

1. Mark the project as generating and create a new current draft.
2. Process the mapping in consecutive batches of CONCURRENCY sections. The
   sections of a batch run concurrently; the next batch starts only when
   every section of the current one has finished.
3. Per section: select source text, build the prompt, call the model under
   a per-section timeout, parse the response and write the draft section.
   A failing section gets a placeholder and never aborts the run.
4. Aggregate the source documents' references onto the draft and mark the
   project ready.

Every step is reported on the progress channel. An error outside the
per-section boundary (e.g. the draft cannot be created) rolls the project
back to draft status and is re-raised.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional

from research_assistant.llm import ModelClient
from research_assistant.models import (
    ALL_DOCUMENTS,
    CompleteEvent,
    DocumentContent,
    DraftSection,
    GenerationContext,
    GenerationErrorEvent,
    GenerationProgress,
    GenerationResult,
    ProgressEvent,
    Project,
    ProjectMode,
    ProjectPurpose,
    ProjectStatus,
    SectionCompleteEvent,
    SectionConfig,
    SectionError,
    SectionKey,
    SectionResult,
    SourceDocument,
    SourceRef,
)
from research_assistant.services import draft_service, project_service
from research_assistant.services.progress_channel import ProgressChannel
from research_assistant.services.prompts import (
    build_comparative_analysis_prompt,
    build_multi_document_synthesis_prompt,
    build_section_rewrite_prompt,
    truncate_for_context,
)
from research_assistant.services.references import collect_references
from research_assistant.services.response_parser import (
    format_for_storage,
    parse_multi_doc_response,
    parse_section_content,
)

logger = logging.getLogger(__name__)

# Sections generated concurrently within one run
CONCURRENCY = int(os.getenv("GENERATION_CONCURRENCY", "3"))

# Per-section wait for the model (5 minutes)
SECTION_TIMEOUT_SECONDS = float(os.getenv("GENERATION_SECTION_TIMEOUT_SECONDS", "300"))

# Source text budget per section, in characters
MAX_SOURCE_CHARS = 100_000

# Below this many non-blank characters a source is not worth a model call
MIN_SOURCE_CHARS = 50

PREVIEW_CHARS = 200

TIMEOUT_MESSAGE = "Generation timed out"
TRUNCATION_WARNING = "Source content was truncated due to length"
INSUFFICIENT_SINGLE_CONTENT = "[Insufficient source content for this section]"
INSUFFICIENT_MULTI_CONTENT = "[Insufficient source content across documents]"


class SectionTimeoutError(Exception):
    """Raised when a section does not finish within the per-section timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(TIMEOUT_MESSAGE)


def failure_placeholder(message: str) -> str:
    """Draft content written for a section whose generation raised."""
    return f"[Generation failed: {message}. Please edit manually.]"


def extract_source_content(document: SourceDocument, section_keys: list[SectionKey]) -> str:
    """Join the text of the requested sections, falling back to the full text.

    The full text is used when no keys are requested or none of them was
    detected in the document.
    """
    extracted = document.extractedContent
    if not section_keys:
        return extracted.fullText

    contents = [
        extracted.sections[key].text
        for key in section_keys
        if key in extracted.sections and extracted.sections[key].text
    ]
    if not contents:
        return extracted.fullText

    return "\n\n".join(contents)


def resolve_documents(documents: list[SourceDocument], source_documents: list[str]) -> list[SourceDocument]:
    """Select the documents a section draws on, keeping project order.

    "all" selects every document; unknown IDs are ignored.
    """
    if ALL_DOCUMENTS in source_documents:
        return list(documents)
    wanted = set(source_documents)
    return [document for document in documents if document.id in wanted]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class _RunState:
    """Mutable bookkeeping of one run, shared by its section tasks."""
    project_id: str
    total: int
    started_at: datetime
    completed: int = 0
    errors: list[SectionError] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def progress(self, **overrides) -> GenerationProgress:
        values = {
            "totalSections": self.total,
            "completedSections": self.completed,
            "errors": list(self.errors),
            "startedAt": self.started_at,
        }
        values.update(overrides)
        return GenerationProgress(**values)


class GenerationOrchestrator:
    """Runs section generation for one project at a time per call.

    Usage:
        orchestrator = GenerationOrchestrator(ModelClient(), channel)
        result = await orchestrator.generate(context)
    """

    def __init__(
        self,
        model_client: ModelClient,
        channel: ProgressChannel,
        concurrency: Optional[int] = None,
        section_timeout: Optional[float] = None,
    ):
        """Initialize the orchestrator.

        Args:
            model_client: Client whose generate_content(prompt) produces text.
            channel: Channel progress events are published on.
            concurrency: Sections per batch. Defaults to GENERATION_CONCURRENCY.
            section_timeout: Seconds to wait for one section. Defaults to
                GENERATION_SECTION_TIMEOUT_SECONDS.
        """
        self.model_client = model_client
        self.channel = channel
        self.concurrency = concurrency if concurrency is not None else CONCURRENCY
        self.section_timeout = (
            section_timeout if section_timeout is not None else SECTION_TIMEOUT_SECONDS
        )
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.section_timeout <= 0:
            raise ValueError(f"section_timeout must be > 0, got {self.section_timeout}")

    async def generate(self, context: GenerationContext) -> GenerationResult:
        """Generate every mapped section of the project into a new draft.

        Raises:
            Exception: Whatever escaped the per-section error boundary, after
                the project has been rolled back to draft status.
        """
        project = context.project
        sections = project.sectionMapping
        state = _RunState(project_id=project.id, total=len(sections), started_at=_now())

        logger.info(
            f"Project {project.id}: starting generation of {state.total} sections",
            extra={"project_id": project.id},
        )

        await project_service.update_project_status(
            project.id, ProjectStatus.GENERATING, progress=state.progress()
        )

        try:
            draft = await draft_service.create_draft(project.id)

            for start in range(0, state.total, self.concurrency):
                batch = sections[start:start + self.concurrency]
                await self._run_batch(context, draft.id, batch, state)

            references = collect_references(context.documents)
            await draft_service.update_draft_references(
                draft.id,
                references,
                section_order=[s.templateSectionId for s in sections],
            )

            await project_service.update_project_status(
                project.id,
                ProjectStatus.READY,
                progress=state.progress(
                    completedSections=state.total,
                    currentSection=None,
                    completedAt=_now(),
                ),
            )
        except Exception as e:
            logger.error(
                f"Project {project.id}: generation failed: {e}",
                exc_info=True,
                extra={"project_id": project.id},
            )
            await self._rollback(state, e)
            self.channel.publish(
                GenerationErrorEvent(projectId=project.id, error=str(e), recoverable=False)
            )
            raise

        self.channel.publish(
            CompleteEvent(
                projectId=project.id,
                draftId=draft.id,
                status=ProjectStatus.READY,
                sectionsGenerated=state.total,
                completedSections=state.total,
                errors=list(state.errors),
            )
        )

        logger.info(
            f"Project {project.id}: generation completed "
            f"({state.total} sections, {len(state.errors)} errors)",
            extra={"project_id": project.id, "draft_id": draft.id},
        )

        return GenerationResult(
            project_id=project.id,
            draft_id=draft.id,
            total_sections=state.total,
            sections_generated=state.total,
            errors=list(state.errors),
        )

    async def _run_batch(
        self,
        context: GenerationContext,
        draft_id: str,
        batch: list[SectionConfig],
        state: _RunState,
    ) -> None:
        tasks = [
            asyncio.create_task(self._process_section(context, draft_id, section, state))
            for section in batch
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # A section escaped its error boundary; stop its siblings too
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _process_section(
        self,
        context: GenerationContext,
        draft_id: str,
        section: SectionConfig,
        state: _RunState,
    ) -> None:
        project_id = context.project.id
        section_id = section.templateSectionId
        title = section.templateSectionTitle

        try:
            self.channel.publish(
                ProgressEvent(
                    projectId=project_id,
                    totalSections=state.total,
                    completedSections=state.completed,
                    currentSection=title,
                )
            )

            try:
                result = await asyncio.wait_for(
                    self._generate_section(context, section),
                    timeout=self.section_timeout,
                )
            except asyncio.TimeoutError:
                raise SectionTimeoutError(self.section_timeout) from None

            await draft_service.upsert_draft_section(
                draft_id,
                DraftSection(
                    templateSectionId=section_id,
                    templateSectionTitle=title,
                    content=format_for_storage(result.content),
                    sourceRefs=result.source_refs,
                    warnings=result.warnings,
                    updatedAt=_now(),
                ),
            )

            self.channel.publish(
                SectionCompleteEvent(
                    projectId=project_id,
                    sectionId=section_id,
                    sectionTitle=title,
                    preview=result.content[:PREVIEW_CHARS],
                    success=result.success,
                )
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(
                f"Project {project_id}: section '{title}' failed: {message}",
                extra={"project_id": project_id, "section_id": section_id},
            )

            state.errors.append(SectionError(section=title, error=message))
            self.channel.publish(
                GenerationErrorEvent(
                    projectId=project_id,
                    sectionId=section_id,
                    sectionTitle=title,
                    error=message,
                    recoverable=True,
                )
            )

            placeholder = failure_placeholder(message)
            await draft_service.upsert_draft_section(
                draft_id,
                DraftSection(
                    templateSectionId=section_id,
                    templateSectionTitle=title,
                    content=placeholder,
                    sourceRefs=[],
                    warnings=[message],
                    updatedAt=_now(),
                ),
            )

            self.channel.publish(
                SectionCompleteEvent(
                    projectId=project_id,
                    sectionId=section_id,
                    sectionTitle=title,
                    preview=placeholder[:PREVIEW_CHARS],
                    success=False,
                )
            )
        finally:
            async with state.lock:
                state.completed += 1
                await project_service.update_project_status(
                    project_id,
                    ProjectStatus.GENERATING,
                    progress=state.progress(
                        currentSection=f"Processing... ({state.completed}/{state.total})",
                    ),
                )

    async def _generate_section(self, context: GenerationContext, section: SectionConfig) -> SectionResult:
        project = context.project
        if project.mode is ProjectMode.SINGLE:
            return await self._generate_single_document_section(project, context.documents[0], section)
        return await self._generate_multi_document_section(project, context.documents, section)

    async def _generate_single_document_section(
        self,
        project: Project,
        document: SourceDocument,
        section: SectionConfig,
    ) -> SectionResult:
        title = section.templateSectionTitle
        section_keys = section.sourceMapping.sourceSections
        source_content = extract_source_content(document, section_keys)

        logger.debug(
            f"Generating section '{title}' from {document.filename} "
            f"({len(source_content)} chars)",
            extra={"project_id": project.id, "section_id": section.templateSectionId},
        )

        if len(source_content.strip()) < MIN_SOURCE_CHARS:
            return SectionResult(
                success=False,
                content=INSUFFICIENT_SINGLE_CONTENT,
                warnings=["No relevant content found in source document"],
            )

        truncation = truncate_for_context(source_content, MAX_SOURCE_CHARS)

        prompt = build_section_rewrite_prompt(
            section_title=title,
            source_content=truncation.text,
            instructions=section.instructions,
            global_instructions=project.globalInstructions,
            target_length=section.targetLength,
            purpose=project.purpose,
            document_metadata=document.extractedContent.metadata,
        )

        response = await self.model_client.generate_content(prompt)
        parsed = parse_section_content(response, title)

        warnings = list(parsed.warnings)
        if truncation.truncated:
            warnings.append(TRUNCATION_WARNING)

        return SectionResult(
            success=parsed.success,
            content=parsed.content,
            warnings=warnings,
            source_refs=[SourceRef(documentId=document.id, sections=section_keys)],
        )

    async def _generate_multi_document_section(
        self,
        project: Project,
        documents: list[SourceDocument],
        section: SectionConfig,
    ) -> SectionResult:
        title = section.templateSectionTitle
        section_keys = section.sourceMapping.sourceSections

        contributing: list[tuple[SourceDocument, str]] = []
        for document in resolve_documents(documents, section.sourceMapping.sourceDocuments):
            text = extract_source_content(document, section_keys)
            if len(text.strip()) >= MIN_SOURCE_CHARS:
                contributing.append((document, text))

        if not contributing:
            return SectionResult(
                success=False,
                content=INSUFFICIENT_MULTI_CONTENT,
                warnings=["No relevant content found in source documents"],
            )

        # The character budget is shared between the documents
        budget = MAX_SOURCE_CHARS // len(contributing)
        truncated = False
        contents: list[DocumentContent] = []
        for document, text in contributing:
            truncation = truncate_for_context(text, budget)
            truncated = truncated or truncation.truncated
            contents.append(
                DocumentContent(
                    title=document.display_title,
                    authors=document.extractedContent.metadata.authors,
                    content=truncation.text,
                )
            )

        logger.debug(
            f"Generating section '{title}' from {len(contents)} documents",
            extra={"project_id": project.id, "section_id": section.templateSectionId},
        )

        if project.purpose is ProjectPurpose.COMPARATIVE:
            prompt = build_comparative_analysis_prompt(
                section_title=title,
                documents=contents,
                instructions=section.instructions,
                global_instructions=project.globalInstructions,
            )
        else:
            prompt = build_multi_document_synthesis_prompt(
                section_title=title,
                documents=contents,
                instructions=section.instructions,
                global_instructions=project.globalInstructions,
                target_length=section.targetLength,
                purpose=project.purpose,
            )

        response = await self.model_client.generate_content(prompt)
        parsed = parse_multi_doc_response(response, len(contents), title)

        warnings = list(parsed.warnings)
        if truncated:
            warnings.append(TRUNCATION_WARNING)

        return SectionResult(
            success=parsed.success,
            content=parsed.content,
            warnings=warnings,
            source_refs=[
                SourceRef(documentId=document.id, sections=section_keys)
                for document, _ in contributing
            ],
        )

    async def _rollback(self, state: _RunState, error: Exception) -> None:
        try:
            await project_service.update_project_status(
                state.project_id,
                ProjectStatus.DRAFT,
                progress=state.progress(currentSection=None, failedAt=_now()),
                error=str(error),
            )
        except Exception:
            logger.exception(f"Project {state.project_id}: failed to roll back status")
