"""Generation endpoints: trigger a run and stream its progress.

The stream is a server-sent event response. It starts with an unnamed
status message, then forwards the run's events by name (progress,
section-complete, error, complete) and sends a ping comment while idle.
"""

import asyncio
import json
import logging
import os
from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from research_assistant.api.dependencies import (
    get_generation_supervisor,
    get_orchestrator,
    get_progress_channel,
)
from research_assistant.api.response import success_response
from research_assistant.models import EventKind, GenerationErrorEvent, GenerationEvent, ProjectStatus
from research_assistant.services import project_service
from research_assistant.services.generation_service import GenerationOrchestrator
from research_assistant.services.generation_tasks import GenerationSupervisor
from research_assistant.services.progress_channel import (
    ProgressChannel,
    Subscription,
    SubscriptionClosedError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Generation"])

# Idle time before a keep-alive comment is sent
SSE_PING_INTERVAL_SECONDS = float(os.getenv("SSE_PING_INTERVAL_SECONDS", "10"))

SSE_PING = ": ping\n\n"


def format_sse(data: dict[str, Any], event: str | None = None) -> str:
    """Format one server-sent event."""
    payload = json.dumps(data, ensure_ascii=False)
    if event:
        return f"event: {event}\ndata: {payload}\n\n"
    return f"data: {payload}\n\n"


def _ends_stream(event: GenerationEvent) -> bool:
    if event.kind is EventKind.COMPLETE:
        return True
    return isinstance(event, GenerationErrorEvent) and not event.recoverable


async def stream_generation_events(
    channel: ProgressChannel,
    project_id: str,
    ping_interval: float,
) -> AsyncGenerator[str, None]:
    """Yield the SSE messages of one client connection.

    The subscription only exists while the body is being iterated and is
    closed when the stream ends, including when the client disconnects.
    """
    subscription: Subscription | None = None
    try:
        subscription = channel.subscribe(project_id)
        # Snapshot after subscribing so no event falls between the two
        project = await project_service.get_project(project_id)
        progress = project.generationProgress
        yield format_sse({
            "type": "status",
            "status": project.status.value,
            "progress": progress.model_dump(mode="json") if progress else None,
        })

        while True:
            try:
                event = await asyncio.wait_for(subscription.get(), timeout=ping_interval)
            except asyncio.TimeoutError:
                yield SSE_PING
                continue
            except SubscriptionClosedError:
                break

            yield format_sse(event.model_dump(mode="json"), event=event.kind.value)

            if _ends_stream(event):
                break
    finally:
        if subscription is not None:
            subscription.close()
        logger.debug(f"Progress stream closed for project {project_id}")


@router.post("/{project_id}/generate", status_code=202)
async def start_generation(
    project_id: str,
    supervisor: Annotated[GenerationSupervisor, Depends(get_generation_supervisor)],
    orchestrator: Annotated[GenerationOrchestrator, Depends(get_orchestrator)],
) -> JSONResponse:
    """Start generating the project's draft in the background."""
    context = await project_service.prepare_generation(
        project_id, run_active=supervisor.is_running(project_id)
    )

    supervisor.start(project_id, orchestrator.generate(context))

    return JSONResponse(
        status_code=202,
        content=success_response({
            "projectId": project_id,
            "status": ProjectStatus.GENERATING.value,
        }),
    )


@router.get("/{project_id}/generation-status")
async def generation_status(
    project_id: str,
    channel: Annotated[ProgressChannel, Depends(get_progress_channel)],
) -> StreamingResponse:
    """Stream generation progress events for a project."""
    await project_service.get_project(project_id)

    return StreamingResponse(
        stream_generation_events(channel, project_id, SSE_PING_INTERVAL_SECONDS),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
