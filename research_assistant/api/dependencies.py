"""FastAPI dependencies for the shared generation components.

The progress channel, supervisor and model client are created once with
the app and stored on app.state; tests override these dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from research_assistant.llm import ModelClient
from research_assistant.services.generation_service import GenerationOrchestrator
from research_assistant.services.generation_tasks import GenerationSupervisor
from research_assistant.services.progress_channel import ProgressChannel


def get_progress_channel(request: Request) -> ProgressChannel:
    return request.app.state.progress_channel


def get_generation_supervisor(request: Request) -> GenerationSupervisor:
    return request.app.state.generation_supervisor


def get_model_client(request: Request) -> ModelClient:
    return request.app.state.model_client


def get_orchestrator(
    model_client: Annotated[ModelClient, Depends(get_model_client)],
    channel: Annotated[ProgressChannel, Depends(get_progress_channel)],
) -> GenerationOrchestrator:
    """Build an orchestrator publishing on the app's progress channel."""
    return GenerationOrchestrator(model_client, channel)
