"""Services package for backend business logic."""

from . import document_service
from . import draft_service
from . import template_service
from . import project_service
from . import generation_service

from .generation_service import GenerationOrchestrator
from .generation_tasks import GenerationSupervisor
from .progress_channel import ProgressChannel, Subscription, SubscriptionClosedError

__all__ = [
    "document_service",
    "draft_service",
    "template_service",
    "project_service",
    "generation_service",
    "GenerationOrchestrator",
    "GenerationSupervisor",
    "ProgressChannel",
    "Subscription",
    "SubscriptionClosedError",
]
