"""API routes package."""

from . import documents, drafts, generation, health, projects, templates

__all__ = ["documents", "drafts", "generation", "health", "projects", "templates"]
