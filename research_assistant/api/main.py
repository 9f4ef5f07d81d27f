"""FastAPI application setup."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from research_assistant.api.exceptions import (
    GenerationInProgressError,
    GenerationNotReadyError,
    ResourceNotFoundError,
    ValidationError,
)
from research_assistant.api.response import error_response
from research_assistant.api.routes import documents, drafts, generation, health, projects, templates
from research_assistant.db.mongo import close_database
from research_assistant.llm import ModelClient, ModelError
from research_assistant.services.generation_tasks import GenerationSupervisor
from research_assistant.services.progress_channel import ProgressChannel

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    yield
    # Shutdown
    await app.state.generation_supervisor.shutdown()
    await close_database()


app = FastAPI(
    title="Research Assistant API",
    description="Backend API for AI-assisted research report generation",
    version="1.0.0",
    lifespan=lifespan,
)

# Process-wide generation components
app.state.progress_channel = ProgressChannel()
app.state.generation_supervisor = GenerationSupervisor()
app.state.model_client = ModelClient()

# CORS middleware for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    """Handle missing projects, documents, templates and drafts."""
    return JSONResponse(
        status_code=404,
        content=error_response(exc.code, str(exc)),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=error_response("VALIDATION_ERROR", exc.message),
    )


@app.exception_handler(GenerationNotReadyError)
async def not_ready_handler(request: Request, exc: GenerationNotReadyError) -> JSONResponse:
    """Handle generation requests for incomplete projects."""
    return JSONResponse(
        status_code=400,
        content=error_response(
            "PROJECT_NOT_READY",
            "Project is not ready for generation",
            details={"issues": exc.issues},
        ),
    )


@app.exception_handler(GenerationInProgressError)
async def in_progress_handler(request: Request, exc: GenerationInProgressError) -> JSONResponse:
    """Handle overlapping generation requests."""
    return JSONResponse(
        status_code=409,
        content=error_response("GENERATION_IN_PROGRESS", str(exc)),
    )


@app.exception_handler(ServerSelectionTimeoutError)
async def mongo_timeout_handler(request: Request, exc: ServerSelectionTimeoutError) -> JSONResponse:
    """Handle MongoDB connection timeout."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database is not available. Please try again later."),
    )


@app.exception_handler(ConnectionFailure)
async def mongo_connection_handler(request: Request, exc: ConnectionFailure) -> JSONResponse:
    """Handle MongoDB connection failure."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database connection failed. Please try again later."),
    )


@app.exception_handler(ModelError)
async def model_error_handler(request: Request, exc: ModelError) -> JSONResponse:
    """Handle AI service errors."""
    logger.warning(f"AI service error: {exc}")
    return JSONResponse(
        status_code=503,
        content=error_response("AI_SERVICE_ERROR", "AI service is temporarily unavailable. Please try again."),
    )


# Register routes
app.include_router(health.router)
app.include_router(projects.router)
app.include_router(generation.router)
app.include_router(documents.router)
app.include_router(templates.router)
app.include_router(drafts.router)
