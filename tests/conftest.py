"""Pytest fixtures for testing."""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from research_assistant.api.main import app
from research_assistant.db import mongo


@pytest_asyncio.fixture
async def mock_db() -> AsyncGenerator[Any, None]:
    """Provide a mock MongoDB database for testing."""
    # Create mock client
    mock_client = AsyncMongoMockClient()
    mock_database = mock_client[mongo.DATABASE_NAME]

    # Replace the real client with mock
    mongo.set_client(mock_client)

    yield mock_database

    # Cleanup
    mongo.set_client(None)


@pytest_asyncio.fixture
async def client(mock_db: Any) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sample_project_data() -> dict[str, Any]:
    """Sample project data for testing."""
    return {
        "name": "Test Project",
        "mode": "single",
        "purpose": "summary",
    }


@pytest.fixture
def sample_section_mapping() -> list[dict[str, Any]]:
    """Two mapped sections drawing on abstract and methods."""
    return [
        {
            "templateSectionId": "sec-1",
            "templateSectionTitle": "Overview",
            "sourceMapping": {"sourceSections": ["abstract"], "sourceDocuments": ["all"]},
            "instructions": "Keep it accessible",
            "targetLength": "short",
        },
        {
            "templateSectionId": "sec-2",
            "templateSectionTitle": "Approach",
            "sourceMapping": {"sourceSections": ["methods"], "sourceDocuments": ["all"]},
        },
    ]


@pytest.fixture
def sample_document_data() -> dict[str, Any]:
    """Extractor output for a short paper."""
    return {
        "filename": "paper.pdf",
        "extractedContent": {
            "fullText": "Full text of the paper. " * 20,
            "pageCount": 8,
            "sections": {
                "abstract": {
                    "text": "We study the effect of sleep on memory consolidation in adults. " * 5,
                    "headings": ["Abstract"],
                },
                "methods": {
                    "text": "Participants completed a word-pair task before and after sleep. " * 5,
                    "headings": ["Methods"],
                },
            },
            "metadata": {"title": "Sleep and Memory", "authors": ["A. Author", "B. Author"]},
        },
        "references": [
            {
                "id": "r1",
                "authors": ["Walker, M."],
                "title": "Why We Sleep",
                "year": 2017,
                "doi": "10.1000/sleep",
            },
        ],
    }


@pytest.fixture
def sample_template_data() -> dict[str, Any]:
    """Template with the two sections of sample_section_mapping."""
    return {
        "name": "Short report",
        "sections": [
            {"id": "sec-1", "title": "Overview"},
            {"id": "sec-2", "title": "Approach"},
        ],
    }
