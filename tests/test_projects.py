"""Tests for project CRUD endpoints."""

from typing import Any

import pytest
from httpx import AsyncClient

MISSING_ID = "000000000000000000000000"


class TestCreateProject:
    """Tests for POST /projects endpoint."""

    @pytest.mark.asyncio
    async def test_create_project_success(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        """Test successful project creation."""
        response = await client.post("/projects", json=sample_project_data)

        assert response.status_code == 201
        json_data = response.json()

        # Check response envelope
        assert json_data["error"] is None
        assert json_data["data"] is not None

        project = json_data["data"]
        assert project["name"] == sample_project_data["name"]
        assert project["mode"] == "single"
        assert project["purpose"] == "summary"
        assert "id" in project
        assert "createdAt" in project

        # Check default values for empty fields
        assert project["status"] == "draft"
        assert project["templateId"] is None
        assert project["documentIds"] == []
        assert project["sectionMapping"] == []
        assert project["generationProgress"] is None

    @pytest.mark.asyncio
    async def test_create_project_with_mapping(
        self, client: AsyncClient, sample_section_mapping: list[dict[str, Any]]
    ) -> None:
        response = await client.post(
            "/projects",
            json={"name": "Mapped", "sectionMapping": sample_section_mapping},
        )

        assert response.status_code == 201
        mapping = response.json()["data"]["sectionMapping"]
        assert [s["templateSectionId"] for s in mapping] == ["sec-1", "sec-2"]
        assert mapping[0]["sourceMapping"]["sourceSections"] == ["abstract"]
        assert mapping[1]["targetLength"] is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"name": ""},
            {"name": "Bad mode", "mode": "triple"},
            {"name": "Bad purpose", "purpose": "poetry"},
            {"name": "Comparative single", "mode": "single", "purpose": "comparative"},
            {"name": "Review single", "purpose": "literature_review"},
            {"name": "Bad key", "sectionMapping": [{
                "templateSectionId": "s",
                "templateSectionTitle": "S",
                "sourceMapping": {"sourceSections": ["preface"]},
            }]},
            {"name": "Duplicate ids", "sectionMapping": [
                {"templateSectionId": "s", "templateSectionTitle": "One"},
                {"templateSectionId": "s", "templateSectionTitle": "Two"},
            ]},
            {},
        ],
    )
    async def test_create_project_validation_errors(
        self, client: AsyncClient, body: dict[str, Any]
    ) -> None:
        response = await client.post("/projects", json=body)

        assert response.status_code == 400
        json_data = response.json()
        assert json_data["data"] is None
        assert json_data["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_project_malformed_json(self, client: AsyncClient) -> None:
        response = await client.post(
            "/projects",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_project_body_not_object(self, client: AsyncClient) -> None:
        response = await client.post("/projects", json=["name"])

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestReadProjects:
    """Tests for GET /projects and GET /projects/{id}."""

    @pytest.mark.asyncio
    async def test_list_projects_empty(self, client: AsyncClient) -> None:
        response = await client.get("/projects")

        assert response.status_code == 200
        assert response.json() == {"data": [], "error": None}

    @pytest.mark.asyncio
    async def test_list_projects_summaries(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        await client.post("/projects", json=sample_project_data)

        response = await client.get("/projects")

        projects = response.json()["data"]
        assert len(projects) == 1
        assert set(projects[0]) == {"id", "name", "mode", "purpose", "status", "updatedAt"}

    @pytest.mark.asyncio
    async def test_get_project(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        created = (await client.post("/projects", json=sample_project_data)).json()["data"]

        response = await client.get(f"/projects/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_id", [MISSING_ID, "not-an-id"])
    async def test_get_project_not_found(self, client: AsyncClient, project_id: str) -> None:
        response = await client.get(f"/projects/{project_id}")

        assert response.status_code == 404
        json_data = response.json()
        assert json_data["data"] is None
        assert json_data["error"]["code"] == "PROJECT_NOT_FOUND"


class TestUpdateProject:
    """Tests for PATCH /projects/{id}."""

    @pytest.mark.asyncio
    async def test_partial_update(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        created = (await client.post("/projects", json=sample_project_data)).json()["data"]

        response = await client.patch(
            f"/projects/{created['id']}",
            json={"globalInstructions": "Write for policymakers"},
        )

        assert response.status_code == 200
        project = response.json()["data"]
        assert project["globalInstructions"] == "Write for policymakers"
        assert project["name"] == sample_project_data["name"]

    @pytest.mark.asyncio
    async def test_invalid_purpose_for_mode(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        created = (await client.post("/projects", json=sample_project_data)).json()["data"]

        response = await client.patch(
            f"/projects/{created['id']}", json={"purpose": "literature_review"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_update_not_found(self, client: AsyncClient) -> None:
        response = await client.patch(f"/projects/{MISSING_ID}", json={"name": "X"})

        assert response.status_code == 404


class TestDeleteProject:
    """Tests for DELETE /projects/{id}."""

    @pytest.mark.asyncio
    async def test_delete_project(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        created = (await client.post("/projects", json=sample_project_data)).json()["data"]

        response = await client.delete(f"/projects/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True}
        assert (await client.get(f"/projects/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_not_found(self, client: AsyncClient) -> None:
        response = await client.delete(f"/projects/{MISSING_ID}")

        assert response.status_code == 404


class TestReadiness:
    """Tests for GET /projects/{id}/readiness."""

    @pytest.mark.asyncio
    async def test_not_ready(
        self, client: AsyncClient, sample_project_data: dict[str, Any]
    ) -> None:
        created = (await client.post("/projects", json=sample_project_data)).json()["data"]

        response = await client.get(f"/projects/{created['id']}/readiness")

        assert response.status_code == 200
        readiness = response.json()["data"]
        assert readiness["ready"] is False
        assert "No template selected" in readiness["issues"]


class TestHealth:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"] == {"status": "ok"}
