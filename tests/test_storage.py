"""
Storage contract tests.

Every test runs against MemoryStorage and DatabaseStorage (SQLite in memory)
through the parametrised `storage` fixture, so both backends are held to the
same observable behaviour: ordering, cascade delete and partial merges.
Fault handling is checked on the relational backend only.
"""

import asyncio

import httpx
import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from visualgenie.exceptions import DatabaseException
from visualgenie.main import create_app
from visualgenie.schemas import (
    DiagramType,
    DiagramUpdate,
    ProjectCreate,
    ProjectUpdate,
    UserCreate,
)

from conftest import make_database_storage, make_sqlite_engine


class TestProjects:
    @pytest.mark.asyncio
    async def test_create_then_get_returns_equal_record(self, storage, project_payload):
        project = await storage.create_project(project_payload)

        assert project.id >= 1
        assert project.name == "Demo"
        assert project.description is None
        assert await storage.get_project(project.id) == project

    @pytest.mark.asyncio
    async def test_ids_are_assigned_and_not_reused(self, storage):
        first = await storage.create_project(ProjectCreate(name="one"))
        assert await storage.delete_project(first.id) is True
        second = await storage.create_project(ProjectCreate(name="two"))

        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_get_missing_project_returns_none(self, storage):
        assert await storage.get_project(999) is None

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, storage):
        older = await storage.create_project(ProjectCreate(name="older"))
        await asyncio.sleep(0.01)
        newer = await storage.create_project(ProjectCreate(name="newer"))

        projects = await storage.get_all_projects()

        assert [p.id for p in projects] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_list_order_is_stable_for_equal_timestamps(self, storage):
        for i in range(5):
            await storage.create_project(ProjectCreate(name=f"p{i}"))

        first = [p.id for p in await storage.get_all_projects()]
        second = [p.id for p in await storage.get_all_projects()]

        assert first == second
        assert first == sorted(first, reverse=True)

    @pytest.mark.asyncio
    async def test_partial_update_changes_only_supplied_fields(self, storage, project_payload):
        project = await storage.create_project(project_payload)

        updated = await storage.update_project(project.id, ProjectUpdate(description="x"))

        assert updated.description == "x"
        assert updated.name == project.name
        assert updated.created_at == project.created_at
        assert updated.id == project.id
        assert await storage.get_project(project.id) == updated

    @pytest.mark.asyncio
    async def test_update_can_clear_description(self, storage):
        project = await storage.create_project(ProjectCreate(name="p", description="d"))

        updated = await storage.update_project(project.id, ProjectUpdate(description=None))

        assert updated.description is None
        assert updated.name == "p"

    @pytest.mark.asyncio
    async def test_update_missing_project_returns_none(self, storage):
        assert await storage.update_project(42, ProjectUpdate(name="x")) is None

    @pytest.mark.asyncio
    async def test_delete_missing_project_returns_false(self, storage):
        assert await storage.delete_project(42) is False

    @pytest.mark.asyncio
    async def test_delete_cascades_to_diagrams(self, storage, diagram_payload):
        project = await storage.create_project(ProjectCreate(name="doomed"))
        other = await storage.create_project(ProjectCreate(name="kept"))
        owned = [
            await storage.create_diagram(diagram_payload(project.id, name=f"d{i}"))
            for i in range(3)
        ]
        survivor = await storage.create_diagram(diagram_payload(other.id))

        assert await storage.delete_project(project.id) is True

        assert await storage.get_project(project.id) is None
        assert await storage.get_diagrams_by_project(project.id) == []
        for diagram in owned:
            assert await storage.get_diagram(diagram.id) is None
        assert await storage.get_diagram(survivor.id) == survivor


class TestDiagrams:
    @pytest.mark.asyncio
    async def test_create_and_get(self, storage, diagram_payload):
        project = await storage.create_project(ProjectCreate(name="p"))

        diagram = await storage.create_diagram(diagram_payload(project.id))

        assert diagram.project_id == project.id
        assert diagram.diagram_type is DiagramType.MERMAID
        assert diagram.image_data.startswith("data:")
        assert await storage.get_diagram(diagram.id) == diagram

    @pytest.mark.asyncio
    async def test_list_by_project_filters_and_orders(self, storage, diagram_payload):
        a = await storage.create_project(ProjectCreate(name="a"))
        b = await storage.create_project(ProjectCreate(name="b"))
        first = await storage.create_diagram(diagram_payload(a.id, name="first"))
        await storage.create_diagram(diagram_payload(b.id, name="elsewhere"))
        await asyncio.sleep(0.01)
        second = await storage.create_diagram(diagram_payload(a.id, name="second"))

        diagrams = await storage.get_diagrams_by_project(a.id)

        assert [d.id for d in diagrams] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_list_for_unknown_project_is_empty(self, storage):
        assert await storage.get_diagrams_by_project(123) == []

    @pytest.mark.asyncio
    async def test_partial_update_keeps_identity(self, storage, diagram_payload):
        project = await storage.create_project(ProjectCreate(name="p"))
        diagram = await storage.create_diagram(diagram_payload(project.id))

        updated = await storage.update_diagram(diagram.id, DiagramUpdate(code="new code"))

        assert updated.code == "new code"
        assert updated.id == diagram.id
        assert updated.created_at == diagram.created_at
        assert updated.project_id == diagram.project_id
        assert updated.name == diagram.name
        assert updated.image_data == diagram.image_data

    @pytest.mark.asyncio
    async def test_full_update_overwrites_render(self, storage, diagram_payload):
        project = await storage.create_project(ProjectCreate(name="p"))
        diagram = await storage.create_diagram(diagram_payload(project.id))

        updated = await storage.update_diagram(
            diagram.id,
            DiagramUpdate(
                name="Renamed",
                diagram_type="graphviz",
                format="png",
                code="digraph G { A -> B; }",
                image_data="data:image/png;base64,iVBORw0KGgo=",
            ),
        )

        assert updated.diagram_type is DiagramType.GRAPHVIZ
        assert updated.format.value == "png"
        assert updated.image_data.startswith("data:image/png")
        assert await storage.get_diagram(diagram.id) == updated

    @pytest.mark.asyncio
    async def test_update_missing_diagram_returns_none(self, storage):
        assert await storage.update_diagram(7, DiagramUpdate(code="x")) is None

    @pytest.mark.asyncio
    async def test_delete_diagram(self, storage, diagram_payload):
        project = await storage.create_project(ProjectCreate(name="p"))
        diagram = await storage.create_diagram(diagram_payload(project.id))

        assert await storage.delete_diagram(diagram.id) is True
        assert await storage.get_diagram(diagram.id) is None
        assert await storage.delete_diagram(diagram.id) is False
        assert await storage.get_project(project.id) is not None


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_and_lookup(self, storage):
        user = await storage.create_user(UserCreate(username="ada", password="secret"))

        assert user.id
        assert await storage.get_user(user.id) == user
        assert await storage.get_user_by_username("ada") == user
        assert await storage.get_user_by_username("bob") is None
        assert await storage.get_user("missing") is None


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_health_check_reports_backend(self, storage):
        health = await storage.health_check()

        assert health["backend"] == storage.kind
        assert health["connected"] is True


@pytest.fixture
async def broken_storage():
    """DatabaseStorage whose diagrams table has gone away underneath it."""
    engine = make_sqlite_engine()
    db_storage = await make_database_storage(engine)
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE diagrams"))
    yield db_storage
    await db_storage.close()


class TestDatabaseFaults:
    @pytest.mark.asyncio
    async def test_driver_error_becomes_database_exception(self, broken_storage):
        with pytest.raises(DatabaseException) as exc_info:
            await broken_storage.get_diagram(1)

        assert exc_info.value.details == {"operation": "get_diagram"}
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
        assert "no such table" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fault_is_not_reported_as_absence(self, broken_storage):
        project = await broken_storage.create_project(ProjectCreate(name="p"))

        with pytest.raises(DatabaseException):
            await broken_storage.delete_project(project.id)
        assert await broken_storage.get_project(project.id) == project

    @pytest.mark.asyncio
    async def test_http_response_hides_driver_text(self, broken_storage):
        app = create_app(storage=broken_storage)
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/api/diagrams/1")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "DB_001"
        assert body["message"] == "Database error"
        assert "no such table" not in response.text
        assert "diagrams" not in body["message"]
