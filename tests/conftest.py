"""
Shared fixtures for the VisualGenie test suite.

Provides: both storage backends (parametrised), ASGI-backed HTTP clients,
a scriptable fake rendering service.
"""

import os

# Settings are read at import time
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.pop("DATABASE_URL", None)

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from visualgenie.main import create_app
from visualgenie.schemas import DiagramCreate, ProjectCreate
from visualgenie.services import DiagramApiClient, RenderClient
from visualgenie.storage import DatabaseStorage, MemoryStorage

SVG_BYTES = b'<svg xmlns="http://www.w3.org/2000/svg"><rect width="10" height="10"/></svg>'
DATA_URI = "data:image/svg+xml;base64,PHN2Zz48L3N2Zz4="


def make_sqlite_engine():
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


async def make_database_storage(engine=None) -> DatabaseStorage:
    storage = DatabaseStorage(engine or make_sqlite_engine())
    await storage.initialize()
    return storage


@pytest.fixture(params=["memory", "database"])
async def storage(request):
    """Every storage contract test runs against both backends."""
    if request.param == "memory":
        yield MemoryStorage()
    else:
        db_storage = await make_database_storage()
        yield db_storage
        await db_storage.close()


@pytest.fixture
async def api(storage):
    """HTTP client bound to an app serving the parametrised storage."""
    app = create_app(storage=storage)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def project_payload() -> ProjectCreate:
    return ProjectCreate(name="Demo")


@pytest.fixture
def diagram_payload():
    """Factory for valid diagram insert payloads."""

    def make(project_id: int, **overrides) -> DiagramCreate:
        fields = {
            "project_id": project_id,
            "name": "Flow",
            "diagram_type": "mermaid",
            "format": "svg",
            "code": "sequenceDiagram\n    Alice->>Bob: Hi",
            "image_data": DATA_URI,
        }
        fields.update(overrides)
        return DiagramCreate(**fields)

    return make


class FakeRenderService:
    """
    Scriptable stand-in for the rendering service.

    Records every request; answers with SVG bytes unless told to fail.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.unreachable = False
        self.gate = None  # asyncio.Event holding responses back when set

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="render error")
        return httpx.Response(
            200, content=SVG_BYTES, headers={"content-type": "image/svg+xml"}
        )


@pytest.fixture
def render_service() -> FakeRenderService:
    return FakeRenderService()


@pytest.fixture
async def render_client(render_service):
    async with httpx.AsyncClient(transport=httpx.MockTransport(render_service)) as client:
        yield RenderClient(base_url="http://render.test", client=client)


@pytest.fixture
async def api_client():
    """Diagram API client talking to an in-memory app; exposes the storage as .storage."""
    storage = MemoryStorage()
    app = create_app(storage=storage)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        api_client = DiagramApiClient(base_url="http://test", client=client)
        api_client.storage = storage
        yield api_client
