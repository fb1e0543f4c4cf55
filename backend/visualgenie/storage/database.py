from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from visualgenie import models
from visualgenie.database import build_sessionmaker, init_db, ping
from visualgenie.exceptions import DatabaseException
from visualgenie.schemas import (
    User, UserCreate,
    Project, ProjectCreate, ProjectUpdate,
    Diagram, DiagramCreate, DiagramUpdate,
)
from visualgenie.storage.base import Storage
from visualgenie.utils.logging_config import storage_logger


class DatabaseStorage(Storage):
    """
    Relational storage on an async SQLAlchemy engine.

    Every call runs in its own session. Ids come from the database's own
    primary key generation; data survives restarts and is shared by every
    process pointed at the same database.
    """

    kind = "database"

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._sessionmaker = build_sessionmaker(engine)

    async def initialize(self) -> None:
        try:
            await init_db(self._engine)
        except SQLAlchemyError as e:
            raise DatabaseException("Database initialization failed") from e

    async def close(self) -> None:
        await self._engine.dispose()
        storage_logger.info("Database engine disposed")

    async def health_check(self) -> dict[str, Any]:
        try:
            await ping(self._engine)
            connected = True
        except (SQLAlchemyError, OSError) as e:
            storage_logger.warning(f"Database health check failed: {e}")
            connected = False
        return {"backend": self.kind, "connected": connected}

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                storage_logger.error(
                    f"Storage operation failed: {operation}",
                    error_type=type(e).__name__,
                )
                raise DatabaseException(details={"operation": operation}) from e

    # ==================== Users ====================

    async def get_user(self, user_id: str) -> Optional[User]:
        async with self._session("get_user") as session:
            row = await session.get(models.User, user_id)
            return User.model_validate(row) if row else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self._session("get_user_by_username") as session:
            result = await session.execute(
                select(models.User).where(models.User.username == username).limit(1)
            )
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row else None

    async def create_user(self, data: UserCreate) -> User:
        async with self._session("create_user") as session:
            row = models.User(**data.model_dump())
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return User.model_validate(row)

    # ==================== Projects ====================

    async def get_all_projects(self) -> list[Project]:
        async with self._session("get_all_projects") as session:
            result = await session.execute(
                select(models.Project).order_by(
                    models.Project.created_at.desc(), models.Project.id.desc()
                )
            )
            return [Project.model_validate(row) for row in result.scalars().all()]

    async def get_project(self, project_id: int) -> Optional[Project]:
        async with self._session("get_project") as session:
            row = await session.get(models.Project, project_id)
            return Project.model_validate(row) if row else None

    async def create_project(self, data: ProjectCreate) -> Project:
        async with self._session("create_project") as session:
            row = models.Project(**data.model_dump(mode="json"))
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return Project.model_validate(row)

    async def update_project(self, project_id: int, data: ProjectUpdate) -> Optional[Project]:
        async with self._session("update_project") as session:
            row = await session.get(models.Project, project_id)
            if row is None:
                return None
            for field, value in data.model_dump(mode="json", exclude_unset=True).items():
                setattr(row, field, value)
            await session.commit()
            await session.refresh(row)
            return Project.model_validate(row)

    async def delete_project(self, project_id: int) -> bool:
        # Diagrams first, then the project, committed together
        async with self._session("delete_project") as session:
            await session.execute(
                delete(models.Diagram).where(models.Diagram.project_id == project_id)
            )
            result = await session.execute(
                delete(models.Project).where(models.Project.id == project_id)
            )
            if result.rowcount == 0:
                await session.rollback()
                return False
            await session.commit()
            return True

    # ==================== Diagrams ====================

    async def get_diagrams_by_project(self, project_id: int) -> list[Diagram]:
        async with self._session("get_diagrams_by_project") as session:
            result = await session.execute(
                select(models.Diagram)
                .where(models.Diagram.project_id == project_id)
                .order_by(models.Diagram.created_at.desc(), models.Diagram.id.desc())
            )
            return [Diagram.model_validate(row) for row in result.scalars().all()]

    async def get_diagram(self, diagram_id: int) -> Optional[Diagram]:
        async with self._session("get_diagram") as session:
            row = await session.get(models.Diagram, diagram_id)
            return Diagram.model_validate(row) if row else None

    async def create_diagram(self, data: DiagramCreate) -> Diagram:
        async with self._session("create_diagram") as session:
            row = models.Diagram(**data.model_dump(mode="json"))
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return Diagram.model_validate(row)

    async def update_diagram(self, diagram_id: int, data: DiagramUpdate) -> Optional[Diagram]:
        async with self._session("update_diagram") as session:
            row = await session.get(models.Diagram, diagram_id)
            if row is None:
                return None
            for field, value in data.model_dump(mode="json", exclude_unset=True).items():
                setattr(row, field, value)
            await session.commit()
            await session.refresh(row)
            return Diagram.model_validate(row)

    async def delete_diagram(self, diagram_id: int) -> bool:
        async with self._session("delete_diagram") as session:
            result = await session.execute(
                delete(models.Diagram).where(models.Diagram.id == diagram_id)
            )
            await session.commit()
            return result.rowcount > 0
