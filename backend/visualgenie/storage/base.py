"""
Storage contract shared by the in-memory and the relational backend.

Lookups by id return None (or False for deletes) when the record does not
exist. Backend faults raise DatabaseException instead, so callers can tell
"nothing there" apart from "something broke".
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from visualgenie.schemas import (
    User, UserCreate,
    Project, ProjectCreate, ProjectUpdate,
    Diagram, DiagramCreate, DiagramUpdate,
)


class Storage(ABC):
    #: Short backend name reported by the health endpoint
    kind: str = "abstract"

    async def initialize(self) -> None:
        """Prepare the backend (create tables, warm pools). Called once at startup."""

    async def close(self) -> None:
        """Release backend resources. Called once at shutdown."""

    async def health_check(self) -> dict[str, Any]:
        return {"backend": self.kind, "connected": True}

    # Users
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> User: ...

    # Projects
    @abstractmethod
    async def get_all_projects(self) -> list[Project]:
        """All projects, newest first."""

    @abstractmethod
    async def get_project(self, project_id: int) -> Optional[Project]: ...

    @abstractmethod
    async def create_project(self, data: ProjectCreate) -> Project: ...

    @abstractmethod
    async def update_project(self, project_id: int, data: ProjectUpdate) -> Optional[Project]:
        """Merge the supplied fields over the stored project."""

    @abstractmethod
    async def delete_project(self, project_id: int) -> bool:
        """Delete a project and every diagram that belongs to it."""

    # Diagrams
    @abstractmethod
    async def get_diagrams_by_project(self, project_id: int) -> list[Diagram]:
        """Diagrams of one project, newest first."""

    @abstractmethod
    async def get_diagram(self, diagram_id: int) -> Optional[Diagram]: ...

    @abstractmethod
    async def create_diagram(self, data: DiagramCreate) -> Diagram: ...

    @abstractmethod
    async def update_diagram(self, diagram_id: int, data: DiagramUpdate) -> Optional[Diagram]: ...

    @abstractmethod
    async def delete_diagram(self, diagram_id: int) -> bool: ...
