import uuid
from typing import Optional

from visualgenie.schemas import (
    User, UserCreate,
    Project, ProjectCreate, ProjectUpdate,
    Diagram, DiagramCreate, DiagramUpdate,
    utcnow,
)
from visualgenie.storage.base import Storage


def _newest_first(records):
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class MemoryStorage(Storage):
    """
    Process-local storage.

    Records live in dicts keyed by id and are lost when the process exits.
    Ids come from counters starting at 1 and are never reused.
    """

    kind = "memory"

    def __init__(self):
        self._users: dict[str, User] = {}
        self._projects: dict[int, Project] = {}
        self._diagrams: dict[int, Diagram] = {}
        self._next_project_id = 1
        self._next_diagram_id = 1

    # ==================== Users ====================

    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.username == username), None)

    async def create_user(self, data: UserCreate) -> User:
        user = User(id=str(uuid.uuid4()), **data.model_dump())
        self._users[user.id] = user
        return user

    # ==================== Projects ====================

    async def get_all_projects(self) -> list[Project]:
        return _newest_first(self._projects.values())

    async def get_project(self, project_id: int) -> Optional[Project]:
        return self._projects.get(project_id)

    async def create_project(self, data: ProjectCreate) -> Project:
        project = Project(id=self._next_project_id, created_at=utcnow(), **data.model_dump())
        self._next_project_id += 1
        self._projects[project.id] = project
        return project

    async def update_project(self, project_id: int, data: ProjectUpdate) -> Optional[Project]:
        project = self._projects.get(project_id)
        if project is None:
            return None
        updated = project.model_copy(update=data.model_dump(exclude_unset=True))
        self._projects[project_id] = updated
        return updated

    async def delete_project(self, project_id: int) -> bool:
        if self._projects.pop(project_id, None) is None:
            return False
        owned = [d.id for d in self._diagrams.values() if d.project_id == project_id]
        for diagram_id in owned:
            del self._diagrams[diagram_id]
        return True

    # ==================== Diagrams ====================

    async def get_diagrams_by_project(self, project_id: int) -> list[Diagram]:
        return _newest_first(d for d in self._diagrams.values() if d.project_id == project_id)

    async def get_diagram(self, diagram_id: int) -> Optional[Diagram]:
        return self._diagrams.get(diagram_id)

    async def create_diagram(self, data: DiagramCreate) -> Diagram:
        diagram = Diagram(id=self._next_diagram_id, created_at=utcnow(), **data.model_dump())
        self._next_diagram_id += 1
        self._diagrams[diagram.id] = diagram
        return diagram

    async def update_diagram(self, diagram_id: int, data: DiagramUpdate) -> Optional[Diagram]:
        diagram = self._diagrams.get(diagram_id)
        if diagram is None:
            return None
        updated = diagram.model_copy(update=data.model_dump(exclude_unset=True))
        self._diagrams[diagram_id] = updated
        return updated

    async def delete_diagram(self, diagram_id: int) -> bool:
        return self._diagrams.pop(diagram_id, None) is not None
