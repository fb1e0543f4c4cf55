from visualgenie.schemas.common import CamelModel, MAX_ID, RecordId, utcnow
from visualgenie.schemas.user import User, UserCreate
from visualgenie.schemas.project import Project, ProjectCreate, ProjectUpdate
from visualgenie.schemas.diagram import (
    Diagram, DiagramCreate, DiagramUpdate, DiagramType, DiagramFormat
)

__all__ = [
    "CamelModel", "MAX_ID", "RecordId", "utcnow",
    "User", "UserCreate",
    "Project", "ProjectCreate", "ProjectUpdate",
    "Diagram", "DiagramCreate", "DiagramUpdate", "DiagramType", "DiagramFormat",
]
