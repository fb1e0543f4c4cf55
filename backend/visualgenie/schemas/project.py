from datetime import datetime
from typing import Optional

from visualgenie.schemas.common import CamelModel, NonBlankStr, Omittable


class ProjectCreate(CamelModel):
    name: NonBlankStr
    description: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Partial update; only the supplied fields are merged."""
    name: Omittable[NonBlankStr] = None
    description: Optional[str] = None


class Project(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
