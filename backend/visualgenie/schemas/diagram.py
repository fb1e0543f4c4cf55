from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator

from visualgenie.schemas.common import CamelModel, NonBlankStr, Omittable, RecordId


class DiagramType(str, Enum):
    MERMAID = "mermaid"
    GRAPHVIZ = "graphviz"
    BPMN = "bpmn"
    EXCALIDRAW = "excalidraw"


class DiagramFormat(str, Enum):
    SVG = "svg"
    PNG = "png"


def require_data_uri(v: str) -> str:
    if not v.startswith("data:"):
        raise ValueError("must be a data URI")
    return v


ImageDataUri = Annotated[str, AfterValidator(require_data_uri)]


class DiagramCreate(CamelModel):
    project_id: RecordId
    name: NonBlankStr
    diagram_type: DiagramType
    format: DiagramFormat
    code: str
    image_data: ImageDataUri


class DiagramUpdate(CamelModel):
    """Partial update, including a fresh render (code + image_data)."""
    project_id: Omittable[RecordId] = None
    name: Omittable[NonBlankStr] = None
    diagram_type: Omittable[DiagramType] = None
    format: Omittable[DiagramFormat] = None
    code: Omittable[str] = None
    image_data: Omittable[ImageDataUri] = None


class Diagram(CamelModel):
    id: int
    project_id: int
    name: str
    diagram_type: DiagramType
    format: DiagramFormat
    code: str
    image_data: str
    created_at: datetime
