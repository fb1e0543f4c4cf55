"""
Diagrams Router for VisualGenie

Diagram CRUD endpoints. Listing by project lives in the projects router.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from visualgenie.dependencies import PathId, get_storage
from visualgenie.storage import Storage
from visualgenie.schemas import Diagram, DiagramCreate, DiagramUpdate
from visualgenie.utils.logging_config import diagram_logger
from visualgenie.exceptions import DiagramNotFoundException

router = APIRouter(prefix="/api/diagrams", tags=["Diagrams"])


@router.post("", response_model=Diagram, status_code=status.HTTP_201_CREATED)
async def create_diagram(
    data: DiagramCreate,
    storage: Annotated[Storage, Depends(get_storage)]
):
    diagram = await storage.create_diagram(data)

    diagram_logger.info(
        "Diagram created",
        diagram_id=diagram.id,
        project_id=diagram.project_id,
        diagram_type=diagram.diagram_type.value,
    )
    return diagram


@router.get("/{diagram_id}", response_model=Diagram)
async def get_diagram(
    diagram_id: PathId,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Diagram detail.

    Raises:
        DiagramNotFoundException: Diagram does not exist
    """
    diagram = await storage.get_diagram(diagram_id)
    if not diagram:
        raise DiagramNotFoundException(diagram_id)
    return diagram


@router.patch("/{diagram_id}", response_model=Diagram)
async def update_diagram(
    diagram_id: PathId,
    data: DiagramUpdate,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Partial update, typically a re-render (code + imageData).

    Raises:
        DiagramNotFoundException: Diagram does not exist
    """
    diagram = await storage.update_diagram(diagram_id, data)
    if not diagram:
        raise DiagramNotFoundException(diagram_id)

    diagram_logger.info(
        "Diagram updated",
        diagram_id=diagram_id,
        fields=sorted(data.model_fields_set),
    )
    return diagram


@router.delete("/{diagram_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_diagram(
    diagram_id: PathId,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Delete a diagram.

    Raises:
        DiagramNotFoundException: Diagram does not exist
    """
    deleted = await storage.delete_diagram(diagram_id)
    if not deleted:
        raise DiagramNotFoundException(diagram_id)

    diagram_logger.info("Diagram deleted", diagram_id=diagram_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
