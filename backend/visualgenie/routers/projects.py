"""
Projects Router for VisualGenie

Project CRUD endpoints and the per-project diagram listing.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status
from visualgenie.dependencies import PathId, get_storage
from visualgenie.storage import Storage
from visualgenie.schemas import Project, ProjectCreate, ProjectUpdate, Diagram
from visualgenie.utils.logging_config import project_logger
from visualgenie.exceptions import ProjectNotFoundException

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=list[Project])
async def list_projects(storage: Annotated[Storage, Depends(get_storage)]):
    """All projects, newest first"""
    return await storage.get_all_projects()


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: PathId,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Project detail.

    Raises:
        ProjectNotFoundException: Project does not exist
    """
    project = await storage.get_project(project_id)
    if not project:
        raise ProjectNotFoundException(project_id)
    return project


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    storage: Annotated[Storage, Depends(get_storage)]
):
    project = await storage.create_project(data)
    project_logger.info(
        "Project created",
        project_id=project.id,
        project_name=project.name,
    )
    return project


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: PathId,
    data: ProjectUpdate,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Partial update; omitted fields are left as they are.

    Raises:
        ProjectNotFoundException: Project does not exist
    """
    project = await storage.update_project(project_id, data)
    if not project:
        raise ProjectNotFoundException(project_id)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: PathId,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """
    Delete a project together with its diagrams.

    Raises:
        ProjectNotFoundException: Project does not exist
    """
    deleted = await storage.delete_project(project_id)
    if not deleted:
        raise ProjectNotFoundException(project_id)

    project_logger.info("Project deleted", project_id=project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/diagrams", response_model=list[Diagram])
async def list_project_diagrams(
    project_id: PathId,
    storage: Annotated[Storage, Depends(get_storage)]
):
    """Diagrams of a project, newest first. Unknown projects yield an empty list."""
    return await storage.get_diagrams_by_project(project_id)
