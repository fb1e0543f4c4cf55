"""
Diagram Workflow

Client-side state machine for one diagram editor. It keeps the draft code,
the current preview image and the identity of the stored diagram in sync
while talking to the rendering service and the diagram API.

States:
    BLANK     no code, no image
    DRAFTING  code edited, nothing rendered yet
    RENDERED  preview present, not yet stored (may be stale against the code)
    VIEWING   hydrated from a stored diagram; read-only
    EDITING   hydrated from a stored diagram; code may have diverged

A failed render raises RenderException and leaves every field untouched,
so the user can retry without losing the draft.
"""
import time
from enum import Enum
from typing import Optional

from visualgenie.exceptions import (
    MissingFieldException,
    RenderInProgressException,
    WorkflowException,
)
from visualgenie.schemas import (
    Diagram,
    DiagramCreate,
    DiagramFormat,
    DiagramType,
    DiagramUpdate,
)
from visualgenie.services.api_client import DiagramApiClient
from visualgenie.services.render_client import RenderClient
from visualgenie.utils.logging_config import workflow_logger
from visualgenie.workflow.examples import example_for
from visualgenie.workflow.preview import Preview, PreviewRegistry


ZOOM_MIN = 25
ZOOM_MAX = 300
ZOOM_STEP = 25
ZOOM_DEFAULT = 100


class WorkflowState(str, Enum):
    BLANK = "blank"
    DRAFTING = "drafting"
    RENDERED = "rendered"
    VIEWING = "viewing"
    EDITING = "editing"


class DiagramWorkflow:
    def __init__(
        self,
        project_id: int,
        render_client: RenderClient,
        api_client: DiagramApiClient,
        previews: Optional[PreviewRegistry] = None,
    ):
        self.project_id = project_id
        self.render_client = render_client
        self.api_client = api_client
        self.previews = previews or PreviewRegistry()

        self.state = WorkflowState.BLANK
        self.diagram_type = DiagramType.MERMAID
        self.format = DiagramFormat.SVG
        self.code = ""
        self.name = ""
        self.preview: Optional[Preview] = None
        self.preview_stale = False
        self.selected: Optional[Diagram] = None
        self.zoom = ZOOM_DEFAULT
        self.is_rendering = False
        self._closed = False
        # Bumped whenever the draft is discarded; in-flight renders of an older draft are dropped
        self._generation = 0

    # ==================== Derived flags ====================

    @property
    def can_render(self) -> bool:
        return (
            not self.is_rendering
            and self.state != WorkflowState.VIEWING
            and bool(self.code.strip())
        )

    @property
    def can_save(self) -> bool:
        return (
            self.state == WorkflowState.RENDERED
            and self.preview is not None
            and not self.preview_stale
            and not self.is_rendering
        )

    @property
    def can_update(self) -> bool:
        return self.state == WorkflowState.EDITING and self.selected is not None and not self.is_rendering

    # ==================== Draft editing ====================

    def edit_code(self, code: str) -> None:
        self._require_editable("edit the code")
        self.code = code
        if self.state == WorkflowState.BLANK:
            self.state = WorkflowState.DRAFTING
        elif self.preview is not None:
            self.preview_stale = True

    def set_name(self, name: str) -> None:
        self.name = name

    def set_format(self, fmt: DiagramFormat) -> None:
        self._require_editable("change the format")
        fmt = DiagramFormat(fmt)
        if fmt == self.format:
            return
        self.format = fmt
        if self.preview is not None:
            self.preview_stale = True

    def change_diagram_type(self, diagram_type: DiagramType) -> None:
        """Switch dialect: code is replaced by the dialect's example and the preview dropped."""
        self._require_editable("change the diagram type")
        self.diagram_type = DiagramType(diagram_type)
        self.code = example_for(self.diagram_type)
        self._generation += 1
        self._set_preview(None)
        self.state = WorkflowState.EDITING if self.selected is not None else WorkflowState.DRAFTING
        workflow_logger.debug(f"Diagram type switched to {self.diagram_type.value}")

    # ==================== Rendering ====================

    async def render(self) -> Optional[Preview]:
        """
        Render the current code into a new preview.

        Returns the preview, or None if the draft was discarded (selection,
        type switch, reset, close) while the render was in flight.

        Raises:
            RenderInProgressException: Another render is still running
            WorkflowException: Current state is VIEWING
            MissingFieldException: Code is empty
            RenderException: Rendering service failed; state is unchanged
        """
        if self.is_rendering:
            raise RenderInProgressException()
        self._require_editable("render")
        if not self.code.strip():
            raise MissingFieldException("code")

        request = (self.diagram_type, self.format, self.code)
        generation = self._generation
        self.is_rendering = True
        try:
            image = await self.render_client.render(*request)
        finally:
            self.is_rendering = False

        preview = self.previews.create(image)
        if generation != self._generation:
            preview.release()
            return None

        self._set_preview(preview)
        self.preview_stale = request != (self.diagram_type, self.format, self.code)
        if self.state != WorkflowState.EDITING:
            self.state = WorkflowState.RENDERED
        return preview

    # ==================== Persistence ====================

    async def save(self, name: Optional[str] = None) -> Diagram:
        """
        Store the rendered preview as a new diagram and switch to VIEWING it.

        Raises:
            WorkflowException: Nothing rendered, or the preview is stale
            MissingFieldException: Name is empty
        """
        if name is not None:
            self.set_name(name)
        if self.state != WorkflowState.RENDERED or self.preview is None:
            raise WorkflowException("Please generate a diagram first")
        if self.preview_stale:
            raise WorkflowException("The preview is out of date, generate the diagram again")
        if not self.name.strip():
            raise MissingFieldException("name")

        diagram = await self.api_client.create_diagram(
            DiagramCreate(
                project_id=self.project_id,
                name=self.name,
                diagram_type=self.diagram_type,
                format=self.format,
                code=self.code,
                image_data=self.preview.data_uri(),
            )
        )
        workflow_logger.info(f"Diagram {diagram.id} saved to project {self.project_id}")
        self._hydrate(diagram)
        self.state = WorkflowState.VIEWING
        return diagram

    def select(self, diagram: Diagram) -> None:
        """Show a stored diagram. Unsaved draft state is discarded."""
        self._hydrate(diagram)
        self.state = WorkflowState.VIEWING

    def start_edit(self, diagram: Optional[Diagram] = None) -> None:
        """Enter edit mode on the given diagram, or on the one being viewed."""
        if diagram is not None:
            self._hydrate(diagram)
        elif self.selected is None:
            raise WorkflowException("Select a diagram to edit")
        self.state = WorkflowState.EDITING

    async def update(self) -> Diagram:
        """
        Re-render the current code and overwrite the stored diagram (same id).

        Stays in EDITING so the user can keep working.

        Raises:
            RenderInProgressException: A render is still running
            WorkflowException: Not in EDITING
            MissingFieldException: Name is empty
            RenderException: Rendering failed; nothing is written
        """
        if self.is_rendering:
            raise RenderInProgressException()
        if not self.can_update:
            raise WorkflowException("Enter edit mode before updating a diagram")
        if not self.name.strip():
            raise MissingFieldException("name")

        target_id = self.selected.id
        preview = await self.render()
        if preview is None or self.preview_stale or self.selected is None or self.selected.id != target_id:
            raise WorkflowException("The diagram changed while rendering, update again")

        diagram = await self.api_client.update_diagram(
            target_id,
            DiagramUpdate(
                name=self.name,
                diagram_type=self.diagram_type,
                format=self.format,
                code=self.code,
                image_data=preview.data_uri(),
            ),
        )
        workflow_logger.info(f"Diagram {diagram.id} updated")
        self.selected = diagram
        return diagram

    async def delete_diagram(self, diagram_id: int) -> None:
        """Delete a stored diagram; if it is the one on screen, keep its content as a draft."""
        await self.api_client.delete_diagram(diagram_id)
        if self.selected is not None and self.selected.id == diagram_id:
            self.selected = None
            if self.preview is not None:
                self.state = WorkflowState.RENDERED
            elif self.code:
                self.state = WorkflowState.DRAFTING
            else:
                self.state = WorkflowState.BLANK

    def new_diagram(self) -> None:
        """Start over with an empty draft."""
        self._generation += 1
        self._set_preview(None)
        self.selected = None
        self.diagram_type = DiagramType.MERMAID
        self.format = DiagramFormat.SVG
        self.code = ""
        self.name = ""
        self.state = WorkflowState.BLANK

    # ==================== Zoom ====================

    def zoom_in(self) -> int:
        self.zoom = min(self.zoom + ZOOM_STEP, ZOOM_MAX)
        return self.zoom

    def zoom_out(self) -> int:
        self.zoom = max(self.zoom - ZOOM_STEP, ZOOM_MIN)
        return self.zoom

    def reset_zoom(self) -> int:
        self.zoom = ZOOM_DEFAULT
        return self.zoom

    # ==================== Export / teardown ====================

    def export_preview(self) -> tuple[str, bytes]:
        """File name and bytes for downloading the current preview."""
        if self.preview is None:
            raise WorkflowException("Nothing to download")
        return f"diagram-{int(time.time() * 1000)}.{self.format.value}", self.preview.content

    def close(self) -> None:
        self._generation += 1
        self._set_preview(None)
        self._closed = True

    # ==================== Internals ====================

    def _require_editable(self, action: str) -> None:
        if self._closed:
            raise WorkflowException("Workflow is closed")
        if self.state == WorkflowState.VIEWING:
            raise WorkflowException(f"Switch to edit mode to {action}")

    def _set_preview(self, preview: Optional[Preview]) -> None:
        if self.preview is not None and self.preview is not preview:
            self.preview.release()
        self.preview = preview
        self.preview_stale = False
        if preview is not None:
            self.zoom = ZOOM_DEFAULT

    def _hydrate(self, diagram: Diagram) -> None:
        self._generation += 1
        self._set_preview(self.previews.hydrate(diagram.image_data))
        self.selected = diagram
        self.diagram_type = diagram.diagram_type
        self.format = diagram.format
        self.code = diagram.code
        self.name = diagram.name
