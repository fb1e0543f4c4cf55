from visualgenie.workflow.diagram_workflow import DiagramWorkflow, WorkflowState
from visualgenie.workflow.examples import DEFAULT_EXAMPLES, example_for
from visualgenie.workflow.preview import Preview, PreviewRegistry

__all__ = [
    "DiagramWorkflow", "WorkflowState",
    "DEFAULT_EXAMPLES", "example_for",
    "Preview", "PreviewRegistry",
]
