from visualgenie.models.user import User
from visualgenie.models.project import Project
from visualgenie.models.diagram import Diagram

__all__ = ["User", "Project", "Diagram"]
