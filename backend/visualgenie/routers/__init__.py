from visualgenie.routers.projects import router as projects_router
from visualgenie.routers.diagrams import router as diagrams_router

__all__ = ["projects_router", "diagrams_router"]
