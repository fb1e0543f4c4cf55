from visualgenie.services.render_client import RenderClient, RenderedImage
from visualgenie.services.api_client import DiagramApiClient

__all__ = ["RenderClient", "RenderedImage", "DiagramApiClient"]
