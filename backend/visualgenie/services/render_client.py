from dataclasses import dataclass
from typing import Optional

import httpx

from visualgenie.config import settings
from visualgenie.exceptions import RenderException
from visualgenie.schemas import DiagramFormat, DiagramType
from visualgenie.utils.data_uri import encode_data_uri
from visualgenie.utils.logging_config import render_logger


MEDIA_TYPES = {
    DiagramFormat.SVG: "image/svg+xml",
    DiagramFormat.PNG: "image/png",
}


@dataclass(frozen=True)
class RenderedImage:
    content: bytes
    media_type: str

    def to_data_uri(self) -> str:
        return encode_data_uri(self.content, self.media_type)


class RenderClient:
    """
    Client for the external rendering service.

    POST {base_url}/{diagram_type}/{format} with the diagram source as a
    text/plain body; a 2xx response carries the image bytes.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.RENDER_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.RENDER_TIMEOUT
        self._client = client

    async def render(
        self,
        diagram_type: DiagramType,
        fmt: DiagramFormat,
        code: str,
    ) -> RenderedImage:
        """
        Render diagram source.

        Raises:
            RenderException: Non-2xx response or the service is unreachable
        """
        diagram_type = DiagramType(diagram_type)
        fmt = DiagramFormat(fmt)
        url = f"{self.base_url}/{diagram_type.value}/{fmt.value}"
        try:
            if self._client is not None:
                response = await self._post(self._client, url, code)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, url, code)
        except httpx.HTTPError as e:
            render_logger.warning("Rendering service unreachable at {}: {}", url, e)
            raise RenderException("Rendering service is unreachable") from e

        if not response.is_success:
            render_logger.warning("Rendering failed at {} with status {}", url, response.status_code)
            raise RenderException(
                f"Failed to generate diagram: {response.reason_phrase or response.status_code}",
                status=response.status_code,
            )

        media_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not media_type.startswith("image/"):
            media_type = MEDIA_TYPES[fmt]
        render_logger.debug(f"Rendered {diagram_type.value}/{fmt.value} ({len(response.content)} bytes)")
        return RenderedImage(content=response.content, media_type=media_type)

    async def _post(self, client: httpx.AsyncClient, url: str, code: str) -> httpx.Response:
        return await client.post(
            url,
            content=code.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
            timeout=self.timeout,
        )
