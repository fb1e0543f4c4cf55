from typing import Any, Optional

import httpx

from visualgenie.config import settings
from visualgenie.exceptions import (
    ApiRequestException,
    DiagramNotFoundException,
    NotFoundException,
    ValidationException,
)
from visualgenie.schemas import Diagram, DiagramCreate, DiagramUpdate
from visualgenie.utils.logging_config import workflow_logger


class DiagramApiClient:
    """
    Client side of the diagram HTTP API (/api/diagrams, /api/projects/{id}/diagrams).

    Used by the diagram workflow to persist and reload diagrams; it never
    talks to storage directly.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = client

    async def list_diagrams(self, project_id: int) -> list[Diagram]:
        response = await self._request("GET", f"/api/projects/{project_id}/diagrams")
        return [Diagram.model_validate(item) for item in response.json()]

    async def get_diagram(self, diagram_id: int) -> Diagram:
        response = await self._request("GET", f"/api/diagrams/{diagram_id}", resource_id=diagram_id)
        return Diagram.model_validate(response.json())

    async def create_diagram(self, data: DiagramCreate) -> Diagram:
        response = await self._request(
            "POST", "/api/diagrams", json=data.model_dump(mode="json", by_alias=True)
        )
        return Diagram.model_validate(response.json())

    async def update_diagram(self, diagram_id: int, data: DiagramUpdate) -> Diagram:
        response = await self._request(
            "PATCH",
            f"/api/diagrams/{diagram_id}",
            json=data.model_dump(mode="json", by_alias=True, exclude_unset=True),
            resource_id=diagram_id,
        )
        return Diagram.model_validate(response.json())

    async def delete_diagram(self, diagram_id: int) -> None:
        await self._request("DELETE", f"/api/diagrams/{diagram_id}", resource_id=diagram_id)

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        resource_id: Optional[int] = None,
    ) -> httpx.Response:
        """
        Send one request and map error statuses onto application exceptions.

        Raises:
            DiagramNotFoundException: 404 for a diagram id
            NotFoundException: 404 for anything else
            ValidationException: 400 / 422
            ApiRequestException: transport failure or any other error status
        """
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=json)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.request(method, url, json=json)
        except httpx.HTTPError as e:
            workflow_logger.warning("Diagram API unreachable: {} {} ({})", method, url, e)
            raise ApiRequestException("Diagram API is unreachable") from e

        if response.is_success:
            return response

        message = _error_message(response)
        if response.status_code == 404:
            if resource_id is not None and path.startswith("/api/diagrams"):
                raise DiagramNotFoundException(resource_id)
            raise NotFoundException("Resource")
        if response.status_code in (400, 422):
            raise ValidationException(message, details=_error_details(response))
        workflow_logger.warning("Diagram API {} {} failed with {}", method, path, response.status_code)
        raise ApiRequestException(message, status=response.status_code)


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response) -> str:
    return _error_body(response).get("message") or f"Request failed with status {response.status_code}"


def _error_details(response: httpx.Response) -> Optional[dict[str, Any]]:
    return _error_body(response).get("details")
