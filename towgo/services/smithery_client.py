"""Client for the Smithery MCP server registry."""
import base64
import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from towgo.config import Settings, settings as default_settings
from towgo.models.smithery import ServerDetails, ServerListResponse

logger = logging.getLogger(__name__)

REGISTRY_URL = "https://registry.smithery.ai"
SERVER_URL = "https://server.smithery.ai"


class SmitheryError(Exception):
    """Registry unavailable or returned an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(error: httpx.HTTPStatusError) -> str:
    """The registry's error message, whatever shape the body has."""
    try:
        body = error.response.json()
    except ValueError:
        return error.response.text or str(error)
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return error.response.text or str(error)


class SmitheryClient:
    """HTTP client wrapper for the Smithery registry."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.api_key = settings.smithery_api_key
        self.timeout = settings.http_timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.is_configured:
            raise SmitheryError("Smithery API key not configured")

        try:
            async with httpx.AsyncClient(base_url=REGISTRY_URL, timeout=self.timeout) as client:
                response = await client.get(path, params=params, headers=self._headers())
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            message = _error_message(e)
            logger.error(f"Smithery API error ({e.response.status_code}): {message}")
            raise SmitheryError(f"Smithery API error: {message}", e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Failed to reach Smithery: {e}")
            raise SmitheryError(f"Failed to reach Smithery: {e}") from e
        except ValueError as e:
            logger.error(f"Smithery returned invalid JSON: {e}")
            raise SmitheryError("Smithery returned invalid JSON") from e

    async def list_servers(
        self,
        search_query: Optional[str] = None,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
        deployed_only: bool = False,
        page: int = 1,
        page_size: int = 10,
    ) -> ServerListResponse:
        """
        List registry servers.

        Filters are folded into the semantic search string the registry
        expects, e.g. "weather owner:acme is:deployed".
        """
        terms = []
        if search_query:
            terms.append(search_query)
        if owner:
            terms.append(f"owner:{owner}")
        if repo:
            terms.append(f"repo:{repo}")
        if deployed_only:
            terms.append("is:deployed")
        query = " ".join(terms).strip()

        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if query:
            params["q"] = query

        logger.info(f"Listing Smithery servers with query: '{query}'")
        data = await self._get("/servers", params=params)
        try:
            servers = ServerListResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected Smithery server list: {e}")
            raise SmitheryError("Unexpected response from Smithery") from e
        logger.info(
            f"Smithery returned {len(servers.servers)} servers "
            f"(page {servers.pagination.current_page} of {servers.pagination.total_pages})"
        )
        return servers

    async def get_server(self, qualified_name: str) -> ServerDetails:
        """Details of one server, including its connection options."""
        logger.info(f"Getting Smithery server details for: {qualified_name}")
        data = await self._get(f"/servers/{qualified_name}")
        try:
            return ServerDetails.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected Smithery details for {qualified_name}: {e}")
            raise SmitheryError("Unexpected response from Smithery") from e


def websocket_url(qualified_name: str, config: Dict[str, Any]) -> str:
    """WebSocket URL for a server, with its config base64-encoded in the query."""
    encoded = base64.b64encode(json.dumps(config).encode("utf-8")).decode("ascii")
    return f"{SERVER_URL}/{qualified_name}/ws?config={encoded}"


# Global instance
smithery_client = SmitheryClient()
