"""Smithery registry proxy routes."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from towgo.dependencies import get_smithery_client
from towgo.models.smithery import ServerDetails, ServerListResponse, WebSocketUrlResponse
from towgo.services.smithery_client import SmitheryClient, SmitheryError, websocket_url

router = APIRouter(prefix="/smithery", tags=["smithery"])


def _raise_for(client: SmitheryClient, exc: SmitheryError) -> None:
    if not client.is_configured:
        raise HTTPException(status_code=503, detail="Smithery API key not configured")
    if exc.status_code == 404:
        raise HTTPException(status_code=404, detail=str(exc))
    raise HTTPException(status_code=502, detail=str(exc))


@router.get("/servers", response_model=ServerListResponse)
async def list_servers(
    q: Optional[str] = None,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    deployed_only: bool = False,
    page: int = 1,
    page_size: int = 10,
    client: SmitheryClient = Depends(get_smithery_client),
):
    """List MCP servers in the registry."""
    try:
        return await client.list_servers(q, owner, repo, deployed_only, page, page_size)
    except SmitheryError as exc:
        _raise_for(client, exc)


@router.get("/servers/{qualified_name:path}", response_model=ServerDetails)
async def get_server(qualified_name: str, client: SmitheryClient = Depends(get_smithery_client)):
    """Details of one registry server."""
    try:
        return await client.get_server(qualified_name)
    except SmitheryError as exc:
        _raise_for(client, exc)


@router.post("/ws-url/{qualified_name:path}", response_model=WebSocketUrlResponse)
async def create_websocket_url(qualified_name: str, config: Optional[Dict[str, Any]] = Body(None)):
    """WebSocket URL for connecting to a server with the given config."""
    return WebSocketUrlResponse(url=websocket_url(qualified_name, config or {}))
