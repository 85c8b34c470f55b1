"""Pydantic models for the Smithery registry."""
from typing import Any, Dict, List, Optional

from pydantic import Field

from towgo.models.search import ApiModel


class SmitheryServer(ApiModel):
    qualified_name: str = Field(..., alias="qualifiedName")
    display_name: Optional[str] = Field(None, alias="displayName")
    description: Optional[str] = None
    homepage: Optional[str] = None
    use_count: Optional[str] = Field(None, alias="useCount")
    is_deployed: bool = Field(False, alias="isDeployed")
    created_at: Optional[str] = Field(None, alias="createdAt")


class Pagination(ApiModel):
    current_page: int = Field(1, alias="currentPage")
    page_size: int = Field(10, alias="pageSize")
    total_pages: int = Field(0, alias="totalPages")
    total_count: int = Field(0, alias="totalCount")


class ServerListResponse(ApiModel):
    servers: List[SmitheryServer] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class ServerConnection(ApiModel):
    type: str
    url: Optional[str] = None
    config_schema: Dict[str, Any] = Field(default_factory=dict, alias="configSchema")


class ServerDetails(ApiModel):
    qualified_name: str = Field(..., alias="qualifiedName")
    display_name: Optional[str] = Field(None, alias="displayName")
    deployment_url: Optional[str] = Field(None, alias="deploymentUrl")
    connections: List[ServerConnection] = Field(default_factory=list)


class WebSocketUrlResponse(ApiModel):
    url: str
