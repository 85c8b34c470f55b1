"""Pydantic models for the premium services catalog and payments."""
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from towgo.models.search import ApiModel


class ServiceBase(ApiModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., gt=0, description="Price in USD")
    price_id: Optional[str] = Field(None, alias="priceId")
    is_active: bool = Field(True, alias="isActive")


class ServiceCreateRequest(ServiceBase):
    pass


class ServiceUpdateRequest(ApiModel):
    """Partial update, only set fields are applied."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    price_id: Optional[str] = Field(None, alias="priceId")
    is_active: Optional[bool] = Field(None, alias="isActive")


class ServiceResponse(ServiceBase):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int


class PaymentResponse(ApiModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    user_id: str = Field(..., alias="userId")
    service_id: int = Field(..., alias="serviceId")
    amount: float
    status: str
    session_id: Optional[str] = Field(None, alias="sessionId")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class CheckoutRequest(ApiModel):
    service_id: int = Field(..., alias="serviceId")
    success_url: str = Field(..., alias="successUrl")
    cancel_url: str = Field(..., alias="cancelUrl")


class CheckoutResponse(ApiModel):
    id: str
    url: str


class PaymentStatusResponse(ApiModel):
    session_id: str = Field(..., alias="sessionId")
    status: str
    amount: Optional[float] = None
