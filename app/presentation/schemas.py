from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from app.domain.models import (
    OrderStatus, PaymentStatus, Recipient, OrderItem, Placement,
    MockupFile, CustomProductStatus
)


class OrderItemRequest(BaseModel):
    variant_id: int
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)
    product_type: Optional[str] = None
    custom_product_id: Optional[str] = None
    design_url: Optional[str] = None


class CreateOrderRequest(BaseModel):
    user_id: str
    recipient: Recipient
    items: List[OrderItemRequest] = Field(min_length=1)
    shipping_method: Optional[str] = None
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_intent_id: str


class OrderResponse(BaseModel):
    id: str
    user_id: str
    recipient: Recipient
    items: List[OrderItem]
    shipping_method: Optional[str] = None
    shipping_cost: Decimal
    tax_amount: Decimal
    subtotal: Decimal
    total: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    payment_intent_id: str
    supplier_order_id: Optional[int] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order):
        return cls(**order.model_dump(exclude={"supplier_response"}))


class SubmitMockupRequest(BaseModel):
    product_id: int
    variant_ids: List[int] = Field(min_length=1)
    files: List[MockupFile] = Field(min_length=1)


class SubmitMockupResponse(BaseModel):
    job_key: str


class GenerateMockupRequest(BaseModel):
    product_id: int
    image_url: str
    placement: str = "front"
    variant_ids: Optional[List[int]] = None
    max_variants: int = Field(default=3, ge=1, le=20)
    user_id: Optional[str] = None
    custom_product_id: Optional[str] = None


class GenerateMockupResponse(BaseModel):
    job_key: str
    variant_ids: List[int]
    mockup_urls: List[str]


class MockupStatusResponse(BaseModel):
    job_key: str
    status: str
    mockup_urls: List[str] = []
    error: Optional[str] = None


class CalculatePositionRequest(BaseModel):
    product_id: int
    placement: str = "front"
    image_width: int = Field(gt=0)
    image_height: int = Field(gt=0)


class CalculatePositionResponse(BaseModel):
    position: Placement
    print_area_placement: str
    print_area_width: float
    print_area_height: float
    aspect_ratio: float


class CreateCustomProductRequest(BaseModel):
    user_id: str
    supplier_product_id: int
    variant_ids: List[int] = Field(min_length=1)
    placement: str = "front"
    design_url: str
    position: Optional[Placement] = None


class UpdateCustomProductRequest(BaseModel):
    variant_ids: Optional[List[int]] = Field(default=None, min_length=1)
    placement: Optional[str] = None
    design_url: Optional[str] = None
    position: Optional[Placement] = None


class CustomProductResponse(BaseModel):
    id: str
    user_id: str
    supplier_product_id: int
    variant_ids: List[int]
    placement: str
    design_url: str
    position: Optional[Placement] = None
    mockup_urls: List[str]
    status: CustomProductStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product):
        return cls(**product.model_dump())


class ErrorResponse(BaseModel):
    detail: str
