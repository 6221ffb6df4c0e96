from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Any
from pydantic import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class Recipient(BaseModel):
    """Value Object: адрес получателя"""
    name: str
    address1: str
    address2: Optional[str] = None
    city: str
    state_code: Optional[str] = None
    country_code: str
    zip: str
    email: str
    phone: Optional[str] = None


class OrderItem(BaseModel):
    variant_id: int
    quantity: int
    price: Decimal
    product_type: Optional[str] = None
    custom_product_id: Optional[str] = None
    design_url: Optional[str] = None


class Order(BaseModel):
    """Domain Entity: заказ"""
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
    supplier_response: Optional[dict] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def can_be_processed(self) -> bool:
        """Бизнес-правило: из pending выходим только после оплаты"""
        return self.status == OrderStatus.PENDING and self.payment_status == PaymentStatus.PAID

    def can_be_refunded(self) -> bool:
        """Бизнес-правило: возвращаем только оплаченный и еще не возвращенный платеж"""
        return self.payment_status == PaymentStatus.PAID


class CustomProductStatus(str, Enum):
    DRAFT = "draft"
    READY = "ready"


class Placement(BaseModel):
    """Value Object: прямоугольник размещения дизайна в области печати"""
    area_width: int
    area_height: int
    width: int
    height: int
    top: int
    left: int


DEFAULT_PLACEMENT = Placement(
    area_width=1800,
    area_height=2400,
    width=1800,
    height=2400,
    top=0,
    left=0,
)


class PrintArea(BaseModel):
    placement: str
    width: float
    height: float


class ImageDimensions(BaseModel):
    width: int
    height: int


class CustomProduct(BaseModel):
    """Domain Entity: сохраненный дизайн пользователя на товаре поставщика"""
    id: str
    user_id: str
    supplier_product_id: int
    variant_ids: List[int]
    placement: str = "front"
    design_url: str
    position: Optional[Placement] = None
    mockup_urls: List[str] = []
    status: CustomProductStatus = CustomProductStatus.DRAFT
    created_at: datetime
    updated_at: datetime


class MockupFile(BaseModel):
    placement: str = "front"
    image_url: str
    position: Optional[Placement] = None


class MockupJobStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class MockupJob(BaseModel):
    """Состояние задачи генерации мокапа у поставщика (не сохраняется)"""
    job_key: str
    status: str
    mockup_urls: List[str] = []
    error: Optional[str] = None


# Ответы поставщика


class SupplierVariant(BaseModel):
    id: int
    name: Optional[str] = None
    in_stock: Optional[bool] = True


class SupplierProduct(BaseModel):
    id: Optional[int] = None
    variants: List[SupplierVariant] = []


class SupplierPrintArea(BaseModel):
    placement: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None


class MockupTemplate(BaseModel):
    template_id: Optional[int] = None
    print_areas: List[SupplierPrintArea] = []


class SupplierOrder(BaseModel):
    id: int
    status: Optional[str] = None
    raw: dict[str, Any] = {}


class RefundResult(BaseModel):
    id: str
    status: str
    amount: Optional[int] = None
