from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, List
from app.domain.models import (
    Order, OrderStatus, PaymentStatus, CustomProduct, Placement, ImageDimensions,
    MockupFile, MockupJob, MockupTemplate, SupplierOrder, SupplierProduct, RefundResult
)


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> None:
        pass

    @abstractmethod
    async def mark_processing(self, order_id: str, supplier_order_id: int, supplier_response: dict) -> None:
        pass

    @abstractmethod
    async def update_payment_status(self, order_id: str, payment_status: PaymentStatus) -> None:
        pass


class CustomProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[CustomProduct]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[CustomProduct]:
        pass

    @abstractmethod
    async def create(self, product: CustomProduct) -> None:
        pass

    @abstractmethod
    async def update(self, product: CustomProduct) -> None:
        pass

    @abstractmethod
    async def delete(self, product_id: str) -> None:
        pass

    @abstractmethod
    async def update_mockups(self, product_id: str, mockup_urls: List[str], position: Optional[Placement]) -> None:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def custom_products(self) -> CustomProductRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


class PaymentsService(ABC):
    @abstractmethod
    async def confirm_payment(self, payment_intent_id: str) -> bool:
        pass

    @abstractmethod
    async def refund_payment(self, payment_intent_id: str, amount: Optional[Decimal] = None) -> RefundResult:
        pass


class SupplierService(ABC):
    @abstractmethod
    async def get_product(self, product_id: int) -> SupplierProduct:
        pass

    @abstractmethod
    async def get_mockup_templates(self, product_id: int) -> List[MockupTemplate]:
        pass

    @abstractmethod
    async def create_mockup_job(self, product_id: int, variant_ids: List[int], files: List[MockupFile]) -> str:
        pass

    @abstractmethod
    async def get_mockup_job_status(self, job_key: str) -> MockupJob:
        pass

    @abstractmethod
    async def create_order(self, payload: dict) -> SupplierOrder:
        pass


class StorageService(ABC):
    @abstractmethod
    async def upload_buffer(self, data: bytes, mime_type: str, folder: str) -> str:
        pass


class ImageProber(ABC):
    @abstractmethod
    async def probe_dimensions(self, image_url: str) -> ImageDimensions:
        pass
