"""
Внешние сервисы в памяти: поставщик, платежи, хранилище, чтение изображений.
"""

from decimal import Decimal
from typing import List, Optional

from app.domain.models import (
    ImageDimensions, MockupFile, MockupJob, MockupTemplate, RefundResult,
    SupplierOrder, SupplierPrintArea, SupplierProduct, SupplierVariant
)


class FakeSupplier:
    """Поставщик в памяти. Статусы мокапа отдаются по очереди из mockup_statuses."""

    def __init__(self):
        self.variants: List[SupplierVariant] = [SupplierVariant(id=v) for v in (4011, 4012, 4013, 4014)]
        self.templates: List[MockupTemplate] = [
            MockupTemplate(template_id=1, print_areas=[
                SupplierPrintArea(placement="default", width=1800, height=2400),
                SupplierPrintArea(placement="back", width=1200, height=1200),
            ])
        ]
        self.mockup_statuses: List = []
        self.order_error: Optional[Exception] = None
        self.product_error: Optional[Exception] = None
        self.mockup_job_error: Optional[Exception] = None
        self.created_jobs: List[dict] = []
        self.created_orders: List[dict] = []
        self.status_calls = 0

    async def get_product(self, product_id: int) -> SupplierProduct:
        if self.product_error:
            raise self.product_error
        return SupplierProduct(id=product_id, variants=self.variants)

    async def get_mockup_templates(self, product_id: int) -> List[MockupTemplate]:
        return self.templates

    async def create_mockup_job(self, product_id: int, variant_ids: List[int], files: List[MockupFile]) -> str:
        if self.mockup_job_error:
            raise self.mockup_job_error
        self.created_jobs.append({"product_id": product_id, "variant_ids": variant_ids, "files": files})
        return f"job-{len(self.created_jobs)}"

    async def get_mockup_job_status(self, job_key: str) -> MockupJob:
        self.status_calls += 1
        item = self.mockup_statuses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def create_order(self, payload: dict) -> SupplierOrder:
        self.created_orders.append(payload)
        if self.order_error:
            raise self.order_error
        return SupplierOrder(id=9001, status="draft", raw={"id": 9001, "status": "draft"})


class FakePayments:
    def __init__(self, confirmed: bool = True):
        self.confirmed = confirmed
        self.refund_error: Optional[Exception] = None
        self.confirm_calls: List[str] = []
        self.refund_calls: List[tuple] = []

    async def confirm_payment(self, payment_intent_id: str) -> bool:
        self.confirm_calls.append(payment_intent_id)
        return self.confirmed

    async def refund_payment(self, payment_intent_id: str, amount: Optional[Decimal] = None) -> RefundResult:
        self.refund_calls.append((payment_intent_id, amount))
        if self.refund_error:
            raise self.refund_error
        return RefundResult(id=f"re_{len(self.refund_calls)}", status="succeeded")


class FakeStorage:
    def __init__(self):
        self.uploads: List[tuple] = []
        self.error: Optional[Exception] = None

    async def upload_buffer(self, data: bytes, mime_type: str, folder: str) -> str:
        if self.error:
            raise self.error
        self.uploads.append((data, mime_type, folder))
        return f"https://storage.googleapis.com/printful-designs/{folder}/upload-{len(self.uploads)}.png"


class FakeProber:
    def __init__(self, width: int = 1000, height: int = 1000):
        self.dimensions = ImageDimensions(width=width, height=height)
        self.error: Optional[Exception] = None
        self.calls: List[str] = []

    async def probe_dimensions(self, image_url: str) -> ImageDimensions:
        self.calls.append(image_url)
        if self.error:
            raise self.error
        return self.dimensions


async def no_sleep(delay: float) -> None:
    return None
