"""
Tests for the one-call mockup generation flow.
"""

import pytest

from app.application.await_mockup import AwaitMockupCompletionUseCase
from app.application.calculate_position import CalculatePositionUseCase
from app.application.generate_mockup import GenerateMockupUseCase, GenerateMockupDTO
from app.application.resolve_print_area import ResolvePrintAreaUseCase
from app.application.submit_mockup import SubmitMockupJobUseCase
from app.domain.exceptions import (
    AccessDeniedError, CustomProductNotFoundError, InvalidVariantError, UnreadableImageError
)
from app.domain.models import CustomProductStatus, MockupJob, SupplierVariant

from fakes import FakeSupplier, FakeProber, no_sleep


@pytest.fixture
def generate(uow, supplier, storage, prober) -> GenerateMockupUseCase:
    calculate_position = CalculatePositionUseCase(ResolvePrintAreaUseCase(supplier))
    return GenerateMockupUseCase(
        uow,
        supplier,
        prober,
        calculate_position,
        SubmitMockupJobUseCase(supplier, storage, prober, calculate_position),
        AwaitMockupCompletionUseCase(supplier, max_attempts=5, interval=0, sleep=no_sleep),
    )


def completed(*urls):
    return MockupJob(job_key="job-1", status="completed", mockup_urls=list(urls))


class TestGenerateMockup:

    @pytest.mark.asyncio
    async def test_selects_first_in_stock_variants(self, generate, supplier: FakeSupplier):
        supplier.variants = [
            SupplierVariant(id=4011, in_stock=False),
            SupplierVariant(id=4012),
            SupplierVariant(id=4013, in_stock=None),
            SupplierVariant(id=4014),
            SupplierVariant(id=4015),
        ]
        supplier.mockup_statuses = [MockupJob(job_key="job-1", status="pending"), completed("https://m/1.jpg")]

        result = await generate(GenerateMockupDTO(product_id=71, image_url="https://cdn.example.com/d.png"))

        assert result.variant_ids == [4012, 4013, 4014]
        assert result.job_key == "job-1"
        assert result.mockup_urls == ["https://m/1.jpg"]
        assert supplier.created_jobs[0]["variant_ids"] == [4012, 4013, 4014]

    @pytest.mark.asyncio
    async def test_given_variants_are_used_as_is(self, generate, supplier: FakeSupplier):
        supplier.mockup_statuses = [completed("https://m/1.jpg")]

        result = await generate(GenerateMockupDTO(
            product_id=71, image_url="https://cdn.example.com/d.png", variant_ids=[4014]
        ))

        assert result.variant_ids == [4014]

    @pytest.mark.asyncio
    async def test_no_variants_in_stock(self, generate, supplier: FakeSupplier):
        supplier.variants = [SupplierVariant(id=4011, in_stock=False)]

        with pytest.raises(InvalidVariantError):
            await generate(GenerateMockupDTO(product_id=71, image_url="https://cdn.example.com/d.png"))

        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_calculated_position_is_sent(self, generate, supplier: FakeSupplier, prober: FakeProber):
        prober.dimensions = prober.dimensions.model_copy(update={"width": 4000, "height": 1000})
        supplier.mockup_statuses = [completed("https://m/1.jpg")]

        await generate(GenerateMockupDTO(product_id=71, image_url="https://cdn.example.com/d.png"))

        position = supplier.created_jobs[0]["files"][0].position
        assert (position.width, position.height, position.top, position.left) == (1800, 450, 975, 0)

    @pytest.mark.asyncio
    async def test_unreadable_image_is_reported(self, generate, supplier: FakeSupplier, prober: FakeProber):
        prober.error = UnreadableImageError("not an image")

        with pytest.raises(UnreadableImageError):
            await generate(GenerateMockupDTO(product_id=71, image_url="https://cdn.example.com/d.png"))

        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_mockups_saved_to_custom_product(self, generate, uow, supplier: FakeSupplier, make_custom_product):
        async with uow() as u:
            await u.custom_products.create(make_custom_product())
            await u.commit()
        supplier.mockup_statuses = [completed("https://m/1.jpg", "https://m/2.jpg")]

        await generate(GenerateMockupDTO(
            product_id=71, image_url="https://cdn.example.com/d.png",
            user_id="user-1", custom_product_id="cp1"
        ))

        async with uow() as u:
            product = await u.custom_products.get_by_id("cp1")
        assert product.mockup_urls == ["https://m/1.jpg", "https://m/2.jpg"]
        assert product.status == CustomProductStatus.READY
        assert product.position.height == 1800

    @pytest.mark.asyncio
    async def test_custom_product_of_another_user(self, generate, uow, supplier: FakeSupplier, make_custom_product):
        async with uow() as u:
            await u.custom_products.create(make_custom_product(user_id="user-2"))
            await u.commit()

        with pytest.raises(AccessDeniedError):
            await generate(GenerateMockupDTO(
                product_id=71, image_url="https://cdn.example.com/d.png",
                user_id="user-1", custom_product_id="cp1"
            ))

        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_unknown_custom_product(self, generate):
        with pytest.raises(CustomProductNotFoundError):
            await generate(GenerateMockupDTO(
                product_id=71, image_url="https://cdn.example.com/d.png", custom_product_id="missing"
            ))
