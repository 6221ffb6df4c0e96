"""
Tests for mockup job submission.
"""

import base64

import pytest

from app.application.calculate_position import CalculatePositionUseCase
from app.application.resolve_print_area import ResolvePrintAreaUseCase
from app.application.submit_mockup import SubmitMockupJobUseCase, SubmitMockupDTO
from app.domain.exceptions import (
    InvalidVariantError, MockupSubmissionError, SupplierAPIError, SupplierServiceError,
    StorageServiceError, UnreadableImageError
)
from app.domain.models import MockupFile, Placement, DEFAULT_PLACEMENT
from app.infrastructure.http_clients import HTTPImageProber

from fakes import FakeSupplier, FakeStorage, FakeProber


@pytest.fixture
def submit(supplier, storage, prober) -> SubmitMockupJobUseCase:
    calculate_position = CalculatePositionUseCase(ResolvePrintAreaUseCase(supplier))
    return SubmitMockupJobUseCase(supplier, storage, prober, calculate_position)


def dto(image_url="https://cdn.example.com/design.png", variant_ids=(4011,), position=None, placement="front"):
    return SubmitMockupDTO(
        product_id=71,
        variant_ids=list(variant_ids),
        files=[MockupFile(placement=placement, image_url=image_url, position=position)],
    )


class TestSubmitMockupJob:

    @pytest.mark.asyncio
    async def test_submits_job_with_given_position(self, submit, supplier: FakeSupplier, prober: FakeProber):
        position = Placement(area_width=1800, area_height=2400, width=900, height=900, top=10, left=20)

        job_key = await submit(dto(position=position))

        assert job_key == "job-1"
        sent = supplier.created_jobs[0]
        assert sent["product_id"] == 71
        assert sent["variant_ids"] == [4011]
        assert sent["files"][0].position == position
        assert prober.calls == []

    @pytest.mark.asyncio
    async def test_invalid_variant_rejected_before_submission(self, submit, supplier: FakeSupplier):
        with pytest.raises(InvalidVariantError) as exc:
            await submit(dto(variant_ids=(4011, 9999)))

        assert exc.value.invalid_ids == [9999]
        assert "9999" in str(exc.value)
        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_catalog_failure_does_not_block_submission(self, submit, supplier: FakeSupplier):
        supplier.product_error = SupplierServiceError("catalog unavailable")

        assert await submit(dto(variant_ids=(9999,))) == "job-1"

    @pytest.mark.asyncio
    async def test_data_url_is_uploaded_and_replaced(self, submit, supplier: FakeSupplier, storage: FakeStorage):
        raw = b"\x89PNG fake image bytes"
        data_url = "data:image/png;base64," + base64.b64encode(raw).decode()

        await submit(dto(image_url=data_url))

        assert storage.uploads == [(raw, "image/png", "designs")]
        sent_url = supplier.created_jobs[0]["files"][0].image_url
        assert sent_url.startswith("https://storage.googleapis.com/")
        assert not sent_url.startswith("data:")

    @pytest.mark.asyncio
    async def test_upload_failure_is_submission_error(self, submit, supplier: FakeSupplier, storage: FakeStorage):
        storage.error = StorageServiceError("bucket unavailable")

        with pytest.raises(MockupSubmissionError):
            await submit(dto(image_url="data:image/png;base64,aGVsbG8="))

        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_malformed_data_url(self, submit):
        with pytest.raises(MockupSubmissionError):
            await submit(dto(image_url="data:image/png;base64,%%%not-base64%%%"))

    @pytest.mark.parametrize("url", [
        "http://localhost:3000/uploads/design.png",
        "http://127.0.0.1/design.png",
    ])
    @pytest.mark.asyncio
    async def test_local_urls_rejected(self, submit, supplier: FakeSupplier, url):
        with pytest.raises(MockupSubmissionError):
            await submit(dto(image_url=url))

        assert supplier.created_jobs == []

    @pytest.mark.asyncio
    async def test_missing_position_is_calculated(self, submit, supplier: FakeSupplier, prober: FakeProber):
        await submit(dto())

        position = supplier.created_jobs[0]["files"][0].position
        assert prober.calls == ["https://cdn.example.com/design.png"]
        assert (position.width, position.height, position.top, position.left) == (1800, 1800, 300, 0)

    @pytest.mark.asyncio
    async def test_falls_back_to_default_position_when_image_unreadable(
        self, submit, supplier: FakeSupplier, prober: FakeProber
    ):
        prober.error = UnreadableImageError("not an image")

        await submit(dto())

        assert supplier.created_jobs[0]["files"][0].position == DEFAULT_PLACEMENT

    @pytest.mark.asyncio
    async def test_supplier_rejection_is_wrapped(self, submit, supplier: FakeSupplier):
        supplier.mockup_job_error = SupplierAPIError(400, "Invalid print file")

        with pytest.raises(MockupSubmissionError) as exc:
            await submit(dto())

        assert isinstance(exc.value.__cause__, SupplierAPIError)

    @pytest.mark.asyncio
    async def test_malformed_image_url_falls_back_to_default_position(self, supplier: FakeSupplier,
                                                                      storage: FakeStorage):
        calculate_position = CalculatePositionUseCase(ResolvePrintAreaUseCase(supplier))
        submit = SubmitMockupJobUseCase(supplier, storage, HTTPImageProber(), calculate_position)

        assert await submit(dto(image_url="http://[::1/a.png")) == "job-1"

        assert supplier.created_jobs[0]["files"][0].position == DEFAULT_PLACEMENT

