"""
Tests for mockup job polling.
"""

import pytest

from app.application.await_mockup import AwaitMockupCompletionUseCase, GetMockupStatusUseCase
from app.domain.exceptions import (
    MockupGenerationFailedError, MockupTimeoutError, SupplierAPIError
)
from app.domain.models import MockupJob

from fakes import FakeSupplier


def job(status, urls=None, error=None):
    return MockupJob(job_key="job-1", status=status, mockup_urls=urls or [], error=error)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class TestAwaitMockupCompletion:

    @pytest.mark.asyncio
    async def test_returns_urls_on_completion_and_stops_polling(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [
            job("pending"),
            job("pending"),
            job("completed", urls=["https://m/1.jpg", "https://m/2.jpg"]),
            job("pending"),
        ]
        sleep = SleepRecorder()
        use_case = AwaitMockupCompletionUseCase(supplier, max_attempts=30, interval=2.0, sleep=sleep)

        urls = await use_case("job-1")

        assert urls == ["https://m/1.jpg", "https://m/2.jpg"]
        assert supplier.status_calls == 3
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_times_out_after_exactly_max_attempts(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [job("pending") for _ in range(40)]
        use_case = AwaitMockupCompletionUseCase(supplier, max_attempts=30, interval=2.0, sleep=SleepRecorder())

        with pytest.raises(MockupTimeoutError) as exc:
            await use_case("job-1")

        assert supplier.status_calls == 30
        assert exc.value.job_key == "job-1"
        assert exc.value.attempts == 30

    @pytest.mark.asyncio
    async def test_failed_status_raises_immediately_with_reason(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [job("pending"), job("failed", error="Image too small"), job("completed")]
        use_case = AwaitMockupCompletionUseCase(supplier, sleep=SleepRecorder())

        with pytest.raises(MockupGenerationFailedError) as exc:
            await use_case("job-1")

        assert exc.value.reason == "Image too small"
        assert supplier.status_calls == 2

    @pytest.mark.asyncio
    async def test_not_found_yet_counts_as_pending(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [
            SupplierAPIError(404, "Task not found"),
            job("completed", urls=["https://m/1.jpg"]),
        ]
        use_case = AwaitMockupCompletionUseCase(supplier, sleep=SleepRecorder())

        assert await use_case("job-1") == ["https://m/1.jpg"]
        assert supplier.status_calls == 2

    @pytest.mark.asyncio
    async def test_other_supplier_errors_propagate(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [SupplierAPIError(500, "Internal error")]
        use_case = AwaitMockupCompletionUseCase(supplier, sleep=SleepRecorder())

        with pytest.raises(SupplierAPIError):
            await use_case("job-1")


class TestGetMockupStatus:

    @pytest.mark.asyncio
    async def test_missing_job_reported_as_pending(self, supplier: FakeSupplier):
        supplier.mockup_statuses = [SupplierAPIError(404, "Task not found")]

        result = await GetMockupStatusUseCase(supplier)("job-9")

        assert result.job_key == "job-9"
        assert result.status == "pending"
