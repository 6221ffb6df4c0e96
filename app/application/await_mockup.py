import asyncio
import logging
from typing import Awaitable, Callable, List

from app.domain.models import MockupJob, MockupJobStatus
from app.domain.exceptions import MockupGenerationFailedError, MockupTimeoutError, SupplierAPIError
from app.application.interfaces import SupplierService

logger = logging.getLogger(__name__)


class GetMockupStatusUseCase:
    def __init__(self, supplier: SupplierService):
        self._supplier = supplier

    async def __call__(self, job_key: str) -> MockupJob:
        try:
            return await self._supplier.get_mockup_job_status(job_key)
        except SupplierAPIError as e:
            if e.status_code == 404:
                # Задача еще не появилась у поставщика
                return MockupJob(job_key=job_key, status=MockupJobStatus.PENDING.value)
            raise


class AwaitMockupCompletionUseCase:
    """Опрашивает задачу мокапа до completed/failed или исчерпания попыток.

    Не держит сессию БД на время ожидания: работает только с API поставщика.
    """

    def __init__(
        self,
        supplier: SupplierService,
        max_attempts: int = 30,
        interval: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self._get_status = GetMockupStatusUseCase(supplier)
        self._max_attempts = max_attempts
        self._interval = interval
        self._sleep = sleep

    async def __call__(self, job_key: str) -> List[str]:
        for attempt in range(1, self._max_attempts + 1):
            job = await self._get_status(job_key)

            if job.status == MockupJobStatus.COMPLETED:
                logger.info(f"Мокап {job_key} готов: {len(job.mockup_urls)} изображений")
                return job.mockup_urls

            if job.status == MockupJobStatus.FAILED:
                raise MockupGenerationFailedError(job_key, job.error or "неизвестная ошибка")

            logger.debug(f"Мокап {job_key} в статусе {job.status} (попытка {attempt}/{self._max_attempts})")
            if attempt < self._max_attempts:
                await self._sleep(self._interval)

        raise MockupTimeoutError(job_key, self._max_attempts)
