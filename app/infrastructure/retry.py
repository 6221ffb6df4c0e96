import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional, TypeVar

from app.domain.exceptions import SupplierAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRY_AFTER_RE = re.compile(r"after (\d+) seconds")


def is_rate_limited(error: Exception) -> bool:
    return isinstance(error, SupplierAPIError) and error.is_rate_limit


def suggested_delay(error: Exception) -> Optional[float]:
    """Пауза, которую предлагает сервер в тексте ошибки ("... after 30 seconds")"""
    message = getattr(error, "message", None) or str(error)
    match = _RETRY_AFTER_RE.search(message)
    if match:
        return float(match.group(1))
    return None


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Повторяет вызов только при rate limit (429) с экспоненциальной паузой.

    Любая другая ошибка пробрасывается сразу. Всего не больше max_retries + 1 вызовов.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_rate_limited(e) or attempt >= max_retries:
                raise
            delay = suggested_delay(e)
            if delay is None:
                delay = initial_delay * (2 ** attempt)
            logger.warning(
                f"Rate limit от поставщика. Повтор через {delay:.1f}s (попытка {attempt + 1}/{max_retries})"
            )
            await sleep(delay)
            attempt += 1
