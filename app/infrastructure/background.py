import asyncio
import logging
from typing import Awaitable, Callable, Set

logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """Запускает фоновые задачи вне цикла запрос/ответ и держит на них ссылки"""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro_factory: Callable[[], Awaitable[None]], name: str) -> asyncio.Task:
        task = asyncio.create_task(self._supervise(coro_factory, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _supervise(self, coro_factory: Callable[[], Awaitable[None]], name: str) -> None:
        try:
            await coro_factory()
        except asyncio.CancelledError:
            logger.warning(f"Фоновая задача {name} отменена")
            raise
        except Exception as e:
            logger.error(f"Фоновая задача {name} упала: {e}", exc_info=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float | None = None) -> None:
        """Дожидается незавершенных задач (при остановке приложения)"""
        if not self._tasks:
            return
        logger.info(f"Ожидание {len(self._tasks)} фоновых задач")
        done, not_done = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in not_done:
            logger.warning(f"Фоновая задача {task.get_name()} не завершилась, отменяем")
            task.cancel()
        if not_done:
            await asyncio.gather(*not_done, return_exceptions=True)
