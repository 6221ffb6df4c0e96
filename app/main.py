import logging
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.config import settings
from app.database import get_engine, dispose_engine
from app.infrastructure.background import BackgroundTaskRunner
from app.infrastructure.db_schema import metadata
from app.presentation.api import router

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        if create_tables:
            async with get_engine().begin() as conn:
                await conn.run_sync(metadata.create_all)
            logger.info("Таблицы созданы")

        yield

        logger.info("Приложение останавливается...")
        await app.state.background.drain(timeout=settings.FULFILLMENT_TIMEOUT)
        if create_tables:
            await dispose_engine()

    app = FastAPI(
        title="Print Order Service",
        description="Заказы и мокапы print-on-demand",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.background = BackgroundTaskRunner()
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "healthy", "background_tasks": app.state.background.pending}

    return app


app = create_app()
