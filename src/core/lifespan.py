from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from core.config import settings
from model.database import create_db_and_tables
from service.hosting_client import HostingClient
from utility.logger import setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === 시작 ===
    setup_logger(settings.LOG_LEVEL)
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION}")

    create_db_and_tables()
    logger.info(f"Database ready ({settings.DATABASE_URL})")

    if not settings.hosting_configured:
        logger.warning("PIC_IN_TH_API_KEY is not set, uploads will be rejected")

    app.state.hosting_client = HostingClient(
        api_key=settings.PIC_IN_TH_API_KEY,
        endpoint=settings.HOSTING_API_URL,
    )

    yield

    # === 종료 ===
    app.state.hosting_client.close()
    logger.info("Shutting down")
