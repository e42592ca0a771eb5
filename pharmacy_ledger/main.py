"""
Pharmacy Ledger — FastAPI Application.

Entry point: configures logging, creates the tables the ledger
needs, and registers every router.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.logging_config import configure_logging, get_logger
from pharmacy_ledger.models import Base
from pharmacy_ledger.models.base import engine
from pharmacy_ledger.api.health import router as health_router
from pharmacy_ledger.api.accounts import router as accounts_router
from pharmacy_ledger.api.clients import router as clients_router

settings = get_settings()
configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info(
        "app_started",
        extra={"version": settings.APP_VERSION, "environment": settings.ENVIRONMENT},
    )
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Account and client ledgers for a multi-vendor pharmacy platform",
    lifespan=lifespan,
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(clients_router)
