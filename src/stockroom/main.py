import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .common.currency import InvalidConversionRateError
from .core.config import DATABASE_URL
from .core.logging_config import setup_logging
from .features.reports.router import router as reports_router

logger = logging.getLogger("stockroom.main")  # This logger will inherit from 'stockroom'

MODEL_MODULES = [
    "stockroom.features.inventory.models",
    "stockroom.features.sales.models",
    "stockroom.features.purchases.models",
    "stockroom.features.expenses.models",
]


def build_tortoise_config(db_url: str = DATABASE_URL) -> dict:
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {  # This is an app label, can be anything
                "models": [*MODEL_MODULES, "aerich.models"],  # aerich.models for migrations
                "default_connection": "default",
            }
        },
    }


TORTOISE_ORM_CONFIG = build_tortoise_config()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events, such as connecting to the database.
    """
    setup_logging()
    logger.info("Starting application...")
    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info("Tortoise-ORM has been initialized.")

    yield

    await Tortoise.close_connections()
    logger.info("Tortoise-ORM connections have been closed.")


async def invalid_conversion_rate_handler(request: Request, exc: InvalidConversionRateError) -> JSONResponse:
    logger.warning(f"Report on {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app = FastAPI(
    title="Stockroom Reports API",
    description="Read-only inventory, sales and invoice reports.",
    version="0.1.0",
    exception_handlers={
        **tortoise_exception_handlers(),
        InvalidConversionRateError: invalid_conversion_rate_handler,
    },
    lifespan=lifespan,
)


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": "Welcome to the Stockroom Reports API!"}


app.include_router(reports_router, prefix="/api/v1")
