"""FastAPI application bootstrap."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dairycart.api.errors import register_exception_handlers
from dairycart.api.routers import (
    health,
    product_option_values,
    product_options,
    product_roots,
    products,
    webhooks,
)
from dairycart.core.config import get_settings
from dairycart.core.logging import configure_logging
from dairycart.db.session import init_db

logger = logging.getLogger(__name__)

API_PREFIX = "/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Instantiate the FastAPI app and include the versioned routers."""
    configure_logging()
    settings = get_settings()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    logger.info(f"[CORS] Allowed origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(products.router, prefix=API_PREFIX, tags=["products"])
    app.include_router(product_roots.router, prefix=API_PREFIX, tags=["product roots"])
    app.include_router(product_options.router, prefix=API_PREFIX, tags=["product options"])
    app.include_router(
        product_option_values.router, prefix=API_PREFIX, tags=["product option values"]
    )
    app.include_router(webhooks.router, prefix=API_PREFIX, tags=["webhooks"])

    return app


app = create_app()
