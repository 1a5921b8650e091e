from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_api.config import Settings, load_settings
from catalog_api.db import ProductStore
from catalog_api.errors import register_error_handlers
from catalog_api.logging_config import logger, set_log_level
from catalog_api.routes.product_route import router as product_router


def create_app(
    settings: Optional[Settings] = None, store: Optional[ProductStore] = None
) -> FastAPI:
    """
    Build the Product Catalog API.

    The store is opened when the application starts and closed when it
    shuts down. Pass a store to reuse an existing client.
    """
    settings = settings or load_settings()
    store = store or ProductStore(settings)
    set_log_level(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.open()
        logger.info("Product store opened")
        try:
            yield
        finally:
            await store.close()
            logger.info("Product store closed")

    app = FastAPI(
        title="Product Catalog API",
        version="1.0.0",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # Browser clients on any configured origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(product_router)
    return app
