import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import time
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, rates
from .services.rates.cache_service import DatasetStore, DiskCache
from .services.rates.dataset import Dataset
from .services.rates.providers import make_dataset_source
from .services.rates.scheduler import DatasetUpdater

logger = logging.getLogger("exchangerates")


def build_store(
    settings: Settings,
    dataset: Optional[Dataset] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> DatasetStore:
    cache = (
        DiskCache(settings.data_dir, settings.cache_filename)
        if settings.cache_enabled
        else None
    )
    return DatasetStore(
        make_dataset_source(settings, transport=transport),
        cache,
        update_slot=time(settings.update_hour_utc, settings.update_minute_utc),
        dataset=dataset,
    )


def create_app(
    settings_override: Settings | None = None,
    *,
    dataset: Optional[Dataset] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp data dir). Falls back to cached get_settings().
    dataset: preload the store; startup then skips the initial download.
    transport: httpx transport used for dataset downloads (tests use MockTransport).
    """
    settings = settings_override or get_settings()
    settings.init_post_load()
    # Initialize logging early
    init_logging(settings.log_level, debug=settings.debug, json_output=settings.log_json)

    store = build_store(settings, dataset=dataset, transport=transport)
    updater = DatasetUpdater(
        store,
        hour=settings.update_hour_utc,
        minute=settings.update_minute_utc,
        retry_seconds=settings.update_retry_seconds,
        max_retries=settings.update_max_retries,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store.dataset is None:
            # Download dataset or use a cached one; failing here is fatal
            try:
                await store.load_initial()
            except Exception:
                logger.exception("failed to load the exchange rate dataset on startup")
                raise
        task = asyncio.create_task(updater.run()) if settings.update_enabled else None
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.updater = updater

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.CurrenciesNotFound, errors.currencies_not_found_handler)
    app.add_exception_handler(errors.NoRatesAvailable, errors.no_rates_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)

    return app


app = create_app()
