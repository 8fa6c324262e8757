from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from cityweather.api.router import api_router
from cityweather.clients.openweather import OpenWeatherClient
from cityweather.core.config import Settings, load_settings
from cityweather.core.logs import configure_logging
from cityweather.db.kv import create_kv_storage
from cityweather.repositories.store import KeyValueWeatherStore

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.storage = create_kv_storage(settings)
        app.state.weather_store = KeyValueWeatherStore(
            storage=app.state.storage,
            max_history_entries=settings.max_history_entries,
        )
        app.state.openweather_client = OpenWeatherClient(
            api_key=settings.openweather_api_key,
            timeout_seconds=settings.weather_timeout_seconds,
            base_url=str(settings.openweather_base_url),
            icon_url=str(settings.openweather_icon_url),
        )
        if not settings.openweather_api_key:
            logger.warning("APP_OPENWEATHER_API_KEY is not set; weather lookups will fail")
        logger.info("Using %s storage backend", settings.storage_backend)

        yield
        await app.state.openweather_client.aclose()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="City Weather API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "cityweather", "status": "ok"}

    app.include_router(api_router)
    return app
