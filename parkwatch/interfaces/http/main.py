from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from parkwatch.config.settings import Settings, get_settings
from parkwatch.infrastructure.db.session import create_engine, create_session_factory
from parkwatch.infrastructure.storage.ports import StorageService
from parkwatch.interfaces.http.routers import cars, parking_lots
from parkwatch.interfaces.middleware.error_handler import register_error_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    # Avoid adding duplicate handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine", "botocore"):
        logging.getLogger(name).setLevel(level)


def _build_storage(settings: Settings) -> StorageService | None:
    if not settings.storage_configured:
        return None
    from parkwatch.infrastructure.storage.s3 import S3StorageService

    return S3StorageService(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        prefix=settings.s3_prefix,
        public_url_base=settings.s3_public_url_base,
        endpoint_url=settings.s3_endpoint_url,
        read_url_expires=settings.car_image_url_expires,
    )


def create_app(
    *,
    settings: Settings | None = None,
    storage_service: StorageService | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(
        title="ParkWatch Backend",
        version="0.1.0",
        description="Parking lot car intake and checkout API",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.storage_service = storage_service or _build_storage(settings)
    register_error_handlers(app)

    api = APIRouter(prefix="/api/v1")
    api.include_router(parking_lots.router)
    api.include_router(cars.router)

    @api.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
