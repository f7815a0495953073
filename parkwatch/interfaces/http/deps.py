from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request

from parkwatch.config.settings import Settings, get_settings
from parkwatch.infrastructure.db.session import SQLAlchemyUnitOfWork
from parkwatch.infrastructure.storage.ports import StorageService


async def get_uow(request: Request) -> AsyncIterator[SQLAlchemyUnitOfWork]:
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise RuntimeError("Session factory not configured")
    uow = SQLAlchemyUnitOfWork(session_factory)
    async with uow:
        yield uow


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_storage_service(request: Request) -> StorageService | None:
    # intake reports the missing service only after validating its input
    return getattr(request.app.state, "storage_service", None)
