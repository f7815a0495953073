from __future__ import annotations

import os
import sys
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///default.db")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from parkwatch.config.settings import Settings
from parkwatch.infrastructure.db.base import Base
from parkwatch.infrastructure.db.orm import car_record, parking_lot  # noqa: F401
from parkwatch.interfaces.http.main import create_app


class InMemoryStorage:
    def __init__(self, *, url_base: str = "https://files.test") -> None:
        self.url_base = url_base
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = (data, content_type)

    async def get_read_url(self, key: str) -> str:
        return f"{self.url_base}/{key}"


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    db_path = tmp_path / "test.db"
    return Settings.model_validate(
        {
            "database_url": f"sqlite+aiosqlite:///{db_path}",
            "log_level": "INFO",
            "environment": "test",
        }
    )


@pytest.fixture()
def app(test_settings: Settings, storage: InMemoryStorage):
    return create_app(settings=test_settings, storage_service=storage)


@pytest.fixture()
async def client(app) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        engine = app.state.engine
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield client
    await app.state.engine.dispose()


@pytest.fixture()
async def lot_id(client: AsyncClient) -> str:
    response = await client.post(
        "/api/v1/parking-lots", json={"name": "Main St", "timeZone": "UTC"}
    )
    assert response.status_code == 201
    return response.json()["parkingLotId"]
