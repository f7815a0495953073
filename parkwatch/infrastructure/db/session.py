from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from parkwatch.application.errors import StorageError
from parkwatch.application.interfaces.unit_of_work import UnitOfWork


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, echo=False, future=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


class SQLAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None
        self.parking_lots = None
        self.cars = None

    async def __aenter__(self) -> UnitOfWork:
        self.session = self._session_factory()
        from parkwatch.infrastructure.repos.cars_sqlalchemy import CarsSQLAlchemyRepository
        from parkwatch.infrastructure.repos.parking_lots_sqlalchemy import (
            ParkingLotsSQLAlchemyRepository,
        )

        self.parking_lots = ParkingLotsSQLAlchemyRepository(self.session)
        self.cars = CarsSQLAlchemyRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.session:
            return
        try:
            if exc:
                await self.session.rollback()
        finally:
            await self.session.close()
            self.session = None
            self.parking_lots = None
            self.cars = None

    async def commit(self) -> None:
        if not self.session:
            return
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError("Failed to commit transaction") from exc

    async def rollback(self) -> None:
        if not self.session:
            return
        await self.session.rollback()
