from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkwatch.application.errors import StorageError
from parkwatch.domain.models.parking_lot import ParkingLot
from parkwatch.domain.ports.parking_lots_repo import ParkingLotsRepo
from parkwatch.infrastructure.db.orm.parking_lot import ParkingLotORM
from parkwatch.utils.datetime_tz import ensure_utc


class ParkingLotsSQLAlchemyRepository(ParkingLotsRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: ParkingLotORM) -> ParkingLot:
        return ParkingLot(
            id=orm.id,
            name=orm.name,
            time_zone=orm.time_zone,
            created_at=ensure_utc(orm.created_at),
        )

    async def add(self, lot: ParkingLot) -> ParkingLot:
        orm = ParkingLotORM(
            id=lot.id,
            name=lot.name,
            time_zone=lot.time_zone,
            created_at=lot.created_at,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to register parking lot") from exc
        return self._to_domain(orm)

    async def get(self, lot_id: str) -> ParkingLot | None:
        stmt = select(ParkingLotORM).where(ParkingLotORM.id == lot_id)
        try:
            res = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read parking lot") from exc
        orm = res.scalar_one_or_none()
        return self._to_domain(orm) if orm else None
