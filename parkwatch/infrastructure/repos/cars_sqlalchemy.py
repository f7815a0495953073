from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkwatch.application.errors import StorageError
from parkwatch.domain.models.car_record import CarRecord
from parkwatch.domain.ports.cars_repo import CarsRepo
from parkwatch.infrastructure.db.orm.car_record import CarHistoryORM, CurrentCarORM
from parkwatch.utils.datetime_tz import ensure_utc


class CarsSQLAlchemyRepository(CarsRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _to_domain(self, orm: CurrentCarORM | CarHistoryORM) -> CarRecord:
        exit_time = getattr(orm, "time_of_exit", None)
        return CarRecord(
            unique_code=orm.unique_code,
            parking_lot_id=orm.parking_lot_id,
            car_number_plate=orm.car_number_plate,
            time_of_entry=ensure_utc(orm.time_of_entry),
            image_url=orm.image_url,
            time_of_exit=ensure_utc(exit_time) if exit_time else None,
        )

    async def _scalars(self, stmt, message: str) -> list[CarRecord]:
        try:
            res = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(message) from exc
        return [self._to_domain(x) for x in res.scalars().all()]

    async def add_current(self, record: CarRecord) -> CarRecord:
        orm = CurrentCarORM(
            parking_lot_id=record.parking_lot_id,
            unique_code=record.unique_code,
            car_number_plate=record.car_number_plate,
            time_of_entry=record.time_of_entry,
            image_url=record.image_url,
        )
        self.session.add(orm)
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to add car") from exc
        return self._to_domain(orm)

    async def get_current(self, lot_id: str, unique_code: str) -> CarRecord | None:
        stmt = select(CurrentCarORM).where(
            CurrentCarORM.parking_lot_id == lot_id, CurrentCarORM.unique_code == unique_code
        )
        items = await self._scalars(stmt, "Failed to read car")
        return items[0] if items else None

    async def find_current_by_plate(self, lot_id: str, plate: str) -> list[CarRecord]:
        stmt = (
            select(CurrentCarORM)
            .where(
                CurrentCarORM.parking_lot_id == lot_id,
                CurrentCarORM.car_number_plate == plate,
            )
            .order_by(CurrentCarORM.time_of_entry.asc(), CurrentCarORM.unique_code.asc())
        )
        return await self._scalars(stmt, "Failed to search cars by plate")

    async def list_current(self, lot_id: str) -> list[CarRecord]:
        stmt = (
            select(CurrentCarORM)
            .where(CurrentCarORM.parking_lot_id == lot_id)
            .order_by(CurrentCarORM.time_of_entry.asc())
        )
        return await self._scalars(stmt, "Failed to list current cars")

    async def move_to_history(self, record: CarRecord) -> bool:
        history = CarHistoryORM(
            parking_lot_id=record.parking_lot_id,
            unique_code=record.unique_code,
            car_number_plate=record.car_number_plate,
            time_of_entry=record.time_of_entry,
            image_url=record.image_url,
            time_of_exit=record.time_of_exit,
        )
        stmt = delete(CurrentCarORM).where(
            CurrentCarORM.parking_lot_id == record.parking_lot_id,
            CurrentCarORM.unique_code == record.unique_code,
        )
        try:
            # the delete takes the write lock first, so a concurrent checkout
            # of the same car finds nothing to remove
            res = await self.session.execute(stmt)
            if res.rowcount == 0:
                return False
            await self.session.merge(history)
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to move car to history") from exc
        return True

    async def list_history(self, lot_id: str) -> list[CarRecord]:
        stmt = (
            select(CarHistoryORM)
            .where(CarHistoryORM.parking_lot_id == lot_id)
            .order_by(CarHistoryORM.time_of_exit.asc())
        )
        return await self._scalars(stmt, "Failed to list car history")
