from __future__ import annotations

from parkwatch.application.interfaces.unit_of_work import UnitOfWork
from parkwatch.application.use_cases.parking._validation import require_text
from parkwatch.domain.models.car_record import CarRecord


async def execute(uow: UnitOfWork, lot_id: str | None) -> list[CarRecord]:
    lot_id = require_text(parkingLotId=lot_id)["parkingLotId"]
    return await uow.cars.list_history(lot_id)
