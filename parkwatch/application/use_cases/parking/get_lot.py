from __future__ import annotations

from parkwatch.application.errors import NotFound
from parkwatch.application.interfaces.unit_of_work import UnitOfWork
from parkwatch.application.use_cases.parking._validation import require_text
from parkwatch.domain.models.parking_lot import ParkingLot


async def execute(uow: UnitOfWork, lot_id: str | None) -> ParkingLot:
    lot_id = require_text(parkingLotId=lot_id)["parkingLotId"]
    lot = await uow.parking_lots.get(lot_id)
    if not lot:
        raise NotFound("Parking lot not found")
    return lot
