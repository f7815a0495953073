from __future__ import annotations

from dataclasses import dataclass

from parkwatch.application.interfaces.unit_of_work import UnitOfWork
from parkwatch.application.use_cases.parking._validation import require_text
from parkwatch.domain.models.parking_lot import ParkingLot


@dataclass(slots=True)
class RegisterLotInput:
    name: str | None
    time_zone: str | None


async def execute(uow: UnitOfWork, payload: RegisterLotInput) -> ParkingLot:
    fields = require_text(name=payload.name, timeZone=payload.time_zone)
    lot = ParkingLot.create(name=fields["name"], time_zone=fields["timeZone"])
    created = await uow.parking_lots.add(lot)
    await uow.commit()
    return created
