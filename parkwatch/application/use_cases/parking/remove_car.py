from __future__ import annotations

import logging
from dataclasses import dataclass

from parkwatch.application.errors import NotFound
from parkwatch.application.interfaces.unit_of_work import UnitOfWork
from parkwatch.application.use_cases.parking._validation import require_text
from parkwatch.domain.models.car_record import CarRecord
from parkwatch.utils.datetime_tz import Clock, utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RemoveCarInput:
    parking_lot_id: str | None
    identifier: str | None


async def resolve(uow: UnitOfWork, lot_id: str, identifier: str) -> CarRecord:
    """Find a current car by unique code, falling back to its plate.

    A direct key match always wins. Among several cars sharing the plate, the
    one that entered first is chosen (ties broken by unique code).
    """
    record = await uow.cars.get_current(lot_id, identifier)
    if record:
        return record
    matches = await uow.cars.find_current_by_plate(lot_id, identifier)
    if not matches:
        raise NotFound("Car not found")
    return matches[0]


async def execute(
    uow: UnitOfWork, payload: RemoveCarInput, *, clock: Clock = utc_now
) -> CarRecord:
    fields = require_text(parkingLotId=payload.parking_lot_id, identifier=payload.identifier)
    lot_id = fields["parkingLotId"]

    lot = await uow.parking_lots.get(lot_id)
    if not lot:
        raise NotFound("Parking lot not found")

    record = await resolve(uow, lot_id, fields["identifier"])
    checked_out = record.check_out(clock())
    moved = await uow.cars.move_to_history(checked_out)
    if not moved:
        # a concurrent checkout got there first
        await uow.rollback()
        raise NotFound("Car not found")
    await uow.commit()
    logger.info("Car %s checked out of lot %s", checked_out.unique_code, lot_id)
    return checked_out
