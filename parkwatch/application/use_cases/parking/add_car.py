from __future__ import annotations

import logging
from dataclasses import dataclass

from parkwatch.application.errors import NotFound, StorageError, ValidationError
from parkwatch.application.interfaces.unit_of_work import UnitOfWork
from parkwatch.application.use_cases.parking._validation import require_text
from parkwatch.domain.models.car_record import CarRecord, car_image_key, new_unique_code
from parkwatch.infrastructure.storage.ports import StorageService
from parkwatch.utils.datetime_tz import Clock, utc_now

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE = "image/jpeg"


@dataclass(slots=True)
class AddCarInput:
    parking_lot_id: str | None
    number_plate: str | None
    image: bytes | None
    # accepted for compatibility, always replaced by server time
    time_of_entry: str | None = None


async def execute(
    uow: UnitOfWork,
    storage: StorageService | None,
    payload: AddCarInput,
    *,
    clock: Clock = utc_now,
    image_prefix: str = "cars/",
) -> CarRecord:
    fields = require_text(parkingLotId=payload.parking_lot_id, numberPlate=payload.number_plate)
    if not payload.image:
        raise ValidationError("Missing required fields: image", details={"missing": ["image"]})

    lot = await uow.parking_lots.get(fields["parkingLotId"])
    if not lot:
        raise NotFound("Parking lot not found")
    if storage is None:
        raise StorageError("Storage service not configured")

    unique_code = new_unique_code()
    time_of_entry = clock()

    key = car_image_key(unique_code, image_prefix)
    await storage.put_object(key, payload.image, IMAGE_CONTENT_TYPE)
    image_url = await storage.get_read_url(key)

    record = CarRecord(
        unique_code=unique_code,
        parking_lot_id=lot.id,
        car_number_plate=fields["numberPlate"],
        time_of_entry=time_of_entry,
        image_url=image_url,
    )
    created = await uow.cars.add_current(record)
    await uow.commit()
    logger.info(
        "Car %s checked in to lot %s (time zone %s)", unique_code, lot.id, lot.time_zone
    )
    return created
