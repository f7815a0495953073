from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Depends, Query, status

from parkwatch.application.errors import ValidationError
from parkwatch.application.use_cases.parking import (
    add_car,
    list_car_history,
    list_current_cars,
    remove_car,
)
from parkwatch.config.settings import Settings
from parkwatch.domain.models.car_record import CarRecord
from parkwatch.infrastructure.db.session import SQLAlchemyUnitOfWork
from parkwatch.infrastructure.storage.ports import StorageService
from parkwatch.interfaces.http.deps import get_app_settings, get_storage_service, get_uow
from parkwatch.interfaces.http.schemas.parking import (
    AddCarRequest,
    AddCarResponse,
    CarOut,
    CarsListResponse,
    RemoveCarRequest,
    RemoveCarResponse,
)
from parkwatch.utils.datetime_tz import to_iso_utc

router = APIRouter(prefix="/cars", tags=["cars"])


def decode_image(image_base64: str | None) -> bytes | None:
    """Decode a base64 photo, tolerating a `data:image/...;base64,` prefix."""
    if not image_base64:
        return None
    text = image_base64.strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("imageBase64 is not valid base64") from exc


def to_car_out(record: CarRecord) -> CarOut:
    return CarOut(
        unique_code=record.unique_code,
        car_number_plate=record.car_number_plate,
        time_of_entry=to_iso_utc(record.time_of_entry),
        image_url=record.image_url,
        time_of_exit=to_iso_utc(record.time_of_exit),
    )


@router.post("", response_model=AddCarResponse, status_code=status.HTTP_201_CREATED)
async def add_car_endpoint(
    payload: AddCarRequest,
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
    storage: StorageService | None = Depends(get_storage_service),
    settings: Settings = Depends(get_app_settings),
) -> AddCarResponse:
    record = await add_car.execute(
        uow,
        storage,
        add_car.AddCarInput(
            parking_lot_id=payload.parking_lot_id,
            number_plate=payload.number_plate,
            image=decode_image(payload.image_base64),
            time_of_entry=payload.time_of_entry,
        ),
        image_prefix=settings.car_image_prefix,
    )
    return AddCarResponse(unique_code=record.unique_code)


@router.post("/remove", response_model=RemoveCarResponse)
async def remove_car_endpoint(
    payload: RemoveCarRequest,
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
) -> RemoveCarResponse:
    record = await remove_car.execute(
        uow,
        remove_car.RemoveCarInput(
            parking_lot_id=payload.parking_lot_id, identifier=payload.identifier
        ),
    )
    return RemoveCarResponse(
        time_of_entry=to_iso_utc(record.time_of_entry),
        time_of_exit=to_iso_utc(record.time_of_exit),
    )


@router.get("/current", response_model=CarsListResponse)
async def list_current_cars_endpoint(
    parking_lot_id: str | None = Query(None, alias="parkingLotId"),
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
) -> CarsListResponse:
    records = await list_current_cars.execute(uow, parking_lot_id)
    return CarsListResponse(cars=[to_car_out(x) for x in records])


@router.get("/history", response_model=CarsListResponse)
async def list_car_history_endpoint(
    parking_lot_id: str | None = Query(None, alias="parkingLotId"),
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
) -> CarsListResponse:
    records = await list_car_history.execute(uow, parking_lot_id)
    return CarsListResponse(cars=[to_car_out(x) for x in records])
