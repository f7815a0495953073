from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterLotRequest(CamelModel):
    name: str | None = None
    time_zone: str | None = None


class RegisterLotResponse(CamelModel):
    success: bool = True
    parking_lot_id: str


class ParkingLotOut(CamelModel):
    id: str
    name: str
    time_zone: str


class ParkingLotResponse(CamelModel):
    success: bool = True
    parking_lot: ParkingLotOut


class AddCarRequest(CamelModel):
    parking_lot_id: str | None = None
    number_plate: str | None = None
    image_base64: str | None = None
    time_of_entry: str | None = None


class AddCarResponse(CamelModel):
    success: bool = True
    unique_code: str


class RemoveCarRequest(CamelModel):
    parking_lot_id: str | None = None
    identifier: str | None = None


class RemoveCarResponse(CamelModel):
    success: bool = True
    time_of_entry: str
    time_of_exit: str


class CarOut(CamelModel):
    unique_code: str
    car_number_plate: str
    time_of_entry: str
    image_url: str
    time_of_exit: str | None = None


class CarsListResponse(CamelModel):
    success: bool = True
    cars: list[CarOut]
