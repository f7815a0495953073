from __future__ import annotations

from fastapi import APIRouter, Depends, status

from parkwatch.application.use_cases.parking import get_lot, register_lot
from parkwatch.infrastructure.db.session import SQLAlchemyUnitOfWork
from parkwatch.interfaces.http.deps import get_uow
from parkwatch.interfaces.http.schemas.parking import (
    ParkingLotOut,
    ParkingLotResponse,
    RegisterLotRequest,
    RegisterLotResponse,
)

router = APIRouter(prefix="/parking-lots", tags=["parking-lots"])


@router.post("", response_model=RegisterLotResponse, status_code=status.HTTP_201_CREATED)
async def register_parking_lot(
    payload: RegisterLotRequest,
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
) -> RegisterLotResponse:
    lot = await register_lot.execute(
        uow, register_lot.RegisterLotInput(name=payload.name, time_zone=payload.time_zone)
    )
    return RegisterLotResponse(parking_lot_id=lot.id)


@router.get("/{parking_lot_id}", response_model=ParkingLotResponse)
async def get_parking_lot(
    parking_lot_id: str,
    uow: SQLAlchemyUnitOfWork = Depends(get_uow),
) -> ParkingLotResponse:
    lot = await get_lot.execute(uow, parking_lot_id)
    return ParkingLotResponse(
        parking_lot=ParkingLotOut(id=lot.id, name=lot.name, time_zone=lot.time_zone)
    )
