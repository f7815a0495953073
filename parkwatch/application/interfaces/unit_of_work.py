from __future__ import annotations

from typing import Protocol

from parkwatch.domain.ports.cars_repo import CarsRepo
from parkwatch.domain.ports.parking_lots_repo import ParkingLotsRepo


class UnitOfWork(Protocol):
    parking_lots: ParkingLotsRepo
    cars: CarsRepo

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
