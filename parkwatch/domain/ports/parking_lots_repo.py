from __future__ import annotations

from abc import ABC, abstractmethod

from parkwatch.domain.models.parking_lot import ParkingLot


class ParkingLotsRepo(ABC):
    @abstractmethod
    async def add(self, lot: ParkingLot) -> ParkingLot: ...

    @abstractmethod
    async def get(self, lot_id: str) -> ParkingLot | None: ...
