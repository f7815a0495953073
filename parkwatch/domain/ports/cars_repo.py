from __future__ import annotations

from abc import ABC, abstractmethod

from parkwatch.domain.models.car_record import CarRecord


class CarsRepo(ABC):
    """Current and history sets of car records, scoped per parking lot."""

    @abstractmethod
    async def add_current(self, record: CarRecord) -> CarRecord: ...

    @abstractmethod
    async def get_current(self, lot_id: str, unique_code: str) -> CarRecord | None: ...

    @abstractmethod
    async def find_current_by_plate(self, lot_id: str, plate: str) -> list[CarRecord]:
        """Current records with the given plate, earliest entry first, ties by unique code."""

    @abstractmethod
    async def list_current(self, lot_id: str) -> list[CarRecord]: ...

    @abstractmethod
    async def move_to_history(self, record: CarRecord) -> bool:
        """Delete `record` from current, then write it into history.

        Returns False when the record was no longer in current, i.e. another
        checkout already moved it.
        """

    @abstractmethod
    async def list_history(self, lot_id: str) -> list[CarRecord]: ...
