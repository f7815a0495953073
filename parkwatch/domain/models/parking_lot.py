from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from parkwatch.utils.datetime_tz import utc_now


@dataclass(slots=True)
class ParkingLot:
    id: str
    name: str
    time_zone: str
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, name: str, time_zone: str) -> ParkingLot:
        return cls(id=str(uuid4()), name=name, time_zone=time_zone)
