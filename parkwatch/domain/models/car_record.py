from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import uuid4


def new_unique_code() -> str:
    return str(uuid4())


def car_image_key(unique_code: str, prefix: str = "cars/") -> str:
    return f"{prefix}{unique_code}.jpg"


@dataclass(slots=True)
class CarRecord:
    """A single parking session of a car inside one lot.

    Lives in the lot's current set until checkout, then in its history set
    with `time_of_exit` filled in.
    """

    unique_code: str
    parking_lot_id: str
    car_number_plate: str
    time_of_entry: datetime
    image_url: str
    time_of_exit: datetime | None = None

    @property
    def checked_out(self) -> bool:
        return self.time_of_exit is not None

    def check_out(self, at: datetime) -> CarRecord:
        # exit never precedes entry even with a skewed clock
        exit_time = at if at >= self.time_of_entry else self.time_of_entry
        return replace(self, time_of_exit=exit_time)
