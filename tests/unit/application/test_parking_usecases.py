from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from parkwatch.application.errors import NotFound, StorageError, ValidationError
from parkwatch.application.use_cases.parking import (
    add_car,
    get_lot,
    list_car_history,
    list_current_cars,
    register_lot,
    remove_car,
)
from parkwatch.domain.models.car_record import CarRecord
from parkwatch.domain.models.parking_lot import ParkingLot

T0 = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class StubLotsRepo:
    def __init__(self) -> None:
        self.lots: dict[str, ParkingLot] = {}
        self.writes = 0

    async def add(self, lot: ParkingLot) -> ParkingLot:
        self.writes += 1
        self.lots[lot.id] = lot
        return lot

    async def get(self, lot_id: str) -> ParkingLot | None:
        return self.lots.get(lot_id)


class StubCarsRepo:
    def __init__(self) -> None:
        self.current: dict[tuple[str, str], CarRecord] = {}
        self.history: dict[tuple[str, str], CarRecord] = {}
        self.writes = 0

    async def add_current(self, record: CarRecord) -> CarRecord:
        self.writes += 1
        self.current[(record.parking_lot_id, record.unique_code)] = record
        return record

    async def get_current(self, lot_id, unique_code):
        return self.current.get((lot_id, unique_code))

    async def find_current_by_plate(self, lot_id, plate):
        matches = [
            r
            for (lid, _), r in self.current.items()
            if lid == lot_id and r.car_number_plate == plate
        ]
        return sorted(matches, key=lambda r: (r.time_of_entry, r.unique_code))

    async def list_current(self, lot_id):
        return [r for (lid, _), r in self.current.items() if lid == lot_id]

    async def move_to_history(self, record: CarRecord) -> bool:
        self.writes += 1
        key = (record.parking_lot_id, record.unique_code)
        if self.current.pop(key, None) is None:
            return False
        self.history[key] = record
        return True

    async def list_history(self, lot_id):
        return [r for (lid, _), r in self.history.items() if lid == lot_id]


class StubStorage:
    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def put_object(self, key, data, content_type):
        self.objects[key] = (data, content_type)

    async def get_read_url(self, key):
        return f"https://files.test/{key}"


def make_uow():
    state = SimpleNamespace(commits=0, rollbacks=0)

    async def commit():
        state.commits += 1

    async def rollback():
        state.rollbacks += 1

    return SimpleNamespace(
        parking_lots=StubLotsRepo(),
        cars=StubCarsRepo(),
        commit=commit,
        rollback=rollback,
        state=state,
    )


def seed_lot(uow, lot_id: str = "lot-1") -> ParkingLot:
    lot = ParkingLot(id=lot_id, name="Main St", time_zone="UTC")
    uow.parking_lots.lots[lot_id] = lot
    return lot


def seed_car(uow, code: str, plate: str, entered: datetime, lot_id: str = "lot-1") -> CarRecord:
    record = CarRecord(
        unique_code=code,
        parking_lot_id=lot_id,
        car_number_plate=plate,
        time_of_entry=entered,
        image_url=f"https://files.test/cars/{code}.jpg",
    )
    uow.cars.current[(lot_id, code)] = record
    return record


async def test_register_lot_round_trip():
    uow = make_uow()
    created = await register_lot.execute(
        uow, register_lot.RegisterLotInput(name="Main St", time_zone="Europe/Madrid")
    )
    fetched = await get_lot.execute(uow, created.id)
    assert (fetched.name, fetched.time_zone) == ("Main St", "Europe/Madrid")
    assert uow.state.commits == 1


async def test_register_lot_generates_distinct_ids():
    uow = make_uow()
    payload = register_lot.RegisterLotInput(name="Main St", time_zone="UTC")
    first = await register_lot.execute(uow, payload)
    second = await register_lot.execute(uow, payload)
    assert first.id != second.id


@pytest.mark.parametrize(
    "name, time_zone",
    [(None, "UTC"), ("Main St", None), ("", "UTC"), ("Main St", "   ")],
)
async def test_register_lot_requires_fields(name, time_zone):
    uow = make_uow()
    with pytest.raises(ValidationError):
        await register_lot.execute(
            uow, register_lot.RegisterLotInput(name=name, time_zone=time_zone)
        )
    assert uow.parking_lots.writes == 0
    assert uow.state.commits == 0


async def test_get_lot_unknown_raises_not_found():
    uow = make_uow()
    with pytest.raises(NotFound):
        await get_lot.execute(uow, "missing")


async def test_add_car_creates_current_record_and_stores_photo():
    uow = make_uow()
    seed_lot(uow)
    storage = StubStorage()
    started = datetime.now(timezone.utc)

    record = await add_car.execute(
        uow,
        storage,
        add_car.AddCarInput(parking_lot_id="lot-1", number_plate="ABC123", image=b"\xff\xd8jpeg"),
    )

    key = f"cars/{record.unique_code}.jpg"
    assert storage.objects[key] == (b"\xff\xd8jpeg", "image/jpeg")
    assert record.image_url == f"https://files.test/{key}"
    assert record.time_of_entry >= started
    assert record.time_of_exit is None
    current = await list_current_cars.execute(uow, "lot-1")
    assert [(r.unique_code, r.car_number_plate) for r in current] == [
        (record.unique_code, "ABC123")
    ]


async def test_add_car_ignores_client_entry_time():
    uow = make_uow()
    seed_lot(uow)
    record = await add_car.execute(
        uow,
        StubStorage(),
        add_car.AddCarInput(
            parking_lot_id="lot-1",
            number_plate="ABC123",
            image=b"img",
            time_of_entry="1999-01-01T00:00:00Z",
        ),
        clock=lambda: T0,
    )
    assert record.time_of_entry == T0


async def test_add_car_unknown_lot():
    uow = make_uow()
    storage = StubStorage()
    with pytest.raises(NotFound, match="Parking lot"):
        await add_car.execute(
            uow,
            storage,
            add_car.AddCarInput(parking_lot_id="nope", number_plate="ABC123", image=b"img"),
        )
    assert storage.objects == {}
    assert uow.cars.writes == 0


@pytest.mark.parametrize(
    "lot_id, plate, image",
    [
        (None, "ABC123", b"img"),
        ("lot-1", None, b"img"),
        ("lot-1", "ABC123", None),
        ("lot-1", "ABC123", b""),
    ],
)
async def test_add_car_requires_fields(lot_id, plate, image):
    uow = make_uow()
    seed_lot(uow)
    storage = StubStorage()
    with pytest.raises(ValidationError):
        await add_car.execute(
            uow,
            storage,
            add_car.AddCarInput(parking_lot_id=lot_id, number_plate=plate, image=image),
        )
    assert storage.objects == {}
    assert uow.cars.writes == 0


async def test_add_car_without_storage_service():
    uow = make_uow()
    seed_lot(uow)
    with pytest.raises(StorageError):
        await add_car.execute(
            uow,
            None,
            add_car.AddCarInput(parking_lot_id="lot-1", number_plate="ABC123", image=b"img"),
        )
    assert uow.cars.writes == 0


async def test_add_car_storage_failure_surfaces():
    uow = make_uow()
    seed_lot(uow)

    class FailingStorage(StubStorage):
        async def put_object(self, key, data, content_type):
            raise StorageError("bucket unavailable")

    with pytest.raises(StorageError):
        await add_car.execute(
            uow,
            FailingStorage(),
            add_car.AddCarInput(parking_lot_id="lot-1", number_plate="ABC123", image=b"img"),
        )
    assert uow.cars.current == {}


async def test_concurrent_add_car_never_collides():
    uow = make_uow()
    seed_lot(uow)
    storage = StubStorage()
    payload = add_car.AddCarInput(parking_lot_id="lot-1", number_plate="ABC123", image=b"img")
    records = await asyncio.gather(*(add_car.execute(uow, storage, payload) for _ in range(10)))
    assert len({r.unique_code for r in records}) == 10
    assert len(await list_current_cars.execute(uow, "lot-1")) == 10


async def test_remove_car_by_unique_code_moves_to_history():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)

    result = await remove_car.execute(
        uow,
        remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="code-1"),
        clock=lambda: T0 + timedelta(hours=2),
    )

    assert result.time_of_entry == T0
    assert result.time_of_exit == T0 + timedelta(hours=2)
    assert ("lot-1", "code-1") not in uow.cars.current
    history = await list_car_history.execute(uow, "lot-1")
    assert [r.unique_code for r in history] == ["code-1"]
    assert history[0].time_of_exit >= history[0].time_of_entry
    assert uow.state.commits == 1


async def test_remove_car_by_plate():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)
    result = await remove_car.execute(
        uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="ABC123")
    )
    assert result.unique_code == "code-1"
    assert uow.cars.current == {}


async def test_remove_car_plate_tie_break_picks_earliest_entry():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "zzz", "DUP1", T0)
    seed_car(uow, "aaa", "DUP1", T0 + timedelta(minutes=5))
    seed_car(uow, "bbb", "DUP1", T0 + timedelta(minutes=5))

    first = await remove_car.execute(
        uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="DUP1")
    )
    second = await remove_car.execute(
        uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="DUP1")
    )
    assert [first.unique_code, second.unique_code] == ["zzz", "aaa"]


async def test_remove_car_direct_key_beats_plate_match():
    uow = make_uow()
    seed_lot(uow)
    # car "other" carries a plate that equals the unique code of car "target"
    seed_car(uow, "other", "target", T0)
    seed_car(uow, "target", "XYZ999", T0 + timedelta(minutes=1))

    result = await remove_car.execute(
        uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="target")
    )
    assert result.unique_code == "target"
    assert ("lot-1", "other") in uow.cars.current


async def test_remove_car_clamps_exit_to_entry():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)
    result = await remove_car.execute(
        uow,
        remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="code-1"),
        clock=lambda: T0 - timedelta(seconds=3),
    )
    assert result.time_of_exit == T0


async def test_remove_car_unknown_lot():
    uow = make_uow()
    with pytest.raises(NotFound, match="Parking lot"):
        await remove_car.execute(
            uow, remove_car.RemoveCarInput(parking_lot_id="nope", identifier="ABC123")
        )


async def test_remove_car_storage_failure_keeps_car_current():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)

    async def failing_move(record):
        raise StorageError("Failed to move car to history")

    uow.cars.move_to_history = failing_move  # type: ignore

    with pytest.raises(StorageError):
        await remove_car.execute(
            uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="code-1")
        )
    assert uow.state.commits == 0
    assert ("lot-1", "code-1") in uow.cars.current
    assert uow.cars.history == {}


async def test_remove_car_unknown_car():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)
    with pytest.raises(NotFound, match="Car"):
        await remove_car.execute(
            uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="NOPE")
        )
    assert uow.cars.writes == 0


async def test_remove_car_is_scoped_to_lot():
    uow = make_uow()
    seed_lot(uow, "lot-1")
    seed_lot(uow, "lot-2")
    seed_car(uow, "code-1", "ABC123", T0, lot_id="lot-2")
    with pytest.raises(NotFound):
        await remove_car.execute(
            uow, remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="code-1")
        )


@pytest.mark.parametrize("lot_id, identifier", [(None, "ABC123"), ("lot-1", None), ("lot-1", "")])
async def test_remove_car_requires_fields(lot_id, identifier):
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)
    with pytest.raises(ValidationError):
        await remove_car.execute(
            uow, remove_car.RemoveCarInput(parking_lot_id=lot_id, identifier=identifier)
        )
    assert uow.cars.writes == 0


async def test_concurrent_checkout_of_same_car_moves_it_once():
    uow = make_uow()
    seed_lot(uow)
    seed_car(uow, "code-1", "ABC123", T0)
    payload = remove_car.RemoveCarInput(parking_lot_id="lot-1", identifier="code-1")
    read_current = uow.cars.get_current

    async def slow_get_current(lot_id, unique_code):
        # both checkouts read the record before either moves it
        record = await read_current(lot_id, unique_code)
        await asyncio.sleep(0)
        return record

    uow.cars.get_current = slow_get_current  # type: ignore

    results = await asyncio.gather(
        remove_car.execute(uow, payload),
        remove_car.execute(uow, payload),
        return_exceptions=True,
    )

    assert sum(isinstance(r, CarRecord) for r in results) == 1
    assert sum(isinstance(r, NotFound) for r in results) == 1
    assert uow.cars.current == {}
    assert list(uow.cars.history) == [("lot-1", "code-1")]
    assert uow.state.rollbacks == 1


async def test_list_current_unknown_lot_is_empty():
    uow = make_uow()
    assert await list_current_cars.execute(uow, "nope") == []


async def test_list_current_requires_lot_id():
    uow = make_uow()
    with pytest.raises(ValidationError):
        await list_current_cars.execute(uow, None)


async def test_list_history_requires_lot_id():
    uow = make_uow()
    with pytest.raises(ValidationError):
        await list_car_history.execute(uow, "  ")
