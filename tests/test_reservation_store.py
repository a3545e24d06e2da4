import pymysql
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import IntegrityError, OperationalError

from vipride.core.errors import QueryError, TransientConnectionError
from vipride.services.db_service import DatabasePool
from vipride.services.reservation_store import ReservationStore


def sample_reservation(**overrides):
    data = {
        "customer_name": "Ayse Yilmaz",
        "customer_email": "ayse@example.com",
        "customer_phone": "+905551234567",
        "pickup_location": "Istanbul Airport (IST)",
        "dropoff_location": "Taksim",
        "pickup_date": "2025-06-01",
        "pickup_time": "14:30",
        "vehicle_type": "Mercedes-Benz Vito Tourer",
        "service_type": "TRANSFER",
        "passengers": 3,
        "special_requests": "Child seat",
        "status": "CONFIRMED",
    }
    data.update(overrides)
    return data


@pytest_asyncio.fixture
async def pool():
    pool = DatabasePool()
    await pool.initialize("sqlite+aiosqlite://")
    await pool.init_db()
    yield pool
    await pool.close()


@pytest.mark.asyncio
async def test_create_then_find_by_id(pool):
    store = ReservationStore(pool)
    data = sample_reservation()

    reservation_id = await store.create(data)
    reservation = await store.find_by_id(reservation_id)

    assert reservation.id == reservation_id
    assert reservation.created_at is not None
    for key, value in data.items():
        assert getattr(reservation, key) == value


@pytest.mark.asyncio
async def test_find_by_id_missing_returns_none(pool):
    store = ReservationStore(pool)
    assert await store.find_by_id(9999) is None


@pytest.mark.asyncio
async def test_find_all_newest_first(pool):
    store = ReservationStore(pool)
    ids = [await store.create(sample_reservation(customer_name=f"Guest {i}")) for i in range(4)]

    reservations = await store.find_all()

    assert [r.id for r in reservations] == list(reversed(ids))
    created = [r.created_at for r in reservations]
    assert all(a >= b for a, b in zip(created, created[1:]))


@pytest.mark.asyncio
async def test_update_status_accepts_any_string(pool):
    store = ReservationStore(pool)
    reservation_id = await store.create(sample_reservation())

    await store.update_status(reservation_id, "DRIVER_ON_THE_WAY")
    assert (await store.find_by_id(reservation_id)).status == "DRIVER_ON_THE_WAY"

    await store.update_status(reservation_id, "CANCELLED")
    assert (await store.find_by_id(reservation_id)).status == "CANCELLED"


@pytest.mark.asyncio
async def test_update_status_unknown_id_is_noop(pool):
    store = ReservationStore(pool)
    await store.update_status(12345, "CANCELLED")
    assert await store.find_all() == []


# --- retry behaviour against a failing session ---

class ScriptedSession:
    """Session whose commit() raises the scripted errors in order, then succeeds."""

    def __init__(self, script):
        self.script = script

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def add(self, obj):
        self.obj = obj

    async def commit(self):
        self.script["attempts"] += 1
        if self.script["errors"]:
            raise self.script["errors"].pop(0)
        self.obj.id = 42


class ScriptedPool:
    def __init__(self, errors):
        self.script = {"errors": list(errors), "attempts": 0}

    def session(self):
        return ScriptedSession(self.script)


def lost_connection():
    return OperationalError("INSERT", {}, pymysql.err.OperationalError(2013, "Lost connection to MySQL server during query"))


def connection_reset():
    return OperationalError("INSERT", {}, ConnectionResetError(104, "Connection reset by peer"))


def duplicate_entry():
    return IntegrityError("INSERT", {}, pymysql.err.IntegrityError(1062, "Duplicate entry"))


@pytest.mark.asyncio
@pytest.mark.parametrize("failures, attempts", [(0, 1), (1, 2), (2, 3)])
async def test_create_retries_transient_errors(failures, attempts):
    pool = ScriptedPool([lost_connection() for _ in range(failures)])
    store = ReservationStore(pool)

    with patch("vipride.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        assert await store.create(sample_reservation()) == 42

    assert pool.script["attempts"] == attempts
    assert [c.args[0] for c in sleep.await_args_list] == [2, 4][:failures]


@pytest.mark.asyncio
async def test_create_gives_up_after_three_attempts():
    pool = ScriptedPool([connection_reset(), lost_connection(), connection_reset(), lost_connection()])
    store = ReservationStore(pool)

    with patch("vipride.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(TransientConnectionError) as exc_info:
            await store.create(sample_reservation())

    assert pool.script["attempts"] == 3
    assert sleep.await_count == 2
    assert exc_info.value.kind == "connection_reset"
    assert isinstance(exc_info.value.__cause__, OperationalError)


@pytest.mark.asyncio
async def test_create_does_not_retry_query_errors():
    pool = ScriptedPool([duplicate_entry()])
    store = ReservationStore(pool)

    with patch("vipride.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(QueryError):
            await store.create(sample_reservation())

    assert pool.script["attempts"] == 1
    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_reads_surface_query_error(pool):
    store = ReservationStore(pool)
    await pool.close()
    await pool.initialize("sqlite+aiosqlite://")  # fresh database without the table

    with pytest.raises(QueryError):
        await store.find_all()
