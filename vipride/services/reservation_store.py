from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from vipride.core.errors import (
    QueryError,
    TransientConnectionError,
    TRANSIENT_KINDS,
    classify_db_error,
    is_transient_connection_error,
)
from vipride.core.logger import logger
from vipride.core.retry import RetryPolicy, exponential_backoff, retry_async
from vipride.models.db_models import Reservation
from vipride.services.db_service import DatabasePool, db_pool

RESERVATION_FIELDS = (
    "customer_name",
    "customer_email",
    "customer_phone",
    "pickup_location",
    "dropoff_location",
    "pickup_date",
    "pickup_time",
    "vehicle_type",
    "service_type",
    "passengers",
    "special_requests",
    "status",
)

CREATE_RETRY_POLICY = RetryPolicy(
    max_attempts=3,
    backoff=exponential_backoff,
    is_retryable=is_transient_connection_error,
)


def _translate(exc: SQLAlchemyError, action: str) -> Exception:
    kind = classify_db_error(exc)
    if kind in TRANSIENT_KINDS:
        return TransientConnectionError(f"{action}: {exc}", kind=kind)
    return QueryError(f"{action}: {exc}")


class ReservationStore:
    """
    The only component that talks to the `reservations` table.
    Only `create` retries; reads and status updates fail fast.
    """

    def __init__(self, pool: DatabasePool = db_pool, retry_policy: RetryPolicy = CREATE_RETRY_POLICY):
        self.pool = pool
        self.retry_policy = retry_policy

    async def _insert(self, values: dict) -> int:
        logger.info(f"📝 Inserting reservation (status={values.get('status')}, service={values.get('service_type')})")
        reservation = Reservation(**values)
        try:
            async with self.pool.session() as session:
                session.add(reservation)
                await session.commit()
        except SQLAlchemyError as e:
            raise _translate(e, "insert reservation") from e

        reservation_id = reservation.id
        logger.info(f"✅ Reservation {reservation_id} stored")
        return reservation_id

    async def create(self, reservation_data: dict) -> int:
        """
        Inserts a reservation and returns its new id.
        Connection resets/losses are retried (3 attempts, 2s then 4s apart);
        every other failure propagates immediately.
        """
        values = {key: reservation_data[key] for key in RESERVATION_FIELDS if key in reservation_data}
        return await retry_async(
            lambda: self._insert(values),
            self.retry_policy,
            name="Reservation.create",
        )

    async def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        try:
            async with self.pool.session() as session:
                return await session.get(Reservation, reservation_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error (find_by_id {reservation_id}): {e}")
            raise _translate(e, "find reservation") from e

    async def find_all(self) -> List[Reservation]:
        try:
            async with self.pool.session() as session:
                result = await session.execute(
                    select(Reservation).order_by(Reservation.created_at.desc(), Reservation.id.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error (find_all): {e}")
            raise _translate(e, "list reservations") from e

    async def update_status(self, reservation_id: int, status: str) -> None:
        """Overwrites the status. Unknown ids are silently ignored."""
        try:
            async with self.pool.session() as session:
                await session.execute(
                    update(Reservation).where(Reservation.id == reservation_id).values(status=status)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"❌ DB Error (update_status {reservation_id}): {e}")
            raise _translate(e, "update reservation status") from e

        logger.info(f"🔄 Reservation {reservation_id} status -> {status}")


reservation_store = ReservationStore()
