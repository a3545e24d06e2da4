from datetime import datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from vipride.core.config import settings
from vipride.core.logger import logger
from vipride.models.schemas import BookingDetails, ReservationStatus, ServiceType
from vipride.services.notification_service import send_booking_confirmation
from vipride.services.reservation_store import ReservationStore, reservation_store

DEFAULT_VEHICLE_NAME = "VIP Transfer"

# Booking reference prefixes generated by the booking wizards
REFERENCE_PREFIXES = (
    ("TOUR-", ServiceType.TOUR),
    ("TRF-", ServiceType.TRANSFER),
    ("CHF-", ServiceType.CHAUFFEUR),
)


def service_type_from_reference(reference: Optional[str]) -> ServiceType:
    for prefix, service_type in REFERENCE_PREFIXES:
        if reference and reference.startswith(prefix):
            return service_type
    return ServiceType.TRANSFER


def build_reservation(details: BookingDetails) -> dict:
    """Maps the wizard's bookingDetails onto a reservations row."""
    return {
        "customer_name": f"{details.firstName or ''} {details.lastName or ''}".strip(),
        "customer_email": details.email or "",
        "customer_phone": (details.phone or "").strip(),
        "pickup_location": details.pickupLocation or "",
        "dropoff_location": details.dropoffLocation or "",
        "pickup_date": details.date or "",
        "pickup_time": details.time or "",
        "vehicle_type": details.serviceName or DEFAULT_VEHICLE_NAME,
        "service_type": service_type_from_reference(details.bookingReference).value,
        "passengers": details.passengers or 1,
        "special_requests": details.specialRequests or "",
        # No pending state: the wizard only calls us after the card was charged
        "status": ReservationStatus.CONFIRMED.value,
    }


class BookingService:
    def __init__(self, store: ReservationStore = reservation_store, swallow_persistence_errors: Optional[bool] = None):
        self.store = store
        if swallow_persistence_errors is None:
            swallow_persistence_errors = settings.BOOKING_SWALLOW_PERSISTENCE_ERRORS
        self.swallow_persistence_errors = swallow_persistence_errors

    async def send_confirmation(self, details: BookingDetails) -> bool:
        try:
            sent = await run_in_threadpool(send_booking_confirmation, details)
        except Exception as e:
            logger.error(f"❌ Confirmation email crashed for {details.bookingReference}: {e}")
            return False

        if not sent:
            logger.error(f"❌ Confirmation email not sent for {details.bookingReference}")
        return sent

    async def process_booking(self, details: BookingDetails) -> Optional[int]:
        """
        Stores the reservation and emails the customer.
        Returns the reservation id, or None when storing failed and the
        failure was swallowed. Email problems never fail the booking.
        """
        started = datetime.now()
        reservation = build_reservation(details)
        logger.info(f"📥 Booking {details.bookingReference or '-'} ({reservation['service_type']}) for {details.email or '-'}")

        try:
            reservation_id = await self.store.create(reservation)
        except Exception as e:
            if not self.swallow_persistence_errors:
                raise
            logger.error(f"❌ Reservation for {details.bookingReference} NOT stored, customer still gets success: {e}")
            return None

        await self.send_confirmation(details)

        duration = (datetime.now() - started).total_seconds()
        logger.info(f"🏁 Booking {details.bookingReference} stored as #{reservation_id} in {duration:.2f}s")
        return reservation_id


booking_service = BookingService()
