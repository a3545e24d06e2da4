import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from vipride.core.errors import TransientConnectionError
from vipride.models.schemas import BookingDetails, ServiceType
from vipride.services.booking_service import (
    DEFAULT_VEHICLE_NAME,
    BookingService,
    build_reservation,
    service_type_from_reference,
)


def details(**overrides):
    data = {
        "email": "john@example.com",
        "firstName": "John",
        "lastName": "Smith",
        "phone": "  +44 7700 900123 ",
        "serviceName": "Mercedes-Benz S Class",
        "date": "2025-07-10",
        "time": "09:15",
        "pickupLocation": "Sabiha Gokcen Airport",
        "dropoffLocation": "Sultanahmet",
        "totalPrice": 80,
        "bookingReference": "TRF-1699999999",
    }
    data.update(overrides)
    return BookingDetails(**data)


@pytest.mark.parametrize("reference, expected", [
    ("TOUR-1699999999", ServiceType.TOUR),
    ("TRF-1699999999", ServiceType.TRANSFER),
    ("CHF-1699999999", ServiceType.CHAUFFEUR),
    ("XYZ-1", ServiceType.TRANSFER),
    ("", ServiceType.TRANSFER),
    (None, ServiceType.TRANSFER),
    ("chf-123", ServiceType.TRANSFER),
])
def test_service_type_from_reference(reference, expected):
    assert service_type_from_reference(reference) == expected


def test_build_reservation_fields():
    reservation = build_reservation(details(bookingReference="CHF-00042"))

    assert reservation["customer_name"] == "John Smith"
    assert reservation["customer_phone"] == "+44 7700 900123"
    assert reservation["service_type"] == "CHAUFFEUR"
    assert reservation["vehicle_type"] == "Mercedes-Benz S Class"
    assert reservation["passengers"] == 1
    assert reservation["special_requests"] == ""
    assert reservation["status"] == "CONFIRMED"


def test_build_reservation_fallbacks():
    reservation = build_reservation(details(phone=None, serviceName=None, passengers=0, firstName="", lastName=""))

    assert reservation["customer_phone"] == ""
    assert reservation["vehicle_type"] == DEFAULT_VEHICLE_NAME
    assert reservation["passengers"] == 1
    assert reservation["customer_name"] == ""


def test_build_reservation_keeps_passengers_and_requests():
    reservation = build_reservation(details(passengers=5, specialRequests="Meet & greet sign"))
    assert reservation["passengers"] == 5
    assert reservation["special_requests"] == "Meet & greet sign"


@pytest.mark.asyncio
@patch("vipride.services.booking_service.send_booking_confirmation", return_value=True)
async def test_process_booking_stores_and_emails(mock_send):
    store = MagicMock()
    store.create = AsyncMock(return_value=17)
    service = BookingService(store=store, swallow_persistence_errors=True)

    assert await service.process_booking(details()) == 17
    store.create.assert_awaited_once()
    mock_send.assert_called_once()


@pytest.mark.asyncio
@patch("vipride.services.booking_service.send_booking_confirmation")
async def test_persistence_failure_is_swallowed(mock_send):
    store = MagicMock()
    store.create = AsyncMock(side_effect=TransientConnectionError("Lost connection"))
    service = BookingService(store=store, swallow_persistence_errors=True)

    assert await service.process_booking(details()) is None
    mock_send.assert_not_called()


@pytest.mark.asyncio
async def test_persistence_failure_propagates_when_policy_disabled():
    store = MagicMock()
    store.create = AsyncMock(side_effect=TransientConnectionError("Lost connection"))
    service = BookingService(store=store, swallow_persistence_errors=False)

    with pytest.raises(TransientConnectionError):
        await service.process_booking(details())


@pytest.mark.asyncio
@patch("vipride.services.booking_service.send_booking_confirmation", side_effect=RuntimeError("SMTP down"))
async def test_email_failure_does_not_fail_booking(mock_send):
    store = MagicMock()
    store.create = AsyncMock(return_value=3)
    service = BookingService(store=store)

    assert await service.process_booking(details()) == 3
    mock_send.assert_called_once()
