from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ServiceType(str, Enum):
    TRANSFER = "TRANSFER"
    TOUR = "TOUR"
    CHAUFFEUR = "CHAUFFEUR"


class ReservationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# --- Reservations ---

class ReservationCreate(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    pickup_location: str = ""
    dropoff_location: str = ""
    pickup_date: str = ""
    pickup_time: str = ""
    vehicle_type: str = ""
    service_type: ServiceType = ServiceType.TRANSFER
    passengers: int = Field(default=1, ge=1)
    special_requests: str = ""
    status: ReservationStatus = ReservationStatus.CONFIRMED


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    pickup_location: str
    dropoff_location: str
    pickup_date: str
    pickup_time: str
    vehicle_type: str
    service_type: str
    passengers: int
    special_requests: str
    status: str
    created_at: datetime


class StatusUpdate(BaseModel):
    status: ReservationStatus


# --- Payment / booking ---

class BookingDetails(BaseModel):
    # The wizards send nulls and numbers for fields they never filled in
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    serviceName: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    pickupLocation: Optional[str] = None
    dropoffLocation: Optional[str] = None
    totalPrice: Optional[Union[float, str]] = None
    bookingReference: Optional[str] = None
    passengers: Optional[int] = None
    specialRequests: Optional[str] = None


class PaymentRequest(BaseModel):
    """Body sent by the booking wizards. Gateway fields are passed through untouched."""
    price: Optional[Any] = None
    paidPrice: Optional[Any] = None
    currency: Optional[str] = "EUR"
    basketId: Optional[Any] = None
    paymentCard: Optional[Dict[str, Any]] = None
    buyer: Optional[Dict[str, Any]] = None
    shippingAddress: Optional[Dict[str, Any]] = None
    billingAddress: Optional[Dict[str, Any]] = None
    basketItems: Optional[List[Any]] = None
    bookingDetails: Optional[BookingDetails] = None


class EmailRequest(BaseModel):
    to: EmailStr
    subject: str
    text: Optional[str] = None
    html: Optional[str] = None


# --- Transfers ---

class VehicleQuote(BaseModel):
    vehicle_id: str
    name: str
    price: int
    discounted_price: Optional[int] = None
    passenger_capacity: int
    luggage_capacity: int


class TransferQuote(BaseModel):
    from_location: str
    to_location: str
    transfer_type: str
    distance_km: float
    distance_estimated: bool
    travel_time: str
    vehicles: List[VehicleQuote]
