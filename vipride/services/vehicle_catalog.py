import math
from dataclasses import dataclass
from typing import Dict, List, Optional

BASE_RATE_PER_KM = 1  # EUR


@dataclass(frozen=True)
class Vehicle:
    id: str
    name: str
    base_price: int
    price_multiplier: float
    passenger_capacity: int
    luggage_capacity: int
    category: str
    discount_percentage: int = 0
    available: bool = True
    available_for_transfer: bool = True
    available_for_chauffeur: bool = True


VEHICLES: List[Vehicle] = [
    Vehicle("renault-trafic", "Renault Trafic", 50, 1.1, 8, 6, "minivan"),
    Vehicle("mercedes-s-class", "Mercedes-Benz S Class", 80, 1.6, 3, 3, "sedan"),
    Vehicle("mercedes-vito-tourer", "Mercedes-Benz Vito Tourer", 60, 1.3, 7, 5, "minivan", discount_percentage=5),
    Vehicle("mercedes-sprinter", "Mercedes-Benz Sprinter", 70, 1.4, 12, 10, "minibus"),
    Vehicle("mercedes-sprinter-vip", "Mercedes-Benz Sprinter VIP", 100, 1.8, 14, 12, "minibus", discount_percentage=10),
]

_BY_ID: Dict[str, Vehicle] = {vehicle.id: vehicle for vehicle in VEHICLES}


def get_vehicle(vehicle_id: str) -> Optional[Vehicle]:
    return _BY_ID.get(vehicle_id)


def filter_vehicles_by_capacity(passengers: int, luggage: int, for_service: str = "both") -> List[Vehicle]:
    """
    Vehicles that fit the party. `for_service` is "transfer", "chauffeur" or "both".
    """
    matches = []
    for vehicle in VEHICLES:
        if not vehicle.available:
            continue
        if vehicle.passenger_capacity < passengers or vehicle.luggage_capacity < luggage:
            continue
        if for_service == "transfer" and not vehicle.available_for_transfer:
            continue
        if for_service == "chauffeur" and not vehicle.available_for_chauffeur:
            continue
        matches.append(vehicle)
    return matches


def calculate_vehicle_price(vehicle_id: str, distance_km: float) -> int:
    """Distance price times the vehicle multiplier, rounded to the nearest 10 EUR."""
    vehicle = get_vehicle(vehicle_id)
    if vehicle is None:
        return 0
    price = distance_km * BASE_RATE_PER_KM * vehicle.price_multiplier
    # half-up, so 45 EUR becomes 50
    return int(math.floor(price / 10 + 0.5) * 10)


def discounted_price(vehicle: Vehicle, price: int) -> Optional[int]:
    if vehicle.discount_percentage <= 0:
        return None
    return int(round(price * (100 - vehicle.discount_percentage) / 100))
