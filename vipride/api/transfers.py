from fastapi import APIRouter, Query

from vipride.models.schemas import TransferQuote, VehicleQuote
from vipride.services.distance_service import default_distance, estimated_time, real_distance
from vipride.services.vehicle_catalog import calculate_vehicle_price, discounted_price, filter_vehicles_by_capacity

router = APIRouter()


@router.get("/transfers/quote", response_model=TransferQuote)
async def transfer_quote(
    from_location: str,
    to_location: str,
    transfer_type: str = Query("airport", pattern="^(airport|intercity|city)$"),
    passengers: int = Query(1, ge=1),
    luggage: int = Query(0, ge=0),
):
    distance = real_distance(from_location, to_location)
    estimated = distance is None
    if estimated:
        distance = float(default_distance(transfer_type))

    vehicles = []
    for vehicle in filter_vehicles_by_capacity(passengers, luggage, "transfer"):
        price = calculate_vehicle_price(vehicle.id, distance)
        vehicles.append(VehicleQuote(
            vehicle_id=vehicle.id,
            name=vehicle.name,
            price=price,
            discounted_price=discounted_price(vehicle, price),
            passenger_capacity=vehicle.passenger_capacity,
            luggage_capacity=vehicle.luggage_capacity,
        ))

    return TransferQuote(
        from_location=from_location,
        to_location=to_location,
        transfer_type=transfer_type,
        distance_km=distance,
        distance_estimated=estimated,
        travel_time=estimated_time(distance),
        vehicles=vehicles,
    )
