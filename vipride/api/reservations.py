from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from vipride.core.errors import ReservationStoreError
from vipride.core.logger import logger
from vipride.models.schemas import ReservationCreate, ReservationOut, StatusUpdate
from vipride.services import reservation_store as store

router = APIRouter()


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.post("", response_model=ReservationOut, status_code=201)
async def create_reservation(req: ReservationCreate):
    try:
        reservation_id = await store.reservation_store.create(req.model_dump(mode="json"))
        return await store.reservation_store.find_by_id(reservation_id)
    except ReservationStoreError as e:
        logger.error(f"❌ Error creating reservation: {e}")
        return _error("Failed to create reservation")


@router.get("", response_model=List[ReservationOut])
async def list_reservations():
    try:
        return await store.reservation_store.find_all()
    except ReservationStoreError as e:
        logger.error(f"❌ Error fetching reservations: {e}")
        return _error("Failed to fetch reservations")


@router.get("/{reservation_id}", response_model=ReservationOut)
async def get_reservation(reservation_id: int):
    try:
        reservation = await store.reservation_store.find_by_id(reservation_id)
    except ReservationStoreError as e:
        logger.error(f"❌ Error fetching reservation {reservation_id}: {e}")
        return _error("Failed to fetch reservation")

    if reservation is None:
        return JSONResponse(status_code=404, content={"error": "Reservation not found"})
    return reservation


@router.patch("/{reservation_id}/status", response_model=ReservationOut)
async def update_reservation_status(reservation_id: int, req: StatusUpdate):
    try:
        await store.reservation_store.update_status(reservation_id, req.status.value)
        reservation = await store.reservation_store.find_by_id(reservation_id)
    except ReservationStoreError as e:
        logger.error(f"❌ Error updating reservation {reservation_id} status: {e}")
        return _error("Failed to update reservation status")

    if reservation is None:
        return JSONResponse(status_code=404, content={"error": "Reservation not found"})
    return reservation
