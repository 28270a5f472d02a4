import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from .db import get_db
from .lifecycle import BookingLifecycle
from .rbac import require_user_type
from .schemas import (
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    ClaimBookingRequest,
    CreateBookingRequest,
    UpdateBookingStatusRequest,
)
from .security import get_current_user, user_id_of

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_lifecycle(db: AsyncSession = Depends(get_db)) -> BookingLifecycle:
    return BookingLifecycle(db)


def _envelope(message: str, booking) -> BookingEnvelope:
    return BookingEnvelope(message=message, booking=BookingResponse.model_validate(booking))


def _listing(bookings) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        count=len(bookings),
    )


@router.post("", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: CreateBookingRequest,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["customer"], "Only customers can create bookings")
    booking = await lifecycle.create_for_user(user_id_of(user), data)
    return _envelope("Booking created successfully", booking)


@router.get("/open", response_model=BookingListResponse)
async def get_open_bookings(
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["worker"], "Only workers can view open bookings")
    return _listing(await lifecycle.list_open())


@router.get("/user/{user_id}", response_model=BookingListResponse)
async def get_user_bookings(
    user_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return _listing(await lifecycle.list_for_user(user_id, user.get("user_type")))


@router.get("/worker/{worker_id}", response_model=BookingListResponse)
async def get_worker_bookings(
    worker_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return _listing(await lifecycle.list_for_worker(worker_id))


@router.put("/{booking_id}/accept", response_model=BookingEnvelope)
async def accept_booking(
    booking_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["worker"], "Only workers can accept bookings")
    return _envelope("Booking accepted successfully", await lifecycle.accept(booking_id))


@router.put("/{booking_id}/decline", response_model=BookingEnvelope)
async def decline_booking(
    booking_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["worker"], "Only workers can decline bookings")
    return _envelope("Booking declined successfully", await lifecycle.decline(booking_id))


@router.put("/{booking_id}/complete", response_model=BookingEnvelope)
async def complete_booking(
    booking_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["worker"], "Only workers can complete bookings")
    return _envelope("Booking completed successfully", await lifecycle.complete(booking_id))


@router.put("/{booking_id}/claim", response_model=BookingEnvelope)
async def claim_booking(
    booking_id: uuid.UUID,
    data: ClaimBookingRequest | None = None,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    require_user_type(user, ["worker"], "Only workers can claim bookings")

    worker_id = data.worker_id if data else None
    if worker_id is None:
        worker = await lifecycle.identity.get_or_create_worker(user_id_of(user))
        worker_id = worker.id

    return _envelope("Booking claimed successfully", await lifecycle.claim(booking_id, worker_id))


@router.patch("/{booking_id}/status", response_model=BookingEnvelope)
async def update_booking_status(
    booking_id: uuid.UUID,
    data: UpdateBookingStatusRequest,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    booking = await lifecycle.update_status(booking_id, data.status)
    return _envelope("Booking status updated successfully", booking)


@router.delete("/{booking_id}", response_model=BookingEnvelope)
async def cancel_booking(
    booking_id: uuid.UUID,
    user=Depends(get_current_user),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    return _envelope("Booking cancelled successfully", await lifecycle.cancel(booking_id))
