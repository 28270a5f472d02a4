"""
Booking lifecycle: creation, worker assignment and status transitions.

    pending --accept--> accepted --complete--> completed
    pending --decline--> declined
    pending|accepted --cancel--> cancelled

`is_open` only matters while a booking is pending with no worker; every checked
transition clears it. Claiming an
open booking and accepting an application both go through
BookingRepository.claim_open, a conditional UPDATE, so the first writer wins
and every later attempt sees zero affected rows.
"""

import logging
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from .errors import AlreadyClaimed, InvalidTransition, NotFound, ValidationFailed
from .identity import IdentityResolver
from .models import Booking, BookingStatus
from .repositories import BookingRepository, WorkerRepository
from .schemas import CreateBookingRequest

logger = logging.getLogger(__name__)

# target status -> statuses it may be entered from
TRANSITIONS = {
    BookingStatus.ACCEPTED: (BookingStatus.PENDING,),
    BookingStatus.DECLINED: (BookingStatus.PENDING,),
    BookingStatus.COMPLETED: (BookingStatus.ACCEPTED,),
    BookingStatus.CANCELLED: (BookingStatus.PENDING, BookingStatus.ACCEPTED),
}


class BookingLifecycle:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingRepository(db)
        self.workers = WorkerRepository(db)
        self.identity = IdentityResolver(db)

    async def get(self, booking_id: uuid.UUID) -> Booking:
        booking = await self.bookings.get(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        return booking

    async def create_for_user(self, user_id: uuid.UUID, data: CreateBookingRequest) -> Booking:
        customer = await self.identity.customer_for_user(user_id)

        if data.scheduled_date < date.today():
            raise ValidationFailed("Cannot book dates in the past")

        if data.is_open and data.worker_id is not None:
            raise ValidationFailed("An open booking cannot be assigned to a worker")

        if data.worker_id is not None and not await self.workers.get(data.worker_id):
            raise NotFound("Worker not found")

        booking = Booking(
            customer_id=customer.id,
            worker_id=data.worker_id,
            is_open=data.is_open,
            title=data.title,
            description=data.description,
            scheduled_date=data.scheduled_date,
            duration_hours=data.duration_hours,
            location=data.location,
            notes=data.notes,
            total_cost=data.total_cost,
            status=BookingStatus.PENDING,
        )
        await self.bookings.add(booking)
        await self.db.commit()

        logger.info(
            "booking %s created by customer %s (open=%s, worker=%s)",
            booking.id, customer.id, booking.is_open, booking.worker_id,
        )
        return await self.get(booking.id)

    async def list_for_user(self, user_id: uuid.UUID, user_type: str | None) -> list[Booking]:
        if user_type == "worker":
            worker = await self.identity.worker_for_user(user_id)
            return await self.bookings.list_by_worker(worker.id)

        customer = await self.identity.customer_for_user(user_id)
        return await self.bookings.list_by_customer(customer.id)

    async def list_for_worker(self, worker_id: uuid.UUID) -> list[Booking]:
        return await self.bookings.list_by_worker(worker_id)

    async def list_open(self) -> list[Booking]:
        return await self.bookings.list_open()

    async def accept(self, booking_id: uuid.UUID) -> Booking:
        return await self._transition(booking_id, BookingStatus.ACCEPTED)

    async def decline(self, booking_id: uuid.UUID) -> Booking:
        return await self._transition(booking_id, BookingStatus.DECLINED)

    async def complete(self, booking_id: uuid.UUID) -> Booking:
        return await self._transition(booking_id, BookingStatus.COMPLETED)

    async def cancel(self, booking_id: uuid.UUID) -> Booking:
        # soft cancel: the row stays for applications and messages that reference it
        return await self._transition(booking_id, BookingStatus.CANCELLED)

    async def update_status(self, booking_id: uuid.UUID, status: str) -> Booking:
        """
        Administrative override. Writes `status` as given, without any
        transition check. Use the named transitions for normal flow.
        Any status other than pending also closes the booking.
        """
        values = {} if status == BookingStatus.PENDING else {"is_open": False}
        if not await self.bookings.set_status(booking_id, status, **values):
            await self.db.rollback()
            raise NotFound("Booking not found")
        await self.db.commit()

        logger.warning("booking %s status overridden to %r", booking_id, status)
        return await self.get(booking_id)

    async def claim(self, booking_id: uuid.UUID, worker_id: uuid.UUID) -> Booking:
        if not await self.workers.get(worker_id):
            raise NotFound("Worker not found")

        await self.assign(booking_id, worker_id)
        await self.db.commit()

        logger.info("booking %s claimed by worker %s", booking_id, worker_id)
        return await self.get(booking_id)

    async def assign(self, booking_id: uuid.UUID, worker_id: uuid.UUID) -> None:
        """
        Guarded assignment inside the caller's transaction. Rolls back and
        raises when the booking is missing or no longer open and unassigned.
        """
        if await self.bookings.claim_open(booking_id, worker_id):
            return

        await self.db.rollback()
        if not await self.bookings.get(booking_id):
            raise NotFound("Booking not found")
        raise AlreadyClaimed()

    async def _transition(self, booking_id: uuid.UUID, target: str) -> Booking:
        allowed_from = TRANSITIONS[target]
        # every target is outside pending, so the booking can no longer be open
        if await self.bookings.transition(booking_id, allowed_from, target, is_open=False):
            await self.db.commit()
            logger.info("booking %s -> %s", booking_id, target)
            return await self.get(booking_id)

        await self.db.rollback()
        booking = await self.bookings.get(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        raise InvalidTransition(booking.status, target)
