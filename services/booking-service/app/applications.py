"""
Worker applications to open bookings and the accept/reject protocol.

Accepting an application assigns its worker through the same guarded claim
used by PUT /bookings/{id}/claim, then rejects the remaining pending
applications for that booking.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import (
    AlreadyAssigned,
    DuplicateApplication,
    InvalidState,
    NotAcceptingApplications,
    NotFound,
)
from .lifecycle import BookingLifecycle
from .models import ApplicationStatus, BookingApplication
from .repositories import ApplicationRepository, BookingRepository
from .schemas import CreateApplicationRequest

logger = logging.getLogger(__name__)


class ApplicationService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.applications = ApplicationRepository(db)
        self.bookings = BookingRepository(db)
        self.lifecycle = BookingLifecycle(db)

    async def get(self, application_id: uuid.UUID) -> BookingApplication:
        application = await self.applications.get(application_id)
        if not application:
            raise NotFound("Application not found")
        return application

    async def create(self, worker_id: uuid.UUID, data: CreateApplicationRequest) -> BookingApplication:
        booking = await self.bookings.get(data.booking_id)
        if not booking:
            raise NotFound("Booking not found")

        if not booking.is_open:
            raise NotAcceptingApplications()

        if booking.worker_id is not None:
            raise AlreadyAssigned()

        if await self.applications.exists_for(booking.id, worker_id):
            raise DuplicateApplication()

        application = BookingApplication(
            booking_id=booking.id,
            worker_id=worker_id,
            message=data.message,
            proposed_price=data.proposed_price,
            status=ApplicationStatus.PENDING,
        )
        try:
            await self.applications.add(application)
            await self.db.commit()
        except IntegrityError:
            # lost a race against the same worker's concurrent submission
            await self.db.rollback()
            raise DuplicateApplication()

        logger.info("worker %s applied to booking %s", worker_id, booking.id)
        return await self.get(application.id)

    async def list_for_booking(self, booking_id: uuid.UUID) -> list[BookingApplication]:
        return await self.applications.list_by_booking(booking_id)

    async def list_for_worker(self, worker_id: uuid.UUID) -> list[BookingApplication]:
        return await self.applications.list_by_worker(worker_id)

    async def accept(self, application_id: uuid.UUID) -> BookingApplication:
        application = await self.get(application_id)
        if application.status != ApplicationStatus.PENDING:
            raise InvalidState("Only pending applications can be accepted")

        booking_id = application.booking_id
        worker_id = application.worker_id

        booking = await self.bookings.get(booking_id)
        if not booking:
            raise NotFound("Booking not found")
        if booking.worker_id is not None:
            raise AlreadyAssigned()
        if not booking.is_open:
            raise NotAcceptingApplications()

        # claim + accept commit together
        await self.lifecycle.assign(booking_id, worker_id)
        if not await self.applications.set_status(application_id, ApplicationStatus.ACCEPTED):
            await self.db.rollback()
            raise InvalidState("Only pending applications can be accepted")
        await self.db.commit()

        logger.info(
            "application %s accepted, booking %s assigned to worker %s",
            application_id, booking_id, worker_id,
        )

        await self._reject_siblings(booking_id, application_id)
        return await self.get(application_id)

    async def reject(self, application_id: uuid.UUID) -> BookingApplication:
        application = await self.get(application_id)
        if application.status != ApplicationStatus.PENDING:
            raise InvalidState("Only pending applications can be rejected")

        if not await self.applications.set_status(application_id, ApplicationStatus.REJECTED):
            await self.db.rollback()
            raise InvalidState("Only pending applications can be rejected")
        await self.db.commit()

        logger.info("application %s rejected", application_id)
        return await self.get(application_id)

    async def _reject_siblings(self, booking_id: uuid.UUID, accepted_id: uuid.UUID) -> int:
        """
        Best effort: each sibling is rejected in its own transaction. A failed
        write leaves that sibling pending and is only logged.
        """
        sibling_ids = await self.applications.pending_sibling_ids(booking_id, accepted_id)

        rejected = 0
        for sibling_id in sibling_ids:
            try:
                if await self.applications.set_status(sibling_id, ApplicationStatus.REJECTED):
                    rejected += 1
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.warning(
                    "could not reject application %s for booking %s: %s",
                    sibling_id, booking_id, e,
                )

        if sibling_ids:
            logger.info("rejected %d/%d competing applications for booking %s",
                        rejected, len(sibling_ids), booking_id)
        return rejected
