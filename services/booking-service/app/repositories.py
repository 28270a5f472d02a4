"""Database access for bookings, applications and the identity records they point at.

Repositories never commit; the calling service owns the transaction.
"""

import uuid
from collections.abc import Iterable

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    ApplicationStatus,
    Booking,
    BookingApplication,
    BookingStatus,
    Customer,
    Worker,
)


class BookingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def get(self, booking_id: uuid.UUID) -> Booking | None:
        res = await self.db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def list_by_customer(self, customer_id: uuid.UUID) -> list[Booking]:
        res = await self.db.execute(
            select(Booking)
            .where(Booking.customer_id == customer_id)
            .order_by(Booking.scheduled_date.desc(), Booking.created_at.desc())
        )
        return list(res.scalars().all())

    async def list_by_worker(self, worker_id: uuid.UUID) -> list[Booking]:
        res = await self.db.execute(
            select(Booking)
            .where(Booking.worker_id == worker_id)
            .order_by(Booking.scheduled_date.desc(), Booking.created_at.desc())
        )
        return list(res.scalars().all())

    async def list_open(self) -> list[Booking]:
        res = await self.db.execute(
            select(Booking)
            .where(
                Booking.is_open.is_(True),
                Booking.worker_id.is_(None),
                Booking.status == BookingStatus.PENDING,
            )
            .order_by(Booking.created_at.desc())
        )
        return list(res.scalars().all())

    async def claim_open(self, booking_id: uuid.UUID, worker_id: uuid.UUID) -> bool:
        """
        Conditional assignment. Only applies while the booking is still open and
        unassigned at write time; returns False when zero rows were touched.
        """
        res = await self.db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.is_open.is_(True),
                Booking.worker_id.is_(None),
            )
            .values(worker_id=worker_id, is_open=False)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    async def transition(
        self,
        booking_id: uuid.UUID,
        allowed_from: Iterable[str],
        target: str,
        **values,
    ) -> bool:
        res = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status.in_(list(allowed_from)))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    async def set_status(self, booking_id: uuid.UUID, status: str, **values) -> bool:
        # no transition check, see BookingLifecycle.update_status
        res = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(status=status, **values)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1


class ApplicationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, application: BookingApplication) -> BookingApplication:
        self.db.add(application)
        await self.db.flush()
        return application

    async def get(self, application_id: uuid.UUID) -> BookingApplication | None:
        res = await self.db.execute(
            select(BookingApplication)
            .where(BookingApplication.id == application_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def exists_for(self, booking_id: uuid.UUID, worker_id: uuid.UUID) -> bool:
        res = await self.db.execute(
            select(
                exists().where(
                    BookingApplication.booking_id == booking_id,
                    BookingApplication.worker_id == worker_id,
                )
            )
        )
        return bool(res.scalar())

    async def list_by_booking(self, booking_id: uuid.UUID) -> list[BookingApplication]:
        res = await self.db.execute(
            select(BookingApplication)
            .where(BookingApplication.booking_id == booking_id)
            .order_by(BookingApplication.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(res.scalars().all())

    async def list_by_worker(self, worker_id: uuid.UUID) -> list[BookingApplication]:
        res = await self.db.execute(
            select(BookingApplication)
            .where(BookingApplication.worker_id == worker_id)
            .order_by(BookingApplication.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(res.scalars().all())

    async def pending_sibling_ids(
        self, booking_id: uuid.UUID, exclude_id: uuid.UUID
    ) -> list[uuid.UUID]:
        res = await self.db.execute(
            select(BookingApplication.id).where(
                BookingApplication.booking_id == booking_id,
                BookingApplication.id != exclude_id,
                BookingApplication.status == ApplicationStatus.PENDING,
            )
        )
        return list(res.scalars().all())

    async def set_status(
        self,
        application_id: uuid.UUID,
        status: str,
        expected: str | None = ApplicationStatus.PENDING,
    ) -> bool:
        stmt = update(BookingApplication).where(BookingApplication.id == application_id)
        if expected is not None:
            stmt = stmt.where(BookingApplication.status == expected)
        res = await self.db.execute(
            stmt.values(status=status).execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    async def delete(self, application_id: uuid.UUID) -> bool:
        res = await self.db.execute(
            delete(BookingApplication)
            .where(BookingApplication.id == application_id)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1


class CustomerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_user_id(self, user_id: uuid.UUID) -> Customer | None:
        res = await self.db.execute(select(Customer).where(Customer.user_id == user_id))
        return res.scalar_one_or_none()


class WorkerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, worker_id: uuid.UUID) -> Worker | None:
        res = await self.db.execute(select(Worker).where(Worker.id == worker_id))
        return res.scalar_one_or_none()

    async def get_by_user_id(self, user_id: uuid.UUID) -> Worker | None:
        res = await self.db.execute(select(Worker).where(Worker.user_id == user_id))
        return res.scalar_one_or_none()

    async def add(self, worker: Worker) -> Worker:
        self.db.add(worker)
        await self.db.flush()
        return worker
