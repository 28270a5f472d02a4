import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApplicationStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    city = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Worker(Base):
    __tablename__ = "workers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, unique=True, nullable=False, index=True)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    specialty = Column(String, nullable=False, default="general")
    availability_status = Column(String, nullable=False, default="available")
    hourly_rate = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    customer_id = Column(Uuid, ForeignKey("customers.id"), nullable=False, index=True)
    worker_id = Column(Uuid, ForeignKey("workers.id"), nullable=True, index=True)
    is_open = Column(Boolean, nullable=False, default=False, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    scheduled_date = Column(Date, nullable=False)
    duration_hours = Column(Integer, nullable=True)
    location = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    total_cost = Column(Float, nullable=True)

    status = Column(String, nullable=False, default=BookingStatus.PENDING, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer = relationship(Customer, lazy="selectin")
    worker = relationship(Worker, lazy="selectin")


class BookingApplication(Base):
    __tablename__ = "booking_applications"
    __table_args__ = (
        UniqueConstraint("booking_id", "worker_id", name="uq_booking_applications_booking_worker"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id = Column(Uuid, ForeignKey("bookings.id"), nullable=False, index=True)
    worker_id = Column(Uuid, ForeignKey("workers.id"), nullable=False, index=True)

    message = Column(Text, nullable=True)
    proposed_price = Column(Float, nullable=True)
    status = Column(String, nullable=False, default=ApplicationStatus.PENDING, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    booking = relationship(Booking, lazy="selectin")
    worker = relationship(Worker, lazy="selectin")
