import os
import tempfile
import uuid
from datetime import date, timedelta
from pathlib import Path

import pytest

_DB_DIR = Path(tempfile.mkdtemp(prefix="booking-service-tests-"))
os.environ["BOOKING_DB"] = f"sqlite+aiosqlite:///{_DB_DIR / 'bookings.db'}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"

import httpx  # noqa: E402
from jose import jwt  # noqa: E402

from booking_service.db import Base, SessionLocal, engine  # noqa: E402
from booking_service.main import app  # noqa: E402
from booking_service.models import (  # noqa: E402
    Booking,
    BookingApplication,
    BookingStatus,
    Customer,
    Worker,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def session(db_schema):
    async with SessionLocal() as s:
        yield s


@pytest.fixture
def make_customer(session):
    async def _make(**kwargs) -> Customer:
        customer = Customer(
            user_id=kwargs.pop("user_id", None) or uuid.uuid4(),
            full_name=kwargs.pop("full_name", "Casey Customer"),
            email=kwargs.pop("email", "casey@example.com"),
            **kwargs,
        )
        session.add(customer)
        await session.commit()
        return customer

    return _make


@pytest.fixture
def make_worker(session):
    async def _make(**kwargs) -> Worker:
        worker = Worker(
            user_id=kwargs.pop("user_id", None) or uuid.uuid4(),
            full_name=kwargs.pop("full_name", "Wren Worker"),
            specialty=kwargs.pop("specialty", "plumbing"),
            **kwargs,
        )
        session.add(worker)
        await session.commit()
        return worker

    return _make


@pytest.fixture
def make_booking(session):
    async def _make(customer: Customer, **kwargs) -> Booking:
        worker = kwargs.pop("worker", None)
        booking = Booking(
            customer_id=customer.id,
            worker_id=worker.id if worker else None,
            is_open=kwargs.pop("is_open", worker is None),
            title=kwargs.pop("title", "Fix leaking pipe"),
            scheduled_date=kwargs.pop("scheduled_date", date.today() + timedelta(days=7)),
            location=kwargs.pop("location", "12 Harbour Rd"),
            status=kwargs.pop("status", BookingStatus.PENDING),
            **kwargs,
        )
        session.add(booking)
        await session.commit()
        return booking

    return _make


@pytest.fixture
def make_application(session):
    async def _make(booking: Booking, worker: Worker, **kwargs) -> BookingApplication:
        application = BookingApplication(
            booking_id=booking.id,
            worker_id=worker.id,
            message=kwargs.pop("message", "Available that week"),
            proposed_price=kwargs.pop("proposed_price", 150.0),
            **kwargs,
        )
        session.add(application)
        await session.commit()
        return application

    return _make


async def _load(model, pk):
    async with SessionLocal() as s:
        return await s.get(model, pk)


@pytest.fixture
def load():
    """Read a row through a short-lived session so no write lock is left open."""
    return _load


def token_for(user_id: uuid.UUID, user_type: str) -> str:
    return jwt.encode(
        {"sub": str(user_id), "user_type": user_type},
        os.environ["JWT_SECRET"],
        algorithm=os.environ["JWT_ALGORITHM"],
    )


def _auth_headers(user_id: uuid.UUID, user_type: str) -> dict:
    return {"Authorization": f"Bearer {token_for(user_id, user_type)}"}


@pytest.fixture
def auth():
    return _auth_headers


@pytest.fixture
async def client(db_schema):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
