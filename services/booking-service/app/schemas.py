import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

# ---- Requests ----

class CreateBookingRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    scheduled_date: date
    duration_hours: int | None = Field(default=None, ge=0)
    location: str = Field(min_length=1)
    notes: str | None = None
    total_cost: float | None = Field(default=None, ge=0)
    is_open: bool = False
    worker_id: uuid.UUID | None = None

class ClaimBookingRequest(BaseModel):
    # defaults to the caller's own worker profile
    worker_id: uuid.UUID | None = None

class UpdateBookingStatusRequest(BaseModel):
    status: str = Field(min_length=1, max_length=32)

class CreateApplicationRequest(BaseModel):
    booking_id: uuid.UUID
    message: str | None = None
    proposed_price: float | None = Field(default=None, ge=0)

# ---- Identity ----

class CustomerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str | None = None
    email: str | None = None

class WorkerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str | None = None
    email: str | None = None
    specialty: str
    availability_status: str

# ---- Booking ----

class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    customer_id: uuid.UUID
    worker_id: uuid.UUID | None = None
    is_open: bool
    title: str
    description: str | None = None
    scheduled_date: date
    duration_hours: int | None = None
    location: str
    notes: str | None = None
    total_cost: float | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    customer: CustomerSummary | None = None
    worker: WorkerSummary | None = None

class BookingEnvelope(BaseModel):
    message: str
    booking: BookingResponse

class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    count: int

# ---- Applications ----

class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    booking_id: uuid.UUID
    worker_id: uuid.UUID
    message: str | None = None
    proposed_price: float | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    worker: WorkerSummary | None = None
    booking: BookingResponse | None = None

class ApplicationEnvelope(BaseModel):
    message: str
    application: ApplicationResponse

class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    count: int

# ---- Errors ----

class ErrorResponse(BaseModel):
    error: str
    message: str
