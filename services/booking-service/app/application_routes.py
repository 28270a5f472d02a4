import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from .applications import ApplicationService
from .db import get_db
from .identity import IdentityResolver
from .rbac import require_user_type
from .schemas import (
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationResponse,
    CreateApplicationRequest,
)
from .security import get_current_user, user_id_of

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_application_service(db: AsyncSession = Depends(get_db)) -> ApplicationService:
    return ApplicationService(db)


def get_identity(db: AsyncSession = Depends(get_db)) -> IdentityResolver:
    return IdentityResolver(db)


def _envelope(message: str, application) -> ApplicationEnvelope:
    return ApplicationEnvelope(
        message=message,
        application=ApplicationResponse.model_validate(application),
    )


def _listing(applications) -> ApplicationListResponse:
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(a) for a in applications],
        count=len(applications),
    )


@router.post("", response_model=ApplicationEnvelope, status_code=status.HTTP_201_CREATED)
async def create_application(
    data: CreateApplicationRequest,
    user=Depends(get_current_user),
    identity: IdentityResolver = Depends(get_identity),
    service: ApplicationService = Depends(get_application_service),
):
    require_user_type(user, ["worker"], "Only workers can apply to bookings")
    worker = await identity.get_or_create_worker(user_id_of(user))
    application = await service.create(worker.id, data)
    return _envelope("Application submitted successfully", application)


@router.get("/my", response_model=ApplicationListResponse)
async def get_my_applications(
    user=Depends(get_current_user),
    identity: IdentityResolver = Depends(get_identity),
    service: ApplicationService = Depends(get_application_service),
):
    require_user_type(user, ["worker"], "Only workers have applications")
    worker = await identity.get_or_create_worker(user_id_of(user))
    return _listing(await service.list_for_worker(worker.id))


@router.get("/booking/{booking_id}", response_model=ApplicationListResponse)
async def get_booking_applications(
    booking_id: uuid.UUID,
    user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    require_user_type(user, ["customer"], "Only customers can view booking applications")
    return _listing(await service.list_for_booking(booking_id))


@router.put("/{application_id}/accept", response_model=ApplicationEnvelope)
async def accept_application(
    application_id: uuid.UUID,
    user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    require_user_type(user, ["customer"], "Only customers can accept applications")
    return _envelope("Application accepted successfully", await service.accept(application_id))


@router.put("/{application_id}/reject", response_model=ApplicationEnvelope)
async def reject_application(
    application_id: uuid.UUID,
    user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    require_user_type(user, ["customer"], "Only customers can reject applications")
    return _envelope("Application rejected successfully", await service.reject(application_id))
