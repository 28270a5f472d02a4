import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import ProfileNotFound
from .models import Customer, Worker
from .repositories import CustomerRepository, WorkerRepository

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps an authenticated user id onto the customer/worker record the core works with."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.customers = CustomerRepository(db)
        self.workers = WorkerRepository(db)

    async def customer_for_user(self, user_id: uuid.UUID) -> Customer:
        customer = await self.customers.get_by_user_id(user_id)
        if not customer:
            raise ProfileNotFound("Customer profile not found")
        return customer

    async def worker_for_user(self, user_id: uuid.UUID) -> Worker:
        worker = await self.workers.get_by_user_id(user_id)
        if not worker:
            raise ProfileNotFound("Worker profile not found")
        return worker

    async def get_or_create_worker(self, user_id: uuid.UUID) -> Worker:
        worker = await self.workers.get_by_user_id(user_id)
        if worker:
            return worker

        try:
            worker = await self.workers.add(Worker(user_id=user_id))
            await self.db.commit()
        except IntegrityError:
            # another request created it first
            await self.db.rollback()
            worker = await self.workers.get_by_user_id(user_id)
            if not worker:
                raise
            return worker

        logger.info("created worker profile %s for user %s", worker.id, user_id)
        return worker
