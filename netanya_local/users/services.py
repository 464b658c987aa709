import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.common.db import get_async_session, atomic
from netanya_local.common.errors import ConflictError
from netanya_local.users import crud, schemas
from netanya_local.users.models import AdminUser, BusinessOwner

logger = logging.getLogger(__name__)


class OwnerService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def create_owner(self, data: schemas.OwnerCreate, *, admin: AdminUser) -> BusinessOwner:
        if await crud.get_owner_by_email(self.session, data.email):
            raise ConflictError("Owner with this email already exists")
        try:
            async with atomic(self.session, "create owner"):
                owner = await crud.create_owner(self.session, email=data.email, name=data.name)
        except IntegrityError:
            # параллельная регистрация с тем же email
            raise ConflictError("Owner with this email already exists")
        logger.info("Owner #%s (%s) created by admin #%s", owner.id, owner.email, admin.id)
        return owner

    async def list_owners(self) -> list[BusinessOwner]:
        return list(await crud.list_owners(self.session))


class AdminAccountService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def list_admins(self) -> list[AdminUser]:
        return list(await crud.list_admins(self.session))

    async def set_telegram_id(self, admin: AdminUser, telegram_id: Optional[int]) -> AdminUser:
        """Привязать (или отвязать) чат для уведомлений о новых заявках."""
        if telegram_id is not None:
            taken = await crud.get_admin_by_telegram_id(self.session, telegram_id)
            if taken and taken.id != admin.id:
                raise ConflictError("telegram_id already linked to another admin")
        async with atomic(self.session, "update admin telegram id"):
            admin.telegram_id = telegram_id
            self.session.add(admin)
        logger.info("Admin #%s telegram_id=%s", admin.id, telegram_id)
        return admin
