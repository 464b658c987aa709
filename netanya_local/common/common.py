import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from netanya_local.common.db import get_async_session
from netanya_local.common.errors import AuthorizationError
from netanya_local.users.models import AdminUser, BusinessOwner

logger = logging.getLogger(__name__)


class CurrentAdmin:
    """
    Resolves the admin identity forwarded by the session layer (``X-Admin-Id``).

    The cookie/session check happens upstream; here we only map the verified id
    to an ``AdminUser`` row.
    """

    def __init__(self, require_super: bool = False, optional: bool = False):
        self.require_super = require_super
        self.optional = optional

    async def __call__(
        self,
        session: AsyncSession = Depends(get_async_session),
        admin_id: Optional[int] = Header(None, alias="X-Admin-Id"),
    ) -> Optional[AdminUser]:
        if admin_id is None:
            if self.optional:
                return None
            raise AuthorizationError("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

        admin = await session.get(AdminUser, admin_id)
        if not admin:
            raise AuthorizationError("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

        if self.require_super and not admin.is_super_admin:
            raise AuthorizationError("Super admin rights required")

        return admin


class CurrentOwner:
    """Resolves the business owner identity forwarded as ``X-Owner-Id``."""

    def __init__(self, optional: bool = False):
        self.optional = optional

    async def __call__(
        self,
        session: AsyncSession = Depends(get_async_session),
        owner_id: Optional[int] = Header(None, alias="X-Owner-Id"),
    ) -> Optional[BusinessOwner]:
        if owner_id is None:
            if self.optional:
                return None
            raise AuthorizationError("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

        owner = await session.get(BusinessOwner, owner_id)
        if not owner:
            raise AuthorizationError("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
        return owner


async def init_admin(session: AsyncSession, email: str, name: str, is_super_admin: bool = False) -> AdminUser:
    email = email.strip().lower()
    result = await session.execute(select(AdminUser).where(AdminUser.email == email))
    admin = result.scalar_one_or_none()
    if admin:
        logger.info("Admin %s already exists", email)
        return admin
    admin = AdminUser(email=email, name=name, is_super_admin=is_super_admin)
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    logger.info("Admin %s created", email)
    return admin
