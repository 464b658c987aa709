import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.admin_settings import crud
from netanya_local.admin_settings.models import AdminSetting, SHOW_TEST_ON_PUBLIC
from netanya_local.common.db import get_async_session, atomic
from netanya_local.common.revalidation import revalidate_paths
from netanya_local.users.models import AdminUser

logger = logging.getLogger(__name__)


class AdminSettingsService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def list_settings(self) -> list[AdminSetting]:
        return list(await crud.list_settings(self.session))

    async def show_test_on_public(self) -> bool:
        return await crud.get_flag(self.session, SHOW_TEST_ON_PUBLIC)

    async def toggle_show_test_on_public(self, *, admin: AdminUser) -> bool:
        async with atomic(self.session, "toggle show_test_on_public"):
            new_value = not await crud.get_flag(self.session, SHOW_TEST_ON_PUBLIC)
            await crud.upsert_setting(
                self.session,
                SHOW_TEST_ON_PUBLIC,
                "true" if new_value else "false",
                description="When true, test businesses appear on public pages",
            )
        logger.info("Admin #%s set %s=%s", admin.id, SHOW_TEST_ON_PUBLIC, new_value)
        revalidate_paths("/", "/search", "/admin/businesses")
        return new_value
