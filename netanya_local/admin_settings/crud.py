from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.admin_settings.models import AdminSetting
from netanya_local.common.db import utc_now


async def get_setting(session: AsyncSession, key: str) -> Optional[AdminSetting]:
    res = await session.execute(select(AdminSetting).where(AdminSetting.key == key))
    return res.scalar_one_or_none()


async def get_flag(session: AsyncSession, key: str) -> bool:
    setting = await get_setting(session, key)
    return setting is not None and setting.value == "true"


async def list_settings(session: AsyncSession) -> Sequence[AdminSetting]:
    res = await session.execute(select(AdminSetting).order_by(AdminSetting.key))
    return res.scalars().all()


async def upsert_setting(
    session: AsyncSession, key: str, value: str, *, description: Optional[str] = None
) -> AdminSetting:
    setting = await get_setting(session, key)
    if setting is None:
        setting = AdminSetting(key=key, value=value, description=description, updated_at=utc_now())
        session.add(setting)
    else:
        setting.value = value
        setting.updated_at = utc_now()
    await session.flush()
    return setting
