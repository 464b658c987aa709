from typing import Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.users.models import AdminUser, BusinessOwner


# ---------- BusinessOwner ----------
async def create_owner(session: AsyncSession, *, email: str, name: str) -> BusinessOwner:
    owner = BusinessOwner(email=email.strip().lower(), name=name.strip())
    session.add(owner)
    await session.flush()
    return owner


async def get_owner_by_email(session: AsyncSession, email: str) -> Optional[BusinessOwner]:
    # при дублях email (разный регистр в старых данных) берём самого раннего
    res = await session.execute(
        select(BusinessOwner)
        .where(func.lower(BusinessOwner.email) == email.strip().lower())
        .order_by(BusinessOwner.created_at, BusinessOwner.id)
        .limit(1)
    )
    return res.scalars().first()


async def list_owners(session: AsyncSession) -> Sequence[BusinessOwner]:
    res = await session.execute(select(BusinessOwner).order_by(BusinessOwner.created_at, BusinessOwner.id))
    return res.scalars().all()


# ---------- AdminUser ----------
async def get_admin_by_telegram_id(session: AsyncSession, telegram_id: int) -> Optional[AdminUser]:
    res = await session.execute(select(AdminUser).where(AdminUser.telegram_id == telegram_id))
    return res.scalar_one_or_none()


async def list_admins(session: AsyncSession) -> Sequence[AdminUser]:
    res = await session.execute(select(AdminUser).order_by(AdminUser.id))
    return res.scalars().all()
