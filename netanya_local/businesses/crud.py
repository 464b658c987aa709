from typing import Optional, Sequence

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses.models import Business
from netanya_local.common.errors import NotFoundError
from netanya_local.reviews.models import Review


async def get_business(session: AsyncSession, business_id: int, *, include_deleted: bool = False) -> Business:
    business = await session.get(Business, business_id)
    if not business or (business.deleted_at is not None and not include_deleted):
        raise NotFoundError("Business not found")
    return business


async def get_business_by_slug(session: AsyncSession, slug: str) -> Business:
    res = await session.execute(
        select(Business).where(
            (Business.slug_he == slug) | (Business.slug_ru == slug),
            Business.deleted_at.is_(None),
            Business.is_visible.is_(True),
        )
    )
    business = res.scalars().first()
    if not business:
        raise NotFoundError("Business not found")
    return business


async def search_businesses(
    session: AsyncSession,
    *,
    category_id: int,
    neighborhood_id: Optional[int] = None,
    city_id: Optional[int] = None,
    include_test: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Business]:
    stmt = select(Business).where(
        Business.category_id == category_id,
        Business.is_visible.is_(True),
        Business.deleted_at.is_(None),
    )
    if neighborhood_id is not None:
        # "обслуживает весь город" показываем в любом районе этого города
        if city_id is not None:
            stmt = stmt.where(
                (Business.neighborhood_id == neighborhood_id)
                | ((Business.serves_all_city.is_(True)) & (Business.city_id == city_id))
            )
        else:
            stmt = stmt.where(Business.neighborhood_id == neighborhood_id)
    if not include_test:
        stmt = stmt.where(Business.is_test.is_(False))

    # сначала закреплённые по pinned_order, дальше новые
    stmt = (
        stmt.order_by(
            Business.is_pinned.desc(),
            func.coalesce(Business.pinned_order, 2**31 - 1),
            Business.created_at.desc(),
            Business.id.desc(),
        )
        .limit(max(1, min(limit, 100)))
        .offset(max(0, offset))
    )
    res = await session.execute(stmt)
    return res.scalars().all()


async def list_businesses(
    session: AsyncSession, *, include_deleted: bool = False, owner_id: Optional[int] = None
) -> Sequence[Business]:
    stmt = select(Business).order_by(Business.created_at.desc(), Business.id.desc())
    if not include_deleted:
        stmt = stmt.where(Business.deleted_at.is_(None))
    if owner_id is not None:
        stmt = stmt.where(Business.owner_id == owner_id)
    res = await session.execute(stmt)
    return res.scalars().all()


async def max_pinned_order(session: AsyncSession) -> int:
    res = await session.execute(select(func.max(Business.pinned_order)).where(Business.is_pinned.is_(True)))
    return res.scalar_one_or_none() or 0


async def move_to_category(
    session: AsyncSession, business_ids: Sequence[int], *, category_id: int, subcategory_id: Optional[int], now
) -> int:
    res = await session.execute(
        update(Business)
        .where(Business.id.in_(business_ids))
        .values(category_id=category_id, subcategory_id=subcategory_id, updated_at=now)
        .execution_options(synchronize_session="fetch")
    )
    return res.rowcount or 0


async def rating_stats(session: AsyncSession, business_ids: Sequence[int]) -> dict[int, tuple[float, int]]:
    """business_id -> (average rating, count) over approved reviews."""
    if not business_ids:
        return {}
    res = await session.execute(
        select(Review.business_id, func.avg(Review.rating), func.count(Review.id))
        .where(Review.business_id.in_(business_ids), Review.is_approved.is_(True))
        .group_by(Review.business_id)
    )
    return {bid: (round(float(avg or 0), 1), int(cnt)) for bid, avg, cnt in res.all()}
