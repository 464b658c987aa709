from typing import Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses.models import Business
from netanya_local.catalog.models import City, Neighborhood, Category, Subcategory
from netanya_local.common.errors import NotFoundError, ValidationError
from netanya_local.moderation.models import PendingBusiness


# ---------- Category ----------
async def resolve_category(
    session: AsyncSession,
    *,
    category_id: Optional[int] = None,
    slug: Optional[str] = None,
    active_only: bool = False,
) -> Category:
    if category_id is not None:
        stmt = select(Category).where(Category.id == category_id)
    elif slug:
        stmt = select(Category).where(Category.slug == slug)
    else:
        raise ValidationError("category is required", field="category_id")
    if active_only:
        stmt = stmt.where(Category.is_active.is_(True))

    category = (await session.execute(stmt)).scalar_one_or_none()
    if not category:
        raise NotFoundError("Category not found")
    return category


async def get_category_by_slug(session: AsyncSession, slug: str) -> Optional[Category]:
    res = await session.execute(select(Category).where(Category.slug == slug))
    return res.scalar_one_or_none()


async def list_categories(session: AsyncSession, *, active_only: bool = True) -> Sequence[Category]:
    stmt = select(Category).order_by(Category.display_order, Category.id)
    if active_only:
        stmt = stmt.where(Category.is_active.is_(True))
    res = await session.execute(stmt)
    return res.scalars().all()


# ---------- Subcategory ----------
async def resolve_subcategory(
    session: AsyncSession,
    *,
    category_id: int,
    subcategory_id: Optional[int] = None,
    slug: Optional[str] = None,
) -> Optional[Subcategory]:
    """Subcategory is optional; when given it must belong to ``category_id``."""
    if subcategory_id is not None:
        stmt = select(Subcategory).where(Subcategory.id == subcategory_id)
    elif slug:
        stmt = select(Subcategory).where(
            Subcategory.slug == slug,
            Subcategory.category_id == category_id,
        )
    else:
        return None

    subcategory = (await session.execute(stmt)).scalar_one_or_none()
    if not subcategory:
        raise NotFoundError("Subcategory not found")
    if subcategory.category_id != category_id:
        raise ValidationError("subcategory does not belong to the category", field="subcategory_id")
    return subcategory


async def list_subcategories(
    session: AsyncSession, category_ids: Sequence[int], *, active_only: bool = True
) -> Sequence[Subcategory]:
    if not category_ids:
        return []
    stmt = (
        select(Subcategory)
        .where(Subcategory.category_id.in_(category_ids))
        .order_by(Subcategory.display_order, Subcategory.id)
    )
    if active_only:
        stmt = stmt.where(Subcategory.is_active.is_(True))
    res = await session.execute(stmt)
    return res.scalars().all()


# ---------- City / Neighborhood ----------
async def resolve_city(session: AsyncSession, *, city_id: Optional[int] = None, slug: Optional[str] = None) -> City:
    if city_id is not None:
        city = await session.get(City, city_id)
    elif slug:
        city = (await session.execute(select(City).where(City.slug == slug))).scalar_one_or_none()
    else:
        raise ValidationError("city is required", field="city_id")
    if not city:
        raise NotFoundError("City not found")
    return city


async def resolve_neighborhood(
    session: AsyncSession,
    *,
    neighborhood_id: Optional[int] = None,
    slug: Optional[str] = None,
    city_id: Optional[int] = None,
    active_only: bool = False,
) -> Neighborhood:
    if neighborhood_id is not None:
        stmt = select(Neighborhood).where(Neighborhood.id == neighborhood_id)
    elif slug:
        # один и тот же slug может быть в разных городах, берём первый по порядку
        stmt = select(Neighborhood).where(Neighborhood.slug == slug)
        if city_id is not None:
            stmt = stmt.where(Neighborhood.city_id == city_id)
        stmt = stmt.order_by(Neighborhood.city_id, Neighborhood.id)
    else:
        raise ValidationError("neighborhood is required", field="neighborhood_id")
    if active_only:
        stmt = stmt.where(Neighborhood.is_active.is_(True))

    neighborhood = (await session.execute(stmt.limit(1))).scalars().first()
    if not neighborhood:
        raise NotFoundError("Neighborhood not found")
    return neighborhood


async def list_neighborhoods(
    session: AsyncSession, *, city_id: Optional[int] = None, active_only: bool = True
) -> Sequence[Neighborhood]:
    stmt = select(Neighborhood).order_by(Neighborhood.display_order, Neighborhood.id)
    if city_id is not None:
        stmt = stmt.where(Neighborhood.city_id == city_id)
    if active_only:
        stmt = stmt.where(Neighborhood.is_active.is_(True))
    res = await session.execute(stmt)
    return res.scalars().all()


async def list_cities(session: AsyncSession) -> Sequence[City]:
    res = await session.execute(
        select(City).where(City.is_active.is_(True)).order_by(City.display_order, City.id)
    )
    return res.scalars().all()


async def count_references(session: AsyncSession, field: str, value: int) -> tuple[int, int]:
    """(businesses, submissions) pointing at a catalog row through ``field``; soft-deleted businesses count too."""
    businesses = await session.execute(
        select(func.count(Business.id)).where(getattr(Business, field) == value)
    )
    pending = await session.execute(
        select(func.count(PendingBusiness.id)).where(getattr(PendingBusiness, field) == value)
    )
    return businesses.scalar_one(), pending.scalar_one()
