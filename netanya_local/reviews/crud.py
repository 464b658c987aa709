from typing import Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.reviews.models import Review


async def get_review(session: AsyncSession, review_id: int) -> Optional[Review]:
    return await session.get(Review, review_id)


async def list_reviews(
    session: AsyncSession, *, business_id: Optional[int] = None, approved_only: bool = True
) -> Sequence[Review]:
    stmt = select(Review).order_by(Review.created_at.desc(), Review.id.desc())
    if business_id is not None:
        stmt = stmt.where(Review.business_id == business_id)
    if approved_only:
        stmt = stmt.where(Review.is_approved.is_(True))
    res = await session.execute(stmt)
    return res.scalars().all()


async def delete_review(session: AsyncSession, review_id: int) -> bool:
    res = await session.execute(delete(Review).where(Review.id == review_id))
    return (res.rowcount or 0) > 0
