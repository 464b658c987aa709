import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses import crud as business_crud
from netanya_local.common.db import get_async_session, atomic, utc_now
from netanya_local.common.errors import NotFoundError
from netanya_local.common.revalidation import revalidate_paths
from netanya_local.reviews import crud, schemas
from netanya_local.reviews.models import Review
from netanya_local.users.models import AdminUser

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def submit(self, business_id: int, data: schemas.ReviewCreate) -> Review:
        business = await business_crud.get_business(self.session, business_id)
        is_he = data.language == "he"
        review = Review(
            business_id=business.id,
            rating=data.rating,
            comment_he=data.comment if is_he else None,
            comment_ru=None if is_he else data.comment,
            author_name=data.author_name,
            language=data.language,
            # отзывы публикуются сразу, админ может скрыть
            is_approved=True,
            is_flagged=False,
            created_at=utc_now(),
        )
        async with atomic(self.session, "submit review"):
            self.session.add(review)
        logger.info("Review #%s for business #%s (rating=%s)", review.id, business.id, review.rating)
        revalidate_paths(f"/business/{business.slug_he}", "/admin/reviews")
        return review

    async def list_for_business(self, business_id: int) -> list[Review]:
        await business_crud.get_business(self.session, business_id)
        return list(await crud.list_reviews(self.session, business_id=business_id))

    async def list_all(self, business_id: Optional[int] = None) -> list[Review]:
        return list(await crud.list_reviews(self.session, business_id=business_id, approved_only=False))

    async def _get(self, review_id: int) -> Review:
        review = await crud.get_review(self.session, review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    async def toggle_approved(self, review_id: int, *, admin: AdminUser) -> Review:
        review = await self._get(review_id)
        async with atomic(self.session, "update review"):
            review.is_approved = not review.is_approved
        logger.info("Review #%s approved=%s (admin #%s)", review.id, review.is_approved, admin.id)
        revalidate_paths("/admin/reviews")
        return review

    async def toggle_flagged(self, review_id: int, *, admin: AdminUser) -> Review:
        review = await self._get(review_id)
        async with atomic(self.session, "update review"):
            review.is_flagged = not review.is_flagged
        logger.info("Review #%s flagged=%s (admin #%s)", review.id, review.is_flagged, admin.id)
        revalidate_paths("/admin/reviews")
        return review

    async def delete(self, review_id: int, *, admin: AdminUser) -> None:
        await self._get(review_id)
        async with atomic(self.session, "delete review"):
            await crud.delete_review(self.session, review_id)
        logger.info("Review #%s deleted by admin #%s", review_id, admin.id)
        revalidate_paths("/admin/reviews")
