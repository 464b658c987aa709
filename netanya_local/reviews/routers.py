from typing import List, Optional

from fastapi import APIRouter, Depends
from starlette import status

from netanya_local.common.common import CurrentAdmin
from netanya_local.reviews import schemas
from netanya_local.reviews.services import ReviewService
from netanya_local.users.models import AdminUser


router = APIRouter(prefix="/businesses", tags=["reviews"])


@router.post("/{business_id}/reviews", response_model=schemas.ReviewOut, status_code=status.HTTP_201_CREATED)
async def submit_review(business_id: int, data: schemas.ReviewCreate, service: ReviewService = Depends()):
    return await service.submit(business_id, data)


@router.get("/{business_id}/reviews", response_model=List[schemas.ReviewOut])
async def list_reviews(business_id: int, service: ReviewService = Depends()):
    return await service.list_for_business(business_id)


# ADMIN

admin_router = APIRouter(prefix="/admin/reviews", tags=["admin-reviews"])


@admin_router.get("", response_model=List[schemas.ReviewOut])
async def list_all_reviews(
    business_id: Optional[int] = None,
    service: ReviewService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_all(business_id)


@admin_router.post("/{review_id}/toggle-approved", response_model=schemas.ReviewOut)
async def toggle_approved(
    review_id: int,
    service: ReviewService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_approved(review_id, admin=admin)


@admin_router.post("/{review_id}/toggle-flagged", response_model=schemas.ReviewOut)
async def toggle_flagged(
    review_id: int,
    service: ReviewService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_flagged(review_id, admin=admin)


@admin_router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    service: ReviewService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    await service.delete(review_id, admin=admin)
    return {"success": True}
