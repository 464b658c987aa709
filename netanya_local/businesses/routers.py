from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette import status

from netanya_local.businesses import schemas
from netanya_local.businesses.services import BusinessQueryService, AdminBusinessService
from netanya_local.common.common import CurrentAdmin
from netanya_local.users.models import AdminUser


router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("/search", response_model=List[schemas.BusinessOut])
async def search_businesses(
    category: str = Query(..., description="slug категории"),
    neighborhood: Optional[str] = Query(None, description="slug района"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: BusinessQueryService = Depends(),
):
    return await service.search(
        category_slug=category,
        neighborhood_slug=neighborhood,
        limit=limit,
        offset=offset,
    )


@router.get("/by-slug/{slug}", response_model=schemas.BusinessOut)
async def get_business(slug: str, service: BusinessQueryService = Depends()):
    return await service.get_by_slug(slug)


# ADMIN

admin_router = APIRouter(prefix="/admin/businesses", tags=["admin-businesses"])


@admin_router.get("", response_model=List[schemas.BusinessOut])
async def list_businesses(
    include_deleted: bool = False,
    service: AdminBusinessService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.list_businesses(include_deleted=include_deleted)


@admin_router.post("", response_model=schemas.BusinessOut, status_code=status.HTTP_201_CREATED)
async def create_business(
    data: schemas.AdminBusinessCreate,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.create_business(data, admin=admin)


@admin_router.post("/move", summary="Перенести бизнесы в другую категорию (super admin)")
async def move_businesses(
    data: schemas.MoveBusinessesIn,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    moved = await service.move_to_category(data, admin=admin)
    return {"success": True, "moved": moved}


@admin_router.patch("/{business_id}", response_model=schemas.BusinessOut)
async def update_business(
    business_id: int,
    data: schemas.AdminBusinessUpdate,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.update_business(business_id, data, admin=admin)


@admin_router.post("/{business_id}/toggle-visible", response_model=schemas.BusinessOut)
async def toggle_visible(
    business_id: int,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_flag(business_id, "is_visible", admin=admin)


@admin_router.post("/{business_id}/toggle-verified", response_model=schemas.BusinessOut)
async def toggle_verified(
    business_id: int,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_flag(business_id, "is_verified", admin=admin)


@admin_router.post("/{business_id}/toggle-test", response_model=schemas.BusinessOut)
async def toggle_test(
    business_id: int,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_flag(business_id, "is_test", admin=admin)


@admin_router.post("/{business_id}/toggle-pin", response_model=schemas.BusinessOut)
async def toggle_pin(
    business_id: int,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_pinned(business_id, admin=admin)


@admin_router.put("/{business_id}/subcategory", response_model=schemas.BusinessOut)
async def set_subcategory(
    business_id: int,
    data: schemas.SubcategoryAssign,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.set_subcategory(business_id, data.subcategory_id, admin=admin)


@admin_router.put("/{business_id}/owner", response_model=schemas.BusinessOut)
async def link_owner(
    business_id: int,
    data: schemas.LinkOwnerIn,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.link_owner(business_id, data.owner_email, admin=admin)


@admin_router.delete("/{business_id}", response_model=schemas.BusinessOut)
async def delete_business(
    business_id: int,
    service: AdminBusinessService = Depends(),
    admin: AdminUser = Depends(CurrentAdmin()),
):
    return await service.soft_delete(business_id, admin=admin)
