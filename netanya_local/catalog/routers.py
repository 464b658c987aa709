from typing import Optional

from fastapi import APIRouter, Depends, Query
from starlette import status

from netanya_local.catalog import schemas
from netanya_local.catalog.services import CatalogService
from netanya_local.common.common import CurrentAdmin
from netanya_local.users.models import AdminUser


router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/categories", response_model=list[schemas.CategoryWithSubcategoriesOut])
async def list_categories(service: CatalogService = Depends()):
    return await service.categories_tree()


@router.get("/cities", response_model=list[schemas.CityOut])
async def list_cities(service: CatalogService = Depends()):
    return await service.cities()


@router.get("/neighborhoods", response_model=list[schemas.NeighborhoodOut])
async def list_neighborhoods(
    city: Optional[str] = Query(None, description="slug города"),
    service: CatalogService = Depends(),
):
    return await service.neighborhoods(city_slug=city)


# ADMIN

admin_router = APIRouter(prefix="/admin/catalog", tags=["admin-catalog"])


@admin_router.post("/categories", response_model=schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: schemas.CategoryCreate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.create_category(data)


@admin_router.patch("/categories/{category_id}", response_model=schemas.CategoryOut)
async def update_category(
    category_id: int,
    data: schemas.CategoryUpdate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.update_category(category_id, data)


@admin_router.post("/categories/{category_id}/toggle-active", response_model=schemas.CategoryOut)
async def toggle_category(
    category_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_category_active(category_id)


@admin_router.post("/subcategories", response_model=schemas.SubcategoryOut, status_code=status.HTTP_201_CREATED)
async def create_subcategory(
    data: schemas.SubcategoryCreate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.create_subcategory(data)


@admin_router.patch("/subcategories/{subcategory_id}", response_model=schemas.SubcategoryOut)
async def update_subcategory(
    subcategory_id: int,
    data: schemas.SubcategoryUpdate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.update_subcategory(subcategory_id, data)


@admin_router.post("/subcategories/{subcategory_id}/toggle-active", response_model=schemas.SubcategoryOut)
async def toggle_subcategory(
    subcategory_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_subcategory_active(subcategory_id)


@admin_router.post("/neighborhoods", response_model=schemas.NeighborhoodOut, status_code=status.HTTP_201_CREATED)
async def create_neighborhood(
    data: schemas.NeighborhoodCreate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.create_neighborhood(data)


@admin_router.patch("/neighborhoods/{neighborhood_id}", response_model=schemas.NeighborhoodOut)
async def update_neighborhood(
    neighborhood_id: int,
    data: schemas.NeighborhoodUpdate,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.update_neighborhood(neighborhood_id, data)


@admin_router.post("/neighborhoods/{neighborhood_id}/toggle-active", response_model=schemas.NeighborhoodOut)
async def toggle_neighborhood(
    neighborhood_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.toggle_neighborhood_active(neighborhood_id)


@admin_router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    await service.delete_category(category_id)
    return {"success": True}


@admin_router.put("/categories/{category_id}/subcategories/order", response_model=list[schemas.SubcategoryOut])
async def reorder_subcategories(
    category_id: int,
    data: schemas.SubcategoryOrderIn,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    return await service.reorder_subcategories(category_id, data.subcategory_ids)


@admin_router.delete("/subcategories/{subcategory_id}")
async def delete_subcategory(
    subcategory_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    await service.delete_subcategory(subcategory_id)
    return {"success": True}


@admin_router.delete("/neighborhoods/{neighborhood_id}")
async def delete_neighborhood(
    neighborhood_id: int,
    service: CatalogService = Depends(),
    _: AdminUser = Depends(CurrentAdmin()),
):
    await service.delete_neighborhood(neighborhood_id)
    return {"success": True}
