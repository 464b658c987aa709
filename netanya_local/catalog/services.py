import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.catalog import crud, schemas
from netanya_local.catalog.models import Category, City, Subcategory, Neighborhood
from netanya_local.common.db import get_async_session, atomic
from netanya_local.common.errors import ConflictError, NotFoundError, ValidationError
from netanya_local.common.revalidation import revalidate_paths

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    # ===== Public =====
    async def categories_tree(self) -> list[schemas.CategoryWithSubcategoriesOut]:
        categories = await crud.list_categories(self.session)
        subcategories = await crud.list_subcategories(self.session, [c.id for c in categories])

        by_category: dict[int, list[Subcategory]] = {}
        for s in subcategories:
            by_category.setdefault(s.category_id, []).append(s)

        return [
            schemas.CategoryWithSubcategoriesOut(
                **schemas.CategoryOut.model_validate(c).model_dump(),
                subcategories=[schemas.SubcategoryOut.model_validate(s) for s in by_category.get(c.id, [])],
            )
            for c in categories
        ]

    async def cities(self) -> list[City]:
        return list(await crud.list_cities(self.session))

    async def neighborhoods(self, city_slug: Optional[str] = None) -> list[Neighborhood]:
        city_id = None
        if city_slug:
            city_id = (await crud.resolve_city(self.session, slug=city_slug)).id
        return list(await crud.list_neighborhoods(self.session, city_id=city_id))

    # ===== Category =====
    async def create_category(self, data: schemas.CategoryCreate) -> Category:
        await self._ensure_unique(select(Category.id).where(Category.slug == data.slug))
        category = Category(**data.model_dump())
        async with atomic(self.session, "create category"):
            self.session.add(category)
        revalidate_paths("/admin/categories", "/categories")
        return category

    async def update_category(self, category_id: int, data: schemas.CategoryUpdate) -> Category:
        category = await crud.resolve_category(self.session, category_id=category_id)
        changes = data.model_dump(exclude_unset=True)
        if "slug" in changes and changes["slug"] != category.slug:
            await self._ensure_unique(select(Category.id).where(Category.slug == changes["slug"]))
        async with atomic(self.session, "update category"):
            for field, value in changes.items():
                setattr(category, field, value)
        revalidate_paths("/admin/categories", "/categories")
        return category

    async def toggle_category_active(self, category_id: int) -> Category:
        category = await crud.resolve_category(self.session, category_id=category_id)
        async with atomic(self.session, "update category"):
            category.is_active = not category.is_active
        revalidate_paths("/admin/categories", "/categories")
        return category

    async def delete_category(self, category_id: int) -> None:
        category = await crud.resolve_category(self.session, category_id=category_id)
        await self._ensure_unused("category", "category_id", category.id)
        slug = category.slug
        async with atomic(self.session, "delete category"):
            # подкатегории уходят вместе с категорией
            await self.session.execute(delete(Subcategory).where(Subcategory.category_id == category.id))
            await self.session.delete(category)
        logger.info("Category #%s (%s) deleted", category_id, slug)
        revalidate_paths("/admin/categories", "/categories", "/")

    # ===== Subcategory =====
    async def create_subcategory(self, data: schemas.SubcategoryCreate) -> Subcategory:
        await crud.resolve_category(self.session, category_id=data.category_id)
        await self._ensure_unique(
            select(Subcategory.id).where(
                Subcategory.category_id == data.category_id, Subcategory.slug == data.slug
            )
        )
        subcategory = Subcategory(**data.model_dump())
        async with atomic(self.session, "create subcategory"):
            self.session.add(subcategory)
        revalidate_paths("/admin/categories")
        return subcategory

    async def update_subcategory(self, subcategory_id: int, data: schemas.SubcategoryUpdate) -> Subcategory:
        subcategory = await self._get_subcategory(subcategory_id)
        changes = data.model_dump(exclude_unset=True)
        if "slug" in changes and changes["slug"] != subcategory.slug:
            await self._ensure_unique(
                select(Subcategory.id).where(
                    Subcategory.category_id == subcategory.category_id,
                    Subcategory.slug == changes["slug"],
                )
            )
        async with atomic(self.session, "update subcategory"):
            for field, value in changes.items():
                setattr(subcategory, field, value)
        revalidate_paths("/admin/categories")
        return subcategory

    async def toggle_subcategory_active(self, subcategory_id: int) -> Subcategory:
        subcategory = await self._get_subcategory(subcategory_id)
        async with atomic(self.session, "update subcategory"):
            subcategory.is_active = not subcategory.is_active
        revalidate_paths("/admin/categories")
        return subcategory

    async def delete_subcategory(self, subcategory_id: int) -> None:
        subcategory = await self._get_subcategory(subcategory_id)
        businesses, _ = await crud.count_references(self.session, "subcategory_id", subcategory.id)
        if businesses:
            raise ConflictError(f"Cannot delete subcategory with {businesses} businesses")
        async with atomic(self.session, "delete subcategory"):
            await self.session.delete(subcategory)
        logger.info("Subcategory #%s deleted", subcategory_id)
        revalidate_paths("/admin/categories", "/")

    async def reorder_subcategories(self, category_id: int, subcategory_ids: list[int]) -> list[Subcategory]:
        """display_order = позиция в списке, начиная с 1."""
        await crud.resolve_category(self.session, category_id=category_id)
        subcategories = {
            s.id: s for s in await crud.list_subcategories(self.session, [category_id], active_only=False)
        }
        if len(set(subcategory_ids)) != len(subcategory_ids) or not set(subcategory_ids) <= subcategories.keys():
            raise ValidationError("subcategories must be unique and belong to the category", field="subcategory_ids")

        async with atomic(self.session, "reorder subcategories"):
            for position, subcategory_id in enumerate(subcategory_ids, start=1):
                subcategories[subcategory_id].display_order = position
        revalidate_paths("/admin/categories", "/")
        return list(await crud.list_subcategories(self.session, [category_id], active_only=False))

    # ===== Neighborhood =====
    async def create_neighborhood(self, data: schemas.NeighborhoodCreate) -> Neighborhood:
        await crud.resolve_city(self.session, city_id=data.city_id)
        await self._ensure_unique(
            select(Neighborhood.id).where(
                Neighborhood.city_id == data.city_id, Neighborhood.slug == data.slug
            )
        )
        neighborhood = Neighborhood(**data.model_dump())
        async with atomic(self.session, "create neighborhood"):
            self.session.add(neighborhood)
        revalidate_paths("/admin/neighborhoods")
        return neighborhood

    async def update_neighborhood(self, neighborhood_id: int, data: schemas.NeighborhoodUpdate) -> Neighborhood:
        neighborhood = await crud.resolve_neighborhood(self.session, neighborhood_id=neighborhood_id)
        changes = data.model_dump(exclude_unset=True)
        if "slug" in changes and changes["slug"] != neighborhood.slug:
            await self._ensure_unique(
                select(Neighborhood.id).where(
                    Neighborhood.city_id == neighborhood.city_id,
                    Neighborhood.slug == changes["slug"],
                )
            )
        async with atomic(self.session, "update neighborhood"):
            for field, value in changes.items():
                setattr(neighborhood, field, value)
        revalidate_paths("/admin/neighborhoods")
        return neighborhood

    async def toggle_neighborhood_active(self, neighborhood_id: int) -> Neighborhood:
        neighborhood = await crud.resolve_neighborhood(self.session, neighborhood_id=neighborhood_id)
        async with atomic(self.session, "update neighborhood"):
            neighborhood.is_active = not neighborhood.is_active
        revalidate_paths("/admin/neighborhoods")
        return neighborhood

    async def delete_neighborhood(self, neighborhood_id: int) -> None:
        neighborhood = await crud.resolve_neighborhood(self.session, neighborhood_id=neighborhood_id)
        await self._ensure_unused("neighborhood", "neighborhood_id", neighborhood.id)
        slug = neighborhood.slug
        async with atomic(self.session, "delete neighborhood"):
            await self.session.delete(neighborhood)
        logger.info("Neighborhood #%s (%s) deleted", neighborhood_id, slug)
        revalidate_paths("/admin/neighborhoods", "/")

    # ===== Helpers =====
    async def _ensure_unused(self, kind: str, field: str, value: int) -> None:
        # заявки держат RESTRICT на категорию и район, их тоже считаем
        businesses, submissions = await crud.count_references(self.session, field, value)
        if businesses:
            raise ConflictError(f"Cannot delete {kind} with {businesses} businesses")
        if submissions:
            raise ConflictError(f"Cannot delete {kind} with {submissions} submissions")

    async def _ensure_unique(self, stmt) -> None:
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictError("Slug already exists")

    async def _get_subcategory(self, subcategory_id: int) -> Subcategory:
        subcategory = await self.session.get(Subcategory, subcategory_id)
        if not subcategory:
            raise NotFoundError("Subcategory not found")
        return subcategory
