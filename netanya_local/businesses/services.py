import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.admin_settings import crud as settings_crud
from netanya_local.admin_settings.models import SHOW_TEST_ON_PUBLIC
from netanya_local.businesses import crud, schemas
from netanya_local.businesses.models import Business
from netanya_local.businesses.slugs import generate_unique_business_slug
from netanya_local.catalog import crud as catalog_crud
from netanya_local.common.db import get_async_session, atomic, utc_now
from netanya_local.common.errors import ValidationError, AuthorizationError, NotFoundError
from netanya_local.common.revalidation import revalidate_paths
from netanya_local.core.config import get_settings
from netanya_local.users import crud as users_crud
from netanya_local.users.models import AdminUser

logger = logging.getLogger(__name__)

CONTACT_REQUIRED = {
    "he": "חובה למלא טלפון או מספר ווטסאפ אחד לפחות",
    "ru": "Требуется телефон или WhatsApp",
}


def ensure_contact(
    phone: Optional[str], whatsapp_number: Optional[str], locale: Optional[str] = None
) -> None:
    """Every listing must be reachable: phone or WhatsApp (at least one)."""
    if not phone and not whatsapp_number:
        locale = locale or get_settings().DEFAULT_LOCALE
        raise ValidationError(CONTACT_REQUIRED.get(locale, CONTACT_REQUIRED["he"]), field="phone")


async def materialize_business(
    session: AsyncSession,
    *,
    name: str,
    language: str,
    category_id: int,
    subcategory_id: Optional[int],
    neighborhood_id: int,
    description: Optional[str] = None,
    address: Optional[str] = None,
    opening_hours: Optional[str] = None,
    phone: Optional[str] = None,
    whatsapp_number: Optional[str] = None,
    website_url: Optional[str] = None,
    email: Optional[str] = None,
    serves_all_city: bool = False,
    is_visible: bool = True,
    is_verified: bool = False,
    is_pinned: bool = False,
    is_test: bool = False,
    owner_id: Optional[int] = None,
) -> Business:
    """
    Build and flush a Business from single-language form input.

    Category / subcategory / neighborhood are re-resolved here; a miss raises
    NotFoundError before anything is written. ``city_id`` always comes from the
    neighborhood. Language-specific text lands in the ``_he`` or ``_ru`` column.
    """
    ensure_contact(phone, whatsapp_number, language)

    neighborhood = await catalog_crud.resolve_neighborhood(session, neighborhood_id=neighborhood_id)
    category = await catalog_crud.resolve_category(session, category_id=category_id)
    subcategory = await catalog_crud.resolve_subcategory(
        session, category_id=category.id, subcategory_id=subcategory_id
    )

    is_he = language == "he"
    slug_he = await generate_unique_business_slug(session, name, "he")
    slug_ru = None if is_he else await generate_unique_business_slug(session, name, "ru")

    now = utc_now()
    business = Business(
        name_he=name if is_he else "",
        name_ru=None if is_he else name,
        slug_he=slug_he,
        slug_ru=slug_ru,
        description_he=description if is_he else None,
        description_ru=None if is_he else description,
        address_he=address if is_he else None,
        address_ru=None if is_he else address,
        opening_hours_he=opening_hours if is_he else None,
        opening_hours_ru=None if is_he else opening_hours,
        phone=phone,
        whatsapp_number=whatsapp_number,
        website_url=website_url,
        email=email,
        category_id=category.id,
        subcategory_id=subcategory.id if subcategory else None,
        neighborhood_id=neighborhood.id,
        city_id=neighborhood.city_id,
        owner_id=owner_id,
        is_visible=is_visible,
        is_verified=is_verified,
        is_pinned=is_pinned,
        is_test=is_test,
        serves_all_city=serves_all_city,
        created_at=now,
        updated_at=now,
    )
    if is_pinned:
        business.pinned_order = await crud.max_pinned_order(session) + 1
    session.add(business)
    await session.flush()
    return business


class BusinessQueryService:
    """Public read side: search by category/neighborhood slugs and business page."""

    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def search(
        self,
        *,
        category_slug: str,
        neighborhood_slug: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Business]:
        category = await catalog_crud.resolve_category(self.session, slug=category_slug, active_only=True)
        neighborhood = None
        if neighborhood_slug:
            neighborhood = await catalog_crud.resolve_neighborhood(
                self.session, slug=neighborhood_slug, active_only=True
            )
        rows = await crud.search_businesses(
            self.session,
            category_id=category.id,
            neighborhood_id=neighborhood.id if neighborhood else None,
            city_id=neighborhood.city_id if neighborhood else None,
            # тестовые бизнесы видны публично только при включённой настройке админа
            include_test=await settings_crud.get_flag(self.session, SHOW_TEST_ON_PUBLIC),
            limit=limit,
            offset=offset,
        )
        return list(rows)

    async def get_by_slug(self, slug: str) -> Business:
        return await crud.get_business_by_slug(self.session, slug)


class AdminBusinessService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def list_businesses(self, include_deleted: bool = False) -> list[Business]:
        return list(await crud.list_businesses(self.session, include_deleted=include_deleted))

    async def create_business(self, data: schemas.AdminBusinessCreate, *, admin: AdminUser) -> Business:
        async with atomic(self.session, "create business"):
            business = await materialize_business(
                self.session,
                **data.model_dump(),
            )
        logger.info("Business #%s created by admin #%s", business.id, admin.id)
        revalidate_paths("/admin/businesses", "/admin", "/")
        return business

    async def update_business(
        self, business_id: int, data: schemas.AdminBusinessUpdate, *, admin: AdminUser
    ) -> Business:
        business = await crud.get_business(self.session, business_id)
        changes = data.model_dump(exclude_unset=True)

        phone = changes.get("phone", business.phone)
        whatsapp = changes.get("whatsapp_number", business.whatsapp_number)
        ensure_contact(phone, whatsapp)

        async with atomic(self.session, "update business"):
            category_id = changes.get("category_id", business.category_id)
            if "neighborhood_id" in changes:
                neighborhood = await catalog_crud.resolve_neighborhood(
                    self.session, neighborhood_id=changes["neighborhood_id"]
                )
                changes["city_id"] = neighborhood.city_id
            if "category_id" in changes:
                await catalog_crud.resolve_category(self.session, category_id=category_id)
                # смена категории без явной подкатегории сбрасывает её
                changes.setdefault("subcategory_id", None)
            if changes.get("subcategory_id") is not None:
                await catalog_crud.resolve_subcategory(
                    self.session, category_id=category_id, subcategory_id=changes["subcategory_id"]
                )
            if changes.get("is_pinned") and not business.is_pinned:
                changes["pinned_order"] = await crud.max_pinned_order(self.session) + 1
            elif changes.get("is_pinned") is False:
                changes["pinned_order"] = None

            for field, value in changes.items():
                setattr(business, field, value)
            business.updated_at = utc_now()

        logger.info("Business #%s updated by admin #%s: %s", business.id, admin.id, sorted(changes))
        revalidate_paths("/admin/businesses", "/admin", f"/business/{business.slug_he}")
        return business

    async def toggle_flag(self, business_id: int, flag: str, *, admin: AdminUser) -> Business:
        if flag not in ("is_visible", "is_verified", "is_test"):
            raise ValidationError(f"unknown flag {flag}", field="flag")
        business = await crud.get_business(self.session, business_id)
        async with atomic(self.session, "update business"):
            setattr(business, flag, not getattr(business, flag))
            business.updated_at = utc_now()
        logger.info("Business #%s %s=%s (admin #%s)", business.id, flag, getattr(business, flag), admin.id)
        revalidate_paths("/admin/businesses", "/admin")
        return business

    async def toggle_pinned(self, business_id: int, *, admin: AdminUser) -> Business:
        business = await crud.get_business(self.session, business_id)
        async with atomic(self.session, "update business"):
            if business.is_pinned:
                business.is_pinned = False
                business.pinned_order = None
            else:
                business.pinned_order = await crud.max_pinned_order(self.session) + 1
                business.is_pinned = True
            business.updated_at = utc_now()
        logger.info("Business #%s pinned=%s (admin #%s)", business.id, business.is_pinned, admin.id)
        revalidate_paths("/admin/businesses", "/admin", "/search")
        return business

    async def soft_delete(self, business_id: int, *, admin: AdminUser) -> Business:
        business = await crud.get_business(self.session, business_id)
        async with atomic(self.session, "delete business"):
            business.deleted_at = utc_now()
        logger.info("Business #%s soft-deleted by admin #%s", business.id, admin.id)
        revalidate_paths("/admin/businesses", "/admin", "/search")
        return business

    async def set_subcategory(
        self, business_id: int, subcategory_id: Optional[int], *, admin: AdminUser
    ) -> Business:
        business = await crud.get_business(self.session, business_id)
        if subcategory_id is not None:
            await catalog_crud.resolve_subcategory(
                self.session, category_id=business.category_id, subcategory_id=subcategory_id
            )
        async with atomic(self.session, "update business subcategory"):
            business.subcategory_id = subcategory_id
            business.updated_at = utc_now()
        revalidate_paths("/admin/businesses", "/admin")
        return business

    async def move_to_category(self, data: schemas.MoveBusinessesIn, *, admin: AdminUser) -> int:
        if not admin.is_super_admin:
            raise AuthorizationError("Only super admin can move businesses")
        await catalog_crud.resolve_category(self.session, category_id=data.category_id)
        if data.subcategory_id is not None:
            await catalog_crud.resolve_subcategory(
                self.session, category_id=data.category_id, subcategory_id=data.subcategory_id
            )
        async with atomic(self.session, "move businesses"):
            moved = await crud.move_to_category(
                self.session,
                data.business_ids,
                category_id=data.category_id,
                subcategory_id=data.subcategory_id,
                now=utc_now(),
            )
        logger.info("Admin #%s moved %s businesses to category #%s", admin.id, moved, data.category_id)
        revalidate_paths("/admin/categories", "/admin/businesses", "/search")
        return moved

    async def link_owner(self, business_id: int, owner_email: str, *, admin: AdminUser) -> Business:
        business = await crud.get_business(self.session, business_id)
        owner = await users_crud.get_owner_by_email(self.session, owner_email)
        if not owner:
            raise NotFoundError("Owner not found")
        async with atomic(self.session, "link business to owner"):
            business.owner_id = owner.id
        logger.info("Business #%s linked to owner #%s by admin #%s", business.id, owner.id, admin.id)
        revalidate_paths("/admin/businesses", "/business-portal")
        return business
