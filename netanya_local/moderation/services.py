import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses import crud as business_crud
from netanya_local.businesses.schemas import OwnerBusinessCreate
from netanya_local.businesses.slugs import create_slug, generate_unique_business_slug
from netanya_local.businesses.models import Business, OWNER_EDITABLE_FIELDS
from netanya_local.businesses.services import ensure_contact, materialize_business
from netanya_local.catalog import crud as catalog_crud
from netanya_local.catalog.models import Category
from netanya_local.common.db import get_async_session, atomic, utc_now
from netanya_local.common.errors import ValidationError, NotFoundError, AuthorizationError, ConflictError
from netanya_local.common.revalidation import revalidate_paths
from netanya_local.moderation import crud, schemas
from netanya_local.moderation.models import ModStatus, PendingBusiness, PendingBusinessEdit, CategoryRequest
from netanya_local.users import crud as users_crud
from netanya_local.users.models import AdminUser, BusinessOwner
from tgbot.notifications import notify_admins_new_pending_business

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGES = {
    "business": {
        "he": "עסק זה כבר קיים במערכת",
        "ru": "Этот бизнес уже существует в системе",
    },
    "pending": {
        "he": "עסק זה כבר ממתין לאישור",
        "ru": "Этот бизнес уже ожидает проверки",
    },
}

# сколько раз пробуем upsert правки при гонке на UNIQUE(business_id)
EDIT_UPSERT_ATTEMPTS = 2


def _ensure_pending(row, kind: str) -> None:
    if row.status != ModStatus.pending.value:
        raise ConflictError(f"{kind} already {row.status}")


class SubmissionService:
    """Public "add a business" intake."""

    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def submit(self, data: schemas.PendingBusinessCreate) -> PendingBusiness:
        ensure_contact(data.phone, data.whatsapp_number, data.language)

        category = await catalog_crud.resolve_category(
            self.session, category_id=data.category_id, slug=data.category_slug, active_only=True
        )
        subcategory = await catalog_crud.resolve_subcategory(
            self.session,
            category_id=category.id,
            subcategory_id=data.subcategory_id,
            slug=data.subcategory_slug,
        )
        neighborhood = await catalog_crud.resolve_neighborhood(
            self.session, neighborhood_id=data.neighborhood_id, slug=data.neighborhood_slug, active_only=True
        )

        await self._reject_duplicates(data)

        pending = PendingBusiness(
            name=data.name,
            description=data.description,
            language=data.language,
            category_id=category.id,
            subcategory_id=subcategory.id if subcategory else None,
            neighborhood_id=neighborhood.id,
            phone=data.phone,
            whatsapp_number=data.whatsapp_number,
            website_url=data.website_url,
            email=data.email,
            address=data.address,
            opening_hours=data.opening_hours,
            serves_all_city=data.serves_all_city,
            submitter_name=data.submitter_name,
            submitter_email=data.submitter_email,
            status=ModStatus.pending.value,
            created_at=utc_now(),
        )
        async with atomic(self.session, "submit business"):
            self.session.add(pending)

        logger.info("Pending business #%s submitted (%s)", pending.id, data.language)
        revalidate_paths("/admin/pending", "/admin")

        # уведомление после коммита; заявка уже сохранена, ошибки бота не критичны
        try:
            await notify_admins_new_pending_business(pending)
        except Exception:
            logger.exception("Telegram notification failed for pending #%s", pending.id)
        return pending

    async def _reject_duplicates(self, data: schemas.PendingBusinessCreate) -> None:
        contacts = {c for c in (data.phone, data.whatsapp_number) if c}
        for contact in contacts:
            if await crud.find_existing_business_duplicate(self.session, name=data.name, contact=contact):
                raise ConflictError(DUPLICATE_MESSAGES["business"][data.language])
            if await crud.find_open_duplicate(self.session, name=data.name, contact=contact):
                raise ConflictError(DUPLICATE_MESSAGES["pending"][data.language])


class ModerationService:
    """Admin decisions over both queues."""

    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    # ===== PendingBusiness =====
    async def list_pending_businesses(self, status: Optional[ModStatus] = ModStatus.pending) -> list[PendingBusiness]:
        return list(await crud.list_pending_businesses(self.session, status))

    async def _get_pending(self, pending_id: int) -> PendingBusiness:
        pending = await crud.get_pending_business(self.session, pending_id)
        if not pending:
            raise NotFoundError("Pending business not found")
        return pending

    async def approve_pending_business(self, pending_id: int, *, admin: AdminUser) -> Business:
        pending = await self._get_pending(pending_id)
        _ensure_pending(pending, "Submission")

        async with atomic(self.session, "approve business"):
            owner = None
            if pending.submitter_email:
                owner = await users_crud.get_owner_by_email(self.session, pending.submitter_email)

            business = await materialize_business(
                self.session,
                name=pending.name,
                language=pending.language,
                category_id=pending.category_id,
                subcategory_id=pending.subcategory_id,
                neighborhood_id=pending.neighborhood_id,
                description=pending.description,
                address=pending.address,
                opening_hours=pending.opening_hours,
                phone=pending.phone,
                whatsapp_number=pending.whatsapp_number,
                website_url=pending.website_url,
                email=pending.email,
                serves_all_city=pending.serves_all_city,
                owner_id=owner.id if owner else None,
            )

            # guarded UPDATE: вторая параллельная попытка увидит 0 строк и откатит бизнес
            claimed = await crud.claim_pending_business(
                self.session, pending_id, new_status=ModStatus.approved, reviewed_at=utc_now()
            )
            if not claimed:
                raise ConflictError("Submission already moderated")
            pending.business_id = business.id

        # guarded UPDATE идёт мимо ORM, подтягиваем статус из БД
        await self.session.refresh(pending)
        logger.info(
            "Pending business #%s approved by admin #%s -> business #%s (owner=%s)",
            pending_id, admin.id, business.id, business.owner_id,
        )
        revalidate_paths("/admin/pending", "/admin", "/search", f"/business/{business.slug_he}")
        return business

    async def reject_pending_business(
        self, pending_id: int, *, admin: AdminUser, reason: Optional[str] = None
    ) -> PendingBusiness:
        pending = await self._get_pending(pending_id)
        _ensure_pending(pending, "Submission")

        async with atomic(self.session, "reject business"):
            claimed = await crud.claim_pending_business(
                self.session,
                pending_id,
                new_status=ModStatus.rejected,
                reviewed_at=utc_now(),
                rejection_reason=reason,
            )
            if not claimed:
                raise ConflictError("Submission already moderated")

        await self.session.refresh(pending)
        logger.info("Pending business #%s rejected by admin #%s", pending_id, admin.id)
        revalidate_paths("/admin/pending", "/admin", "/business-portal")
        return pending

    # ===== PendingBusinessEdit =====
    async def list_pending_edits(
        self, status: Optional[ModStatus] = ModStatus.pending
    ) -> list[schemas.PendingEditReviewOut]:
        rows = await crud.list_pending_edits(self.session, status)
        out = []
        for edit, business in rows:
            item = schemas.PendingBusinessEditOut.model_validate(edit).model_dump()
            out.append(
                schemas.PendingEditReviewOut(
                    **item,
                    business_name_he=business.name_he,
                    current={field: getattr(business, field) for field in edit.changes},
                )
            )
        return out

    async def _get_edit(self, edit_id: int) -> PendingBusinessEdit:
        edit = await crud.get_pending_edit(self.session, edit_id)
        if not edit:
            raise NotFoundError("Pending edit not found")
        return edit

    async def approve_pending_edit(self, edit_id: int, *, admin: AdminUser) -> Business:
        edit = await self._get_edit(edit_id)
        _ensure_pending(edit, "Edit")
        business = await business_crud.get_business(self.session, edit.business_id)

        changes = {k: v for k, v in edit.changes.items() if k in OWNER_EDITABLE_FIELDS}
        ensure_contact(
            changes.get("phone", business.phone),
            changes.get("whatsapp_number", business.whatsapp_number),
        )

        async with atomic(self.session, "approve edit"):
            claimed = await crud.claim_pending_edit(
                self.session, edit_id, new_status=ModStatus.approved, reviewed_at=utc_now()
            )
            if not claimed:
                raise ConflictError("Edit already moderated")
            # только присланные поля, остальное не трогаем
            for field, value in changes.items():
                setattr(business, field, value)
            business.updated_at = utc_now()

        await self.session.refresh(edit)
        logger.info(
            "Edit #%s approved by admin #%s, business #%s fields=%s",
            edit_id, admin.id, business.id, sorted(changes),
        )
        revalidate_paths(
            "/admin/pending-edits", "/admin", "/business-portal", f"/business/{business.slug_he}"
        )
        return business

    async def reject_pending_edit(
        self, edit_id: int, *, admin: AdminUser, reason: Optional[str] = None
    ) -> PendingBusinessEdit:
        edit = await self._get_edit(edit_id)
        _ensure_pending(edit, "Edit")

        async with atomic(self.session, "reject edit"):
            claimed = await crud.claim_pending_edit(
                self.session,
                edit_id,
                new_status=ModStatus.rejected,
                reviewed_at=utc_now(),
                rejection_reason=reason,
            )
            if not claimed:
                raise ConflictError("Edit already moderated")

        await self.session.refresh(edit)
        logger.info("Edit #%s rejected by admin #%s", edit_id, admin.id)
        revalidate_paths("/admin/pending-edits", "/admin", "/business-portal")
        return edit


class OwnerPortalService:
    """Business owner self-service: edits, own submissions, cleanup of rejected rows."""

    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def list_businesses(self, owner: BusinessOwner) -> list[dict]:
        businesses = await business_crud.list_businesses(self.session, owner_id=owner.id)
        ids = [b.id for b in businesses]
        stats = await business_crud.rating_stats(self.session, ids)
        edits = {e.business_id: e for e in await crud.list_edits_for_businesses(self.session, ids)}

        out = []
        for b in businesses:
            avg, count = stats.get(b.id, (0.0, 0))
            edit = edits.get(b.id)
            out.append({
                "id": b.id,
                "name_he": b.name_he,
                "name_ru": b.name_ru,
                "slug_he": b.slug_he,
                "is_visible": b.is_visible,
                "is_verified": b.is_verified,
                "average_rating": avg,
                "total_reviews": count,
                "has_pending_edit": bool(edit and edit.status == ModStatus.pending.value),
                "pending_edit_status": edit.status if edit else None,
            })
        return out

    async def create_business(self, data: OwnerBusinessCreate, *, owner: BusinessOwner) -> Business:
        """Owner adds a business directly: visible at once, unverified, linked to the owner."""
        ensure_contact(data.phone, data.whatsapp_number)
        # владелец выбирает только из активных справочников
        await catalog_crud.resolve_category(self.session, category_id=data.category_id, active_only=True)
        await catalog_crud.resolve_neighborhood(
            self.session, neighborhood_id=data.neighborhood_id, active_only=True
        )

        owner_id = owner.id
        async with atomic(self.session, "create owner business"):
            business = await materialize_business(
                self.session,
                name=data.name_he,
                language="he",
                category_id=data.category_id,
                subcategory_id=data.subcategory_id,
                neighborhood_id=data.neighborhood_id,
                description=data.description_he,
                address=data.address_he,
                opening_hours=data.opening_hours_he,
                phone=data.phone,
                whatsapp_number=data.whatsapp_number,
                website_url=data.website_url,
                email=data.email,
                serves_all_city=data.serves_all_city,
                owner_id=owner_id,
            )
            if data.name_ru:
                business.name_ru = data.name_ru
                business.slug_ru = await generate_unique_business_slug(self.session, data.name_ru, "ru")
            business.description_ru = data.description_ru
            business.address_ru = data.address_ru
            business.opening_hours_ru = data.opening_hours_ru
            await self.session.flush()

        logger.info("Business #%s created directly by owner #%s", business.id, owner_id)
        revalidate_paths("/business-portal", "/admin/businesses", "/search", f"/business/{business.slug_he}")
        return business

    async def list_submissions(self, owner: BusinessOwner) -> list[PendingBusiness]:
        return list(await crud.list_submissions_by_email(self.session, owner.email))

    async def submit_edit(
        self, business_id: int, data: schemas.BusinessEditProposal, *, owner: BusinessOwner
    ) -> PendingBusinessEdit:
        business = await business_crud.get_business(self.session, business_id)
        if business.owner_id != owner.id:
            raise AuthorizationError("Not the owner of this business")

        changes = {k: v for k, v in data.proposed_changes().items() if k in OWNER_EDITABLE_FIELDS}
        if not changes:
            raise ValidationError("No changes proposed")
        ensure_contact(
            changes.get("phone", business.phone),
            changes.get("whatsapp_number", business.whatsapp_number),
        )

        # после rollback ORM-объекты протухают, id держим отдельно
        b_id, owner_id = business.id, owner.id
        for attempt in range(1, EDIT_UPSERT_ATTEMPTS + 1):
            try:
                async with atomic(self.session, "submit edit"):
                    edit = await self._upsert_edit(b_id, owner_id, changes)
                break
            except IntegrityError:
                # параллельная вставка для того же бизнеса: повторяем как update
                if attempt == EDIT_UPSERT_ATTEMPTS:
                    raise ConflictError("Edit is being submitted concurrently, try again")
                logger.warning("Edit upsert race for business #%s, retrying", b_id)

        logger.info("Edit #%s for business #%s submitted by owner #%s", edit.id, b_id, owner_id)
        revalidate_paths("/admin/pending-edits", "/admin", "/business-portal")
        return edit

    async def _upsert_edit(self, business_id: int, owner_id: int, changes: dict) -> PendingBusinessEdit:
        now = utc_now()
        edit = await crud.get_edit_for_business(self.session, business_id)
        if edit is None:
            edit = PendingBusinessEdit(
                business_id=business_id,
                owner_id=owner_id,
                changes=dict(changes),
                status=ModStatus.pending.value,
                created_at=now,
                updated_at=now,
            )
            self.session.add(edit)
            await self.session.flush()
            return edit

        if edit.status == ModStatus.pending.value:
            logger.info("Edit #%s superseded by a newer proposal", edit.id)
        # JSON-колонку только переприсваиваем, in-place изменения не отслеживаются
        edit.changes = dict(changes)
        edit.owner_id = owner_id
        edit.status = ModStatus.pending.value
        edit.rejection_reason = None
        edit.reviewed_at = None
        edit.updated_at = now
        await self.session.flush()
        return edit

    async def discard_rejected_submission(self, pending_id: int, *, owner: BusinessOwner) -> None:
        pending = await crud.get_pending_business(self.session, pending_id)
        if not pending:
            raise NotFoundError("Pending business not found")
        if (pending.submitter_email or "").lower() != owner.email.lower():
            raise AuthorizationError("Not the submitter of this business")
        if pending.status != ModStatus.rejected.value:
            raise ConflictError("Only rejected submissions can be discarded")

        async with atomic(self.session, "discard submission"):
            if not await crud.delete_rejected_pending_business(self.session, pending_id):
                raise ConflictError("Only rejected submissions can be discarded")

        logger.info("Rejected submission #%s discarded by owner #%s", pending_id, owner.id)
        revalidate_paths("/business-portal")

    async def dismiss_rejected_edit(self, edit_id: int, *, owner: BusinessOwner) -> None:
        edit = await crud.get_pending_edit(self.session, edit_id)
        if not edit:
            raise NotFoundError("Pending edit not found")
        if edit.owner_id != owner.id:
            raise AuthorizationError("Not the owner of this edit")
        if edit.status != ModStatus.rejected.value:
            raise ConflictError("Only rejected edits can be dismissed")

        async with atomic(self.session, "dismiss edit"):
            if not await crud.delete_rejected_pending_edit(self.session, edit_id):
                raise ConflictError("Only rejected edits can be dismissed")

        logger.info("Rejected edit #%s dismissed by owner #%s", edit_id, owner.id)
        revalidate_paths("/business-portal")


class CategoryRequestService:
    """Second moderation queue: requests for categories that do not exist yet."""

    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def submit(self, data: schemas.CategoryRequestCreate) -> CategoryRequest:
        request = CategoryRequest(**data.model_dump(), status=ModStatus.pending.value, created_at=utc_now())
        async with atomic(self.session, "submit category request"):
            self.session.add(request)
        logger.info("Category request #%s submitted: %r", request.id, request.category_name_he)
        revalidate_paths("/admin/category-requests")
        return request

    async def list_requests(self, status: Optional[ModStatus] = ModStatus.pending) -> list[CategoryRequest]:
        return list(await crud.list_category_requests(self.session, status))

    async def _get_request(self, request_id: int) -> CategoryRequest:
        request = await crud.get_category_request(self.session, request_id)
        if not request:
            raise NotFoundError("Category request not found")
        return request

    async def approve(
        self,
        request_id: int,
        *,
        admin: AdminUser,
        create_category: bool = False,
        admin_notes: Optional[str] = None,
    ) -> CategoryRequest:
        request = await self._get_request(request_id)
        _ensure_pending(request, "Category request")

        async with atomic(self.session, "approve category request"):
            category_id = None
            if create_category:
                slug = create_slug(request.category_name_he)
                if await catalog_crud.get_category_by_slug(self.session, slug):
                    raise ConflictError("A category with this name already exists")
                category = Category(
                    name_he=request.category_name_he,
                    name_ru=request.category_name_ru or request.category_name_he,
                    slug=slug,
                    is_active=True,
                    is_popular=False,
                    display_order=0,
                )
                self.session.add(category)
                await self.session.flush()
                category_id = category.id

            claimed = await crud.claim_category_request(
                self.session,
                request_id,
                new_status=ModStatus.approved,
                reviewed_at=utc_now(),
                reviewed_by=admin.id,
                admin_notes=admin_notes,
                created_category_id=category_id,
            )
            if not claimed:
                raise ConflictError("Category request already moderated")

        await self.session.refresh(request)
        logger.info(
            "Category request #%s approved by admin #%s (category=%s)",
            request_id, admin.id, request.created_category_id,
        )
        revalidate_paths("/admin/category-requests")
        if request.created_category_id:
            revalidate_paths("/admin/categories", "/add-business")
        return request

    async def reject(
        self, request_id: int, *, admin: AdminUser, admin_notes: Optional[str] = None
    ) -> CategoryRequest:
        request = await self._get_request(request_id)
        _ensure_pending(request, "Category request")

        async with atomic(self.session, "reject category request"):
            claimed = await crud.claim_category_request(
                self.session,
                request_id,
                new_status=ModStatus.rejected,
                reviewed_at=utc_now(),
                reviewed_by=admin.id,
                admin_notes=admin_notes,
            )
            if not claimed:
                raise ConflictError("Category request already moderated")

        await self.session.refresh(request)
        logger.info("Category request #%s rejected by admin #%s", request_id, admin.id)
        revalidate_paths("/admin/category-requests")
        return request
