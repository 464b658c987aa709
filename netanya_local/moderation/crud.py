from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses.models import Business
from netanya_local.moderation.models import ModStatus, PendingBusiness, PendingBusinessEdit, CategoryRequest


# ---------- PendingBusiness ----------
async def get_pending_business(session: AsyncSession, pending_id: int) -> Optional[PendingBusiness]:
    return await session.get(PendingBusiness, pending_id)


async def list_pending_businesses(
    session: AsyncSession, status: Optional[ModStatus] = ModStatus.pending
) -> Sequence[PendingBusiness]:
    stmt = select(PendingBusiness).order_by(PendingBusiness.created_at.desc(), PendingBusiness.id.desc())
    if status is not None:
        stmt = stmt.where(PendingBusiness.status == status.value)
    res = await session.execute(stmt)
    return res.scalars().all()


async def list_submissions_by_email(session: AsyncSession, email: str) -> Sequence[PendingBusiness]:
    res = await session.execute(
        select(PendingBusiness)
        .where(func.lower(PendingBusiness.submitter_email) == email.lower())
        .order_by(PendingBusiness.created_at.desc(), PendingBusiness.id.desc())
    )
    return res.scalars().all()


async def find_open_duplicate(session: AsyncSession, *, name: str, contact: str) -> Optional[int]:
    res = await session.execute(
        select(PendingBusiness.id)
        .where(
            func.lower(PendingBusiness.name) == name.lower(),
            PendingBusiness.status == ModStatus.pending.value,
            or_(PendingBusiness.phone == contact, PendingBusiness.whatsapp_number == contact),
        )
        .limit(1)
    )
    return res.scalar_one_or_none()


async def find_existing_business_duplicate(session: AsyncSession, *, name: str, contact: str) -> Optional[int]:
    lowered = name.lower()
    res = await session.execute(
        select(Business.id)
        .where(
            Business.deleted_at.is_(None),
            or_(func.lower(Business.name_he) == lowered, func.lower(Business.name_ru) == lowered),
            or_(Business.phone == contact, Business.whatsapp_number == contact),
        )
        .limit(1)
    )
    return res.scalar_one_or_none()


async def claim_pending_business(
    session: AsyncSession,
    pending_id: int,
    *,
    new_status: ModStatus,
    reviewed_at: datetime,
    rejection_reason: Optional[str] = None,
) -> bool:
    # idempotent-переход: сработает только для строки, которая ещё в pending
    res = await session.execute(
        update(PendingBusiness)
        .where(PendingBusiness.id == pending_id, PendingBusiness.status == ModStatus.pending.value)
        .values(status=new_status.value, reviewed_at=reviewed_at, rejection_reason=rejection_reason)
        .execution_options(synchronize_session="fetch")
    )
    return (res.rowcount or 0) == 1


async def delete_rejected_pending_business(session: AsyncSession, pending_id: int) -> bool:
    res = await session.execute(
        delete(PendingBusiness).where(
            PendingBusiness.id == pending_id, PendingBusiness.status == ModStatus.rejected.value
        )
    )
    return (res.rowcount or 0) > 0


# ---------- PendingBusinessEdit ----------
async def get_pending_edit(session: AsyncSession, edit_id: int) -> Optional[PendingBusinessEdit]:
    return await session.get(PendingBusinessEdit, edit_id)


async def get_edit_for_business(session: AsyncSession, business_id: int) -> Optional[PendingBusinessEdit]:
    res = await session.execute(select(PendingBusinessEdit).where(PendingBusinessEdit.business_id == business_id))
    return res.scalar_one_or_none()


async def list_pending_edits(
    session: AsyncSession, status: Optional[ModStatus] = ModStatus.pending
) -> Sequence[tuple[PendingBusinessEdit, Business]]:
    stmt = (
        select(PendingBusinessEdit, Business)
        .join(Business, Business.id == PendingBusinessEdit.business_id)
        .order_by(PendingBusinessEdit.updated_at.desc(), PendingBusinessEdit.id.desc())
    )
    if status is not None:
        stmt = stmt.where(PendingBusinessEdit.status == status.value)
    res = await session.execute(stmt)
    return res.tuples().all()


async def list_edits_for_businesses(
    session: AsyncSession, business_ids: Sequence[int]
) -> Sequence[PendingBusinessEdit]:
    if not business_ids:
        return []
    res = await session.execute(
        select(PendingBusinessEdit).where(PendingBusinessEdit.business_id.in_(business_ids))
    )
    return res.scalars().all()


async def claim_pending_edit(
    session: AsyncSession,
    edit_id: int,
    *,
    new_status: ModStatus,
    reviewed_at: datetime,
    rejection_reason: Optional[str] = None,
) -> bool:
    res = await session.execute(
        update(PendingBusinessEdit)
        .where(PendingBusinessEdit.id == edit_id, PendingBusinessEdit.status == ModStatus.pending.value)
        .values(status=new_status.value, reviewed_at=reviewed_at, rejection_reason=rejection_reason)
        .execution_options(synchronize_session="fetch")
    )
    return (res.rowcount or 0) == 1


async def delete_rejected_pending_edit(session: AsyncSession, edit_id: int) -> bool:
    res = await session.execute(
        delete(PendingBusinessEdit).where(
            PendingBusinessEdit.id == edit_id, PendingBusinessEdit.status == ModStatus.rejected.value
        )
    )
    return (res.rowcount or 0) > 0


# ---------- CategoryRequest ----------
async def get_category_request(session: AsyncSession, request_id: int) -> Optional[CategoryRequest]:
    return await session.get(CategoryRequest, request_id)


async def list_category_requests(
    session: AsyncSession, status: Optional[ModStatus] = ModStatus.pending
) -> Sequence[CategoryRequest]:
    stmt = select(CategoryRequest).order_by(CategoryRequest.created_at.desc(), CategoryRequest.id.desc())
    if status is not None:
        stmt = stmt.where(CategoryRequest.status == status.value)
    res = await session.execute(stmt)
    return res.scalars().all()


async def claim_category_request(
    session: AsyncSession,
    request_id: int,
    *,
    new_status: ModStatus,
    reviewed_at: datetime,
    reviewed_by: int,
    admin_notes: Optional[str] = None,
    created_category_id: Optional[int] = None,
) -> bool:
    res = await session.execute(
        update(CategoryRequest)
        .where(CategoryRequest.id == request_id, CategoryRequest.status == ModStatus.pending.value)
        .values(
            status=new_status.value,
            reviewed_at=reviewed_at,
            reviewed_by=reviewed_by,
            admin_notes=admin_notes,
            created_category_id=created_category_id,
        )
        .execution_options(synchronize_session="fetch")
    )
    return (res.rowcount or 0) == 1
