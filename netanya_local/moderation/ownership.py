"""
Linking businesses to their owners.

An approved submission remembers ``submitter_email``; once a BusinessOwner
with that email exists, the business created from that submission can be
attached to them. Used by the admin API and by ``scripts/link_owners.py``.
"""
import logging

from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses.models import Business
from netanya_local.common.db import get_async_session, atomic
from netanya_local.common.revalidation import revalidate_paths
from netanya_local.moderation.models import ModStatus, PendingBusiness
from netanya_local.users.models import AdminUser, BusinessOwner

logger = logging.getLogger(__name__)


async def link_unowned_businesses(session: AsyncSession) -> list[tuple[int, int]]:
    """
    Set ``owner_id`` on ownerless businesses whose approved submission email
    matches an owner. Returns ``[(business_id, owner_id), ...]`` that were linked.
    Caller commits.
    """
    res = await session.execute(
        select(Business, PendingBusiness.submitter_email)
        .join(PendingBusiness, PendingBusiness.business_id == Business.id)
        .where(
            Business.owner_id.is_(None),
            Business.deleted_at.is_(None),
            PendingBusiness.status == ModStatus.approved.value,
            PendingBusiness.submitter_email.isnot(None),
        )
        .order_by(Business.id)
    )
    rows = res.all()
    if not rows:
        return []

    emails = {email.lower() for _, email in rows}
    owners_res = await session.execute(
        select(BusinessOwner)
        .where(func.lower(BusinessOwner.email).in_(emails))
        .order_by(BusinessOwner.created_at, BusinessOwner.id)
    )
    owner_by_email: dict[str, BusinessOwner] = {}
    for owner in owners_res.scalars().all():
        # первый по created_at/id выигрывает
        owner_by_email.setdefault(owner.email.lower(), owner)

    linked = []
    for business, email in rows:
        owner = owner_by_email.get(email.lower())
        if owner is None or business.owner_id is not None:
            continue
        business.owner_id = owner.id
        linked.append((business.id, owner.id))
        logger.info("Business #%s linked to owner #%s (%s)", business.id, owner.id, owner.email)
    await session.flush()
    return linked


class OwnershipService:
    def __init__(self, session: AsyncSession = Depends(get_async_session)):
        self.session = session

    async def link_all(self, *, admin: AdminUser) -> list[tuple[int, int]]:
        async with atomic(self.session, "link businesses to owners"):
            linked = await link_unowned_businesses(self.session)
        logger.info("Admin #%s linked %s businesses to owners", admin.id, len(linked))
        if linked:
            revalidate_paths("/admin/businesses", "/business-portal")
        return linked
