from datetime import datetime, timezone

from netanya_local.moderation.ownership import link_unowned_businesses, OwnershipService
from netanya_local.moderation.models import ModStatus, PendingBusiness
from netanya_local.moderation.schemas import PendingBusinessCreate
from netanya_local.moderation.services import SubmissionService, ModerationService
from netanya_local.users import crud as users_crud
from netanya_local.users.models import BusinessOwner


async def _approved_submission(session, catalog, business, email):
    session.add(PendingBusiness(
        name=business.name_he,
        phone=business.phone,
        category_id=catalog.home,
        neighborhood_id=catalog.center,
        submitter_email=email,
        status=ModStatus.approved.value,
        business_id=business.id,
    ))
    await session.commit()


async def test_links_by_submission_email(session, catalog, make_business, owner):
    business = await make_business(name_he="A", slug_he="a")
    await _approved_submission(session, catalog, business, "Owner@Example.com")

    linked = await link_unowned_businesses(session)
    await session.commit()

    assert linked == [(business.id, owner.id)]
    await session.refresh(business)
    assert business.owner_id == owner.id


async def test_skips_already_owned_and_unknown_emails(session, catalog, make_business, owner):
    other = BusinessOwner(email="other@example.com", name="Other")
    session.add(other)
    await session.commit()

    owned = await make_business(name_he="Owned", slug_he="owned", owner_id=other.id)
    orphan = await make_business(name_he="Orphan", slug_he="orphan", phone="0502222222")
    await _approved_submission(session, catalog, owned, owner.email)
    await _approved_submission(session, catalog, orphan, "nobody@example.com")

    assert await link_unowned_businesses(session) == []
    await session.refresh(owned)
    assert owned.owner_id == other.id


async def test_service_commits(session, session_factory, catalog, make_business, owner, admin):
    business = await make_business(name_he="B", slug_he="b")
    await _approved_submission(session, catalog, business, owner.email)

    linked = await OwnershipService(session).link_all(admin=admin)
    assert linked == [(business.id, owner.id)]

    async with session_factory() as fresh:
        row = await fresh.get(type(business), business.id)
        assert row.owner_id == owner.id


async def _twin_owners(session):
    # один и тот же адрес в разном регистре: старые данные до нормализации
    older = BusinessOwner(email="Twin@example.com", name="Older", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    newer = BusinessOwner(email="twin@example.com", name="Newer", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    session.add_all([newer, older])
    await session.commit()
    return older, newer


async def test_owner_lookup_prefers_oldest_account(session):
    older, _ = await _twin_owners(session)
    found = await users_crud.get_owner_by_email(session, "TWIN@example.com")
    assert found.id == older.id


async def test_approval_links_oldest_owner_with_email(session, catalog, admin):
    older, _ = await _twin_owners(session)
    pending = await SubmissionService(session).submit(PendingBusinessCreate(
        name="Twin Shop", phone="0504444444", category_id=catalog.home,
        neighborhood_id=catalog.center, submitter_email="twin@example.com",
    ))
    business = await ModerationService(session).approve_pending_business(pending.id, admin=admin)
    assert business.owner_id == older.id
