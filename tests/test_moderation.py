import pytest
from sqlalchemy import select, func

from netanya_local.businesses.models import Business
from netanya_local.common.errors import ConflictError, NotFoundError, AuthorizationError
from netanya_local.common.revalidation import register_listener, unregister_listener
from netanya_local.moderation.models import ModStatus, PendingBusiness
from netanya_local.moderation.schemas import PendingBusinessCreate
from netanya_local.moderation.services import SubmissionService, ModerationService, OwnerPortalService


async def _submit(session, catalog, **overrides) -> PendingBusiness:
    data = dict(
        name="Test Cafe",
        phone="0501234567",
        category_id=catalog.home,
        neighborhood_id=catalog.center,
    )
    data.update(overrides)
    return await SubmissionService(session).submit(PendingBusinessCreate(**data))


async def _business_count(session) -> int:
    return (await session.execute(select(func.count(Business.id)))).scalar_one()


async def test_approve_creates_visible_business(session, catalog, admin):
    pending = await _submit(session, catalog, subcategory_id=catalog.plumbers, address="Herzl 1")

    business = await ModerationService(session).approve_pending_business(pending.id, admin=admin)

    assert business.is_visible is True
    assert business.is_verified is False
    assert business.is_pinned is False
    assert business.category_id == catalog.home
    assert business.subcategory_id == catalog.plumbers
    assert business.neighborhood_id == catalog.center
    assert business.city_id == catalog.netanya
    assert business.name_he == "Test Cafe"
    assert business.address_he == "Herzl 1"
    assert business.slug_he == "test-cafe"
    assert business.slug_ru is None

    await session.refresh(pending)
    assert pending.status == ModStatus.approved.value
    assert pending.business_id == business.id
    assert pending.reviewed_at is not None


async def test_approve_russian_submission_fills_ru_columns(session, catalog, admin):
    pending = await _submit(
        session, catalog, name="Кафе Москва", language="ru", description="Лучший кофе",
        neighborhood_id=catalog.north,
    )
    business = await ModerationService(session).approve_pending_business(pending.id, admin=admin)

    assert business.name_ru == "Кафе Москва"
    assert business.name_he == ""
    assert business.description_ru == "Лучший кофе"
    assert business.description_he is None
    assert business.slug_ru == "kafe-moskva"
    assert business.slug_he == "kafe-moskva"


async def test_approve_links_owner_by_submitter_email(session, catalog, admin, owner):
    pending = await _submit(session, catalog, submitter_email="OWNER@example.com")
    business = await ModerationService(session).approve_pending_business(pending.id, admin=admin)
    assert business.owner_id == owner.id


async def test_approve_twice_conflicts(session, catalog, admin):
    pending = await _submit(session, catalog)
    service = ModerationService(session)
    await service.approve_pending_business(pending.id, admin=admin)

    with pytest.raises(ConflictError):
        await service.approve_pending_business(pending.id, admin=admin)
    assert await _business_count(session) == 1


async def test_approve_missing_pending(session, catalog, admin):
    with pytest.raises(NotFoundError):
        await ModerationService(session).approve_pending_business(424242, admin=admin)


async def test_approve_aborts_when_neighborhood_disappeared(session, catalog, admin):
    pending = await _submit(session, catalog)
    # справочник поменялся между подачей и модерацией
    pending.neighborhood_id = 9999
    await session.commit()

    # rollback внутри сервиса протухает объекты сессии, id держим заранее
    pending_id = pending.id
    with pytest.raises(NotFoundError):
        await ModerationService(session).approve_pending_business(pending_id, admin=admin)

    assert await _business_count(session) == 0
    row = await session.get(PendingBusiness, pending_id)
    await session.refresh(row)
    assert row.status == ModStatus.pending.value
    assert row.business_id is None


async def test_reject_keeps_reason_and_creates_nothing(session, catalog, admin):
    pending = await _submit(session, catalog)
    rejected = await ModerationService(session).reject_pending_business(
        pending.id, admin=admin, reason="Нет адреса"
    )

    assert rejected.status == ModStatus.rejected.value
    assert rejected.rejection_reason == "Нет адреса"
    assert await _business_count(session) == 0


async def test_reject_after_approve_conflicts(session, catalog, admin):
    pending = await _submit(session, catalog)
    service = ModerationService(session)
    await service.approve_pending_business(pending.id, admin=admin)

    with pytest.raises(ConflictError):
        await service.reject_pending_business(pending.id, admin=admin)


async def test_queue_lists_only_pending_by_default(session, catalog, admin):
    first = await _submit(session, catalog)
    second = await _submit(session, catalog, name="Other Place", phone="0502222222")
    service = ModerationService(session)
    await service.reject_pending_business(first.id, admin=admin)

    queue = await service.list_pending_businesses()
    assert [p.id for p in queue] == [second.id]

    everything = await service.list_pending_businesses(None)
    assert {p.id for p in everything} == {first.id, second.id}


async def test_reject_then_discard_removes_row(session, catalog, admin, owner):
    pending = await _submit(session, catalog, submitter_email=owner.email)
    await ModerationService(session).reject_pending_business(pending.id, admin=admin)

    await OwnerPortalService(session).discard_rejected_submission(pending.id, owner=owner)

    assert await session.get(PendingBusiness, pending.id) is None
    assert await ModerationService(session).list_pending_businesses(None) == []
    assert await _business_count(session) == 0


async def test_discard_pending_submission_conflicts(session, catalog, owner):
    pending = await _submit(session, catalog, submitter_email=owner.email)
    with pytest.raises(ConflictError):
        await OwnerPortalService(session).discard_rejected_submission(pending.id, owner=owner)


async def test_discard_by_stranger_is_forbidden(session, catalog, admin, owner):
    pending = await _submit(session, catalog, submitter_email="someone@else.com")
    await ModerationService(session).reject_pending_business(pending.id, admin=admin)

    with pytest.raises(AuthorizationError):
        await OwnerPortalService(session).discard_rejected_submission(pending.id, owner=owner)


async def test_owner_sees_own_submissions(session, catalog, owner):
    mine = await _submit(session, catalog, submitter_email=owner.email)
    await _submit(session, catalog, name="Foreign", phone="0503333333", submitter_email="x@y.com")

    rows = await OwnerPortalService(session).list_submissions(owner)
    assert [r.id for r in rows] == [mine.id]


async def test_transitions_trigger_revalidation(session, catalog, admin):
    seen = []
    register_listener(seen.append)
    try:
        pending = await _submit(session, catalog)
        await ModerationService(session).approve_pending_business(pending.id, admin=admin)
    finally:
        unregister_listener(seen.append)

    assert "/admin/pending" in seen
    assert "/business/test-cafe" in seen


async def test_approved_row_reflects_new_status(session, catalog, admin):
    pending = await _submit(session, catalog)
    business = await ModerationService(session).approve_pending_business(pending.id, admin=admin)

    # тот же объект сессии, без ручного refresh
    assert pending.status == ModStatus.approved.value
    assert pending.business_id == business.id


async def test_parallel_approval_loses_claim_and_rolls_back(session, session_factory, catalog, admin):
    pending = await _submit(session, catalog)
    pending_id = pending.id

    # другой админ успел одобрить; в нашей сессии заявка всё ещё выглядит pending
    async with session_factory() as other:
        winner = await ModerationService(other).approve_pending_business(pending_id, admin=admin)
        winner_id = winner.id
    assert pending.status == ModStatus.pending.value

    with pytest.raises(ConflictError) as exc:
        await ModerationService(session).approve_pending_business(pending_id, admin=admin)
    assert exc.value.status_code == 409

    ids = (await session.execute(select(Business.id))).scalars().all()
    assert ids == [winner_id]
    row = await session.get(PendingBusiness, pending_id)
    await session.refresh(row)
    assert row.status == ModStatus.approved.value
    assert row.business_id == winner_id
