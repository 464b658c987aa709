import pytest
from pydantic import ValidationError as SchemaError

from netanya_local.common.errors import ValidationError, NotFoundError, ConflictError
from netanya_local.moderation.models import ModStatus
from netanya_local.moderation.schemas import PendingBusinessCreate
from netanya_local.moderation.services import SubmissionService


def _form(catalog, **overrides) -> PendingBusinessCreate:
    data = dict(
        name="Test Cafe",
        language="he",
        phone="0501234567",
        category_id=catalog.home,
        neighborhood_id=catalog.center,
    )
    data.update(overrides)
    return PendingBusinessCreate(**data)


async def test_submit_creates_pending_row(session, catalog):
    pending = await SubmissionService(session).submit(_form(catalog, submitter_email="Owner@Example.com"))

    assert pending.id is not None
    assert pending.status == ModStatus.pending.value
    assert pending.category_id == catalog.home
    assert pending.neighborhood_id == catalog.center
    assert pending.submitter_email == "owner@example.com"


async def test_submit_resolves_slugs(session, catalog):
    form = _form(
        catalog,
        category_id=None, category_slug="home-services",
        neighborhood_id=None, neighborhood_slug="tsafon",
        subcategory_slug="plumbers",
    )
    pending = await SubmissionService(session).submit(form)

    assert pending.category_id == catalog.home
    assert pending.neighborhood_id == catalog.north
    assert pending.subcategory_id == catalog.plumbers


async def test_submit_requires_phone_or_whatsapp(session, catalog):
    with pytest.raises(ValidationError) as exc:
        await SubmissionService(session).submit(_form(catalog, phone=None, whatsapp_number="  "))
    assert exc.value.status_code == 400
    assert exc.value.field == "phone"


async def test_submit_whatsapp_only_is_enough(session, catalog):
    pending = await SubmissionService(session).submit(_form(catalog, phone=None, whatsapp_number="0527654321"))
    assert pending.whatsapp_number == "0527654321"


async def test_submit_contact_message_follows_language(session, catalog):
    with pytest.raises(ValidationError) as exc:
        await SubmissionService(session).submit(_form(catalog, phone=None, language="ru"))
    assert "WhatsApp" in exc.value.detail


async def test_submit_unknown_category(session, catalog):
    with pytest.raises(NotFoundError):
        await SubmissionService(session).submit(_form(catalog, category_id=9999))


async def test_submit_inactive_category_is_not_found(session, catalog):
    with pytest.raises(NotFoundError):
        await SubmissionService(session).submit(_form(catalog, category_id=catalog.hidden))


async def test_submit_subcategory_of_other_category(session, catalog):
    with pytest.raises(ValidationError) as exc:
        await SubmissionService(session).submit(_form(catalog, subcategory_id=catalog.nails))
    assert exc.value.field == "subcategory_id"


async def test_submit_duplicate_of_open_pending(session, catalog):
    service = SubmissionService(session)
    await service.submit(_form(catalog))

    with pytest.raises(ConflictError):
        await service.submit(_form(catalog, name="test cafe"))


async def test_submit_duplicate_of_existing_business(session, catalog, make_business):
    await make_business(name_he="Test Cafe", slug_he="test-cafe", phone="0501234567")

    with pytest.raises(ConflictError) as exc:
        await SubmissionService(session).submit(_form(catalog, language="ru"))
    assert "существует" in exc.value.detail


async def test_same_name_other_phone_is_not_duplicate(session, catalog):
    service = SubmissionService(session)
    await service.submit(_form(catalog))
    other = await service.submit(_form(catalog, phone="0509999999"))
    assert other.id is not None


def test_form_normalizes_website_and_blank_email(catalog):
    form = _form(catalog, website_url="example.co.il", email="  ")
    assert form.website_url == "https://example.co.il"
    assert form.email is None


def test_form_rejects_bad_submitter_email(catalog):
    with pytest.raises(SchemaError):
        _form(catalog, submitter_email="not-an-email")


def test_form_requires_neighborhood(catalog):
    with pytest.raises(SchemaError):
        _form(catalog, neighborhood_id=None)


def test_form_rejects_short_name(catalog):
    with pytest.raises(SchemaError):
        _form(catalog, name=" a ")
