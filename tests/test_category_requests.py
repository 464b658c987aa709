import pytest
from sqlalchemy import select

from conftest import admin_headers
from netanya_local.catalog.models import Category
from netanya_local.common.errors import ConflictError, NotFoundError
from netanya_local.moderation.models import ModStatus
from netanya_local.moderation.schemas import CategoryRequestCreate
from netanya_local.moderation.services import CategoryRequestService


async def _request(session, **overrides):
    data = dict(category_name_he="Pets", category_name_ru="Зоотовары", requester_email=" Me@Example.com ")
    data.update(overrides)
    return await CategoryRequestService(session).submit(CategoryRequestCreate(**data))


async def test_submit_stores_pending_request(session):
    request = await _request(session, description="  ")

    assert request.status == ModStatus.pending.value
    assert request.requester_email == "me@example.com"
    assert request.description is None
    assert request.created_category_id is None


async def test_approve_without_creating_category(session, catalog, admin):
    request = await _request(session)

    approved = await CategoryRequestService(session).approve(request.id, admin=admin, admin_notes="ok")

    assert approved.status == ModStatus.approved.value
    assert approved.reviewed_by == admin.id
    assert approved.admin_notes == "ok"
    assert approved.created_category_id is None
    assert (await session.execute(select(Category).where(Category.slug == "pets"))).first() is None


async def test_approve_creates_active_category(session, catalog, admin):
    request = await _request(session)

    approved = await CategoryRequestService(session).approve(request.id, admin=admin, create_category=True)

    category = await session.get(Category, approved.created_category_id)
    assert category.slug == "pets"
    assert category.name_he == "Pets"
    assert category.name_ru == "Зоотовары"
    assert category.is_active is True
    assert category.is_popular is False


async def test_created_category_falls_back_to_hebrew_name(session, catalog, admin):
    request = await _request(session, category_name_he="Toys", category_name_ru=None)

    approved = await CategoryRequestService(session).approve(request.id, admin=admin, create_category=True)

    category = await session.get(Category, approved.created_category_id)
    assert category.name_ru == "Toys"


async def test_existing_slug_blocks_creation_and_keeps_request_pending(session, catalog, admin):
    request = await _request(session, category_name_he="Beauty")
    request_id = request.id

    with pytest.raises(ConflictError):
        await CategoryRequestService(session).approve(request_id, admin=admin, create_category=True)

    listed = await CategoryRequestService(session).list_requests(ModStatus.pending)
    assert [r.id for r in listed] == [request_id]


async def test_moderating_twice_conflicts(session, catalog, admin):
    request = await _request(session)
    service = CategoryRequestService(session)

    rejected = await service.reject(request.id, admin=admin, admin_notes="dup")
    assert rejected.status == ModStatus.rejected.value
    assert rejected.admin_notes == "dup"

    with pytest.raises(ConflictError) as exc:
        await service.approve(request.id, admin=admin)
    assert exc.value.status_code == 409


async def test_unknown_request_is_404(session, admin):
    with pytest.raises(NotFoundError):
        await CategoryRequestService(session).reject(999, admin=admin)


async def test_category_request_http_flow(client, catalog, admin):
    resp = await client.post("/category-requests", json={"category_name_he": "Garden", "business_name": "Green"})
    assert resp.status_code == 201
    request_id = resp.json()["id"]

    resp = await client.get("/admin/category-requests")
    assert resp.status_code == 401

    resp = await client.get("/admin/category-requests", headers=admin_headers(admin))
    assert [r["id"] for r in resp.json()] == [request_id]

    resp = await client.post(
        f"/admin/category-requests/{request_id}/approve",
        json={"create_category": True},
        headers=admin_headers(admin),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "approved"
    assert body["created_category_id"] is not None

    categories = await client.get("/catalog/categories")
    assert "garden" in [c["slug"] for c in categories.json()]

    resp = await client.post(f"/admin/category-requests/{request_id}/reject", headers=admin_headers(admin))
    assert resp.status_code == 409

    resp = await client.get("/admin/category-requests", params={"status": "all"}, headers=admin_headers(admin))
    assert len(resp.json()) == 1


async def test_category_request_requires_name(client):
    resp = await client.post("/category-requests", json={"category_name_he": "  "})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("category_name_he:")
