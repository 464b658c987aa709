import json
from io import BytesIO

import pandas as pd

from conftest import admin_headers
from netanya_local.core.config import get_settings


def _create_payload(catalog, **overrides) -> dict:
    data = {
        "name": "Plumber Pro",
        "phone": "0504444444",
        "category_id": catalog.home,
        "subcategory_id": catalog.plumbers,
        "neighborhood_id": catalog.north,
    }
    data.update(overrides)
    return data


async def test_admin_created_business_is_test_by_default(client, catalog, admin):
    resp = await client.post("/admin/businesses", json=_create_payload(catalog), headers=admin_headers(admin))
    assert resp.status_code == 201
    body = resp.json()
    assert body["is_test"] is True
    assert body["city_id"] == catalog.netanya
    assert body["slug_he"] == "plumber-pro"

    # тестовые скрыты из публичного поиска
    public = await client.get("/businesses/search", params={"category": "home-services"})
    assert public.json() == []
    # query-параметром их не открыть
    forced = await client.get("/businesses/search", params={"category": "home-services", "include_test": True})
    assert forced.json() == []

    toggled = await client.post("/admin/settings/show-test-on-public/toggle", headers=admin_headers(admin))
    assert toggled.json() == {"success": True, "show_test_on_public": True}
    with_test = await client.get("/businesses/search", params={"category": "home-services"})
    assert [b["id"] for b in with_test.json()] == [body["id"]]


async def test_admin_create_requires_contact(client, catalog, admin):
    resp = await client.post(
        "/admin/businesses", json=_create_payload(catalog, phone=None), headers=admin_headers(admin)
    )
    assert resp.status_code == 400


async def test_toggles_and_soft_delete(client, make_business, admin):
    business = await make_business(name_he="Toggle", slug_he="toggle")
    headers = admin_headers(admin)

    resp = await client.post(f"/admin/businesses/{business.id}/toggle-verified", headers=headers)
    assert resp.json()["is_verified"] is True
    resp = await client.post(f"/admin/businesses/{business.id}/toggle-visible", headers=headers)
    assert resp.json()["is_visible"] is False

    resp = await client.delete(f"/admin/businesses/{business.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None

    listing = await client.get("/admin/businesses", headers=headers)
    assert listing.json() == []
    listing = await client.get("/admin/businesses", params={"include_deleted": True}, headers=headers)
    assert len(listing.json()) == 1

    resp = await client.post(f"/admin/businesses/{business.id}/toggle-verified", headers=headers)
    assert resp.status_code == 404


async def test_pinned_first_in_search(client, make_business, admin):
    old = await make_business(name_he="Old", slug_he="old", phone="0500000001")
    new = await make_business(name_he="New", slug_he="new", phone="0500000002")
    headers = admin_headers(admin)

    resp = await client.post(f"/admin/businesses/{old.id}/toggle-pin", headers=headers)
    assert resp.json()["is_pinned"] is True
    assert resp.json()["pinned_order"] == 1

    public = await client.get("/businesses/search", params={"category": "home-services"})
    assert [b["id"] for b in public.json()] == [old.id, new.id]

    resp = await client.post(f"/admin/businesses/{old.id}/toggle-pin", headers=headers)
    assert resp.json()["pinned_order"] is None


async def test_serves_all_city_shows_in_every_neighborhood(client, catalog, make_business):
    await make_business(name_he="Everywhere", slug_he="everywhere", neighborhood_id=catalog.center, serves_all_city=True)
    await make_business(name_he="Local", slug_he="local", phone="0500000003", neighborhood_id=catalog.center)

    resp = await client.get("/businesses/search", params={"category": "home-services", "neighborhood": "tsafon"})
    assert [b["slug_he"] for b in resp.json()] == ["everywhere"]


async def test_update_and_subcategory_rules(client, catalog, make_business, admin):
    business = await make_business(name_he="Upd", slug_he="upd", subcategory_id=catalog.plumbers)
    headers = admin_headers(admin)

    resp = await client.patch(
        f"/admin/businesses/{business.id}", json={"name_ru": "Обновлено", "neighborhood_id": catalog.carmel},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name_ru"] == "Обновлено"
    assert resp.json()["city_id"] == catalog.haifa

    resp = await client.put(
        f"/admin/businesses/{business.id}/subcategory", json={"subcategory_id": catalog.nails}, headers=headers
    )
    assert resp.status_code == 400

    resp = await client.patch(
        f"/admin/businesses/{business.id}", json={"category_id": catalog.beauty}, headers=headers
    )
    assert resp.json()["category_id"] == catalog.beauty
    assert resp.json()["subcategory_id"] is None


async def test_move_requires_super_admin(client, catalog, make_business, admin, super_admin):
    business = await make_business(name_he="Mv", slug_he="mv")
    payload = {"business_ids": [business.id], "category_id": catalog.beauty, "subcategory_id": catalog.nails}

    resp = await client.post("/admin/businesses/move", json=payload, headers=admin_headers(admin))
    assert resp.status_code == 403

    resp = await client.post("/admin/businesses/move", json=payload, headers=admin_headers(super_admin))
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "moved": 1}


async def test_link_owner_by_email(client, make_business, admin, owner):
    business = await make_business(name_he="Ln", slug_he="ln")
    resp = await client.put(
        f"/admin/businesses/{business.id}/owner", json={"owner_email": "OWNER@example.com"},
        headers=admin_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["owner_id"] == owner.id

    resp = await client.put(
        f"/admin/businesses/{business.id}/owner", json={"owner_email": "ghost@example.com"},
        headers=admin_headers(admin),
    )
    assert resp.status_code == 404


async def test_business_page_by_slug(client, make_business):
    await make_business(name_he="Page", slug_he="page", slug_ru="stranitsa", whatsapp_number="050-123-4567")

    resp = await client.get("/businesses/by-slug/stranitsa")
    assert resp.status_code == 200
    assert resp.json()["whatsapp_url"] == "https://wa.me/972501234567"

    assert (await client.get("/businesses/by-slug/missing")).status_code == 404


async def test_export_xlsx(client, make_business, admin):
    await make_business(name_he="Xl", slug_he="xl")
    resp = await client.get("/admin/export/businesses", headers=admin_headers(admin))
    assert resp.status_code == 200
    assert "attachment" in resp.headers["content-disposition"]

    df = pd.read_excel(BytesIO(resp.content), sheet_name="Businesses")
    assert list(df["name_he"]) == ["Xl"]
    assert df.loc[0, "category"] == "Услуги для дома"


async def test_backup_writes_json(client, catalog, super_admin, tmp_path, monkeypatch):
    monkeypatch.setattr(get_settings(), "BACKUP_DIR", str(tmp_path))

    resp = await client.post("/admin/backup", headers=admin_headers(super_admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["counts"]["neighborhoods"] == 3

    data = json.loads((tmp_path / body["file"]).read_text(encoding="utf-8"))
    assert [c["slug"] for c in data["tables"]["cities"]] == ["netanya", "haifa"]


async def test_backup_requires_super_admin(client, admin):
    resp = await client.post("/admin/backup", headers=admin_headers(admin))
    assert resp.status_code == 403


async def test_show_test_setting_requires_admin_and_round_trips(client, make_business, admin):
    await make_business(name_he="Demo", slug_he="demo", is_test=True)
    headers = admin_headers(admin)

    assert (await client.post("/admin/settings/show-test-on-public/toggle")).status_code == 401

    resp = await client.get("/admin/settings/show-test-on-public", headers=headers)
    assert resp.json()["show_test_on_public"] is False

    await client.post("/admin/settings/show-test-on-public/toggle", headers=headers)
    public = await client.get("/businesses/search", params={"category": "home-services"})
    assert [b["slug_he"] for b in public.json()] == ["demo"]

    off = await client.post("/admin/settings/show-test-on-public/toggle", headers=headers)
    assert off.json()["show_test_on_public"] is False
    public = await client.get("/businesses/search", params={"category": "home-services"})
    assert public.json() == []

    listed = await client.get("/admin/settings", headers=headers)
    assert [s["key"] for s in listed.json()] == ["show_test_on_public"]
    assert listed.json()[0]["value"] == "false"


async def test_patch_rejects_null_for_required_columns(client, make_business, admin):
    business = await make_business(name_he="Keep", slug_he="keep")
    headers = admin_headers(admin)

    for field in ("name_he", "is_visible", "is_test", "serves_all_city", "category_id"):
        resp = await client.patch(f"/admin/businesses/{business.id}", json={field: None}, headers=headers)
        assert resp.status_code == 400, field
        assert resp.json()["success"] is False
        assert resp.json()["error"].startswith(f"{field}:")

    # nullable-поля по-прежнему можно очистить
    resp = await client.patch(f"/admin/businesses/{business.id}", json={"name_ru": None}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name_he"] == "Keep"
