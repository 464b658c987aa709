from conftest import admin_headers


async def test_public_categories_tree(client, catalog):
    resp = await client.get("/catalog/categories")
    assert resp.status_code == 200
    body = resp.json()
    assert [c["slug"] for c in body] == ["home-services", "beauty"]
    assert [s["slug"] for s in body[0]["subcategories"]] == ["plumbers"]


async def test_neighborhoods_of_city(client, catalog):
    resp = await client.get("/catalog/neighborhoods", params={"city": "netanya"})
    assert [n["slug"] for n in resp.json()] == ["merkaz", "tsafon"]

    resp = await client.get("/catalog/neighborhoods", params={"city": "eilat"})
    assert resp.status_code == 404


async def test_admin_creates_category_with_unique_slug(client, catalog, admin):
    payload = {"name_he": "חדש", "name_ru": "Новое", "slug": "new-things"}
    resp = await client.post("/admin/catalog/categories", json=payload, headers=admin_headers(admin))
    assert resp.status_code == 201

    resp = await client.post("/admin/catalog/categories", json=payload, headers=admin_headers(admin))
    assert resp.status_code == 409

    resp = await client.post(
        "/admin/catalog/categories", json={**payload, "slug": "Bad Slug"}, headers=admin_headers(admin)
    )
    assert resp.status_code == 400


async def test_toggle_category_hides_it(client, catalog, admin):
    resp = await client.post(f"/admin/catalog/categories/{catalog.beauty}/toggle-active", headers=admin_headers(admin))
    assert resp.json()["is_active"] is False

    resp = await client.get("/catalog/categories")
    assert [c["slug"] for c in resp.json()] == ["home-services"]


async def test_review_lifecycle(client, make_business, admin, owner):
    business = await make_business(name_he="Rv", slug_he="rv", owner_id=owner.id)

    resp = await client.post(
        f"/businesses/{business.id}/reviews", json={"rating": 4, "comment": "Отлично", "language": "ru"}
    )
    assert resp.status_code == 201
    review = resp.json()
    assert review["is_approved"] is True
    assert review["comment_ru"] == "Отлично"
    assert review["comment_he"] is None

    await client.post(f"/businesses/{business.id}/reviews", json={"rating": 2})
    mine = await client.get("/owner/businesses", headers={"X-Owner-Id": str(owner.id)})
    assert mine.json()[0]["average_rating"] == 3.0
    assert mine.json()[0]["total_reviews"] == 2

    resp = await client.post(f"/admin/reviews/{review['id']}/toggle-approved", headers=admin_headers(admin))
    assert resp.json()["is_approved"] is False
    public = await client.get(f"/businesses/{business.id}/reviews")
    assert len(public.json()) == 1

    resp = await client.post(f"/admin/reviews/{review['id']}/toggle-flagged", headers=admin_headers(admin))
    assert resp.json()["is_flagged"] is True

    resp = await client.delete(f"/admin/reviews/{review['id']}", headers=admin_headers(admin))
    assert resp.json() == {"success": True}
    assert (await client.delete(f"/admin/reviews/{review['id']}", headers=admin_headers(admin))).status_code == 404


async def test_review_rating_bounds(client, make_business):
    business = await make_business(name_he="Rb", slug_he="rb")
    resp = await client.post(f"/businesses/{business.id}/reviews", json={"rating": 6})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("rating:")

    resp = await client.post("/businesses/999/reviews", json={"rating": 5})
    assert resp.status_code == 404


async def test_admin_creates_owner(client, admin):
    payload = {"email": "New@Owner.com", "name": "New"}
    resp = await client.post("/admin/owners", json=payload, headers=admin_headers(admin))
    assert resp.status_code == 201
    assert resp.json()["email"] == "new@owner.com"

    resp = await client.post("/admin/owners", json=payload, headers=admin_headers(admin))
    assert resp.status_code == 409


async def test_public_cities(client, catalog):
    resp = await client.get("/catalog/cities")
    assert [c["slug"] for c in resp.json()] == ["netanya", "haifa"]


async def test_delete_category_blocked_while_referenced(client, catalog, make_business, admin):
    await make_business(name_he="Del", slug_he="del", category_id=catalog.beauty)

    resp = await client.delete(f"/admin/catalog/categories/{catalog.beauty}", headers=admin_headers(admin))
    assert resp.status_code == 409
    assert resp.json()["error"] == "Cannot delete category with 1 businesses"


async def test_delete_category_blocked_by_submission(client, catalog, admin):
    submission = {"name": "Shop", "phone": "0501234567", "category_id": catalog.beauty, "neighborhood_id": catalog.center}
    assert (await client.post("/businesses/submit", json=submission)).status_code == 201

    resp = await client.delete(f"/admin/catalog/categories/{catalog.beauty}", headers=admin_headers(admin))
    assert resp.status_code == 409
    assert resp.json()["error"] == "Cannot delete category with 1 submissions"


async def test_delete_unused_category_takes_subcategories(client, catalog, admin):
    resp = await client.delete(f"/admin/catalog/categories/{catalog.beauty}", headers=admin_headers(admin))
    assert resp.json() == {"success": True}

    body = (await client.get("/catalog/categories")).json()
    assert [c["slug"] for c in body] == ["home-services"]
    resp = await client.patch(
        f"/admin/catalog/subcategories/{catalog.nails}", json={"name_he": "x"}, headers=admin_headers(admin)
    )
    assert resp.status_code == 404
    resp = await client.delete(f"/admin/catalog/categories/{catalog.beauty}", headers=admin_headers(admin))
    assert resp.status_code == 404


async def test_delete_subcategory_and_neighborhood(client, catalog, make_business, admin):
    await make_business(name_he="Pl", slug_he="pl", subcategory_id=catalog.plumbers)

    resp = await client.delete(f"/admin/catalog/subcategories/{catalog.plumbers}", headers=admin_headers(admin))
    assert resp.status_code == 409
    resp = await client.delete(f"/admin/catalog/subcategories/{catalog.nails}", headers=admin_headers(admin))
    assert resp.json() == {"success": True}

    resp = await client.delete(f"/admin/catalog/neighborhoods/{catalog.center}", headers=admin_headers(admin))
    assert resp.status_code == 409
    resp = await client.delete(f"/admin/catalog/neighborhoods/{catalog.north}", headers=admin_headers(admin))
    assert resp.json() == {"success": True}
    neighborhoods = await client.get("/catalog/neighborhoods", params={"city": "netanya"})
    assert [n["slug"] for n in neighborhoods.json()] == ["merkaz"]


async def test_catalog_delete_requires_admin(client, catalog):
    resp = await client.delete(f"/admin/catalog/neighborhoods/{catalog.north}")
    assert resp.status_code == 401


async def test_reorder_subcategories(client, catalog, admin):
    headers = admin_headers(admin)
    created = await client.post(
        "/admin/catalog/subcategories",
        json={"category_id": catalog.home, "name_he": "חשמלאים", "name_ru": "Электрики", "slug": "electricians"},
        headers=headers,
    )
    electricians = created.json()["id"]

    resp = await client.put(
        f"/admin/catalog/categories/{catalog.home}/subcategories/order",
        json={"subcategory_ids": [electricians, catalog.plumbers]},
        headers=headers,
    )
    assert resp.status_code == 200
    assert [(s["slug"], s["display_order"]) for s in resp.json()] == [("electricians", 1), ("plumbers", 2)]

    tree = (await client.get("/catalog/categories")).json()
    assert [s["slug"] for s in tree[0]["subcategories"]] == ["electricians", "plumbers"]


async def test_reorder_rejects_foreign_or_repeated_ids(client, catalog, admin):
    url = f"/admin/catalog/categories/{catalog.home}/subcategories/order"

    resp = await client.put(url, json={"subcategory_ids": [catalog.nails]}, headers=admin_headers(admin))
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("subcategory_ids:")

    resp = await client.put(
        url, json={"subcategory_ids": [catalog.plumbers, catalog.plumbers]}, headers=admin_headers(admin)
    )
    assert resp.status_code == 400
