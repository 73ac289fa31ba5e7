"""Back-office API tests: authentication, roles and the admin routers."""

from datetime import timedelta
from uuid import uuid4

import pytest

from tourdesk.core.database import utcnow
from tourdesk.services.payment_service import PaymentService


@pytest.mark.asyncio
async def test_requires_token(test_client):
    response = await test_client.get("/v1/admin/tours")

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")


@pytest.mark.asyncio
async def test_rejects_bad_tokens(test_client, admin_user, token_for):
    expired = {"Authorization": f"Bearer {token_for(admin_user.id, expires_in=-60)}"}
    basic = {"Authorization": "Basic abc"}

    assert (await test_client.get("/v1/admin/tours", headers=expired)).status_code == 401
    assert (await test_client.get("/v1/admin/tours", headers=basic)).status_code == 401


@pytest.mark.asyncio
async def test_unknown_subject_is_forbidden(test_client, token_for):
    response = await test_client.get("/v1/admin/tours", headers={"Authorization": f"Bearer {token_for(uuid4())}"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_operator_cannot_manage_admin_only_resources(test_client, operator_headers):
    assert (await test_client.get("/v1/admin/tours", headers=operator_headers)).status_code == 200
    assert (await test_client.get("/v1/admin/stripe-settings", headers=operator_headers)).status_code == 403
    assert (await test_client.get("/v1/admin/staff", headers=operator_headers)).status_code == 403


@pytest.mark.asyncio
async def test_tour_crud(test_client, admin_headers):
    created = await test_client.post("/v1/admin/tours", json={"slug": "james-bond-island"}, headers=admin_headers)
    assert created.status_code == 201
    tour = created.json()
    assert tour["tourNumber"] == "001"
    assert tour["status"] == "draft"

    duplicate = await test_client.post("/v1/admin/tours", json={"slug": "james-bond-island"}, headers=admin_headers)
    assert duplicate.status_code == 409

    patched = await test_client.patch(
        "/v1/admin/tours/001", json={"status": "published", "tags": ["bay"]}, headers=admin_headers
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == "published"

    copy = await test_client.post("/v1/admin/tours/001/duplicate", headers=admin_headers)
    assert copy.status_code == 201
    assert copy.json()["slug"] == "james-bond-island-copy"
    assert copy.json()["status"] == "draft"

    listing = await test_client.get("/v1/admin/tours", headers=admin_headers)
    assert sorted(t["tourNumber"] for t in listing.json()) == ["001", "002"]
    assert all(t["bookingCount"] == 0 for t in listing.json())

    deleted = await test_client.delete(f"/v1/admin/tours/{copy.json()['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert (await test_client.get("/v1/admin/tours/002", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_admin_tour_shows_net_prices(test_client, admin_headers, published_tour):
    response = await test_client.get(f"/v1/admin/tours/{published_tour['tour_number']}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["upsells"][0]["netPrice"] == 120


@pytest.mark.asyncio
async def test_admin_availability(test_client, admin_headers, published_tour):
    url = f"/v1/admin/tours/{published_tour['tour_number']}/availability"
    start = published_tour["slot_date"] + timedelta(days=1)

    bulk = await test_client.post(
        f"{url}/bulk",
        json={
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=2)).isoformat(),
            "timeSlots": ["08:00"],
            "capacity": 12,
        },
        headers=admin_headers,
    )
    assert bulk.status_code == 200
    assert bulk.json() == {"created": 3, "skipped": 0}

    clash = await test_client.post(
        url,
        json={"date": published_tour["slot_date"].isoformat(), "timeSlot": "08:00", "capacity": 5},
        headers=admin_headers,
    )
    assert clash.status_code == 409


@pytest.mark.asyncio
async def test_bookings_list_and_confirm(test_client, admin_headers, booking_payload, published_tour):
    created = await test_client.post("/v1/bookings", json=booking_payload)
    booking_id = created.json()["booking"]["id"]

    listing = await test_client.get("/v1/admin/bookings", params={"search": "keller"}, headers=admin_headers)
    assert listing.status_code == 200
    page = listing.json()
    assert page["total"] == 1
    assert (page["limit"], page["offset"]) == (50, 0)
    assert page["items"][0]["totalNet"] == 2240
    assert page["items"][0]["profit"] == 1160
    assert page["items"][0]["tourSlug"] == "phi-phi-island"

    confirmed = await test_client.patch(
        f"/v1/admin/bookings/{booking_id}",
        json={"status": "confirmed", "notes": "Paid cash at the desk"},
        headers=admin_headers,
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert confirmed.json()["notes"] == "Paid cash at the desk"

    slots = await test_client.get(
        f"/v1/tours/{published_tour['tour_id']}/availability",
        params={"startDate": published_tour["slot_date"].isoformat()},
    )
    assert slots.json()[0]["booked"] == 2

    missing = await test_client.get(f"/v1/admin/bookings/{uuid4()}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_analytics(test_client, admin_headers):
    today = utcnow().date()

    bookings = await test_client.get("/v1/admin/analytics/bookings", headers=admin_headers)
    assert bookings.status_code == 200
    assert bookings.json()["stats"]["totalBookings"] == 0

    reversed_range = await test_client.get(
        "/v1/admin/analytics/visitors/stats",
        params={"startDate": today.isoformat(), "endDate": (today - timedelta(days=1)).isoformat()},
        headers=admin_headers,
    )
    assert reversed_range.status_code == 400

    hourly = await test_client.get(
        "/v1/admin/analytics/visitors/hourly",
        params={"startDate": today.isoformat(), "endDate": today.isoformat()},
        headers=admin_headers,
    )
    assert len(hourly.json()) == 24


@pytest.mark.asyncio
async def test_uploads(test_client, admin_headers, storage_client):
    folder = f"tours/{uuid4()}/gallery"

    response = await test_client.post(
        "/v1/admin/upload",
        files=[
            ("files", ("beach.png", b"\x89PNG", "image/png")),
            ("files", ("map.pdf", b"%PDF-1.7", "application/pdf")),
        ],
        data={"folder": folder},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "errors" not in body
    assert [f["name"] for f in body["files"]] == ["beach.png", "map.pdf"]
    assert all(f["path"].startswith(folder + "/") for f in body["files"])
    assert all(f["url"].endswith(f["path"]) for f in body["files"])
    assert len(storage_client.objects) == 2

    bad_folder = await test_client.post(
        "/v1/admin/upload",
        files=[("files", ("beach.png", b"\x89PNG", "image/png"))],
        data={"folder": "../etc"},
        headers=admin_headers,
    )
    assert bad_folder.status_code == 400

    path = body["files"][0]["path"]
    deleted = await test_client.request("DELETE", "/v1/admin/upload", json={"paths": [path]}, headers=admin_headers)
    assert deleted.status_code == 200
    assert storage_client.removed == [path]


@pytest.mark.asyncio
async def test_site_settings(test_client, admin_headers):
    updated = await test_client.put(
        "/v1/admin/settings/general", json={"siteName": "Andaman Trips"}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert updated.json()["siteName"] == "Andaman Trips"

    unknown = await test_client.put("/v1/admin/settings/secrets", json={}, headers=admin_headers)
    assert unknown.status_code == 404

    invalid = await test_client.put(
        "/v1/admin/settings/general", json={"siteName": ["Andaman"]}, headers=admin_headers
    )
    assert invalid.status_code == 400

    public = await test_client.get("/v1/settings")
    assert public.json()["general"]["siteName"] == "Andaman Trips"


@pytest.mark.asyncio
async def test_stripe_settings_are_masked(test_client, admin_headers, test_session, payment_gateway):
    saved = await test_client.put(
        "/v1/admin/stripe-settings",
        json={"testPublishableKey": "pk_test_abc", "testSecretKey": "sk_test_secret4242"},
        headers=admin_headers,
    )
    assert saved.status_code == 200
    assert saved.json()["testSecretKey"] == "sk_test_...4242"
    assert saved.json()["testPublishableKey"] == "pk_test_abc"

    # posting the masked value back keeps the stored secret
    await test_client.put(
        "/v1/admin/stripe-settings",
        json={"testSecretKey": "sk_test_...4242", "mode": "test"},
        headers=admin_headers,
    )
    current = await test_client.get("/v1/admin/stripe-settings", headers=admin_headers)
    assert current.json()["testSecretKey"] == "sk_test_...4242"

    stored = await PaymentService(test_session, payment_gateway).get_stripe_settings()
    assert stored.test_secret_key == "sk_test_secret4242"


@pytest.mark.asyncio
async def test_staff_management(test_client, admin_user, admin_headers):
    new_id = str(uuid4())

    added = await test_client.post(
        "/v1/admin/staff", json={"id": new_id, "email": "Guide@Example.com"}, headers=admin_headers
    )
    assert added.status_code == 201
    assert added.json()["email"] == "guide@example.com"
    assert added.json()["role"] == "operator"

    promoted = await test_client.patch(f"/v1/admin/staff/{new_id}", json={"role": "admin"}, headers=admin_headers)
    assert promoted.json()["role"] == "admin"

    self_removal = await test_client.delete(f"/v1/admin/staff/{admin_user.id}", headers=admin_headers)
    assert self_removal.status_code == 400

    removed = await test_client.delete(f"/v1/admin/staff/{new_id}", headers=admin_headers)
    assert removed.status_code == 200

    staff = await test_client.get("/v1/admin/staff", headers=admin_headers)
    assert [s["email"] for s in staff.json()] == ["owner@example.com"]


@pytest.mark.asyncio
async def test_ui_translations(test_client, admin_headers):
    created = await test_client.post(
        "/v1/admin/translations",
        json={"translationKey": "Book Now", "category": "buttons", "en": "Book now"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    row_id = created.json()["rowId"]
    assert created.json()["translationKey"] == "book_now"

    patched = await test_client.patch(
        f"/v1/admin/translations/{row_id}", json={"fr": "Réserver"}, headers=admin_headers
    )
    assert patched.json()["fr"] == "Réserver"

    machine = await test_client.post(
        "/v1/admin/translations/translate",
        json={"texts": [{"key": "book_now", "en": "Book now"}], "targetLanguages": ["ja"]},
        headers=admin_headers,
    )
    assert machine.status_code == 200
    assert machine.json()["translations"] == {"ja": {"book_now": "[Japanese] Book now"}}

    listing = await test_client.get("/v1/admin/translations", params={"category": "buttons"}, headers=admin_headers)
    assert [r["translationKey"] for r in listing.json()] == ["book_now"]

    deleted = await test_client.delete(f"/v1/admin/translations/{row_id}", headers=admin_headers)
    assert deleted.status_code == 200


@pytest.mark.asyncio
async def test_admin_pages(test_client, admin_headers):
    created = await test_client.post(
        "/v1/admin/pages", json={"slug": "terms", "title": "Terms and conditions"}, headers=admin_headers
    )
    assert created.status_code == 201
    page_id = created.json()["id"]
    assert created.json()["status"] == "draft"

    translated = await test_client.put(
        f"/v1/admin/pages/{page_id}/translations/it",
        json={"title": "Termini e condizioni"},
        headers=admin_headers,
    )
    assert translated.status_code == 200
    assert {t["language"] for t in translated.json()["translations"]} == {"en", "it"}

    assert (await test_client.get("/v1/pages/terms")).status_code == 404

    await test_client.patch(f"/v1/admin/pages/{page_id}", json={"status": "published"}, headers=admin_headers)
    public = await test_client.get("/v1/pages/terms", params={"lang": "it"})
    assert public.json()["title"] == "Termini e condizioni"

    deleted = await test_client.delete(f"/v1/admin/pages/{page_id}", headers=admin_headers)
    assert deleted.status_code == 200
