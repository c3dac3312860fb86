"""
Integration tests for tracking management.

Covers creation, customer lookup, listing, partial updates, progress
updates, timeline and deletion through the HTTP API.
"""

import re

import pytest
from sqlalchemy import select, func

from parcel_tracker.app.models.location import Location
from parcel_tracker.app.models.tracking_stopover import TrackingStopover
from parcel_tracker.app.models.user import User
from parcel_tracker.app.repositories.tracking_repository import TrackingRepository
from parcel_tracker.app.services import tracking_service

TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


async def count_rows(db_session, model):
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


# TEST 1: Create Tracking
@pytest.mark.asyncio
async def test_create_tracking_success(client, admin_headers, tracking_payload):
    """Admin can create a tracking; response is fully hydrated."""
    response = await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert re.match(r"^TRK[A-Z0-9]{9}$", data["id"])
    assert data["name"] == "Electronics Package"
    assert data["status"] == "pending"
    assert data["currentLocationIndex"] == 0
    assert data["startLocation"]["name"] == "New York Warehouse"
    assert data["startLocation"]["address"] == "New York Warehouse"
    assert data["startLocation"]["coordinates"] is None
    assert data["endLocation"]["name"] == "Customer Address"
    assert [s["name"] for s in data["stopovers"]] == ["Chicago Distribution Center", "Denver Hub"]
    assert data["user"] == {
        "name": "John Doe",
        "email": "john.doe@email.com",
        "phone": "+1 (555) 123-4567"
    }
    assert data["imageUrl"] is None
    for field in ("createdAt", "updatedAt", "estimatedDelivery"):
        assert TIMESTAMP_PATTERN.match(data[field]), field


# TEST 2: Validation names the field
@pytest.mark.asyncio
async def test_create_tracking_blank_name(client, admin_headers, tracking_payload):
    response = await client.post(
        "/v1/admin/trackings",
        json={**tracking_payload, "name": ""},
        headers=admin_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_VALIDATION_001"
    assert body["details"]["field"] == "name"


@pytest.mark.asyncio
async def test_create_tracking_missing_field(client, admin_headers, tracking_payload):
    payload = dict(tracking_payload)
    del payload["userPhone"]

    response = await client.post("/v1/admin/trackings", json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "userPhone"


@pytest.mark.asyncio
async def test_create_tracking_invalid_email(client, admin_headers, tracking_payload, db_session):
    response = await client.post(
        "/v1/admin/trackings",
        json={**tracking_payload, "userEmail": "not-an-email"},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "userEmail"
    assert await count_rows(db_session, User) == 0


@pytest.mark.asyncio
async def test_create_tracking_drops_blank_stopovers(client, admin_headers, tracking_payload):
    response = await client.post(
        "/v1/admin/trackings",
        json={**tracking_payload, "stopovers": ["", " A ", ""]},
        headers=admin_headers
    )

    assert response.status_code == 201
    assert [s["name"] for s in response.json()["stopovers"]] == ["A"]


@pytest.mark.asyncio
async def test_create_tracking_requires_admin(client, tracking_payload):
    response = await client.post("/v1/admin/trackings", json=tracking_payload)

    assert response.status_code == 401


# TEST 3: Round trip
@pytest.mark.asyncio
async def test_created_tracking_round_trips(client, created_tracking):
    """Customer lookup returns exactly what creation returned."""
    response = await client.get(f"/v1/trackings/{created_tracking['id']}")

    assert response.status_code == 200
    assert response.json() == created_tracking


@pytest.mark.asyncio
async def test_fetch_unknown_tracking(client):
    response = await client.get("/v1/trackings/TRKDOESNOTEX")

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_customer_is_reused_by_email(client, admin_headers, tracking_payload, db_session):
    await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)
    second = await client.post(
        "/v1/admin/trackings",
        json={**tracking_payload, "name": "Second Package", "userName": "Johnny"},
        headers=admin_headers
    )

    assert second.status_code == 201
    # Existing customer record wins
    assert second.json()["user"]["name"] == "John Doe"
    assert await count_rows(db_session, User) == 1
    assert await count_rows(db_session, Location) == 8


# TEST 4: List
@pytest.mark.asyncio
async def test_list_trackings_newest_first(client, admin_headers, tracking_payload):
    ids = []
    for i in range(3):
        response = await client.post(
            "/v1/admin/trackings",
            json={**tracking_payload, "name": f"Package {i}"},
            headers=admin_headers
        )
        ids.append(response.json()["id"])

    response = await client.get("/v1/admin/trackings", headers=admin_headers)

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == list(reversed(ids))


@pytest.mark.asyncio
async def test_list_trackings_filtered_by_status(client, admin_headers, tracking_payload):
    first = (await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)).json()
    await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)
    await client.patch(
        f"/v1/admin/trackings/{first['id']}/progress",
        json={"status": "cancelled"},
        headers=admin_headers
    )

    response = await client.get("/v1/admin/trackings?status=cancelled", headers=admin_headers)

    assert [t["id"] for t in response.json()] == [first["id"]]


@pytest.mark.asyncio
async def test_list_trackings_requires_admin(client):
    response = await client.get("/v1/admin/trackings")

    assert response.status_code == 401


# TEST 5: Partial update
@pytest.mark.asyncio
async def test_update_tracking_partial(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]

    response = await client.patch(
        f"/v1/admin/trackings/{tracking_id}",
        json={"name": "Renamed Package", "estimatedDelivery": "2030-01-15T12:00:00Z"},
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed Package"
    assert data["estimatedDelivery"] == "2030-01-15T12:00:00.000Z"
    assert data["status"] == created_tracking["status"]
    assert data["currentLocationIndex"] == created_tracking["currentLocationIndex"]
    assert data["stopovers"] == created_tracking["stopovers"]
    assert data["createdAt"] == created_tracking["createdAt"]
    assert data["updatedAt"] >= created_tracking["updatedAt"]


@pytest.mark.asyncio
async def test_update_tracking_stores_index_and_status_verbatim(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}",
        json={"currentLocationIndex": 3},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["currentLocationIndex"] == 3
    assert response.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_update_tracking_blank_estimated_delivery_is_ignored(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}",
        json={"estimatedDelivery": ""},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["estimatedDelivery"] == created_tracking["estimatedDelivery"]


@pytest.mark.asyncio
async def test_update_tracking_rejects_out_of_route_index(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]

    response = await client.patch(
        f"/v1/admin/trackings/{tracking_id}",
        json={"currentLocationIndex": 4, "name": "Should not stick"},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "currentLocationIndex"

    unchanged = (await client.get(f"/v1/trackings/{tracking_id}")).json()
    assert unchanged == created_tracking


@pytest.mark.asyncio
async def test_update_tracking_rejects_blank_name(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}",
        json={"name": "   "},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "name"


@pytest.mark.asyncio
async def test_update_unknown_tracking(client, admin_headers):
    response = await client.patch(
        "/v1/admin/trackings/TRKDOESNOTEX",
        json={"name": "Ghost"},
        headers=admin_headers
    )

    assert response.status_code == 404


# TEST 6: Progress
@pytest.mark.asyncio
@pytest.mark.parametrize("index, expected_status", [
    (0, "in-progress"),
    (1, "in-progress"),
    (2, "in-progress"),
    (3, "completed"),
])
async def test_progress_derives_status(client, admin_headers, created_tracking, index, expected_status):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}/progress",
        json={"currentLocationIndex": index},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["currentLocationIndex"] == index
    assert response.json()["status"] == expected_status


@pytest.mark.asyncio
async def test_progress_explicit_status_overrides(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}/progress",
        json={"currentLocationIndex": 0, "status": "cancelled"},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["currentLocationIndex"] == 0


@pytest.mark.asyncio
async def test_progress_status_only_keeps_position(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]
    await client.patch(
        f"/v1/admin/trackings/{tracking_id}/progress",
        json={"currentLocationIndex": 2},
        headers=admin_headers
    )

    response = await client.patch(
        f"/v1/admin/trackings/{tracking_id}/progress",
        json={"status": "completed"},
        headers=admin_headers
    )

    assert response.json()["status"] == "completed"
    assert response.json()["currentLocationIndex"] == 2


@pytest.mark.asyncio
async def test_progress_out_of_range_leaves_tracking_unchanged(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]

    response = await client.patch(
        f"/v1/admin/trackings/{tracking_id}/progress",
        json={"currentLocationIndex": 4},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_VALIDATION_002"
    assert (await client.get(f"/v1/trackings/{tracking_id}")).json() == created_tracking


@pytest.mark.asyncio
async def test_progress_requires_status_or_index(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}/progress",
        json={},
        headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "status"


@pytest.mark.asyncio
async def test_progress_rejects_unknown_status(client, admin_headers, created_tracking):
    response = await client.patch(
        f"/v1/admin/trackings/{created_tracking['id']}/progress",
        json={"status": "lost"},
        headers=admin_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_progress_unknown_tracking(client, admin_headers):
    response = await client.patch(
        "/v1/admin/trackings/TRKDOESNOTEX/progress",
        json={"status": "cancelled"},
        headers=admin_headers
    )

    assert response.status_code == 404


# TEST 7: Timeline
@pytest.mark.asyncio
async def test_timeline_marks_location_states(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]
    await client.patch(
        f"/v1/admin/trackings/{tracking_id}/progress",
        json={"currentLocationIndex": 1},
        headers=admin_headers
    )

    response = await client.get(f"/v1/trackings/{tracking_id}/timeline")

    assert response.status_code == 200
    data = response.json()
    assert data["trackingId"] == tracking_id
    assert data["currentLocationIndex"] == 1
    assert [(e["index"], e["state"]) for e in data["entries"]] == [
        (0, "completed"), (1, "current"), (2, "pending"), (3, "pending")
    ]
    assert data["entries"][1]["location"]["name"] == "Chicago Distribution Center"


# TEST 8: Delete
@pytest.mark.asyncio
async def test_delete_tracking_twice(client, admin_headers, created_tracking):
    tracking_id = created_tracking["id"]

    first = await client.delete(f"/v1/admin/trackings/{tracking_id}", headers=admin_headers)
    second = await client.delete(f"/v1/admin/trackings/{tracking_id}", headers=admin_headers)

    assert first.status_code == 200
    assert first.json() == {"message": "Tracking deleted successfully"}
    assert second.status_code == 404
    assert (await client.get(f"/v1/trackings/{tracking_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_keeps_customer_and_locations(client, admin_headers, created_tracking, db_session):
    await client.delete(f"/v1/admin/trackings/{created_tracking['id']}", headers=admin_headers)

    assert await count_rows(db_session, TrackingStopover) == 0
    assert await count_rows(db_session, User) == 1
    assert await count_rows(db_session, Location) == 4


@pytest.mark.asyncio
async def test_health_echoes_correlation_id(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "req-42"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Correlation-ID"] == "req-42"


@pytest.mark.asyncio
@pytest.mark.parametrize("stopovers", [None, "Chicago", 5])
async def test_create_tracking_non_list_stopovers_means_none(client, admin_headers, tracking_payload, stopovers):
    response = await client.post(
        "/v1/admin/trackings",
        json={**tracking_payload, "stopovers": stopovers},
        headers=admin_headers
    )

    assert response.status_code == 201
    assert response.json()["stopovers"] == []


@pytest.mark.asyncio
async def test_update_tracking_leaves_callers_changes_alone(db_session, created_tracking):
    changes = {"name": "  Renamed Package  "}

    tracking = await tracking_service.update_tracking(
        TrackingRepository(db_session), created_tracking["id"], changes
    )

    assert tracking.name == "Renamed Package"
    assert changes == {"name": "  Renamed Package  "}


@pytest.mark.asyncio
async def test_tracking_summary_counts_statuses(client, admin_headers, tracking_payload):
    ids = []
    for _ in range(3):
        response = await client.post("/v1/admin/trackings", json=tracking_payload, headers=admin_headers)
        ids.append(response.json()["id"])
    await client.patch(
        f"/v1/admin/trackings/{ids[0]}/progress",
        json={"currentLocationIndex": 1},
        headers=admin_headers
    )
    await client.patch(
        f"/v1/admin/trackings/{ids[1]}/progress",
        json={"status": "cancelled"},
        headers=admin_headers
    )

    response = await client.get("/v1/admin/trackings/summary", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "total": 3,
        "pending": 1,
        "inProgress": 1,
        "completed": 0,
        "cancelled": 1
    }


@pytest.mark.asyncio
async def test_tracking_summary_requires_admin(client):
    response = await client.get("/v1/admin/trackings/summary")

    assert response.status_code == 401
