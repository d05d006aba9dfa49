import pytest

from conftest import auth_headers


@pytest.fixture
def pickup_id(client, customer):
    response = client.post(
        "/pickups",
        json={
            "pickup_address": "Flat 4B, Indiranagar",
            "drop_address": "Tower C, Whitefield",
            "item_type": "Lunchbox",
            "note": "Blue bag",
            "total_amount": "60.00",
        },
        headers=auth_headers(customer),
    )
    assert response.status_code == 201
    body = response.json()["pickup"]
    assert body["status"] == "pending"
    assert [h["status"] for h in body["status_history"]] == ["pending"]
    return body["id"]


def set_status(client, user, pickup_id, status):
    return client.patch(f"/pickups/{pickup_id}/status", json={"status": status}, headers=auth_headers(user))


def assign(client, admin, pickup_id, rider):
    response = client.patch(
        f"/admin/pickups/{pickup_id}/assign",
        json={"delivery_partner_id": rider.id},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200


def test_partner_completes_pickup(client, pickup_id, admin, rider, customer):
    assign(client, admin, pickup_id, rider)

    for status in ("accepted", "picked_up", "on_the_way_to_drop_location", "delivered"):
        response = set_status(client, rider, pickup_id, status)
        assert response.status_code == 200

    detail = client.get(f"/pickups/{pickup_id}", headers=auth_headers(customer)).json()
    assert detail["status"] == "delivered"
    assert len(detail["status_history"]) == 5


def test_pending_cannot_jump_to_on_the_way(client, pickup_id, admin, rider):
    assign(client, admin, pickup_id, rider)

    response = set_status(client, rider, pickup_id, "on_the_way")

    assert response.status_code == 409
    assert response.json()["code"] == "illegal_transition"


def test_unassigned_partner_is_refused(client, pickup_id, rider):
    assert set_status(client, rider, pickup_id, "accepted").status_code == 403


def test_customer_cancels_pending_pickup(client, pickup_id, customer):
    response = set_status(client, customer, pickup_id, "canceled")

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    detail = client.get(f"/pickups/{pickup_id}", headers=auth_headers(customer)).json()
    assert detail["cancel_reason"] == "Cancelled by customer"


def test_partner_queue_and_customer_list(client, pickup_id, admin, rider, customer):
    assign(client, admin, pickup_id, rider)

    queue = client.get("/delivery/pickups", headers=auth_headers(rider)).json()
    mine = client.get("/pickups/mine", headers=auth_headers(customer)).json()

    assert [p["id"] for p in queue["results"]] == [pickup_id]
    assert mine["total_items"] == 1


def test_stranger_cannot_view(client, pickup_id, other_customer):
    assert client.get(f"/pickups/{pickup_id}", headers=auth_headers(other_customer)).status_code == 403


def test_admin_forces_status(client, pickup_id, admin):
    response = client.patch(
        f"/admin/pickups/{pickup_id}/status", json={"status": "delivered"}, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    assert response.json()["status"] == "delivered"
