from datetime import timedelta
from decimal import Decimal

from conftest import auth_headers, issue_token, make_offer


def test_adding_same_product_merges_lines(client, customer, biryani):
    headers = auth_headers(customer)
    client.post("/cart/add", json={"product_id": biryani.id, "quantity": 1}, headers=headers)
    client.post("/cart/add", json={"product_id": biryani.id, "quantity": 2}, headers=headers)

    cart = client.get("/cart/", headers=headers).json()

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert Decimal(str(cart["subtotal"])) == Decimal("870")


def test_update_and_remove(client, customer, biryani):
    headers = auth_headers(customer)
    item = client.post("/cart/add", json={"product_id": biryani.id}, headers=headers).json()["item"]

    updated = client.put(f"/cart/update/{item['id']}", json={"quantity": 4}, headers=headers)
    assert updated.json()["item"]["quantity"] == 4

    assert client.delete(f"/cart/remove/{item['id']}", headers=headers).status_code == 200
    assert client.get("/cart/", headers=headers).json()["items"] == []


def test_cart_offer_apply_and_clear(client, session, customer, biryani):
    offer = make_offer(session, "FLAT100")
    headers = auth_headers(customer)
    client.post("/cart/add", json={"product_id": biryani.id, "quantity": 2}, headers=headers)

    applied = client.post("/cart/offer", json={"code": "flat100"}, headers=headers)
    assert applied.status_code == 200
    assert client.get("/cart/", headers=headers).json()["applied_offer_code"] == "FLAT100"

    client.delete("/cart/offer", headers=headers)
    assert client.get("/cart/", headers=headers).json()["applied_offer_code"] is None

    session.refresh(offer)
    assert offer.usage_count == 0


def test_invalid_cart_offer(client, customer, biryani):
    headers = auth_headers(customer)
    client.post("/cart/add", json={"product_id": biryani.id}, headers=headers)

    response = client.post("/cart/offer", json={"code": "NOPE"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["reason"] == "not_found"


def test_cart_is_customer_only(client, restaurant):
    assert client.get("/cart/", headers=auth_headers(restaurant)).status_code == 403


def test_missing_token(client):
    assert client.get("/cart/").status_code == 401


def test_token_role_must_match_account(client, customer):
    token = issue_token({"user_id": customer.id, "role": "admin"})
    response = client.get("/cart/", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_with_unknown_role(client, customer):
    token = issue_token({"user_id": customer.id, "role": "superuser"})
    assert client.get("/cart/", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_token_without_role_claim_uses_stored_role(client, customer, admin):
    token = issue_token({"sub": str(customer.id)})
    assert client.get("/cart/", headers={"Authorization": f"Bearer {token}"}).status_code == 200

    admin_token = issue_token({"sub": str(admin.id)})
    assert client.get("/cart/", headers={"Authorization": f"Bearer {admin_token}"}).status_code == 403


def test_expired_token(client, customer):
    token = issue_token({"user_id": customer.id}, expires_in=timedelta(minutes=-1))
    assert client.get("/cart/", headers={"Authorization": f"Bearer {token}"}).status_code == 401


ADDRESS = {"full_address": "12 MG Road", "city": "Bengaluru", "pincode": "560001", "distance_km": 3.2}


def test_first_address_becomes_default(client, customer):
    headers = auth_headers(customer)

    first = client.post("/addresses", json=ADDRESS, headers=headers).json()["address"]
    second = client.post("/addresses", json={**ADDRESS, "title": "work"}, headers=headers).json()["address"]

    assert first["is_default"] is True
    assert second["is_default"] is False


def test_single_default_address(client, customer):
    headers = auth_headers(customer)
    first = client.post("/addresses", json=ADDRESS, headers=headers).json()["address"]
    second = client.post("/addresses", json={**ADDRESS, "title": "work"}, headers=headers).json()["address"]

    client.patch(f"/addresses/{second['id']}/default", headers=headers)

    listing = client.get("/addresses", headers=headers).json()["results"]
    defaults = [a["id"] for a in listing if a["is_default"]]
    assert defaults == [second["id"]]
    assert first["id"] in [a["id"] for a in listing]


def test_address_without_distance_is_expired(client, customer):
    headers = auth_headers(customer)
    legacy = {k: v for k, v in ADDRESS.items() if k != "distance_km"}

    saved = client.post("/addresses", json=legacy, headers=headers).json()["address"]

    assert saved["is_expired"] is True


def test_deleting_default_promotes_another(client, customer):
    headers = auth_headers(customer)
    first = client.post("/addresses", json=ADDRESS, headers=headers).json()["address"]
    second = client.post("/addresses", json={**ADDRESS, "title": "work"}, headers=headers).json()["address"]

    client.delete(f"/addresses/{first['id']}", headers=headers)

    listing = client.get("/addresses", headers=headers).json()["results"]
    assert [(a["id"], a["is_default"]) for a in listing] == [(second["id"], True)]
