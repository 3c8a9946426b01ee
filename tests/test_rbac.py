import pytest

from logitrack import auth


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/inventory"),
        ("post", "/api/inventory"),
        ("delete", "/api/inventory/1"),
        ("get", "/api/orders"),
        ("get", "/api/orders/1"),
        ("post", "/api/orders"),
        ("delete", "/api/orders/1"),
    ],
)
def test_protected_routes_require_token(client, method, path):
    r = client.request(method, path)
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


def test_garbage_token_rejected(client):
    r = client.get("/api/inventory", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_expired_token_rejected(client):
    token = auth.create_access_token(1, "x@example.com", "x@example.com", ["Manager"], expires_delta=-60)
    r = client.get("/api/inventory", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["detail"] == "token expired"


def test_non_manager_cannot_delete(client, user_headers):
    item = client.post("/api/inventory", json={"name": "Cone", "quantity": 4, "location": "Yard"}, headers=user_headers).json()
    order = client.post("/api/orders", json={"customerName": "Initech", "items": []}, headers=user_headers).json()

    assert client.delete(f"/api/inventory/{item['itemId']}", headers=user_headers).status_code == 403
    assert client.delete(f"/api/orders/{order['orderId']}", headers=user_headers).status_code == 403

    # still there
    assert client.get(f"/api/orders/{order['orderId']}", headers=user_headers).status_code == 200


def test_role_check_runs_before_lookup(client, user_headers):
    # a non-manager learns nothing about which ids exist
    assert client.delete("/api/inventory/999", headers=user_headers).status_code == 403


def test_manager_can_read_and_write(client, manager_headers):
    assert client.get("/api/inventory", headers=manager_headers).status_code == 200
    r = client.post("/api/orders", json={"customerName": "Umbrella", "items": []}, headers=manager_headers)
    assert r.status_code == 201
    assert client.delete(f"/api/orders/{r.json()['orderId']}", headers=manager_headers).status_code == 204
