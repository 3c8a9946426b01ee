from logitrack.main import app, get_cache


def test_unhandled_error_becomes_generic_500(client, user_headers):
    def broken_cache():
        raise RuntimeError("connection string with secrets")

    app.dependency_overrides[get_cache] = broken_cache
    r = client.get("/api/inventory", headers=user_headers)
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Unexpected server error"
    assert "secrets" not in body["detail"]
    assert "Traceback" not in r.text


def test_not_found_body_shape(client, manager_headers):
    r = client.delete("/api/orders/777", headers=manager_headers)
    assert r.status_code == 404
    assert r.json() == {"detail": "Order 777 not found"}


def test_non_integer_id_is_400(client, user_headers):
    r = client.get("/api/orders/abc", headers=user_headers)
    assert r.status_code == 400
