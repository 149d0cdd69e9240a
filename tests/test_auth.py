import json

from backoffice.auth import SessionStore


def test_session_store_round_trip():
    storage = {}
    store = SessionStore(storage)

    assert not store.is_authenticated
    store.sign_in("tok", {"_id": "u1", "firstName": "Ada", "role": "admin"})

    assert store.is_authenticated
    assert store.is_admin
    assert store.user_id == "u1"
    assert store.display_name == "Ada"
    assert json.loads(storage["currentUser"])["role"] == "admin"

    store.clear()
    assert storage == {}


def test_corrupt_user_object_reads_as_missing():
    store = SessionStore({"accessToken": "tok", "currentUser": "{not json"})

    assert store.current_user is None
    assert store.role is None
    assert store.display_name == "User"


def test_login_stores_token_and_follows_next(client, backend):
    backend.on("POST", "/login", {"token": "tok-1", "user": {"_id": "u1", "firstName": "Ada", "role": "employee"}})

    response = client.post("/login?next=/customers", data={"email": "ada@example.com", "password": "pw"})

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/customers")
    assert backend.calls_to("POST", "/login")[0].json == {"email": "ada@example.com", "password": "pw"}
    with client.session_transaction() as sess:
        assert sess["accessToken"] == "tok-1"


def test_login_ignores_external_next(client, backend):
    backend.on("POST", "/login", {"token": "tok-1", "user": {}})

    response = client.post("/login?next=//evil.test", data={"email": "a@b.co", "password": "pw"})

    assert response.headers["Location"].endswith("/dashboard")


def test_bad_credentials_show_backend_message(client, backend):
    backend.on("POST", "/login", {"message": "Invalid email or password"}, status=401)

    response = client.post("/login", data={"email": "a@b.co", "password": "wrong"})

    assert response.status_code == 401
    assert b"Invalid email or password" in response.data
    with client.session_transaction() as sess:
        assert "accessToken" not in sess


def test_empty_credentials_make_no_call(client, backend):
    response = client.post("/login", data={"email": "", "password": ""})

    assert response.status_code == 400
    assert backend.calls == []


def test_logout_clears_session(admin_client):
    response = admin_client.post("/logout")

    assert response.headers["Location"].endswith("/login")
    assert "/login" in admin_client.get("/customers").headers["Location"]


def test_index_redirects_by_auth_state(client, admin_client):
    assert client.get("/").headers["Location"].endswith("/login")
    assert admin_client.get("/").headers["Location"].endswith("/dashboard")


def test_csp_header(client):
    policy = client.get("/login").headers["Content-Security-Policy"]

    assert "default-src 'self'" in policy
    assert "http://backend.test" in policy
    assert "https://js.stripe.com" in policy
    assert "frame-ancestors 'none'" in policy


def test_unknown_page_is_404(admin_client):
    response = admin_client.get("/no-such-page")

    assert response.status_code == 404
    assert b"Page not found" in response.data


def test_proxy_disabled_by_default(client, backend):
    assert client.get("/api/customers").status_code == 404
    assert backend.calls == []


def test_proxy_forwards_to_backend(app, client, backend):
    app.config["API_PROXY_ENABLED"] = True
    backend.on("GET", "/customers", {"data": []})

    response = client.get("/api/customers?page=2", headers={"Authorization": "Bearer tok"})

    assert response.status_code == 200
    assert response.get_json() == {"data": []}
    call = backend.calls_to("GET", "/customers")[0]
    assert call.params == [("page", "2")]
    assert call.headers["Authorization"] == "Bearer tok"


def test_settings_test_receipt(admin_client):
    response = admin_client.get("/settings/test-receipt")

    assert response.status_code == 200
    assert b"Item A" in response.data
    assert b"Rs 500.00" in response.data
    assert b"Cashier" in response.data
