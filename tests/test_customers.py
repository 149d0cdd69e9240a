import datetime as dt

import pytest

from backoffice.customers.forms import build_customer_payload, validate_customer_form, validate_customer_step
from backoffice.customers.models import Customer


ALI = {
    "_id": "c1",
    "name": "Ali Khan",
    "username": "alik",
    "nationalId": "3520212345671",
    "mobile": "03001234567",
    "email": "ali@example.com",
    "address": "House 1, Street 2",
    "isActive": True,
    "status": "active",
    "plan": {"_id": "p1", "name": "Basic", "price": 1500},
    "connectionType": {"_id": "ct1", "name": "Fiber"},
    "connectionStartDate": 1710460800,
}
SARA = {
    "_id": "c2",
    "name": "Sara Ahmed",
    "username": "sara",
    "nationalId": "4210187654321",
    "mobile": "03111234567",
    "isActive": False,
    "status": "inactive",
    "plan": {"_id": "p2", "name": "Gold", "price": 3000},
    "connectionType": {"_id": "ct1", "name": "Fiber"},
    "connectionStartDate": "1710460800",
}

VALID_FORM = {
    "name": "New Customer",
    "username": "newbie",
    "password": "secret",
    "nationalId": "12345",
    "mobile": "03001112222",
    "phone": "",
    "email": "new@example.com",
    "address": "",
    "connectionType": "ct1",
    "plan": "p1",
    "connectionStartDate": "2024-03-15",
}


@pytest.fixture
def catalog(backend):
    backend.on("GET", "/connection-types", {"connectionTypes": [{"_id": "ct1", "name": "Fiber"}]})
    backend.on("GET", "/package", {"packages": [{"_id": "p1", "name": "Basic", "price": 1500, "speed": 10}]})
    backend.on("GET", "/customers/c1", {"customer": ALI})
    backend.on("GET", "/customers/c2", {"data": SARA})
    return backend


# ---------- Forms ----------

def test_empty_mobile_is_reported():
    _, errors = validate_customer_form(dict(VALID_FORM, mobile=""), mode="create")

    assert errors == {"mobile": "Mobile number is required"}


def test_step_validation_only_checks_that_step():
    _, errors = validate_customer_step({"name": "X", "username": "ab"}, "basic")

    assert set(errors) == {"username", "password", "nationalId"}


def test_mobile_rules():
    for mobile, message in [
        ("123", "Mobile number must be 10 or 11 digits"),
        ("03001234abc", "Mobile number must contain only numbers"),
    ]:
        _, errors = validate_customer_form(dict(VALID_FORM, mobile=mobile))
        assert errors["mobile"] == message


def test_edit_payload_drops_empty_password_and_unchanged_plan():
    data, errors = validate_customer_form(dict(VALID_FORM, password=""), mode="edit")
    assert errors == {}

    payload = build_customer_payload(data, mode="edit", original_plan="p1", tz=dt.timezone.utc)

    assert "password" not in payload
    assert "plan" not in payload
    assert payload["connectionStartDate"] == 1710460800


def test_create_payload_defaults_to_pending():
    data, _ = validate_customer_form(dict(VALID_FORM, connectionStartDate=""))
    payload = build_customer_payload(data, mode="create")

    assert payload["status"] == "pending"
    assert "connectionStartDate" not in payload
    assert payload["password"] == "secret"


def test_customer_from_api_defaults():
    customer = Customer.from_api({"id": 9, "name": "Bare", "plan": "p1"})

    assert customer.id == "9"
    assert customer.is_active is False
    assert customer.plan.id == "p1"
    assert customer.plan_name == "N/A"
    assert customer.connection_type_name == "N/A"


# ---------- Screens ----------

def test_search_asks_backend_for_first_page(admin_client, backend):
    backend.on("GET", "/customers", {
        "data": [ALI, SARA],
        "pagination": {"currentPage": 1, "totalPages": 1, "totalCount": 2, "limit": 10},
    })

    response = admin_client.get("/customers?q=0300")

    assert response.status_code == 200
    assert b"Ali Khan" in response.data
    assert b"Sara Ahmed" not in response.data
    params = backend.calls_to("GET", "/customers")[0].params
    assert params["search"] == "0300"
    assert params["page"] == 1


def test_status_filter_is_sent_to_backend(admin_client, backend):
    backend.on("GET", "/customers", {"data": [SARA]})

    admin_client.get("/customers?status=inactive")

    assert backend.calls_to("GET", "/customers")[0].params["status"] == "inactive"


def test_failed_list_shows_alert_and_no_table(admin_client, backend):
    backend.on("GET", "/customers", {"message": "Database offline"}, status=500)

    response = admin_client.get("/customers")

    assert response.status_code == 200
    assert b"Failed to load customers: Database offline" in response.data
    assert b"<table" not in response.data


def test_create_with_empty_mobile_makes_no_call(admin_client, catalog):
    response = admin_client.post("/customers/new", data=dict(VALID_FORM, mobile="", step="connection", action="submit"))

    assert response.status_code == 200
    assert b"Mobile number is required" in response.data
    assert b'name="step" value="contact"' in response.data
    assert catalog.writes == []


def test_wizard_next_moves_to_following_step(admin_client, catalog):
    response = admin_client.post("/customers/new", data=dict(VALID_FORM, step="basic", action="next"))

    assert b'name="step" value="contact"' in response.data
    assert catalog.writes == []


def test_wizard_carries_other_steps_as_hidden_inputs(admin_client, catalog):
    response = admin_client.post("/customers/new", data=dict(VALID_FORM, step="basic", action="next"))

    assert b'<input type="hidden" name="username" value="newbie">' in response.data
    assert b'<input type="hidden" name="plan" value="p1">' in response.data
    assert b'type="hidden" name="mobile"' not in response.data


def test_wizard_next_stays_on_invalid_step(admin_client, catalog):
    response = admin_client.post("/customers/new", data=dict(VALID_FORM, username="ab", step="basic", action="next"))

    assert b'name="step" value="basic"' in response.data
    assert b"Username must be at least 3 characters" in response.data


def test_create_customer_posts_payload(admin_client, catalog):
    catalog.on("POST", "/customers", {"customer": {"_id": "c3"}}, status=201)

    response = admin_client.post("/customers/new", data=dict(VALID_FORM, step="connection", action="submit"))

    assert response.status_code == 302
    body = catalog.calls_to("POST", "/customers")[0].json
    assert body["status"] == "pending"
    assert body["mobile"] == "03001112222"
    assert body["connectionStartDate"] == 1710460800


def test_edit_without_password_sends_no_password(admin_client, catalog):
    catalog.on("PUT", "/customers/c1", {"message": "updated"})
    form = dict(VALID_FORM, name="Ali K", password="")

    response = admin_client.post("/customers/c1/edit", data=form)

    assert response.status_code == 302
    body = catalog.calls_to("PUT", "/customers/c1")[0].json
    assert "password" not in body
    assert "plan" not in body
    assert body["name"] == "Ali K"


def test_edit_form_is_prefilled(admin_client, catalog):
    response = admin_client.get("/customers/c1/edit")

    assert b'value="Ali Khan"' in response.data
    assert b'value="2024-03-15"' in response.data


def test_toggle_confirmation_previews_inactive_state(admin_client, catalog):
    response = admin_client.get("/customers/c1/toggle")

    assert response.status_code == 200
    assert b"Inactive" in response.data
    assert b'name="isActive" disabled>' in response.data
    assert b'name="isActive" disabled checked' not in response.data
    assert catalog.writes == []


def test_declined_toggle_makes_no_call(admin_client, catalog):
    response = admin_client.post("/customers/c1/toggle", data={})

    assert response.status_code == 302
    assert catalog.writes == []


def test_confirmed_toggle_deactivates_active_customer(admin_client, catalog):
    catalog.on("DELETE", "/customers/c1", {"message": "deactivated"})

    admin_client.post("/customers/c1/toggle", data={"confirm": "yes"})

    assert len(catalog.calls_to("DELETE", "/customers/c1")) == 1


def test_confirmed_toggle_reactivates_inactive_customer(admin_client, catalog):
    catalog.on("PUT", "/customers/status/c2", {"message": "activated"})

    admin_client.post("/customers/c2/toggle", data={"confirm": "yes"})

    assert catalog.calls_to("PUT", "/customers/status/c2")[0].json == {"isActive": True}


def test_soft_delete_of_inactive_customer_is_harmless(admin_client, catalog):
    catalog.on("DELETE", "/customers/c2", {"message": "deactivated"})

    for _ in range(2):
        response = admin_client.post("/customers/c2/delete", data={"confirm": "yes"})
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/customers")

    assert len(catalog.calls_to("DELETE", "/customers/c2")) == 2
    detail = admin_client.get("/customers/c2")
    assert b"Inactive" in detail.data


def test_unknown_customer_renders_not_found(admin_client, backend):
    response = admin_client.get("/customers/missing")

    assert response.status_code == 404
    assert b"Customer not found" in response.data


def test_field_validation_endpoint(admin_client):
    response = admin_client.post("/customers/validate", json={"field": "mobile", "value": "12ab567890"})

    assert response.get_json() == {"field": "mobile", "error": "Mobile number must contain only numbers"}

    ok = admin_client.post("/customers/validate", json={"field": "password", "value": "", "mode": "edit"})
    assert ok.get_json()["error"] is None


def test_field_validation_accepts_json_numbers(admin_client):
    response = admin_client.post("/customers/validate", json={"field": "mobile", "value": 3001234567})

    assert response.status_code == 200
    assert response.get_json() == {"field": "mobile", "error": None}


def test_customers_require_login(client):
    response = client.get("/customers")

    assert response.status_code == 302
    assert "/login?next=" in response.headers["Location"]
