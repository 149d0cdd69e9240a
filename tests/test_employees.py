from backoffice.employees.forms import validate_employee_form
from backoffice.employees.models import Employee, employee_stats


ZAIN = {"_id": "e1", "firstName": "Zain", "lastName": "Ali", "email": "zain@example.com", "phone": "0300", "role": "employee"}
HINA = {"_id": "e2", "firstName": "Hina", "lastName": "Raza", "email": "hina@example.com", "phone": "0311",
        "role": "admin", "isActive": False}


def test_missing_active_flag_means_active():
    assert Employee.from_api(ZAIN).is_active
    assert not Employee.from_api(HINA).is_active


def test_employee_stats():
    stats = employee_stats([Employee.from_api(ZAIN), Employee.from_api(HINA)])

    assert stats == {"total": 2, "active": 1, "inactive": 1, "admins": 1}


def test_employee_form_rules():
    _, errors = validate_employee_form({"firstName": "A", "lastName": "B", "email": "bad", "phone": "1",
                                        "password": "123", "role": "owner"})

    assert errors == {
        "email": "Invalid email format",
        "password": "Password must be at least 6 characters",
        "role": "Role must be admin or employee",
    }


def test_edit_without_password_drops_it():
    data, errors = validate_employee_form({"firstName": "A", "lastName": "B", "email": "a@b.co", "phone": "1"},
                                          mode="edit")

    assert errors == {}
    assert "password" not in data
    assert data["role"] == "employee"


def test_employees_are_admin_only(employee_client, backend):
    response = employee_client.get("/employees")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/dashboard")
    assert backend.calls == []


def test_navigation_hides_employees_for_non_admins(employee_client, admin_client):
    assert b'href="/employees"' not in employee_client.get("/settings").data
    assert b'href="/employees"' in admin_client.get("/settings").data


def test_admin_lists_employees(admin_client, backend):
    backend.on("GET", "/users", {"users": [ZAIN, HINA]})

    body = admin_client.get("/employees").data

    assert b"Zain Ali" in body
    assert b"Hina Raza" in body


def test_reactivating_employee_restores_account(admin_client, backend):
    backend.on("GET", "/users/e2", {"user": HINA})
    backend.on("POST", "/users/e2/restore", {"message": "restored"})

    confirm = admin_client.get("/employees/e2/toggle")
    assert b'name="isActive" disabled checked' in confirm.data

    admin_client.post("/employees/e2/toggle", data={"confirm": "yes"})
    assert len(backend.calls_to("POST", "/users/e2/restore")) == 1


def test_deactivating_employee_is_soft_delete(admin_client, backend):
    backend.on("GET", "/users/e1", {"user": ZAIN})
    backend.on("DELETE", "/users/e1", {"message": "deactivated"})

    admin_client.post("/employees/e1/toggle", data={"confirm": "yes"})

    assert len(backend.calls_to("DELETE", "/users/e1")) == 1


def test_create_employee(admin_client, backend):
    backend.on("POST", "/users", {"user": ZAIN}, status=201)

    response = admin_client.post("/employees/new", data={
        "firstName": "Zain", "lastName": "Ali", "email": "zain@example.com", "phone": "0300",
        "password": "secret1", "role": "employee",
    })

    assert response.status_code == 302
    assert backend.calls_to("POST", "/users")[0].json["password"] == "secret1"
