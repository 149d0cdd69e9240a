from backoffice.packages.forms import validate_package_form
from backoffice.packages.models import Package, PackageStats, package_stats


BASIC = {"_id": "p1", "name": "Basic", "price": 1500, "speed": 10, "description": "Starter plan"}
GOLD = {"_id": "p2", "name": "Gold", "price": "3000", "speed": "50"}


def test_package_stats():
    stats = package_stats([Package.from_api(BASIC), Package.from_api(GOLD)])

    assert stats.total_packages == 2
    assert stats.total_revenue == 4500
    assert stats.average_price == 2250
    assert stats.max_speed == 50
    assert stats.min_speed == 10


def test_package_stats_of_nothing_is_zero():
    assert package_stats([]) == PackageStats(0, 0.0, 0.0, 0.0, 0.0)


def test_package_form_rules():
    _, errors = validate_package_form({"name": "", "price": "0", "speed": "-5"})
    assert errors == {
        "name": "Package name is required",
        "price": "Price must be greater than 0",
        "speed": "Speed must be greater than 0",
    }

    data, errors = validate_package_form({"name": "Basic", "price": "1500", "speed": "10"})
    assert errors == {}
    assert data == {"name": "Basic", "price": 1500.0, "speed": 10, "description": ""}


def test_created_package_is_listed_with_price_and_speed(admin_client, backend):
    backend.on("POST", "/package", {"package": BASIC}, status=201)
    backend.on("GET", "/package", {"packages": [BASIC]})

    response = admin_client.post("/packages/new", data={"name": "Basic", "price": "1500", "speed": "10"})
    assert response.status_code == 302
    assert backend.calls_to("POST", "/package")[0].json == {
        "name": "Basic", "price": 1500.0, "speed": 10, "description": "",
    }

    listing = admin_client.get("/packages")
    assert b"Basic" in listing.data
    assert b"Rs1500.00" in listing.data
    assert b"10 Mbps" in listing.data


def test_invalid_package_is_not_sent(admin_client, backend):
    response = admin_client.post("/packages/new", data={"name": "Basic", "price": "abc", "speed": "10"})

    assert response.status_code == 200
    assert b"Price must be greater than 0" in response.data
    assert backend.writes == []


def test_packages_sort_by_price_descending(admin_client, backend):
    backend.on("GET", "/package", [BASIC, GOLD])

    body = admin_client.get("/packages?sort=price&dir=desc").get_data(as_text=True)

    assert body.index("Gold") < body.index("Basic")


def test_delete_package_requires_confirmation(admin_client, backend):
    backend.on("GET", "/package/p1", {"package": BASIC})
    backend.on("DELETE", "/package/p1", None, status=204)

    confirm = admin_client.get("/packages/p1/delete")
    assert b'name="confirm" value="yes"' in confirm.data
    assert backend.writes == []

    admin_client.post("/packages/p1/delete", data={"confirm": "yes"})
    assert len(backend.calls_to("DELETE", "/package/p1")) == 1
