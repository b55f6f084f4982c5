import pytest

PUNE = {"country": "India", "state": "Maharashtra", "city": "Pune"}


@pytest.fixture
def seeded(users):
    users.add_population(7, **PUNE)
    users.add(id="s1", role="super_admin", created_at="2024-01-01T00:00:00")
    users.add(
        id="a1",
        full_name="Admin One",
        email="one@example.com",
        role="admin",
        created_at="2025-01-01T00:00:00",
        admin_assigned_location={**PUNE, "zipcode": "PUN001"},
    )
    users.add(id="a2", role="admin", created_at="2025-02-01T00:00:00")
    users.add(id="candidate", role="user")
    return users


def test_health(api_client) -> None:
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_database_without_supabase(api_client, monkeypatch: pytest.MonkeyPatch) -> None:
    from territory_access.db import supabase

    monkeypatch.setattr(supabase, "get_supabase_client", lambda: None)

    response = api_client.get("/api/health/database")

    assert response.status_code == 503
    assert "TERRITORY_SUPABASE_URL" in response.json()["detail"]


def test_root_lists_api_prefix(api_client) -> None:
    assert api_client.get("/").json()["api_prefix"] == "/api"


def test_location_listing(seeded, api_client) -> None:
    countries = api_client.get("/api/locations/countries").json()
    cities = api_client.get("/api/locations/cities", params={"country": "India", "state": "Maharashtra"}).json()
    zipcodes = api_client.get("/api/locations/zipcodes", params={"country": "India", "city": "Pune"}).json()

    assert countries == [{"value": "India", "label": "India (7 users)", "count": 7}]
    assert [city["value"] for city in cities] == ["Pune"]
    assert [zipcode["value"] for zipcode in zipcodes] == ["PUN002"]


def test_zipcodes_for_editing_admin_include_their_own(seeded, api_client) -> None:
    response = api_client.get(
        "/api/locations/zipcodes",
        params={"country": "India", "city": "Pune", "exclude_admin_id": "a1"},
    )

    assert [zipcode["value"] for zipcode in response.json()] == ["PUN001", "PUN002"]


def test_availability(seeded, api_client) -> None:
    response = api_client.get("/api/locations/zipcodes/availability", params={"country": "India", "city": "Pune"})

    assert response.json() == {"total": 2, "available": 1, "assigned": 1}


def test_states_requires_country(api_client) -> None:
    assert api_client.get("/api/locations/states").status_code == 422


def test_suggestions_and_user_count(seeded, api_client) -> None:
    suggestions = api_client.get("/api/locations/suggestions", params={"level": "city", "q": "pun"}).json()
    count = api_client.get("/api/locations/user-count", params={"country": "India"}).json()

    assert [option["value"] for option in suggestions] == ["Pune"]
    assert count == {"count": 7}


def test_hierarchy(seeded, api_client) -> None:
    body = api_client.get("/api/locations/hierarchy", params={"country": "India", "city": "Pune"}).json()

    assert [option["value"] for option in body["states"]] == ["Maharashtra"]
    assert [option["value"] for option in body["zipcodes"]] == ["PUN002"]


def test_list_admins(seeded, api_client) -> None:
    body = api_client.get("/api/admins").json()

    assert [admin["id"] for admin in body] == ["s1", "a2", "a1"]
    assert body[2]["territory"]["assignmentLevel"] == "zipcode"
    assert body[1]["territory"] is None


def test_validate_reports_hierarchy_error(seeded, api_client) -> None:
    response = api_client.post("/api/admins/validate", json={"country": "India", "city": "Pune"})

    assert response.status_code == 200
    assert response.json() == {
        "is_valid": False,
        "error": "City-level assignment requires country, state, and city.",
        "assigned_to": None,
        "assignment_level": None,
    }


def test_validate_accepts_district_alias(seeded, api_client) -> None:
    response = api_client.post(
        "/api/admins/validate",
        json={"country": "India", "district": "Maharashtra", "city": "Pune"},
    )

    assert response.json()["is_valid"] is True
    assert response.json()["assignment_level"] == "city"


def test_promote_conflict_returns_holder(seeded, api_client) -> None:
    response = api_client.post("/api/admins/candidate/promote", json={**PUNE, "zipcode": "PUN001"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["is_valid"] is False
    assert detail["assigned_to"] == {"id": "a1", "name": "Admin One", "email": "one@example.com"}
    assert seeded.get_user("candidate")["role"] == "user"


def test_promote_invalid_hierarchy(seeded, api_client) -> None:
    response = api_client.post("/api/admins/candidate/promote", json={"country": "India", "city": "Pune"})

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "City-level assignment requires country, state, and city."


def test_promote_empty_location(seeded, api_client) -> None:
    response = api_client.post("/api/admins/candidate/promote", json={"country": "Nepal"})

    assert response.status_code == 422
    assert "No users found" in response.json()["detail"]["error"]


def test_promote_success(seeded, api_client) -> None:
    response = api_client.post("/api/admins/candidate/promote", json={**PUNE, "zipcode": "PUN002"})

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "admin"
    assert body["territory"]["assignmentLevel"] == "zipcode"
    assert seeded.get_user("candidate")["admin_assigned_location"]["zipcode"] == "PUN002"


def test_reassign_own_zipcode(seeded, api_client) -> None:
    response = api_client.put("/api/admins/a1/territory", json={**PUNE, "zipcode": "PUN001", "streets": ["FC Road"]})

    assert response.status_code == 200
    assert response.json()["territory"]["streets"] == ["FC Road"]


def test_write_failure_is_bad_gateway(seeded, api_client) -> None:
    seeded.fail_writes = True

    response = api_client.post("/api/admins/a2/demote")

    assert response.status_code == 502


def test_demote(seeded, api_client) -> None:
    response = api_client.post("/api/admins/a1/demote")

    assert response.status_code == 200
    assert response.json() == {"success": True, "user_id": "a1", "role": "user", "territory": None}


def test_scope_endpoints(seeded, api_client) -> None:
    restricted = api_client.get("/api/access/a1/scope").json()
    none = api_client.get("/api/access/a2/scope").json()
    unrestricted = api_client.get("/api/access/s1/scope").json()

    assert restricted["scope"] == "restricted"
    assert [item["column"] for item in restricted["filters"]] == ["country", "state", "city"]
    assert restricted["summary"] == "PUN001, Pune, Maharashtra, India"
    assert none["scope"] == "none"
    assert none["summary"] == "No Location Assigned"
    assert unrestricted["scope"] == "unrestricted"


def test_scope_rejects_unknown_and_plain_users(seeded, api_client) -> None:
    assert api_client.get("/api/access/missing/scope").status_code == 404
    assert api_client.get("/api/access/candidate/scope").status_code == 403


def test_user_ids(seeded, api_client) -> None:
    restricted = api_client.get("/api/access/a1/user-ids").json()
    unrestricted = api_client.get("/api/access/s1/user-ids").json()
    none = api_client.get("/api/access/a2/user-ids").json()

    assert restricted["unrestricted"] is False
    assert len(restricted["user_ids"]) == 7
    assert unrestricted == {"principal_id": "s1", "unrestricted": True, "user_ids": []}
    assert none == {"principal_id": "a2", "unrestricted": False, "user_ids": []}


def test_can_access(seeded, api_client) -> None:
    allowed = api_client.post("/api/access/a1/can-access", json=PUNE).json()
    denied = api_client.post("/api/access/a1/can-access", json={**PUNE, "city": "Mumbai"}).json()

    assert allowed == {"principal_id": "a1", "allowed": True}
    assert denied["allowed"] is False
    assert api_client.post("/api/access/candidate/can-access", json=PUNE).status_code == 403


def test_role_mismatches_are_forbidden(seeded, api_client) -> None:
    super_admin_territory = api_client.put("/api/admins/s1/territory", json=PUNE)
    plain_user_territory = api_client.put("/api/admins/candidate/territory", json=PUNE)
    super_admin_demotion = api_client.post("/api/admins/s1/demote")
    admin_promotion = api_client.post("/api/admins/a2/promote", json=PUNE)

    assert super_admin_territory.status_code == 403
    assert plain_user_territory.status_code == 403
    assert super_admin_demotion.status_code == 403
    assert admin_promotion.status_code == 403
    assert seeded.get_user("s1")["role"] == "super_admin"
    assert seeded.get_user("candidate")["role"] == "user"
    assert "admin_assigned_location" not in seeded.get_user("a2")


def test_mutating_unknown_principal_is_not_found(seeded, api_client) -> None:
    assert api_client.post("/api/admins/missing/promote", json=PUNE).status_code == 404
    assert api_client.put("/api/admins/missing/territory", json=PUNE).status_code == 404
    assert api_client.post("/api/admins/missing/demote").status_code == 404
