"""
tests/test_tour_routes.py -- Integration tests for the tour endpoints.

Covers:
  - End-to-end flow: register, login, create a tour, add an event without a date
  - GET /api/tours and /api/tours/{id} are public; 404 for unknown or malformed ids
  - POST /api/tours requires auth, fills defaults, validates required fields
  - PUT /api/tours/{id} adminEmail ownership and partial updates
  - DELETE /api/tours/{id} leaves courses and events in place
  - /api/colleges/* routes serve the same tours
  - Store failures surface as 500 server_error; detail only in debug mode
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.main import create_app

MIT = {
    "name": "MIT",
    "description": "Massachusetts Institute of Technology",
    "image": "https://img.uni.edu/mit.png",
    "location": [-71.09, 42.36],
    "address": "77 Massachusetts Ave",
}


def _create(api_client, headers, **overrides) -> dict:
    resp = api_client.post("/api/tours", json={**MIT, **overrides}, headers=headers)
    assert resp.status_code == 200, f"create failed: {resp.status_code} {resp.text}"
    return resp.json()


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


def test_register_login_create_tour_flow(api_client):
    """Register, log in, create a tour, then add an incomplete event."""
    creds = {"username": "kesav", "email": "k@x.com", "password": "secret1"}
    resp = api_client.post("/api/auth/register", json=creds)
    assert resp.status_code == 200
    assert resp.json()["token"]

    again = api_client.post("/api/auth/register", json=creds)
    assert again.status_code == 409

    login = api_client.post("/api/auth/login", json={"email": "k@x.com", "password": "secret1"})
    assert login.status_code == 200
    assert login.json()["user"]["username"] == "kesav"
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    body = {"name": "MIT", "description": "d", "image": "i", "location": [1, 2], "address": "a"}
    anonymous = api_client.post("/api/tours", json=body)
    assert anonymous.status_code == 401

    created = api_client.post("/api/tours", json=body, headers=headers)
    assert created.status_code == 200
    tour = created.json()
    assert len(tour["id"]) == 24
    assert tour["name"] == "MIT"
    assert tour["location"] == [1.0, 2.0]

    no_date = api_client.post(f"/api/tours/{tour['id']}/events", json={"title": "Open House", "description": "x"})
    assert no_date.status_code == 400
    assert no_date.json()["code"] == "missing_fields"


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


class TestCreateTour:
    def test_defaults_applied(self, api_client, auth_headers):
        resp = api_client.post("/api/tours", json={"name": "Reed", "description": "Portland"}, headers=auth_headers)
        assert resp.status_code == 200
        tour = resp.json()
        assert tour["established"] == "Unknown"
        assert tour["students"] == "Unknown"
        assert tour["type"] == "College"
        assert tour["image"] == "https://via.placeholder.com/300"
        assert tour["location"] == [0.0, 0.0]
        assert tour["address"] == ""
        assert tour["createdAt"]

    def test_camel_case_fields_round_trip(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers, shortName="mit", tourInfo="Starts at Lobby 7")
        assert tour["shortName"] == "mit"
        assert tour["tourInfo"] == "Starts at Lobby 7"
        fetched = api_client.get(f"/api/tours/{tour['id']}").json()
        assert fetched == tour

    def test_missing_name_is_422(self, api_client, auth_headers):
        resp = api_client.post("/api/tours", json={"description": "no name"}, headers=auth_headers)
        assert resp.status_code == 422

    def test_bad_location_is_422(self, api_client, auth_headers):
        resp = api_client.post("/api/tours", json={**MIT, "location": [1, 2, 3]}, headers=auth_headers)
        assert resp.status_code == 422

    def test_invalid_token_is_401(self, api_client):
        resp = api_client.post("/api/tours", json=MIT, headers={"Authorization": "Bearer forged"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Token is not valid"


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestReadTour:
    def test_list_is_public_and_ordered(self, api_client, auth_headers):
        first = _create(api_client, auth_headers, name="Harvey Mudd")
        second = _create(api_client, auth_headers, name="Pomona")
        resp = api_client.get("/api/tours")
        assert resp.status_code == 200
        ids = [t["id"] for t in resp.json()]
        assert ids.index(first["id"]) < ids.index(second["id"])

    def test_get_unknown_is_404(self, api_client):
        resp = api_client.get("/api/tours/" + "0" * 24)
        assert resp.status_code == 404
        assert resp.json() == {"message": "Tour not found", "code": "not_found"}

    def test_get_malformed_id_is_404(self, api_client):
        assert api_client.get("/api/tours/not-an-id").status_code == 404


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class TestUpdateTour:
    def test_unowned_tour_editable_by_any_user(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        resp = api_client.put(f"/api/tours/{tour['id']}", json={"students": "11,000"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["students"] == "11,000"

    def test_owned_tour_requires_matching_admin_email(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers, adminEmail="owner@uni.edu")
        url = f"/api/tours/{tour['id']}"

        missing = api_client.put(url, json={"name": "Hijacked"}, headers=auth_headers)
        assert missing.status_code == 403
        assert missing.json()["message"] == "Not authorized to edit this tour"

        wrong = api_client.put(url, json={"name": "Hijacked", "adminEmail": "thief@uni.edu"}, headers=auth_headers)
        assert wrong.status_code == 403
        assert api_client.get(url).json()["name"] == "MIT"

        ok = api_client.put(url, json={"name": "MIT (Cambridge)", "adminEmail": "owner@uni.edu"}, headers=auth_headers)
        assert ok.status_code == 200
        assert ok.json()["name"] == "MIT (Cambridge)"

    def test_only_sent_fields_change(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers, shortName="mit")
        resp = api_client.put(f"/api/tours/{tour['id']}", json={"address": "Cambridge, MA"}, headers=auth_headers)
        updated = resp.json()
        assert updated["address"] == "Cambridge, MA"
        assert updated["shortName"] == "mit"
        assert updated["description"] == tour["description"]
        assert updated["createdAt"] == tour["createdAt"]
        assert updated["id"] == tour["id"]

    def test_null_clears_optional_field_but_not_required(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers, shortName="mit")
        resp = api_client.put(
            f"/api/tours/{tour['id']}", json={"shortName": None, "name": None}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["shortName"] is None
        assert resp.json()["name"] == "MIT"

    def test_update_requires_auth(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        assert api_client.put(f"/api/tours/{tour['id']}", json={"name": "x"}).status_code == 401

    def test_update_unknown_is_404(self, api_client, auth_headers):
        resp = api_client.put("/api/tours/" + "0" * 24, json={"name": "x"}, headers=auth_headers)
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDeleteTour:
    def test_delete(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        resp = api_client.delete(f"/api/tours/{tour['id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Tour deleted successfully"}
        assert api_client.get(f"/api/tours/{tour['id']}").status_code == 404

    def test_delete_leaves_children(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        api_client.post(f"/api/tours/{tour['id']}/courses", json={"name": "6.001", "description": "SICP"})
        api_client.delete(f"/api/tours/{tour['id']}", headers=auth_headers)
        assert len(api_client.app.state.tour_store.list_courses(tour["id"])) == 1

    def test_delete_requires_auth(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        assert api_client.delete(f"/api/tours/{tour['id']}").status_code == 401
        assert api_client.get(f"/api/tours/{tour['id']}").status_code == 200

    def test_delete_unknown_is_404(self, api_client, auth_headers):
        assert api_client.delete("/api/tours/" + "0" * 24, headers=auth_headers).status_code == 404


# ---------------------------------------------------------------------------
# Legacy /colleges paths
# ---------------------------------------------------------------------------


class TestCollegesAlias:
    def test_colleges_list_matches_tours(self, api_client, auth_headers):
        _create(api_client, auth_headers, name="Olin")
        assert api_client.get("/api/colleges").json() == api_client.get("/api/tours").json()

    def test_colleges_detail_and_children(self, api_client, auth_headers):
        tour = _create(api_client, auth_headers)
        assert api_client.get(f"/api/colleges/{tour['id']}").json()["id"] == tour["id"]
        added = api_client.post(
            f"/api/colleges/{tour['id']}/courses", json={"name": "8.01", "description": "Physics I"}
        )
        assert added.status_code == 201
        listed = api_client.get(f"/api/tours/{tour['id']}/courses").json()
        assert [c["id"] for c in listed] == [added.json()["id"]]

    def test_colleges_create(self, api_client, auth_headers):
        resp = api_client.post("/api/colleges", json=MIT, headers=auth_headers)
        assert resp.status_code == 200
        assert api_client.get(f"/api/tours/{resp.json()['id']}").status_code == 200


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


class TestServerErrors:
    def test_store_failure_is_500(self, api_client, monkeypatch):
        def broken():
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(api_client.app.state.tour_store, "list_tours", broken)
        resp = api_client.get("/api/tours")
        assert resp.status_code == 500
        data = resp.json()
        assert data["message"] == "Server error"
        assert data["code"] == "server_error"
        # Debug mode exposes the underlying error.
        assert "disk I/O error" in data["error"]

    def test_unknown_route_uses_envelope(self, api_client):
        resp = api_client.get("/api/nowhere")
        assert resp.status_code == 404
        assert resp.json()["code"] == "http_404"

    def test_store_failure_detail_hidden_outside_debug(self, settings_factory, monkeypatch):
        """With DEBUG off the 500 body carries only message and code."""
        app = create_app(settings_factory("tour_routes_production", debug=False))
        with TestClient(app) as prod_client:

            def broken():
                raise OperationalError("SELECT", {}, Exception("disk I/O error"))

            monkeypatch.setattr(prod_client.app.state.tour_store, "list_tours", broken)
            resp = prod_client.get("/api/tours")

        assert resp.status_code == 500
        assert resp.json() == {"message": "Server error", "code": "server_error"}
