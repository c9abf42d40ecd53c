"""API tests for the home location profile."""
from commute_match.routers import profile as profile_router

from conftest import auth_headers, make_user


class TestProfile:

    def test_requires_token(self, client):
        assert client.get("/api/profile").status_code == 401

    def test_unknown_user(self, client):
        assert client.get("/api/profile", headers=auth_headers("ghost")).status_code == 404

    def test_get_profile(self, client, stores):
        stores.users.add(make_user("user-1", None, name="Jane"))
        response = client.get("/api/profile", headers=auth_headers("user-1"))
        assert response.status_code == 200
        assert response.json()["display_name"] == "Jane"
        assert response.json()["home_lat"] is None

    def test_set_coordinates(self, client, stores):
        stores.users.add(make_user("user-1", None))

        response = client.put(
            "/api/profile",
            json={"home_address": "1 Main St", "home_lat": 43.07, "home_lng": -89.4},
            headers=auth_headers("user-1")
        )

        assert response.status_code == 200
        assert response.json()["home_lat"] == 43.07
        assert stores.users.users["user-1"].home.lng == -89.4

    def test_geocodes_address(self, client, stores, monkeypatch):
        stores.users.add(make_user("user-1", None))

        async def fake_geocode(address):
            assert address == "1 Main St, Madison"
            return (43.0766, -89.3853, "Marquette")

        monkeypatch.setattr(profile_router, "geocode_address", fake_geocode)
        response = client.put(
            "/api/profile",
            json={"home_address": "1 Main St, Madison"},
            headers=auth_headers("user-1")
        )

        data = response.json()
        assert data["home_lat"] == 43.0766
        assert data["home_neighborhood"] == "Marquette"

    def test_geocoding_failure_leaves_location_unset(self, client, stores, monkeypatch):
        stores.users.add(make_user("user-1", None))

        async def fake_geocode(address):
            return None

        monkeypatch.setattr(profile_router, "geocode_address", fake_geocode)
        response = client.put(
            "/api/profile",
            json={"home_address": "somewhere"},
            headers=auth_headers("user-1")
        )

        assert response.status_code == 200
        assert response.json()["home_address"] == "somewhere"
        assert response.json()["home_lat"] is None

    def test_rejects_out_of_range_coordinates(self, client, stores):
        stores.users.add(make_user("user-1", None))
        response = client.put(
            "/api/profile",
            json={"home_lat": 123.0, "home_lng": -89.4},
            headers=auth_headers("user-1")
        )
        assert response.status_code == 422
