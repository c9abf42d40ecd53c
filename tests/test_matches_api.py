"""
API tests for match listing and computation.
Run against in-memory stores through FastAPI's TestClient.
"""
from commute_match.models import Direction
from commute_match.stores.base import MatchRecord

from conftest import (
    FAR_NORTH_HOME, NEARBY_HOME, REQUESTER_HOME, auth_headers, make_pref, make_user
)


class TestHealthCheck:

    def test_api_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_client_config(self, client):
        response = client.get("/api/config")
        assert response.status_code == 200
        data = response.json()
        assert data["workplace_name"]
        assert isinstance(data["workplace_lat"], float)


class TestComputeMatches:

    def test_requires_token(self, client):
        response = client.post("/api/matches/compute")
        assert response.status_code == 401

    def test_rejects_bad_token(self, client):
        response = client.post("/api/matches/compute", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_unknown_user(self, client):
        response = client.post("/api/matches/compute", headers=auth_headers("ghost"))
        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFoundError"

    def test_no_home_address(self, client, stores):
        stores.users.add(make_user("user-1", None))
        response = client.post("/api/matches/compute", headers=auth_headers("user-1"))
        assert response.status_code == 400
        assert "home address" in response.json()["detail"].lower()
        assert response.json()["error_type"] == "PreconditionError"

    def test_no_preferences(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME))
        response = client.post("/api/matches/compute", headers=auth_headers("user-1"))
        assert response.status_code == 400
        assert "preferences" in response.json()["detail"].lower()

    def test_no_candidates(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME))
        stores.preferences.set("user-1", make_pref())

        response = client.post("/api/matches/compute", headers=auth_headers("user-1"))

        assert response.status_code == 200
        assert response.json() == {"computed": 0, "matches": []}

    def test_nearby_candidate(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME))
        stores.users.add(make_user("user-2", NEARBY_HOME, name="Jane"))
        stores.preferences.set("user-1", make_pref(days=(0, 1, 2)))
        stores.preferences.set("user-2", make_pref(days=(0, 1, 2), role="DRIVER"))

        response = client.post("/api/matches/compute", headers=auth_headers("user-1"))

        assert response.status_code == 200
        data = response.json()
        assert data["computed"] == 1
        match = data["matches"][0]
        assert match["direction"] == "TO_WORK"
        assert match["partner_name"] == "Jane"
        assert match["partner_id"] == "user-2"
        assert match["time_overlap_minutes"] == 90
        assert 0 < match["detour_minutes"] < 5

    def test_far_candidate_skipped(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME))
        stores.users.add(make_user("user-2", FAR_NORTH_HOME))
        stores.preferences.set("user-1", make_pref())
        stores.preferences.set("user-2", make_pref(role="DRIVER"))

        response = client.post("/api/matches/compute", headers=auth_headers("user-1"))

        assert response.status_code == 200
        assert response.json()["computed"] == 0


class TestListMatches:

    def test_requires_token(self, client):
        assert client.get("/api/matches").status_code == 401

    def test_empty(self, client):
        response = client.get("/api/matches", headers=auth_headers("user-1"))
        assert response.status_code == 200
        assert response.json() == []

    def test_partner_seen_from_either_side(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME, name="Me"))
        stores.users.add(make_user("user-2", NEARBY_HOME, name="Jane", neighborhood="Willy Street"))
        stores.matches.records.append(
            MatchRecord("match-1", "user-2", "user-1", Direction.TO_WORK, 5.23, 45, -17.27)
        )

        response = client.get("/api/matches", headers=auth_headers("user-1"))

        assert response.status_code == 200
        item = response.json()[0]
        assert item["partner_id"] == "user-2"
        assert item["partner_name"] == "Jane"
        assert item["partner_address"] == "Willy Street"
        assert item["detour_minutes"] == 5.2
        assert item["rank_score"] == -17.3
        assert "home_address" not in item

    def test_listed_halves_round_up(self, client, stores):
        stores.users.add(make_user("user-2", NEARBY_HOME))
        stores.matches.records.append(
            MatchRecord("match-1", "user-1", "user-2", Direction.TO_WORK, 2.25, 90, -42.75)
        )

        item = client.get("/api/matches", headers=auth_headers("user-1")).json()[0]

        assert item["detour_minutes"] == 2.3
        assert item["rank_score"] == -42.7

    def test_interest_flags(self, client, stores):
        stores.users.add(make_user("user-2", NEARBY_HOME))
        stores.matches.records.append(
            MatchRecord("match-1", "user-1", "user-2", Direction.FROM_WORK, 2.0, 30, -13.0)
        )
        stores.interests.interests.add(("user-1", "user-2", Direction.FROM_WORK))

        item = client.get("/api/matches", headers=auth_headers("user-1")).json()[0]
        assert item["i_expressed_interest"] is True
        assert item["they_expressed_interest"] is False

        stores.interests.interests.add(("user-2", "user-1", Direction.FROM_WORK))
        item = client.get("/api/matches", headers=auth_headers("user-1")).json()[0]
        assert item["they_expressed_interest"] is True

    def test_lists_computed_matches(self, client, stores):
        stores.users.add(make_user("user-1", REQUESTER_HOME))
        stores.users.add(make_user("user-2", NEARBY_HOME, neighborhood="Tenney-Lapham"))
        stores.preferences.set("user-1", make_pref())
        stores.preferences.set("user-2", make_pref())

        computed = client.post("/api/matches/compute", headers=auth_headers("user-1")).json()
        listed = client.get("/api/matches", headers=auth_headers("user-1")).json()

        assert [m["id"] for m in listed] == [m["id"] for m in computed["matches"]]
        assert listed[0]["partner_address"] == "Tenney-Lapham"
