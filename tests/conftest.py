"""
Shared fixtures: in-memory stores, a scripted routing provider and an
authenticated API client wired to them.
"""
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from commute_match.auth import create_access_token
from commute_match.core import dependencies
from commute_match.models import CommuteRole, Direction
from commute_match.route_service import DriveTimeMatrix, RoutingProvider
from commute_match.server import app
from commute_match.services.matching_service import MatchingConfig
from commute_match.services.schedule_service import minutes_of_day
from commute_match.stores.base import (
    CommutePreference, InterestStore, Location, MatchRecord, MatchStore,
    PreferenceStore, UserRecord, UserStore
)

# Epic's Verona campus
WORKPLACE = Location(42.9914, -89.5326)
# Madison, WI
REQUESTER_HOME = Location(43.07, -89.4)
# ~0.7 miles north of the requester
NEARBY_HOME = Location(43.08, -89.4)
# ~16 miles north of the requester
FAR_NORTH_HOME = Location(43.3, -89.4)
# Chicago, well beyond the 30 mile prefilter
CHICAGO_HOME = Location(41.8781, -87.6298)


def make_pref(
    direction: str = "TO_WORK",
    earliest: str = "07:00",
    latest: str = "08:30",
    days=(0, 1, 2, 3, 4),
    role: str = "EITHER"
) -> CommutePreference:
    return CommutePreference(
        direction=Direction(direction),
        earliest=minutes_of_day(earliest),
        latest=minutes_of_day(latest),
        days_of_week=set(days),
        role=CommuteRole(role)
    )


def make_user(user_id: str, home: Optional[Location], name: Optional[str] = None, neighborhood=None) -> UserRecord:
    return UserRecord(
        id=user_id,
        display_name=name or user_id.title(),
        home=home,
        home_neighborhood=neighborhood,
        email=f"{user_id}@example.com"
    )


class InMemoryUserStore(UserStore):

    def __init__(self, users: List[UserRecord] = ()):
        self.users: Dict[str, UserRecord] = {u.id: u for u in users}

    def add(self, user: UserRecord):
        self.users[user.id] = user

    async def get_user(self, user_id):
        return self.users.get(user_id)

    async def list_users_with_location(self, excluding_id):
        return [u for u in self.users.values() if u.id != excluding_id and u.home is not None]

    async def update_home(self, user_id, home_address, home, home_neighborhood):
        user = self.users.get(user_id)
        if user is None:
            return None
        user.home_address = home_address
        user.home = home
        user.home_neighborhood = home_neighborhood
        return user


class InMemoryPreferenceStore(PreferenceStore):

    def __init__(self):
        self.preferences: Dict[str, Dict[Direction, CommutePreference]] = {}

    def set(self, user_id: str, *prefs: CommutePreference):
        self.preferences[user_id] = {p.direction: p for p in prefs}

    async def list_preferences(self, user_id):
        return list(self.preferences.get(user_id, {}).values())

    async def upsert_preference(self, user_id, preference):
        self.preferences.setdefault(user_id, {})[preference.direction] = preference

    async def delete_preference(self, user_id, direction):
        self.preferences.get(user_id, {}).pop(Direction(direction), None)


class InMemoryMatchStore(MatchStore):

    def __init__(self):
        self.records: List[MatchRecord] = []
        self.deleted_for: List[str] = []

    async def delete_matches(self, user_id):
        self.deleted_for.append(user_id)
        self.records = [r for r in self.records if user_id not in (r.user_a_id, r.user_b_id)]

    async def insert_match(self, record):
        self.records.append(record)

    async def list_matches(self, user_id):
        found = [r for r in self.records if user_id in (r.user_a_id, r.user_b_id)]
        return sorted(found, key=lambda r: r.rank_score)


class InMemoryInterestStore(InterestStore):

    def __init__(self):
        self.interests = set()

    async def add_interest(self, from_user_id, to_user_id, direction):
        self.interests.add((from_user_id, to_user_id, Direction(direction)))

    async def remove_interest(self, from_user_id, to_user_id, direction):
        self.interests.discard((from_user_id, to_user_id, Direction(direction)))

    async def has_interest(self, from_user_id, to_user_id, direction):
        return (from_user_id, to_user_id, Direction(direction)) in self.interests


class ScriptedRoutingProvider(RoutingProvider):
    """Returns (or raises) queued responses in call order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    @property
    def name(self):
        return "scripted"

    async def batch_drive_time_minutes(self, origins, destinations):
        self.calls.append((list(origins), list(destinations)))
        response = self.responses.pop(0) if self.responses else DriveTimeMatrix.failed("no response queued")
        if isinstance(response, Exception):
            raise response
        return response


class Stores:
    def __init__(self):
        self.users = InMemoryUserStore()
        self.preferences = InMemoryPreferenceStore()
        self.matches = InMemoryMatchStore()
        self.interests = InMemoryInterestStore()


@pytest.fixture
def stores():
    return Stores()


@pytest.fixture
def matching_config():
    return MatchingConfig(destination=WORKPLACE)


@pytest.fixture
def client(stores, matching_config):
    """API client backed by in-memory stores, without a routing provider."""
    app.dependency_overrides[dependencies.get_user_store] = lambda: stores.users
    app.dependency_overrides[dependencies.get_preference_store] = lambda: stores.preferences
    app.dependency_overrides[dependencies.get_match_store] = lambda: stores.matches
    app.dependency_overrides[dependencies.get_interest_store] = lambda: stores.interests
    app.dependency_overrides[dependencies.get_routing] = lambda: None
    app.dependency_overrides[dependencies.get_matching_config] = lambda: matching_config
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    token = create_access_token({"user_id": user_id})
    return {"Authorization": f"Bearer {token}"}
