"""
Store interfaces used by the matching engine.

The engine only talks to these abstractions. MongoDB implementations live in
``stores.mongo``; tests plug in in-memory versions.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Set

from commute_match.models import Direction, CommuteRole


@dataclass(frozen=True)
class Location:
    """A geocoded point in degrees."""
    lat: float
    lng: float


@dataclass
class UserRecord:
    """The subset of a user the engine needs."""
    id: str
    display_name: str
    home: Optional[Location] = None
    home_neighborhood: Optional[str] = None
    home_address: Optional[str] = None
    email: Optional[str] = None


@dataclass
class CommutePreference:
    """
    One commute window for one direction.

    ``earliest`` and ``latest`` are minute-of-day values (0-1439).
    """
    direction: Direction
    earliest: int
    latest: int
    days_of_week: Set[int]
    role: CommuteRole
    id: Optional[str] = None


@dataclass
class CandidateUser:
    """Another commuter considered during a compute run."""
    id: str
    display_name: str
    home: Location
    preferences: List[CommutePreference] = field(default_factory=list)


@dataclass
class MatchRecord:
    """A stored pairing. ``user_a_id`` is the user who triggered the run."""
    id: str
    user_a_id: str
    user_b_id: str
    direction: Direction
    detour_minutes: float
    time_overlap_minutes: int
    rank_score: float


class UserStore(ABC):
    """Read access to user profiles."""

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def list_users_with_location(self, excluding_id: str) -> List[UserRecord]:
        """All users other than ``excluding_id`` that have a home location."""
        pass

    @abstractmethod
    async def update_home(
        self,
        user_id: str,
        home_address: Optional[str],
        home: Optional[Location],
        home_neighborhood: Optional[str]
    ) -> Optional[UserRecord]:
        pass


class PreferenceStore(ABC):
    """Commute preferences, at most one per user and direction."""

    @abstractmethod
    async def list_preferences(self, user_id: str) -> List[CommutePreference]:
        pass

    @abstractmethod
    async def upsert_preference(self, user_id: str, preference: CommutePreference) -> None:
        """Insert the preference or replace the one for the same direction."""
        pass

    @abstractmethod
    async def delete_preference(self, user_id: str, direction: Direction) -> None:
        pass


class MatchStore(ABC):
    """Computed match results."""

    @abstractmethod
    async def delete_matches(self, user_id: str) -> None:
        """Delete every match where the user is on either side."""
        pass

    @abstractmethod
    async def insert_match(self, record: MatchRecord) -> None:
        pass

    @abstractmethod
    async def list_matches(self, user_id: str) -> List[MatchRecord]:
        """Matches involving the user on either side, best rank score first."""
        pass


class InterestStore(ABC):
    """Interest expressed by one user in a match partner."""

    @abstractmethod
    async def add_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> None:
        """Record interest; recording the same interest twice is a no-op."""
        pass

    @abstractmethod
    async def remove_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> None:
        pass

    @abstractmethod
    async def has_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> bool:
        pass
