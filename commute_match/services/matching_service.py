"""
Commute Matching Service

Computes carpool matches for one user:
- Geographic prefilter of candidate commuters
- Detour estimate per candidate (exact drive times with straight-line fallback)
- Preference pairing: same direction, compatible roles, overlapping schedule
- Rank score: lower is better (small detour, long shared window)

Every run replaces all stored matches involving the user. Results are only
recomputed from the requesting user's side.
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple
import asyncio
import logging
import math
import uuid
import weakref

from commute_match.core.exceptions import NotFoundError, PreconditionError
from commute_match.models import Direction
from commute_match.route_service import RoutingProvider
from commute_match.services.detour_service import DetourEstimator, prefilter_candidates
from commute_match.services.schedule_service import roles_compatible, schedule_overlap
from commute_match.stores.base import (
    CandidateUser, CommutePreference, Location, MatchRecord,
    MatchStore, PreferenceStore, UserStore
)

logger = logging.getLogger(__name__)

# Serializes delete-then-insert runs for the same user within this process.
# An entry lives only while some run holds or awaits its lock.
_compute_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(user_id: str) -> asyncio.Lock:
    lock = _compute_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _compute_locks[user_id] = lock
    return lock


def round_tenth(value: float) -> float:
    """Round to one decimal place, halves toward positive infinity (2.25 -> 2.3, -42.75 -> -42.7)."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass(frozen=True)
class MatchingConfig:
    destination: Location
    distance_threshold_miles: float = 30.0
    detour_threshold_minutes: float = 15.0
    w_detour: float = 1.0
    w_overlap: float = 0.5

    @classmethod
    def from_settings(cls, settings) -> "MatchingConfig":
        return cls(
            destination=Location(settings.work_lat, settings.work_lng),
            distance_threshold_miles=settings.distance_threshold_mi,
            detour_threshold_minutes=settings.detour_threshold_min,
            w_detour=settings.w_detour,
            w_overlap=settings.w_overlap
        )


@dataclass
class MatchSummary:
    """A computed match as reported to the requesting user (rounded values)."""
    id: str
    partner_id: str
    partner_name: str
    direction: Direction
    detour_minutes: float
    time_overlap_minutes: int
    rank_score: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ComputeResult:
    records: List[MatchRecord]
    matches: List[MatchSummary]

    @property
    def computed(self) -> int:
        return len(self.matches)


def compute_rank_score(detour_minutes: float, overlap_minutes: int, w_detour: float, w_overlap: float) -> float:
    """Lower is better. The terms are not normalized against each other."""
    return detour_minutes * w_detour - overlap_minutes * w_overlap


def pair_preferences(
    my_preferences: List[CommutePreference],
    their_preferences: List[CommutePreference]
) -> List[Tuple[CommutePreference, CommutePreference, int]]:
    """
    Every (mine, theirs) combination that shares a direction, has compatible
    roles and overlaps in time on at least one common day.
    Returns (mine, theirs, overlap_minutes) tuples.
    """
    pairs = []
    for mine in my_preferences:
        for theirs in their_preferences:
            if mine.direction != theirs.direction:
                continue
            if not roles_compatible(mine.role, theirs.role):
                continue

            overlap_minutes, common_days = schedule_overlap(
                mine.earliest, mine.latest, mine.days_of_week,
                theirs.earliest, theirs.latest, theirs.days_of_week
            )
            if overlap_minutes == 0 or not common_days:
                continue

            pairs.append((mine, theirs, overlap_minutes))
    return pairs


def _sort_key(record: MatchRecord):
    # Ties on score are broken by partner id, then direction
    return (record.rank_score, record.user_b_id, Direction(record.direction).value)


class MatchingService:
    """Runs a full match computation for one user."""

    def __init__(
        self,
        users: UserStore,
        preferences: PreferenceStore,
        matches: MatchStore,
        config: MatchingConfig,
        routing: Optional[RoutingProvider] = None
    ):
        self.users = users
        self.preferences = preferences
        self.matches = matches
        self.config = config
        self.estimator = DetourEstimator(config.destination, routing)

    async def compute_matches(self, user_id: str) -> ComputeResult:
        lock = _lock_for(user_id)
        async with lock:
            return await self._compute(user_id)

    async def _compute(self, user_id: str) -> ComputeResult:
        user = await self.users.get_user(user_id)
        if user is None:
            raise NotFoundError("User")
        if user.home is None:
            raise PreconditionError("Please set your home address first")

        my_preferences = await self.preferences.list_preferences(user_id)
        if not my_preferences:
            raise PreconditionError("Please set your commute preferences first")

        others = await self.users.list_users_with_location(user_id)
        await self.matches.delete_matches(user_id)

        pool = [
            CandidateUser(id=other.id, display_name=other.display_name, home=other.home)
            for other in others
            if other.home is not None
        ]
        nearby = prefilter_candidates(user.home, pool, self.config.distance_threshold_miles)
        estimates = await self.estimator.estimate(user.home, nearby)

        records = []
        names = {}
        for estimate in estimates:
            if estimate.detour_minutes > self.config.detour_threshold_minutes:
                continue

            candidate = estimate.candidate
            candidate.preferences = await self.preferences.list_preferences(candidate.id)
            names[candidate.id] = candidate.display_name

            for mine, _theirs, overlap_minutes in pair_preferences(my_preferences, candidate.preferences):
                records.append(MatchRecord(
                    id=str(uuid.uuid4()),
                    user_a_id=user_id,
                    user_b_id=candidate.id,
                    direction=mine.direction,
                    detour_minutes=estimate.detour_minutes,
                    time_overlap_minutes=overlap_minutes,
                    rank_score=compute_rank_score(
                        estimate.detour_minutes, overlap_minutes,
                        self.config.w_detour, self.config.w_overlap
                    )
                ))

        for record in records:
            await self.matches.insert_match(record)

        records.sort(key=_sort_key)
        summaries = [
            MatchSummary(
                id=record.id,
                partner_id=record.user_b_id,
                partner_name=names[record.user_b_id],
                direction=record.direction,
                detour_minutes=round_tenth(record.detour_minutes),
                time_overlap_minutes=record.time_overlap_minutes,
                rank_score=round_tenth(record.rank_score)
            )
            for record in records
        ]

        logger.info(
            f"Computed {len(summaries)} matches for user {user_id} "
            f"({len(pool)} candidates, {len(nearby)} within {self.config.distance_threshold_miles} mi)"
        )
        return ComputeResult(records=records, matches=summaries)
