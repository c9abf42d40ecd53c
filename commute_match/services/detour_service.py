"""
Detour estimation for commute matching.

The detour is the extra time a driver spends picking a rider up on the way
to work compared with driving straight there. Exact drive times come from a
routing provider in two batched calls; any candidate whose legs are missing
falls back to a straight-line estimate of about two minutes per extra mile.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from commute_match.models import DetourSource
from commute_match.route_service import DriveTimeMatrix, RoutingProvider, distance_between
from commute_match.stores.base import CandidateUser, Location

logger = logging.getLogger(__name__)

# Suburban driving, roughly 30 mph
MINUTES_PER_MILE = 2


@dataclass
class DetourEstimate:
    candidate: CandidateUser
    detour_minutes: float
    source: DetourSource


def prefilter_candidates(
    requester: Location,
    candidates: Sequence[CandidateUser],
    distance_threshold_miles: float
) -> List[CandidateUser]:
    """Drop candidates whose homes are farther than the threshold in a straight line."""
    return [
        candidate for candidate in candidates
        if distance_between(requester, candidate.home) <= distance_threshold_miles
    ]


def estimate_detour_minutes(requester: Location, candidate: Location, destination: Location) -> float:
    """Straight-line detour estimate; needs no network access."""
    direct = distance_between(requester, destination)
    via_candidate = distance_between(requester, candidate) + distance_between(candidate, destination)
    return max(0.0, (via_candidate - direct) * MINUTES_PER_MILE)


class DetourEstimator:
    """Per-candidate detour minutes, exact where routing allows, estimated otherwise."""

    def __init__(self, destination: Location, routing: Optional[RoutingProvider] = None):
        self.destination = destination
        self.routing = routing

    async def _lookup(self, origins: List[Location], destinations: List[Location]) -> DriveTimeMatrix:
        try:
            return await self.routing.batch_drive_time_minutes(origins, destinations)
        except Exception as e:
            logger.error(f"Routing provider {self.routing.name} raised, falling back to estimates: {e}")
            return DriveTimeMatrix.failed(str(e))

    async def estimate(self, requester: Location, candidates: Sequence[CandidateUser]) -> List[DetourEstimate]:
        candidates = list(candidates)
        if not candidates:
            return []

        to_candidates = None
        from_candidates = None
        if self.routing is not None:
            homes = [c.home for c in candidates]
            # requester -> [each candidate..., destination]
            to_candidates = await self._lookup([requester], homes + [self.destination])
            # [each candidate...] -> destination
            from_candidates = await self._lookup(homes, [self.destination])

        estimates = []
        exact_count = 0
        for i, candidate in enumerate(candidates):
            detour = None
            if to_candidates is not None:
                driver_to_candidate = to_candidates.get(0, i)
                driver_to_destination = to_candidates.get(0, len(candidates))
                candidate_to_destination = from_candidates.get(i, 0)
                if None not in (driver_to_candidate, driver_to_destination, candidate_to_destination):
                    detour = max(0.0, driver_to_candidate + candidate_to_destination - driver_to_destination)

            if detour is not None:
                exact_count += 1
                estimates.append(DetourEstimate(candidate, detour, DetourSource.EXACT))
            else:
                estimates.append(DetourEstimate(
                    candidate,
                    estimate_detour_minutes(requester, candidate.home, self.destination),
                    DetourSource.ESTIMATED
                ))

        if self.routing is not None and exact_count < len(candidates):
            logger.info(
                f"Using straight-line detour for {len(candidates) - exact_count} of {len(candidates)} candidates"
            )
        return estimates
