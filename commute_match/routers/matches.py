"""Match listing and computation routes."""
from fastapi import APIRouter, Depends
from typing import List

from commute_match.auth import get_current_user_id
from commute_match.core.dependencies import (
    get_interest_store, get_match_store, get_matching_service, get_user_store
)
from commute_match.models import ComputeResponse, MatchListItem
from commute_match.services.matching_service import MatchingService, round_tenth
from commute_match.stores.base import InterestStore, MatchStore, UserStore

router = APIRouter()


@router.get("", response_model=List[MatchListItem])
async def list_matches(
    user_id: str = Depends(get_current_user_id),
    matches: MatchStore = Depends(get_match_store),
    users: UserStore = Depends(get_user_store),
    interests: InterestStore = Depends(get_interest_store)
):
    """
    Stored matches involving the current user, best first.
    Only the partner's neighborhood is exposed, never their address.
    """
    records = await matches.list_matches(user_id)
    partners = {}
    items = []

    for record in records:
        partner_id = record.user_b_id if record.user_a_id == user_id else record.user_a_id
        if partner_id not in partners:
            partners[partner_id] = await users.get_user(partner_id)
        partner = partners[partner_id]

        items.append(MatchListItem(
            id=record.id,
            partner_id=partner_id,
            partner_name=partner.display_name if partner else "Commuter",
            partner_address=partner.home_neighborhood if partner else None,
            direction=record.direction,
            detour_minutes=round_tenth(record.detour_minutes),
            time_overlap_minutes=record.time_overlap_minutes,
            rank_score=round_tenth(record.rank_score),
            i_expressed_interest=await interests.has_interest(user_id, partner_id, record.direction),
            they_expressed_interest=await interests.has_interest(partner_id, user_id, record.direction)
        ))

    return items


@router.post("/compute", response_model=ComputeResponse)
async def compute_matches(
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """Recompute all matches for the current user."""
    result = await service.compute_matches(user_id)
    return {
        "computed": result.computed,
        "matches": [summary.to_dict() for summary in result.matches]
    }
