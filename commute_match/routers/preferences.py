"""Commute preference routes."""
from fastapi import APIRouter, Depends
from typing import List

from commute_match.auth import get_current_user_id
from commute_match.core.dependencies import get_preference_store
from commute_match.models import Direction, PreferenceResponse, PreferenceUpsert
from commute_match.services.schedule_service import format_minutes, minutes_of_day
from commute_match.stores.base import CommutePreference, PreferenceStore

router = APIRouter()


def _to_response(preference: CommutePreference) -> PreferenceResponse:
    return PreferenceResponse(
        id=preference.id,
        direction=preference.direction,
        earliest_time=format_minutes(preference.earliest),
        latest_time=format_minutes(preference.latest),
        days_of_week=sorted(preference.days_of_week),
        role=preference.role
    )


async def _list(user_id: str, preferences: PreferenceStore) -> List[PreferenceResponse]:
    return [_to_response(p) for p in await preferences.list_preferences(user_id)]


@router.get("", response_model=List[PreferenceResponse])
async def get_preferences(
    user_id: str = Depends(get_current_user_id),
    preferences: PreferenceStore = Depends(get_preference_store)
):
    """Get the current user's commute preferences."""
    return await _list(user_id, preferences)


@router.put("", response_model=List[PreferenceResponse])
async def upsert_preference(
    data: PreferenceUpsert,
    user_id: str = Depends(get_current_user_id),
    preferences: PreferenceStore = Depends(get_preference_store)
):
    """Create or replace the preference for one direction."""
    await preferences.upsert_preference(user_id, CommutePreference(
        direction=data.direction,
        earliest=minutes_of_day(data.earliest_time),
        latest=minutes_of_day(data.latest_time),
        days_of_week=set(data.days_of_week),
        role=data.role
    ))
    return await _list(user_id, preferences)


@router.delete("/{direction}")
async def delete_preference(
    direction: Direction,
    user_id: str = Depends(get_current_user_id),
    preferences: PreferenceStore = Depends(get_preference_store)
):
    """Delete the preference for one direction."""
    await preferences.delete_preference(user_id, direction)
    return {"ok": True}
