"""Profile routes: home address and its geocoded location."""
from fastapi import APIRouter, Depends

from commute_match.auth import get_current_user_id
from commute_match.core.dependencies import get_user_store
from commute_match.core.exceptions import NotFoundError
from commute_match.models import ProfileResponse, ProfileUpdate
from commute_match.route_service import geocode_address
from commute_match.stores.base import Location, UserRecord, UserStore

router = APIRouter()


def _to_response(user: UserRecord) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        display_name=user.display_name,
        email=user.email,
        home_address=user.home_address,
        home_lat=user.home.lat if user.home else None,
        home_lng=user.home.lng if user.home else None,
        home_neighborhood=user.home_neighborhood
    )


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    user = await users.get_user(user_id)
    if user is None:
        raise NotFoundError("User")
    return _to_response(user)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    """
    Update the home address. An address sent without coordinates is geocoded;
    if geocoding fails the location stays unset.
    """
    home = None
    neighborhood = None

    if data.home_lat is not None and data.home_lng is not None:
        home = Location(data.home_lat, data.home_lng)
    elif data.home_address:
        geocoded = await geocode_address(data.home_address)
        if geocoded:
            lat, lng, neighborhood = geocoded
            home = Location(lat, lng)

    user = await users.update_home(user_id, data.home_address, home, neighborhood)
    if user is None:
        raise NotFoundError("User")
    return _to_response(user)
