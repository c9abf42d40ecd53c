"""Interest routes: letting a match partner know you'd like to carpool."""
from fastapi import APIRouter, Depends

from commute_match.auth import get_current_user_id
from commute_match.core.dependencies import get_interest_store, get_user_store
from commute_match.core.exceptions import BusinessRuleError, NotFoundError
from commute_match.models import InterestRequest, InterestResponse
from commute_match.stores.base import InterestStore, UserStore

router = APIRouter()


@router.post("", response_model=InterestResponse)
async def express_interest(
    data: InterestRequest,
    user_id: str = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store),
    interests: InterestStore = Depends(get_interest_store)
):
    """Express interest in a user for one direction. Repeating it is harmless."""
    if data.to_user_id == user_id:
        raise BusinessRuleError("Cannot express interest in yourself")

    target = await users.get_user(data.to_user_id)
    if target is None:
        raise NotFoundError("User")

    await interests.add_interest(user_id, data.to_user_id, data.direction)
    mutual = await interests.has_interest(data.to_user_id, user_id, data.direction)

    return {"ok": True, "mutual": mutual}


@router.delete("")
async def withdraw_interest(
    data: InterestRequest,
    user_id: str = Depends(get_current_user_id),
    interests: InterestStore = Depends(get_interest_store)
):
    """Withdraw previously expressed interest."""
    await interests.remove_interest(user_id, data.to_user_id, data.direction)
    return {"ok": True}
