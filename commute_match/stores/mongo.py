"""MongoDB (Motor) implementations of the store interfaces."""
from datetime import datetime, timezone
from typing import List, Optional
from bson import ObjectId
import logging

from commute_match.models import Direction, CommuteRole
from commute_match.services.schedule_service import minutes_of_day, format_minutes
from .base import (
    CommutePreference, InterestStore, Location, MatchRecord, MatchStore,
    PreferenceStore, UserRecord, UserStore
)

logger = logging.getLogger(__name__)


def _to_user_record(doc: dict) -> UserRecord:
    home = None
    if doc.get("home_lat") is not None and doc.get("home_lng") is not None:
        home = Location(float(doc["home_lat"]), float(doc["home_lng"]))

    email = doc.get("email")
    return UserRecord(
        id=str(doc["_id"]),
        display_name=doc.get("display_name") or (email.split("@")[0] if email else "Commuter"),
        home=home,
        home_neighborhood=doc.get("home_neighborhood"),
        home_address=doc.get("home_address"),
        email=email
    )


def _to_preference(doc: dict) -> CommutePreference:
    return CommutePreference(
        id=str(doc["_id"]),
        direction=Direction(doc["direction"]),
        earliest=minutes_of_day(doc["earliest_time"]),
        latest=minutes_of_day(doc["latest_time"]),
        days_of_week=set(doc.get("days_of_week") or []),
        role=CommuteRole(doc["role"])
    )


def _to_match_record(doc: dict) -> MatchRecord:
    return MatchRecord(
        id=str(doc["_id"]),
        user_a_id=doc["user_a_id"],
        user_b_id=doc["user_b_id"],
        direction=Direction(doc["direction"]),
        detour_minutes=doc["detour_minutes"],
        time_overlap_minutes=doc["time_overlap_minutes"],
        rank_score=doc["rank_score"]
    )


class MongoUserStore(UserStore):

    def __init__(self, db):
        self.collection = db.users

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        doc = await self.collection.find_one({"_id": ObjectId(user_id)})
        return _to_user_record(doc) if doc else None

    async def list_users_with_location(self, excluding_id: str) -> List[UserRecord]:
        docs = await self.collection.find({
            "_id": {"$ne": ObjectId(excluding_id)},
            "home_lat": {"$ne": None},
            "home_lng": {"$ne": None}
        }).to_list(None)
        return [_to_user_record(doc) for doc in docs]

    async def update_home(
        self,
        user_id: str,
        home_address: Optional[str],
        home: Optional[Location],
        home_neighborhood: Optional[str]
    ) -> Optional[UserRecord]:
        await self.collection.update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {
                "home_address": home_address,
                "home_lat": home.lat if home else None,
                "home_lng": home.lng if home else None,
                "home_neighborhood": home_neighborhood,
                "updated_at": datetime.now(timezone.utc)
            }}
        )
        return await self.get_user(user_id)


class MongoPreferenceStore(PreferenceStore):
    """Times are stored as "HH:MM" strings, days as a list of ints."""

    def __init__(self, db):
        self.collection = db.commute_preferences

    async def list_preferences(self, user_id: str) -> List[CommutePreference]:
        docs = await self.collection.find({"user_id": user_id}).to_list(None)
        return [_to_preference(doc) for doc in docs]

    async def upsert_preference(self, user_id: str, preference: CommutePreference) -> None:
        direction = Direction(preference.direction).value
        await self.collection.update_one(
            {"user_id": user_id, "direction": direction},
            {
                "$set": {
                    "earliest_time": format_minutes(preference.earliest),
                    "latest_time": format_minutes(preference.latest),
                    "days_of_week": sorted(preference.days_of_week),
                    "role": CommuteRole(preference.role).value,
                    "updated_at": datetime.now(timezone.utc)
                },
                "$setOnInsert": {"created_at": datetime.now(timezone.utc)}
            },
            upsert=True
        )

    async def delete_preference(self, user_id: str, direction: Direction) -> None:
        await self.collection.delete_one({"user_id": user_id, "direction": Direction(direction).value})


class MongoMatchStore(MatchStore):

    def __init__(self, db):
        self.collection = db.match_results

    @staticmethod
    def _involving(user_id: str) -> dict:
        return {"$or": [{"user_a_id": user_id}, {"user_b_id": user_id}]}

    async def delete_matches(self, user_id: str) -> None:
        result = await self.collection.delete_many(self._involving(user_id))
        logger.debug(f"Deleted {result.deleted_count} matches for user {user_id}")

    async def insert_match(self, record: MatchRecord) -> None:
        await self.collection.insert_one({
            "_id": record.id,
            "user_a_id": record.user_a_id,
            "user_b_id": record.user_b_id,
            "direction": Direction(record.direction).value,
            "detour_minutes": record.detour_minutes,
            "time_overlap_minutes": record.time_overlap_minutes,
            "rank_score": record.rank_score,
            "created_at": datetime.now(timezone.utc)
        })

    async def list_matches(self, user_id: str) -> List[MatchRecord]:
        docs = await self.collection.find(self._involving(user_id)).sort("rank_score", 1).to_list(None)
        return [_to_match_record(doc) for doc in docs]


class MongoInterestStore(InterestStore):

    def __init__(self, db):
        self.collection = db.interests

    @staticmethod
    def _key(from_user_id: str, to_user_id: str, direction: Direction) -> dict:
        return {
            "from_user_id": from_user_id,
            "to_user_id": to_user_id,
            "direction": Direction(direction).value
        }

    async def add_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> None:
        await self.collection.update_one(
            self._key(from_user_id, to_user_id, direction),
            {"$setOnInsert": {"created_at": datetime.now(timezone.utc)}},
            upsert=True
        )

    async def remove_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> None:
        await self.collection.delete_one(self._key(from_user_id, to_user_id, direction))

    async def has_interest(self, from_user_id: str, to_user_id: str, direction: Direction) -> bool:
        doc = await self.collection.find_one(self._key(from_user_id, to_user_id, direction))
        return doc is not None
