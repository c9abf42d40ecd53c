from motor.motor_asyncio import AsyncIOMotorClient
import logging

from commute_match.core.config import settings

logger = logging.getLogger(__name__)

client = AsyncIOMotorClient(settings.mongo_url)
db = client[settings.db_name]

# Collections
users_collection = db.users
preferences_collection = db.commute_preferences
matches_collection = db.match_results
interests_collection = db.interests


async def init_indexes():
    """Initialize database indexes"""
    await preferences_collection.create_index([("user_id", 1), ("direction", 1)], unique=True)
    await matches_collection.create_index("user_a_id")
    await matches_collection.create_index("user_b_id")
    await matches_collection.create_index("rank_score")
    await interests_collection.create_index(
        [("from_user_id", 1), ("to_user_id", 1), ("direction", 1)], unique=True
    )
    logger.info("Database indexes created successfully")
