"""Common dependencies for FastAPI routes."""
from fastapi import Depends
from typing import Optional

from commute_match.core.config import settings
from commute_match.database import db
from commute_match.route_service import RoutingProvider, get_routing_provider
from commute_match.services.matching_service import MatchingConfig, MatchingService
from commute_match.stores.base import InterestStore, MatchStore, PreferenceStore, UserStore
from commute_match.stores.mongo import (
    MongoInterestStore, MongoMatchStore, MongoPreferenceStore, MongoUserStore
)


def get_user_store() -> UserStore:
    return MongoUserStore(db)


def get_preference_store() -> PreferenceStore:
    return MongoPreferenceStore(db)


def get_match_store() -> MatchStore:
    return MongoMatchStore(db)


def get_interest_store() -> InterestStore:
    return MongoInterestStore(db)


def get_routing() -> Optional[RoutingProvider]:
    return get_routing_provider(settings)


def get_matching_config() -> MatchingConfig:
    return MatchingConfig.from_settings(settings)


def get_matching_service(
    users: UserStore = Depends(get_user_store),
    preferences: PreferenceStore = Depends(get_preference_store),
    matches: MatchStore = Depends(get_match_store),
    config: MatchingConfig = Depends(get_matching_config),
    routing: Optional[RoutingProvider] = Depends(get_routing)
) -> MatchingService:
    """Matching service wired to the configured stores and routing provider."""
    return MatchingService(users, preferences, matches, config, routing)
