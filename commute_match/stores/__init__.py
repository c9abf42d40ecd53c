"""Persistence interfaces and their MongoDB implementations."""
from .base import (
    CandidateUser, CommutePreference, InterestStore, Location, MatchRecord,
    MatchStore, PreferenceStore, UserRecord, UserStore
)
from .mongo import MongoInterestStore, MongoMatchStore, MongoPreferenceStore, MongoUserStore

__all__ = [
    "CandidateUser",
    "CommutePreference",
    "InterestStore",
    "Location",
    "MatchRecord",
    "MatchStore",
    "PreferenceStore",
    "UserRecord",
    "UserStore",
    "MongoInterestStore",
    "MongoMatchStore",
    "MongoPreferenceStore",
    "MongoUserStore"
]
