from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from enum import Enum
import re

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


class Direction(str, Enum):
    TO_WORK = "TO_WORK"
    FROM_WORK = "FROM_WORK"

class CommuteRole(str, Enum):
    DRIVER = "DRIVER"
    RIDER = "RIDER"
    EITHER = "EITHER"

class DetourSource(str, Enum):
    EXACT = "exact"
    ESTIMATED = "estimated"

# Profile Models
class ProfileUpdate(BaseModel):
    home_address: Optional[str] = None
    home_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    home_lng: Optional[float] = Field(default=None, ge=-180, le=180)

class ProfileResponse(BaseModel):
    id: str
    display_name: str
    email: Optional[str] = None
    home_address: Optional[str] = None
    home_lat: Optional[float] = None
    home_lng: Optional[float] = None
    home_neighborhood: Optional[str] = None

# Preference Models
class PreferenceUpsert(BaseModel):
    direction: Direction
    earliest_time: str
    latest_time: str
    days_of_week: List[int]
    role: CommuteRole

    @field_validator('earliest_time', 'latest_time')
    @classmethod
    def validate_time_format(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError('Invalid time format, expected HH:MM')
        hours, minutes = int(v[:2]), int(v[3:])
        if hours > 23 or minutes > 59:
            raise ValueError('Invalid time of day')
        return v

    @field_validator('days_of_week')
    @classmethod
    def validate_days(cls, v):
        if not v:
            raise ValueError('Select at least one day')
        if any(day < 0 or day > 6 for day in v):
            raise ValueError('Days of week must be between 0 and 6')
        return v

    @model_validator(mode='after')
    def validate_window(self):
        # HH:MM strings compare in chronological order
        if self.latest_time <= self.earliest_time:
            raise ValueError('Latest departure must be after earliest departure')
        return self

class PreferenceResponse(BaseModel):
    id: Optional[str] = None
    direction: Direction
    earliest_time: str
    latest_time: str
    days_of_week: List[int]
    role: CommuteRole

# Match Models
class MatchSummaryResponse(BaseModel):
    id: str
    partner_id: str
    partner_name: str
    direction: Direction
    detour_minutes: float
    time_overlap_minutes: int
    rank_score: float

class ComputeResponse(BaseModel):
    computed: int
    matches: List[MatchSummaryResponse]

class MatchListItem(BaseModel):
    id: str
    partner_id: str
    partner_name: str
    partner_address: Optional[str] = None
    direction: Direction
    detour_minutes: float
    time_overlap_minutes: int
    rank_score: float
    i_expressed_interest: bool = False
    they_expressed_interest: bool = False

# Interest Models
class InterestRequest(BaseModel):
    to_user_id: str
    direction: Direction

class InterestResponse(BaseModel):
    ok: bool = True
    mutual: bool = False
