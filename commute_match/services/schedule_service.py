"""
Schedule primitives for commute matching.

Times are naive minute-of-day integers (0-1439). Days of week are 0-6.
"""

from typing import Iterable, Set, Tuple
import re

from commute_match.core.exceptions import FormatError
from commute_match.models import CommuteRole

_TIME_RE = re.compile(r"(\d{2}):(\d{2})")


def minutes_of_day(text: str) -> int:
    """Parse a 24-hour "HH:MM" string into minutes since midnight."""
    match = _TIME_RE.fullmatch(text or "")
    if not match:
        raise FormatError(f"Invalid time {text!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    """Inverse of minutes_of_day."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def schedule_overlap(
    earliest_a: int,
    latest_a: int,
    days_a: Iterable[int],
    earliest_b: int,
    latest_b: int,
    days_b: Iterable[int]
) -> Tuple[int, Set[int]]:
    """
    Intersect two commute windows.
    Returns (overlap_minutes, common_days). Windows that only touch at an
    endpoint overlap by zero minutes.
    """
    common_days = set(days_a) & set(days_b)
    if not common_days:
        return 0, set()

    start = max(earliest_a, earliest_b)
    end = min(latest_a, latest_b)
    return max(0, end - start), common_days


def roles_compatible(role_a: CommuteRole, role_b: CommuteRole) -> bool:
    """Two riders cannot share a ride; every other pairing can."""
    return not (role_a == CommuteRole.RIDER and role_b == CommuteRole.RIDER)
