"""
Route service for straight-line distances and batched drive times.
Drive times come from Google's Distance Matrix API or an OSRM table service.
Every provider reports failures in its result instead of raising, so callers
can fall back to straight-line estimates.
"""
import httpx
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import logging

from commute_match.stores.base import Location

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959

GOOGLE_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth (in miles).
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = math.sin(delta_lat / 2) ** 2 + \
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_MILES * c


def distance_between(a: Location, b: Location) -> float:
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


class MatrixStatus(str, Enum):
    """Overall outcome of a batched drive-time lookup."""
    OK = "ok"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DriveTimeMatrix:
    """
    Drive times in minutes, indexed [origin][destination].
    Unavailable elements are None.
    """
    status: MatrixStatus
    minutes: List[List[Optional[float]]] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "DriveTimeMatrix":
        return cls(status=MatrixStatus.FAILED, error=error)

    @classmethod
    def from_rows(cls, rows: List[List[Optional[float]]]) -> "DriveTimeMatrix":
        complete = all(value is not None for row in rows for value in row)
        return cls(status=MatrixStatus.OK if complete else MatrixStatus.PARTIAL, minutes=rows)

    def get(self, origin: int, destination: int) -> Optional[float]:
        if self.status == MatrixStatus.FAILED:
            return None
        try:
            return self.minutes[origin][destination]
        except IndexError:
            return None


def _pad_rows(
    rows: List[List[Optional[float]]],
    origin_count: int,
    destination_count: int
) -> List[List[Optional[float]]]:
    """Force a parsed matrix to the requested shape, filling gaps with None."""
    padded = []
    for i in range(origin_count):
        row = rows[i] if i < len(rows) else []
        padded.append([row[j] if j < len(row) else None for j in range(destination_count)])
    return padded


class RoutingProvider(ABC):
    """Batched drive-time lookups between points."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def batch_drive_time_minutes(
        self,
        origins: List[Location],
        destinations: List[Location]
    ) -> DriveTimeMatrix:
        """
        Drive time from every origin to every destination.

        Must not raise: transport and payload errors come back as a FAILED
        matrix.
        """
        pass


class GoogleDistanceMatrixProvider(RoutingProvider):
    """Google Distance Matrix API (driving)."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        base_url: str = GOOGLE_DISTANCE_MATRIX_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url
        self._transport = transport

    @property
    def name(self) -> str:
        return "google"

    async def batch_drive_time_minutes(
        self,
        origins: List[Location],
        destinations: List[Location]
    ) -> DriveTimeMatrix:
        if not origins or not destinations:
            return DriveTimeMatrix.from_rows([[] for _ in origins])

        params = {
            "origins": "|".join(f"{o.lat},{o.lng}" for o in origins),
            "destinations": "|".join(f"{d.lat},{d.lng}" for d in destinations),
            "mode": "driving",
            "key": self.api_key
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Distance Matrix request failed: {e}")
            return DriveTimeMatrix.failed(str(e))

        if not isinstance(data, dict) or data.get("status") != "OK":
            status = data.get("status") if isinstance(data, dict) else None
            logger.warning(f"Distance Matrix returned non-OK status: {status}")
            return DriveTimeMatrix.failed(f"status {status}")

        rows = []
        for row in data.get("rows") or []:
            parsed = []
            for element in row.get("elements") or []:
                duration = element.get("duration") or {}
                if element.get("status") == "OK" and isinstance(duration.get("value"), (int, float)):
                    parsed.append(duration["value"] / 60)
                else:
                    parsed.append(None)
            rows.append(parsed)

        return DriveTimeMatrix.from_rows(_pad_rows(rows, len(origins), len(destinations)))


class OsrmTableProvider(RoutingProvider):
    """
    OSRM table service. The public server is fine for demos; self-host for
    production traffic.
    """

    def __init__(
        self,
        base_url: str = "https://router.project-osrm.org",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "osrm"

    async def batch_drive_time_minutes(
        self,
        origins: List[Location],
        destinations: List[Location]
    ) -> DriveTimeMatrix:
        if not origins or not destinations:
            return DriveTimeMatrix.from_rows([[] for _ in origins])

        points = list(origins) + list(destinations)
        coords = ";".join(f"{p.lng},{p.lat}" for p in points)
        url = f"{self.base_url}/table/v1/driving/{coords}"
        params = {
            "sources": ";".join(str(i) for i in range(len(origins))),
            "destinations": ";".join(str(len(origins) + j) for j in range(len(destinations))),
            "annotations": "duration"
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OSRM table request failed: {e}")
            return DriveTimeMatrix.failed(str(e))

        if not isinstance(data, dict) or data.get("code") != "Ok":
            code = data.get("code") if isinstance(data, dict) else None
            logger.warning(f"OSRM returned non-OK response: {response.status_code} {code}")
            return DriveTimeMatrix.failed(f"code {code}")

        rows = [
            [value / 60 if isinstance(value, (int, float)) else None for value in row or []]
            for row in data.get("durations") or []
        ]
        return DriveTimeMatrix.from_rows(_pad_rows(rows, len(origins), len(destinations)))


def get_routing_provider(settings) -> Optional[RoutingProvider]:
    """Build the configured routing provider, or None for straight-line estimates only."""
    provider = (settings.routing_provider or "none").lower()

    if provider == "google":
        if not settings.google_maps_api_key:
            return None
        return GoogleDistanceMatrixProvider(
            api_key=settings.google_maps_api_key,
            timeout=settings.routing_timeout_seconds
        )
    if provider == "osrm":
        return OsrmTableProvider(
            base_url=settings.osrm_base_url,
            timeout=settings.routing_timeout_seconds
        )
    if provider != "none":
        logger.warning(f"Unknown routing provider {provider!r}, using straight-line estimates")
    return None


async def geocode_address(
    address: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> Optional[Tuple[float, float, Optional[str]]]:
    """
    Geocode an address using Nominatim (OpenStreetMap).
    Returns (lat, lng, neighborhood) or None.
    """
    params = {
        "q": address,
        "format": "json",
        "addressdetails": 1,
        "limit": 1
    }
    headers = {
        "User-Agent": "CommuteMatch/1.0"
    }

    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            response = await client.get(NOMINATIM_SEARCH_URL, params=params, headers=headers)

        if response.status_code != 200:
            logger.warning(f"Nominatim returned non-OK response: {response.status_code}")
            return None

        data = response.json()
        if not data:
            return None

        result = data[0]
        details = result.get("address") or {}
        # Most specific area name first
        neighborhood = (
            details.get("neighbourhood")
            or details.get("suburb")
            or details.get("city_district")
            or details.get("city")
            or details.get("town")
            or details.get("village")
        )
        return (float(result["lat"]), float(result["lon"]), neighborhood)

    except (httpx.HTTPError, ValueError, KeyError, IndexError) as e:
        logger.error(f"Geocoding error: {e}")
        return None
