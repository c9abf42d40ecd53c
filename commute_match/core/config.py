"""Application configuration and settings."""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "commute_match"

    # JWT
    jwt_secret_key: str = "commute-match-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_days: int = 7

    # CORS
    cors_origins: str = "*"

    # Routing ("google", "osrm" or "none")
    routing_provider: str = "google"
    google_maps_api_key: Optional[str] = None
    osrm_base_url: str = "https://router.project-osrm.org"
    routing_timeout_seconds: float = 10.0

    # Workplace destination (Epic's Verona campus)
    work_lat: float = 42.9914
    work_lng: float = -89.5326
    workplace_name: str = "Epic Systems"
    workplace_address: str = "1979 Milky Way, Verona, WI 53593"

    # Matching thresholds and weights
    distance_threshold_mi: float = 30.0
    detour_threshold_min: float = 15.0
    w_detour: float = 1.0
    w_overlap: float = 0.5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
