from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from zoneinfo import ZoneInfo


class Settings(BaseSettings):
    PROJECT_NAME: str = "Seat Finder"
    VERSION: str = "0.3.0"
    BRIEF_DESCRIPTION: str = "Find a nearby cafe or public library with a good chance of a free seat to work."

    # --- External API credentials ---
    GOOGLE_PLACES_API_KEY: Optional[str] = Field(None, description="Google Places / Geocoding API key")
    ENV: str = Field("development", description="Application environment (e.g., production, development)")

    # --- Clock ---
    # Peak-hour and weekday rules are evaluated in this zone when the client sends no time.
    TIMEZONE: str = Field("America/Los_Angeles", description="IANA timezone used for 'now'")

    # San Francisco, used when the client has no device location
    DEFAULT_LAT: float = 37.7749
    DEFAULT_LNG: float = -122.4194

    # --- Place search ---
    SEARCH_RADIUS_M: float = 2000.0
    MAX_RESULT_COUNT: int = 20
    MIN_RATING: float = 3.0

    # Places retry logic
    PLACES_TIMEOUT: float = 10.0  # seconds
    PLACES_MAX_RETRIES: int = 2
    PLACES_INITIAL_BACKOFF: float = 1.0  # seconds

    GEOCODING_TIMEOUT: float = 8.0  # seconds

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)


settings = Settings()


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """True when (lat, lng) is a point on the globe."""
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0
