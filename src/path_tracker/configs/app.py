import logging
from importlib.metadata import version

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, NonNegativeFloat, PositiveFloat, model_validator, Field

from .utils import LoggingConfig

logger = logging.getLogger(__name__)

FINE_LOCATION = "ACCESS_FINE_LOCATION"
POST_NOTIFICATIONS = "POST_NOTIFICATIONS"


class SessionSettings(BaseModel):
    """Timing and path policy of the tracking session."""
    follow_delay_s: NonNegativeFloat = Field(5.0, description="Delay between entering ACTIVE and enabling follow mode.")
    start_timeout_s: PositiveFloat = Field(10.0, description="How long to wait for the service to acknowledge a start.")
    stop_timeout_s: PositiveFloat = Field(10.0, description="How long to wait for the service to acknowledge a stop.")
    reset_path_on_start: bool = Field(True, description="Clear the path on every start instead of continuing it.")


class PermissionSettings(BaseModel):
    """Runtime permissions asked for in one request round-trip."""
    required: list[str] = Field(default=[FINE_LOCATION, POST_NOTIFICATIONS])
    location_permission: str = Field(FINE_LOCATION, description="The permission that decides authorization.")

    @model_validator(mode='after')
    def validate_location_permission(self) -> "PermissionSettings":
        if self.location_permission not in self.required:
            raise ValueError('Location permission must be part of the requested permissions.')
        return self


class MapSettings(BaseModel):
    zoom: float = Field(18.0, gt=0)
    default_center: tuple[float, float] = Field(
        (52.5200, 13.4050),
        description="(lat, lon) used to centre the map when no fix is known yet."
    )


class SimulationSettings(BaseModel):
    """Behaviour of the dummy platform and its simulated location service."""
    frequency_hz: PositiveFloat = 1.0
    radius_deg: PositiveFloat = 0.001
    speed: PositiveFloat = Field(0.01, description="Revolutions per second around the centre.")
    startup_delay_s: NonNegativeFloat = Field(0.2, description="Simulated time to acquire the first fix.")
    permission_delay_s: NonNegativeFloat = Field(0.1, description="Simulated time the user spends on the permission dialog.")
    grant_permissions: bool = True
    location_enabled: bool = True


class AppSettings(BaseSettings):
    """
    Main application settings, loaded from environment variables and defaults.
    """
    session: SessionSettings = Field(default_factory=SessionSettings)
    permissions: PermissionSettings = Field(default_factory=PermissionSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    __version__: str = version("path-tracker")

    model_config = SettingsConfigDict(
        env_prefix="TRACKER__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )
