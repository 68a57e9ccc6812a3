"""
FUJIALIGN Configuration

Immutable configuration objects for the alignment engine, loaded from an
optional YAML file and overridden by environment variables.

Every tunable that used to be a free-floating constant (tolerances, search
step, minimum altitude, minimum moon illumination, clock windows and
feasibility bands) lives here and is passed to the services at construction.

Resolution order (later wins):
    1. Model defaults
    2. YAML file (explicit path, or the first existing auto-discovered path)
    3. Environment variables named FUJIALIGN_<SECTION>__<KEY>,
       e.g. FUJIALIGN_SEARCH__AZIMUTH_TOLERANCE_DEG=0.08 or
       FUJIALIGN_CALENDAR__TIMEZONE=Asia/Tokyo. Top-level keys drop the
       section: FUJIALIGN_LOG_LEVEL=DEBUG.

Usage:
    from fujialign.config import load_config

    config = load_config("fujialign.yaml")
    engine = AlignmentSearchEngine(provider, config=config.search)
"""

from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
import pytz
import yaml

from fujialign.exceptions import ConfigurationError
from fujialign.types import FUJI_SUMMIT, GeoCoordinate, TargetSummit

ENV_PREFIX = "FUJIALIGN_"

IlluminationGate = Literal["after_selection", "during_selection"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TargetConfig(_Section):
    """The summit every site is aligned against."""
    name: str = FUJI_SUMMIT.name
    latitude: float = Field(default=FUJI_SUMMIT.coordinate.latitude, ge=-90.0, le=90.0)
    longitude: float = Field(default=FUJI_SUMMIT.coordinate.longitude, ge=-180.0, le=180.0)
    elevation_m: float = FUJI_SUMMIT.coordinate.elevation_m

    def to_summit(self) -> TargetSummit:
        return TargetSummit(
            name=self.name,
            coordinate=GeoCoordinate(self.latitude, self.longitude, self.elevation_m),
        )


class SearchConfig(_Section):
    """Alignment search tolerances and discretization.

    Attributes:
        azimuth_tolerance_deg: Max azimuth deviation for a candidate
        elevation_tolerance_deg: Max elevation deviation for a candidate
        search_interval_seconds: Scan step; halving it doubles the cost
        min_visibility_altitude_deg: Body must be strictly above this
        moon_min_illumination: Pearl events need at least this fraction lit
        illumination_gate: "after_selection" rejects the winning candidate
            when it is too dim; "during_selection" skips dim instants while
            scanning so a brighter, slightly worse candidate can win
    """
    azimuth_tolerance_deg: float = Field(default=0.05, gt=0.0)
    elevation_tolerance_deg: float = Field(default=1.0, gt=0.0)
    search_interval_seconds: float = Field(default=10.0, gt=0.0)
    min_visibility_altitude_deg: float = Field(default=-2.0, ge=-90.0, le=90.0)
    moon_min_illumination: float = Field(default=0.1, ge=0.0, le=1.0)
    illumination_gate: IlluminationGate = "after_selection"


class WindowConfig(_Section):
    """Local clock windows and bearing bands used to gate scans.

    The bearing bands are empirical and only hold for a target at Fuji's
    latitude; other targets need their own bands.
    """
    sunrise_start_hour: float = Field(default=4.0, ge=0.0, le=24.0)
    sunrise_end_hour: float = Field(default=8.0, ge=0.0, le=24.0)
    sunset_start_hour: float = Field(default=16.0, ge=0.0, le=24.0)
    sunset_end_hour: float = Field(default=20.0, ge=0.0, le=24.0)
    sunrise_azimuth_min: float = Field(default=70.0, ge=0.0, le=360.0)
    sunrise_azimuth_max: float = Field(default=130.0, ge=0.0, le=360.0)
    sunset_azimuth_min: float = Field(default=230.0, ge=0.0, le=360.0)
    sunset_azimuth_max: float = Field(default=280.0, ge=0.0, le=360.0)
    moonset_azimuth_max: float = Field(default=180.0, ge=0.0, le=360.0)

    @model_validator(mode="after")
    def _check_order(self) -> "WindowConfig":
        if self.sunrise_start_hour >= self.sunrise_end_hour:
            raise ValueError("sunrise window must start before it ends")
        if self.sunset_start_hour >= self.sunset_end_hour:
            raise ValueError("sunset window must start before it ends")
        if self.sunrise_azimuth_min > self.sunrise_azimuth_max:
            raise ValueError("sunrise azimuth band must satisfy min <= max")
        if self.sunset_azimuth_min > self.sunset_azimuth_max:
            raise ValueError("sunset azimuth band must satisfy min <= max")
        return self


class CalendarConfig(_Section):
    """Civil calendar the search dates are expressed in.

    The default Asia/Tokyo zone is a fixed UTC+9 with no daylight saving,
    so a civil date D covers [D-1 15:00 UTC, D 15:00 UTC).
    """
    timezone: str = "Asia/Tokyo"

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown IANA timezone: {value!r}") from None
        return value

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)


class EphemerisConfig(_Section):
    """Skyfield ephemeris kernel settings."""
    kernel: str = "de421.bsp"
    data_dir: Optional[str] = None


class FujiAlignConfig(BaseSettings):
    """Root configuration object."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    target: TargetConfig = Field(default_factory=TargetConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    windows: WindowConfig = Field(default_factory=WindowConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    ephemeris: EphemerisConfig = Field(default_factory=EphemerisConfig)
    log_level: LogLevel = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the YAML values passed in as init kwargs
        return env_settings, init_settings


def get_config_paths() -> list[Path]:
    """Locations searched for a config file when none is given."""
    return [
        Path.cwd() / "fujialign.yaml",
        Path.home() / ".config" / "fujialign" / "config.yaml",
        Path("/etc/fujialign/config.yaml"),
    ]


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError("Configuration file not found", config_file=str(path))
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", config_file=str(path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Invalid YAML: top level must be a mapping", config_file=str(path)
        )
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> FujiAlignConfig:
    """Load configuration from YAML and environment.

    Args:
        path: Explicit config file. When None, the first existing path from
              get_config_paths() is used, or defaults if none exists.

    Returns:
        Validated FujiAlignConfig

    Raises:
        ConfigurationError: File missing, YAML unparsable, or values invalid
    """
    data: dict[str, Any] = {}
    source: Optional[Path] = None

    if path is not None:
        source = Path(path)
        data = _read_yaml(source)
    else:
        for candidate in get_config_paths():
            if candidate.exists():
                source = candidate
                data = _read_yaml(candidate)
                break

    try:
        return FujiAlignConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            config_file=str(source) if source else None,
        ) from e
