"""
FUJIALIGN Shared Type Definitions

Data structures shared across the alignment services: geographic
coordinates, observation sites, celestial positions, event enums and the
emitted FujiEvent record, plus the structural Protocol that celestial
position providers implement.

Types are organized by category:
    - Basic type aliases
    - Geographic types (coordinates, summit, observation sites)
    - Celestial types (bodies, positions)
    - Event types (phases, sub-types, accuracy tiers, events)
    - Protocol types (for duck typing)

Usage:
    from fujialign.types import GeoCoordinate, ObservationSite, FujiEvent
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from functools import total_ordering
import math
from typing import (
    Any,
    Iterator,
    Optional,
    Protocol,
    TypeAlias,
    runtime_checkable,
)

from fujialign.exceptions import InvalidSiteError


# =============================================================================
# Basic Type Aliases
# =============================================================================

Degrees: TypeAlias = float
Meters: TypeAlias = float
AstronomicalUnits: TypeAlias = float


# =============================================================================
# Geographic Types
# =============================================================================

@dataclass(frozen=True)
class GeoCoordinate:
    """A point on the Earth's surface.

    Attributes:
        latitude: Latitude in decimal degrees (north positive, -90 to 90)
        longitude: Longitude in decimal degrees (east positive, -180 to 180)
        elevation_m: Elevation above sea level in meters
    """
    latitude: Degrees
    longitude: Degrees
    elevation_m: Meters = 0.0

    @property
    def is_valid(self) -> bool:
        """Check latitude/longitude are finite and inside their ranges."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return False
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    def validate(self, site_id: Optional[str] = None) -> None:
        """Raise InvalidSiteError if the coordinate is out of range."""
        if not self.is_valid:
            raise InvalidSiteError(
                "Coordinates out of valid range",
                site_id=site_id,
                latitude=self.latitude,
                longitude=self.longitude,
            )


@dataclass(frozen=True)
class TargetSummit:
    """The fixed mountain summit that events are aligned against."""
    name: str
    coordinate: GeoCoordinate

    @property
    def elevation_m(self) -> Meters:
        return self.coordinate.elevation_m


# Kengamine, the highest point of the Fuji crater rim
FUJI_SUMMIT = TargetSummit(
    name="Mount Fuji",
    coordinate=GeoCoordinate(latitude=35.3628, longitude=138.730781, elevation_m=3776.0),
)


@dataclass(frozen=True)
class ObservationSite:
    """A photography location with its geometry toward the target summit.

    The three ``*_to_target`` fields are normally precomputed once and
    stored by the caller. When any of them is missing the engine derives
    them from ``coordinate`` before scanning.

    Attributes:
        id: Stable site identifier (used in event ids)
        coordinate: Site position and ground elevation
        name: Human-readable site name
        azimuth_to_target: Bearing from the site to the summit (degrees)
        elevation_to_target: Apparent elevation angle of the summit (degrees)
        distance_to_target_m: Great-circle distance to the summit (meters)
    """
    id: str
    coordinate: GeoCoordinate
    name: str = ""
    azimuth_to_target: Optional[Degrees] = None
    elevation_to_target: Optional[Degrees] = None
    distance_to_target_m: Optional[Meters] = None

    @property
    def has_geometry(self) -> bool:
        """Check whether the precomputed target geometry is present."""
        return (
            self.azimuth_to_target is not None
            and self.elevation_to_target is not None
            and self.distance_to_target_m is not None
        )

    def validate(self) -> None:
        """Raise InvalidSiteError if the site cannot be searched."""
        self.coordinate.validate(site_id=self.id)

    def with_geometry(self, target: Optional[TargetSummit] = None) -> "ObservationSite":
        """Copy of this site with geometry toward ``target`` (default Fuji) recomputed."""
        from services.geodesy import compute_site_geometry

        return compute_site_geometry(self.id, self.coordinate, self.name, target)


# =============================================================================
# Celestial Types
# =============================================================================

class CelestialBody(Enum):
    """Bodies that can line up with the summit."""
    SUN = "sun"
    MOON = "moon"


@dataclass(frozen=True)
class CelestialPosition:
    """Topocentric apparent position of a body at one instant.

    Attributes:
        azimuth: Degrees from true north, clockwise (0-360)
        elevation: Degrees above the horizon (-90 to +90), refraction applied
        distance_au: Distance from the observer in AU
        phase_angle: Moon only, Sun-Moon elongation in ecliptic longitude
                     (0 = new, 180 = full)
        illumination: Moon only, illuminated fraction of the disc (0-1)
    """
    azimuth: Degrees
    elevation: Degrees
    distance_au: AstronomicalUnits
    phase_angle: Optional[Degrees] = None
    illumination: Optional[float] = None


# =============================================================================
# Event Types
# =============================================================================

class EventType(Enum):
    """Kind of alignment event."""
    DIAMOND = "diamond"  # Sun on the summit
    PEARL = "pearl"      # Moon on the summit

    @property
    def body(self) -> CelestialBody:
        return CelestialBody.SUN if self is EventType.DIAMOND else CelestialBody.MOON


class SubType(Enum):
    """Whether the body was climbing or sinking at the event."""
    SUNRISE = "sunrise"
    SUNSET = "sunset"
    RISING = "rising"
    SETTING = "setting"

    @classmethod
    def for_event(cls, event_type: EventType, before_transit: bool) -> "SubType":
        """Pick the sub-type from the event type and transit side."""
        if event_type is EventType.DIAMOND:
            return cls.SUNRISE if before_transit else cls.SUNSET
        return cls.RISING if before_transit else cls.SETTING


class EventPhase(Enum):
    """Part of the day a scan targets. One scan per (site, date, phase)."""
    SUNRISE = "sunrise"
    SUNSET = "sunset"
    MOONRISE = "moonrise"
    MOONSET = "moonset"

    @property
    def event_type(self) -> EventType:
        if self in (EventPhase.SUNRISE, EventPhase.SUNSET):
            return EventType.DIAMOND
        return EventType.PEARL

    @property
    def body(self) -> CelestialBody:
        return self.event_type.body

    @property
    def rising(self) -> bool:
        return self in (EventPhase.SUNRISE, EventPhase.MOONRISE)

    @classmethod
    def for_event_type(cls, event_type: EventType) -> tuple["EventPhase", "EventPhase"]:
        """Rising and setting phases for an event type, in that order."""
        if event_type is EventType.DIAMOND:
            return (cls.SUNRISE, cls.SUNSET)
        return (cls.MOONRISE, cls.MOONSET)


@total_ordering
class Accuracy(Enum):
    """Alignment accuracy tier.

    Ordered from best to worst: a *greater* tier is a *worse* match, so the
    overall accuracy of two tiers is ``max(a, b)``.
    """
    PERFECT = "perfect"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"

    @property
    def rank(self) -> int:
        return _ACCURACY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Accuracy):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def worst(cls, *tiers: "Accuracy") -> "Accuracy":
        """Return the lowest-quality tier of those given."""
        return max(tiers)


_ACCURACY_ORDER = (
    Accuracy.PERFECT,
    Accuracy.EXCELLENT,
    Accuracy.GOOD,
    Accuracy.FAIR,
)


@dataclass(frozen=True)
class SearchWindow:
    """Time range scanned for one phase. Both ends are UTC and inclusive."""
    phase: EventPhase
    start: datetime
    end: datetime

    def instants(self, step_seconds: float) -> Iterator[datetime]:
        """Yield every instant from start to end at a fixed step."""
        step = timedelta(seconds=step_seconds)
        current = self.start
        while current <= self.end:
            yield current
            current += step

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class AlignmentCandidate:
    """An in-tolerance instant found during a scan. Never leaves the engine."""
    instant: datetime
    azimuth_diff: Degrees
    elevation_diff: Degrees
    position: CelestialPosition

    @property
    def score(self) -> float:
        """Combined deviation; elevation counts double. Lower is better."""
        return self.azimuth_diff + 2 * self.elevation_diff


def make_event_id(
    site_id: str, day: date, event_type: EventType, sub_type: SubType
) -> str:
    """Deterministic event identifier for (site, date, type, sub-type)."""
    return f"{site_id}-{day.isoformat()}-{event_type.value}-{sub_type.value}"


@dataclass(frozen=True)
class FujiEvent:
    """A detected Diamond or Pearl alignment.

    Attributes:
        id: Deterministic identifier, see make_event_id()
        type: DIAMOND or PEARL
        sub_type: SUNRISE/SUNSET for diamond, RISING/SETTING for pearl
        instant: UTC instant of the best alignment
        site_id: Identifier of the observation site
        date: Site-local civil date the event belongs to
        azimuth: Body azimuth at the instant (degrees)
        elevation: Body elevation at the instant (degrees)
        accuracy: Overall accuracy tier
        quality_score: 0-100 score
        moon_phase: Moon phase angle (pearl only)
        moon_illumination: Moon illuminated fraction (pearl only)
    """
    id: str
    type: EventType
    sub_type: SubType
    instant: datetime
    site_id: str
    date: date
    azimuth: Degrees
    elevation: Degrees
    accuracy: Accuracy
    quality_score: int
    moon_phase: Optional[Degrees] = None
    moon_illumination: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "sub_type": self.sub_type.value,
            "instant": self.instant.isoformat(),
            "site_id": self.site_id,
            "date": self.date.isoformat(),
            "azimuth": self.azimuth,
            "elevation": self.elevation,
            "accuracy": self.accuracy.value,
            "quality_score": self.quality_score,
            "moon_phase": self.moon_phase,
            "moon_illumination": self.moon_illumination,
        }


# =============================================================================
# Protocol Definitions (Structural Typing)
# =============================================================================

@runtime_checkable
class CelestialPositionProvider(Protocol):
    """Source of Sun/Moon positions.

    Implementations must be deterministic for fixed inputs and safe for
    concurrent calls once initialized.
    """

    def position(
        self, body: CelestialBody, instant: datetime, observer: GeoCoordinate
    ) -> CelestialPosition:
        """Topocentric apparent position of ``body`` at a UTC instant."""
        ...

    def transit(
        self, body: CelestialBody, day: date, observer: GeoCoordinate, tz: tzinfo
    ) -> datetime:
        """UTC instant of the upper meridian transit during the local day."""
        ...
