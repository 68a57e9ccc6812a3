"""
FUJIALIGN Ephemeris Service
Skyfield-based Sun and Moon positions

This module provides the celestial position provider used by the
alignment engine:
- Topocentric apparent azimuth/elevation of the Sun and Moon, with
  standard atmospheric refraction
- Moon phase angle and illuminated fraction
- Upper meridian transit times for a site-local civil day

Uses the Skyfield library with a JPL ephemeris (DE421 by default).
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
import logging
import threading
from pathlib import Path
from typing import Optional

import numpy as np
from skyfield import almanac
from skyfield.api import Loader, load, wgs84

from fujialign.exceptions import (
    ProviderInitializationError,
    ProviderUnavailableError,
    TransitLookupError,
)
from fujialign.types import CelestialBody, CelestialPosition, GeoCoordinate

logger = logging.getLogger("fujialign.services.ephemeris")


class SkyfieldProvider:
    """
    Skyfield-backed celestial position provider.

    Ephemeris data is loaded once, lazily and under a lock; afterwards the
    provider only reads it, so a single instance can serve many concurrent
    scans.
    """

    # Body name mappings for Skyfield
    BODY_NAMES = {
        CelestialBody.SUN: "sun",
        CelestialBody.MOON: "moon",
    }

    def __init__(self, kernel: str = "de421.bsp", data_dir: Optional[str | Path] = None):
        """
        Initialize ephemeris provider.

        Args:
            kernel: JPL ephemeris file name (downloaded if not cached)
            data_dir: Directory for ephemeris files (default: Skyfield's cwd loader)
        """
        self.kernel = kernel
        self.data_dir = Path(data_dir) if data_dir else None
        self._ts = None
        self._eph = None
        self._earth = None
        self._initialized = False
        self._init_lock = threading.Lock()

    def initialize(self) -> None:
        """Load timescale and ephemeris (can be slow on first run)."""
        with self._init_lock:
            if self._initialized:
                return
            try:
                if self.data_dir is not None:
                    self.data_dir.mkdir(parents=True, exist_ok=True)
                    loader = Loader(str(self.data_dir))
                else:
                    loader = load
                self._ts = loader.timescale()
                self._eph = loader(self.kernel)
                self._earth = self._eph["earth"]
            except Exception as e:
                raise ProviderInitializationError(
                    f"Failed to load ephemeris: {e}", ephemeris=self.kernel
                ) from e
            self._initialized = True
            logger.info("Ephemeris %s loaded", self.kernel)

    def _ensure_initialized(self) -> None:
        """Ensure provider is initialized."""
        if not self._initialized:
            self.initialize()

    def _get_time(self, dt: datetime):
        """Get Skyfield time object."""
        if dt.tzinfo is None:
            # Assume UTC if no timezone
            dt = dt.replace(tzinfo=timezone.utc)
        return self._ts.from_datetime(dt)

    def _observer(self, observer: GeoCoordinate):
        return self._earth + wgs84.latlon(
            observer.latitude,
            observer.longitude,
            elevation_m=observer.elevation_m,
        )

    def position(
        self,
        body: CelestialBody,
        instant: datetime,
        observer: GeoCoordinate,
    ) -> CelestialPosition:
        """
        Get topocentric apparent position of the Sun or Moon.

        Args:
            body: SUN or MOON
            instant: Time for calculation (naive values are taken as UTC)
            observer: Observer location

        Returns:
            CelestialPosition; phase_angle and illumination set for the Moon

        Raises:
            ProviderUnavailableError: Skyfield failed for this instant
        """
        self._ensure_initialized()
        try:
            t = self._get_time(instant)
            target = self._eph[self.BODY_NAMES[body]]
            apparent = self._observer(observer).at(t).observe(target).apparent()
            alt, az, dist = apparent.altaz("standard")

            phase_angle = None
            illumination = None
            if body is CelestialBody.MOON:
                phase_angle = float(almanac.moon_phase(self._eph, t).degrees)
                illumination = float(apparent.fraction_illuminated(self._eph["sun"]))

            return CelestialPosition(
                azimuth=float(az.degrees) % 360.0,
                elevation=float(alt.degrees),
                distance_au=float(dist.au),
                phase_angle=phase_angle,
                illumination=illumination,
            )
        except Exception as e:
            raise ProviderUnavailableError(
                f"Position lookup failed: {e}", body=body.value, instant=instant
            ) from e

    def transit(
        self,
        body: CelestialBody,
        day: date,
        observer: GeoCoordinate,
        tz: tzinfo,
    ) -> datetime:
        """
        Find the upper meridian transit during a site-local civil day.

        Args:
            body: SUN or MOON
            day: Civil date in ``tz``
            observer: Observer location
            tz: Site-local timezone (pytz zones are localized properly)

        Returns:
            UTC datetime of the transit

        Raises:
            TransitLookupError: No upper transit in that day, or Skyfield failed
        """
        self._ensure_initialized()
        start = _localize(tz, datetime(day.year, day.month, day.day))
        end = start + timedelta(days=1)
        try:
            topos = wgs84.latlon(
                observer.latitude, observer.longitude, elevation_m=observer.elevation_m
            )
            f = almanac.meridian_transits(self._eph, self._eph[self.BODY_NAMES[body]], topos)
            times, events = almanac.find_discrete(
                self._get_time(start), self._get_time(end), f
            )
        except Exception as e:
            raise TransitLookupError(
                f"Transit search failed: {e}", body=body.value, day=day
            ) from e

        # 1 = upper transit, 0 = antitransit
        upper = np.flatnonzero(events == 1)
        if upper.size:
            return times[int(upper[0])].utc_datetime()

        # The Moon skips a transit roughly once a month
        raise TransitLookupError("No meridian transit on this day", body=body.value, day=day)


def _localize(tz: tzinfo, naive: datetime) -> datetime:
    """Attach tz to a naive local datetime (pytz needs localize())."""
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(naive)
    return naive.replace(tzinfo=tz)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_default_provider: Optional[SkyfieldProvider] = None


def get_provider(kernel: str = "de421.bsp", data_dir: Optional[str | Path] = None) -> SkyfieldProvider:
    """Get or create the default provider."""
    global _default_provider
    if _default_provider is None:
        _default_provider = SkyfieldProvider(kernel, data_dir)
        _default_provider.initialize()
    return _default_provider
