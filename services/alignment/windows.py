"""
FUJIALIGN Search Windows

Decides which slice of a civil day to scan for each event phase, and
whether a site can see that phase at all.

- Sun phases use fixed local clock windows (sunrise 04:00-08:00,
  sunset 16:00-20:00 by default)
- Moon phases scan the whole civil day, since moonrise and moonset drift
  by about 50 minutes a day
- Bearing bands gate feasibility: a site whose summit bearing is outside
  the band for a phase is never scanned for it

Also carries the shooting-season helpers used for planning summaries.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import logging
from typing import Optional

import pytz

from fujialign.config import CalendarConfig, WindowConfig
from fujialign.types import EventPhase, ObservationSite, SearchWindow

logger = logging.getLogger("fujialign.services.alignment")

# Illuminated fraction from which a pearl shot is considered favorable
FAVORABLE_MOON_ILLUMINATION = 0.3

# (start month, start day, end month, end day), inclusive
DIAMOND_SEASONS = (
    (1, 1, 1, 10),     # New year
    (2, 15, 4, 30),    # Spring, sunrise side
    (6, 15, 7, 10),    # Early summer
    (8, 15, 10, 31),   # Autumn, sunset side
    (12, 15, 12, 31),  # Year end
)


@dataclass
class ShootingConditions:
    """Overall rating of a date for alignment photography."""
    rating: str  # excellent, good, fair, poor
    score: int
    reasons: list[str] = field(default_factory=list)


class SeasonalWindowSelector:
    """
    Computes the time window to scan for a (date, phase, site).

    Dates are civil dates in the configured timezone; returned windows are
    UTC. With the default Asia/Tokyo zone (UTC+9), the sunrise window of
    2025-02-18 is 2025-02-17T19:00Z to 2025-02-17T23:00Z.
    """

    def __init__(
        self,
        windows: Optional[WindowConfig] = None,
        calendar: Optional[CalendarConfig] = None,
    ):
        self.windows = windows or WindowConfig()
        self.calendar = calendar or CalendarConfig()
        self._tz = self.calendar.tz

    @property
    def tz(self) -> pytz.BaseTzInfo:
        """Site-local civil timezone."""
        return self._tz

    def local_to_utc(self, day: date, hours: float) -> datetime:
        """Convert ``hours`` after local midnight of ``day`` to UTC."""
        naive = datetime(day.year, day.month, day.day) + timedelta(hours=hours)
        return self._tz.localize(naive).astimezone(pytz.utc)

    def local_noon(self, day: date) -> datetime:
        """Local civil noon of ``day``, in UTC."""
        return self.local_to_utc(day, 12.0)

    def local_date(self, instant: datetime) -> date:
        """Civil date of a UTC instant."""
        return instant.astimezone(self._tz).date()

    # -------------------------------------------------------------------------
    # Feasibility
    # -------------------------------------------------------------------------

    def is_feasible(self, phase: EventPhase, azimuth_to_target: float) -> bool:
        """Check whether the summit bearing allows this phase at all."""
        w = self.windows
        if phase is EventPhase.SUNRISE:
            return w.sunrise_azimuth_min <= azimuth_to_target <= w.sunrise_azimuth_max
        if phase is EventPhase.SUNSET:
            return w.sunset_azimuth_min <= azimuth_to_target <= w.sunset_azimuth_max
        if phase is EventPhase.MOONSET:
            # Moon sets in the west; a summit to the west hides the moonset
            return azimuth_to_target < w.moonset_azimuth_max
        return True

    def feasible_phases(self, site: ObservationSite) -> list[EventPhase]:
        """All phases a site can observe, in scan order."""
        azimuth = self._site_azimuth(site)
        return [p for p in EventPhase if self.is_feasible(p, azimuth)]

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def select(
        self, day: date, phase: EventPhase, site: ObservationSite
    ) -> Optional[SearchWindow]:
        """
        Get the window to scan, or None when the phase is infeasible.

        Args:
            day: Civil date in the configured timezone
            phase: Event phase to scan for
            site: Site with azimuth_to_target set

        Returns:
            SearchWindow with inclusive UTC bounds, or None
        """
        azimuth = self._site_azimuth(site)
        if not self.is_feasible(phase, azimuth):
            logger.debug(
                "Phase %s infeasible for site %s (bearing %.2f°)",
                phase.value, site.id, azimuth,
            )
            return None

        w = self.windows
        if phase is EventPhase.SUNRISE:
            start_h, end_h = w.sunrise_start_hour, w.sunrise_end_hour
        elif phase is EventPhase.SUNSET:
            start_h, end_h = w.sunset_start_hour, w.sunset_end_hour
        else:
            start_h, end_h = 0.0, 24.0

        return SearchWindow(
            phase=phase,
            start=self.local_to_utc(day, start_h),
            end=self.local_to_utc(day, end_h),
        )

    @staticmethod
    def _site_azimuth(site: ObservationSite) -> float:
        if site.azimuth_to_target is None:
            raise ValueError(f"Site {site.id} has no azimuth_to_target")
        return site.azimuth_to_target

    # -------------------------------------------------------------------------
    # Shooting seasons
    # -------------------------------------------------------------------------

    def is_diamond_season(self, day: date) -> bool:
        """Check whether a date falls in one of the diamond shooting seasons."""
        key = (day.month, day.day)
        return any(
            (sm, sd) <= key <= (em, ed) for sm, sd, em, ed in DIAMOND_SEASONS
        )

    def season_message(self, day: date) -> str:
        """Human-readable season note for a date."""
        if not self.is_diamond_season(day):
            return (
                "Outside diamond season (best: mid-Dec to early Jan, mid-Feb to "
                "end of Apr, mid-Jun to early Jul, mid-Aug to end of Oct)"
            )
        if 2 <= day.month <= 4:
            return "Spring diamond season (sunrise side)"
        if 8 <= day.month <= 10:
            return "Autumn diamond season (sunset side)"
        return "Good period for diamond shots"

    @staticmethod
    def is_favorable_lunar_condition(illumination: float) -> bool:
        """Check whether the Moon is bright enough to photograph well."""
        return illumination >= FAVORABLE_MOON_ILLUMINATION

    def evaluate_shooting_conditions(
        self, day: date, moon_illumination: Optional[float] = None
    ) -> ShootingConditions:
        """
        Rate a date for alignment photography.

        Season is worth 40 points. A bright enough Moon adds 30 for pearl
        shots; diamond shots (no illumination given) get a flat 20.

        Args:
            day: Civil date
            moon_illumination: Moon illuminated fraction, for pearl shots

        Returns:
            ShootingConditions with rating and reasons
        """
        reasons: list[str] = []
        score = 0

        if self.is_diamond_season(day):
            score += 40
            reasons.append("diamond season")
        else:
            reasons.append("out of season")

        if moon_illumination is not None:
            if self.is_favorable_lunar_condition(moon_illumination):
                score += 30
                reasons.append("favorable moon phase")
            else:
                reasons.append("moon too dark")
        else:
            score += 20

        if score >= 85:
            rating = "excellent"
        elif score >= 65:
            rating = "good"
        elif score >= 40:
            rating = "fair"
        else:
            rating = "poor"

        return ShootingConditions(rating=rating, score=score, reasons=reasons)
