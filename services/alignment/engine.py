"""
FUJIALIGN Alignment Search Engine

Finds the instant at which the Sun (Diamond) or Moon (Pearl) sits on the
summit as seen from an observation site.

For each (site, date, phase) the engine:
1. Asks the window selector for a UTC window; an infeasible phase is not
   scanned at all
2. Steps through the window at a fixed interval (10 s by default),
   querying the celestial position provider at each instant
3. Keeps the single in-tolerance instant with the lowest combined score
   (azimuth error + 2 x elevation error); ties keep the earlier instant
4. Applies the Moon illumination gate, classifies rising/setting against
   the meridian transit, scores the match and emits one FujiEvent

Moonrise and moonset share the full-day window. The transit is looked up
before a moon scan and each phase only considers instants on its own side
of it, so a day can yield one rising and one setting pearl.

Each scan is synchronous and single-threaded. The engine holds no mutable
state, so one instance can run scans from many threads at once.
"""

from datetime import date, datetime
import logging
import threading
from typing import Optional

from fujialign.config import SearchConfig
from fujialign.exceptions import ProviderInitializationError, SearchCancelledError
from fujialign.types import (
    FUJI_SUMMIT,
    AlignmentCandidate,
    CelestialBody,
    CelestialPositionProvider,
    EventPhase,
    EventType,
    FujiEvent,
    ObservationSite,
    SearchWindow,
    SubType,
    TargetSummit,
    make_event_id,
)
from services.alignment.quality import QualityScorer
from services.alignment.windows import SeasonalWindowSelector
from services.geodesy import angular_difference, ensure_site_geometry

logger = logging.getLogger("fujialign.services.alignment")


class AlignmentSearchEngine:
    """
    Discretized linear scan for summit alignments.

    Args:
        provider: Celestial position provider (see CelestialPositionProvider)
        config: Search tolerances and step; defaults to SearchConfig()
        selector: Window selector; defaults to Asia/Tokyo windows
        scorer: Quality scorer; defaults to one built from ``config``
        target: Summit used when a site's geometry must be recomputed
    """

    def __init__(
        self,
        provider: CelestialPositionProvider,
        config: Optional[SearchConfig] = None,
        selector: Optional[SeasonalWindowSelector] = None,
        scorer: Optional[QualityScorer] = None,
        target: Optional[TargetSummit] = None,
    ):
        self.provider = provider
        self.config = config or SearchConfig()
        self.selector = selector or SeasonalWindowSelector()
        self.scorer = scorer or QualityScorer(self.config)
        self.target = target or FUJI_SUMMIT

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def search(
        self,
        site: ObservationSite,
        day: date,
        phase: EventPhase,
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[FujiEvent]:
        """
        Search one phase of one civil day.

        Args:
            site: Observation site; missing target geometry is recomputed
            day: Civil date in the selector's timezone
            phase: SUNRISE, SUNSET, MOONRISE or MOONSET
            cancel_event: Checked once per instant; when set the scan stops

        Returns:
            The best FujiEvent, or None when nothing aligned

        Raises:
            InvalidSiteError: Site coordinates out of range
            ProviderInitializationError: The provider could not load its ephemeris
            SearchCancelledError: cancel_event was set during the scan
        """
        site.validate()
        site = ensure_site_geometry(site, self.target)

        window = self.selector.select(day, phase, site)
        if window is None:
            return None

        event_type = phase.event_type
        transit: Optional[datetime] = None
        if phase.body is CelestialBody.MOON:
            transit = self._transit_reference(site, day, phase.body)

        best = self._scan(site, window, cancel_event, transit)
        if best is None:
            return None

        if event_type is EventType.PEARL and not self._bright_enough(best):
            logger.debug(
                "Pearl candidate for site %s on %s rejected: illumination %.3f < %.3f",
                site.id, day, best.position.illumination,
                self.config.moon_min_illumination,
            )
            return None

        if transit is None:
            transit = self._transit_reference(site, day, phase.body)
        sub_type = SubType.for_event(event_type, before_transit=best.instant < transit)
        return self._build_event(site, day, event_type, sub_type, best)

    def find_diamond(
        self,
        site: ObservationSite,
        day: date,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[FujiEvent]:
        """Sunrise and sunset diamond events for a day (0-2, in that order)."""
        return self.find_events(site, day, EventType.DIAMOND, cancel_event)

    def find_pearl(
        self,
        site: ObservationSite,
        day: date,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[FujiEvent]:
        """Moonrise and moonset pearl events for a day (0-2, in that order)."""
        return self.find_events(site, day, EventType.PEARL, cancel_event)

    def find_events(
        self,
        site: ObservationSite,
        day: date,
        event_type: Optional[EventType] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[FujiEvent]:
        """
        All events of a day for one or both event types.

        Args:
            site: Observation site
            day: Civil date
            event_type: DIAMOND, PEARL, or None for both
            cancel_event: Cooperative cancellation flag

        Returns:
            Events in phase order (sunrise, sunset, moonrise, moonset)
        """
        types = [event_type] if event_type is not None else list(EventType)
        events: list[FujiEvent] = []
        for t in types:
            for phase in EventPhase.for_event_type(t):
                event = self.search(site, day, phase, cancel_event)
                if event is not None:
                    events.append(event)

        logger.debug(
            "Search for site %s on %s (%s): %d event(s)",
            site.id, day, event_type.value if event_type else "all", len(events),
        )
        return events

    # -------------------------------------------------------------------------
    # Scan
    # -------------------------------------------------------------------------

    def _scan(
        self,
        site: ObservationSite,
        window: SearchWindow,
        cancel_event: Optional[threading.Event],
        transit: Optional[datetime] = None,
    ) -> Optional[AlignmentCandidate]:
        """Single pass over the window; returns the best in-tolerance candidate.

        When ``transit`` is given only instants on the phase's side of it
        are looked up: before it for a rising phase, at or after it otherwise.
        """
        cfg = self.config
        body = window.phase.body
        gate_during = (
            body is CelestialBody.MOON and cfg.illumination_gate == "during_selection"
        )
        best: Optional[AlignmentCandidate] = None
        scanned = 0
        failures = 0

        for instant in window.instants(cfg.search_interval_seconds):
            if cancel_event is not None and cancel_event.is_set():
                raise SearchCancelledError(
                    "Search cancelled", site_id=site.id, phase=window.phase.value
                )
            if transit is not None and (instant < transit) is not window.phase.rising:
                continue
            scanned += 1

            try:
                position = self.provider.position(body, instant, site.coordinate)
            except ProviderInitializationError:
                raise
            except Exception as e:
                failures += 1
                logger.warning(
                    "Position lookup failed for %s at %s (site %s): %s",
                    body.value, instant.isoformat(), site.id, e,
                )
                continue

            if position.elevation <= cfg.min_visibility_altitude_deg:
                continue

            azimuth_diff = angular_difference(position.azimuth, site.azimuth_to_target)
            elevation_diff = abs(position.elevation - site.elevation_to_target)
            if (
                azimuth_diff > cfg.azimuth_tolerance_deg
                or elevation_diff > cfg.elevation_tolerance_deg
            ):
                continue

            if gate_during and (
                position.illumination is not None
                and position.illumination < cfg.moon_min_illumination
            ):
                continue

            candidate = AlignmentCandidate(
                instant=instant,
                azimuth_diff=azimuth_diff,
                elevation_diff=elevation_diff,
                position=position,
            )
            # Strictly lower only: the earliest of equal scores is kept
            if best is None or candidate.score < best.score:
                best = candidate

        logger.debug(
            "Scanned %d instants for site %s phase %s (%d failures): %s",
            scanned, site.id, window.phase.value, failures,
            f"best at {best.instant.isoformat()}" if best else "no candidate",
        )
        return best

    def _bright_enough(self, candidate: AlignmentCandidate) -> bool:
        """Illumination gate applied to the winning pearl candidate.

        Only the winner is checked: a dimmer winner suppresses the event
        even if a brighter, slightly worse aligned instant existed. Use
        illumination_gate="during_selection" to filter while scanning.
        """
        illumination = candidate.position.illumination
        if illumination is None:
            return True
        return illumination >= self.config.moon_min_illumination

    # -------------------------------------------------------------------------
    # Event construction
    # -------------------------------------------------------------------------

    def _transit_reference(
        self,
        site: ObservationSite,
        day: date,
        body: CelestialBody,
    ) -> datetime:
        """Meridian transit that separates rising from setting.

        Falls back to local civil noon of ``day`` when the transit cannot be
        found (03:00 UTC for Asia/Tokyo).
        """
        try:
            return self.provider.transit(body, day, site.coordinate, self.selector.tz)
        except ProviderInitializationError:
            raise
        except Exception as e:
            reference = self.selector.local_noon(day)
            logger.info(
                "Transit lookup failed for %s on %s (site %s), using local noon %s: %s",
                body.value, day, site.id, reference.isoformat(), e,
            )
            return reference

    def _build_event(
        self,
        site: ObservationSite,
        day: date,
        event_type: EventType,
        sub_type: SubType,
        candidate: AlignmentCandidate,
    ) -> FujiEvent:
        quality = self.scorer.score(candidate)
        position = candidate.position

        event = FujiEvent(
            id=make_event_id(site.id, day, event_type, sub_type),
            type=event_type,
            sub_type=sub_type,
            instant=candidate.instant,
            site_id=site.id,
            date=day,
            azimuth=position.azimuth,
            elevation=position.elevation,
            accuracy=quality.accuracy,
            quality_score=quality.quality_score,
            moon_phase=position.phase_angle if event_type is EventType.PEARL else None,
            moon_illumination=position.illumination if event_type is EventType.PEARL else None,
        )
        logger.info(
            "Found %s/%s for site %s at %s (%s, score %d)",
            event.type.value, event.sub_type.value, site.id,
            event.instant.isoformat(), event.accuracy.value, event.quality_score,
        )
        return event
