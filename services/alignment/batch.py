"""
FUJIALIGN Batch Calculator

Runs the alignment engine over many (site, date) work items.

Each search is CPU-bound and independent, so work items are fanned out to a
thread pool sized by CPU count and awaited from asyncio. A shared
cancellation event lets a long batch (many sites x many days) stop early;
every running scan notices it at its next instant.
"""

import asyncio
import calendar
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
import logging
import os
import threading
from typing import Iterable, Optional, Sequence

from fujialign.exceptions import (
    ProviderInitializationError,
    SearchCancelledError,
)
from fujialign.types import EventType, FujiEvent, ObservationSite
from services.alignment.engine import AlignmentSearchEngine

logger = logging.getLogger("fujialign.services.alignment")


class BatchCalculator:
    """
    Multi-site, multi-day event calculation.

    Args:
        engine: Alignment engine shared by all workers
        max_workers: Thread pool size (default: CPU count)
    """

    def __init__(self, engine: AlignmentSearchEngine, max_workers: Optional[int] = None):
        self.engine = engine
        self.max_workers = max_workers or os.cpu_count() or 1
        self._cancel_event = threading.Event()

    @property
    def cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation of the running batch."""
        logger.info("Batch cancellation requested")
        self._cancel_event.set()

    def reset(self) -> None:
        """Clear a previous cancellation so the calculator can be reused."""
        self._cancel_event.clear()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def calculate_day(
        self,
        day: date,
        sites: Sequence[ObservationSite],
        event_type: Optional[EventType] = None,
    ) -> list[FujiEvent]:
        """Events of one day for every site."""
        return await self.calculate_range(sites, [day], event_type)

    async def calculate_monthly_events(
        self,
        year: int,
        month: int,
        sites: Sequence[ObservationSite],
        event_type: Optional[EventType] = None,
    ) -> list[FujiEvent]:
        """Events of every day of a month for every site."""
        days_in_month = calendar.monthrange(year, month)[1]
        days = [date(year, month, d) for d in range(1, days_in_month + 1)]
        events = await self.calculate_range(sites, days, event_type)
        logger.info(
            "Monthly calculation %04d-%02d: %d site(s), %d event(s)",
            year, month, len(sites), len(events),
        )
        return events

    async def calculate_yearly_events(
        self,
        site: ObservationSite,
        year: int,
        event_type: Optional[EventType] = None,
    ) -> list[FujiEvent]:
        """Events of every day of a year for one site."""
        start = date(year, 1, 1)
        count = (date(year + 1, 1, 1) - start).days
        days = [start + timedelta(days=i) for i in range(count)]
        return await self.calculate_range([site], days, event_type)

    async def calculate_range(
        self,
        sites: Sequence[ObservationSite],
        days: Iterable[date],
        event_type: Optional[EventType] = None,
    ) -> list[FujiEvent]:
        """
        Events for the cross product of sites and days.

        Args:
            sites: Observation sites
            days: Civil dates
            event_type: DIAMOND, PEARL, or None for both

        Returns:
            Events sorted by (instant, site id, event id)

        Raises:
            InvalidSiteError: A site has invalid coordinates (checked up front)
            ProviderInitializationError: Ephemeris could not be loaded
            SearchCancelledError: cancel() was called during the batch
        """
        for site in sites:
            site.validate()

        days = list(days)
        work = [(site, day) for site in sites for day in days]
        if not work:
            return []

        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                loop.run_in_executor(pool, self._run_one, site, day, event_type)
                for site, day in work
            ]
            results = await asyncio.gather(*futures, return_exceptions=True)

        # Every outcome is collected before the first hard failure is raised
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise failures[0]

        events = [event for batch in results for event in batch]
        events.sort(key=lambda e: (e.instant, e.site_id, e.id))
        return events

    # -------------------------------------------------------------------------
    # Worker
    # -------------------------------------------------------------------------

    def _run_one(
        self,
        site: ObservationSite,
        day: date,
        event_type: Optional[EventType],
    ) -> list[FujiEvent]:
        """Run one (site, day) work item in a worker thread."""
        if self._cancel_event.is_set():
            raise SearchCancelledError("Batch cancelled", site_id=site.id)
        try:
            return self.engine.find_events(site, day, event_type, self._cancel_event)
        except (ProviderInitializationError, SearchCancelledError):
            raise
        except Exception:
            # A failing work item yields no events; the rest of the batch continues
            logger.exception("Event calculation failed for site %s on %s", site.id, day)
            return []
